# nsq_failover/directory.py
"""
Directory client: asks nsqlookupd which nsqd nodes are alive.

There is no retry here; the producer decides when to query again.
"""
from typing import Dict, List, Optional

import requests
from pydantic import ValidationError
from requests.exceptions import RequestException

from nsq_failover.config import ConnectionConfig
from nsq_failover.errors import DirectoryProtocolError, DirectoryUnreachable
from nsq_failover.models import NodeDescriptor, NodesEnvelope

NODES_ENDPOINT = "/nodes"


def http_get(url: str, params: Optional[Dict[str, str]] = None, timeout=None,
             session: Optional[requests.Session] = None) -> bytes:
    """GET url (plus optional query args) and return the raw body of a 200 response."""
    getter = session.get if session is not None else requests.get
    try:
        resp = getter(url.strip("/"), params=params, timeout=timeout)
    except RequestException as e:
        raise DirectoryUnreachable(f"GET {url} failed: {e}") from e

    if resp.status_code != 200:
        raise DirectoryUnreachable(f"GET {url} returned HTTP {resp.status_code}")
    return resp.content


def query_nodes(lookupd_address: str, config: Optional[ConnectionConfig] = None,
                session: Optional[requests.Session] = None) -> List[NodeDescriptor]:
    """
    Fetch every nsqd producer registered with nsqlookupd.

    Returns one NodeDescriptor per producer entry, in the order the directory
    listed them. Raises DirectoryUnreachable or DirectoryProtocolError.
    """
    config = config or ConnectionConfig()
    url = f"http://{lookupd_address.strip('/')}{NODES_ENDPOINT}"
    body = http_get(url, timeout=config.timeout, session=session)

    try:
        envelope = NodesEnvelope.model_validate_json(body)
    except ValidationError as e:
        raise DirectoryProtocolError(f"malformed /nodes response from {lookupd_address}: {e}") from e

    if envelope.status_code != 200:
        raise DirectoryProtocolError(
            f"get nodes from {lookupd_address} failed, status_code: {envelope.status_code} "
            f"({envelope.status_text})"
        )

    return envelope.data.producers if envelope.data is not None else []
