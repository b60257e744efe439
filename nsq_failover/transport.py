# nsq_failover/transport.py
import logging
from typing import Callable, Optional, Protocol, Union

import requests
from requests.exceptions import RequestException

from nsq_failover.config import ConnectionConfig
from nsq_failover.errors import TransportError
from nsq_failover.models import NodeDescriptor


class BrokerConnection(Protocol):
    """What the producer needs from a connection to one nsqd node."""

    def ping(self) -> None: ...

    def publish(self, topic: str, body: bytes) -> None: ...

    def close(self) -> None: ...

    def set_logger(self, logger: Optional[logging.Logger], level: int) -> None: ...


Transport = Callable[[NodeDescriptor, ConnectionConfig], BrokerConnection]


class HTTPBrokerConnection:
    """
    Talks to nsqd over its HTTP API: GET /ping and POST /pub?topic=...

    Nothing is opened until the first request, so a bad address only shows up
    on ping().
    """

    def __init__(self, address: str, port: int, config: ConnectionConfig,
                 session: Optional[requests.Session] = None):
        self.base_url = f"http://{address}:{port}"
        self.config = config
        self._session = session if session is not None else requests.Session()
        self._session.headers["User-Agent"] = config.user_agent
        self._logger: Optional[logging.Logger] = None
        self._log_level = logging.INFO

    def set_logger(self, logger: Optional[logging.Logger], level: int) -> None:
        self._logger = logger
        self._log_level = level

    def _log(self, level: int, msg: str, *args) -> None:
        if self._logger is not None and level >= self._log_level:
            self._logger.log(level, msg, *args)

    def ping(self) -> None:
        try:
            r = self._session.get(f"{self.base_url}/ping", timeout=self.config.timeout)
        except RequestException as e:
            raise TransportError(f"ping {self.base_url} failed: {e}") from e
        if r.status_code != 200:
            raise TransportError(f"ping {self.base_url} returned HTTP {r.status_code}: {r.text}")

    def publish(self, topic: str, body: Union[bytes, str]) -> None:
        if isinstance(body, str):
            body = body.encode("utf-8")
        try:
            r = self._session.post(
                f"{self.base_url}/pub",
                params={"topic": topic},
                data=body,
                timeout=self.config.timeout,
            )
        except RequestException as e:
            raise TransportError(f"publish to {self.base_url} failed: {e}") from e
        if r.status_code != 200:
            raise TransportError(f"publish to {self.base_url} returned HTTP {r.status_code}: {r.text}")
        self._log(logging.DEBUG, "[%s] published %d bytes to %s", self.base_url, len(body), topic)

    def close(self) -> None:
        self._session.close()


def connect_http(node: NodeDescriptor, config: ConnectionConfig) -> HTTPBrokerConnection:
    # tcp_port speaks the binary protocol, never HTTP
    if node.http_port is None:
        raise TransportError(f"directory did not report http_port for nsqd {node.addr}")
    return HTTPBrokerConnection(node.address, node.http_port, config)
