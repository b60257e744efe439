# nsq_failover/prober.py
import logging
from typing import Optional

from nsq_failover.config import ConnectionConfig
from nsq_failover.errors import NodeUnreachable, TransportError
from nsq_failover.models import ActiveConnection, NodeDescriptor
from nsq_failover.transport import Transport


def probe(node: NodeDescriptor, config: ConnectionConfig, transport: Transport,
          logger: Optional[logging.Logger] = None, log_level: int = logging.INFO) -> ActiveConnection:
    """
    Open a connection to node and check it answers a ping.

    A failed connect and a failed ping both raise NodeUnreachable. The caller
    owns the returned connection.
    """
    try:
        conn = transport(node, config)
    except (TransportError, OSError) as e:
        raise NodeUnreachable(node.address, node.port, str(e)) from e

    if logger is not None:
        conn.set_logger(logger, log_level)

    try:
        conn.ping()
    except (TransportError, OSError) as e:
        conn.close()
        raise NodeUnreachable(node.address, node.port, str(e)) from e

    return ActiveConnection(connection=conn, node=node)
