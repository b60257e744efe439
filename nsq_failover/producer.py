# nsq_failover/producer.py
"""
NSQProducer wraps a broker connection and keeps it pointed at a live nsqd.

It looks up every nsqd registered with nsqlookupd, connects to the first one
that answers a ping and forwards published messages to it. When the connection
breaks it asks nsqlookupd again and reconnects.
"""
import logging
import threading
from typing import Callable, List, Optional, Union

from nsq_failover.cache import ConnectionCache
from nsq_failover.config import ConnectionConfig
from nsq_failover.directory import query_nodes
from nsq_failover.errors import (
    DirectoryError,
    NoAvailableNode,
    NodeUnreachable,
    PublishFailed,
    TransportError,
)
from nsq_failover.models import ActiveConnection, NodeDescriptor
from nsq_failover.prober import probe
from nsq_failover.transport import Transport, connect_http

Directory = Callable[[str, ConnectionConfig], List[NodeDescriptor]]

log = logging.getLogger(__name__)


class NSQProducer:
    """
    Failover producer for one nsqlookupd.

    Construction queries the directory and connects eagerly, so it raises if no
    node is reachable. logger=None, here and in set_logger, means this module's
    logger; messages below log_level are dropped.

    NOTE: not thread safe. One thread must own an instance, since selection
    mutates the flags of the candidate list. Share through LockedNSQProducer.
    """

    def __init__(self, lookupd_address: str, config: Optional[ConnectionConfig] = None,
                 logger: Optional[logging.Logger] = None, log_level: int = logging.INFO,
                 *, transport: Transport = connect_http, directory: Directory = query_nodes):
        self.lookupd_address = lookupd_address
        self.config = config if config is not None else ConnectionConfig()
        self._transport = transport
        self._directory = directory
        self._logger: logging.Logger = logger if logger is not None else log
        self._log_level = log_level

        self._cache = ConnectionCache()
        self._nodes: List[NodeDescriptor] = []
        self._stopped = False

        self._nodes = self._discover()
        self.select_connection()

    # ---------------- PUBLIC ----------------
    @property
    def nodes(self) -> List[NodeDescriptor]:
        return list(self._nodes)

    @property
    def current_node(self) -> Optional[NodeDescriptor]:
        return self._cache.node

    def set_logger(self, logger: Optional[logging.Logger], level: int) -> None:
        self._logger = logger if logger is not None else log
        self._log_level = level
        if self._cache.connection is not None:
            self._cache.connection.set_logger(self._logger, level)

    def set_max_retry_times(self, times: int) -> None:
        if times < 0:
            raise ValueError(f"max_retry_times must be >= 0, got {times}")
        # copied so a config shared with other producers is left alone
        self.config = self.config.model_copy(update={"max_retry_times": times})

    def publish(self, topic: str, body: Union[bytes, str]) -> None:
        """
        Publish body to topic on the current node.

        If the publish itself fails the connection is dropped, a node is
        selected again (rediscovering if needed) and the publish is retried
        exactly once. Raises NoAvailableNode or PublishFailed.
        """
        active = self._select_with_retry()
        try:
            active.connection.publish(topic, body)
            return
        except (TransportError, OSError) as e:
            self._log(logging.WARNING, "[publish] %s -> %s failed: %s, reconnecting",
                      topic, active.node.addr, e)

        self._cache.evict()
        active = self._select_with_retry()
        try:
            active.connection.publish(topic, body)
        except (TransportError, OSError) as e:
            self._log(logging.ERROR, "[publish] %s -> %s failed again: %s", topic, active.node.addr, e)
            raise PublishFailed(topic, str(e)) from e

    def stop(self) -> None:
        """Close the connection and forget all nodes. The producer cannot be restarted."""
        self._cache.clear()
        self._nodes = []
        if not self._stopped:
            self._stopped = True
            self._log(logging.INFO, "[stop] producer for %s stopped", self.lookupd_address)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.stop()

    # ---------------- SELECTION ----------------
    def select_connection(self) -> ActiveConnection:
        """
        Return the cached connection, or connect to the first candidate that answers.

        Candidates are tried in directory order. A node that already failed a
        probe stays in the list but is skipped until the next directory query
        replaces the list.
        """
        if self._stopped:
            raise NoAvailableNode("producer is stopped")

        previous = self._cache.node
        active = self._cache.get()
        if active is not None:
            return active
        if previous is not None:
            self._log(logging.WARNING, "[select] cached node %s failed ping, evicted", previous.addr)

        if not self._nodes:
            raise NoAvailableNode("no available nsqd node: node list is empty")

        for node in self._nodes:
            if node.available is False:
                continue
            try:
                active = probe(node, self.config, self._transport, self._logger, self._log_level)
            except NodeUnreachable as e:
                node.available = False
                self._log(logging.WARNING, "[probe] %s", e)
                continue
            node.available = True
            self._cache.set(active)
            self._log(logging.INFO, "[select] connected to nsqd %s", node.addr)
            return active

        raise NoAvailableNode(f"no available nsqd node among {len(self._nodes)} candidate(s)")

    def _select_with_retry(self) -> ActiveConnection:
        try:
            return self.select_connection()
        except NoAvailableNode as e:
            if self._stopped:
                raise
            last_err: Exception = e

        self._cache.clear()
        retries = self.config.max_retry_times
        for attempt in range(1, retries + 1):
            try:
                self._nodes = self._discover()
            except DirectoryError as e:
                last_err = e
                self._log(logging.WARNING, "[discover] retry %d/%d failed: %s", attempt, retries, e)
                continue
            try:
                return self.select_connection()
            except NoAvailableNode as e:
                last_err = e
                self._log(logging.WARNING, "[select] retry %d/%d failed: %s", attempt, retries, e)

        raise NoAvailableNode(
            f"no available nsqd node after {retries} rediscovery attempt(s): {last_err}"
        ) from last_err

    def _discover(self) -> List[NodeDescriptor]:
        nodes = self._directory(self.lookupd_address, self.config)
        self._log(logging.INFO, "[discover] %d nsqd node(s) from %s: %s", len(nodes),
                  self.lookupd_address, ", ".join(n.addr for n in nodes) or "-")
        return nodes

    def _log(self, level: int, msg: str, *args) -> None:
        if level >= self._log_level:
            self._logger.log(level, msg, *args)


class LockedNSQProducer:
    """NSQProducer behind a lock, for callers that publish from several threads."""

    def __init__(self, producer: NSQProducer):
        self._producer = producer
        self._lock = threading.Lock()

    @property
    def producer(self) -> NSQProducer:
        return self._producer

    def publish(self, topic: str, body: Union[bytes, str]) -> None:
        with self._lock:
            self._producer.publish(topic, body)

    def set_logger(self, logger: Optional[logging.Logger], level: int) -> None:
        with self._lock:
            self._producer.set_logger(logger, level)

    def set_max_retry_times(self, times: int) -> None:
        with self._lock:
            self._producer.set_max_retry_times(times)

    def stop(self) -> None:
        with self._lock:
            self._producer.stop()
