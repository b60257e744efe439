import logging

import pytest

from conftest import node
from nsq_failover.cache import ConnectionCache
from nsq_failover.config import ConnectionConfig
from nsq_failover.errors import NodeUnreachable
from nsq_failover.prober import probe


# ---------------- PROBE ----------------
def test_probe_returns_pinged_connection(transport):
    broker = transport.add("10.0.0.1:4150")
    logger = logging.getLogger("tests.probe")

    active = probe(node("10.0.0.1:4150"), ConnectionConfig(), transport, logger, logging.DEBUG)

    assert active.node.addr == "10.0.0.1:4150"
    assert broker.pings == 1
    assert active.connection.logger == (logger, logging.DEBUG)


def test_probe_connect_failure(transport):
    with pytest.raises(NodeUnreachable) as exc_info:
        probe(node("10.0.0.9:4150"), ConnectionConfig(), transport)
    assert exc_info.value.address == "10.0.0.9"
    assert exc_info.value.port == 4150


def test_probe_ping_failure_closes_connection(transport):
    transport.add("10.0.0.1:4150").up = False

    with pytest.raises(NodeUnreachable):
        probe(node("10.0.0.1:4150"), ConnectionConfig(), transport)
    assert transport.connections[0].closed


def test_probe_os_error_counts_as_unreachable():
    def refusing(descriptor, config):
        raise ConnectionRefusedError("refused")

    with pytest.raises(NodeUnreachable, match="refused"):
        probe(node("10.0.0.1:4150"), ConnectionConfig(), refusing)


# ---------------- CACHE ----------------
def test_empty_cache():
    cache = ConnectionCache()
    assert cache.get() is None
    assert cache.node is None
    cache.clear()
    cache.evict()


def test_set_marks_in_use_and_get_revalidates(transport):
    broker = transport.add("10.0.0.1:4150")
    active = probe(node("10.0.0.1:4150"), ConnectionConfig(), transport)
    cache = ConnectionCache()

    cache.set(active)

    assert active.node.in_use
    assert cache.get() is active
    assert broker.pings == 2


def test_ping_failure_evicts(transport):
    broker = transport.add("10.0.0.1:4150")
    active = probe(node("10.0.0.1:4150"), ConnectionConfig(), transport)
    cache = ConnectionCache()
    cache.set(active)

    broker.up = False

    assert cache.get() is None
    assert cache.node is None
    assert active.connection.closed
    assert active.node.available is False
    assert active.node.in_use is False


def test_set_replaces_and_closes_previous(transport):
    transport.add("10.0.0.1:4150")
    transport.add("10.0.0.2:4150")
    first = probe(node("10.0.0.1:4150"), ConnectionConfig(), transport)
    second = probe(node("10.0.0.2:4150"), ConnectionConfig(), transport)
    cache = ConnectionCache()

    cache.set(first)
    cache.set(second)

    assert first.connection.closed
    assert not second.connection.closed
    assert cache.node is second.node


def test_clear_closes_without_marking_unavailable(transport):
    transport.add("10.0.0.1:4150")
    active = probe(node("10.0.0.1:4150"), ConnectionConfig(), transport)
    cache = ConnectionCache()
    cache.set(active)

    cache.clear()

    assert active.connection.closed
    assert active.node.available is None
    assert cache.get() is None
