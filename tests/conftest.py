import pytest

from nsq_failover.errors import TransportError
from nsq_failover.models import NodeDescriptor


def node(addr, topics=()):
    host, port = addr.rsplit(":", 1)
    return NodeDescriptor(address=host, port=int(port), topics=list(topics))


class FakeBroker:
    def __init__(self, addr):
        self.addr = addr
        self.up = True
        self.refuse_connect = False
        self.publish_failures = 0
        self.published = []
        self.pings = 0


class FakeConnection:
    def __init__(self, broker):
        self.broker = broker
        self.closed = False
        self.logger = None

    def ping(self):
        self.broker.pings += 1
        if self.closed or not self.broker.up:
            raise TransportError(f"ping {self.broker.addr} failed")

    def publish(self, topic, body):
        if self.broker.publish_failures > 0:
            self.broker.publish_failures -= 1
            raise TransportError(f"publish to {self.broker.addr} failed")
        if self.closed or not self.broker.up:
            raise TransportError(f"connection to {self.broker.addr} reset")
        self.broker.published.append((topic, body))

    def close(self):
        self.closed = True

    def set_logger(self, logger, level):
        self.logger = (logger, level)


class FakeTransport:
    """Stands in for connect_http; brokers are keyed by "host:port"."""

    def __init__(self):
        self.brokers = {}
        self.connects = []
        self.connections = []

    def add(self, addr):
        broker = FakeBroker(addr)
        self.brokers[addr] = broker
        return broker

    def __call__(self, descriptor, config):
        self.connects.append(descriptor.addr)
        broker = self.brokers.get(descriptor.addr)
        if broker is None or broker.refuse_connect:
            raise TransportError(f"connection refused: {descriptor.addr}")
        conn = FakeConnection(broker)
        self.connections.append(conn)
        return conn


class FakeDirectory:
    """
    Answers each query with the next scripted result; the last one repeats.
    A result is a list of "host:port" strings or an exception to raise.
    """

    def __init__(self, *results):
        self.results = list(results)
        self.calls = 0

    def __call__(self, lookupd_address, config):
        result = self.results[min(self.calls, len(self.results) - 1)]
        self.calls += 1
        if isinstance(result, Exception):
            raise result
        return [node(addr) for addr in result]


@pytest.fixture
def transport():
    return FakeTransport()
