# nsq_failover/errors.py


class NSQProducerError(Exception):
    """Base class for every error raised by the failover producer."""


class DirectoryError(NSQProducerError):
    pass


class DirectoryUnreachable(DirectoryError):
    """nsqlookupd could not be reached or answered with a non-200 HTTP status."""


class DirectoryProtocolError(DirectoryError):
    """The /nodes body was not a valid envelope, or its status_code was not 200."""


class TransportError(NSQProducerError):
    """Raised by broker connections when a ping or publish round-trip fails."""


class NodeUnreachable(NSQProducerError):
    """A single candidate failed to connect or answer a ping."""

    def __init__(self, address: str, port: int, reason: str = ""):
        self.address = address
        self.port = port
        msg = f"nsqd node {address}:{port} unreachable"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class NoAvailableNode(NSQProducerError):
    """Every candidate was exhausted, across the whole retry budget."""


class PublishFailed(NSQProducerError):
    """Publishing failed again after the one-shot reconnect."""

    def __init__(self, topic: str, reason: str = ""):
        self.topic = topic
        msg = f"publish to topic {topic!r} failed"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)
