from nsq_failover.config import ConnectionConfig
from nsq_failover.errors import (
    DirectoryProtocolError,
    DirectoryUnreachable,
    NoAvailableNode,
    NodeUnreachable,
    NSQProducerError,
    PublishFailed,
    TransportError,
)
from nsq_failover.models import NodeDescriptor
from nsq_failover.producer import LockedNSQProducer, NSQProducer

__all__ = [
    "ConnectionConfig",
    "DirectoryProtocolError",
    "DirectoryUnreachable",
    "LockedNSQProducer",
    "NSQProducer",
    "NSQProducerError",
    "NoAvailableNode",
    "NodeDescriptor",
    "NodeUnreachable",
    "PublishFailed",
    "TransportError",
]
