# nsq_failover/cache.py
from typing import Optional

from nsq_failover.errors import TransportError
from nsq_failover.models import ActiveConnection, NodeDescriptor


class ConnectionCache:
    """Holds zero or one live connection together with the node it points at."""

    def __init__(self):
        self._active: Optional[ActiveConnection] = None

    @property
    def node(self) -> Optional[NodeDescriptor]:
        return self._active.node if self._active is not None else None

    @property
    def connection(self):
        """The cached connection, without re-checking it."""
        return self._active.connection if self._active is not None else None

    def get(self) -> Optional[ActiveConnection]:
        """Return the cached connection if it still answers a ping, evicting it otherwise."""
        if self._active is None:
            return None
        try:
            self._active.connection.ping()
        except (TransportError, OSError):
            self.evict()
            return None
        return self._active

    def set(self, active: ActiveConnection) -> None:
        if self._active is not None and self._active is not active:
            self.clear()
        active.node.in_use = True
        self._active = active

    def evict(self) -> None:
        """Drop the current entry as failed: its node is marked unavailable."""
        if self._active is None:
            return
        node = self._active.node
        self.clear()
        node.available = False

    def clear(self) -> None:
        if self._active is None:
            return
        active, self._active = self._active, None
        active.node.in_use = False
        active.connection.close()
