# nsq_failover/config.py
import os
from typing import Tuple

from dotenv import load_dotenv
from pydantic import BaseModel, Field

DEFAULT_LOOKUPD_ADDRESS = "127.0.0.1:4161"
DEFAULT_USER_AGENT = "nsq-failover-producer/0.1"


class ConnectionConfig(BaseModel):
    """
    Settings shared by the directory client and every broker connection.

    max_retry_times bounds how many full discovery cycles run after a failed
    node selection. It is read each time the producer enters its retry loop.
    """

    connect_timeout: float = Field(3.0, gt=0)
    read_timeout: float = Field(5.0, gt=0)
    max_retry_times: int = Field(1, ge=0)
    user_agent: str = DEFAULT_USER_AGENT

    @property
    def timeout(self) -> Tuple[float, float]:
        """(connect, read) tuple in the form requests expects."""
        return (self.connect_timeout, self.read_timeout)

    @classmethod
    def from_env(cls) -> "ConnectionConfig":
        load_dotenv()
        return cls(
            connect_timeout=float(os.environ.get("CONNECT_TIMEOUT", "3")),
            read_timeout=float(os.environ.get("READ_TIMEOUT", "5")),
            max_retry_times=int(os.environ.get("MAX_RETRY_TIMES", "1")),
            user_agent=os.environ.get("NSQ_USER_AGENT", DEFAULT_USER_AGENT),
        )


def lookupd_address_from_env() -> str:
    load_dotenv()
    return os.environ.get("NSQLOOKUPD_ADDRESS", DEFAULT_LOOKUPD_ADDRESS)
