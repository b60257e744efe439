# nsq_failover/models.py
from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

if TYPE_CHECKING:
    from nsq_failover.transport import BrokerConnection


# ---------------- DIRECTORY ENVELOPE ----------------
class NodeDescriptor(BaseModel):
    """
    One nsqd instance as reported by nsqlookupd.

    available / in_use are local annotations set during node selection and are
    never sent anywhere. available is None until the node has been probed.
    """

    model_config = ConfigDict(populate_by_name=True)

    address: str = Field(alias="broadcast_address")
    port: int = Field(alias="tcp_port")
    http_port: Optional[int] = None
    hostname: Optional[str] = None
    topics: List[str] = Field(default_factory=list)

    available: Optional[bool] = Field(default=None, exclude=True)
    in_use: bool = Field(default=False, exclude=True)

    @model_validator(mode="before")
    @classmethod
    def _drop_local_flags(cls, data):
        # flags start unset on every query, whatever the directory sent
        if isinstance(data, dict):
            data = {k: v for k, v in data.items() if k not in ("available", "in_use")}
        return data

    @property
    def addr(self) -> str:
        return f"{self.address}:{self.port}"


class NodesData(BaseModel):
    producers: List[NodeDescriptor] = Field(default_factory=list)


class NodesEnvelope(BaseModel):
    status_code: int
    status_text: str = ""
    data: Optional[NodesData] = None


# ---------------- CONNECTION ----------------
@dataclass
class ActiveConnection:
    connection: "BrokerConnection"
    node: NodeDescriptor
