from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from .contact_record import ContactRecord
from .network_summary import NetworkSummary
from .network_tree import RootNode


class NetworkResult(BaseModel):
    """Everything one upload produces. Owned by the caller; recomputed per upload."""

    connections: tuple[ContactRecord, ...] = ()
    tree: RootNode
    summary: NetworkSummary

    model_config = ConfigDict(frozen=True, extra="forbid")

    @classmethod
    def empty(cls, root_label: str = "My Network") -> "NetworkResult":
        return cls(tree=RootNode(name=root_label), summary=NetworkSummary())

    @property
    def is_empty(self) -> bool:
        return self.summary.total_connections == 0
