from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class CompanyCount(BaseModel):
    name: str
    count: int

    model_config = ConfigDict(frozen=True, extra="forbid")


class NetworkSummary(BaseModel):
    """Totals over the whole export; top_companies is the full ranking, never truncated."""

    total_connections: int = Field(default=0, alias="totalConnections")
    total_companies: int = Field(default=0, alias="totalCompanies")
    top_companies: tuple[CompanyCount, ...] = Field(default=(), alias="topCompanies")

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    def top(self, n: int) -> tuple[CompanyCount, ...]:
        return self.top_companies[: max(n, 0)]
