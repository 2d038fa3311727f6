from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ContactRecord(BaseModel):
    """One row of a connections export; only company is required downstream."""

    first_name: str = Field(default="", alias="firstName")
    last_name: str = Field(default="", alias="lastName")
    url: str = ""
    email: str = ""
    company: str = ""
    position: str = ""
    # Kept as exported text ("12 Mar 2024"); never parsed to a date
    connected_on: str = Field(default="", alias="connectedOn")

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
