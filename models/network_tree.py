from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from .contact_record import ContactRecord


class ContactNode(BaseModel):
    """Leaf of the tree; carries the full record for inspection."""

    type: Literal["contact"] = "contact"
    name: str
    info: ContactRecord

    model_config = ConfigDict(frozen=True, extra="forbid")


class CompanyNode(BaseModel):
    """Employer branch, named by the exact company string from the export."""

    type: Literal["company"] = "company"
    name: str
    children: tuple[ContactNode, ...] = ()

    model_config = ConfigDict(frozen=True, extra="forbid")

    @property
    def weight(self) -> int:
        return len(self.children)


class RootNode(BaseModel):
    type: Literal["root"] = "root"
    name: str
    children: tuple[CompanyNode, ...] = ()

    model_config = ConfigDict(frozen=True, extra="forbid")

    @property
    def contact_count(self) -> int:
        return sum(c.weight for c in self.children)


TreeNode = Annotated[Union[RootNode, CompanyNode, ContactNode], Field(discriminator="type")]
