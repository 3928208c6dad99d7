"""Vendor solution listings used as matching candidates."""

from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from proposal_hub.models.refs import new_id


class VendorRef(BaseModel):
    """Populated vendor reference carried by a solution."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(validation_alias=AliasChoices("id", "_id"))
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    company: Optional[str] = None

    @property
    def display_name(self) -> str:
        name = " ".join(p for p in (self.first_name, self.last_name) if p)
        return name or self.company or self.id


class Solution(BaseModel):
    """A vendor's published AI solution."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=new_id, validation_alias=AliasChoices("id", "_id"))
    title: str = ""
    short_description: Optional[str] = None
    category: str = ""
    industry: str = ""
    vendor: Optional[VendorRef] = Field(
        default=None,
        validation_alias=AliasChoices("vendor", "vendorId", "vendor_id"),
    )

    @field_validator("vendor", mode="before")
    @classmethod
    def _vendor_from_id(cls, value):
        # Unpopulated references arrive as a bare id
        if isinstance(value, str):
            return {"id": value}
        return value

    @property
    def vendor_id(self) -> Optional[str]:
        return self.vendor.id if self.vendor else None
