"""Filter state shared by every role-specific feed."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class FilterState(BaseModel):
    """
    Free-text search plus structured facets. Empty values and "All ..."
    sentinels (e.g. "All Industries") leave a facet unset.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    query: Optional[str] = None
    industry: Optional[str] = None
    category: Optional[str] = None
    priority: Optional[str] = None
    status: Optional[str] = None
    min_budget: Optional[Decimal] = None
    max_budget: Optional[Decimal] = None

    @field_validator("min_budget", "max_budget", mode="before")
    @classmethod
    def _blank_budget(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value
