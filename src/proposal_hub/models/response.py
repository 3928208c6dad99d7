"""Vendor response (pitch) model."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from proposal_hub.models.refs import RefId, new_id


class ResponseStatus(str, Enum):
    PENDING = "pending"
    VIEWED = "viewed"
    SHORTLISTED = "shortlisted"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self in (ResponseStatus.SHORTLISTED, ResponseStatus.REJECTED)


class Attachment(BaseModel):
    """File linked from a response (SOW, data sample, deck)."""

    name: str
    type: Optional[str] = None
    url: str


class ResponseDraft(BaseModel):
    """Vendor-editable content of a response."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    proposal_text: str = ""
    solution_id: Optional[RefId] = None
    proposed_price: Optional[str] = None
    proposed_timeline: Optional[str] = None
    case_study_link: Optional[str] = None
    attachments: list[Attachment] = Field(default_factory=list)


class Response(ResponseDraft):
    """A vendor's submission against one proposal."""

    id: str = Field(default_factory=new_id, validation_alias=AliasChoices("id", "_id"))
    proposal_id: Optional[RefId] = None
    vendor_id: RefId
    vendor_name: str = ""
    vendor_company: Optional[str] = None

    status: ResponseStatus = ResponseStatus.PENDING
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        validation_alias=AliasChoices("created_at", "createdAt", "submittedAt"),
        serialization_alias="createdAt",
    )
    updated_at: Optional[datetime] = None
    viewed_at: Optional[datetime] = None
    hired_at: Optional[datetime] = None
