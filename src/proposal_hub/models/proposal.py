"""Customer proposal (posted need) model."""

import math
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, computed_field, model_validator
from pydantic.alias_generators import to_camel

from proposal_hub.models.refs import RefId, new_id
from proposal_hub.models.response import Response


class ProposalStatus(str, Enum):
    DRAFT = "draft"
    ACTIVE = "active"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (ProposalStatus.COMPLETED, ProposalStatus.CANCELLED)


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class CreatorType(str, Enum):
    CUSTOMER = "customer"
    VENDOR = "vendor"


class Timeline(str, Enum):
    IMMEDIATE = "immediate"
    ONE_MONTH = "1-month"
    THREE_MONTHS = "3-months"
    SIX_MONTHS = "6-months"
    ONE_YEAR = "1-year"
    FLEXIBLE = "flexible"


class DeploymentPreference(str, Enum):
    CLOUD = "cloud"
    ON_PREMISE = "on-premise"
    HYBRID = "hybrid"
    ANY = "any"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Budget(_CamelModel):
    min: Optional[Decimal] = None
    max: Optional[Decimal] = None
    currency: str = "USD"


class Requirements(_CamelModel):
    budget: Budget = Field(default_factory=Budget)
    timeline: Timeline = Timeline.FLEXIBLE
    deployment_preference: DeploymentPreference = DeploymentPreference.ANY
    required_features: list[str] = Field(default_factory=list)
    preferred_features: list[str] = Field(default_factory=list)
    data_type: Optional[str] = None
    compliance: list[str] = Field(default_factory=list)


class ProposalDraft(_CamelModel):
    """Creator-editable fields of a proposal, as entered in the posting wizard."""

    title: str = ""
    description: str = ""
    category: str = ""
    industry: str = ""
    tags: list[str] = Field(default_factory=list)
    priority: Priority = Priority.MEDIUM
    status: ProposalStatus = ProposalStatus.DRAFT
    requirements: Requirements = Field(default_factory=Requirements)

    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None

    expires_at: Optional[datetime] = None


class Proposal(ProposalDraft):
    """A posted need together with the vendor responses attached to it."""

    id: str = Field(default_factory=new_id, validation_alias=AliasChoices("id", "_id"))
    created_by: RefId
    creator_type: CreatorType = CreatorType.CUSTOMER

    views_count: int = 0
    responses: list[Response] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: Optional[datetime] = None
    published_at: Optional[datetime] = None

    @model_validator(mode="after")
    def _link_responses(self) -> "Proposal":
        # Embedded responses from the API omit their parent id
        for response in self.responses:
            if response.proposal_id is None:
                response.proposal_id = self.id
        return self

    @computed_field
    @property
    def responses_count(self) -> int:
        return len(self.responses)

    def find_response(self, response_id: str) -> Optional[Response]:
        for response in self.responses:
            if response.id == response_id:
                return response
        return None

    def response_by_vendor(self, vendor_id: str) -> Optional[Response]:
        for response in self.responses:
            if response.vendor_id == vendor_id:
                return response
        return None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        return _aware(self.expires_at) < (now or datetime.now(timezone.utc))

    def days_until_expiry(self, now: Optional[datetime] = None) -> Optional[int]:
        """Whole days left before expiry, rounded up and never negative."""
        if self.expires_at is None:
            return None
        remaining = _aware(self.expires_at) - (now or datetime.now(timezone.utc))
        return max(0, math.ceil(remaining / timedelta(days=1)))


def _aware(dt: datetime) -> datetime:
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)
