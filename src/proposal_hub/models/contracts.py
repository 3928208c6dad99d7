"""Request/response envelopes exchanged with the marketplace backend."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from proposal_hub.models.proposal import CreatorType, Proposal, ProposalStatus
from proposal_hub.models.response import Attachment, Response, ResponseStatus
from proposal_hub.models.solution import Solution


class _Envelope(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FetchProposalsRequest(_Envelope):
    creator_type: Optional[CreatorType] = None
    status: Optional[ProposalStatus] = None
    industry: Optional[str] = None
    category: Optional[str] = None
    created_by: Optional[str] = None
    limit: int = 12
    page: int = 1


class ProposalListResponse(_Envelope):
    success: bool = True
    proposals: list[Proposal] = Field(default_factory=list)
    count: int = 0
    total: int = 0


class ProposalEnvelope(_Envelope):
    success: bool = True
    proposal: Proposal


class AddResponseRequest(_Envelope):
    proposal_id: str
    proposal_text: str
    solution_id: Optional[str] = None
    proposed_price: Optional[str] = None
    proposed_timeline: Optional[str] = None
    case_study_link: Optional[str] = None
    attachments: list[Attachment] = Field(default_factory=list)


class UpdateResponseRequest(_Envelope):
    proposal_id: str
    response_id: str
    proposal_text: Optional[str] = None
    solution_id: Optional[str] = None
    proposed_price: Optional[str] = None
    proposed_timeline: Optional[str] = None
    case_study_link: Optional[str] = None
    attachments: Optional[list[Attachment]] = None


class UpdateResponseStatusRequest(_Envelope):
    proposal_id: str
    response_id: str
    status: ResponseStatus


class ResponseEnvelope(_Envelope):
    success: bool = True
    response: Response


class FetchSolutionsRequest(_Envelope):
    category: Optional[str] = None
    industry: Optional[str] = None
    limit: int = 20


class SolutionListResponse(_Envelope):
    success: bool = True
    solutions: list[Solution] = Field(default_factory=list)


class Ack(_Envelope):
    success: bool = True
    message: Optional[str] = None
