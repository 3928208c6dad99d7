"""Collaboration hub state derived from proposal and response status."""

from enum import Enum

from pydantic import BaseModel

from proposal_hub.models.proposal import Proposal, ProposalStatus
from proposal_hub.models.response import Response, ResponseStatus


class PipelineStage(str, Enum):
    """Where a vendor's pitch sits in their own pipeline."""

    SUBMITTED = "submitted"
    READ = "read"
    SHORTLISTED = "shortlisted"
    ACTIVE_DISCUSSION = "active_discussion"
    DECLINED = "declined"


class CollaborationState(BaseModel):
    chat_unlocked: bool
    hired: bool
    fulfilled: bool
    channel_open: bool
    has_active_chat: bool


def collaboration_state(proposal: Proposal, response: Response) -> CollaborationState:
    """
    Chat unlocks once the response is shortlisted and stays open until the
    proposal is completed or cancelled. A hired vendor with an open channel
    has an active chat.
    """
    unlocked = response.status == ResponseStatus.SHORTLISTED
    hired = unlocked and response.hired_at is not None
    fulfilled = proposal.status == ProposalStatus.COMPLETED
    channel_open = unlocked and not proposal.status.is_terminal
    return CollaborationState(
        chat_unlocked=unlocked,
        hired=hired,
        fulfilled=fulfilled,
        channel_open=channel_open,
        has_active_chat=hired and channel_open,
    )


def has_active_chat(proposal: Proposal, response: Response) -> bool:
    return collaboration_state(proposal, response).has_active_chat


def pipeline_stage(proposal: Proposal, response: Response) -> PipelineStage:
    if response.status == ResponseStatus.REJECTED:
        return PipelineStage.DECLINED
    if response.status == ResponseStatus.SHORTLISTED:
        if has_active_chat(proposal, response):
            return PipelineStage.ACTIVE_DISCUSSION
        return PipelineStage.SHORTLISTED
    if response.status == ResponseStatus.VIEWED:
        return PipelineStage.READ
    return PipelineStage.SUBMITTED
