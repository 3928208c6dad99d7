"""Data models for proposals, responses and matching candidates."""

from proposal_hub.models.actor import Actor, Role
from proposal_hub.models.proposal import (
    Budget,
    CreatorType,
    DeploymentPreference,
    Priority,
    Proposal,
    ProposalDraft,
    ProposalStatus,
    Requirements,
    Timeline,
)
from proposal_hub.models.response import Attachment, Response, ResponseDraft, ResponseStatus
from proposal_hub.models.solution import Solution, VendorRef
from proposal_hub.models.vocabulary import Vocabulary

__all__ = [
    "Actor",
    "Attachment",
    "Budget",
    "CreatorType",
    "DeploymentPreference",
    "Priority",
    "Proposal",
    "ProposalDraft",
    "ProposalStatus",
    "Requirements",
    "Response",
    "ResponseDraft",
    "ResponseStatus",
    "Role",
    "Solution",
    "Timeline",
    "VendorRef",
    "Vocabulary",
]
