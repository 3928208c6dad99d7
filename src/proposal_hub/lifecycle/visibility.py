"""Who may see which proposal."""

from datetime import datetime
from typing import Optional

from proposal_hub.errors import AuthorizationError
from proposal_hub.models.actor import Actor, Role
from proposal_hub.models.proposal import CreatorType, Proposal, ProposalStatus


def is_visible(proposal: Proposal, actor: Actor) -> bool:
    """
    Customers see their own proposals and active vendor-posted ones; vendors
    see active customer needs and their own postings; superadmins see all.
    A vendor who responded keeps read access whatever the status.
    """
    if actor.owns(proposal.created_by):
        return True
    if proposal.response_by_vendor(actor.user_id) is not None:
        return True
    if proposal.status != ProposalStatus.ACTIVE:
        return False
    if actor.role == Role.CUSTOMER:
        return proposal.creator_type == CreatorType.VENDOR
    if actor.role == Role.VENDOR:
        return proposal.creator_type == CreatorType.CUSTOMER
    return False


def ensure_visible(proposal: Proposal, actor: Actor) -> None:
    if not is_visible(proposal, actor):
        raise AuthorizationError("Not authorized to view this proposal")


def hidden_as_expired(
    proposal: Proposal,
    status_filter: Optional[ProposalStatus],
    now: Optional[datetime] = None,
) -> bool:
    """Expired proposals drop out of listings unless closed ones were asked for."""
    if status_filter in (ProposalStatus.COMPLETED, ProposalStatus.CANCELLED):
        return False
    return proposal.is_expired(now)
