"""
Proposal and response state machines.

Every operation is a pure function: it takes the current proposal (responses
are embedded in it) plus the acting user and returns updated copies. Nothing
passed in is mutated, so callers can apply a transition optimistically and
throw the result away when the backend disagrees.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from proposal_hub.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from proposal_hub.models.actor import Actor, Role
from proposal_hub.models.proposal import CreatorType, Proposal, ProposalDraft, ProposalStatus
from proposal_hub.models.response import Response, ResponseDraft, ResponseStatus
from proposal_hub.models.validation import (
    derive_tags,
    parse_model,
    validate_proposal,
    validate_response_draft,
)
from proposal_hub.models.vocabulary import Vocabulary

logger = logging.getLogger(__name__)

PROPOSAL_TRANSITIONS: dict[ProposalStatus, frozenset[ProposalStatus]] = {
    ProposalStatus.DRAFT: frozenset({ProposalStatus.ACTIVE, ProposalStatus.CANCELLED}),
    ProposalStatus.ACTIVE: frozenset(
        {ProposalStatus.IN_PROGRESS, ProposalStatus.COMPLETED, ProposalStatus.CANCELLED}
    ),
    ProposalStatus.IN_PROGRESS: frozenset({ProposalStatus.COMPLETED, ProposalStatus.CANCELLED}),
    ProposalStatus.COMPLETED: frozenset(),
    ProposalStatus.CANCELLED: frozenset(),
}

RESPONSE_TRANSITIONS: dict[ResponseStatus, frozenset[ResponseStatus]] = {
    ResponseStatus.PENDING: frozenset(
        {ResponseStatus.VIEWED, ResponseStatus.SHORTLISTED, ResponseStatus.REJECTED}
    ),
    ResponseStatus.VIEWED: frozenset({ResponseStatus.SHORTLISTED, ResponseStatus.REJECTED}),
    ResponseStatus.SHORTLISTED: frozenset(),
    ResponseStatus.REJECTED: frozenset(),
}

# Fields the creator may change through an edit; status goes through transition_proposal
EDITABLE_PROPOSAL_FIELDS = frozenset(ProposalDraft.model_fields) - {"status"}
EDITABLE_RESPONSE_FIELDS = frozenset(ResponseDraft.model_fields)


def _now(now: Optional[datetime]) -> datetime:
    return now or datetime.now(timezone.utc)


def _field_names(model_cls, changes: dict[str, Any]) -> dict[str, Any]:
    """Map camelCase or snake_case keys onto model field names; unknown keys are dropped."""
    by_alias = {f.alias: name for name, f in model_cls.model_fields.items() if f.alias}
    out: dict[str, Any] = {}
    for key, value in changes.items():
        name = key if key in model_cls.model_fields else by_alias.get(key)
        if name is not None:
            out[name] = value
    return out


def can_transition_proposal(current: ProposalStatus, target: ProposalStatus) -> bool:
    return target in PROPOSAL_TRANSITIONS[current]


def can_transition_response(current: ResponseStatus, target: ResponseStatus) -> bool:
    return target in RESPONSE_TRANSITIONS[current]


def check_proposal_transition(current: ProposalStatus, target: ProposalStatus) -> None:
    if current.is_terminal:
        raise ConflictError(f"Proposal is {current.value}; no further changes are allowed")
    if not can_transition_proposal(current, target):
        raise ConflictError(f"Cannot move proposal from {current.value} to {target.value}")


def check_response_transition(current: ResponseStatus, target: ResponseStatus) -> None:
    if current.is_terminal:
        raise ConflictError(f"Response is already {current.value}")
    if not can_transition_response(current, target):
        raise ConflictError(f"Cannot move response from {current.value} to {target.value}")


def require_proposal_owner(proposal: Proposal, actor: Actor, action: str) -> None:
    if not actor.owns(proposal.created_by):
        raise AuthorizationError(f"Not authorized to {action} this proposal")


def require_response_owner(response: Response, actor: Actor, action: str) -> None:
    if not actor.owns(response.vendor_id):
        raise AuthorizationError(f"Not authorized to {action} this response")


def get_response(proposal: Proposal, response_id: str) -> Response:
    response = proposal.find_response(response_id)
    if response is None:
        raise NotFoundError("Response not found")
    return response


def _with_response(proposal: Proposal, updated: Response, now: datetime) -> Proposal:
    responses = [updated if r.id == updated.id else r for r in proposal.responses]
    return proposal.model_copy(update={"responses": responses, "updated_at": now})


# --- proposals ---------------------------------------------------------------


def create_proposal(
    draft: ProposalDraft,
    actor: Actor,
    *,
    now: Optional[datetime] = None,
    vocabulary: Optional[Vocabulary] = None,
    expiry_days: int = 30,
) -> Proposal:
    """Validate a draft and turn it into a proposal owned by the actor."""
    validate_proposal(draft, vocabulary)
    if draft.status not in (ProposalStatus.DRAFT, ProposalStatus.ACTIVE):
        raise ValidationError("New proposals must start as draft or active")

    now = _now(now)
    data = draft.model_dump()
    if not data["tags"]:
        data["tags"] = derive_tags(draft.title, draft.industry, draft.requirements.data_type)
    data["title"] = draft.title.strip()
    data["description"] = draft.description.strip()
    data["contact_name"] = draft.contact_name or actor.name
    data["expires_at"] = draft.expires_at or now + timedelta(days=expiry_days)

    proposal = Proposal.model_validate(
        {
            **data,
            "created_by": actor.user_id,
            "creator_type": CreatorType.CUSTOMER if actor.role == Role.CUSTOMER else CreatorType.VENDOR,
            "created_at": now,
            "updated_at": now,
            "published_at": now if draft.status == ProposalStatus.ACTIVE else None,
        }
    )
    logger.info("Proposal %s created by %s (%s)", proposal.id, actor.user_id, proposal.status.value)
    return proposal


def edit_proposal(
    proposal: Proposal,
    actor: Actor,
    changes: dict[str, Any],
    *,
    now: Optional[datetime] = None,
    vocabulary: Optional[Vocabulary] = None,
) -> Proposal:
    """
    Apply creator edits. Responses, counters, status and identity are never
    touched, so existing responses stay attached and valid.
    """
    require_proposal_owner(proposal, actor, "update")
    if proposal.status.is_terminal:
        raise ConflictError(f"Cannot edit a {proposal.status.value} proposal")

    updates = {k: v for k, v in _field_names(ProposalDraft, changes).items() if k in EDITABLE_PROPOSAL_FIELDS}
    merged = {**proposal.model_dump(include=set(ProposalDraft.model_fields)), **updates}
    draft = parse_model(ProposalDraft, merged)
    validate_proposal(draft, vocabulary)

    now = _now(now)
    return proposal.model_copy(
        update={**{k: getattr(draft, k) for k in updates}, "updated_at": now}
    )


def transition_proposal(
    proposal: Proposal,
    target: ProposalStatus,
    actor: Actor,
    *,
    now: Optional[datetime] = None,
) -> Proposal:
    require_proposal_owner(proposal, actor, "update")
    check_proposal_transition(proposal.status, target)
    now = _now(now)
    update: dict[str, Any] = {"status": target, "updated_at": now}
    if target == ProposalStatus.ACTIVE and proposal.published_at is None:
        update["published_at"] = now
    logger.info("Proposal %s: %s -> %s", proposal.id, proposal.status.value, target.value)
    return proposal.model_copy(update=update)


def mark_fulfilled(proposal: Proposal, actor: Actor, *, now: Optional[datetime] = None) -> Proposal:
    """Close the need; this also closes its collaboration channel."""
    return transition_proposal(proposal, ProposalStatus.COMPLETED, actor, now=now)


def increment_views(proposal: Proposal) -> Proposal:
    return proposal.model_copy(update={"views_count": proposal.views_count + 1})


# --- responses ---------------------------------------------------------------


def submit_response(
    proposal: Proposal,
    actor: Actor,
    draft: ResponseDraft,
    *,
    now: Optional[datetime] = None,
) -> tuple[Proposal, Response]:
    """Attach a vendor pitch. Returns (updated proposal, new response)."""
    if actor.role not in (Role.VENDOR, Role.SUPERADMIN):
        raise AuthorizationError("Only vendors can submit responses")
    if proposal.creator_type != CreatorType.CUSTOMER:
        raise ValidationError("Only customer proposals can receive vendor responses")
    now = _now(now)
    if proposal.status != ProposalStatus.ACTIVE or proposal.is_expired(now):
        raise ConflictError("This proposal is not accepting responses")
    if proposal.response_by_vendor(actor.user_id) is not None:
        raise ConflictError("You have already submitted a response to this proposal")
    validate_response_draft(draft)

    response = Response.model_validate(
        {
            **draft.model_dump(),
            "proposal_text": draft.proposal_text.strip(),
            "proposal_id": proposal.id,
            "vendor_id": actor.user_id,
            "vendor_name": actor.name or "",
            "vendor_company": actor.company,
            "created_at": now,
            "updated_at": now,
        }
    )
    updated = proposal.model_copy(
        update={"responses": [*proposal.responses, response], "updated_at": now}
    )
    logger.info("Response %s submitted to proposal %s by %s", response.id, proposal.id, actor.user_id)
    return updated, response


def edit_response(
    proposal: Proposal,
    response_id: str,
    actor: Actor,
    changes: dict[str, Any],
    *,
    now: Optional[datetime] = None,
) -> tuple[Proposal, Response]:
    """Vendor edits their pitch; only allowed before the customer has acted on it."""
    response = get_response(proposal, response_id)
    require_response_owner(response, actor, "update")
    if response.status != ResponseStatus.PENDING:
        raise ConflictError(f"Cannot update a response that is already {response.status.value}")

    updates = {
        k: v
        for k, v in _field_names(ResponseDraft, changes).items()
        if k in EDITABLE_RESPONSE_FIELDS and v is not None
    }
    merged = {**response.model_dump(include=set(ResponseDraft.model_fields)), **updates}
    draft = parse_model(ResponseDraft, merged)
    validate_response_draft(draft)

    now = _now(now)
    updated = response.model_copy(
        update={**{k: getattr(draft, k) for k in updates}, "updated_at": now}
    )
    return _with_response(proposal, updated, now), updated


def withdraw_response(
    proposal: Proposal,
    response_id: str,
    actor: Actor,
    *,
    now: Optional[datetime] = None,
) -> Proposal:
    response = get_response(proposal, response_id)
    require_response_owner(response, actor, "withdraw")
    if response.status != ResponseStatus.PENDING:
        raise ConflictError(f"Cannot withdraw a response that is already {response.status.value}")
    now = _now(now)
    responses = [r for r in proposal.responses if r.id != response_id]
    logger.info("Response %s withdrawn from proposal %s", response_id, proposal.id)
    return proposal.model_copy(update={"responses": responses, "updated_at": now})


def record_view(
    proposal: Proposal,
    response_id: str,
    actor: Actor,
    *,
    now: Optional[datetime] = None,
) -> Proposal:
    """The proposal owner opened a response: pending becomes viewed, anything else is left alone."""
    response = get_response(proposal, response_id)
    require_proposal_owner(proposal, actor, "view responses of")
    if response.status != ResponseStatus.PENDING:
        return proposal
    now = _now(now)
    updated = response.model_copy(
        update={"status": ResponseStatus.VIEWED, "viewed_at": now, "updated_at": now}
    )
    return _with_response(proposal, updated, now)


def set_response_status(
    proposal: Proposal,
    response_id: str,
    target: ResponseStatus,
    actor: Actor,
    *,
    now: Optional[datetime] = None,
) -> tuple[Proposal, Response]:
    """Owner shortlists, declines or marks a response viewed."""
    response = get_response(proposal, response_id)
    require_proposal_owner(proposal, actor, "update responses of")
    check_response_transition(response.status, target)
    now = _now(now)
    update: dict[str, Any] = {"status": target, "updated_at": now}
    if target == ResponseStatus.VIEWED:
        update["viewed_at"] = now
    updated = response.model_copy(update=update)
    logger.info("Response %s: %s -> %s", response_id, response.status.value, target.value)
    return _with_response(proposal, updated, now), updated


def mark_hired(
    proposal: Proposal,
    response_id: str,
    actor: Actor,
    *,
    now: Optional[datetime] = None,
) -> tuple[Proposal, Response]:
    """
    Record that the owner hired a shortlisted vendor. The response status
    stays shortlisted; an active proposal moves to in_progress.
    """
    response = get_response(proposal, response_id)
    require_proposal_owner(proposal, actor, "hire for")
    if response.status != ResponseStatus.SHORTLISTED:
        raise ConflictError("Only a shortlisted response can be marked as hired")
    if response.hired_at is not None:
        raise ConflictError("Vendor is already marked as hired")
    if proposal.status.is_terminal:
        raise ConflictError(f"Proposal is {proposal.status.value}; no further changes are allowed")

    now = _now(now)
    updated = response.model_copy(update={"hired_at": now, "updated_at": now})
    result = _with_response(proposal, updated, now)
    if result.status == ProposalStatus.ACTIVE:
        result = transition_proposal(result, ProposalStatus.IN_PROGRESS, actor, now=now)
    logger.info("Response %s marked hired on proposal %s", response_id, proposal.id)
    return result, updated
