"""Proposal and response lifecycle rules."""

from proposal_hub.lifecycle.collaboration import (
    CollaborationState,
    PipelineStage,
    collaboration_state,
    has_active_chat,
    pipeline_stage,
)
from proposal_hub.lifecycle.transitions import (
    PROPOSAL_TRANSITIONS,
    RESPONSE_TRANSITIONS,
    can_transition_proposal,
    can_transition_response,
    create_proposal,
    edit_proposal,
    edit_response,
    increment_views,
    mark_fulfilled,
    mark_hired,
    record_view,
    set_response_status,
    submit_response,
    transition_proposal,
    withdraw_response,
)
from proposal_hub.lifecycle.visibility import ensure_visible, hidden_as_expired, is_visible

__all__ = [
    "PROPOSAL_TRANSITIONS",
    "RESPONSE_TRANSITIONS",
    "CollaborationState",
    "PipelineStage",
    "can_transition_proposal",
    "can_transition_response",
    "collaboration_state",
    "create_proposal",
    "edit_proposal",
    "edit_response",
    "ensure_visible",
    "has_active_chat",
    "hidden_as_expired",
    "increment_views",
    "is_visible",
    "mark_fulfilled",
    "mark_hired",
    "pipeline_stage",
    "record_view",
    "set_response_status",
    "submit_response",
    "transition_proposal",
    "withdraw_response",
]
