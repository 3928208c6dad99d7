"""In-process backend over the SQLite stores, enforcing the lifecycle rules."""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Optional

from proposal_hub import lifecycle
from proposal_hub.backends.base import MarketplaceBackend, logs_rejections
from proposal_hub.config import Settings
from proposal_hub.errors import NotFoundError, ValidationError
from proposal_hub.filtering.rules import is_unset
from proposal_hub.lifecycle.transitions import require_proposal_owner
from proposal_hub.models.actor import Actor
from proposal_hub.models.contracts import (
    Ack,
    AddResponseRequest,
    FetchProposalsRequest,
    FetchSolutionsRequest,
    ProposalEnvelope,
    ProposalListResponse,
    ResponseEnvelope,
    SolutionListResponse,
    UpdateResponseRequest,
    UpdateResponseStatusRequest,
)
from proposal_hub.models.proposal import Proposal, ProposalDraft, ProposalStatus
from proposal_hub.models.response import ResponseDraft
from proposal_hub.models.solution import Solution
from proposal_hub.models.validation import parse_model, parse_proposal
from proposal_hub.store import ProposalStore, SolutionStore

logger = logging.getLogger(__name__)


class LocalBackend(MarketplaceBackend):
    """
    Reference implementation of the backend contract. Loads the proposal,
    runs the pure lifecycle function and saves the result.
    """

    name = "local"

    def __init__(
        self,
        actor: Actor,
        settings: Optional[Settings] = None,
        *,
        db_path: Optional[str | Path] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        super().__init__(actor)
        self.settings = settings or Settings()
        path = db_path or self.settings.db_path
        self._proposals = ProposalStore(path)
        self._solutions = SolutionStore(path)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def _load(self, proposal_id: str) -> Proposal:
        proposal = self._proposals.get(proposal_id)
        if proposal is None:
            raise NotFoundError("Proposal not found")
        return proposal

    @logs_rejections
    def fetch_proposals(self, request: FetchProposalsRequest) -> ProposalListResponse:
        now = self._clock()
        candidates = self._proposals.query(
            creator_type=request.creator_type.value if request.creator_type else None,
            status=request.status.value if request.status else None,
            industry=None if is_unset(request.industry) else request.industry,
            category=None if is_unset(request.category) else request.category,
            created_by=request.created_by,
        )
        visible = [
            p
            for p in candidates
            if lifecycle.is_visible(p, self.actor)
            and not lifecycle.hidden_as_expired(p, request.status, now)
        ]
        start = max(request.page - 1, 0) * request.limit
        page = visible[start : start + request.limit]
        return ProposalListResponse(proposals=page, count=len(page), total=len(visible))

    @logs_rejections
    def fetch_proposal(self, proposal_id: str) -> ProposalEnvelope:
        proposal = self._load(proposal_id)
        lifecycle.ensure_visible(proposal, self.actor)
        proposal = lifecycle.increment_views(proposal)
        self._proposals.save(proposal)
        return ProposalEnvelope(proposal=proposal)

    @logs_rejections
    def create_proposal(self, draft: ProposalDraft | dict[str, Any]) -> ProposalEnvelope:
        if isinstance(draft, dict):
            draft = parse_proposal(draft, self.settings.vocabulary)
        proposal = lifecycle.create_proposal(
            draft,
            self.actor,
            now=self._clock(),
            vocabulary=self.settings.vocabulary,
            expiry_days=self.settings.default_expiry_days,
        )
        self._proposals.save(proposal)
        return ProposalEnvelope(proposal=proposal)

    @logs_rejections
    def update_proposal(self, proposal_id: str, changes: dict[str, Any]) -> ProposalEnvelope:
        """Field edits, plus a status change when the payload carries one."""
        proposal = self._load(proposal_id)
        now = self._clock()
        status = changes.get("status")
        if status is not None:
            try:
                status = ProposalStatus(status)
            except ValueError as e:
                raise ValidationError(f"Invalid status: {status}") from e
        edits = {k: v for k, v in changes.items() if k != "status"}
        if edits:
            proposal = lifecycle.edit_proposal(
                proposal, self.actor, edits, now=now, vocabulary=self.settings.vocabulary
            )
        if status is not None and status != proposal.status:
            proposal = lifecycle.transition_proposal(proposal, status, self.actor, now=now)
        self._proposals.save(proposal)
        return ProposalEnvelope(proposal=proposal)

    @logs_rejections
    def delete_proposal(self, proposal_id: str) -> Ack:
        proposal = self._load(proposal_id)
        require_proposal_owner(proposal, self.actor, "delete")
        self._proposals.delete(proposal_id)
        logger.info("Proposal %s deleted by %s", proposal_id, self.actor.user_id)
        return Ack(message="Proposal deleted successfully")

    @logs_rejections
    def add_response(self, request: AddResponseRequest) -> ResponseEnvelope:
        proposal = self._load(request.proposal_id)
        draft = parse_model(ResponseDraft, request.model_dump(exclude={"proposal_id"}))
        proposal, response = lifecycle.submit_response(proposal, self.actor, draft, now=self._clock())
        self._proposals.save(proposal)
        return ResponseEnvelope(response=response)

    @logs_rejections
    def update_response(self, request: UpdateResponseRequest) -> ResponseEnvelope:
        proposal = self._load(request.proposal_id)
        changes = request.model_dump(exclude={"proposal_id", "response_id"}, exclude_none=True)
        proposal, response = lifecycle.edit_response(
            proposal, request.response_id, self.actor, changes, now=self._clock()
        )
        self._proposals.save(proposal)
        return ResponseEnvelope(response=response)

    @logs_rejections
    def withdraw_response(self, proposal_id: str, response_id: str) -> Ack:
        proposal = self._load(proposal_id)
        proposal = lifecycle.withdraw_response(proposal, response_id, self.actor, now=self._clock())
        self._proposals.save(proposal)
        return Ack(message="Response withdrawn")

    @logs_rejections
    def update_response_status(self, request: UpdateResponseStatusRequest) -> ResponseEnvelope:
        proposal = self._load(request.proposal_id)
        proposal, response = lifecycle.set_response_status(
            proposal, request.response_id, request.status, self.actor, now=self._clock()
        )
        self._proposals.save(proposal)
        return ResponseEnvelope(response=response)

    @logs_rejections
    def mark_hired(self, proposal_id: str, response_id: str) -> ProposalEnvelope:
        proposal = self._load(proposal_id)
        proposal, _ = lifecycle.mark_hired(proposal, response_id, self.actor, now=self._clock())
        self._proposals.save(proposal)
        return ProposalEnvelope(proposal=proposal)

    @logs_rejections
    def mark_fulfilled(self, proposal_id: str) -> ProposalEnvelope:
        proposal = self._load(proposal_id)
        proposal = lifecycle.mark_fulfilled(proposal, self.actor, now=self._clock())
        self._proposals.save(proposal)
        return ProposalEnvelope(proposal=proposal)

    def fetch_solutions(self, request: FetchSolutionsRequest) -> SolutionListResponse:
        solutions = self._solutions.find(
            category=request.category,
            industry=request.industry,
            limit=request.limit,
        )
        return SolutionListResponse(solutions=solutions)

    def add_solution(self, solution: Solution) -> Solution:
        """Register a matching candidate (seeding and CLI use)."""
        return self._solutions.add(solution)
