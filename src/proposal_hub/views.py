"""
Role-specific feeds over a backend.

Each view keeps the last fetched proposals in memory. Mutations are applied
to that list first with the pure lifecycle functions, so an invalid action
fails before any backend call, then sent to the backend, then the list is
refetched. Whatever the refetch returns replaces the optimistic copy.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional, TypeVar

from proposal_hub import lifecycle
from proposal_hub.backends.base import MarketplaceBackend
from proposal_hub.config import Settings
from proposal_hub.errors import NotFoundError
from proposal_hub.filtering import (
    ResponseGroup,
    ResponseRow,
    compare_rows,
    filter_proposals,
    filter_responses,
    flatten_responses,
    group_by_proposal,
    rows_by_stage,
    sort_newest_first,
    toggle_compare,
)
from proposal_hub.filtering.rules import is_unset
from proposal_hub.lifecycle.collaboration import PipelineStage
from proposal_hub.matching import VendorMatch, suggest_vendors
from proposal_hub.models.contracts import (
    AddResponseRequest,
    FetchProposalsRequest,
    UpdateResponseRequest,
    UpdateResponseStatusRequest,
)
from proposal_hub.models.filters import FilterState
from proposal_hub.models.proposal import CreatorType, Proposal, ProposalStatus
from proposal_hub.models.response import ResponseDraft, ResponseStatus
from proposal_hub.models.validation import parse_model

logger = logging.getLogger(__name__)

T = TypeVar("T")

class _FeedView(ABC):
    """Shared fetch / filter / optimistic-update plumbing."""

    def __init__(
        self,
        backend: MarketplaceBackend,
        settings: Optional[Settings] = None,
        filters: Optional[FilterState] = None,
    ):
        self.backend = backend
        self.settings = settings or Settings()
        self.filters = filters or FilterState()
        self.proposals: list[Proposal] = []

    @property
    def actor(self):
        return self.backend.actor

    @abstractmethod
    def _request(self) -> FetchProposalsRequest:
        """Server-side query for this feed."""

    def refresh(self) -> list[Proposal]:
        result = self.backend.fetch_proposals(self._request())
        self.proposals = result.proposals
        logger.debug("%s refreshed: %d proposals", type(self).__name__, len(self.proposals))
        return self.proposals

    def set_filters(self, filters: FilterState) -> None:
        self.filters = filters

    def proposal(self, proposal_id: str) -> Proposal:
        for p in self.proposals:
            if p.id == proposal_id:
                return p
        raise NotFoundError("Proposal not found")

    def _replace(self, updated: Proposal) -> None:
        self.proposals = [updated if p.id == updated.id else p for p in self.proposals]

    def _mutate(self, optimistic: Callable[[Proposal], Proposal], proposal_id: str, remote: Callable[[], T]) -> T:
        """Apply locally, send, then refetch regardless of the outcome."""
        self._replace(optimistic(self.proposal(proposal_id)))
        try:
            return remote()
        finally:
            self.refresh()


class PostingsView(_FeedView):
    """A customer's own postings with vendor suggestions."""

    def _request(self) -> FetchProposalsRequest:
        return FetchProposalsRequest(
            created_by=self.actor.user_id,
            creator_type=CreatorType.CUSTOMER,
            limit=self.settings.feed_fetch_limit,
        )

    def visible(self) -> list[Proposal]:
        return sort_newest_first(filter_proposals(self.proposals, self.filters))

    def suggestions(self, proposal_id: str) -> list[VendorMatch]:
        return suggest_vendors(
            self.proposal(proposal_id),
            self.backend,
            limit=self.settings.match_limit,
            fetch_limit=self.settings.match_fetch_limit,
        )

    def cancel(self, proposal_id: str) -> Proposal:
        return self._mutate(
            lambda p: lifecycle.transition_proposal(p, ProposalStatus.CANCELLED, self.actor),
            proposal_id,
            lambda: self.backend.update_proposal(
                proposal_id, {"status": ProposalStatus.CANCELLED.value}
            ).proposal,
        )

    def fulfill(self, proposal_id: str) -> Proposal:
        return self._mutate(
            lambda p: lifecycle.mark_fulfilled(p, self.actor),
            proposal_id,
            lambda: self.backend.mark_fulfilled(proposal_id).proposal,
        )


class FindWorkView(_FeedView):
    """Active customer needs a vendor can pitch on."""

    def _request(self) -> FetchProposalsRequest:
        industry = None if is_unset(self.filters.industry) else self.filters.industry
        return FetchProposalsRequest(
            creator_type=CreatorType.CUSTOMER,
            status=ProposalStatus.ACTIVE,
            industry=industry,
            limit=self.settings.feed_fetch_limit,
        )

    def set_filters(self, filters: FilterState) -> None:
        # industry is applied server side; other facets only filter locally
        industry_changed = filters.industry != self.filters.industry
        self.filters = filters
        if industry_changed:
            self.refresh()

    def visible(self) -> list[Proposal]:
        return sort_newest_first(filter_proposals(self.proposals, self.filters))

    def already_responded(self, proposal_id: str) -> bool:
        return self.proposal(proposal_id).response_by_vendor(self.actor.user_id) is not None

    def pitch(self, proposal_id: str, draft: ResponseDraft | dict[str, Any]):
        if isinstance(draft, dict):
            draft = parse_model(ResponseDraft, draft)
        request = AddResponseRequest(proposal_id=proposal_id, **draft.model_dump())
        return self._mutate(
            lambda p: lifecycle.submit_response(p, self.actor, draft)[0],
            proposal_id,
            lambda: self.backend.add_response(request).response,
        )


class MyProposalsView(_FeedView):
    """A vendor's submitted responses as a pipeline board."""

    def _request(self) -> FetchProposalsRequest:
        return FetchProposalsRequest(
            creator_type=CreatorType.CUSTOMER,
            limit=self.settings.feed_fetch_limit,
        )

    def rows(self) -> list[ResponseRow]:
        rows = flatten_responses(self.proposals, vendor_id=self.actor.user_id)
        return filter_responses(rows, self.filters)

    def board(self) -> dict[PipelineStage, list[ResponseRow]]:
        return rows_by_stage(self.rows())

    def edit(self, proposal_id: str, response_id: str, changes: dict[str, Any]):
        request = UpdateResponseRequest(proposal_id=proposal_id, response_id=response_id, **changes)
        return self._mutate(
            lambda p: lifecycle.edit_response(p, response_id, self.actor, changes)[0],
            proposal_id,
            lambda: self.backend.update_response(request).response,
        )

    def withdraw(self, proposal_id: str, response_id: str):
        return self._mutate(
            lambda p: lifecycle.withdraw_response(p, response_id, self.actor),
            proposal_id,
            lambda: self.backend.withdraw_response(proposal_id, response_id),
        )


class VendorResponsesView(_FeedView):
    """Responses to a customer's postings, grouped per posting, with quick compare."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.compare_selection: tuple[str, ...] = ()
        self.compare_active = False

    def _request(self) -> FetchProposalsRequest:
        return FetchProposalsRequest(
            created_by=self.actor.user_id,
            creator_type=CreatorType.CUSTOMER,
            limit=self.settings.feed_fetch_limit,
        )

    def rows(self) -> list[ResponseRow]:
        rows = filter_responses(flatten_responses(self.proposals), self.filters)
        return compare_rows(
            rows, self.compare_selection, self.compare_active, self.settings.compare_limit
        )

    def groups(self) -> list[ResponseGroup]:
        return group_by_proposal(self.rows())

    def toggle_compare(self, response_id: str) -> tuple[str, ...]:
        self.compare_selection = toggle_compare(
            self.compare_selection, response_id, self.settings.compare_limit
        )
        return self.compare_selection

    def set_compare_mode(self, active: bool) -> None:
        self.compare_active = active
        if not active:
            self.compare_selection = ()

    def open(self, proposal_id: str, response_id: str):
        return self._mutate(
            lambda p: lifecycle.record_view(p, response_id, self.actor),
            proposal_id,
            lambda: self.backend.open_response(proposal_id, response_id).response,
        )

    def _set_status(self, proposal_id: str, response_id: str, status: ResponseStatus):
        request = UpdateResponseStatusRequest(
            proposal_id=proposal_id, response_id=response_id, status=status
        )
        return self._mutate(
            lambda p: lifecycle.set_response_status(p, response_id, status, self.actor)[0],
            proposal_id,
            lambda: self.backend.update_response_status(request).response,
        )

    def shortlist(self, proposal_id: str, response_id: str):
        return self._set_status(proposal_id, response_id, ResponseStatus.SHORTLISTED)

    def decline(self, proposal_id: str, response_id: str):
        return self._set_status(proposal_id, response_id, ResponseStatus.REJECTED)

    def hire(self, proposal_id: str, response_id: str) -> Proposal:
        return self._mutate(
            lambda p: lifecycle.mark_hired(p, response_id, self.actor)[0],
            proposal_id,
            lambda: self.backend.mark_hired(proposal_id, response_id).proposal,
        )
