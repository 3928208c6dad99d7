"""Abstract base class for marketplace backends."""

import functools
import logging
from abc import ABC, abstractmethod
from typing import Any

from proposal_hub.errors import NotFoundError, ProposalHubError
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
from proposal_hub.models.proposal import ProposalDraft
from proposal_hub.models.response import ResponseStatus

logger = logging.getLogger(__name__)


def logs_rejections(method):
    """Log typed failures at WARNING and re-raise them unchanged."""

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except ProposalHubError as e:
            logger.warning(
                "%s.%s rejected for %s: %s",
                self.name,
                method.__name__,
                self.actor.user_id,
                e.message,
            )
            raise

    return wrapper


class MarketplaceBackend(ABC):
    """
    The request/response contract the view layer talks to.
    Every call acts on behalf of `actor`, the signed-in user.
    """

    name: str = ""

    def __init__(self, actor: Actor):
        self.actor = actor

    @abstractmethod
    def fetch_proposals(self, request: FetchProposalsRequest) -> ProposalListResponse:
        """List proposals visible to the actor, newest first."""

    @abstractmethod
    def fetch_proposal(self, proposal_id: str) -> ProposalEnvelope:
        """One proposal with its responses; counts as a view."""

    @abstractmethod
    def create_proposal(self, draft: ProposalDraft | dict[str, Any]) -> ProposalEnvelope:
        pass

    @abstractmethod
    def update_proposal(self, proposal_id: str, changes: dict[str, Any]) -> ProposalEnvelope:
        pass

    @abstractmethod
    def delete_proposal(self, proposal_id: str) -> Ack:
        pass

    @abstractmethod
    def add_response(self, request: AddResponseRequest) -> ResponseEnvelope:
        pass

    @abstractmethod
    def update_response(self, request: UpdateResponseRequest) -> ResponseEnvelope:
        pass

    @abstractmethod
    def withdraw_response(self, proposal_id: str, response_id: str) -> Ack:
        pass

    @abstractmethod
    def update_response_status(self, request: UpdateResponseStatusRequest) -> ResponseEnvelope:
        pass

    @abstractmethod
    def mark_hired(self, proposal_id: str, response_id: str) -> ProposalEnvelope:
        pass

    @abstractmethod
    def mark_fulfilled(self, proposal_id: str) -> ProposalEnvelope:
        pass

    @abstractmethod
    def fetch_solutions(self, request: FetchSolutionsRequest) -> SolutionListResponse:
        pass

    def open_response(self, proposal_id: str, response_id: str) -> ResponseEnvelope:
        """
        The proposal owner opens a response. The first view moves it from
        pending to viewed; later views leave it alone.
        """
        proposal = self.fetch_proposal(proposal_id).proposal
        response = proposal.find_response(response_id)
        if response is None:
            raise NotFoundError("Response not found")
        if response.status == ResponseStatus.PENDING:
            return self.update_response_status(
                UpdateResponseStatusRequest(
                    proposal_id=proposal_id,
                    response_id=response_id,
                    status=ResponseStatus.VIEWED,
                )
            )
        return ResponseEnvelope(response=response)
