"""HTTP backend for the marketplace REST API.

The API speaks camelCase JSON and wraps every payload in an envelope
({"success": true, "proposal": {...}}). Mutating calls are checked against
the same lifecycle rules used locally before anything is sent, so an invalid
transition fails fast with a typed error instead of a round trip.
"""

import logging
import os
from typing import Any, Optional

import httpx
from pydantic_core import to_jsonable_python

from proposal_hub import lifecycle
from proposal_hub.backends.base import MarketplaceBackend, logs_rejections
from proposal_hub.config import Settings
from proposal_hub.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
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
from proposal_hub.models.validation import parse_model, parse_proposal

logger = logging.getLogger(__name__)

# 400 messages from the API that describe a state conflict rather than bad input
_CONFLICT_MARKERS = ("already submitted", "not accepting", "cannot update", "cannot withdraw")


class HttpBackend(MarketplaceBackend):
    """Client for the marketplace API (/proposals, /solutions)."""

    name = "http"

    DEFAULT_HEADERS = {
        "Content-Type": "application/json",
        "Accept": "application/json",
        "User-Agent": "proposal-hub/0.1",
    }

    def __init__(
        self,
        actor: Actor,
        settings: Optional[Settings] = None,
        *,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        client: Optional[httpx.Client] = None,
    ):
        """
        Args:
            actor: Signed-in user the token belongs to
            settings: Timeout, base URL and vocabulary
            base_url: Override API root (e.g. http://localhost:5000/api)
            token: Bearer token; falls back to settings / PROPOSAL_HUB_API_TOKEN
            client: Optional httpx client (tests pass one with a MockTransport)
        """
        super().__init__(actor)
        self.settings = settings or Settings()
        base_url = (base_url or self.settings.api_base_url).rstrip("/")
        token = token or self.settings.api_token or os.environ.get("PROPOSAL_HUB_API_TOKEN")
        headers = dict(self.DEFAULT_HEADERS)
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = client or httpx.Client(
            base_url=base_url,
            timeout=self.settings.http_timeout,
            headers=headers,
        )

    def _request(self, method: str, path: str, **kwargs) -> dict[str, Any]:
        resp = self._client.request(method, path, **kwargs)
        if resp.status_code >= 400:
            self._raise_for_status(resp)
        return resp.json()

    def _raise_for_status(self, resp: httpx.Response) -> None:
        """Translate API error responses into typed errors."""
        try:
            body = resp.json()
        except ValueError:
            body = {}
        message = body.get("message") or body.get("error") or resp.reason_phrase or "Request failed"
        status = resp.status_code
        logger.warning("%s %s -> %d: %s", resp.request.method, resp.request.url, status, message)
        if status in (401, 403):
            raise AuthorizationError(message)
        if status == 404:
            raise NotFoundError(message)
        if status == 409:
            raise ConflictError(message)
        if status == 422:
            problems = [e.get("message", str(e)) for e in body.get("errors", []) if isinstance(e, dict)]
            raise ValidationError(message, problems or None)
        if status == 400:
            if any(marker in message.lower() for marker in _CONFLICT_MARKERS):
                raise ConflictError(message)
            raise ValidationError(message)
        resp.raise_for_status()

    def _current(self, proposal_id: str) -> Proposal:
        """
        Fetch the proposal a mutation is checked against.

        The API counts every GET /proposals/{id} as a view, so each
        pre-checked mutation adds exactly one to viewsCount.
        """
        return self.fetch_proposal(proposal_id).proposal

    @logs_rejections
    def fetch_proposals(self, request: FetchProposalsRequest) -> ProposalListResponse:
        params = request.model_dump(mode="json", by_alias=True, exclude_none=True)
        return parse_model(ProposalListResponse, self._request("GET", "/proposals", params=params))

    @logs_rejections
    def fetch_proposal(self, proposal_id: str) -> ProposalEnvelope:
        return parse_model(ProposalEnvelope, self._request("GET", f"/proposals/{proposal_id}"))

    @logs_rejections
    def create_proposal(self, draft: ProposalDraft | dict[str, Any]) -> ProposalEnvelope:
        if isinstance(draft, dict):
            draft = parse_proposal(draft, self.settings.vocabulary)
        # Same checks the server applies, run before the request
        lifecycle.create_proposal(draft, self.actor, vocabulary=self.settings.vocabulary)
        payload = draft.model_dump(mode="json", by_alias=True, exclude_none=True)
        return parse_model(ProposalEnvelope, self._request("POST", "/proposals", json=payload))

    @logs_rejections
    def update_proposal(self, proposal_id: str, changes: dict[str, Any]) -> ProposalEnvelope:
        current = self._current(proposal_id)
        status = changes.get("status")
        if status is not None:
            try:
                status = ProposalStatus(status)
            except ValueError as e:
                raise ValidationError(f"Invalid status: {status}") from e
        edits = {k: v for k, v in changes.items() if k != "status"}
        if edits:
            current = lifecycle.edit_proposal(
                current, self.actor, edits, vocabulary=self.settings.vocabulary
            )
        if status is not None and status != current.status:
            lifecycle.transition_proposal(current, status, self.actor)
        payload = {**changes, "status": status.value} if status is not None else changes
        return parse_model(
            ProposalEnvelope,
            self._request("PUT", f"/proposals/{proposal_id}", json=to_jsonable_python(payload)),
        )

    @logs_rejections
    def delete_proposal(self, proposal_id: str) -> Ack:
        require_proposal_owner(self._current(proposal_id), self.actor, "delete")
        return parse_model(Ack, self._request("DELETE", f"/proposals/{proposal_id}"))

    @logs_rejections
    def add_response(self, request: AddResponseRequest) -> ResponseEnvelope:
        current = self._current(request.proposal_id)
        draft = parse_model(ResponseDraft, request.model_dump(exclude={"proposal_id"}))
        lifecycle.submit_response(current, self.actor, draft)
        payload = request.model_dump(mode="json", by_alias=True, exclude_none=True, exclude={"proposal_id"})
        return parse_model(
            ResponseEnvelope,
            self._request("POST", f"/proposals/{request.proposal_id}/responses", json=payload),
        )

    @logs_rejections
    def update_response(self, request: UpdateResponseRequest) -> ResponseEnvelope:
        current = self._current(request.proposal_id)
        changes = request.model_dump(exclude={"proposal_id", "response_id"}, exclude_none=True)
        lifecycle.edit_response(current, request.response_id, self.actor, changes)
        payload = request.model_dump(
            mode="json", by_alias=True, exclude_none=True, exclude={"proposal_id", "response_id"}
        )
        return parse_model(
            ResponseEnvelope,
            self._request(
                "PUT",
                f"/proposals/{request.proposal_id}/responses/{request.response_id}/update",
                json=payload,
            ),
        )

    @logs_rejections
    def withdraw_response(self, proposal_id: str, response_id: str) -> Ack:
        lifecycle.withdraw_response(self._current(proposal_id), response_id, self.actor)
        return parse_model(
            Ack,
            self._request("DELETE", f"/proposals/{proposal_id}/responses/{response_id}"),
        )

    @logs_rejections
    def update_response_status(self, request: UpdateResponseStatusRequest) -> ResponseEnvelope:
        current = self._current(request.proposal_id)
        lifecycle.set_response_status(current, request.response_id, request.status, self.actor)
        return parse_model(
            ResponseEnvelope,
            self._request(
                "PUT",
                f"/proposals/{request.proposal_id}/responses/{request.response_id}",
                json={"status": request.status.value},
            ),
        )

    @logs_rejections
    def mark_hired(self, proposal_id: str, response_id: str) -> ProposalEnvelope:
        lifecycle.mark_hired(self._current(proposal_id), response_id, self.actor)
        return parse_model(
            ProposalEnvelope,
            self._request("PUT", f"/proposals/{proposal_id}/responses/{response_id}/hire"),
        )

    @logs_rejections
    def mark_fulfilled(self, proposal_id: str) -> ProposalEnvelope:
        lifecycle.mark_fulfilled(self._current(proposal_id), self.actor)
        return parse_model(
            ProposalEnvelope,
            self._request("PUT", f"/proposals/{proposal_id}", json={"status": ProposalStatus.COMPLETED.value}),
        )

    def fetch_solutions(self, request: FetchSolutionsRequest) -> SolutionListResponse:
        params = request.model_dump(mode="json", by_alias=True, exclude_none=True)
        return parse_model(SolutionListResponse, self._request("GET", "/solutions", params=params))
