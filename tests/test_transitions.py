"""Unit tests for the proposal and response state machines."""

from datetime import timedelta

import pytest
from conftest import NOW, make_proposal

from proposal_hub import lifecycle
from proposal_hub.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from proposal_hub.lifecycle.transitions import PROPOSAL_TRANSITIONS, RESPONSE_TRANSITIONS
from proposal_hub.models.actor import Actor
from proposal_hub.models.proposal import CreatorType, Proposal, ProposalDraft, ProposalStatus
from proposal_hub.models.response import Response, ResponseDraft, ResponseStatus


def _make_response(**kwargs) -> Response:
    defaults = {
        "id": "resp-1",
        "proposal_id": "prop-1",
        "vendor_id": "vend-1",
        "vendor_name": "Priya Nair",
        "proposal_text": "Our radiology summarizer is live in three hospitals.",
        "created_at": NOW,
    }
    defaults.update(kwargs)
    return Response.model_validate(defaults)


def _with_responses(*responses: Response, **kwargs) -> Proposal:
    return make_proposal(responses=list(responses), **kwargs)


def _draft(**kwargs) -> ProposalDraft:
    defaults = {
        "title": "Automate Radiology Summaries",
        "description": "Summarize radiology reports.",
        "category": "Computer Vision",
        "industry": "Healthcare",
        "status": "active",
    }
    defaults.update(kwargs)
    return ProposalDraft.model_validate(defaults)


class TestTransitionTables:
    """Tests for the transition tables."""

    def test_terminal_proposal_states_have_no_exits(self) -> None:
        assert PROPOSAL_TRANSITIONS[ProposalStatus.COMPLETED] == frozenset()
        assert PROPOSAL_TRANSITIONS[ProposalStatus.CANCELLED] == frozenset()

    def test_terminal_response_states_have_no_exits(self) -> None:
        assert RESPONSE_TRANSITIONS[ResponseStatus.SHORTLISTED] == frozenset()
        assert RESPONSE_TRANSITIONS[ResponseStatus.REJECTED] == frozenset()

    def test_every_status_has_an_entry(self) -> None:
        assert set(PROPOSAL_TRANSITIONS) == set(ProposalStatus)
        assert set(RESPONSE_TRANSITIONS) == set(ResponseStatus)

    def test_no_path_back_to_pending(self) -> None:
        assert not any(ResponseStatus.PENDING in targets for targets in RESPONSE_TRANSITIONS.values())


class TestCreateProposal:
    """Tests for create_proposal."""

    def test_creates_owned_active_proposal(self, customer: Actor) -> None:
        proposal = lifecycle.create_proposal(_draft(), customer, now=NOW)
        assert proposal.created_by == "cust-1"
        assert proposal.creator_type == CreatorType.CUSTOMER
        assert proposal.status == ProposalStatus.ACTIVE
        assert proposal.published_at == NOW
        assert proposal.responses_count == 0
        assert proposal.contact_name == "Dana Reyes"

    def test_default_expiry(self, customer: Actor) -> None:
        proposal = lifecycle.create_proposal(_draft(), customer, now=NOW)
        assert proposal.expires_at == NOW + timedelta(days=30)

    def test_draft_is_not_published(self, customer: Actor) -> None:
        proposal = lifecycle.create_proposal(_draft(status="draft"), customer, now=NOW)
        assert proposal.status == ProposalStatus.DRAFT
        assert proposal.published_at is None

    def test_vendor_posting_is_vendor_created(self, vendor: Actor) -> None:
        proposal = lifecycle.create_proposal(_draft(), vendor, now=NOW)
        assert proposal.creator_type == CreatorType.VENDOR

    def test_tags_derived_when_missing(self, customer: Actor) -> None:
        proposal = lifecycle.create_proposal(_draft(), customer, now=NOW)
        assert "healthcare" in proposal.tags

    def test_budget_min_above_max_rejected(self, customer: Actor) -> None:
        draft = _draft(requirements={"budget": {"min": 5000, "max": 2000}})
        with pytest.raises(ValidationError, match="Maximum budget must be greater than minimum budget"):
            lifecycle.create_proposal(draft, customer, now=NOW)

    def test_cannot_start_completed(self, customer: Actor) -> None:
        with pytest.raises(ValidationError):
            lifecycle.create_proposal(_draft(status="completed"), customer, now=NOW)


class TestEditProposal:
    """Tests for edit_proposal."""

    def test_owner_edits_fields(self, customer: Actor) -> None:
        proposal = _with_responses(_make_response())
        updated = lifecycle.edit_proposal(proposal, customer, {"title": "New title"}, now=NOW)
        assert updated.title == "New title"
        assert updated.responses_count == 1
        assert proposal.title == "Automate Radiology Summaries"

    def test_camel_case_keys(self, customer: Actor) -> None:
        updated = lifecycle.edit_proposal(make_proposal(), customer, {"contactEmail": "d@x.io"}, now=NOW)
        assert updated.contact_email == "d@x.io"

    def test_status_is_not_editable(self, customer: Actor) -> None:
        updated = lifecycle.edit_proposal(make_proposal(), customer, {"status": "completed"}, now=NOW)
        assert updated.status == ProposalStatus.ACTIVE

    def test_non_owner_rejected(self, other_customer: Actor) -> None:
        with pytest.raises(AuthorizationError):
            lifecycle.edit_proposal(make_proposal(), other_customer, {"title": "Hijack"}, now=NOW)

    def test_superadmin_may_edit(self, superadmin: Actor) -> None:
        updated = lifecycle.edit_proposal(make_proposal(), superadmin, {"title": "Fixed"}, now=NOW)
        assert updated.title == "Fixed"

    def test_terminal_proposal_rejected(self, customer: Actor) -> None:
        with pytest.raises(ConflictError):
            lifecycle.edit_proposal(
                make_proposal(status="completed"), customer, {"title": "Late"}, now=NOW
            )

    def test_invalid_edit_rejected(self, customer: Actor) -> None:
        with pytest.raises(ValidationError):
            lifecycle.edit_proposal(
                make_proposal(),
                customer,
                {"requirements": {"budget": {"min": 5000, "max": 2000}}},
                now=NOW,
            )


class TestTransitionProposal:
    """Tests for transition_proposal and mark_fulfilled."""

    def test_draft_to_active_publishes(self, customer: Actor) -> None:
        proposal = make_proposal(status="draft", published_at=None)
        updated = lifecycle.transition_proposal(proposal, ProposalStatus.ACTIVE, customer, now=NOW)
        assert updated.status == ProposalStatus.ACTIVE
        assert updated.published_at == NOW

    def test_active_to_completed(self, customer: Actor) -> None:
        updated = lifecycle.mark_fulfilled(make_proposal(), customer, now=NOW)
        assert updated.status == ProposalStatus.COMPLETED

    @pytest.mark.parametrize("terminal", ["completed", "cancelled"])
    def test_terminal_rejects_everything(self, customer: Actor, terminal: str) -> None:
        proposal = make_proposal(status=terminal)
        for target in ProposalStatus:
            with pytest.raises(ConflictError):
                lifecycle.transition_proposal(proposal, target, customer, now=NOW)

    def test_draft_cannot_jump_to_in_progress(self, customer: Actor) -> None:
        with pytest.raises(ConflictError):
            lifecycle.transition_proposal(
                make_proposal(status="draft"), ProposalStatus.IN_PROGRESS, customer, now=NOW
            )

    def test_non_owner_cannot_transition(self, other_customer: Actor) -> None:
        with pytest.raises(AuthorizationError):
            lifecycle.transition_proposal(make_proposal(), ProposalStatus.CANCELLED, other_customer, now=NOW)

    def test_increment_views(self) -> None:
        proposal = make_proposal(views_count=2)
        assert lifecycle.increment_views(proposal).views_count == 3
        assert proposal.views_count == 2


class TestSubmitResponse:
    """Tests for submit_response."""

    def test_attaches_response(self, vendor: Actor) -> None:
        proposal = make_proposal()
        updated, response = lifecycle.submit_response(
            proposal, vendor, ResponseDraft(proposal_text="We can do it"), now=NOW
        )
        assert response.status == ResponseStatus.PENDING
        assert response.vendor_id == "vend-1"
        assert response.vendor_company == "ScanSense"
        assert response.proposal_id == "prop-1"
        assert updated.responses_count == 1
        assert proposal.responses_count == 0

    def test_duplicate_vendor_response_conflicts(self, vendor: Actor) -> None:
        """Response B from the same vendor fails; response A is unchanged."""
        proposal, first = lifecycle.submit_response(
            make_proposal(), vendor, ResponseDraft(proposal_text="Response A"), now=NOW
        )
        with pytest.raises(ConflictError):
            lifecycle.submit_response(proposal, vendor, ResponseDraft(proposal_text="Response B"), now=NOW)
        assert proposal.responses_count == 1
        assert proposal.find_response(first.id).proposal_text == "Response A"

    def test_second_vendor_may_respond(self, vendor: Actor, other_vendor: Actor) -> None:
        proposal, _ = lifecycle.submit_response(make_proposal(), vendor, ResponseDraft(proposal_text="A"), now=NOW)
        proposal, _ = lifecycle.submit_response(proposal, other_vendor, ResponseDraft(proposal_text="B"), now=NOW)
        assert proposal.responses_count == 2

    def test_customer_cannot_respond(self, other_customer: Actor) -> None:
        with pytest.raises(AuthorizationError):
            lifecycle.submit_response(make_proposal(), other_customer, ResponseDraft(proposal_text="x"), now=NOW)

    def test_vendor_posting_rejects_responses(self, vendor: Actor) -> None:
        proposal = make_proposal(creator_type="vendor", created_by="vend-9")
        with pytest.raises(ValidationError):
            lifecycle.submit_response(proposal, vendor, ResponseDraft(proposal_text="x"), now=NOW)

    @pytest.mark.parametrize("status", ["draft", "in_progress", "completed", "cancelled"])
    def test_inactive_proposal_rejects_responses(self, vendor: Actor, status: str) -> None:
        with pytest.raises(ConflictError):
            lifecycle.submit_response(
                make_proposal(status=status), vendor, ResponseDraft(proposal_text="x"), now=NOW
            )

    def test_expired_proposal_rejects_responses(self, vendor: Actor) -> None:
        proposal = make_proposal(expires_at=NOW - timedelta(days=1))
        with pytest.raises(ConflictError):
            lifecycle.submit_response(proposal, vendor, ResponseDraft(proposal_text="x"), now=NOW)

    def test_blank_text_rejected(self, vendor: Actor) -> None:
        with pytest.raises(ValidationError):
            lifecycle.submit_response(make_proposal(), vendor, ResponseDraft(proposal_text=" "), now=NOW)


class TestEditAndWithdrawResponse:
    """Tests for edit_response and withdraw_response."""

    def test_edit_pending(self, vendor: Actor) -> None:
        proposal = _with_responses(_make_response())
        updated, response = lifecycle.edit_response(
            proposal, "resp-1", vendor, {"proposedPrice": "$40k"}, now=NOW
        )
        assert response.proposed_price == "$40k"
        assert updated.find_response("resp-1").proposed_price == "$40k"

    def test_edit_after_view_conflicts(self, vendor: Actor) -> None:
        proposal = _with_responses(_make_response(status="viewed"))
        with pytest.raises(ConflictError):
            lifecycle.edit_response(proposal, "resp-1", vendor, {"proposal_text": "new"}, now=NOW)

    def test_edit_by_other_vendor_rejected(self, other_vendor: Actor) -> None:
        proposal = _with_responses(_make_response())
        with pytest.raises(AuthorizationError):
            lifecycle.edit_response(proposal, "resp-1", other_vendor, {"proposal_text": "new"}, now=NOW)

    def test_edit_missing_response(self, vendor: Actor) -> None:
        with pytest.raises(NotFoundError):
            lifecycle.edit_response(make_proposal(), "nope", vendor, {}, now=NOW)

    def test_withdraw_removes_response(self, vendor: Actor) -> None:
        proposal = _with_responses(_make_response())
        updated = lifecycle.withdraw_response(proposal, "resp-1", vendor, now=NOW)
        assert updated.responses_count == 0

    def test_withdraw_shortlisted_conflicts(self, vendor: Actor) -> None:
        proposal = _with_responses(_make_response(status="shortlisted"))
        with pytest.raises(ConflictError):
            lifecycle.withdraw_response(proposal, "resp-1", vendor, now=NOW)


class TestResponseStatus:
    """Tests for record_view, set_response_status and mark_hired."""

    def test_first_view_marks_viewed(self, customer: Actor) -> None:
        proposal = _with_responses(_make_response())
        updated = lifecycle.record_view(proposal, "resp-1", customer, now=NOW)
        response = updated.find_response("resp-1")
        assert response.status == ResponseStatus.VIEWED
        assert response.viewed_at == NOW

    @pytest.mark.parametrize("status", ["viewed", "shortlisted", "rejected"])
    def test_later_views_are_no_ops(self, customer: Actor, status: str) -> None:
        proposal = _with_responses(_make_response(status=status))
        assert lifecycle.record_view(proposal, "resp-1", customer, now=NOW) is proposal

    def test_vendor_cannot_record_view(self, vendor: Actor) -> None:
        with pytest.raises(AuthorizationError):
            lifecycle.record_view(_with_responses(_make_response()), "resp-1", vendor, now=NOW)

    def test_shortlist(self, customer: Actor) -> None:
        proposal = _with_responses(_make_response(status="viewed"))
        _, response = lifecycle.set_response_status(
            proposal, "resp-1", ResponseStatus.SHORTLISTED, customer, now=NOW
        )
        assert response.status == ResponseStatus.SHORTLISTED

    @pytest.mark.parametrize("terminal", ["shortlisted", "rejected"])
    def test_terminal_response_rejects_changes(self, customer: Actor, terminal: str) -> None:
        proposal = _with_responses(_make_response(status=terminal))
        for target in ResponseStatus:
            with pytest.raises(ConflictError):
                lifecycle.set_response_status(proposal, "resp-1", target, customer, now=NOW)

    def test_cannot_return_to_pending(self, customer: Actor) -> None:
        proposal = _with_responses(_make_response(status="viewed"))
        with pytest.raises(ConflictError):
            lifecycle.set_response_status(proposal, "resp-1", ResponseStatus.PENDING, customer, now=NOW)

    def test_non_owner_cannot_change_status(self, other_customer: Actor) -> None:
        proposal = _with_responses(_make_response())
        with pytest.raises(AuthorizationError):
            lifecycle.set_response_status(
                proposal, "resp-1", ResponseStatus.REJECTED, other_customer, now=NOW
            )

    def test_hire_shortlisted(self, customer: Actor) -> None:
        proposal = _with_responses(_make_response(status="shortlisted"))
        updated, response = lifecycle.mark_hired(proposal, "resp-1", customer, now=NOW)
        assert response.hired_at == NOW
        assert response.status == ResponseStatus.SHORTLISTED
        assert updated.status == ProposalStatus.IN_PROGRESS

    def test_hire_pending_conflicts(self, customer: Actor) -> None:
        proposal = _with_responses(_make_response())
        with pytest.raises(ConflictError):
            lifecycle.mark_hired(proposal, "resp-1", customer, now=NOW)

    def test_hire_twice_conflicts(self, customer: Actor) -> None:
        proposal = _with_responses(_make_response(status="shortlisted"))
        proposal, _ = lifecycle.mark_hired(proposal, "resp-1", customer, now=NOW)
        with pytest.raises(ConflictError):
            lifecycle.mark_hired(proposal, "resp-1", customer, now=NOW)

    def test_hire_on_completed_proposal_conflicts(self, customer: Actor) -> None:
        proposal = _with_responses(_make_response(status="shortlisted"), status="completed")
        with pytest.raises(ConflictError):
            lifecycle.mark_hired(proposal, "resp-1", customer, now=NOW)
