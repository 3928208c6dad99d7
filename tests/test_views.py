"""Tests for the role-specific feed views over LocalBackend."""

from pathlib import Path
from unittest.mock import patch

import pytest
from conftest import NOW

from proposal_hub.backends import LocalBackend
from proposal_hub.config import Settings
from proposal_hub.errors import ConflictError, ValidationError
from proposal_hub.lifecycle import PipelineStage
from proposal_hub.models.contracts import AddResponseRequest
from proposal_hub.models.filters import FilterState
from proposal_hub.models.proposal import ProposalStatus
from proposal_hub.models.response import ResponseStatus
from proposal_hub.models.solution import Solution
from proposal_hub.views import (
    FindWorkView,
    MyProposalsView,
    PostingsView,
    VendorResponsesView,
    _FeedView,
)


def _proposal_data(**kwargs) -> dict:
    data = {
        "title": "Automate Radiology Summaries",
        "description": "Summarize radiology reports.",
        "category": "Computer Vision",
        "industry": "Healthcare",
        "status": "active",
    }
    data.update(kwargs)
    return data


@pytest.fixture
def make_backend(temp_db: Path):
    def _make(actor) -> LocalBackend:
        return LocalBackend(actor, db_path=temp_db, clock=lambda: NOW)

    return _make


@pytest.fixture
def seeded(make_backend, customer, vendor, other_vendor):
    """Two customer needs; vendor and other_vendor pitched on the first."""
    cust = make_backend(customer)
    radiology = cust.create_proposal(_proposal_data()).proposal
    claims = cust.create_proposal(
        _proposal_data(title="Claims chatbot", category="Chatbots", industry="Finance")
    ).proposal
    make_backend(vendor).add_response(AddResponseRequest(proposal_id=radiology.id, proposal_text="ScanSense pitch"))
    make_backend(other_vendor).add_response(AddResponseRequest(proposal_id=radiology.id, proposal_text="MedText pitch"))
    return {"radiology": radiology, "claims": claims}


class TestPostingsView:
    """Tests for the customer postings feed."""

    def test_refresh_and_filter(self, make_backend, customer, seeded) -> None:
        view = PostingsView(make_backend(customer))
        view.refresh()
        assert {p.id for p in view.visible()} == {seeded["radiology"].id, seeded["claims"].id}
        view.set_filters(FilterState(query="CHATBOT"))
        assert [p.id for p in view.visible()] == [seeded["claims"].id]

    def test_suggestions(self, make_backend, customer, vendor, seeded) -> None:
        make_backend(vendor).add_solution(
            Solution(id="s1", category="Computer Vision", industry="Healthcare", vendor="vend-1")
        )
        view = PostingsView(make_backend(customer))
        view.refresh()
        matches = view.suggestions(seeded["radiology"].id)
        assert [m.vendor.id for m in matches] == ["vend-1"]
        assert view.suggestions(seeded["claims"].id) == []

    def test_cancel_refreshes(self, make_backend, customer, seeded) -> None:
        view = PostingsView(make_backend(customer))
        view.refresh()
        view.cancel(seeded["claims"].id)
        assert view.proposal(seeded["claims"].id).status == ProposalStatus.CANCELLED

    def test_fulfill_twice_conflicts_before_backend(self, make_backend, customer, seeded) -> None:
        backend = make_backend(customer)
        view = PostingsView(backend)
        view.refresh()
        view.fulfill(seeded["claims"].id)
        with patch.object(backend, "mark_fulfilled") as remote:
            with pytest.raises(ConflictError):
                view.fulfill(seeded["claims"].id)
        remote.assert_not_called()


class TestFindWorkView:
    """Tests for the vendor find-work feed."""

    def test_lists_active_customer_needs(self, make_backend, vendor, seeded) -> None:
        view = FindWorkView(make_backend(vendor))
        view.refresh()
        assert len(view.visible()) == 2
        assert view.already_responded(seeded["radiology"].id)
        assert not view.already_responded(seeded["claims"].id)

    def test_industry_change_refetches(self, make_backend, vendor, seeded) -> None:
        backend = make_backend(vendor)
        view = FindWorkView(backend)
        view.refresh()
        with patch.object(backend, "fetch_proposals", wraps=backend.fetch_proposals) as fetch:
            view.set_filters(FilterState(query="radiology"))
            fetch.assert_not_called()
            view.set_filters(FilterState(industry="Finance"))
            assert fetch.call_count == 1
            assert fetch.call_args.args[0].industry == "Finance"
        assert [p.id for p in view.visible()] == [seeded["claims"].id]

    def test_pitch_and_duplicate(self, make_backend, vendor, seeded) -> None:
        backend = make_backend(vendor)
        view = FindWorkView(backend)
        view.refresh()
        response = view.pitch(seeded["claims"].id, {"proposalText": "We automate claims"})
        assert response.status == ResponseStatus.PENDING
        assert view.already_responded(seeded["claims"].id)
        with patch.object(backend, "add_response") as remote:
            with pytest.raises(ConflictError):
                view.pitch(seeded["claims"].id, {"proposalText": "Again"})
        remote.assert_not_called()


class TestMyProposalsView:
    """Tests for the vendor pipeline."""

    def test_board(self, make_backend, customer, vendor, seeded) -> None:
        view = MyProposalsView(make_backend(vendor))
        view.refresh()
        rows = view.rows()
        assert len(rows) == 1
        assert rows[0].response.vendor_id == "vend-1"
        assert [r.response.id for r in view.board()[PipelineStage.SUBMITTED]] == [rows[0].response.id]

    def test_edit_then_withdraw(self, make_backend, vendor, seeded) -> None:
        view = MyProposalsView(make_backend(vendor))
        view.refresh()
        row = view.rows()[0]
        edited = view.edit(row.proposal_id, row.response.id, {"proposed_price": "$9k"})
        assert edited.proposed_price == "$9k"
        view.withdraw(row.proposal_id, row.response.id)
        assert view.rows() == []

    def test_withdraw_after_shortlist_conflicts(self, make_backend, customer, vendor, seeded) -> None:
        vendor_view = MyProposalsView(make_backend(vendor))
        vendor_view.refresh()
        row = vendor_view.rows()[0]
        customer_view = VendorResponsesView(make_backend(customer))
        customer_view.refresh()
        customer_view.shortlist(row.proposal_id, row.response.id)

        vendor_view.refresh()
        assert vendor_view.rows()[0].stage == PipelineStage.SHORTLISTED
        with pytest.raises(ConflictError):
            vendor_view.withdraw(row.proposal_id, row.response.id)

    def test_hired_row_in_active_discussion(self, make_backend, customer, vendor, seeded) -> None:
        vendor_view = MyProposalsView(make_backend(vendor))
        vendor_view.refresh()
        row = vendor_view.rows()[0]
        customer_view = VendorResponsesView(make_backend(customer))
        customer_view.refresh()
        customer_view.shortlist(row.proposal_id, row.response.id)
        customer_view.hire(row.proposal_id, row.response.id)

        vendor_view.refresh()
        (active,) = vendor_view.board()[PipelineStage.ACTIVE_DISCUSSION]
        assert active.response.id == row.response.id
        assert vendor_view.proposal(row.proposal_id).status == ProposalStatus.IN_PROGRESS

        fetched = make_backend(vendor).fetch_proposal(row.proposal_id).proposal
        assert fetched.find_response(row.response.id).hired_at == NOW


class TestVendorResponsesView:
    """Tests for the customer inbox."""

    def test_groups(self, make_backend, customer, seeded) -> None:
        view = VendorResponsesView(make_backend(customer))
        view.refresh()
        groups = view.groups()
        assert [g.proposal_id for g in groups] == [seeded["radiology"].id]
        assert len(groups[0].rows) == 2

    def test_search_responses(self, make_backend, customer, seeded) -> None:
        view = VendorResponsesView(make_backend(customer), filters=FilterState(query="medtext"))
        view.refresh()
        assert [r.response.proposal_text for r in view.rows()] == ["MedText pitch"]

    def test_quick_compare(self, make_backend, customer, seeded) -> None:
        view = VendorResponsesView(make_backend(customer))
        view.refresh()
        first = view.rows()[0].response.id
        view.toggle_compare(first)
        view.set_compare_mode(True)
        assert [r.response.id for r in view.rows()] == [first]
        view.set_compare_mode(False)
        assert view.compare_selection == ()
        assert len(view.rows()) == 2

    def test_compare_limit(self, make_backend, customer, seeded) -> None:
        view = VendorResponsesView(make_backend(customer))
        for rid in ("a", "b", "c"):
            view.toggle_compare(rid)
        with pytest.raises(ValidationError):
            view.toggle_compare("d")

    def test_open_shortlist_hire(self, make_backend, customer, seeded) -> None:
        view = VendorResponsesView(make_backend(customer))
        view.refresh()
        row = view.rows()[0]
        opened = view.open(row.proposal_id, row.response.id)
        assert opened.status == ResponseStatus.VIEWED
        view.shortlist(row.proposal_id, row.response.id)
        proposal = view.hire(row.proposal_id, row.response.id)
        assert proposal.status == ProposalStatus.IN_PROGRESS
        refreshed = {r.response.id: r for r in view.rows()}
        assert refreshed[row.response.id].has_active_chat is True

    def test_decline_is_terminal(self, make_backend, customer, seeded) -> None:
        view = VendorResponsesView(make_backend(customer))
        view.refresh()
        row = view.rows()[0]
        view.decline(row.proposal_id, row.response.id)
        with pytest.raises(ConflictError):
            view.shortlist(row.proposal_id, row.response.id)

    def test_failed_backend_call_still_refreshes(self, make_backend, customer, seeded) -> None:
        backend = make_backend(customer)
        view = VendorResponsesView(backend)
        view.refresh()
        row = view.rows()[0]
        with patch.object(backend, "update_response_status", side_effect=ConflictError("Response is already rejected")):
            with pytest.raises(ConflictError):
                view.shortlist(row.proposal_id, row.response.id)
        current = {r.response.id: r for r in view.rows()}
        assert current[row.response.id].response.status == ResponseStatus.PENDING


class TestFeedViewBase:
    """Tests for the shared feed plumbing."""

    def test_feed_limit_from_settings(self, make_backend, customer, seeded) -> None:
        backend = make_backend(customer)
        view = PostingsView(backend, settings=Settings(feed_fetch_limit=7))
        with patch.object(backend, "fetch_proposals", wraps=backend.fetch_proposals) as fetch:
            view.refresh()
        assert fetch.call_args.args[0].limit == 7

    def test_default_feed_limit(self, make_backend, vendor) -> None:
        backend = make_backend(vendor)
        with patch.object(backend, "fetch_proposals", wraps=backend.fetch_proposals) as fetch:
            FindWorkView(backend).refresh()
        assert fetch.call_args.args[0].limit == 50

    def test_base_view_is_abstract(self, make_backend, customer) -> None:
        with pytest.raises(TypeError):
            _FeedView(make_backend(customer))
