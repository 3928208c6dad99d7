"""Pytest fixtures for proposal-hub tests."""

import tempfile
from datetime import datetime, timezone
from pathlib import Path

import pytest

from proposal_hub.models.actor import Actor, Role
from proposal_hub.models.proposal import Proposal, ProposalStatus

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


def make_proposal(**kwargs) -> Proposal:
    """Active customer proposal owned by cust-1, valid against the default vocabulary."""
    defaults = {
        "id": "prop-1",
        "title": "Automate Radiology Summaries",
        "description": "Summarize radiology reports for referring physicians.",
        "category": "Computer Vision",
        "industry": "Healthcare",
        "status": ProposalStatus.ACTIVE,
        "created_by": "cust-1",
        "creator_type": "customer",
        "created_at": NOW,
        "published_at": NOW,
    }
    defaults.update(kwargs)
    return Proposal.model_validate(defaults)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def customer() -> Actor:
    return Actor(user_id="cust-1", role=Role.CUSTOMER, name="Dana Reyes")


@pytest.fixture
def other_customer() -> Actor:
    return Actor(user_id="cust-2", role=Role.CUSTOMER, name="Sam Ortiz")


@pytest.fixture
def vendor() -> Actor:
    return Actor(user_id="vend-1", role=Role.VENDOR, name="Priya Nair", company="ScanSense")


@pytest.fixture
def other_vendor() -> Actor:
    return Actor(user_id="vend-2", role=Role.VENDOR, name="Leo Park", company="MedText")


@pytest.fixture
def superadmin() -> Actor:
    return Actor(user_id="admin-1", role=Role.SUPERADMIN, name="Admin")


@pytest.fixture
def active_proposal() -> Proposal:
    return make_proposal()


@pytest.fixture
def temp_db() -> Path:
    """Temporary database path for isolated tests."""
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        path = Path(f.name)
    yield path
    path.unlink(missing_ok=True)
