"""Vendor suggestions for a proposal by category and industry equality."""

import logging
from typing import TYPE_CHECKING, Iterable, Optional

from pydantic import BaseModel, Field

from proposal_hub.models.contracts import FetchSolutionsRequest
from proposal_hub.models.proposal import ProposalDraft
from proposal_hub.models.solution import Solution, VendorRef

if TYPE_CHECKING:
    from proposal_hub.backends.base import MarketplaceBackend

logger = logging.getLogger(__name__)

DEFAULT_MATCH_LIMIT = 5


class VendorMatch(BaseModel):
    """One suggested vendor with every solution of theirs that matched."""

    vendor: VendorRef
    solutions: list[Solution] = Field(default_factory=list)


def _clean(value: Optional[str]) -> str:
    return (value or "").strip()


def solution_matches(solution: Solution, category: str, industry: str) -> bool:
    """Exact category and industry equality; no fuzzy scoring."""
    return solution.category == category and solution.industry == industry


def match_vendors(
    category: Optional[str],
    industry: Optional[str],
    solutions: Iterable[Solution],
    limit: int = DEFAULT_MATCH_LIMIT,
) -> list[VendorMatch]:
    """
    Group matching solutions by vendor (first-seen order) and return at most
    `limit` vendors. Missing category or industry yields no suggestions rather
    than matching everything.
    """
    category = _clean(category)
    industry = _clean(industry)
    if not category or not industry or limit <= 0:
        return []

    groups: dict[str, VendorMatch] = {}
    for solution in solutions:
        if solution.vendor is None or not solution_matches(solution, category, industry):
            continue
        group = groups.get(solution.vendor.id)
        if group is None:
            if len(groups) >= limit:
                continue
            group = groups[solution.vendor.id] = VendorMatch(vendor=solution.vendor)
        group.solutions.append(solution)
    return list(groups.values())


def suggest_vendors(
    proposal: ProposalDraft,
    backend: "MarketplaceBackend",
    *,
    limit: int = DEFAULT_MATCH_LIMIT,
    fetch_limit: int = 20,
) -> list[VendorMatch]:
    """Fetch candidate solutions for the proposal and group them into vendor suggestions."""
    if not _clean(proposal.category) or not _clean(proposal.industry):
        return []
    result = backend.fetch_solutions(
        FetchSolutionsRequest(
            category=proposal.category,
            industry=proposal.industry,
            limit=fetch_limit,
        )
    )
    matches = match_vendors(proposal.category, proposal.industry, result.solutions, limit)
    logger.debug(
        "Matched %d vendors from %d solutions for %s/%s",
        len(matches),
        len(result.solutions),
        proposal.category,
        proposal.industry,
    )
    return matches
