"""Filter rules: each returns (passed, explanation, rule_id)."""

from enum import Enum
from typing import Optional

from proposal_hub.filtering.projection import ResponseRow
from proposal_hub.models.filters import FilterState
from proposal_hub.models.proposal import Proposal


def is_unset(value: object) -> bool:
    """None, blank and "All ..." values switch a facet off."""
    if value is None:
        return True
    if isinstance(value, str):
        v = value.strip()
        return not v or v.lower().startswith("all ")
    return False


def _query_unset(query: Optional[str]) -> bool:
    return query is None or not query.strip()


def _normalize_for_match(text: Optional[str]) -> str:
    return (text or "").lower()


def _text_matches(fields: list[Optional[str]], query: str) -> bool:
    q = query.strip().lower()
    return any(q in _normalize_for_match(f) for f in fields)


def _value(field: object) -> str:
    return field.value if isinstance(field, Enum) else str(field)


def _equality_rule(actual: object, wanted: Optional[str], rule_id: str) -> tuple[bool, str, str]:
    if is_unset(wanted):
        return True, f"{rule_id.capitalize()} filter not set", rule_id
    if _value(actual) == wanted:
        return True, f"Matches {rule_id}: {wanted}", rule_id
    return False, f"Excluded: {rule_id} {_value(actual)} is not {wanted}", rule_id


def apply_proposal_text_rule(proposal: Proposal, state: FilterState) -> tuple[bool, str, str]:
    """Case-insensitive substring over title, description, category and industry."""
    if _query_unset(state.query):
        return True, "Search not set", "search"
    fields = [proposal.title, proposal.description, proposal.category, proposal.industry]
    if _text_matches(fields, state.query):
        return True, f"Matches search: {state.query}", "search"
    return False, f"Excluded: no field contains '{state.query}'", "search"


def apply_industry_rule(proposal: Proposal, state: FilterState) -> tuple[bool, str, str]:
    return _equality_rule(proposal.industry, state.industry, "industry")


def apply_category_rule(proposal: Proposal, state: FilterState) -> tuple[bool, str, str]:
    return _equality_rule(proposal.category, state.category, "category")


def apply_priority_rule(proposal: Proposal, state: FilterState) -> tuple[bool, str, str]:
    return _equality_rule(proposal.priority, state.priority, "priority")


def apply_status_rule(proposal: Proposal, state: FilterState) -> tuple[bool, str, str]:
    return _equality_rule(proposal.status, state.status, "status")


def apply_budget_min_rule(proposal: Proposal, state: FilterState) -> tuple[bool, str, str]:
    """Lower bound: proposal must state a minimum budget at or above the bound."""
    if state.min_budget is None:
        return True, "Minimum budget filter not set", "budget_min"
    budget_min = proposal.requirements.budget.min
    if budget_min is None:
        return False, "Excluded: no minimum budget on proposal", "budget_min"
    if budget_min >= state.min_budget:
        return True, f"Minimum budget {budget_min} >= {state.min_budget}", "budget_min"
    return False, f"Excluded: minimum budget {budget_min} below {state.min_budget}", "budget_min"


def apply_budget_max_rule(proposal: Proposal, state: FilterState) -> tuple[bool, str, str]:
    """Upper bound: proposal must state a maximum budget at or below the bound."""
    if state.max_budget is None:
        return True, "Maximum budget filter not set", "budget_max"
    budget_max = proposal.requirements.budget.max
    if budget_max is None:
        return False, "Excluded: no maximum budget on proposal", "budget_max"
    if budget_max <= state.max_budget:
        return True, f"Maximum budget {budget_max} <= {state.max_budget}", "budget_max"
    return False, f"Excluded: maximum budget {budget_max} above {state.max_budget}", "budget_max"


def apply_response_text_rule(row: ResponseRow, state: FilterState) -> tuple[bool, str, str]:
    """Case-insensitive substring over vendor name/company, pitch text and proposal title."""
    if _query_unset(state.query):
        return True, "Search not set", "search"
    response = row.response
    fields = [response.vendor_name, response.vendor_company, response.proposal_text, row.proposal_title]
    if _text_matches(fields, state.query):
        return True, f"Matches search: {state.query}", "search"
    return False, f"Excluded: no field contains '{state.query}'", "search"
