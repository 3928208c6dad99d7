"""Filter engines with pluggable rules and explanation trail."""

from typing import Any, Callable, Generic, Optional, TypeVar

from pydantic import BaseModel, Field

from proposal_hub.filtering.projection import ResponseRow
from proposal_hub.models.filters import FilterState
from proposal_hub.models.proposal import Proposal

from .rules import (
    apply_budget_max_rule,
    apply_budget_min_rule,
    apply_category_rule,
    apply_industry_rule,
    apply_priority_rule,
    apply_proposal_text_rule,
    apply_response_text_rule,
    apply_status_rule,
)

T = TypeVar("T")


class FilterResult(BaseModel):
    """Result of filtering one record against the filter state."""

    passed: bool = Field(..., description="All rules passed")
    explanations: list[str] = Field(default_factory=list)
    record: Any = Field(..., description="The proposal or response row that was filtered")
    excluded_by_rule: Optional[str] = Field(
        default=None,
        description="First rule that excluded (search|industry|category|priority|status|budget_min|budget_max)",
    )


class _RuleEngine(Generic[T]):
    """
    Applies every rule to a record and ANDs the outcomes. Pure: no I/O and
    no state beyond the filter state, so applying twice changes nothing.
    """

    rules: list[Callable[[T, FilterState], tuple[bool, str, str]]] = []

    def __init__(self, state: Optional[FilterState] = None):
        self.state = state or FilterState()

    def filter(self, record: T) -> FilterResult:
        explanations: list[str] = []
        all_passed = True
        excluded_by: Optional[str] = None
        for rule_fn in self.rules:
            passed, explanation, rule_id = rule_fn(record, self.state)
            explanations.append(explanation)
            if not passed:
                all_passed = False
                if excluded_by is None:
                    excluded_by = rule_id
        return FilterResult(
            passed=all_passed,
            explanations=explanations,
            record=record,
            excluded_by_rule=excluded_by,
        )

    def filter_many(self, records: list[T]) -> list[FilterResult]:
        return [self.filter(r) for r in records]

    def filter_passed(self, records: list[T]) -> list[FilterResult]:
        return [r for r in self.filter_many(records) if r.passed]

    def apply(self, records: list[T]) -> list[T]:
        """Passing records in their original order."""
        return [r.record for r in self.filter_passed(records)]


class ProposalFilterEngine(_RuleEngine[Proposal]):
    rules = [
        apply_proposal_text_rule,
        apply_industry_rule,
        apply_category_rule,
        apply_priority_rule,
        apply_status_rule,
        apply_budget_min_rule,
        apply_budget_max_rule,
    ]


class ResponseFilterEngine(_RuleEngine[ResponseRow]):
    rules = [apply_response_text_rule]


def filter_proposals(proposals: list[Proposal], state: FilterState) -> list[Proposal]:
    return ProposalFilterEngine(state).apply(proposals)


def filter_responses(rows: list[ResponseRow], state: FilterState) -> list[ResponseRow]:
    return ResponseFilterEngine(state).apply(rows)
