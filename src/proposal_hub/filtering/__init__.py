"""Client-side filtering, grouping and ordering of fetched feeds."""

from proposal_hub.filtering.engine import (
    FilterResult,
    ProposalFilterEngine,
    ResponseFilterEngine,
    filter_proposals,
    filter_responses,
)
from proposal_hub.filtering.projection import (
    ResponseGroup,
    ResponseRow,
    compare_rows,
    flatten_responses,
    group_by_proposal,
    rows_by_stage,
    sort_newest_first,
    toggle_compare,
)

__all__ = [
    "FilterResult",
    "ProposalFilterEngine",
    "ResponseFilterEngine",
    "ResponseGroup",
    "ResponseRow",
    "compare_rows",
    "filter_proposals",
    "filter_responses",
    "flatten_responses",
    "group_by_proposal",
    "rows_by_stage",
    "sort_newest_first",
    "toggle_compare",
]
