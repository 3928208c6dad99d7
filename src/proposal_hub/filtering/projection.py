"""Grouping, ordering and quick-compare selection for feeds."""

from datetime import datetime, timezone
from typing import Iterable, Optional

from pydantic import BaseModel, Field

from proposal_hub.errors import ValidationError
from proposal_hub.lifecycle.collaboration import PipelineStage, has_active_chat, pipeline_stage
from proposal_hub.models.proposal import Proposal
from proposal_hub.models.response import Response

DEFAULT_COMPARE_LIMIT = 3


class ResponseRow(BaseModel):
    """A response flattened together with the proposal it answers."""

    response: Response
    proposal_id: str
    proposal_title: str = ""
    stage: PipelineStage = PipelineStage.SUBMITTED
    has_active_chat: bool = False


class ResponseGroup(BaseModel):
    proposal_id: str
    proposal_title: str = ""
    rows: list[ResponseRow] = Field(default_factory=list)


def _sort_key(dt: datetime) -> datetime:
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def flatten_responses(
    proposals: Iterable[Proposal],
    vendor_id: Optional[str] = None,
) -> list[ResponseRow]:
    """Responses of all proposals, optionally only those submitted by one vendor."""
    rows: list[ResponseRow] = []
    for proposal in proposals:
        for response in proposal.responses:
            if vendor_id is not None and response.vendor_id != vendor_id:
                continue
            rows.append(
                ResponseRow(
                    response=response,
                    proposal_id=proposal.id,
                    proposal_title=proposal.title,
                    stage=pipeline_stage(proposal, response),
                    has_active_chat=has_active_chat(proposal, response),
                )
            )
    return rows


def group_by_proposal(rows: Iterable[ResponseRow]) -> list[ResponseGroup]:
    """Inbox grouping: groups in first-seen order, responses oldest first."""
    groups: dict[str, ResponseGroup] = {}
    for row in rows:
        group = groups.get(row.proposal_id)
        if group is None:
            group = groups[row.proposal_id] = ResponseGroup(
                proposal_id=row.proposal_id,
                proposal_title=row.proposal_title,
            )
        group.rows.append(row)
    for group in groups.values():
        group.rows.sort(key=lambda r: _sort_key(r.response.created_at))
    return list(groups.values())


def rows_by_stage(rows: Iterable[ResponseRow]) -> dict[PipelineStage, list[ResponseRow]]:
    """Vendor pipeline board: every stage present, rows in input order."""
    board: dict[PipelineStage, list[ResponseRow]] = {stage: [] for stage in PipelineStage}
    for row in rows:
        board[row.stage].append(row)
    return board


def sort_newest_first(proposals: Iterable[Proposal]) -> list[Proposal]:
    return sorted(proposals, key=lambda p: _sort_key(p.created_at), reverse=True)


def toggle_compare(
    selection: tuple[str, ...],
    response_id: str,
    limit: int = DEFAULT_COMPARE_LIMIT,
) -> tuple[str, ...]:
    """Add or remove a response from the quick-compare selection."""
    if response_id in selection:
        return tuple(r for r in selection if r != response_id)
    if len(selection) >= limit:
        raise ValidationError(f"You can compare up to {limit} proposals at once")
    return (*selection, response_id)


def compare_rows(
    rows: list[ResponseRow],
    selection: tuple[str, ...],
    active: bool,
    limit: int = DEFAULT_COMPARE_LIMIT,
) -> list[ResponseRow]:
    """While compare mode is on keep only the selected rows, at most `limit`."""
    if not active:
        return rows
    return [r for r in rows if r.response.id in selection][:limit]
