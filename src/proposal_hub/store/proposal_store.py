"""SQLite-backed proposal store. Responses are embedded in the proposal document."""

import json
import sqlite3
from pathlib import Path
from typing import Optional

from proposal_hub.models.proposal import Proposal


class ProposalStore:
    """
    Persists proposals as JSON documents with a few indexed columns for
    listing queries. Business rules live in proposal_hub.lifecycle; the store
    only saves what it is given.
    """

    def __init__(self, db_path: str | Path = "proposal_hub.db"):
        self._db_path = Path(db_path)
        self._ensure_schema()

    def _connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_schema(self) -> None:
        schema_path = Path(__file__).parent / "schema.sql"
        with self._connection() as conn:
            conn.executescript(schema_path.read_text())

    def _serialize(self, proposal: Proposal) -> str:
        return json.dumps(proposal.model_dump(mode="json"), default=str)

    def _deserialize(self, row: sqlite3.Row) -> Proposal:
        return Proposal.model_validate(json.loads(row["data"]))

    def save(self, proposal: Proposal) -> bool:
        """Insert or replace a proposal. Returns True if it was new."""
        with self._connection() as conn:
            existing = conn.execute("SELECT id FROM proposals WHERE id = ?", (proposal.id,)).fetchone()
            conn.execute(
                """
                INSERT OR REPLACE INTO proposals
                    (id, created_by, creator_type, status, category, industry, created_at, expires_at, data)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    proposal.id,
                    proposal.created_by,
                    proposal.creator_type.value,
                    proposal.status.value,
                    proposal.category,
                    proposal.industry,
                    proposal.created_at.isoformat(),
                    proposal.expires_at.isoformat() if proposal.expires_at else None,
                    self._serialize(proposal),
                ),
            )
            conn.commit()
        return existing is None

    def get(self, proposal_id: str) -> Optional[Proposal]:
        with self._connection() as conn:
            row = conn.execute("SELECT * FROM proposals WHERE id = ?", (proposal_id,)).fetchone()
        return self._deserialize(row) if row else None

    def delete(self, proposal_id: str) -> bool:
        with self._connection() as conn:
            cursor = conn.execute("DELETE FROM proposals WHERE id = ?", (proposal_id,))
            conn.commit()
        return cursor.rowcount > 0

    def query(
        self,
        *,
        creator_type: Optional[str] = None,
        status: Optional[str] = None,
        industry: Optional[str] = None,
        category: Optional[str] = None,
        created_by: Optional[str] = None,
    ) -> list[Proposal]:
        """Proposals matching every given column, newest first."""
        clauses: list[str] = []
        params: list[str] = []
        for column, value in (
            ("creator_type", creator_type),
            ("status", status),
            ("industry", industry),
            ("category", category),
            ("created_by", created_by),
        ):
            if value is not None:
                clauses.append(f"{column} = ?")
                params.append(value)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        with self._connection() as conn:
            rows = conn.execute(
                f"SELECT * FROM proposals {where} ORDER BY created_at DESC",
                params,
            ).fetchall()
        return [self._deserialize(r) for r in rows]

    def get_all(self) -> list[Proposal]:
        return self.query()
