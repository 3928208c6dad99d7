"""SQLite store for vendor solutions used as matching candidates."""

import json
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from proposal_hub.models.solution import Solution


class SolutionStore:
    """Solutions keyed by id, queried by exact category/industry."""

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

    def add(self, solution: Solution) -> Solution:
        now = datetime.now(timezone.utc).isoformat()
        with self._connection() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO solutions (id, vendor_id, category, industry, created_at, data)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    solution.id,
                    solution.vendor_id,
                    solution.category,
                    solution.industry,
                    now,
                    json.dumps(solution.model_dump(mode="json")),
                ),
            )
            conn.commit()
        return solution

    def find(
        self,
        *,
        category: Optional[str] = None,
        industry: Optional[str] = None,
        limit: int = 20,
    ) -> list[Solution]:
        """Solutions in insertion order, filtered by whichever of category/industry is given."""
        clauses: list[str] = []
        params: list = []
        if category:
            clauses.append("category = ?")
            params.append(category)
        if industry:
            clauses.append("industry = ?")
            params.append(industry)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        params.append(limit)
        with self._connection() as conn:
            rows = conn.execute(
                f"SELECT data FROM solutions {where} ORDER BY created_at, rowid LIMIT ?",
                params,
            ).fetchall()
        return [Solution.model_validate(json.loads(r["data"])) for r in rows]
