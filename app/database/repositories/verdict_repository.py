from typing import Any

import psycopg
from psycopg.rows import dict_row

from app.analysis.models import Verdict
from app.database.exceptions import StorageError
from app.database.models import VerdictRecord

_VERDICT_COLUMNS = """
    id, submission_id, issue_type, root_cause, suggested_fix,
    severity, produced_by, produced_at
"""


class VerdictRepository:
    """Database operations for the verdicts table."""

    def insert(
        self,
        conn: psycopg.Connection[Any],
        submission_id: int,
        verdict: Verdict,
    ) -> VerdictRecord:
        """Insert the verdict owned by *submission_id*.

        Raises:
            psycopg.errors.UniqueViolation: if the submission already has one.
        """
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                f"""
                INSERT INTO verdicts
                    (submission_id, issue_type, root_cause, suggested_fix,
                     severity, produced_by)
                VALUES (%s, %s, %s, %s, %s, %s)
                RETURNING {_VERDICT_COLUMNS}
                """,
                (
                    submission_id,
                    verdict.issue_type,
                    verdict.root_cause,
                    verdict.suggested_fix,
                    verdict.severity,
                    verdict.produced_by,
                ),
            )
            row = cur.fetchone()
        if row is None:
            raise StorageError("INSERT INTO verdicts returned no row")
        return _to_record(row)

    def find_for_submission(
        self,
        conn: psycopg.Connection[Any],
        submission_id: int,
    ) -> VerdictRecord | None:
        """Find the verdict a submission owns, or the one it reused via a cache link."""
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                f"""
                SELECT {_VERDICT_COLUMNS}
                FROM verdicts
                WHERE submission_id = %s
                UNION ALL
                SELECT {_prefixed("v")}
                FROM submissions s
                JOIN cache_links cl ON cl.source_hash = s.content_hash
                JOIN verdicts v ON v.id = cl.reused_verdict_id
                WHERE s.id = %s
                LIMIT 1
                """,
                (submission_id, submission_id),
            )
            row = cur.fetchone()
        return _to_record(row) if row is not None else None


def _prefixed(alias: str) -> str:
    return ", ".join(f"{alias}.{col.strip()}" for col in _VERDICT_COLUMNS.split(","))


def _to_record(row: dict[str, Any]) -> VerdictRecord:
    return VerdictRecord(
        id=row["id"],
        submission_id=row["submission_id"],
        issue_type=row["issue_type"],
        root_cause=row["root_cause"],
        suggested_fix=row["suggested_fix"],
        severity=row["severity"],
        produced_by=row["produced_by"],
        produced_at=row["produced_at"],
    )
