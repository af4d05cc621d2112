from typing import Any

import psycopg
from psycopg.rows import dict_row

from app.database.exceptions import InvalidTransitionError, RecordNotFoundError, StorageError
from app.database.models import (
    CandidateRow,
    HistoryEntry,
    NewSubmission,
    SubmissionRecord,
    SubmissionStatus,
)

_SUBMISSION_COLUMNS = """
    id, original_name, content_hash, size_bytes, sanitized_text,
    status, created_at, updated_at
"""


class SubmissionRepository:
    """Database operations for the submissions table.

    Methods take the connection from the caller so several statements can
    share one transaction. The caller commits.
    """

    def insert(
        self,
        conn: psycopg.Connection[Any],
        submission: NewSubmission,
        status: str,
    ) -> SubmissionRecord:
        """Insert a submission row.

        Raises:
            psycopg.errors.UniqueViolation: if content_hash already exists.
        """
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                f"""
                INSERT INTO submissions
                    (original_name, content_hash, size_bytes, sanitized_text, status)
                VALUES (%s, %s, %s, %s, %s)
                RETURNING {_SUBMISSION_COLUMNS}
                """,
                (
                    submission.original_name,
                    submission.content_hash,
                    submission.size_bytes,
                    submission.sanitized_text,
                    status,
                ),
            )
            row = cur.fetchone()
        if row is None:
            raise StorageError("INSERT INTO submissions returned no row")
        return _to_record(row)

    def find_by_hash(
        self,
        conn: psycopg.Connection[Any],
        content_hash: str,
    ) -> SubmissionRecord | None:
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                f"SELECT {_SUBMISSION_COLUMNS} FROM submissions WHERE content_hash = %s",
                (content_hash,),
            )
            row = cur.fetchone()
        return _to_record(row) if row is not None else None

    def find_by_id(
        self,
        conn: psycopg.Connection[Any],
        submission_id: int,
    ) -> SubmissionRecord | None:
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                f"SELECT {_SUBMISSION_COLUMNS} FROM submissions WHERE id = %s",
                (submission_id,),
            )
            row = cur.fetchone()
        return _to_record(row) if row is not None else None

    def list_recent_sanitized(
        self,
        conn: psycopg.Connection[Any],
        limit: int,
        exclude_non_terminal: bool = True,
    ) -> list[CandidateRow]:
        """Most recent submissions first, each with its own or reused verdict id."""
        statuses = sorted(
            SubmissionStatus.WITH_VERDICT if exclude_non_terminal else SubmissionStatus.ALL
        )
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                """
                SELECT s.id, s.sanitized_text, s.created_at,
                       COALESCE(v.id, cl.reused_verdict_id) AS verdict_id
                FROM submissions s
                LEFT JOIN verdicts v ON v.submission_id = s.id
                LEFT JOIN cache_links cl ON cl.source_hash = s.content_hash
                WHERE s.status = ANY(%s)
                ORDER BY s.created_at DESC, s.id DESC
                LIMIT %s
                """,
                (statuses, limit),
            )
            rows = cur.fetchall()
        return [
            CandidateRow(
                submission_id=row["id"],
                sanitized_text=row["sanitized_text"],
                verdict_id=row["verdict_id"],
                created_at=row["created_at"],
            )
            for row in rows
        ]

    def update_status(
        self,
        conn: psycopg.Connection[Any],
        submission_id: int,
        status: str,
    ) -> None:
        """Move a processing submission to a terminal status.

        Raises:
            RecordNotFoundError: if no submission with this ID exists.
            InvalidTransitionError: if the submission is no longer processing.
        """
        if status not in SubmissionStatus.TERMINAL:
            raise InvalidTransitionError(f"'{status}' is not a terminal status")
        with conn.cursor() as cur:
            cur.execute(
                """
                UPDATE submissions
                SET status = %s, updated_at = clock_timestamp()
                WHERE id = %s AND status = %s
                """,
                (status, submission_id, SubmissionStatus.PROCESSING),
            )
            if cur.rowcount == 1:
                return
        current = self.find_by_id(conn, submission_id)
        if current is None:
            raise RecordNotFoundError(f"Submission {submission_id} not found")
        raise InvalidTransitionError(
            f"Submission {submission_id} is already {current.status}"
        )

    def list_history(self, conn: psycopg.Connection[Any], limit: int) -> list[HistoryEntry]:
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                """
                SELECT s.id, s.original_name, s.size_bytes, s.status, s.created_at,
                       v.issue_type, v.severity, v.suggested_fix
                FROM submissions s
                LEFT JOIN cache_links cl ON cl.source_hash = s.content_hash
                LEFT JOIN verdicts v ON v.id = COALESCE(
                    (SELECT own.id FROM verdicts own WHERE own.submission_id = s.id),
                    cl.reused_verdict_id
                )
                ORDER BY s.created_at DESC, s.id DESC
                LIMIT %s
                """,
                (limit,),
            )
            rows = cur.fetchall()
        return [
            HistoryEntry(
                submission_id=row["id"],
                original_name=row["original_name"],
                size_bytes=row["size_bytes"],
                status=row["status"],
                created_at=row["created_at"],
                issue_type=row["issue_type"],
                severity=row["severity"],
                suggested_fix=row["suggested_fix"],
            )
            for row in rows
        ]


def _to_record(row: dict[str, Any]) -> SubmissionRecord:
    return SubmissionRecord(
        id=row["id"],
        original_name=row["original_name"],
        content_hash=row["content_hash"],
        size_bytes=row["size_bytes"],
        sanitized_text=row["sanitized_text"],
        status=row["status"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )
