from typing import Any

import psycopg
from psycopg.rows import dict_row

from app.database.exceptions import StorageError
from app.database.models import CacheLinkRecord


class CacheLinkRepository:
    """Database operations for the cache_links audit table."""

    def insert(
        self,
        conn: psycopg.Connection[Any],
        source_hash: str,
        matched_submission_id: int,
        similarity_score: float,
        reused_verdict_id: int,
    ) -> CacheLinkRecord:
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                """
                INSERT INTO cache_links
                    (source_hash, matched_submission_id, similarity_score, reused_verdict_id)
                VALUES (%s, %s, %s, %s)
                RETURNING id, source_hash, matched_submission_id, similarity_score,
                          reused_verdict_id, created_at
                """,
                (source_hash, matched_submission_id, similarity_score, reused_verdict_id),
            )
            row = cur.fetchone()
        if row is None:
            raise StorageError("INSERT INTO cache_links returned no row")
        return _to_record(row)

    def find_by_source_hash(
        self,
        conn: psycopg.Connection[Any],
        source_hash: str,
    ) -> CacheLinkRecord | None:
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                """
                SELECT id, source_hash, matched_submission_id, similarity_score,
                       reused_verdict_id, created_at
                FROM cache_links
                WHERE source_hash = %s
                ORDER BY created_at DESC
                LIMIT 1
                """,
                (source_hash,),
            )
            row = cur.fetchone()
        return _to_record(row) if row is not None else None


def _to_record(row: dict[str, Any]) -> CacheLinkRecord:
    return CacheLinkRecord(
        id=row["id"],
        source_hash=row["source_hash"],
        matched_submission_id=row["matched_submission_id"],
        similarity_score=float(row["similarity_score"]),
        reused_verdict_id=row["reused_verdict_id"],
        created_at=row["created_at"],
    )
