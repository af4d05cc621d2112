from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

import psycopg
from psycopg import errors

from app.analysis.models import Verdict
from app.database.connection import get_connection
from app.database.exceptions import DuplicateContentHashError, StorageError
from app.database.models import (
    CacheLinkRecord,
    CandidateRow,
    HistoryEntry,
    NewSubmission,
    SubmissionRecord,
    SubmissionStatus,
    VerdictRecord,
)
from app.database.repositories.cache_link_repository import CacheLinkRepository
from app.database.repositories.submission_repository import SubmissionRepository
from app.database.repositories.verdict_repository import VerdictRepository
from app.database.store import BaseRecordStore

CONTENT_HASH_CONSTRAINT = "submissions_content_hash_key"


class PostgresRecordStore(BaseRecordStore):
    """Record store backed by the pooled PostgreSQL connection.

    Each public method runs in its own transaction; composite methods
    commit all of their statements together or none of them.
    """

    def __init__(
        self,
        submissions: SubmissionRepository | None = None,
        verdicts: VerdictRepository | None = None,
        cache_links: CacheLinkRepository | None = None,
    ) -> None:
        self._submissions = submissions or SubmissionRepository()
        self._verdicts = verdicts or VerdictRepository()
        self._cache_links = cache_links or CacheLinkRepository()

    def insert_submission(self, submission: NewSubmission, status: str) -> SubmissionRecord:
        with self._transaction(submission.content_hash) as conn:
            return self._submissions.insert(conn, submission, status)

    def get_by_hash(self, content_hash: str) -> SubmissionRecord | None:
        with self._transaction() as conn:
            return self._submissions.find_by_hash(conn, content_hash)

    def get_by_id(self, submission_id: int) -> SubmissionRecord | None:
        with self._transaction() as conn:
            return self._submissions.find_by_id(conn, submission_id)

    def list_recent_sanitized(
        self,
        limit: int,
        exclude_non_terminal: bool = True,
    ) -> list[CandidateRow]:
        with self._transaction() as conn:
            return self._submissions.list_recent_sanitized(conn, limit, exclude_non_terminal)

    def insert_verdict(self, submission_id: int, verdict: Verdict) -> VerdictRecord:
        with self._transaction() as conn:
            return self._verdicts.insert(conn, submission_id, verdict)

    def insert_cache_link(
        self,
        source_hash: str,
        matched_submission_id: int,
        similarity_score: float,
        reused_verdict_id: int,
    ) -> CacheLinkRecord:
        with self._transaction() as conn:
            return self._cache_links.insert(
                conn, source_hash, matched_submission_id, similarity_score, reused_verdict_id
            )

    def update_status(self, submission_id: int, status: str) -> None:
        with self._transaction() as conn:
            self._submissions.update_status(conn, submission_id, status)

    def get_verdict_for_submission(self, submission_id: int) -> VerdictRecord | None:
        with self._transaction() as conn:
            return self._verdicts.find_for_submission(conn, submission_id)

    def get_cache_link(self, source_hash: str) -> CacheLinkRecord | None:
        with self._transaction() as conn:
            return self._cache_links.find_by_source_hash(conn, source_hash)

    def record_cache_hit(
        self,
        submission: NewSubmission,
        matched_submission_id: int,
        similarity_score: float,
        reused_verdict_id: int,
    ) -> tuple[SubmissionRecord, CacheLinkRecord]:
        with self._transaction(submission.content_hash) as conn:
            record = self._submissions.insert(conn, submission, SubmissionStatus.CACHED)
            link = self._cache_links.insert(
                conn,
                submission.content_hash,
                matched_submission_id,
                similarity_score,
                reused_verdict_id,
            )
            return record, link

    def complete_with_verdict(self, submission_id: int, verdict: Verdict) -> VerdictRecord:
        with self._transaction() as conn:
            verdict_record = self._verdicts.insert(conn, submission_id, verdict)
            self._submissions.update_status(conn, submission_id, SubmissionStatus.PROCESSED)
            return verdict_record

    def list_history(self, limit: int) -> list[HistoryEntry]:
        with self._transaction() as conn:
            return self._submissions.list_history(conn, limit)

    @contextmanager
    def _transaction(
        self,
        content_hash: str | None = None,
    ) -> Generator[psycopg.Connection[Any], None, None]:
        """Yield a connection, commit on success, translate driver errors.

        The pool rolls back a connection returned with an open transaction,
        so an exception leaves no partial writes behind.
        """
        try:
            with get_connection() as conn:
                yield conn
                conn.commit()
        except errors.UniqueViolation as exc:
            if exc.diag.constraint_name == CONTENT_HASH_CONSTRAINT and content_hash:
                raise DuplicateContentHashError(content_hash) from exc
            raise StorageError(f"Unique constraint violated: {exc}") from exc
        except psycopg.Error as exc:
            raise StorageError(f"Database error: {exc}") from exc
