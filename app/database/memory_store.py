"""In-process record store with the same constraints as the PostgreSQL schema.

Useful for local development, tests, and single-process runs where no
database is configured. All operations hold one lock, so each call is
atomic with respect to the others.
"""

import dataclasses
import itertools
import threading
from datetime import datetime, timezone

from app.analysis.models import Verdict
from app.database.exceptions import (
    DuplicateContentHashError,
    InvalidTransitionError,
    RecordNotFoundError,
    StorageError,
)
from app.database.models import (
    SEVERITIES,
    CacheLinkRecord,
    CandidateRow,
    HistoryEntry,
    NewSubmission,
    SubmissionRecord,
    SubmissionStatus,
    VerdictRecord,
)
from app.database.store import BaseRecordStore


class InMemoryRecordStore(BaseRecordStore):
    """Dictionary-backed record store."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._submission_ids = itertools.count(1)
        self._verdict_ids = itertools.count(1)
        self._cache_link_ids = itertools.count(1)
        self._submissions: dict[int, SubmissionRecord] = {}
        self._ids_by_hash: dict[str, int] = {}
        self._verdicts: dict[int, VerdictRecord] = {}
        self._verdict_ids_by_submission: dict[int, int] = {}
        self._cache_links: dict[int, CacheLinkRecord] = {}
        self._cache_link_ids_by_hash: dict[str, int] = {}

    # ------------------------------------------------------------------
    # Submissions
    # ------------------------------------------------------------------

    def insert_submission(self, submission: NewSubmission, status: str) -> SubmissionRecord:
        if status not in SubmissionStatus.ALL:
            raise StorageError(f"Unknown submission status '{status}'")
        if submission.size_bytes < 0:
            raise StorageError("size_bytes must be >= 0")
        with self._lock:
            if submission.content_hash in self._ids_by_hash:
                raise DuplicateContentHashError(submission.content_hash)
            now = _now()
            record = SubmissionRecord(
                id=next(self._submission_ids),
                original_name=submission.original_name,
                content_hash=submission.content_hash,
                size_bytes=submission.size_bytes,
                sanitized_text=submission.sanitized_text,
                status=status,
                created_at=now,
                updated_at=now,
            )
            self._submissions[record.id] = record
            self._ids_by_hash[record.content_hash] = record.id
            return record

    def get_by_hash(self, content_hash: str) -> SubmissionRecord | None:
        with self._lock:
            submission_id = self._ids_by_hash.get(content_hash)
            return self._submissions.get(submission_id) if submission_id else None

    def get_by_id(self, submission_id: int) -> SubmissionRecord | None:
        with self._lock:
            return self._submissions.get(submission_id)

    def list_recent_sanitized(
        self,
        limit: int,
        exclude_non_terminal: bool = True,
    ) -> list[CandidateRow]:
        with self._lock:
            rows: list[CandidateRow] = []
            for record in self._newest_first():
                if len(rows) >= limit:
                    break
                if exclude_non_terminal and record.status not in SubmissionStatus.WITH_VERDICT:
                    continue
                verdict = self._resolve_verdict(record)
                rows.append(
                    CandidateRow(
                        submission_id=record.id,
                        sanitized_text=record.sanitized_text,
                        verdict_id=verdict.id if verdict else None,
                        created_at=record.created_at,
                    )
                )
            return rows

    def update_status(self, submission_id: int, status: str) -> None:
        if status not in SubmissionStatus.TERMINAL:
            raise InvalidTransitionError(f"'{status}' is not a terminal status")
        with self._lock:
            record = self._submissions.get(submission_id)
            if record is None:
                raise RecordNotFoundError(f"Submission {submission_id} not found")
            if record.is_terminal:
                raise InvalidTransitionError(
                    f"Submission {submission_id} is already {record.status}"
                )
            self._submissions[submission_id] = dataclasses.replace(
                record, status=status, updated_at=_now()
            )

    # ------------------------------------------------------------------
    # Verdicts and cache links
    # ------------------------------------------------------------------

    def insert_verdict(self, submission_id: int, verdict: Verdict) -> VerdictRecord:
        if verdict.severity not in SEVERITIES:
            raise StorageError(f"Unknown severity '{verdict.severity}'")
        with self._lock:
            if submission_id not in self._submissions:
                raise RecordNotFoundError(f"Submission {submission_id} not found")
            if submission_id in self._verdict_ids_by_submission:
                raise StorageError(f"Submission {submission_id} already has a verdict")
            record = VerdictRecord(
                id=next(self._verdict_ids),
                submission_id=submission_id,
                issue_type=verdict.issue_type,
                root_cause=verdict.root_cause,
                suggested_fix=verdict.suggested_fix,
                severity=verdict.severity,
                produced_by=verdict.produced_by,
                produced_at=_now(),
            )
            self._verdicts[record.id] = record
            self._verdict_ids_by_submission[submission_id] = record.id
            return record

    def insert_cache_link(
        self,
        source_hash: str,
        matched_submission_id: int,
        similarity_score: float,
        reused_verdict_id: int,
    ) -> CacheLinkRecord:
        if not 0.0 <= similarity_score <= 1.0:
            raise StorageError(f"similarity_score {similarity_score} outside [0, 1]")
        with self._lock:
            if source_hash not in self._ids_by_hash:
                raise RecordNotFoundError(f"No submission with content hash {source_hash}")
            if matched_submission_id not in self._submissions:
                raise RecordNotFoundError(f"Submission {matched_submission_id} not found")
            if reused_verdict_id not in self._verdicts:
                raise RecordNotFoundError(f"Verdict {reused_verdict_id} not found")
            record = CacheLinkRecord(
                id=next(self._cache_link_ids),
                source_hash=source_hash,
                matched_submission_id=matched_submission_id,
                similarity_score=similarity_score,
                reused_verdict_id=reused_verdict_id,
                created_at=_now(),
            )
            self._cache_links[record.id] = record
            self._cache_link_ids_by_hash[source_hash] = record.id
            return record

    def get_verdict_for_submission(self, submission_id: int) -> VerdictRecord | None:
        with self._lock:
            record = self._submissions.get(submission_id)
            return self._resolve_verdict(record) if record else None

    def get_cache_link(self, source_hash: str) -> CacheLinkRecord | None:
        with self._lock:
            link_id = self._cache_link_ids_by_hash.get(source_hash)
            return self._cache_links.get(link_id) if link_id else None

    # ------------------------------------------------------------------
    # Composite operations
    # ------------------------------------------------------------------

    def record_cache_hit(
        self,
        submission: NewSubmission,
        matched_submission_id: int,
        similarity_score: float,
        reused_verdict_id: int,
    ) -> tuple[SubmissionRecord, CacheLinkRecord]:
        with self._lock:
            if matched_submission_id not in self._submissions:
                raise RecordNotFoundError(f"Submission {matched_submission_id} not found")
            if reused_verdict_id not in self._verdicts:
                raise RecordNotFoundError(f"Verdict {reused_verdict_id} not found")
            if not 0.0 <= similarity_score <= 1.0:
                raise StorageError(f"similarity_score {similarity_score} outside [0, 1]")
            record = self.insert_submission(submission, SubmissionStatus.CACHED)
            link = self.insert_cache_link(
                submission.content_hash,
                matched_submission_id,
                similarity_score,
                reused_verdict_id,
            )
            return record, link

    def complete_with_verdict(self, submission_id: int, verdict: Verdict) -> VerdictRecord:
        with self._lock:
            record = self._submissions.get(submission_id)
            if record is None:
                raise RecordNotFoundError(f"Submission {submission_id} not found")
            if record.is_terminal:
                raise InvalidTransitionError(
                    f"Submission {submission_id} is already {record.status}"
                )
            verdict_record = self.insert_verdict(submission_id, verdict)
            self.update_status(submission_id, SubmissionStatus.PROCESSED)
            return verdict_record

    def list_history(self, limit: int) -> list[HistoryEntry]:
        with self._lock:
            entries: list[HistoryEntry] = []
            for record in self._newest_first()[:limit]:
                verdict = self._resolve_verdict(record)
                entries.append(
                    HistoryEntry(
                        submission_id=record.id,
                        original_name=record.original_name,
                        size_bytes=record.size_bytes,
                        status=record.status,
                        created_at=record.created_at,
                        issue_type=verdict.issue_type if verdict else None,
                        severity=verdict.severity if verdict else None,
                        suggested_fix=verdict.suggested_fix if verdict else None,
                    )
                )
            return entries

    # ------------------------------------------------------------------
    # Helpers (caller holds the lock)
    # ------------------------------------------------------------------

    def _newest_first(self) -> list[SubmissionRecord]:
        # Ids come from a counter, so they order rows even when timestamps tie.
        return sorted(self._submissions.values(), key=lambda r: r.id, reverse=True)

    def _resolve_verdict(self, record: SubmissionRecord) -> VerdictRecord | None:
        verdict_id = self._verdict_ids_by_submission.get(record.id)
        if verdict_id is None:
            link_id = self._cache_link_ids_by_hash.get(record.content_hash)
            if link_id is not None:
                verdict_id = self._cache_links[link_id].reused_verdict_id
        return self._verdicts.get(verdict_id) if verdict_id is not None else None


def _now() -> datetime:
    return datetime.now(timezone.utc)

