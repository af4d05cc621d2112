from abc import ABC, abstractmethod

from app.analysis.models import Verdict
from app.database.models import (
    CacheLinkRecord,
    CandidateRow,
    HistoryEntry,
    NewSubmission,
    SubmissionRecord,
    VerdictRecord,
)


class BaseRecordStore(ABC):
    """Contract for the key-indexed record store behind the orchestrator.

    Implementations must enforce uniqueness of submissions.content_hash and
    signal a violation with DuplicateContentHashError. Every other failure
    surfaces as StorageError.
    """

    @abstractmethod
    def insert_submission(self, submission: NewSubmission, status: str) -> SubmissionRecord:
        """Create a submission row and return it with its assigned id.

        Raises:
            DuplicateContentHashError: if content_hash already exists.
        """

    @abstractmethod
    def get_by_hash(self, content_hash: str) -> SubmissionRecord | None:
        """Find a submission by content hash."""

    @abstractmethod
    def get_by_id(self, submission_id: int) -> SubmissionRecord | None:
        """Find a submission by id."""

    @abstractmethod
    def list_recent_sanitized(
        self,
        limit: int,
        exclude_non_terminal: bool = True,
    ) -> list[CandidateRow]:
        """Return up to *limit* submissions, most recent first.

        With exclude_non_terminal, only submissions that hold a verdict
        (processed, cached, duplicate) are returned: in-flight and failed
        submissions have nothing to reuse.
        """

    @abstractmethod
    def insert_verdict(self, submission_id: int, verdict: Verdict) -> VerdictRecord:
        """Persist a verdict owned by *submission_id* (at most one per submission)."""

    @abstractmethod
    def insert_cache_link(
        self,
        source_hash: str,
        matched_submission_id: int,
        similarity_score: float,
        reused_verdict_id: int,
    ) -> CacheLinkRecord:
        """Record that the submission with *source_hash* reused a verdict."""

    @abstractmethod
    def update_status(self, submission_id: int, status: str) -> None:
        """Move a processing submission to a terminal status.

        Raises:
            RecordNotFoundError: if no submission with this id exists.
            InvalidTransitionError: if the submission is already terminal.
        """

    @abstractmethod
    def get_verdict_for_submission(self, submission_id: int) -> VerdictRecord | None:
        """Return the verdict a submission owns or reused through a cache link."""

    @abstractmethod
    def get_cache_link(self, source_hash: str) -> CacheLinkRecord | None:
        """Return the cache link written for the submission with *source_hash*."""

    @abstractmethod
    def record_cache_hit(
        self,
        submission: NewSubmission,
        matched_submission_id: int,
        similarity_score: float,
        reused_verdict_id: int,
    ) -> tuple[SubmissionRecord, CacheLinkRecord]:
        """Atomically create a cached submission and its cache link.

        Raises:
            DuplicateContentHashError: if content_hash already exists.
        """

    @abstractmethod
    def complete_with_verdict(self, submission_id: int, verdict: Verdict) -> VerdictRecord:
        """Atomically persist the verdict and mark the submission processed."""

    @abstractmethod
    def list_history(self, limit: int) -> list[HistoryEntry]:
        """Return recent submissions, newest first, with verdict summaries."""
