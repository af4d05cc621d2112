from dataclasses import dataclass
from datetime import datetime
from typing import ClassVar


class SubmissionStatus:
    """Allowed values of the submissions.status column."""

    PROCESSING: ClassVar[str] = "processing"
    PROCESSED: ClassVar[str] = "processed"
    CACHED: ClassVar[str] = "cached"
    DUPLICATE: ClassVar[str] = "duplicate"
    FAILED: ClassVar[str] = "failed"

    ALL: ClassVar[frozenset[str]] = frozenset(
        {PROCESSING, PROCESSED, CACHED, DUPLICATE, FAILED}
    )
    TERMINAL: ClassVar[frozenset[str]] = frozenset({PROCESSED, CACHED, DUPLICATE, FAILED})
    # Terminal states that carry a verdict (own or reused).
    WITH_VERDICT: ClassVar[frozenset[str]] = frozenset({PROCESSED, CACHED, DUPLICATE})


SEVERITIES: frozenset[str] = frozenset({"Low", "Medium", "High", "Critical"})


@dataclass(frozen=True)
class NewSubmission:
    """Fields supplied by the caller when a submission row is created."""

    original_name: str
    content_hash: str
    size_bytes: int
    sanitized_text: str


@dataclass(frozen=True)
class SubmissionRecord:
    """Represents a row from the submissions table."""

    id: int
    original_name: str
    content_hash: str
    size_bytes: int
    sanitized_text: str
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in SubmissionStatus.TERMINAL


@dataclass(frozen=True)
class VerdictRecord:
    """Represents a row from the verdicts table."""

    id: int
    submission_id: int
    issue_type: str
    root_cause: str
    suggested_fix: str
    severity: str
    produced_by: str
    produced_at: datetime | None = None


@dataclass(frozen=True)
class CacheLinkRecord:
    """Represents a row from the cache_links table."""

    id: int
    source_hash: str
    matched_submission_id: int
    similarity_score: float
    reused_verdict_id: int
    created_at: datetime | None = None


@dataclass(frozen=True)
class CandidateRow:
    """Sanitized text of a verdict-bearing submission, for similarity scans."""

    submission_id: int
    sanitized_text: str
    verdict_id: int | None
    created_at: datetime | None = None


@dataclass(frozen=True)
class HistoryEntry:
    """Submission joined with its (own or reused) verdict summary."""

    submission_id: int
    original_name: str
    size_bytes: int
    status: str
    created_at: datetime | None = None
    issue_type: str | None = None
    severity: str | None = None
    suggested_fix: str | None = None
