from dataclasses import asdict, dataclass
from typing import Any

from app.database.models import CacheLinkRecord, SubmissionRecord, VerdictRecord


@dataclass(frozen=True)
class SubmissionOutcome:
    """Result returned to the caller of SubmissionProcessor.submit().

    status is one of duplicate, cached, processed, failed; never processing.
    similarity_score and matched_submission_id are set only for cached.
    """

    status: str
    submission_id: int
    verdict: VerdictRecord | None = None
    similarity_score: float | None = None
    matched_submission_id: int | None = None
    error_message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "status": self.status,
            "submission_id": self.submission_id,
            "verdict": _verdict_to_dict(self.verdict),
        }
        if self.similarity_score is not None:
            payload["similarity_score"] = round(self.similarity_score, 4)
            payload["matched_submission_id"] = self.matched_submission_id
        if self.error_message is not None:
            payload["error"] = self.error_message
        return payload


@dataclass(frozen=True)
class SubmissionDetail:
    """A stored submission with its verdict and, for cached ones, the link used."""

    submission: SubmissionRecord
    verdict: VerdictRecord | None = None
    cache_link: CacheLinkRecord | None = None


def _verdict_to_dict(verdict: VerdictRecord | None) -> dict[str, Any] | None:
    if verdict is None:
        return None
    payload = asdict(verdict)
    if verdict.produced_at is not None:
        payload["produced_at"] = verdict.produced_at.isoformat()
    return payload
