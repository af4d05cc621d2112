from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Candidate:
    """A prior submission eligible as a near-duplicate cache source."""

    submission_id: int
    tokens: frozenset[str]
    verdict_id: int | None = None
    created_at: datetime | None = None

    @property
    def has_verdict(self) -> bool:
        return self.verdict_id is not None


@dataclass(frozen=True)
class SimilarityMatch:
    """First candidate, most recent first, at or above the threshold."""

    candidate: Candidate
    score: float
