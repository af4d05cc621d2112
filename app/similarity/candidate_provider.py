from abc import ABC, abstractmethod

from app.database.store import BaseRecordStore
from app.similarity.models import Candidate
from app.similarity.tokenizer import tokenize


class BaseCandidateProvider(ABC):
    """Supplies the recency-ordered window of cache-source candidates."""

    @abstractmethod
    def candidates(self) -> list[Candidate]:
        """Return candidates, most recent first."""


class RecentSubmissionsProvider(BaseCandidateProvider):
    """Reads the last *window_size* verdict-bearing submissions from the store.

    The read is a snapshot: a submission completing concurrently may be
    missing from it, which costs at most one extra analysis call.
    """

    def __init__(self, store: BaseRecordStore, window_size: int = 100) -> None:
        if window_size < 1:
            raise ValueError(f"window_size must be >= 1, got {window_size}")
        self._store = store
        self._window_size = window_size

    @property
    def window_size(self) -> int:
        return self._window_size

    def candidates(self) -> list[Candidate]:
        rows = self._store.list_recent_sanitized(self._window_size, exclude_non_terminal=True)
        return [
            Candidate(
                submission_id=row.submission_id,
                tokens=tokenize(row.sanitized_text),
                verdict_id=row.verdict_id,
                created_at=row.created_at,
            )
            for row in rows
        ]
