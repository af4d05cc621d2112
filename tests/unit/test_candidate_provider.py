from unittest.mock import MagicMock

import pytest

from app.analysis.models import Verdict
from app.database.memory_store import InMemoryRecordStore
from app.database.models import CandidateRow, NewSubmission, SubmissionStatus
from app.similarity.candidate_provider import RecentSubmissionsProvider

_VERDICT = Verdict(
    issue_type="Timeout",
    root_cause="Upstream took too long.",
    suggested_fix="Raise the timeout.",
    severity="Medium",
    produced_by="test-model",
)


def _new(name: str, text: str) -> NewSubmission:
    return NewSubmission(
        original_name=name,
        content_hash=name.ljust(64, "0"),
        size_bytes=len(text),
        sanitized_text=text,
    )


def _processed(store: InMemoryRecordStore, name: str, text: str) -> int:
    record = store.insert_submission(_new(name, text), SubmissionStatus.PROCESSING)
    store.complete_with_verdict(record.id, _VERDICT)
    return record.id


class TestRecentSubmissionsProvider:
    def test_tokenizes_rows_most_recent_first(self, memory_store: InMemoryRecordStore) -> None:
        first = _processed(memory_store, "a", "disk full on volume")
        second = _processed(memory_store, "b", "connection refused by upstream")
        candidates = RecentSubmissionsProvider(memory_store).candidates()
        assert [c.submission_id for c in candidates] == [second, first]
        assert candidates[0].tokens == frozenset({"connection", "refused", "upstream"})
        assert all(c.has_verdict for c in candidates)

    def test_excludes_failed_and_processing(self, memory_store: InMemoryRecordStore) -> None:
        kept = _processed(memory_store, "a", "disk full on volume")
        failed = memory_store.insert_submission(_new("b", "x"), SubmissionStatus.PROCESSING)
        memory_store.update_status(failed.id, SubmissionStatus.FAILED)
        memory_store.insert_submission(_new("c", "y"), SubmissionStatus.PROCESSING)
        candidates = RecentSubmissionsProvider(memory_store).candidates()
        assert [c.submission_id for c in candidates] == [kept]

    def test_window_limits_candidates(self, memory_store: InMemoryRecordStore) -> None:
        for name in ("a", "b", "c"):
            _processed(memory_store, name, f"log {name}")
        provider = RecentSubmissionsProvider(memory_store, window_size=2)
        assert len(provider.candidates()) == 2
        assert provider.window_size == 2

    def test_requests_terminal_rows_from_store(self) -> None:
        store = MagicMock()
        store.list_recent_sanitized.return_value = [
            CandidateRow(submission_id=7, sanitized_text="Disk FULL", verdict_id=3),
        ]
        candidates = RecentSubmissionsProvider(store, window_size=5).candidates()
        store.list_recent_sanitized.assert_called_once_with(5, exclude_non_terminal=True)
        assert candidates[0].submission_id == 7
        assert candidates[0].verdict_id == 3
        assert candidates[0].tokens == frozenset({"disk", "full"})

    def test_rejects_zero_window(self, memory_store: InMemoryRecordStore) -> None:
        with pytest.raises(ValueError, match="window_size"):
            RecentSubmissionsProvider(memory_store, window_size=0)
