from unittest.mock import MagicMock

import pytest

from app.analysis.models import Verdict
from app.database.exceptions import StorageError
from app.database.models import NewSubmission, SubmissionStatus
from app.database.repositories.cache_link_repository import CacheLinkRepository
from app.database.repositories.submission_repository import SubmissionRepository
from app.database.repositories.verdict_repository import VerdictRepository


def _conn_returning_no_row() -> MagicMock:
    conn = MagicMock()
    conn.cursor.return_value.__enter__.return_value.fetchone.return_value = None
    return conn


class TestInsertReturningNoRow:
    def test_submission_insert_raises_storage_error(self) -> None:
        submission = NewSubmission(
            original_name="a.log",
            content_hash="ab" * 32,
            size_bytes=4,
            sanitized_text="boom",
        )

        with pytest.raises(StorageError, match="submissions"):
            SubmissionRepository().insert(
                _conn_returning_no_row(), submission, SubmissionStatus.PROCESSING
            )

    def test_verdict_insert_raises_storage_error(self) -> None:
        verdict = Verdict(
            issue_type="Crash",
            root_cause="Unknown.",
            suggested_fix="Investigate.",
            severity="Low",
            produced_by="test-model",
        )

        with pytest.raises(StorageError, match="verdicts"):
            VerdictRepository().insert(_conn_returning_no_row(), 1, verdict)

    def test_cache_link_insert_raises_storage_error(self) -> None:
        with pytest.raises(StorageError, match="cache_links"):
            CacheLinkRepository().insert(_conn_returning_no_row(), "ab" * 32, 1, 0.9, 2)
