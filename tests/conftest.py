import json
from collections.abc import Callable
from unittest.mock import MagicMock

import pytest

from app.analysis.analyzer import Analyzer
from app.database.memory_store import InMemoryRecordStore
from app.processor.processor import SubmissionProcessor
from app.processor.upload_validator import UploadValidator
from app.similarity.candidate_provider import RecentSubmissionsProvider

# Twenty distinct words of three or more letters that no redaction rule touches.
WORDS = [
    "alpha", "bravo", "charlie", "delta", "echo",
    "foxtrot", "golf", "hotel", "india", "juliet",
    "kilo", "lima", "mike", "november", "oscar",
    "papa", "quebec", "romeo", "sierra", "tango",
]

VERDICT_PAYLOAD = {
    "issue_type": "NullPointerException",
    "root_cause": "The order service dereferenced a missing customer record.",
    "suggested_fix": "Check the customer lookup result before use.",
    "severity": "High",
}


def make_client(payload: dict[str, object] | None = None) -> MagicMock:
    """A mock analysis client that always returns *payload* as JSON."""
    client = MagicMock()
    client.create_chat_completion.return_value = json.dumps(payload or VERDICT_PAYLOAD)
    return client


def make_processor(
    store: InMemoryRecordStore,
    client: MagicMock,
    *,
    threshold: float = 0.8,
    window_size: int = 100,
    max_retries: int = 2,
) -> SubmissionProcessor:
    analyzer = Analyzer(
        client=client,
        model="test-model",
        max_retries=max_retries,
        retry_wait_seconds=0,
    )
    return SubmissionProcessor(
        store=store,
        analyzer=analyzer,
        candidate_provider=RecentSubmissionsProvider(store, window_size),
        validator=UploadValidator(1024 * 1024, [".log", ".txt"]),
        similarity_threshold=threshold,
    )


@pytest.fixture
def memory_store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def analysis_client() -> MagicMock:
    return make_client()


@pytest.fixture
def processor(
    memory_store: InMemoryRecordStore,
    analysis_client: MagicMock,
) -> SubmissionProcessor:
    return make_processor(memory_store, analysis_client)


@pytest.fixture
def words() -> list[str]:
    return list(WORDS)


@pytest.fixture
def verdict_payload() -> dict[str, object]:
    return dict(VERDICT_PAYLOAD)


@pytest.fixture
def processor_factory() -> Callable[..., SubmissionProcessor]:
    return make_processor


@pytest.fixture
def client_factory() -> Callable[..., MagicMock]:
    return make_client
