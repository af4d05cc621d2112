import pytest
from pydantic import ValidationError

from app.config.settings import Settings


class TestSettingsDefaults:
    def test_default_app_env(self) -> None:
        s = Settings()
        assert s.app_env == "dev"

    def test_default_db_port(self) -> None:
        s = Settings()
        assert s.db_port == 5432

    def test_default_similarity_threshold(self) -> None:
        s = Settings()
        assert s.similarity_threshold == 0.8

    def test_default_recent_window_size(self) -> None:
        s = Settings()
        assert s.recent_window_size == 100

    def test_default_max_upload_size(self) -> None:
        s = Settings()
        assert s.max_upload_size_bytes == 5 * 1024 * 1024

    def test_default_record_store(self) -> None:
        s = Settings()
        assert s.record_store == "postgres"

    def test_default_analysis_provider(self) -> None:
        s = Settings()
        assert s.analysis_provider == "openai"

    def test_default_analysis_retries(self) -> None:
        s = Settings()
        assert s.analysis_max_retries == 2
        assert s.analysis_timeout_seconds == 30


class TestSettingsFromEnv:
    def test_loads_log_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        s = Settings()
        assert s.log_level == "DEBUG"

    def test_loads_db_host(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DB_HOST", "db.example.com")
        s = Settings()
        assert s.db_host == "db.example.com"

    def test_loads_similarity_threshold(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SIMILARITY_THRESHOLD", "0.65")
        s = Settings()
        assert s.similarity_threshold == 0.65

    def test_loads_recent_window_size(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RECENT_WINDOW_SIZE", "25")
        s = Settings()
        assert s.recent_window_size == 25

    def test_loads_record_store(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RECORD_STORE", "memory")
        s = Settings()
        assert s.record_store == "memory"

    def test_loads_analysis_base_url(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ANALYSIS_BASE_URL", "https://llm.internal/v1")
        s = Settings()
        assert s.analysis_base_url == "https://llm.internal/v1"


class TestSettingsValidation:
    def test_rejects_threshold_above_one(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SIMILARITY_THRESHOLD", "1.5")
        with pytest.raises(ValidationError):
            Settings()

    def test_rejects_negative_threshold(self) -> None:
        with pytest.raises(ValidationError):
            Settings(similarity_threshold=-0.1)

    def test_accepts_threshold_bounds(self) -> None:
        assert Settings(similarity_threshold=0.0).similarity_threshold == 0.0
        assert Settings(similarity_threshold=1.0).similarity_threshold == 1.0

    def test_rejects_zero_window(self) -> None:
        with pytest.raises(ValidationError):
            Settings(recent_window_size=0)

    def test_rejects_invalid_db_port(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DB_PORT", "not_a_number")
        with pytest.raises(ValidationError):
            Settings()


class TestUploadExtensions:
    def test_default_extensions(self) -> None:
        s = Settings()
        assert s.upload_extensions == [".log", ".txt", ".json"]

    def test_normalizes_case_dots_and_blanks(self) -> None:
        s = Settings(allowed_upload_extensions=" LOG, txt ,,.Out")
        assert s.upload_extensions == [".log", ".txt", ".out"]

    def test_empty_string_yields_no_extension_filter(self) -> None:
        s = Settings(allowed_upload_extensions="")
        assert s.upload_extensions == []
