from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    similarity_threshold: float = Field(default=0.8, ge=0.0, le=1.0)
    recent_window_size: int = Field(default=100, ge=1)
    max_upload_size_bytes: int = Field(default=5 * 1024 * 1024, ge=1)
    allowed_upload_extensions: str = ".log,.txt,.json"

    record_store: str = "postgres"

    db_host: str = "localhost"
    db_port: int = 5432
    db_database: str = "logdedup"
    db_username: str = "logdedup"
    db_password: str = "secret"
    db_pool_min_size: int = Field(default=1, ge=1)
    db_pool_max_size: int = Field(default=10, ge=1)

    analysis_provider: str = "openai"
    analysis_model_name: str = "gpt-4o-mini"
    analysis_api_key: str = ""
    analysis_base_url: str | None = None
    analysis_timeout_seconds: int = Field(default=30, ge=1)
    analysis_max_retries: int = Field(default=2, ge=0)
    analysis_retry_wait_seconds: float = Field(default=1.0, ge=0.0)

    @property
    def upload_extensions(self) -> list[str]:
        """Allowed extensions, lowercased and dot-prefixed."""
        extensions = []
        for raw in self.allowed_upload_extensions.split(","):
            ext = raw.strip().lower()
            if not ext:
                continue
            extensions.append(ext if ext.startswith(".") else f".{ext}")
        return extensions
