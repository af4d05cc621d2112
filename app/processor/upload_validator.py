from pathlib import PurePath

from app.config.settings import Settings
from app.processor.exceptions import InvalidInputError


class UploadValidator:
    """Rejects uploads before they reach the dedup pipeline."""

    def __init__(
        self,
        max_size_bytes: int,
        allowed_extensions: list[str] | None = None,
    ) -> None:
        self._max_size_bytes = max_size_bytes
        self._allowed_extensions = [ext.lower() for ext in allowed_extensions or []]

    @classmethod
    def from_settings(cls, settings: Settings) -> "UploadValidator":
        return cls(settings.max_upload_size_bytes, settings.upload_extensions)

    def validate(self, raw_bytes: bytes, original_name: str) -> str:
        """Check an upload and return its decoded text.

        Raises:
            InvalidInputError: for empty, oversized, non-UTF-8, or
                disallowed-extension uploads.
        """
        if not raw_bytes:
            raise InvalidInputError(f"Upload '{original_name}' is empty")
        if len(raw_bytes) > self._max_size_bytes:
            raise InvalidInputError(
                f"Upload '{original_name}' is {len(raw_bytes)} bytes; "
                f"limit is {self._max_size_bytes}"
            )
        self._check_extension(original_name)
        try:
            return raw_bytes.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidInputError(f"Upload '{original_name}' is not valid UTF-8: {exc}") from exc

    def _check_extension(self, original_name: str) -> None:
        if not self._allowed_extensions:
            return
        suffix = PurePath(original_name).suffix.lower()
        if suffix not in self._allowed_extensions:
            raise InvalidInputError(
                f"Upload '{original_name}' has extension '{suffix}'; "
                f"allowed: {self._allowed_extensions}"
            )
