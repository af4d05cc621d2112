from abc import ABC, abstractmethod

from app.redaction.models import RedactionResult


class BaseRedactor(ABC):
    """Contract for all redaction adapters."""

    @abstractmethod
    def redact(self, text: str) -> str:
        """Replace sensitive content in text with [REDACTED:<CATEGORY>] tags.

        Args:
            text: Raw log text. Empty input is returned unchanged.

        Returns:
            Sanitized text. Redacting the result again returns it unchanged.
        """

    @abstractmethod
    def redact_with_stats(self, text: str) -> RedactionResult:
        """Redact text and report how many tags of each category it holds."""
