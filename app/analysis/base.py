from abc import ABC, abstractmethod

from app.analysis.models import Verdict


class BaseAnalyzer(ABC):
    """Contract for all log analysis adapters."""

    @abstractmethod
    def analyze(self, sanitized_text: str) -> Verdict:
        """Produce a structured verdict for a sanitized log.

        Args:
            sanitized_text: Redacted log text. Raw content never reaches an analyzer.

        Returns:
            Verdict with issue type, root cause, suggested fix, and severity.

        Raises:
            AnalysisError: on timeout, transport failure, or unusable response,
                after the configured retries are exhausted.
        """

    @property
    @abstractmethod
    def model(self) -> str:
        """Identifier of the model that produces verdicts."""
