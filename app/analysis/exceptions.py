class AnalysisError(Exception):
    """Raised when log analysis fails."""


class AnalysisValidationError(AnalysisError):
    """Raised when the analysis response fails verdict validation."""


class AnalysisNetworkError(AnalysisError):
    """Raised when the AI provider call fails due to network/infrastructure issues."""
