from dataclasses import dataclass


@dataclass(frozen=True)
class Verdict:
    """Structured output of the analysis collaborator for one sanitized log."""

    issue_type: str
    root_cause: str
    suggested_fix: str
    severity: str  # one of "Low", "Medium", "High", "Critical"
    produced_by: str  # model identifier that produced the verdict
