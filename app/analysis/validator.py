"""Validates a parsed analysis response and builds a Verdict."""

from typing import Any

from app.analysis.exceptions import AnalysisValidationError
from app.analysis.models import Verdict
from app.database.models import SEVERITIES

_TEXT_FIELDS = ("issue_type", "root_cause", "suggested_fix")
_SEVERITY_LOOKUP = {severity.lower(): severity for severity in SEVERITIES}


def validate_and_build(data: dict[str, Any], produced_by: str) -> Verdict:
    """Validate raw parsed JSON and build a Verdict.

    Raises:
        AnalysisValidationError: on any validation failure.
    """
    texts = {field: _require_text(data, field) for field in _TEXT_FIELDS}
    severity = _build_severity(data.get("severity"))
    return Verdict(
        issue_type=texts["issue_type"],
        root_cause=texts["root_cause"],
        suggested_fix=texts["suggested_fix"],
        severity=severity,
        produced_by=produced_by,
    )


def _require_text(data: dict[str, Any], field: str) -> str:
    if field not in data:
        raise AnalysisValidationError(f"Missing required field: {field}")
    value = data[field]
    if not isinstance(value, str) or not value.strip():
        raise AnalysisValidationError(f"'{field}' must be a non-empty string")
    return value.strip()


def _build_severity(raw: Any) -> str:
    if not isinstance(raw, str):
        raise AnalysisValidationError("'severity' must be a string")
    severity = _SEVERITY_LOOKUP.get(raw.strip().lower())
    if severity is None:
        raise AnalysisValidationError(
            f"'severity' must be one of {sorted(SEVERITIES)}, got {raw!r}"
        )
    return severity
