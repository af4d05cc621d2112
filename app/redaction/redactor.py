"""Ordered, deterministic redaction of sensitive content in diagnostic logs.

Processing flow:
1. Split the text into untagged segments and existing [REDACTED:...] tags.
2. Apply each rule, in order, to the untagged segments only.
3. Collapse runs of horizontal whitespace.
4. Repeat steps 1-3 until a pass changes nothing.

Rules run most specific first so that a broad rule (paths, the long-token
catch-all) never swallows a credential that a narrower rule would have
labelled. Tags are never rescanned, so the output is a fixed point:
redacting it again is a no-op.
"""

from __future__ import annotations

import re
from collections import Counter
from typing import ClassVar

from app.logging.logger import Log
from app.redaction.base import BaseRedactor
from app.redaction.models import RedactionResult


class Redactor(BaseRedactor):
    """Regex-based redactor for free-text logs. No AI, no heuristics."""

    TAG_TEMPLATE: ClassVar[str] = "[REDACTED:{category}]"

    _TAG_RE: ClassVar[re.Pattern[str]] = re.compile(r"(\[REDACTED:[A-Z_]+\])")
    _TAG_CATEGORY_RE: ClassVar[re.Pattern[str]] = re.compile(r"\[REDACTED:([A-Z_]+)\]")
    _WHITESPACE_RE: ClassVar[re.Pattern[str]] = re.compile(r"[ \t]{2,}")

    _API_KEY_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"\b[A-Fa-f0-9]{40,}\b",
    )
    _SECRET_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"\b(?:authorization\s*[:=]\s*)?bearer\s+[A-Za-z0-9_\-.~+/]{8,}=*"
        r"|(?:token|apikey|api_key|secret|authorization|bearer)\s*[:=]\s*[A-Za-z0-9_\-.]+",
        re.IGNORECASE,
    )
    _IP_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"\b(?:(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)\.){3}"
        r"(?:25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)\b",
    )
    _URL_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"https?://[^\s)\"\]>]+",
        re.IGNORECASE,
    )
    _EMAIL_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b",
    )
    _WINDOWS_PATH_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"\b[A-Za-z]:\\(?:[^\\/:*?\"<>|\r\n]+\\)*[^\\/:*?\"<>|\s]*",
    )
    # Absolute paths only; "://" of a scheme and "a/b" fractions are not paths.
    # Closing brackets and quotes end the path.
    _UNIX_PATH_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"(?<![\w:/.~-])/[^\s/)\]\"']+(?:/[^\s/)\]\"']*)*",
    )
    _TIMESTAMP_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"\b\d{4}-\d{2}-\d{2}[T ]?\d{2}:\d{2}:\d{2}(?:[.,]\d+)?(?:Z|[+-]\d{2}:?\d{2})?",
    )
    _CONNECTION_STRING_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"\b(?:mongodb(?:\+srv)?|mysql|postgres|postgresql|redis|amqp|mssql)://[^\s)]+",
        re.IGNORECASE,
    )
    _USERNAME_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"(?:user(?:name)?|login|uid)\s*[:=]\s*[^\s,}]+",
        re.IGNORECASE,
    )
    _PASSWORD_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"(?:password|passwd|pwd)\s*[:=]\s*[^\s,}]+",
        re.IGNORECASE,
    )
    _CREDIT_CARD_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"\b(?:\d{4}[- ]?){3}\d{4}\b",
    )
    _TOKEN_RE: ClassVar[re.Pattern[str]] = re.compile(
        r"(?<![A-Za-z0-9_\-])[A-Za-z0-9_\-]{20,}(?![A-Za-z0-9_\-])",
    )

    # Order is significant: most specific first, catch-all last.
    _RULES: ClassVar[list[tuple[str, re.Pattern[str]]]] = [
        ("API_KEY", _API_KEY_RE),
        ("SECRET", _SECRET_RE),
        ("IP", _IP_RE),
        ("URL", _URL_RE),
        ("EMAIL", _EMAIL_RE),
        ("PATH", _WINDOWS_PATH_RE),
        ("PATH", _UNIX_PATH_RE),
        ("TIMESTAMP", _TIMESTAMP_RE),
        ("CONNECTION_STRING", _CONNECTION_STRING_RE),
        ("USERNAME", _USERNAME_RE),
        ("PASSWORD", _PASSWORD_RE),
        ("CREDIT_CARD", _CREDIT_CARD_RE),
        ("TOKEN", _TOKEN_RE),
    ]

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def redact(self, text: str) -> str:
        """Replace sensitive content in *text* with category tags.

        Empty input is returned as-is.
        """
        if not text:
            return text

        current = text
        while True:
            updated = self._apply_rules(current)
            if updated == current:
                return updated
            current = updated

    def redact_with_stats(self, text: str) -> RedactionResult:
        """Redact *text* and count the tags in the sanitized output."""
        sanitized = self.redact(text)
        counts = self.count_redactions(sanitized)
        if counts:
            Log.debug("Redaction tags applied", **counts)
        return RedactionResult(sanitized_text=sanitized or "", counts=counts)

    @classmethod
    def count_redactions(cls, sanitized_text: str) -> dict[str, int]:
        """Count [REDACTED:<CATEGORY>] tags per category."""
        if not sanitized_text:
            return {}
        return dict(Counter(cls._TAG_CATEGORY_RE.findall(sanitized_text)))

    @classmethod
    def rule_names(cls) -> list[str]:
        """Rule categories in application order (PATH appears once per form)."""
        return [category for category, _ in cls._RULES]

    @classmethod
    def tag(cls, category: str) -> str:
        return cls.TAG_TEMPLATE.format(category=category)

    # ------------------------------------------------------------------
    # Single pass
    # ------------------------------------------------------------------

    def _apply_rules(self, text: str) -> str:
        for category, pattern in self._RULES:
            text = self._substitute_untagged(text, pattern, self.tag(category))
        return self._WHITESPACE_RE.sub(" ", text)

    def _substitute_untagged(
        self,
        text: str,
        pattern: re.Pattern[str],
        replacement: str,
    ) -> str:
        """Apply *pattern* to the text between existing tags only.

        re.split with a capturing group alternates untagged segments
        (even indices) and tags (odd indices).
        """
        parts = self._TAG_RE.split(text)
        for i in range(0, len(parts), 2):
            if parts[i]:
                parts[i] = pattern.sub(replacement, parts[i])
        return "".join(parts)
