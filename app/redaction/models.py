from dataclasses import dataclass, field


@dataclass(frozen=True)
class RedactionResult:
    """Output of the redaction step."""

    sanitized_text: str
    counts: dict[str, int] = field(default_factory=dict)  # e.g. {"IP": 2, "EMAIL": 1}

    @property
    def total(self) -> int:
        return sum(self.counts.values())
