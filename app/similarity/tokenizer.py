import re

_SPLIT_RE = re.compile(r"\W+")
_MIN_TOKEN_LENGTH = 3


def tokenize(text: str) -> frozenset[str]:
    """Lowercase *text* and return its set of word tokens.

    Splits on runs of non-word characters and drops tokens shorter than
    three characters. Token frequency is discarded; similarity is set-based.
    """
    if not text:
        return frozenset()
    return frozenset(
        token
        for token in _SPLIT_RE.split(text.lower())
        if len(token) >= _MIN_TOKEN_LENGTH
    )
