"""Set-overlap similarity and recency-first candidate matching."""

from collections.abc import Iterable, Set

from app.similarity.models import Candidate, SimilarityMatch


def similarity(a: Set[str], b: Set[str]) -> float:
    """Jaccard index |A ∩ B| / |A ∪ B| in [0, 1].

    Returns 0.0 when either set is empty, so blank logs never match.
    """
    if not a or not b:
        return 0.0
    intersection = len(a & b)
    union = len(a) + len(b) - intersection
    return intersection / union


def find_best_match(
    target_tokens: Set[str],
    candidates: Iterable[Candidate],
    threshold: float,
) -> SimilarityMatch | None:
    """Return the first candidate scoring >= *threshold*.

    *candidates* must be ordered most recent first. Scanning stops at the
    first qualifying candidate rather than looking for the global maximum,
    so the most recent equivalent verdict wins over an older, closer one.
    """
    if not 0.0 <= threshold <= 1.0:
        raise ValueError(f"threshold must be within [0, 1], got {threshold}")
    for candidate in candidates:
        score = similarity(target_tokens, candidate.tokens)
        if score >= threshold:
            return SimilarityMatch(candidate=candidate, score=score)
    return None
