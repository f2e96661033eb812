"""Pure set-overlap functions shared by scoring and diversification.

Why: Lexical similarity is computed over token sets and character n-gram
sets only; there are no vectors in this retriever.
"""

from collections.abc import Set
from math import sqrt


def clamp01(value: float) -> float:
    """Clamp a value into the closed interval [0, 1]."""
    return max(0.0, min(1.0, value))


def intersect_count(a: Set, b: Set) -> int:
    """Count common members of two sets, iterating the smaller one.

    Args:
        a: First set
        b: Second set

    Returns:
        Size of the intersection (0 if either set is empty)
    """
    if not a or not b:
        return 0
    smaller, larger = (a, b) if len(a) <= len(b) else (b, a)
    return sum(1 for item in smaller if item in larger)


def cosine_set_similarity(a: Set, b: Set) -> float:
    """Set overlap normalised by the geometric mean of both set sizes.

    Args:
        a: First set
        b: Second set

    Returns:
        |a ∩ b| / sqrt(|a| * |b|), 0.0 if either set is empty
    """
    if not a or not b:
        return 0.0
    overlap = intersect_count(a, b)
    if not overlap:
        return 0.0
    return overlap / sqrt(len(a) * len(b))


def max_normalized_overlap(a: Set, b: Set) -> float:
    """Set overlap normalised by the larger of both set sizes."""
    if not a or not b:
        return 0.0
    return intersect_count(a, b) / max(len(a), len(b))
