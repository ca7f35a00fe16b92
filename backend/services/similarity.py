"""Lexical similarity between taxonomy skill labels."""

import re

# Letters and digits of any script survive; punctuation, symbols and "_" go
_NON_ALNUM_RE = re.compile(r"[^\w\s]|_")

# Score returned when one normalized label contains the other
CONTAINMENT_SCORE = 0.8


def normalize_title(title: str) -> str:
    """Lowercase, drop everything but letters, digits and whitespace, trim."""
    return _NON_ALNUM_RE.sub("", title.lower()).strip()


def jaccard(a: set, b: set) -> float:
    """|a & b| / |a | b|, or 0.0 when both sets are empty."""
    union = a | b
    if not union:
        return 0.0
    return len(a & b) / len(union)


def title_similarity(a: str, b: str) -> float:
    """Compare two skill labels. Returns 0.0-1.0.

    Identical after normalization -> 1.0, substring containment in either
    direction -> 0.8, otherwise token-set Jaccard. A blank label never
    matches; a non-blank label always matches itself.
    """
    if not a.strip() or not b.strip():
        return 0.0

    norm_a = normalize_title(a)
    norm_b = normalize_title(b)

    if norm_a == norm_b:
        return 1.0
    if not norm_a or not norm_b:
        return 0.0
    if norm_a in norm_b or norm_b in norm_a:
        return CONTAINMENT_SCORE

    return jaccard(set(norm_a.split()), set(norm_b.split()))
