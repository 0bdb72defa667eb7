"""Normalized edit-distance similarity for fuzzy field matching."""

import re

from rapidfuzz.distance import Levenshtein

# Words that carry no meaning in a skill category name ("Technical Skills").
_GENERIC_CATEGORY_WORDS = re.compile(r"\bskills?\b", re.IGNORECASE)


def similarity(a: str, b: str) -> float:
    """(max_len - levenshtein) / max_len, case-insensitive; 1.0 for two empty strings."""
    a, b = a.lower(), b.lower()
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0
    return (longest - Levenshtein.distance(a, b)) / longest


def category_similarity(a: str, b: str) -> float:
    """Similarity of skill category names, ignoring generic words such as "skills"."""
    return similarity(_normalize_category(a), _normalize_category(b))


def _normalize_category(category: str) -> str:
    stripped = " ".join(_GENERIC_CATEGORY_WORDS.sub(" ", category).split())
    # "Skills" on its own stays comparable with other bare "Skills" groups
    return stripped or category.strip()
