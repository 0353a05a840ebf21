"""Keyword heuristics that infer listing features from free text.

Every function here is pure and total: unknown input yields a documented
default rather than an error. Matching is a single front-to-back pass over
the ordered tables in :mod:`models.taxonomy`, so the first hit wins.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence, Tuple

from models.taxonomy import (
    BRAND_KEYWORDS,
    CATEGORY_KEYWORDS,
    COLOR_KEYWORDS,
    COLOR_NORMALIZATION,
    DEFAULT_BRAND,
    DEFAULT_CATEGORY,
    DEFAULT_COLOR,
    DEFAULT_DETECTED_CATEGORY,
    DEFAULT_MATERIAL,
    DETECTED_TYPE_CATEGORIES,
    MATERIAL_KEYWORDS,
)


def _first_substring(text: str, keywords: Iterable[str]) -> Optional[str]:
    haystack = (text or "").lower()
    for keyword in keywords:
        if keyword.lower() in haystack:
            return keyword
    return None


def _first_pair(text: str, table: Sequence[Tuple[str, str]]) -> Optional[str]:
    haystack = (text or "").lower()
    for pattern, result in table:
        if pattern in haystack:
            return result
    return None


def extract_brand(title: str) -> str:
    """Return the first known brand mentioned in ``title``."""

    return _first_substring(title, BRAND_KEYWORDS) or DEFAULT_BRAND


def categorize(title: str) -> str:
    """Return the category of the first keyword found in ``title``."""

    return _first_pair(title, CATEGORY_KEYWORDS) or DEFAULT_CATEGORY


def extract_color(title: str) -> str:
    """Return the first color word in ``title`` with its first letter capitalized."""

    color = _first_substring(title, COLOR_KEYWORDS)
    return color.capitalize() if color else DEFAULT_COLOR


def extract_material(description: str) -> str:
    material = _first_substring(description, MATERIAL_KEYWORDS)
    return material.capitalize() if material else DEFAULT_MATERIAL


def normalize_color(raw_color: str) -> str:
    """Map a detected color onto the app's palette, returning unknown colors unchanged.

    Lookup is case-insensitive. Note that some colors collapse onto a
    neighbour (orange becomes Red, purple and violet become Pink).
    """

    key = (raw_color or "").strip().lower()
    return COLOR_NORMALIZATION.get(key, raw_color)


def map_detected_type_to_category(raw_type: str) -> str:
    """Map a detected garment type to a wardrobe category (exact, case-sensitive)."""

    return DETECTED_TYPE_CATEGORIES.get(raw_type, DEFAULT_DETECTED_CATEGORY)


__all__ = [
    "extract_brand",
    "categorize",
    "extract_color",
    "extract_material",
    "normalize_color",
    "map_detected_type_to_category",
]
