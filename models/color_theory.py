"""Complementary color lookups used to broaden wardrobe-driven searches."""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List

logger = logging.getLogger(__name__)

# Partial table: colors without an entry contribute no complement.
COLOR_COMPLEMENTS: Dict[str, str] = {
    "Black": "White",
    "White": "Black",
    "Blue": "Orange",
    "Red": "Green",
    "Green": "Red",
    "Yellow": "Purple",
    "Purple": "Yellow",
    "Pink": "Green",
    "Brown": "Blue",
    "Gray": "Yellow",
    "Navy": "Gold",
    "Beige": "Navy",
}


def complementary(color: str) -> str | None:
    """Return the complement of a wardrobe color, or ``None`` when unknown."""

    return COLOR_COMPLEMENTS.get(color)


def complementary_colors(top_colors: Iterable[str], limit: int = 2) -> List[str]:
    """Return complements for the given colors in order, capped at ``limit``."""

    colors = list(top_colors)
    complements = [c for c in (complementary(color) for color in colors) if c]
    logger.debug("complementary colors for %s -> %s", colors, complements[:limit])
    return complements[:limit]


__all__ = ["COLOR_COMPLEMENTS", "complementary", "complementary_colors"]
