"""Aggregate a wardrobe into its dominant colors, categories and brands."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from models.wardrobe_item import WardrobeItem

logger = logging.getLogger(__name__)

DEFAULT_TOP_COLORS = ["Black", "White", "Blue"]
DEFAULT_TOP_CATEGORIES = ["Tops", "Bottoms", "Dresses"]
# Style analysis is not derived from the wardrobe yet; every analysis carries this list.
COMMON_STYLES = ["Casual", "Classic", "Modern"]
TOP_N = 3


@dataclass(frozen=True)
class WardrobeFeatureAnalysis:
    """Most frequent wardrobe features, each ranked by descending count."""

    top_colors: List[str] = field(default_factory=lambda: list(DEFAULT_TOP_COLORS))
    top_categories: List[str] = field(default_factory=lambda: list(DEFAULT_TOP_CATEGORIES))
    top_brands: List[str] = field(default_factory=list)
    common_styles: List[str] = field(default_factory=lambda: list(COMMON_STYLES))

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            "topColors": list(self.top_colors),
            "topCategories": list(self.top_categories),
            "topBrands": list(self.top_brands),
            "commonStyles": list(self.common_styles),
        }


def default_analysis() -> WardrobeFeatureAnalysis:
    return WardrobeFeatureAnalysis()


def top_values(values: Iterable[Optional[str]], limit: int = TOP_N) -> List[str]:
    """Rank non-empty values by count; ties keep the order of first appearance."""

    counts = Counter(value for value in values if value)
    # Counter preserves insertion order and sorted() is stable.
    ranked = sorted(counts.items(), key=lambda kv: -kv[1])
    return [value for value, _ in ranked[:limit]]


def analyze_wardrobe_features(items: List[WardrobeItem]) -> WardrobeFeatureAnalysis:
    """Tally the wardrobe and return its top features, or the defaults when empty."""

    if not items:
        logger.info("Empty wardrobe; using default feature analysis")
        return default_analysis()

    top_colors = top_values(item.color for item in items)
    top_categories = top_values(item.category for item in items)
    top_brands = top_values(item.brand for item in items)

    analysis = WardrobeFeatureAnalysis(
        top_colors=top_colors or list(DEFAULT_TOP_COLORS),
        top_categories=top_categories or list(DEFAULT_TOP_CATEGORIES),
        top_brands=top_brands,
        common_styles=list(COMMON_STYLES),
    )
    logger.debug("Wardrobe analysis", extra={"analysis": analysis.to_dict(), "item_count": len(items)})
    return analysis


__all__ = [
    "COMMON_STYLES",
    "DEFAULT_TOP_COLORS",
    "DEFAULT_TOP_CATEGORIES",
    "WardrobeFeatureAnalysis",
    "analyze_wardrobe_features",
    "default_analysis",
    "top_values",
]
