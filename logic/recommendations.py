"""Wardrobe-driven listing recommendations."""

from __future__ import annotations

import contextvars
import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence

from clovet_app.logging_config import get_logger, log_event, operation_context
from logic.wardrobe_analysis import WardrobeFeatureAnalysis, analyze_wardrobe_features
from models.color_theory import complementary_colors
from models.listing import SearchResultItem
from models.wardrobe_item import WardrobeItem
from tools.errors import ClovetError
from tools.ttl_cache import Clock

logger = get_logger(__name__)

RECOMMENDATION_CACHE_TTL_SECONDS = 30 * 60


class ListingSearch(Protocol):
    def search(self, keyword: str, region: str = "sg") -> List[SearchResultItem]:
        ...


class WardrobeReader(Protocol):
    def list_items_for_user(self, user_id: str) -> List[WardrobeItem]:
        ...


@dataclass(frozen=True)
class RecommendationCacheEntry:
    user_id: str
    data: List[SearchResultItem]
    timestamp: float
    features: WardrobeFeatureAnalysis


def generate_search_queries(features: WardrobeFeatureAnalysis) -> List[str]:
    """Derive search queries from a wardrobe analysis.

    Order: color x category pairs, brands, ``"<style> clothing"``, then
    ``"<complement> accessories"`` for up to two complementary colors.
    """

    queries: List[str] = []
    for color in features.top_colors:
        for category in features.top_categories:
            queries.append(f"{color.lower()} {category.lower()}")
    queries.extend(brand.lower() for brand in features.top_brands)
    queries.extend(f"{style.lower()} clothing" for style in features.common_styles)
    queries.extend(f"{color.lower()} accessories" for color in complementary_colors(features.top_colors))
    return queries


def remove_duplicates(items: Sequence[SearchResultItem]) -> List[SearchResultItem]:
    """Drop items whose (name, price, platform) was already seen, keeping first occurrences."""

    seen = set()
    unique: List[SearchResultItem] = []
    for item in items:
        key = item.dedupe_key()
        if key in seen:
            continue
        seen.add(key)
        unique.append(item)
    return unique


class RecommendationGenerator:
    """Turns a user's wardrobe into a short list of marketplace listings.

    Results are held in a single slot for ``ttl_seconds``. The slot remembers
    whose wardrobe it was computed from; a request for another user is a miss
    and replaces it.
    """

    def __init__(
        self,
        store: WardrobeReader,
        search_gateway: ListingSearch,
        ttl_seconds: float = RECOMMENDATION_CACHE_TTL_SECONDS,
        clock: Clock | None = None,
        max_queries: int = 3,
        per_query_limit: int = 4,
        max_results: int = 12,
        max_concurrency: int = 1,
        region: str = "sg",
    ) -> None:
        self.store = store
        self.search_gateway = search_gateway
        self.ttl_seconds = ttl_seconds
        self._clock = clock or time.monotonic
        self.max_queries = max_queries
        self.per_query_limit = per_query_limit
        self.max_results = max_results
        self.max_concurrency = max(1, max_concurrency)
        self.region = region
        self._cache: Optional[RecommendationCacheEntry] = None

    def _cache_is_live(self, user_id: str) -> bool:
        return (
            self._cache is not None
            and self._cache.user_id == user_id
            and self._clock() - self._cache.timestamp < self.ttl_seconds
        )

    def _search_one(self, query: str) -> Optional[List[SearchResultItem]]:
        try:
            return self.search_gateway.search(query, self.region)
        except ClovetError as exc:
            logger.warning(
                "Recommendation query failed; continuing",
                extra={"query": query, "error_type": type(exc).__name__, "error": str(exc)},
            )
            return None

    def _run_queries(self, queries: Sequence[str]) -> List[Optional[List[SearchResultItem]]]:
        if self.max_concurrency == 1 or len(queries) <= 1:
            return [self._search_one(query) for query in queries]
        with ThreadPoolExecutor(max_workers=min(self.max_concurrency, len(queries))) as pool:
            futures = [
                pool.submit(contextvars.copy_context().run, self._search_one, query) for query in queries
            ]
            return [future.result() for future in futures]

    def recommend(self, user_id: str, force_refresh: bool = False) -> List[SearchResultItem]:
        """Return up to ``max_results`` listings inspired by the user's wardrobe."""

        if not force_refresh and self._cache_is_live(user_id):
            logger.info("Returning cached recommendations")
            return self._cache.data

        with operation_context("recommendations:recommend") as correlation_id:
            try:
                items = self.store.list_items_for_user(user_id)
            except Exception:
                logger.exception("Failed to load wardrobe for recommendations")
                return []

            features = analyze_wardrobe_features(items)
            queries = generate_search_queries(features)[: self.max_queries]
            log_event(
                logger,
                logging.INFO,
                "recommendation_queries_generated",
                correlation_id=correlation_id,
                queries=queries,
                wardrobe_size=len(items),
            )

            gathered: List[SearchResultItem] = []
            for results in self._run_queries(queries):
                if results is not None:
                    gathered.extend(results[: self.per_query_limit])

            recommendations = remove_duplicates(gathered)[: self.max_results]
            self._cache = RecommendationCacheEntry(
                user_id=user_id, data=recommendations, timestamp=self._clock(), features=features
            )
            log_event(
                logger,
                logging.INFO,
                "recommendations_generated",
                correlation_id=correlation_id,
                count=len(recommendations),
            )
            return recommendations

    def get_cached_features(self, user_id: str) -> Optional[WardrobeFeatureAnalysis]:
        if self._cache is None or self._cache.user_id != user_id:
            return None
        return self._cache.features

    def clear_cache(self) -> None:
        self._cache = None


__all__ = [
    "RecommendationGenerator",
    "RecommendationCacheEntry",
    "generate_search_queries",
    "remove_duplicates",
]
