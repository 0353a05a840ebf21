"""Marketplace keyword search with response normalization and a short-lived cache."""

from __future__ import annotations

import logging
import re
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

import requests

from logic.feature_heuristics import categorize, extract_brand, extract_color, extract_material
from models.listing import Measurements, SearchResultItem
from tools.errors import ParseError, RemoteRequestError, TransportError, ValidationError
from tools.observability import instrument_call
from tools.ttl_cache import Clock, TTLCache

logger = logging.getLogger(__name__)

PLATFORM = "Carousell"
LISTING_URL_TEMPLATE = "https://carousell.com/p/{listing_id}"
UNKNOWN_ITEM = "Unknown Item"
SEARCH_CACHE_TTL_SECONDS = 5 * 60

_PRICE_PATTERN = re.compile(r"\d+")
_SIZE_PATTERN = re.compile(r"\bsize\s*[:\-]?\s*([A-Za-z0-9/.]+)", re.IGNORECASE)
_MEASUREMENT_PATTERN = re.compile(
    r"\b(bust|waist|hips|length)\s*[:\-]?\s*(\d+(?:\.\d+)?\s*(?:\"|cm|in(?:ches)?)?)",
    re.IGNORECASE,
)
_CONDITIONS = ("Brand new", "Like new", "Lightly used", "Well used", "Heavily used")


def _as_str(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _as_id(value: Any) -> str:
    if isinstance(value, bool):
        return ""
    return str(value) if isinstance(value, (int, str)) and value != "" else ""


def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _fold_strings(raw: Dict[str, Any]) -> List[str]:
    return [
        _as_str(fold.get("stringContent"))
        for fold in _as_list(raw.get("belowFold"))
        if isinstance(fold, dict) and _as_str(fold.get("stringContent"))
    ]


def _parse_price(raw_price: Any) -> tuple[int, str]:
    if isinstance(raw_price, (int, float)) and not isinstance(raw_price, bool):
        raw_price = str(int(raw_price))
    price_text = _as_str(raw_price)
    match = _PRICE_PATTERN.search(price_text)
    price = int(match.group(0)) if match else 0
    currency = "SGD" if price_text.startswith("S$") else "USD"
    return price, currency


def _image_url(raw: Dict[str, Any]) -> str:
    media = _as_list(raw.get("media"))
    if media and isinstance(media[0], dict):
        photo = media[0].get("photoItem")
        if isinstance(photo, dict) and _as_str(photo.get("url")):
            return photo["url"]
    return _as_str(raw.get("thumbnailURL"))


def _description(raw: Dict[str, Any]) -> str:
    for fold in _as_list(raw.get("belowFold")):
        if isinstance(fold, dict) and fold.get("component") == "paragraph":
            return _as_str(fold.get("stringContent"))
    return ""


def _condition(fold_text: Iterable[str]) -> Optional[str]:
    for text in fold_text:
        lowered = text.lower()
        for condition in _CONDITIONS:
            if condition.lower() in lowered:
                return condition
    return None


def _size(fold_text: Iterable[str]) -> Optional[str]:
    for text in fold_text:
        match = _SIZE_PATTERN.search(text)
        if match:
            return match.group(1)
    return None


def _measurements(fold_text: Iterable[str]) -> Optional[Measurements]:
    found: Dict[str, str] = {}
    for text in fold_text:
        for name, value in _MEASUREMENT_PATTERN.findall(text):
            found.setdefault(name.lower(), value.strip())
    return Measurements(**found) if found else None


def _posted_date(raw: Dict[str, Any]) -> Optional[str]:
    for fold in _as_list(raw.get("aboveFold")):
        if not isinstance(fold, dict) or fold.get("component") != "time_created":
            continue
        stamp = fold.get("timestampContent")
        seconds = stamp.get("seconds") if isinstance(stamp, dict) else None
        if isinstance(seconds, (int, float)) and not isinstance(seconds, bool):
            return datetime.fromtimestamp(seconds, tz=timezone.utc).date().isoformat()
    return None


def _seller(raw: Dict[str, Any]) -> Optional[str]:
    seller = raw.get("seller")
    if isinstance(seller, dict):
        return _as_str(seller.get("username")) or None
    return _as_str(seller) or None


def normalize_listing(raw: Dict[str, Any]) -> SearchResultItem:
    """Translate one raw marketplace item into a :class:`SearchResultItem`.

    Fields that are missing or carry an unexpected type fall back to their
    defaults instead of raising.
    """

    price, currency = _parse_price(raw.get("price"))
    listing_id_text = _as_id(raw.get("listingID"))
    item_id = _as_id(raw.get("id")) or listing_id_text or uuid.uuid4().hex[:12]
    name = _as_str(raw.get("title")) or UNKNOWN_ITEM
    description = _description(raw)
    fold_text = _fold_strings(raw)

    return SearchResultItem(
        id=item_id,
        name=name,
        price=price,
        currency=currency,
        platform=PLATFORM,
        image_url=_image_url(raw),
        url=LISTING_URL_TEMPLATE.format(listing_id=listing_id_text or item_id),
        seller=_seller(raw),
        description=description,
        condition=_condition(fold_text),
        size=_size(fold_text),
        brand=extract_brand(name),
        posted_date=_posted_date(raw),
        category=categorize(name),
        color=extract_color(name),
        material=extract_material(description),
        measurements=_measurements(fold_text),
    )


def normalize_listings(payload: Any) -> List[SearchResultItem]:
    """Normalize a raw search response, dropping entries without a usable title."""

    if not isinstance(payload, list):
        logger.warning(
            "Expected a list of listings", extra={"payload_type": type(payload).__name__}
        )
        return []

    items = [normalize_listing(raw) for raw in payload if isinstance(raw, dict)]
    return [item for item in items if item.name != UNKNOWN_ITEM]


class MarketplaceSearchGateway:
    """Keyword search against the marketplace API, memoized per (keyword, region)."""

    def __init__(
        self,
        api_key: str | None = None,
        api_host: str = "carousell.p.rapidapi.com",
        base_url: str | None = None,
        timeout_seconds: float = 10.0,
        cache: TTLCache[List[SearchResultItem]] | None = None,
        clock: Clock | None = None,
        ttl_seconds: float = SEARCH_CACHE_TTL_SECONDS,
    ) -> None:
        self.api_key = api_key
        self.api_host = api_host
        self.base_url = (base_url or f"https://{api_host}").rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.cache = cache if cache is not None else TTLCache(ttl_seconds, clock=clock)

    @staticmethod
    def cache_key(keyword: str, region: str) -> str:
        return f"{keyword}_{region.strip().lower()}"

    def _headers(self) -> Dict[str, str]:
        return {
            "x-rapidapi-host": self.api_host,
            "x-rapidapi-key": self.api_key or "",
        }

    def _fetch(self, keyword: str, region: str) -> Any:
        url = f"{self.base_url}/searchByKeyword"
        params = {"keyword": keyword, "country": region}
        try:
            response = requests.get(
                url, params=params, headers=self._headers(), timeout=self.timeout_seconds
            )
        except requests.Timeout as exc:
            logger.error("Marketplace search timed out", extra={"keyword": keyword})
            raise TransportError(
                f"Marketplace search timed out after {self.timeout_seconds}s"
            ) from exc
        except requests.RequestException as exc:
            logger.error(
                "Network error during marketplace search",
                extra={"keyword": keyword, "error": str(exc)},
            )
            raise TransportError(f"Network error searching for '{keyword}': {exc}") from exc

        if not 200 <= response.status_code < 300:
            logger.warning(
                "Non-success status from marketplace search",
                extra={"keyword": keyword, "status_code": response.status_code},
            )
            raise RemoteRequestError(
                f"HTTP error! status: {response.status_code}", status_code=response.status_code
            )

        try:
            return response.json()
        except ValueError as exc:
            raise ParseError(f"Marketplace returned a non-JSON body for '{keyword}'") from exc

    @instrument_call("marketplace_search")
    def search(self, keyword: str, region: str = "sg") -> List[SearchResultItem]:
        """Return normalized listings for ``keyword``, serving repeats from the cache.

        Raises:
            ValidationError: If the keyword is empty.
            TransportError: For connection failures and timeouts.
            RemoteRequestError: For non-2xx responses.
            ParseError: If the response body is not JSON.
        """

        keyword = (keyword or "").strip()
        if not keyword:
            raise ValidationError("Search keyword must not be empty")
        region = (region or "sg").strip().lower()

        key = self.cache_key(keyword, region)
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("Returning cached search results", extra={"keyword": keyword, "region": region})
            return cached

        payload = self._fetch(keyword, region)
        results = normalize_listings(payload)
        self.cache.set(key, results)
        logger.info(
            "Marketplace search completed",
            extra={"keyword": keyword, "region": region, "result_count": len(results)},
        )
        return results

    def get_by_id(self, listing_id: str) -> Optional[SearchResultItem]:
        """Find a listing among all live cached search results."""

        for results in self.cache.live_values():
            for item in results:
                if item.id == listing_id:
                    return item
        return None

    def clear_cache(self) -> None:
        self.cache.clear()


__all__ = [
    "PLATFORM",
    "UNKNOWN_ITEM",
    "MarketplaceSearchGateway",
    "normalize_listing",
    "normalize_listings",
]
