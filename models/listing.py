"""Marketplace listing models."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Measurements:
    """Garment measurements as free-form strings (e.g. ``'40"'``)."""

    bust: Optional[str] = None
    waist: Optional[str] = None
    hips: Optional[str] = None
    length: Optional[str] = None


@dataclass(frozen=True)
class SearchResultItem:
    """Normalized representation of a single marketplace listing.

    Instances are built once per remote fetch and never mutated; they live in
    the search cache and in transient view state only.
    """

    id: str
    name: str
    price: int
    currency: str
    platform: str
    image_url: str
    url: str
    seller: Optional[str] = None
    description: Optional[str] = None
    condition: Optional[str] = None
    size: Optional[str] = None
    brand: Optional[str] = None
    posted_date: Optional[str] = None
    category: Optional[str] = None
    color: Optional[str] = None
    material: Optional[str] = None
    measurements: Optional[Measurements] = None

    def dedupe_key(self) -> tuple[str, int, str]:
        return (self.name, self.price, self.platform)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = ["Measurements", "SearchResultItem"]
