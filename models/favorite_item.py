"""Saved marketplace listings ("favorites")."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from models.listing import SearchResultItem


@dataclass
class FavoriteItem:
    """A listing the user has hearted, keyed by the listing's external id."""

    favorite_id: str
    user_id: str
    item_name: str
    platform: str
    external_id: str
    image_url: str
    price: int
    currency: str
    url: str
    seller: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    created_at: str = field(default_factory=lambda: datetime.now(tz=timezone.utc).isoformat())


def favorite_from_listing(favorite_id: str, user_id: str, listing: SearchResultItem) -> FavoriteItem:
    """Snapshot a listing into a favorite row."""

    return FavoriteItem(
        favorite_id=favorite_id,
        user_id=user_id,
        item_name=listing.name,
        platform=listing.platform,
        external_id=listing.id,
        image_url=listing.image_url,
        price=listing.price,
        currency=listing.currency,
        url=listing.url,
        seller=listing.seller,
        metadata={
            "condition": listing.condition,
            "size": listing.size,
            "brand": listing.brand,
            "category": listing.category,
        },
    )


__all__ = ["FavoriteItem", "favorite_from_listing"]
