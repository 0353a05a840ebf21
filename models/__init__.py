"""Model package exports."""

from models.favorite_item import FavoriteItem, favorite_from_listing
from models.listing import Measurements, SearchResultItem
from models.profile import Profile, StyleBundle
from models.wardrobe_item import WardrobeItem, from_raw_metadata

__all__ = [
    "FavoriteItem",
    "favorite_from_listing",
    "Measurements",
    "SearchResultItem",
    "Profile",
    "StyleBundle",
    "WardrobeItem",
    "from_raw_metadata",
]
