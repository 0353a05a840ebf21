"""Wardrobe item data model and helpers."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from models.taxonomy import validate_category


REQUIRED_FIELDS = ("item_id", "user_id", "name", "category")


def _utc_now_iso() -> str:
    return datetime.now(tz=timezone.utc).isoformat()


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass
class WardrobeItem:
    """Represents a garment saved in the user's wardrobe."""

    item_id: str
    user_id: str
    name: str
    category: str
    image_url: str = ""
    color: Optional[str] = None
    brand: Optional[str] = None
    style: Optional[str] = None
    source_url: Optional[str] = None
    notes: Optional[str] = None
    wear_count: int = 0
    created_at: str = field(default_factory=_utc_now_iso)

    def __post_init__(self) -> None:
        self.category = validate_category(self.category)
        self.color = _optional_str(self.color)
        self.brand = _optional_str(self.brand)
        self.style = _optional_str(self.style)
        self.wear_count = max(0, int(self.wear_count or 0))


def from_raw_metadata(metadata: Dict[str, Any]) -> WardrobeItem:
    """Build a :class:`WardrobeItem` from a loose form or database mapping.

    Unknown keys are ignored. Raises ``ValueError`` when an identifying field
    is blank or the category is not a wardrobe category.
    """

    missing = [key for key in REQUIRED_FIELDS if not metadata.get(key)]
    if missing:
        raise ValueError(f"Wardrobe item is missing {', '.join(missing)}")

    known = {spec.name for spec in fields(WardrobeItem)}
    values = {key: value for key, value in metadata.items() if key in known and value is not None}
    for key in REQUIRED_FIELDS:
        values[key] = str(values[key])
    values["image_url"] = str(values.get("image_url") or "")
    return WardrobeItem(**values)


__all__ = ["WardrobeItem", "from_raw_metadata"]
