"""Pydantic schemas for request payloads."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models.taxonomy import validate_category


class RegisterRequest(BaseModel):
    """Registration payload; unknown keys are kept so the body can be echoed."""

    model_config = ConfigDict(extra="allow")

    email: Optional[str] = None
    password: Optional[str] = None
    full_name: Optional[str] = None


class WardrobeItemInput(BaseModel):
    """Input contract for adding a garment to the wardrobe."""

    user_id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    category: str
    image_url: str = ""
    color: Optional[str] = None
    brand: Optional[str] = None
    style: Optional[str] = None
    source_url: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("category")
    @classmethod
    def _validate_category(cls, value: str) -> str:
        return validate_category(value)


class FavoriteToggleRequest(BaseModel):
    """Identifies a cached listing to heart or un-heart."""

    user_id: str = Field(min_length=1)
    listing_id: str = Field(min_length=1)


class WardrobeItemUpdate(BaseModel):
    """Partial update of a stored garment; omitted fields keep their value."""

    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = None
    color: Optional[str] = None
    brand: Optional[str] = None
    style: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("category")
    @classmethod
    def _validate_category(cls, value: Optional[str]) -> Optional[str]:
        return validate_category(value) if value is not None else None


class StyleBundleRequest(BaseModel):
    user_id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    description: str = ""
    item_ids: List[str] = Field(default_factory=list)


class ProfileSyncRequest(BaseModel):
    user_id: str = Field(min_length=1)
    email: Optional[str] = None
    full_name: Optional[str] = None


__all__ = [
    "FavoriteToggleRequest",
    "ProfileSyncRequest",
    "RegisterRequest",
    "StyleBundleRequest",
    "WardrobeItemInput",
    "WardrobeItemUpdate",
]
