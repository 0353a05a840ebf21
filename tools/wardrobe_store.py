"""Storage abstractions and SQLite implementation for wardrobe, favorites and profiles."""
from __future__ import annotations

import json
import sqlite3
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from models.favorite_item import FavoriteItem
from models.profile import Profile, StyleBundle
from models.taxonomy import validate_category
from models.wardrobe_item import WardrobeItem, from_raw_metadata


class WardrobeStore:
    """Persistence interface for user-owned records."""

    def create_item(self, item: WardrobeItem) -> WardrobeItem:
        raise NotImplementedError

    def get_item(self, user_id: str, item_id: str) -> Optional[WardrobeItem]:
        raise NotImplementedError

    def list_items_for_user(self, user_id: str) -> List[WardrobeItem]:
        raise NotImplementedError

    def update_item(self, user_id: str, item_id: str, updated_fields: Dict[str, object]) -> Optional[WardrobeItem]:
        raise NotImplementedError

    def delete_item(self, user_id: str, item_id: str) -> bool:
        raise NotImplementedError

    def list_items_by_category(self, user_id: str, category: str) -> List[WardrobeItem]:
        raise NotImplementedError

    def add_favorite(self, favorite: FavoriteItem) -> FavoriteItem:
        raise NotImplementedError

    def get_favorite_by_external_id(self, user_id: str, external_id: str) -> Optional[FavoriteItem]:
        raise NotImplementedError

    def list_favorites(self, user_id: str, platform: str | None = None) -> List[FavoriteItem]:
        raise NotImplementedError

    def remove_favorite(self, user_id: str, favorite_id: str) -> bool:
        raise NotImplementedError

    def remove_favorite_by_external_id(self, user_id: str, external_id: str) -> bool:
        raise NotImplementedError

    def upsert_profile(self, profile: Profile) -> Profile:
        raise NotImplementedError

    def get_profile(self, user_id: str) -> Optional[Profile]:
        raise NotImplementedError

    def create_bundle(self, bundle: StyleBundle) -> StyleBundle:
        raise NotImplementedError

    def list_recent_bundles(self, user_id: str, limit: int = 3) -> List[StyleBundle]:
        raise NotImplementedError


class SQLiteWardrobeStore(WardrobeStore):
    """Local SQLite-backed store standing in for the hosted database tables."""

    def __init__(self, database_path: str | Path = "data/clovet.db") -> None:
        self.database_path = Path(database_path)
        if self.database_path.parent and not self.database_path.parent.exists():
            self.database_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_tables()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.database_path)
        conn.row_factory = sqlite3.Row
        return conn

    def _ensure_tables(self) -> None:
        with self._connect() as conn:
            conn.executescript(
                """
                CREATE TABLE IF NOT EXISTS wardrobe_items (
                    user_id TEXT NOT NULL,
                    item_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    category TEXT NOT NULL,
                    image_url TEXT,
                    color TEXT,
                    brand TEXT,
                    style TEXT,
                    source_url TEXT,
                    notes TEXT,
                    wear_count INTEGER DEFAULT 0,
                    created_at TEXT,
                    PRIMARY KEY (user_id, item_id)
                );
                CREATE TABLE IF NOT EXISTS favorite_items (
                    favorite_id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    item_name TEXT,
                    platform TEXT,
                    external_id TEXT,
                    image_url TEXT,
                    price INTEGER,
                    currency TEXT,
                    url TEXT,
                    seller TEXT,
                    metadata TEXT,
                    created_at TEXT
                );
                CREATE TABLE IF NOT EXISTS profiles (
                    user_id TEXT PRIMARY KEY,
                    display_name TEXT,
                    email TEXT,
                    updated_at TEXT
                );
                CREATE TABLE IF NOT EXISTS style_bundles (
                    bundle_id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    title TEXT,
                    description TEXT,
                    item_ids TEXT,
                    created_at TEXT
                );
                """
            )

    def create_item(self, item: WardrobeItem) -> WardrobeItem:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO wardrobe_items (
                    user_id, item_id, name, category, image_url, color, brand,
                    style, source_url, notes, wear_count, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    item.user_id,
                    item.item_id,
                    item.name,
                    item.category,
                    item.image_url,
                    item.color,
                    item.brand,
                    item.style,
                    item.source_url,
                    item.notes,
                    item.wear_count,
                    item.created_at,
                ),
            )
        return item

    @staticmethod
    def _row_to_item(row: sqlite3.Row) -> WardrobeItem:
        return from_raw_metadata(dict(row))

    def get_item(self, user_id: str, item_id: str) -> Optional[WardrobeItem]:
        with self._connect() as conn:
            cursor = conn.execute(
                "SELECT * FROM wardrobe_items WHERE user_id = ? AND item_id = ?",
                (user_id, item_id),
            )
            row = cursor.fetchone()
            return self._row_to_item(row) if row else None

    def list_items_for_user(self, user_id: str) -> List[WardrobeItem]:
        """Return the user's items, newest first."""

        with self._connect() as conn:
            cursor = conn.execute(
                "SELECT * FROM wardrobe_items WHERE user_id = ? ORDER BY created_at DESC, item_id",
                (user_id,),
            )
            return [self._row_to_item(row) for row in cursor.fetchall()]

    def update_item(self, user_id: str, item_id: str, updated_fields: Dict[str, object]) -> Optional[WardrobeItem]:
        current = self.get_item(user_id, item_id)
        if current is None:
            return None
        # Identity columns are fixed; the merged record is re-validated before saving.
        changes = {key: value for key, value in updated_fields.items() if key not in ("user_id", "item_id")}
        return self.create_item(from_raw_metadata({**asdict(current), **changes}))

    def delete_item(self, user_id: str, item_id: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM wardrobe_items WHERE user_id = ? AND item_id = ?",
                (user_id, item_id),
            )
            return cursor.rowcount > 0

    def list_items_by_category(self, user_id: str, category: str) -> List[WardrobeItem]:
        """Filter the wardrobe by category; ``"All"`` returns everything."""

        items = self.list_items_for_user(user_id)
        if not category or category.strip().lower() == "all":
            return items
        try:
            category_key = validate_category(category)
        except ValueError:
            return []
        return [item for item in items if item.category == category_key]

    def add_favorite(self, favorite: FavoriteItem) -> FavoriteItem:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO favorite_items (
                    favorite_id, user_id, item_name, platform, external_id, image_url,
                    price, currency, url, seller, metadata, created_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    favorite.favorite_id,
                    favorite.user_id,
                    favorite.item_name,
                    favorite.platform,
                    favorite.external_id,
                    favorite.image_url,
                    favorite.price,
                    favorite.currency,
                    favorite.url,
                    favorite.seller,
                    json.dumps(favorite.metadata or {}),
                    favorite.created_at,
                ),
            )
        return favorite

    @staticmethod
    def _row_to_favorite(row: sqlite3.Row) -> FavoriteItem:
        return FavoriteItem(
            favorite_id=row["favorite_id"],
            user_id=row["user_id"],
            item_name=row["item_name"],
            platform=row["platform"],
            external_id=row["external_id"],
            image_url=row["image_url"] or "",
            price=row["price"] or 0,
            currency=row["currency"] or "USD",
            url=row["url"] or "",
            seller=row["seller"],
            metadata=json.loads(row["metadata"]) if row["metadata"] else {},
            created_at=row["created_at"],
        )

    def get_favorite_by_external_id(self, user_id: str, external_id: str) -> Optional[FavoriteItem]:
        with self._connect() as conn:
            cursor = conn.execute(
                "SELECT * FROM favorite_items WHERE user_id = ? AND external_id = ?",
                (user_id, external_id),
            )
            row = cursor.fetchone()
            return self._row_to_favorite(row) if row else None

    def list_favorites(self, user_id: str, platform: str | None = None) -> List[FavoriteItem]:
        """Return favorites newest first, optionally for a single platform."""

        query = "SELECT * FROM favorite_items WHERE user_id = ?"
        params: list = [user_id]
        if platform and platform.lower() != "all":
            query += " AND platform = ?"
            params.append(platform)
        query += " ORDER BY created_at DESC, favorite_id"
        with self._connect() as conn:
            cursor = conn.execute(query, params)
            return [self._row_to_favorite(row) for row in cursor.fetchall()]

    def remove_favorite(self, user_id: str, favorite_id: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM favorite_items WHERE user_id = ? AND favorite_id = ?",
                (user_id, favorite_id),
            )
            return cursor.rowcount > 0

    def remove_favorite_by_external_id(self, user_id: str, external_id: str) -> bool:
        with self._connect() as conn:
            cursor = conn.execute(
                "DELETE FROM favorite_items WHERE user_id = ? AND external_id = ?",
                (user_id, external_id),
            )
            return cursor.rowcount > 0

    def upsert_profile(self, profile: Profile) -> Profile:
        profile.updated_at = datetime.now(tz=timezone.utc).isoformat()
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO profiles (user_id, display_name, email, updated_at)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(user_id) DO UPDATE SET
                    display_name=excluded.display_name,
                    email=COALESCE(excluded.email, profiles.email),
                    updated_at=excluded.updated_at
                """,
                (profile.user_id, profile.display_name, profile.email, profile.updated_at),
            )
        return profile

    def get_profile(self, user_id: str) -> Optional[Profile]:
        with self._connect() as conn:
            row = conn.execute("SELECT * FROM profiles WHERE user_id = ?", (user_id,)).fetchone()
        if not row:
            return None
        return Profile(
            user_id=row["user_id"],
            display_name=row["display_name"],
            email=row["email"],
            updated_at=row["updated_at"],
        )

    def create_bundle(self, bundle: StyleBundle) -> StyleBundle:
        with self._connect() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO style_bundles (
                    bundle_id, user_id, title, description, item_ids, created_at
                ) VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    bundle.bundle_id,
                    bundle.user_id,
                    bundle.title,
                    bundle.description,
                    json.dumps(bundle.item_ids),
                    bundle.created_at,
                ),
            )
        return bundle

    def list_recent_bundles(self, user_id: str, limit: int = 3) -> List[StyleBundle]:
        with self._connect() as conn:
            cursor = conn.execute(
                "SELECT * FROM style_bundles WHERE user_id = ? ORDER BY created_at DESC LIMIT ?",
                (user_id, limit),
            )
            rows = cursor.fetchall()
        return [
            StyleBundle(
                bundle_id=row["bundle_id"],
                user_id=row["user_id"],
                title=row["title"],
                description=row["description"] or "",
                item_ids=json.loads(row["item_ids"]) if row["item_ids"] else [],
                created_at=row["created_at"],
            )
            for row in rows
        ]


__all__ = ["WardrobeStore", "SQLiteWardrobeStore"]
