"""User profile and style bundle records."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional


def _utc_now_iso() -> str:
    return datetime.now(tz=timezone.utc).isoformat()


@dataclass
class Profile:
    user_id: str
    display_name: str
    email: Optional[str] = None
    updated_at: str = field(default_factory=_utc_now_iso)


@dataclass
class StyleBundle:
    """A curated group of listings shown together on the home feed."""

    bundle_id: str
    user_id: str
    title: str
    description: str = ""
    item_ids: List[str] = field(default_factory=list)
    created_at: str = field(default_factory=_utc_now_iso)


def display_name_for(email: str | None, full_name: str | None = None) -> str:
    """Pick a display name: full name, else the email's local part, else a placeholder."""

    if full_name and full_name.strip():
        return full_name.strip()
    if email and email.split("@")[0]:
        return email.split("@")[0]
    return "New User"


__all__ = ["Profile", "StyleBundle", "display_name_for"]
