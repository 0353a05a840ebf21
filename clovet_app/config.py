"""Runtime settings for the Clovet services."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

DEFAULT_GEMINI_MODEL = "models/gemini-1.5-flash-002"
DEFAULT_TRY_ON_MODEL = "models/gemini-2.0-flash-exp-image-generation"
DEFAULT_MARKETPLACE_HOST = "carousell.p.rapidapi.com"
DEFAULT_FEATURE_DETECTION_URL = "http://127.0.0.1:5000/predict"
DEFAULT_CONFIG_DIR = "config/environments"


def read_settings_file(path: Path) -> Dict[str, str]:
    """Parse a flat ``key: value`` file; comments and blank lines are ignored."""

    settings: Dict[str, str] = {}
    for line in path.read_text().splitlines():
        entry = line.split(" #", 1)[0].strip()
        if not entry or entry.startswith("#") or ":" not in entry:
            continue
        key, _, raw = entry.partition(":")
        value = raw.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
            value = value[1:-1]
        settings[key.strip()] = value
    return settings


def _settings_path() -> Optional[Path]:
    explicit = os.getenv("APP_CONFIG_PATH")
    if explicit:
        return Path(explicit)
    env_name = os.getenv("APP_ENV")
    if env_name:
        return Path(os.getenv("CLOVET_CONFIG_DIR", DEFAULT_CONFIG_DIR)) / f"{env_name}.yaml"
    return None


@dataclass
class ClovetConfig:
    """Settings for the marketplace, model and storage collaborators.

    Credentials are optional so the server can boot without them; the
    collaborator that needs a missing key fails when it is first called.
    """

    marketplace_api_key: Optional[str] = None
    marketplace_api_host: str = DEFAULT_MARKETPLACE_HOST
    marketplace_base_url: Optional[str] = None
    default_region: str = "sg"
    search_cache_ttl_seconds: float = 5 * 60
    recommendation_cache_ttl_seconds: float = 30 * 60
    request_timeout_seconds: float = 10.0
    feature_detection_url: str = DEFAULT_FEATURE_DETECTION_URL
    gemini_api_key: Optional[str] = None
    gemini_model: str = DEFAULT_GEMINI_MODEL
    try_on_model: str = DEFAULT_TRY_ON_MODEL
    database_path: str = "data/clovet.db"
    image_storage_dir: str = "data/images"
    max_search_queries: int = 3
    search_concurrency: int = 1
    environment: Optional[str] = None

    def __post_init__(self) -> None:
        self.default_region = self.default_region.strip().lower() or "sg"
        self.search_concurrency = max(1, self.search_concurrency)

    @property
    def marketplace_url(self) -> str:
        return self.marketplace_base_url or f"https://{self.marketplace_api_host}"

    @classmethod
    def from_env(cls) -> "ClovetConfig":
        """Build settings from ``<KEY>`` environment variables over an optional settings file.

        The file is ``$APP_CONFIG_PATH`` or ``config/environments/$APP_ENV.yaml``.
        Values that fail to convert to the field's type keep the default.
        """

        path = _settings_path()
        file_settings = read_settings_file(path) if path and path.exists() else {}

        values: Dict[str, Any] = {}
        for spec in fields(cls):
            if spec.name == "environment":
                continue
            raw = os.getenv(spec.name.upper(), file_settings.get(spec.name))
            if raw in (None, ""):
                continue
            converted = _convert(raw, spec.default)
            if converted is not None:
                values[spec.name] = converted
        return cls(environment=os.getenv("APP_ENV"), **values)


def _convert(raw: str, default: Any) -> Any:
    if isinstance(default, bool) or not isinstance(default, (int, float)):
        return raw
    try:
        number = float(raw)
    except ValueError:
        return None
    return int(number) if isinstance(default, int) else number


__all__ = ["ClovetConfig", "read_settings_file"]
