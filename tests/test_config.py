"""Configuration and logging setup tests."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from clovet_app.config import ClovetConfig
from clovet_app.logging_config import JsonFormatter, correlation_context, redact_for_log

_ENV_KEYS = [
    "APP_ENV",
    "APP_CONFIG_PATH",
    "MARKETPLACE_API_KEY",
    "SEARCH_CACHE_TTL_SECONDS",
    "SEARCH_CONCURRENCY",
    "GEMINI_API_KEY",
    "DEFAULT_REGION",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_defaults_without_configuration() -> None:
    config = ClovetConfig.from_env()

    assert config.marketplace_api_key is None
    assert config.marketplace_url == "https://carousell.p.rapidapi.com"
    assert config.search_cache_ttl_seconds == 300
    assert config.recommendation_cache_ttl_seconds == 1800
    assert config.request_timeout_seconds == 10
    assert config.feature_detection_url == "http://127.0.0.1:5000/predict"
    assert config.max_search_queries == 3


def test_environment_overrides_yaml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_file = tmp_path / "staging.yaml"
    config_file.write_text(
        "# staging\n"
        "marketplace_api_key: 'from-yaml'\n"
        "default_region: my\n"
        "search_cache_ttl_seconds: 120\n"
    )
    monkeypatch.setenv("APP_CONFIG_PATH", str(config_file))
    monkeypatch.setenv("MARKETPLACE_API_KEY", "from-env")
    monkeypatch.setenv("SEARCH_CONCURRENCY", "not-a-number")

    config = ClovetConfig.from_env()

    assert config.marketplace_api_key == "from-env"
    assert config.default_region == "my"
    assert config.search_cache_ttl_seconds == 120
    assert config.search_concurrency == 1


def test_json_formatter_redacts_sensitive_fields() -> None:
    record = logging.LogRecord("clovet", logging.INFO, __file__, 1, "favorite_added", None, None)
    record.user_id = "user-123"
    record.email = "jane@example.com"
    record.category = "Tops"

    with correlation_context("corr-1"):
        payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "favorite_added"
    assert payload["user_id"] == "[redacted]"
    assert payload["email"] == "[redacted]"
    assert payload["category"] == "Tops"
    assert payload["correlation_id"] == "corr-1"


def test_redact_for_log_masks_nested_values() -> None:
    redacted = redact_for_log({"query": "contact jane@example.com", "items": [{"url": "https://x.test"}]})

    assert "jane@example.com" not in redacted["query"]
    assert redacted["items"][0]["url"] == "[redacted]"
