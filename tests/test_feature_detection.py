"""Feature detection client tests with a faked HTTP layer."""

from __future__ import annotations

from typing import Any, Dict

import pytest
import requests

from tools.feature_detection import ClothingFeatures, FeatureDetectionClient, to_wardrobe_fields


class FakeResponse:
    def __init__(self, payload: Any, status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code

    def json(self) -> Any:
        return self._payload


def test_detect_posts_file_and_reads_features(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: Dict[str, Any] = {}

    def fake_post(url: str, files=None, timeout=None):
        calls["url"] = url
        calls["files"] = files
        calls["timeout"] = timeout
        return FakeResponse({"color": "navy", "style": "Formal", "type": "Blazers"})

    monkeypatch.setattr("tools.feature_detection.requests.post", fake_post)
    client = FeatureDetectionClient("http://models.local/predict", timeout_seconds=3)

    result = client.detect(b"img", "blazer.jpg", "image/jpeg")

    assert result.success is True
    assert result.features == ClothingFeatures(color="navy", style="Formal", type="Blazers")
    assert calls == {
        "url": "http://models.local/predict",
        "files": {"file": ("blazer.jpg", b"img", "image/jpeg")},
        "timeout": 3,
    }


def test_missing_fields_take_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        "tools.feature_detection.requests.post",
        lambda *args, **kwargs: FakeResponse({"color": "", "recommended": ["item1"]}),
    )

    result = FeatureDetectionClient().detect(b"img", "a.png", "image/png")

    assert result.features == ClothingFeatures(color="Unknown", style="Casual", type="Other")


def test_non_image_rejected_without_request(monkeypatch: pytest.MonkeyPatch) -> None:
    def fail_post(*args, **kwargs):
        raise AssertionError("should not be called")

    monkeypatch.setattr("tools.feature_detection.requests.post", fail_post)

    result = FeatureDetectionClient().detect(b"%PDF", "doc.pdf", "application/pdf")

    assert result.success is False
    assert result.error == "Please upload a valid image file."


def test_connection_failure_names_the_service(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_post(*args, **kwargs):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr("tools.feature_detection.requests.post", fake_post)

    result = FeatureDetectionClient("http://127.0.0.1:5000/predict").detect(b"img", "a.png", "image/png")

    assert result.success is False
    assert "Failed to connect to AI model at http://127.0.0.1:5000/predict" in result.error


def test_error_status_reported(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        "tools.feature_detection.requests.post", lambda *args, **kwargs: FakeResponse({}, status_code=503)
    )

    result = FeatureDetectionClient().detect(b"img", "a.png", "image/png")

    assert result.success is False
    assert result.error == "API Error: 503"


def test_to_wardrobe_fields_maps_type_and_color() -> None:
    fields = to_wardrobe_fields(ClothingFeatures(color="orange", style="Casual", type="Jeans"))

    assert fields == {"category": "Bottoms", "color": "Red", "style": "Casual"}
    assert to_wardrobe_fields(ClothingFeatures())["category"] == "Accessories"
