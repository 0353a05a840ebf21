"""Application wiring tests with injected collaborators."""

from __future__ import annotations

from pathlib import Path
from typing import List

import pytest

from clovet_app.app import (
    ANALYSIS_FAILED_MESSAGE,
    FALLBACK_SEARCH_RESULTS,
    SEARCH_FAILED_MESSAGE,
    ClovetApp,
)
from clovet_app.config import ClovetConfig
from logic.try_on_wizard import TryOnResult, TryOnStep
from models.listing import SearchResultItem
from tools.errors import RemoteRequestError, TransportError, ValidationError
from tools.feature_detection import ClothingFeatures, FeatureDetectionResult
from tools.style_analysis import FALLBACK_RECOMMENDATION, StyleRecommendation


def _listing(listing_id: str, name: str) -> SearchResultItem:
    return SearchResultItem(
        id=listing_id,
        name=name,
        price=45,
        currency="SGD",
        platform="Carousell",
        image_url=f"https://img.example.com/{listing_id}.jpg",
        url=f"https://carousell.com/p/{listing_id}",
        brand="Nike",
    )


class FakeGateway:
    def __init__(self, results: List[SearchResultItem] | None = None, error: Exception | None = None) -> None:
        self.results = results or []
        self.error = error

    def search(self, keyword: str, region: str = "sg") -> List[SearchResultItem]:
        if not keyword.strip():
            raise ValidationError("Search keyword must not be empty")
        if self.error:
            raise self.error
        return self.results

    def get_by_id(self, listing_id: str):
        return next((item for item in self.results if item.id == listing_id), None)

    def clear_cache(self) -> None:
        self.results = []


class FakeDetector:
    def __init__(self, result: FeatureDetectionResult) -> None:
        self.result = result

    def detect(self, data: bytes, filename: str, content_type):
        return self.result


class FakeAnalyzer:
    def __init__(self, recommendation: StyleRecommendation | None = None, error: Exception | None = None) -> None:
        self.recommendation = recommendation
        self.error = error
        self.prompts: list = []

    def analyze(self, prompt):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return self.recommendation


class FakeTryOn:
    def generate(self, user_image, content_type, clothing_items):
        return TryOnResult(success=True, image_url="data:image/png;base64,AAA")


def _build_app(tmp_path: Path, **overrides) -> ClovetApp:
    config = ClovetConfig(
        database_path=str(tmp_path / "clovet.db"),
        image_storage_dir=str(tmp_path / "images"),
    )
    overrides.setdefault("search_gateway", FakeGateway([_listing("1234", "Vintage Nike Running Jacket")]))
    return ClovetApp(config=config, **overrides)


def test_search_returns_gateway_results(tmp_path: Path) -> None:
    app = _build_app(tmp_path)

    outcome = app.search_listings("nike jacket")

    assert [item.id for item in outcome.results] == ["1234"]
    assert outcome.error is None
    assert outcome.used_fallback is False


@pytest.mark.parametrize(
    "error", [TransportError("down"), RemoteRequestError("HTTP error! status: 500", status_code=500)]
)
def test_search_failure_shows_sample_results(tmp_path: Path, error: Exception) -> None:
    app = _build_app(tmp_path, search_gateway=FakeGateway(error=error))

    outcome = app.search_listings("nike jacket")

    assert outcome.results == FALLBACK_SEARCH_RESULTS
    assert outcome.error == SEARCH_FAILED_MESSAGE
    assert outcome.used_fallback is True


def test_blank_search_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValidationError):
        _build_app(tmp_path).search_listings("  ")


def test_get_listing_prefers_cached_then_sample(tmp_path: Path) -> None:
    app = _build_app(tmp_path)

    assert app.get_listing("1234").name == "Vintage Nike Running Jacket"
    assert app.get_listing("2").name == "Cream Beach Sweater"

    sample = app.get_listing("unknown-9")
    assert sample.id == "unknown-9"
    assert sample.name == "Vintage Ralph Lauren Cable Knit Sweater"
    assert sample.measurements is not None


def test_toggle_favorite_adds_then_removes(tmp_path: Path) -> None:
    app = _build_app(tmp_path)

    assert app.toggle_favorite("user-1", "1234") is True
    assert app.is_favorite("user-1", "1234") is True
    favorite = app.store.get_favorite_by_external_id("user-1", "1234")
    assert favorite.metadata["brand"] == "Nike"

    assert app.toggle_favorite("user-1", "1234") is False
    assert app.is_favorite("user-1", "1234") is False


def test_add_wardrobe_item_validates_payload(tmp_path: Path) -> None:
    app = _build_app(tmp_path)

    item = app.add_wardrobe_item({"user_id": "user-1", "name": "Blue Jeans", "category": "bottoms"})
    assert item.category == "Bottoms"
    assert app.store.list_items_for_user("user-1") == [item]

    with pytest.raises(ValidationError):
        app.add_wardrobe_item({"user_id": "user-1", "name": "Wetsuit", "category": "Swimwear"})
    with pytest.raises(ValidationError):
        app.add_wardrobe_item({"user_id": "user-1", "category": "Tops"})


def test_add_wardrobe_item_from_image(tmp_path: Path) -> None:
    detector = FakeDetector(
        FeatureDetectionResult(success=True, features=ClothingFeatures(color="orange", style="Casual", type="Jeans"))
    )
    app = _build_app(tmp_path, feature_detector=detector)

    result = app.add_wardrobe_item_from_image("user-1", b"img", "jeans.png", "image/png")

    assert result.error is None
    assert result.item is not None
    assert result.item.category == "Bottoms"
    assert result.item.color == "Red"
    assert result.item.name == "Red Jeans"
    assert (tmp_path / "images" / result.item.image_url).exists()

    assert app.delete_wardrobe_item("user-1", result.item.item_id) is True
    assert not (tmp_path / "images" / result.item.image_url).exists()


def test_add_wardrobe_item_from_image_reports_detection_error(tmp_path: Path) -> None:
    detector = FakeDetector(FeatureDetectionResult(success=False, error="API Error: 500"))
    app = _build_app(tmp_path, feature_detector=detector)

    result = app.add_wardrobe_item_from_image("user-1", b"img", "a.png", "image/png")

    assert result.item is None
    assert result.error == "API Error: 500"
    assert app.store.list_items_for_user("user-1") == []

    with pytest.raises(ValidationError):
        app.add_wardrobe_item_from_image("user-1", b"%PDF", "a.pdf", "application/pdf")


def test_register_and_sync_profile(tmp_path: Path) -> None:
    app = _build_app(tmp_path)

    response = app.register_user({"user_id": "user-1", "email": "jane@example.com", "plan": "free"})

    assert response["message"] == "User registered successfully"
    assert response["user"]["plan"] == "free"
    assert app.store.get_profile("user-1").display_name == "jane"

    profile = app.sync_profile("user-1", email="jane@example.com", full_name="Jane Doe")
    assert profile.display_name == "Jane Doe"


def test_analyze_wardrobe_uses_model_and_derives_queries(tmp_path: Path) -> None:
    analyzer = FakeAnalyzer(StyleRecommendation(search_queries=["green cardigan"], missing_pieces=["Loafers"]))
    app = _build_app(tmp_path, style_analyzer=analyzer)
    app.add_wardrobe_item({"user_id": "user-1", "name": "Black Tee", "category": "Tops", "color": "Black"})

    outcome = app.analyze_wardrobe("user-1")

    assert outcome.error is None
    assert outcome.search_queries == ["green cardigan", "loafers"]
    assert analyzer.prompts[0].items[0].name == "Black Tee"


def test_analyze_wardrobe_falls_back_on_remote_error(tmp_path: Path) -> None:
    app = _build_app(tmp_path, style_analyzer=FakeAnalyzer(error=RemoteRequestError("No response from Gemini API")))

    outcome = app.analyze_wardrobe("user-1")

    assert outcome.recommendation == FALLBACK_RECOMMENDATION
    assert outcome.error == ANALYSIS_FAILED_MESSAGE


def test_try_on_flow_over_favorites(tmp_path: Path) -> None:
    app = _build_app(tmp_path, try_on_generator=FakeTryOn())
    app.toggle_favorite("user-1", "1234")

    wizard = app.start_try_on("user-1")
    wizard.toggle_item(wizard.favorites[0])
    wizard.proceed_to_upload()
    wizard.upload_image(b"photo", "image/jpeg")

    assert app.generate_try_on(wizard) is TryOnStep.RESULT
    assert wizard.result_image_url.startswith("data:image/png")


def test_recommend_uses_wardrobe_and_gateway(tmp_path: Path) -> None:
    app = _build_app(tmp_path)

    assert [item.id for item in app.recommend("user-1")] == ["1234"]
