"""HTTP surface tests using FastAPI's test client."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from clovet_app.app import ClovetApp
from clovet_app.config import ClovetConfig
from logic.try_on_wizard import TryOnResult
from models.listing import SearchResultItem
from server.api import app, get_clovet_app
from tools.errors import RemoteRequestError, TransportError, ValidationError
from tools.feature_detection import ClothingFeatures, FeatureDetectionResult


class FakeGateway:
    def __init__(self) -> None:
        self.fail = False
        self.items = [
            SearchResultItem(
                id="1234",
                name="Vintage Nike Running Jacket",
                price=300,
                currency="SGD",
                platform="Carousell",
                image_url="https://img.example.com/1.jpg",
                url="https://carousell.com/p/1234",
            )
        ]

    def search(self, keyword: str, region: str = "sg"):
        if not keyword.strip():
            raise ValidationError("Search keyword must not be empty")
        if self.fail:
            raise TransportError("down")
        return self.items

    def get_by_id(self, listing_id: str):
        return next((item for item in self.items if item.id == listing_id), None)


class FakeAnalyzer:
    def analyze(self, prompt):
        raise RemoteRequestError("Gemini unavailable", status_code=503)


class FakeTryOn:
    def __init__(self) -> None:
        self.calls: list = []

    def generate(self, user_image, content_type, clothing_items):
        self.calls.append(clothing_items)
        return TryOnResult(success=True, image_url="data:image/png;base64,AAA")


class FakeDetector:
    def detect(self, data, filename, content_type):
        return FeatureDetectionResult(success=True, features=ClothingFeatures(color="black", type="Boots"))


@pytest.fixture()
def clovet(tmp_path: Path) -> ClovetApp:
    config = ClovetConfig(
        database_path=str(tmp_path / "clovet.db"),
        image_storage_dir=str(tmp_path / "images"),
    )
    return ClovetApp(
        config=config,
        search_gateway=FakeGateway(),
        feature_detector=FakeDetector(),
        style_analyzer=FakeAnalyzer(),
        try_on_generator=FakeTryOn(),
    )


@pytest.fixture()
def client(clovet: ClovetApp) -> Iterator[TestClient]:
    app.dependency_overrides[get_clovet_app] = lambda: clovet
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"ok": True, "message": "Server is running fine!"}


@pytest.mark.parametrize("path", ["/api/auth/register", "/auth/register"])
def test_register_echoes_body(client: TestClient, path: str) -> None:
    response = client.post(path, json={"email": "jane@example.com", "full_name": "Jane"})

    assert response.status_code == 201
    assert response.json() == {
        "message": "User registered successfully",
        "user": {"email": "jane@example.com", "full_name": "Jane"},
    }


@pytest.mark.parametrize("path", ["/predict", "/api/predict"])
def test_predict_returns_canned_features(client: TestClient, path: str) -> None:
    response = client.post(path)

    assert response.status_code == 200
    assert response.json() == {"color": "blue", "style": "casual", "recommended": ["item1", "item2", "item3"]}


def test_search_and_listing_lookup(client: TestClient, clovet: ClovetApp) -> None:
    response = client.get("/api/search", params={"keyword": "nike jacket"})

    assert response.status_code == 200
    body = response.json()
    assert body["used_fallback"] is False
    assert body["results"][0]["id"] == "1234"

    listing = client.get("/api/listings/1234").json()
    assert listing["currency"] == "SGD"

    clovet.search_gateway.fail = True
    fallback = client.get("/api/search", params={"keyword": "nike jacket"}).json()
    assert fallback["used_fallback"] is True
    assert len(fallback["results"]) == 4


def test_blank_search_is_bad_request(client: TestClient) -> None:
    response = client.get("/api/search", params={"keyword": " "})

    assert response.status_code == 400
    assert "empty" in response.json()["error"]


def test_recommendations_and_cache_reset(client: TestClient) -> None:
    response = client.get("/api/recommendations/user-1")

    assert response.status_code == 200
    body = response.json()
    assert [item["id"] for item in body["results"]] == ["1234"]
    assert body["features"]["topColors"] == ["Black", "White", "Blue"]

    assert client.delete("/api/recommendations/cache").json() == {"ok": True}


def test_wardrobe_and_favorites(client: TestClient) -> None:
    created = client.post(
        "/api/wardrobe", json={"user_id": "user-1", "name": "Denim Jacket", "category": "outerwear"}
    )
    assert created.status_code == 201
    assert created.json()["item"]["category"] == "Outerwear"

    invalid = client.post("/api/wardrobe", json={"user_id": "user-1", "name": "X", "category": "Capes"})
    assert invalid.status_code == 400

    toggled = client.post("/api/favorites/toggle", json={"user_id": "user-1", "listing_id": "1234"})
    assert toggled.json() == {"favorite": True}


def test_wardrobe_image_upload(client: TestClient) -> None:
    response = client.post(
        "/api/wardrobe/image",
        data={"user_id": "user-1"},
        files={"file": ("boots.jpg", b"jpeg-bytes", "image/jpeg")},
    )

    assert response.status_code == 201
    body = response.json()
    assert body["item"]["category"] == "Shoes"
    assert body["item"]["name"] == "Black Boots"


def test_profile_sync(client: TestClient) -> None:
    response = client.post("/api/profile/sync", json={"user_id": "user-1", "email": "sam@example.com"})

    assert response.status_code == 200
    assert response.json()["profile"]["display_name"] == "sam"


def test_register_rejects_wrongly_typed_fields(client: TestClient) -> None:
    response = client.post("/api/auth/register", json={"email": 123, "password": "x"})

    assert response.status_code == 400
    assert "registration" in response.json()["error"]


def test_recommendation_features_belong_to_the_requesting_user(client: TestClient) -> None:
    client.post("/api/wardrobe", json={"user_id": "alice", "name": "Red Tee", "category": "Tops", "color": "Red"})
    client.post("/api/wardrobe", json={"user_id": "bob", "name": "Green Tee", "category": "Tops", "color": "Green"})

    alice = client.get("/api/recommendations/alice").json()
    bob = client.get("/api/recommendations/bob").json()

    assert alice["features"]["topColors"] == ["Red"]
    assert bob["features"]["topColors"] == ["Green"]


def test_wardrobe_list_update_and_delete(client: TestClient) -> None:
    jacket = client.post(
        "/api/wardrobe", json={"user_id": "user-1", "name": "Denim Jacket", "category": "Outerwear"}
    ).json()["item"]
    client.post("/api/wardrobe", json={"user_id": "user-1", "name": "Jeans", "category": "Bottoms"})

    everything = client.get("/api/wardrobe/user-1").json()["items"]
    assert {item["name"] for item in everything} == {"Denim Jacket", "Jeans"}
    outerwear = client.get("/api/wardrobe/user-1", params={"category": "outerwear"}).json()["items"]
    assert [item["name"] for item in outerwear] == ["Denim Jacket"]

    path = f"/api/wardrobe/user-1/{jacket['item_id']}"
    updated = client.patch(path, json={"brand": "Levi's", "category": "tops"})
    assert updated.status_code == 200
    assert updated.json()["item"]["brand"] == "Levi's"
    assert updated.json()["item"]["category"] == "Tops"
    assert client.patch(path, json={"category": "Capes"}).status_code == 400

    assert client.delete(path).json() == {"ok": True}
    assert client.delete(path).status_code == 404
    assert client.patch(path, json={"brand": "x"}).status_code == 404


def test_favorites_list_and_remove(client: TestClient) -> None:
    client.post("/api/favorites/toggle", json={"user_id": "user-1", "listing_id": "1234"})

    favorites = client.get("/api/favorites/user-1").json()["favorites"]
    assert [favorite["external_id"] for favorite in favorites] == ["1234"]
    assert client.get("/api/favorites/user-1", params={"platform": "Depop"}).json()["favorites"] == []

    path = f"/api/favorites/user-1/{favorites[0]['favorite_id']}"
    assert client.delete(path).json() == {"ok": True}
    assert client.delete(path).status_code == 404
    assert client.get("/api/favorites/user-1").json()["favorites"] == []


def test_style_bundles_round_trip(client: TestClient) -> None:
    created = client.post(
        "/api/bundles", json={"user_id": "user-1", "title": "Weekend Casual", "item_ids": ["a", "b"]}
    )
    assert created.status_code == 201

    bundles = client.get("/api/bundles/user-1").json()["bundles"]
    assert [bundle["title"] for bundle in bundles] == ["Weekend Casual"]
    assert bundles[0]["item_ids"] == ["a", "b"]

    assert client.post("/api/bundles", json={"user_id": "user-1", "title": ""}).status_code == 400


def test_analysis_falls_back_when_model_is_unavailable(client: TestClient) -> None:
    response = client.post("/api/analysis/user-1", json={"favorite_colors": ["Navy"]})

    assert response.status_code == 200
    body = response.json()
    assert body["error"] is not None
    assert body["recommendation"]["searchQueries"][0] == "versatile blazer"
    assert body["search_queries"]


def test_try_on_runs_the_wizard(client: TestClient) -> None:
    client.post("/api/favorites/toggle", json={"user_id": "user-1", "listing_id": "1234"})
    favorite_id = client.get("/api/favorites/user-1").json()["favorites"][0]["favorite_id"]

    response = client.post(
        "/api/try-on",
        data={"user_id": "user-1", "favorite_ids": [favorite_id]},
        files={"file": ("me.png", b"png-bytes", "image/png")},
    )

    assert response.status_code == 200
    assert response.json() == {
        "step": "result",
        "image_url": "data:image/png;base64,AAA",
        "error": None,
        "selected": [favorite_id],
    }

    unknown = client.post(
        "/api/try-on",
        data={"user_id": "user-1", "favorite_ids": ["missing"]},
        files={"file": ("me.png", b"png-bytes", "image/png")},
    )
    assert unknown.status_code == 400
