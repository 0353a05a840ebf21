"""FastAPI server exposing the Clovet endpoints."""

from dataclasses import asdict
from functools import lru_cache

from fastapi import Depends, FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from clovet_app.app import ClovetApp
from clovet_app.logging_config import configure_logging
from logic.validation import FavoriteToggleRequest, ProfileSyncRequest
from tools.errors import ValidationError
from tools.style_analysis import UserPreferences

configure_logging()

DEFAULT_PORT = 5000

app = FastAPI(title="Clovet", version="0.1.0")


@lru_cache(maxsize=1)
def get_clovet_app() -> ClovetApp:
    """Build the application once per process."""

    return ClovetApp()


@app.exception_handler(ValidationError)
async def _validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": str(exc)})


class PredictResponse(BaseModel):
    color: str
    style: str
    recommended: list[str] = Field(default_factory=list)


@app.get("/health")
async def healthcheck() -> dict:
    """Lightweight liveness probe."""

    return {"ok": True, "message": "Server is running fine!"}


@app.post("/api/auth/register", status_code=201)
@app.post("/auth/register", status_code=201)
async def register(payload: dict, clovet: ClovetApp = Depends(get_clovet_app)) -> dict:
    return clovet.register_user(payload)


@app.post("/predict", response_model=PredictResponse)
@app.post("/api/predict", response_model=PredictResponse)
async def predict() -> PredictResponse:
    """Canned prediction used when no detection model is deployed."""

    return PredictResponse(color="blue", style="casual", recommended=["item1", "item2", "item3"])


@app.get("/api/search")
def search(keyword: str, region: str | None = None, clovet: ClovetApp = Depends(get_clovet_app)) -> dict:
    outcome = clovet.search_listings(keyword, region)
    return {
        "results": [item.to_dict() for item in outcome.results],
        "error": outcome.error,
        "used_fallback": outcome.used_fallback,
    }


@app.get("/api/listings/{listing_id}")
def get_listing(listing_id: str, clovet: ClovetApp = Depends(get_clovet_app)) -> dict:
    return clovet.get_listing(listing_id).to_dict()


@app.get("/api/recommendations/{user_id}")
def recommendations(
    user_id: str, force_refresh: bool = False, clovet: ClovetApp = Depends(get_clovet_app)
) -> dict:
    items = clovet.recommend(user_id, force_refresh=force_refresh)
    features = clovet.recommender.get_cached_features(user_id)
    return {
        "results": [item.to_dict() for item in items],
        "features": features.to_dict() if features else None,
    }


@app.delete("/api/recommendations/cache")
def clear_recommendations(clovet: ClovetApp = Depends(get_clovet_app)) -> dict:
    clovet.recommender.clear_cache()
    return {"ok": True}


@app.post("/api/wardrobe", status_code=201)
def add_wardrobe_item(payload: dict, clovet: ClovetApp = Depends(get_clovet_app)) -> dict:
    item = clovet.add_wardrobe_item(payload)
    return {"item": asdict(item)}


@app.post("/api/wardrobe/image", status_code=201)
async def add_wardrobe_item_from_image(
    user_id: str = Form(...),
    name: str | None = Form(None),
    file: UploadFile = File(...),
    clovet: ClovetApp = Depends(get_clovet_app),
) -> dict:
    data = await file.read()
    result = clovet.add_wardrobe_item_from_image(
        user_id, data, file.filename or "upload", file.content_type, name=name
    )
    if result.item is None:
        raise HTTPException(status_code=502, detail=result.error or "Feature detection failed")
    return {"item": asdict(result.item), "features": result.features.model_dump()}


@app.get("/api/wardrobe/{user_id}")
def list_wardrobe(
    user_id: str, category: str | None = None, clovet: ClovetApp = Depends(get_clovet_app)
) -> dict:
    return {"items": [asdict(item) for item in clovet.list_wardrobe(user_id, category)]}


@app.patch("/api/wardrobe/{user_id}/{item_id}")
def update_wardrobe_item(
    user_id: str, item_id: str, payload: dict, clovet: ClovetApp = Depends(get_clovet_app)
) -> dict:
    item = clovet.update_wardrobe_item(user_id, item_id, payload)
    if item is None:
        raise HTTPException(status_code=404, detail="Wardrobe item not found")
    return {"item": asdict(item)}


@app.delete("/api/wardrobe/{user_id}/{item_id}")
def delete_wardrobe_item(user_id: str, item_id: str, clovet: ClovetApp = Depends(get_clovet_app)) -> dict:
    if not clovet.delete_wardrobe_item(user_id, item_id):
        raise HTTPException(status_code=404, detail="Wardrobe item not found")
    return {"ok": True}


@app.post("/api/favorites/toggle")
def toggle_favorite(request: FavoriteToggleRequest, clovet: ClovetApp = Depends(get_clovet_app)) -> dict:
    return {"favorite": clovet.toggle_favorite(request.user_id, request.listing_id)}


@app.get("/api/favorites/{user_id}")
def list_favorites(
    user_id: str, platform: str | None = None, clovet: ClovetApp = Depends(get_clovet_app)
) -> dict:
    return {"favorites": [asdict(favorite) for favorite in clovet.list_favorites(user_id, platform)]}


@app.delete("/api/favorites/{user_id}/{favorite_id}")
def remove_favorite(user_id: str, favorite_id: str, clovet: ClovetApp = Depends(get_clovet_app)) -> dict:
    if not clovet.remove_favorite(user_id, favorite_id):
        raise HTTPException(status_code=404, detail="Favorite not found")
    return {"ok": True}


@app.post("/api/profile/sync")
def sync_profile(request: ProfileSyncRequest, clovet: ClovetApp = Depends(get_clovet_app)) -> dict:
    profile = clovet.sync_profile(request.user_id, email=request.email, full_name=request.full_name)
    return {"profile": asdict(profile)}


@app.get("/api/bundles/{user_id}")
def list_bundles(user_id: str, limit: int = 3, clovet: ClovetApp = Depends(get_clovet_app)) -> dict:
    return {"bundles": [asdict(bundle) for bundle in clovet.style_bundles(user_id, limit=limit)]}


@app.post("/api/bundles", status_code=201)
def create_bundle(payload: dict, clovet: ClovetApp = Depends(get_clovet_app)) -> dict:
    return {"bundle": asdict(clovet.create_style_bundle(payload))}


@app.post("/api/analysis/{user_id}")
def analyze_wardrobe(
    user_id: str,
    preferences: UserPreferences | None = None,
    clovet: ClovetApp = Depends(get_clovet_app),
) -> dict:
    """Gemini wardrobe analysis; falls back to general suggestions when the model is unavailable."""

    outcome = clovet.analyze_wardrobe(user_id, preferences)
    return {
        "recommendation": outcome.recommendation.model_dump(by_alias=True),
        "search_queries": outcome.search_queries,
        "error": outcome.error,
    }


@app.post("/api/try-on")
async def try_on(
    user_id: str = Form(...),
    favorite_ids: list[str] = Form(...),
    file: UploadFile = File(...),
    clovet: ClovetApp = Depends(get_clovet_app),
) -> dict:
    data = await file.read()
    wizard = clovet.try_on(user_id, favorite_ids, data, file.content_type)
    return {
        "step": wizard.step.value,
        "image_url": wizard.result_image_url,
        "error": wizard.error,
        "selected": [favorite.favorite_id for favorite in wizard.selected],
    }


def get_app() -> FastAPI:
    """Expose the FastAPI instance for ASGI servers."""

    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("server.api:app", host="0.0.0.0", port=DEFAULT_PORT, reload=False)
