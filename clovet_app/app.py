"""Clovet application wiring."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as SchemaValidationError

from clovet_app.config import ClovetConfig
from clovet_app.logging_config import configure_logging, get_logger, log_event, operation_context
from logic.recommendations import RecommendationGenerator
from logic.try_on_wizard import TryOnStep, VirtualTryOnWizard
from logic.validation import (
    ProfileSyncRequest,
    RegisterRequest,
    StyleBundleRequest,
    WardrobeItemInput,
    WardrobeItemUpdate,
)
from models.favorite_item import FavoriteItem, favorite_from_listing
from models.listing import Measurements, SearchResultItem
from models.profile import Profile, StyleBundle, display_name_for
from models.wardrobe_item import WardrobeItem
from tools.errors import ClovetError, ValidationError
from tools.feature_detection import (
    ClothingFeatures,
    FeatureDetectionClient,
    to_wardrobe_fields,
)
from tools.image_storage import LocalImageStorage, validate_image
from tools.marketplace_client import MarketplaceSearchGateway
from tools.style_analysis import (
    FALLBACK_RECOMMENDATION,
    AnalysisItem,
    StyleAnalysisService,
    StyleRecommendation,
    UserPreferences,
    WardrobeAnalysisPrompt,
    generate_search_queries,
)
from tools.try_on_generator import GeminiTryOnGenerator
from tools.wardrobe_store import SQLiteWardrobeStore, WardrobeStore

LOGGER = get_logger(__name__)
SchemaT = TypeVar("SchemaT", bound=BaseModel)

SEARCH_FAILED_MESSAGE = "Unable to reach the marketplace right now. Showing sample results instead."
ANALYSIS_FAILED_MESSAGE = "Style analysis is unavailable right now. Showing general suggestions instead."

FALLBACK_SEARCH_RESULTS: List[SearchResultItem] = [
    SearchResultItem(
        id="1",
        name="Linen Pants",
        price=20,
        currency="USD",
        platform="Depop",
        image_url="https://images.pexels.com/photos/5865474/pexels-photo-5865474.jpeg?auto=compress&cs=tinysrgb&w=800",
        url="#",
    ),
    SearchResultItem(
        id="2",
        name="Cream Beach Sweater",
        price=43,
        currency="USD",
        platform="Poshmark",
        image_url="https://images.pexels.com/photos/5865527/pexels-photo-5865527.jpeg?auto=compress&cs=tinysrgb&w=800",
        url="#",
    ),
    SearchResultItem(
        id="3",
        name="Vintage Striped Tee",
        price=18,
        currency="USD",
        platform="eBay",
        image_url="https://images.pexels.com/photos/6311392/pexels-photo-6311392.jpeg?auto=compress&cs=tinysrgb&w=800",
        url="#",
    ),
    SearchResultItem(
        id="4",
        name="White Button Down",
        price=25,
        currency="USD",
        platform="ThredUp",
        image_url="https://images.pexels.com/photos/794062/pexels-photo-794062.jpeg?auto=compress&cs=tinysrgb&w=800",
        url="#",
    ),
]


def fallback_listing(listing_id: str) -> SearchResultItem:
    """Sample product shown when a listing is not in any live search result."""

    return SearchResultItem(
        id=listing_id,
        name="Vintage Ralph Lauren Cable Knit Sweater",
        price=36,
        currency="USD",
        platform="Depop",
        image_url="https://images.pexels.com/photos/794062/pexels-photo-794062.jpeg?auto=compress&cs=tinysrgb&w=1200",
        url="https://www.depop.com/example",
        seller="VintageThreads_NYC",
        description=(
            "Beautiful vintage Ralph Lauren cable knit sweater in excellent condition. "
            "This classic piece features a timeless cable knit pattern and the iconic polo logo. "
            "Perfect for layering or wearing on its own. Made from high-quality cotton blend "
            "that gets softer with each wear."
        ),
        condition="Excellent - Like New",
        size="Medium",
        brand="Ralph Lauren",
        posted_date="2025-10-01",
        category="Sweaters",
        color="Cream",
        material="80% Cotton, 20% Wool",
        measurements=Measurements(bust='40"', waist='38"', length='24"'),
    )


def _validated(schema: Type[SchemaT], payload: Any, label: str) -> SchemaT:
    """Validate ``payload`` against ``schema``, reporting the first problem as a ValidationError."""

    try:
        return schema.model_validate(payload)
    except SchemaValidationError as exc:
        raise ValidationError(f"Invalid {label}: {exc.errors()[0].get('msg', '')}") from exc


@dataclass
class SearchOutcome:
    results: List[SearchResultItem]
    error: Optional[str] = None
    used_fallback: bool = False


@dataclass
class WardrobeImageResult:
    """Outcome of adding a garment from a photo."""

    item: Optional[WardrobeItem] = None
    features: Optional[ClothingFeatures] = None
    error: Optional[str] = None


@dataclass
class WardrobeAnalysisOutcome:
    recommendation: StyleRecommendation
    search_queries: List[str] = field(default_factory=list)
    error: Optional[str] = None


class ClovetApp:
    """Wires configuration, the local store and the remote collaborators together."""

    def __init__(
        self,
        config: ClovetConfig | None = None,
        store: WardrobeStore | None = None,
        search_gateway: MarketplaceSearchGateway | None = None,
        recommender: RecommendationGenerator | None = None,
        feature_detector: FeatureDetectionClient | None = None,
        style_analyzer: StyleAnalysisService | None = None,
        image_storage: LocalImageStorage | None = None,
        try_on_generator: GeminiTryOnGenerator | None = None,
    ) -> None:
        self.config = config or ClovetConfig.from_env()
        configure_logging()

        self.store = store or SQLiteWardrobeStore(self.config.database_path)
        self.search_gateway = search_gateway or MarketplaceSearchGateway(
            api_key=self.config.marketplace_api_key,
            api_host=self.config.marketplace_api_host,
            base_url=self.config.marketplace_url,
            timeout_seconds=self.config.request_timeout_seconds,
            ttl_seconds=self.config.search_cache_ttl_seconds,
        )
        self.recommender = recommender or RecommendationGenerator(
            store=self.store,
            search_gateway=self.search_gateway,
            ttl_seconds=self.config.recommendation_cache_ttl_seconds,
            max_queries=self.config.max_search_queries,
            max_concurrency=self.config.search_concurrency,
            region=self.config.default_region,
        )
        self.feature_detector = feature_detector or FeatureDetectionClient(
            api_url=self.config.feature_detection_url,
            timeout_seconds=self.config.request_timeout_seconds,
        )
        self.style_analyzer = style_analyzer or StyleAnalysisService(
            api_key=self.config.gemini_api_key, model_name=self.config.gemini_model
        )
        self.image_storage = image_storage or LocalImageStorage(self.config.image_storage_dir)
        self.try_on_generator = try_on_generator or GeminiTryOnGenerator(
            api_key=self.config.gemini_api_key, model_name=self.config.try_on_model
        )

    # Marketplace -----------------------------------------------------------

    def search_listings(self, keyword: str, region: str | None = None) -> SearchOutcome:
        """Search the marketplace; remote failures yield the sample result set and a banner message.

        Raises:
            ValidationError: If ``keyword`` is blank.
        """

        with operation_context("app:search_listings") as correlation_id:
            try:
                results = self.search_gateway.search(keyword, region or self.config.default_region)
            except ValidationError:
                raise
            except ClovetError as exc:
                log_event(
                    LOGGER,
                    logging.WARNING,
                    "search_fallback_used",
                    correlation_id=correlation_id,
                    error_type=type(exc).__name__,
                    error=str(exc),
                )
                return SearchOutcome(
                    results=list(FALLBACK_SEARCH_RESULTS),
                    error=SEARCH_FAILED_MESSAGE,
                    used_fallback=True,
                )
            return SearchOutcome(results=results)

    def get_listing(self, listing_id: str) -> SearchResultItem:
        """Resolve a listing from live search results, else the sample product."""

        listing = self.search_gateway.get_by_id(listing_id)
        if listing is not None:
            return listing
        for sample in FALLBACK_SEARCH_RESULTS:
            if sample.id == listing_id:
                return sample
        LOGGER.info("Listing not cached; serving sample product", extra={"listing_id": listing_id})
        return fallback_listing(listing_id)

    def recommend(self, user_id: str, force_refresh: bool = False) -> List[SearchResultItem]:
        return self.recommender.recommend(user_id, force_refresh=force_refresh)

    # Wardrobe --------------------------------------------------------------

    def add_wardrobe_item(self, payload: Dict[str, Any]) -> WardrobeItem:
        """Validate ``payload`` and store it as a new wardrobe item.

        Raises:
            ValidationError: If required fields are missing or the category is unknown.
        """

        data = _validated(WardrobeItemInput, payload, "wardrobe item")
        item = WardrobeItem(item_id=uuid.uuid4().hex, **data.model_dump())
        stored = self.store.create_item(item)
        log_event(LOGGER, logging.INFO, "wardrobe_item_added", category=stored.category)
        return stored

    def add_wardrobe_item_from_image(
        self,
        user_id: str,
        data: bytes,
        filename: str,
        content_type: str | None,
        name: str | None = None,
    ) -> WardrobeImageResult:
        """Detect garment features from a photo, store the photo and create the item.

        Detection failures are returned as a message rather than raised so the
        caller can show it next to the upload form.

        Raises:
            ValidationError: If the file is not an acceptable image.
        """

        validate_image(content_type, len(data))
        detection = self.feature_detector.detect(data, filename, content_type)
        if not detection.success or detection.features is None:
            return WardrobeImageResult(error=detection.error)

        fields = to_wardrobe_fields(detection.features)
        image_url = self.image_storage.upload(data, filename, content_type, user_id)
        display_color = fields["color"] if fields["color"] != "Unknown" else ""
        default_name = f"{display_color} {detection.features.type}".strip()
        item = self.add_wardrobe_item(
            {
                "user_id": user_id,
                "name": (name or "").strip() or default_name,
                "category": fields["category"],
                "color": fields["color"],
                "style": fields["style"],
                "image_url": image_url,
            }
        )
        return WardrobeImageResult(item=item, features=detection.features)

    def list_wardrobe(self, user_id: str, category: str | None = None) -> List[WardrobeItem]:
        """Return the user's wardrobe newest first; ``category`` of None or "All" means every item."""

        if category:
            return self.store.list_items_by_category(user_id, category)
        return self.store.list_items_for_user(user_id)

    def update_wardrobe_item(
        self, user_id: str, item_id: str, payload: Dict[str, Any]
    ) -> Optional[WardrobeItem]:
        """Apply a partial edit; returns None when the item does not exist."""

        changes = _validated(WardrobeItemUpdate, payload, "wardrobe update").model_dump(exclude_none=True)
        updated = self.store.update_item(user_id, item_id, changes)
        if updated is not None:
            log_event(LOGGER, logging.INFO, "wardrobe_item_updated", fields=sorted(changes))
        return updated

    def delete_wardrobe_item(self, user_id: str, item_id: str) -> bool:
        item = self.store.get_item(user_id, item_id)
        if item is None:
            return False
        if item.image_url:
            try:
                self.image_storage.delete(item.image_url)
            except ValidationError:
                LOGGER.info("Wardrobe image is not locally stored; skipping delete")
        return self.store.delete_item(user_id, item_id)

    # Favorites -------------------------------------------------------------

    def toggle_favorite(self, user_id: str, listing_id: str) -> bool:
        """Heart or un-heart a listing; returns whether it is now a favorite."""

        if self.store.remove_favorite_by_external_id(user_id, listing_id):
            log_event(LOGGER, logging.INFO, "favorite_removed", external_id=listing_id)
            return False

        listing = self.get_listing(listing_id)
        self.store.add_favorite(favorite_from_listing(uuid.uuid4().hex, user_id, listing))
        log_event(LOGGER, logging.INFO, "favorite_added", external_id=listing_id)
        return True

    def is_favorite(self, user_id: str, listing_id: str) -> bool:
        return self.store.get_favorite_by_external_id(user_id, listing_id) is not None

    def list_favorites(self, user_id: str, platform: str | None = None) -> List[FavoriteItem]:
        return self.store.list_favorites(user_id, platform=platform)

    def remove_favorite(self, user_id: str, favorite_id: str) -> bool:
        removed = self.store.remove_favorite(user_id, favorite_id)
        if removed:
            log_event(LOGGER, logging.INFO, "favorite_removed", favorite_id=favorite_id)
        return removed

    # Profiles --------------------------------------------------------------

    def register_user(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Accept a registration payload and echo it back."""

        request = _validated(RegisterRequest, payload, "registration")
        user = request.model_dump(exclude_none=True)
        if user.get("user_id"):
            self.sync_profile(str(user["user_id"]), email=request.email, full_name=request.full_name)
        return {"message": "User registered successfully", "user": user}

    def sync_profile(self, user_id: str, email: str | None = None, full_name: str | None = None) -> Profile:
        """Create or refresh the profile row for a signed-in user."""

        request = ProfileSyncRequest(user_id=user_id, email=email, full_name=full_name)
        profile = Profile(
            user_id=request.user_id,
            display_name=display_name_for(request.email, request.full_name),
            email=request.email,
        )
        return self.store.upsert_profile(profile)

    def style_bundles(self, user_id: str, limit: int = 3) -> List[StyleBundle]:
        return self.store.list_recent_bundles(user_id, limit=limit)

    def create_style_bundle(self, payload: Dict[str, Any]) -> StyleBundle:
        request = _validated(StyleBundleRequest, payload, "style bundle")
        bundle = self.store.create_bundle(
            StyleBundle(bundle_id=uuid.uuid4().hex, **request.model_dump())
        )
        log_event(LOGGER, logging.INFO, "style_bundle_created", item_count=len(bundle.item_ids))
        return bundle

    # Generative features ---------------------------------------------------

    def analyze_wardrobe(
        self, user_id: str, preferences: UserPreferences | None = None
    ) -> WardrobeAnalysisOutcome:
        """Ask the style model about the user's wardrobe; failures yield general suggestions."""

        items = self.store.list_items_for_user(user_id)
        prompt = WardrobeAnalysisPrompt(
            items=[
                AnalysisItem(
                    name=item.name,
                    category=item.category,
                    color=item.color,
                    brand=item.brand,
                    style=item.style,
                )
                for item in items
            ],
            user_preferences=preferences,
        )
        try:
            recommendation = self.style_analyzer.analyze(prompt)
            error = None
        except ClovetError as exc:
            log_event(
                LOGGER,
                logging.WARNING,
                "style_analysis_fallback_used",
                error_type=type(exc).__name__,
                error=str(exc),
            )
            recommendation = FALLBACK_RECOMMENDATION.model_copy(deep=True)
            error = ANALYSIS_FAILED_MESSAGE
        return WardrobeAnalysisOutcome(
            recommendation=recommendation,
            search_queries=generate_search_queries(recommendation),
            error=error,
        )

    def start_try_on(self, user_id: str) -> VirtualTryOnWizard:
        """Open a try-on wizard over the user's favorited listings."""

        return VirtualTryOnWizard(favorites=self.store.list_favorites(user_id))

    def generate_try_on(self, wizard: VirtualTryOnWizard) -> TryOnStep:
        return wizard.generate(self.try_on_generator)

    def try_on(
        self,
        user_id: str,
        favorite_ids: Sequence[str],
        data: bytes,
        content_type: str | None,
    ) -> VirtualTryOnWizard:
        """Run the whole wizard in one call: select favorites, upload the photo, generate.

        The returned wizard is on ``result`` after a successful generation, or
        back on ``upload-image`` with ``error`` set.

        Raises:
            ValidationError: For unknown favorites, an empty selection or an unacceptable photo.
        """

        wizard = self.start_try_on(user_id)
        by_id = {favorite.favorite_id: favorite for favorite in wizard.favorites}
        unknown = [favorite_id for favorite_id in favorite_ids if favorite_id not in by_id]
        if unknown:
            raise ValidationError(f"Unknown favorite: {unknown[0]}")
        for favorite_id in dict.fromkeys(favorite_ids):
            wizard.toggle_item(by_id[favorite_id])
        wizard.proceed_to_upload()
        wizard.upload_image(data, content_type or "")
        self.generate_try_on(wizard)
        return wizard


__all__ = [
    "ANALYSIS_FAILED_MESSAGE",
    "ClovetApp",
    "FALLBACK_SEARCH_RESULTS",
    "SEARCH_FAILED_MESSAGE",
    "SearchOutcome",
    "WardrobeAnalysisOutcome",
    "WardrobeImageResult",
    "fallback_listing",
]
