"""Generative wardrobe analysis: prompt building, response parsing and fallbacks."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, List, Optional

from google.api_core import exceptions as google_exceptions
from pydantic import BaseModel, Field, ValidationError, field_validator

from tools.errors import RemoteRequestError
from tools.genai_client import build_generative_model, response_text
from tools.observability import instrument_call

logger = logging.getLogger(__name__)

GENERATION_CONFIG = {
    "temperature": 0.7,
    "top_k": 40,
    "top_p": 0.95,
    "max_output_tokens": 1024,
}
_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


class AnalysisItem(BaseModel):
    name: str
    category: str
    color: Optional[str] = None
    brand: Optional[str] = None
    style: Optional[str] = None


class BudgetRange(BaseModel):
    min: float
    max: float


class UserPreferences(BaseModel):
    favorite_colors: List[str] = Field(default_factory=list)
    preferred_styles: List[str] = Field(default_factory=list)
    budget_range: Optional[BudgetRange] = None


class WardrobeAnalysisPrompt(BaseModel):
    """Wardrobe snapshot sent to the model."""

    items: List[AnalysisItem]
    user_preferences: Optional[UserPreferences] = None


class StyleRecommendation(BaseModel):
    """Structured model output. Non-list fields collapse to empty lists."""

    search_queries: List[str] = Field(default_factory=list, alias="searchQueries")
    style_insights: List[str] = Field(default_factory=list, alias="styleInsights")
    recommendations: List[str] = Field(default_factory=list)
    missing_pieces: List[str] = Field(default_factory=list, alias="missingPieces")

    model_config = {"populate_by_name": True}

    @field_validator("search_queries", "style_insights", "recommendations", "missing_pieces", mode="before")
    @classmethod
    def _coerce_list(cls, value: Any) -> List[str]:
        if not isinstance(value, list):
            return []
        return [str(entry) for entry in value if isinstance(entry, (str, int, float))]


FALLBACK_RECOMMENDATION = StyleRecommendation(
    search_queries=[
        "versatile blazer",
        "statement accessories",
        "comfortable flats",
        "classic white shirt",
        "dark wash jeans",
    ],
    style_insights=[
        "Your wardrobe shows a preference for classic, versatile pieces",
        "There's a good foundation with neutral colors that can be built upon",
        "Adding some statement pieces would enhance your style options",
    ],
    recommendations=[
        "A structured blazer for professional and casual looks",
        "Statement jewelry to elevate basic outfits",
        "A versatile midi dress for multiple occasions",
        "Quality leather accessories for a polished finish",
    ],
    missing_pieces=[
        "Structured outerwear piece",
        "Statement accessories",
        "Versatile dress option",
        "Quality leather goods",
    ],
)


def _item_line(item: AnalysisItem) -> str:
    details = [item.category]
    if item.color:
        details.append(item.color)
    if item.brand:
        details.append(item.brand)
    return f"- {item.name} ({', '.join(details)})"


def build_wardrobe_analysis_prompt(wardrobe: WardrobeAnalysisPrompt) -> str:
    """Render the stylist prompt asking for a JSON answer."""

    items_list = "\n".join(_item_line(item) for item in wardrobe.items)

    preferences_text = ""
    prefs = wardrobe.user_preferences
    if prefs:
        budget = (
            f"${prefs.budget_range.min:g}-${prefs.budget_range.max:g}"
            if prefs.budget_range
            else "Not specified"
        )
        preferences_text = (
            "User Preferences:\n"
            f"- Favorite Colors: {', '.join(prefs.favorite_colors) or 'Not specified'}\n"
            f"- Preferred Styles: {', '.join(prefs.preferred_styles) or 'Not specified'}\n"
            f"- Budget Range: {budget}\n"
        )

    return f"""
As a fashion stylist and wardrobe consultant, analyze this user's wardrobe and provide personalized recommendations.

Current Wardrobe:
{items_list}

{preferences_text}

Please provide your analysis in the following JSON format:
{{
  "searchQueries": ["2-3 specific search terms that would help find items that complement this wardrobe"],
  "styleInsights": ["1-2 insights about the user's current style, palette and direction"],
  "recommendations": ["2-3 specific items that would enhance the wardrobe"],
  "missingPieces": ["1-2 key versatile pieces missing from the wardrobe"]
}}

Make the search queries specific and suitable for secondhand/vintage fashion platforms. Focus on sustainable, versatile pieces that work with existing items.
"""


def parse_style_response(response_text_value: str) -> StyleRecommendation:
    """Extract the embedded JSON object; any failure yields the fixed fallback."""

    match = _JSON_OBJECT.search(response_text_value or "")
    if not match:
        logger.warning("No JSON object found in style analysis response")
        return FALLBACK_RECOMMENDATION.model_copy(deep=True)
    try:
        payload = json.loads(match.group(0))
        if not isinstance(payload, dict):
            raise ValueError("top-level JSON value is not an object")
        return StyleRecommendation.model_validate(payload)
    except (ValueError, ValidationError) as exc:
        logger.warning("Unparsable style analysis response; using fallback", extra={"error": str(exc)})
        return FALLBACK_RECOMMENDATION.model_copy(deep=True)


def extract_keywords(text: str) -> str:
    """Keep the first two words longer than three letters, lower-cased and stripped of punctuation."""

    cleaned = re.sub(r"[^\w\s]", "", text.lower())
    return " ".join([word for word in cleaned.split(" ") if len(word) > 3][:2])


def generate_search_queries(recommendation: StyleRecommendation, max_queries: int = 6) -> List[str]:
    """Merge model queries, missing pieces and recommendation keywords into unique queries."""

    candidates = [
        *recommendation.search_queries,
        *(piece.lower() for piece in recommendation.missing_pieces),
        *(extract_keywords(rec) for rec in recommendation.recommendations),
    ]
    unique: List[str] = []
    for query in candidates:
        if query and query not in unique:
            unique.append(query)
    return unique[:max_queries]


class StyleAnalysisService:
    """Asks a Gemini model for wardrobe insights and search queries."""

    def __init__(self, api_key: Optional[str] = None, model_name: str = "models/gemini-1.5-flash-002", model: Any = None) -> None:
        self.api_key = api_key
        self.model_name = model_name
        self._model = model

    def _get_model(self) -> Any:
        if self._model is None:
            self._model = build_generative_model(self.api_key, self.model_name, GENERATION_CONFIG)
        return self._model

    @instrument_call("style_analysis")
    def analyze(self, wardrobe: WardrobeAnalysisPrompt) -> StyleRecommendation:
        """Return structured recommendations for the wardrobe.

        Raises:
            ConfigurationError: If no API key is configured.
            RemoteRequestError: If the model call fails or returns no text.
        """

        model = self._get_model()
        prompt = build_wardrobe_analysis_prompt(wardrobe)
        try:
            response = model.generate_content(prompt)
        except google_exceptions.GoogleAPIError as exc:
            status = getattr(exc, "code", None)
            logger.error("Style analysis request failed", extra={"status_code": status})
            raise RemoteRequestError(
                f"Gemini API error: {exc}", status_code=status if isinstance(status, int) else None
            ) from exc

        text = response_text(response)
        if not text:
            raise RemoteRequestError("No response from Gemini API")
        return parse_style_response(text)

    def test_connection(self) -> bool:
        """Run a tiny analysis to check credentials and connectivity."""

        sample = WardrobeAnalysisPrompt(
            items=[
                AnalysisItem(name="Black T-shirt", category="Tops", color="Black"),
                AnalysisItem(name="Blue Jeans", category="Bottoms", color="Blue"),
            ]
        )
        try:
            self.analyze(sample)
        except Exception:
            logger.exception("Style analysis connectivity check failed")
            return False
        return True


__all__ = [
    "AnalysisItem",
    "FALLBACK_RECOMMENDATION",
    "StyleAnalysisService",
    "StyleRecommendation",
    "UserPreferences",
    "WardrobeAnalysisPrompt",
    "build_wardrobe_analysis_prompt",
    "extract_keywords",
    "generate_search_queries",
    "parse_style_response",
]
