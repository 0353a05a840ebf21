"""Client for the clothing feature detection model service."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from pydantic import BaseModel, ValidationInfo, field_validator

from logic.feature_heuristics import map_detected_type_to_category, normalize_color
from tools.observability import instrument_call

logger = logging.getLogger(__name__)

DEFAULT_FEATURE_DETECTION_URL = "http://127.0.0.1:5000/predict"


class ClothingFeatures(BaseModel):
    """Features reported by the model; empty or missing values take defaults."""

    color: str = "Unknown"
    style: str = "Casual"
    type: str = "Other"

    @field_validator("color", "style", "type", mode="before")
    @classmethod
    def _blank_to_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value in (None, ""):
            return cls.model_fields[info.field_name].default
        return str(value)


@dataclass
class FeatureDetectionResult:
    success: bool
    features: Optional[ClothingFeatures] = None
    error: Optional[str] = None


def to_wardrobe_fields(features: ClothingFeatures) -> Dict[str, str]:
    """Translate detected features into wardrobe item fields."""

    return {
        "category": map_detected_type_to_category(features.type),
        "color": normalize_color(features.color),
        "style": features.style,
    }


class FeatureDetectionClient:
    """Posts an image to the detection service and reads back color, style and type."""

    def __init__(self, api_url: str = DEFAULT_FEATURE_DETECTION_URL, timeout_seconds: float = 10) -> None:
        self.api_url = api_url
        self.timeout_seconds = timeout_seconds

    @instrument_call("feature_detection")
    def detect(self, data: bytes, filename: str, content_type: Optional[str]) -> FeatureDetectionResult:
        if not content_type or not content_type.startswith("image/"):
            return FeatureDetectionResult(success=False, error="Please upload a valid image file.")

        try:
            response = requests.post(
                self.api_url,
                files={"file": (filename or "upload", data, content_type)},
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as exc:
            logger.warning("Feature detection service unreachable", extra={"error": str(exc)})
            return FeatureDetectionResult(
                success=False,
                error=(
                    f"Failed to connect to AI model at {self.api_url}. "
                    "Make sure the detection service is running."
                ),
            )

        if not 200 <= response.status_code < 300:
            logger.warning("Feature detection returned error status", extra={"status_code": response.status_code})
            return FeatureDetectionResult(success=False, error=f"API Error: {response.status_code}")

        try:
            payload = response.json()
        except ValueError:
            return FeatureDetectionResult(success=False, error="Invalid response from AI model")
        if not isinstance(payload, dict):
            payload = {}

        features = ClothingFeatures(
            color=payload.get("color"), style=payload.get("style"), type=payload.get("type")
        )
        return FeatureDetectionResult(success=True, features=features)


__all__ = [
    "ClothingFeatures",
    "FeatureDetectionClient",
    "FeatureDetectionResult",
    "to_wardrobe_fields",
]
