"""Step-by-step state for the virtual try-on flow."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Protocol, Sequence

from models.favorite_item import FavoriteItem
from tools.errors import ValidationError
from tools.image_storage import validate_image

logger = logging.getLogger(__name__)

MAX_SELECTED_ITEMS = 3
GENERATION_FAILED_MESSAGE = "Failed to generate virtual try-on. Please try again."


class TryOnStep(str, Enum):
    SELECT_CLOTHES = "select-clothes"
    UPLOAD_IMAGE = "upload-image"
    GENERATING = "generating"
    RESULT = "result"


@dataclass
class TryOnResult:
    success: bool
    image_url: Optional[str] = None
    error: Optional[str] = None


class TryOnGenerator(Protocol):
    def generate(
        self, user_image: bytes, content_type: str, clothing_items: Sequence[dict]
    ) -> TryOnResult:
        ...


@dataclass
class VirtualTryOnWizard:
    """Linear wizard: select clothes, upload a photo, generate, show the result.

    Only forward transitions gated on user input are allowed, plus a retry
    edge from generating back to upload-image when generation fails and a
    restart edge back to select-clothes.
    """

    favorites: List[FavoriteItem] = field(default_factory=list)
    step: TryOnStep = TryOnStep.SELECT_CLOTHES
    selected: List[FavoriteItem] = field(default_factory=list)
    image: Optional[bytes] = None
    image_content_type: Optional[str] = None
    result_image_url: Optional[str] = None
    error: Optional[str] = None

    def _require(self, step: TryOnStep) -> None:
        if self.step is not step:
            raise ValidationError(f"Action not allowed in step '{self.step.value}'")

    def toggle_item(self, item: FavoriteItem) -> List[FavoriteItem]:
        """Select or deselect a favorite; a fourth selection drops the oldest one."""

        self._require(TryOnStep.SELECT_CLOTHES)
        if any(chosen.favorite_id == item.favorite_id for chosen in self.selected):
            self.selected = [chosen for chosen in self.selected if chosen.favorite_id != item.favorite_id]
        elif len(self.selected) >= MAX_SELECTED_ITEMS:
            self.selected = self.selected[1:] + [item]
        else:
            self.selected = self.selected + [item]
        return list(self.selected)

    def proceed_to_upload(self) -> TryOnStep:
        self._require(TryOnStep.SELECT_CLOTHES)
        if not self.selected:
            raise ValidationError("Select at least one item to continue")
        self.step = TryOnStep.UPLOAD_IMAGE
        return self.step

    def upload_image(self, data: bytes, content_type: str) -> None:
        self._require(TryOnStep.UPLOAD_IMAGE)
        try:
            validate_image(content_type, len(data))
        except ValidationError as exc:
            self.error = str(exc)
            raise
        self.image = data
        self.image_content_type = content_type
        self.error = None

    def clothing_payload(self) -> List[dict]:
        return [
            {
                "name": item.item_name,
                "image_url": item.image_url,
                "category": (item.metadata or {}).get("category") or "clothing",
            }
            for item in self.selected
        ]

    def generate(self, generator: TryOnGenerator) -> TryOnStep:
        """Run generation; lands on ``result`` or returns to ``upload-image`` with an error."""

        self._require(TryOnStep.UPLOAD_IMAGE)
        if self.image is None or not self.selected:
            raise ValidationError("Upload a photo and select clothes before generating")

        self.step = TryOnStep.GENERATING
        self.error = None
        try:
            result = generator.generate(
                self.image, self.image_content_type or "image/jpeg", self.clothing_payload()
            )
        except Exception:
            logger.exception("Virtual try-on generation raised")
            result = TryOnResult(success=False, error=GENERATION_FAILED_MESSAGE)

        if result.success and result.image_url:
            self.result_image_url = result.image_url
            self.step = TryOnStep.RESULT
        else:
            logger.warning("Virtual try-on generation failed", extra={"reason": result.error})
            self.error = GENERATION_FAILED_MESSAGE
            self.step = TryOnStep.UPLOAD_IMAGE
        return self.step

    def restart(self) -> TryOnStep:
        self.step = TryOnStep.SELECT_CLOTHES
        self.selected = []
        self.image = None
        self.image_content_type = None
        self.result_image_url = None
        self.error = None
        return self.step


__all__ = [
    "GENERATION_FAILED_MESSAGE",
    "MAX_SELECTED_ITEMS",
    "TryOnResult",
    "TryOnGenerator",
    "TryOnStep",
    "VirtualTryOnWizard",
]
