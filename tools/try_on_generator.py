"""Gemini-backed virtual try-on image generation."""

from __future__ import annotations

import base64
import logging
from typing import Any, Optional, Sequence

from google.api_core import exceptions as google_exceptions

from logic.try_on_wizard import TryOnResult
from tools.genai_client import build_generative_model
from tools.observability import instrument_call

logger = logging.getLogger(__name__)


def build_try_on_prompt(clothing_items: Sequence[dict]) -> str:
    descriptions = "\n".join(
        f"{index}. {item.get('name', 'Clothing item')} ({item.get('category') or 'clothing'})"
        for index, item in enumerate(clothing_items, start=1)
    )
    return (
        "Create a realistic virtual try-on image. Dress the person in the provided photo "
        "in the following clothing items while keeping their face, pose, body shape and "
        "background unchanged:\n"
        f"{descriptions}\n"
        "Return a single photorealistic image."
    )


def _inline_image(response: Any) -> Optional[tuple[str, bytes]]:
    for candidate in getattr(response, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            inline = getattr(part, "inline_data", None)
            data = getattr(inline, "data", None) if inline is not None else None
            if data:
                return getattr(inline, "mime_type", None) or "image/png", data
    return None


class GeminiTryOnGenerator:
    """Generates try-on images from a user photo and selected clothing descriptions."""

    def __init__(self, api_key: Optional[str] = None, model_name: str = "models/gemini-2.0-flash-exp-image-generation", model: Any = None) -> None:
        self.api_key = api_key
        self.model_name = model_name
        self._model = model

    def _get_model(self) -> Any:
        if self._model is None:
            self._model = build_generative_model(self.api_key, self.model_name)
        return self._model

    @instrument_call("virtual_try_on")
    def generate(self, user_image: bytes, content_type: str, clothing_items: Sequence[dict]) -> TryOnResult:
        if not clothing_items:
            return TryOnResult(success=False, error="No clothing items selected")

        model = self._get_model()
        prompt = build_try_on_prompt(clothing_items)
        try:
            response = model.generate_content(
                [prompt, {"mime_type": content_type, "data": user_image}]
            )
        except google_exceptions.GoogleAPIError as exc:
            logger.error("Try-on generation request failed", extra={"error": str(exc)})
            return TryOnResult(success=False, error=str(exc))

        image = _inline_image(response)
        if image is None:
            logger.warning("Try-on response contained no image")
            return TryOnResult(success=False, error="No image returned by the model")

        mime_type, data = image
        if isinstance(data, str):
            encoded = data
        else:
            encoded = base64.b64encode(data).decode("ascii")
        return TryOnResult(success=True, image_url=f"data:{mime_type};base64,{encoded}")


__all__ = ["GeminiTryOnGenerator", "build_try_on_prompt"]
