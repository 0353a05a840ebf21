"""Construction of Gemini models shared by the generative collaborators."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import google.generativeai as genai

from tools.errors import ConfigurationError

logger = logging.getLogger(__name__)

_PLACEHOLDER_KEYS = {"", "YOUR_GEMINI_API_KEY"}


def build_generative_model(
    api_key: Optional[str],
    model_name: str,
    generation_config: Optional[Dict[str, Any]] = None,
) -> genai.GenerativeModel:
    """Configure the SDK with ``api_key`` and return a model handle.

    Raises:
        ConfigurationError: If no usable API key is configured.
    """

    if not api_key or api_key.strip() in _PLACEHOLDER_KEYS:
        raise ConfigurationError(
            "Gemini API key not configured. Set GEMINI_API_KEY in the environment."
        )
    genai.configure(api_key=api_key)
    logger.debug("Configured generative model", extra={"model": model_name})
    return genai.GenerativeModel(model_name=model_name, generation_config=generation_config)


def response_text(response: Any) -> str:
    """Return the first text part of a generate_content response, or ``""``."""

    for candidate in getattr(response, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            text = getattr(part, "text", None)
            if text:
                return text
    return ""


__all__ = ["build_generative_model", "response_text"]
