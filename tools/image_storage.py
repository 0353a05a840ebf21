"""Image upload validation and local file storage for wardrobe photos."""

from __future__ import annotations

import logging
import time
import uuid
from pathlib import Path, PurePosixPath
from typing import Optional

from tools.errors import ValidationError

logger = logging.getLogger(__name__)

MAX_IMAGE_BYTES = 10 * 1024 * 1024
STORAGE_BUCKET = "wardrobe-images"


def _path_segment(value: str, label: str) -> str:
    if not value or value in {".", ".."} or PurePosixPath(value).name != value or "\\" in value:
        raise ValidationError(f"Invalid {label}")
    return value


def validate_image(content_type: Optional[str], size: int) -> None:
    """Reject non-image uploads and images larger than 10 MB.

    Raises:
        ValidationError: With a user-facing message.
    """

    if not content_type or not content_type.startswith("image/"):
        raise ValidationError("Please select a valid image file")
    if size > MAX_IMAGE_BYTES:
        raise ValidationError("Image size must be less than 10MB")


class LocalImageStorage:
    """Stores uploads under ``<base_dir>/wardrobe-images/<user>/<folder>/``.

    Returned URLs are relative paths beginning with the bucket name so they can
    be served statically and resolved back by :meth:`delete`.
    """

    def __init__(self, base_dir: str | Path = "data/images") -> None:
        self.base_dir = Path(base_dir)

    def upload(
        self,
        data: bytes,
        filename: str,
        content_type: Optional[str],
        user_id: str,
        folder: str = "wardrobe",
    ) -> str:
        validate_image(content_type, len(data))
        if not user_id:
            raise ValidationError("User not authenticated")

        suffix = PurePosixPath(filename or "").suffix.lstrip(".").lower() or "jpg"
        stored_name = f"{int(time.time() * 1000)}_{uuid.uuid4().hex[:10]}.{suffix}"
        relative = PurePosixPath(
            STORAGE_BUCKET, _path_segment(user_id, "user id"), _path_segment(folder, "folder"), stored_name
        )
        target = self.base_dir / relative
        if not target.resolve().is_relative_to(self.base_dir.resolve()):
            raise ValidationError("Invalid image path")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        logger.info("Stored image", extra={"path": str(relative), "size": len(data)})
        return str(relative)

    def _resolve(self, image_url: str) -> Path:
        parts = PurePosixPath(image_url).parts
        if STORAGE_BUCKET not in parts:
            raise ValidationError("Invalid image URL format")
        index = parts.index(STORAGE_BUCKET)
        inner = parts[index + 1 :]
        if not inner or ".." in inner:
            raise ValidationError("Invalid image URL format")
        return self.base_dir.joinpath(STORAGE_BUCKET, *inner)

    def delete(self, image_url: str) -> bool:
        """Delete a stored image; returns False when it no longer exists."""

        path = self._resolve(image_url)
        if not path.exists():
            return False
        path.unlink()
        logger.info("Deleted image", extra={"path": str(path)})
        return True


__all__ = ["MAX_IMAGE_BYTES", "LocalImageStorage", "validate_image"]
