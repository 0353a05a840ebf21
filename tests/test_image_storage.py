"""Local image storage tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from tools.errors import ValidationError
from tools.image_storage import MAX_IMAGE_BYTES, LocalImageStorage, validate_image


def test_validate_image_rules() -> None:
    validate_image("image/webp", MAX_IMAGE_BYTES)

    with pytest.raises(ValidationError, match="valid image"):
        validate_image("text/plain", 10)
    with pytest.raises(ValidationError, match="valid image"):
        validate_image(None, 10)
    with pytest.raises(ValidationError, match="10MB"):
        validate_image("image/png", MAX_IMAGE_BYTES + 1)


def test_upload_writes_under_user_folder(tmp_path: Path) -> None:
    storage = LocalImageStorage(tmp_path)

    url = storage.upload(b"jpeg-bytes", "Photo.JPG", "image/jpeg", "user-1")

    parts = Path(url).parts
    assert parts[:3] == ("wardrobe-images", "user-1", "wardrobe")
    assert url.endswith(".jpg")
    assert (tmp_path / url).read_bytes() == b"jpeg-bytes"


def test_upload_requires_user(tmp_path: Path) -> None:
    with pytest.raises(ValidationError, match="not authenticated"):
        LocalImageStorage(tmp_path).upload(b"x", "a.png", "image/png", "")


def test_delete_stored_image(tmp_path: Path) -> None:
    storage = LocalImageStorage(tmp_path)
    url = storage.upload(b"x", "a.png", "image/png", "user-1", folder="try-on")

    assert storage.delete(url) is True
    assert storage.delete(url) is False


@pytest.mark.parametrize("url", ["https://cdn.example.com/a.png", "wardrobe-images/../secret.png"])
def test_delete_rejects_foreign_urls(tmp_path: Path, url: str) -> None:
    with pytest.raises(ValidationError):
        LocalImageStorage(tmp_path).delete(url)


@pytest.mark.parametrize(
    ("user_id", "folder"),
    [("../../escape", "wardrobe"), ("/tmp/outside", "wardrobe"), ("..", "wardrobe"), ("user-1", "../try-on")],
)
def test_upload_rejects_paths_outside_storage(tmp_path: Path, user_id: str, folder: str) -> None:
    storage = LocalImageStorage(tmp_path / "images")

    with pytest.raises(ValidationError, match="Invalid"):
        storage.upload(b"png", "a.png", "image/png", user_id, folder=folder)

    written = [path for path in tmp_path.rglob("*") if path.is_file()]
    assert written == []
