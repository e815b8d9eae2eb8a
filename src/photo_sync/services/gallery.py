"""Build photo drafts from local files and camera captures."""

import io
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from photo_sync.domain.photos import PhotoDraft, PhotoSource

_logger = logging.getLogger(__name__)


class GallerySelectionError(ValueError):
    """A selected file cannot be used as a photo."""


@dataclass
class GallerySelector:
    """Reads image files chosen from the local gallery."""

    max_size: int = 5 * 1024 * 1024

    def select(self, path: str | Path) -> PhotoDraft:
        """Read one image file into a gallery draft."""
        file_path = Path(path)
        size = file_path.stat().st_size
        if size > self.max_size:
            limit_mb = self.max_size / 1024 / 1024
            raise GallerySelectionError(
                f"File {file_path.name} exceeds the maximum size of {limit_mb:g} MB."
            )
        content = file_path.read_bytes()
        return PhotoDraft(
            name=file_path.name,
            content=content,
            source=PhotoSource.GALLERY,
            mime_type=detect_image_mime_type(content, file_path.name),
        )

    def select_many(self, paths: Iterable[str | Path]) -> list[PhotoDraft]:
        """Read several files, skipping the ones that are rejected."""
        drafts: list[PhotoDraft] = []
        for path in paths:
            try:
                drafts.append(self.select(path))
            except (GallerySelectionError, OSError) as exc:
                _logger.warning("Skipping %s: %s", path, exc)
        return drafts


def draft_from_capture(content: bytes, now: datetime | None = None) -> PhotoDraft:
    """Wrap JPEG bytes from the camera in a draft with a timestamped name."""
    taken_at = now or datetime.now(tz=UTC)
    return PhotoDraft(
        name=f"photo_{taken_at:%Y%m%d-%H%M%S}.jpg",
        content=content,
        source=PhotoSource.CAMERA,
        mime_type="image/jpeg",
    )


def detect_image_mime_type(content: bytes, name: str = "image") -> str:
    """Identify the image format with Pillow and return its MIME type."""
    try:
        with Image.open(io.BytesIO(content)) as image:
            image_format = image.format
    except UnidentifiedImageError as exc:
        raise GallerySelectionError(f"{name} is not a supported image") from exc
    return Image.MIME.get(image_format or "", "image/jpeg")
