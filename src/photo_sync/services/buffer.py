"""In-memory projection of the canonical photo list."""

from collections.abc import Iterable
from dataclasses import dataclass

from photo_sync.domain.photos import Photo


@dataclass
class PhotoBuffer:
    """Photos currently known to the client, keyed by id."""

    _photos: dict[str, Photo]

    def __init__(self, photos: Iterable[Photo] = ()) -> None:
        self._photos = {}
        self.replace_all(photos)

    def __len__(self) -> int:
        return len(self._photos)

    def __contains__(self, photo_id: object) -> bool:
        return photo_id in self._photos

    def list(self) -> list[Photo]:
        """Return photos most-recent-first."""
        return sorted(
            self._photos.values(), key=lambda photo: photo.captured_at, reverse=True
        )

    def get(self, photo_id: str) -> Photo | None:
        return self._photos.get(photo_id)

    def upsert(self, photo: Photo) -> None:
        """Insert a photo or replace the one with the same id."""
        self._photos[photo.id] = photo

    def remove(self, photo_id: str) -> None:
        """Remove a photo; unknown ids are ignored."""
        self._photos.pop(photo_id, None)

    def clear(self) -> None:
        self._photos.clear()

    def replace_all(self, photos: Iterable[Photo]) -> None:
        """Replace the whole buffer; later duplicates win."""
        self._photos = {photo.id: photo for photo in photos}

    def size_summary(self) -> int:
        """Return the total byte count of held photos."""
        return sum(photo.size for photo in self._photos.values())
