"""Domain models for photos and storage accounting."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, StrEnum


class PhotoSource(StrEnum):
    """Provenance of a photo."""

    CAMERA = "camera"
    GALLERY = "gallery"


@dataclass(frozen=True)
class Photo:
    """Client-visible record of a captured or selected image."""

    id: str
    name: str
    content: bytes | str
    size: int
    source: PhotoSource
    captured_at: datetime
    url: str | None = None
    mime_type: str = "image/jpeg"

    def __post_init__(self) -> None:
        if self.size < 0:
            raise ValueError(f"Photo size must be non-negative, got {self.size}")
        if not isinstance(self.source, PhotoSource):
            object.__setattr__(self, "source", PhotoSource(self.source))


@dataclass(frozen=True)
class PhotoDraft:
    """Photo payload that has not been assigned an id yet."""

    name: str
    content: bytes
    source: PhotoSource
    mime_type: str = "image/jpeg"
    size: int = field(default=-1)

    def __post_init__(self) -> None:
        if self.size < 0:
            object.__setattr__(self, "size", len(self.content))
        if not isinstance(self.source, PhotoSource):
            object.__setattr__(self, "source", PhotoSource(self.source))


@dataclass(frozen=True)
class StorageInfo:
    """Durable storage usage in bytes."""

    used: int = 0
    available: int = 0


class StorageErrorKind(Enum):
    """Failure kinds reported by the storage service."""

    NETWORK = "network"
    SERVER_REJECTED = "server_rejected"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class StorageError:
    """Last storage failure surfaced to the UI."""

    kind: StorageErrorKind
    message: str
