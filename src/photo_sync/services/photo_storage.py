"""Synchronizes the local photo buffer with the remote storage service."""

import logging
import secrets
import string
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from typing import TypeVar

from photo_sync.adapters.storage_client import (
    StorageClient,
    StorageServiceError,
    StoredImage,
)
from photo_sync.domain.photos import (
    Photo,
    PhotoDraft,
    PhotoSource,
    StorageError,
    StorageInfo,
)
from photo_sync.services.buffer import PhotoBuffer

_logger = logging.getLogger(__name__)

_ResultT = TypeVar("_ResultT")

_ID_ALPHABET = string.digits + string.ascii_lowercase


@dataclass
class PhotoStorageController:
    """Routes every buffer mutation through the storage service.

    The buffer is only ever written from a successful list response: each
    mutation re-fetches the canonical list once the remote call completes.
    ``loading`` is advisory; overlapping calls are not queued.
    """

    client: StorageClient
    quota_bytes: int = 100 * 1024 * 1024
    buffer: PhotoBuffer = field(default_factory=PhotoBuffer)
    loading: bool = field(default=False, init=False)
    error: StorageError | None = field(default=None, init=False)
    storage_info: StorageInfo = field(default_factory=StorageInfo, init=False)
    _sources: dict[str, PhotoSource] = field(default_factory=dict, init=False)
    _captured_at: dict[str, datetime] = field(default_factory=dict, init=False)

    @property
    def photos(self) -> list[Photo]:
        return self.buffer.list()

    async def refresh(self) -> None:
        """Replace the buffer with the canonical list; keep it on failure."""
        await self._run("refresh", self._refresh_buffer)

    async def save(self, draft: PhotoDraft) -> Photo | None:
        """Upload a new photo and return it, or None if the upload failed."""
        photo = Photo(
            id=new_photo_id(),
            name=draft.name,
            content=draft.content,
            size=draft.size,
            source=draft.source,
            captured_at=datetime.now(tz=UTC),
            mime_type=draft.mime_type,
        )

        async def _save() -> Photo:
            stored = await self.client.upload_photo(photo)
            self._sources[str(stored.id)] = photo.source
            self._captured_at[str(stored.id)] = photo.captured_at
            _logger.info(
                "Uploaded %s as %s (%s bytes)", photo.name, stored.id, stored.size
            )
            await self._refresh_buffer(raise_errors=False)
            return self.buffer.get(str(stored.id)) or _merge(photo, stored)

        return await self._run("save", _save)

    async def delete(self, photo_id: str) -> None:
        """Delete a photo remotely, then refresh."""

        async def _delete() -> None:
            await self.client.delete_photo(photo_id)
            self._sources.pop(photo_id, None)
            self._captured_at.pop(photo_id, None)
            await self._refresh_buffer(raise_errors=False)

        await self._run("delete", _delete)

    async def clear_all(self) -> None:
        """Delete every photo remotely, then refresh."""

        async def _clear() -> None:
            try:
                await self.client.clear_all()
            finally:
                await self._refresh_buffer(raise_errors=False)
            self._sources.clear()
            self._captured_at.clear()

        await self._run("clear_all", _clear)

    async def get(self, photo_id: str) -> Photo | None:
        """Fetch a single photo record without touching the buffer."""

        async def _get() -> Photo:
            return self._to_photo(await self.client.get_photo(photo_id))

        return await self._run("get", _get)

    async def _run(
        self, action: str, operation: Callable[[], Awaitable[_ResultT]]
    ) -> _ResultT | None:
        self.loading = True
        self.error = None
        try:
            return await operation()
        except StorageServiceError as exc:
            self.error = StorageError(kind=exc.kind, message=exc.message)
            _logger.warning("Photo %s failed (%s): %s", action, exc.kind.value, exc)
            return None
        finally:
            self.loading = False

    async def _refresh_buffer(self, raise_errors: bool = True) -> None:
        try:
            images = await self.client.list_photos()
        except StorageServiceError as exc:
            if raise_errors:
                raise
            self.error = StorageError(kind=exc.kind, message=exc.message)
            _logger.warning("Photo refresh failed (%s): %s", exc.kind.value, exc)
            return
        self.buffer.replace_all(self._to_photo(image) for image in images)
        used = self.buffer.size_summary()
        self.storage_info = StorageInfo(
            used=used, available=max(self.quota_bytes - used, 0)
        )

    def _to_photo(self, image: StoredImage) -> Photo:
        photo_id = str(image.id)
        if image.source in {source.value for source in PhotoSource}:
            source = PhotoSource(image.source)
        else:
            source = self._sources.get(photo_id, PhotoSource.GALLERY)
        return Photo(
            id=photo_id,
            name=image.originalname,
            content=image.url or image.filename or "",
            size=image.size,
            source=source,
            captured_at=self._captured_at_for(photo_id, image.created_at),
            url=image.url,
            mime_type=image.mimetype or "image/jpeg",
        )

    def _captured_at_for(self, photo_id: str, created_at: datetime | None) -> datetime:
        """Prefer the server timestamp, else the first one recorded for the id."""
        server_time = _aware(created_at)
        if server_time is not None:
            return server_time
        return self._captured_at.setdefault(photo_id, datetime.now(tz=UTC))


def new_photo_id() -> str:
    """Build an id of the form ``photo_<epoch ms>_<9 base36 chars>``."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"photo_{time.time_ns() // 1_000_000}_{suffix}"


def _aware(value: datetime | None) -> datetime | None:
    """Treat naive server timestamps as UTC."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def _merge(photo: Photo, stored: StoredImage) -> Photo:
    """Overlay server-assigned fields onto the locally built photo."""
    return replace(
        photo,
        id=str(stored.id),
        size=stored.size,
        url=stored.url,
    )
