"""REST client for the remote photo storage service."""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, TypeVar

import httpx
from pydantic import BaseModel, Field, ValidationError

from photo_sync.domain.photos import Photo, StorageErrorKind

_ModelT = TypeVar("_ModelT", bound=BaseModel)


class StoredImage(BaseModel):
    """Image record as returned by the storage service."""

    id: int | str
    filename: str | None = None
    originalname: str
    size: int = Field(ge=0)
    url: str | None = None
    created_at: datetime | None = None
    mimetype: str | None = None
    source: str | None = None


class ImageEnvelope(BaseModel):
    """Single-record response envelope."""

    success: bool
    data: StoredImage


class ImageListEnvelope(BaseModel):
    """List response envelope."""

    success: bool
    data: list[StoredImage]


class StorageServiceError(Exception):
    """Base error raised by storage clients."""

    kind: StorageErrorKind = StorageErrorKind.SERVER_REJECTED

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class StorageNetworkError(StorageServiceError):
    """The storage service could not be reached."""

    kind = StorageErrorKind.NETWORK


class StorageRejectedError(StorageServiceError):
    """The storage service answered with a failure."""

    kind = StorageErrorKind.SERVER_REJECTED


class StorageNotFoundError(StorageServiceError):
    """The requested record does not exist."""

    kind = StorageErrorKind.NOT_FOUND


class StorageClient(Protocol):
    """Interface for the remote photo storage service."""

    async def upload_photo(self, photo: Photo) -> StoredImage:
        """Upload a photo and return the stored record."""

    async def list_photos(self) -> list[StoredImage]:
        """Return every stored record."""

    async def get_photo(self, photo_id: str) -> StoredImage:
        """Return a stored record by id."""

    async def delete_photo(self, photo_id: str) -> None:
        """Delete a stored record by id."""

    async def clear_all(self) -> None:
        """Delete every stored record."""


@dataclass
class HttpxStorageClient(StorageClient):
    """Storage client backed by the Express photo API."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout: float = 15

    @classmethod
    def create(cls, base_url: str, timeout: float = 15) -> "HttpxStorageClient":
        """Create a storage client with a managed httpx session."""
        return cls(
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            timeout=timeout,
        )

    async def upload_photo(self, photo: Photo) -> StoredImage:
        """Upload a photo as multipart field ``image``."""
        if not isinstance(photo.content, bytes):
            raise ValueError("Only in-memory photo content can be uploaded")
        payload = await self._request(
            "POST",
            "/api/upload-image",
            files={"image": (photo.name, photo.content, photo.mime_type)},
            data={
                "client_id": photo.id,
                "source": photo.source.value,
                "captured_at": photo.captured_at.isoformat(),
            },
        )
        return _validate(ImageEnvelope, payload).data

    async def list_photos(self) -> list[StoredImage]:
        """Fetch the canonical image list."""
        payload = await self._request("GET", "/api/images")
        return _validate(ImageListEnvelope, payload).data

    async def get_photo(self, photo_id: str) -> StoredImage:
        """Fetch a single image record."""
        payload = await self._request("GET", f"/api/images/{photo_id}")
        return _validate(ImageEnvelope, payload).data

    async def delete_photo(self, photo_id: str) -> None:
        """Delete a single image record."""
        await self._request("DELETE", f"/api/images/{photo_id}")

    async def clear_all(self) -> None:
        """Delete every record; the service has no bulk route."""
        for image in await self.list_photos():
            await self.delete_photo(str(image.id))

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _request(
        self, method: str, path: str, **kwargs: object
    ) -> dict[str, object]:
        url = f"{self.base_url}{path}"
        try:
            response = await self.http_client.request(
                method, url, timeout=self.timeout, **kwargs
            )
        except httpx.HTTPError as exc:
            raise StorageNetworkError(
                f"Could not reach storage service: {exc}"
            ) from exc
        payload = _json_or_none(response)
        message = payload.get("message") if payload else None
        if response.status_code == httpx.codes.NOT_FOUND:
            raise StorageNotFoundError(str(message or "Image not found"))
        if response.is_error or payload is None or not payload.get("success"):
            raise StorageRejectedError(
                str(message or f"Storage service returned {response.status_code}")
            )
        return payload


def _json_or_none(response: httpx.Response) -> dict[str, object] | None:
    """Decode a JSON object body, tolerating empty or non-JSON bodies."""
    try:
        payload = response.json()
    except ValueError:
        return None
    return payload if isinstance(payload, dict) else None


def _validate(
    model: type[_ModelT], payload: dict[str, object]
) -> _ModelT:
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise StorageRejectedError(
            f"Malformed storage service response: {exc.error_count()} error(s)"
        ) from exc
