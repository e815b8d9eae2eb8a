"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import UTC, datetime

import pytest
from PIL import Image

from photo_sync.adapters.media_device import (
    DeviceUnavailableError,
    MediaDevice,
    StreamHandle,
)
from photo_sync.adapters.storage_client import (
    StorageClient,
    StorageNotFoundError,
    StorageServiceError,
    StoredImage,
)
from photo_sync.config import Settings
from photo_sync.containers import AppContainer
from photo_sync.domain.camera import CameraConstraints, FacingMode
from photo_sync.domain.photos import Photo
from photo_sync.services.camera import CameraService
from photo_sync.services.gallery import GallerySelector
from photo_sync.services.photo_storage import PhotoStorageController


@dataclass
class InMemoryStorageClient(StorageClient):
    """In-memory storage service for tests."""

    images: dict[str, StoredImage] = field(default_factory=dict)
    failures: dict[str, StorageServiceError] = field(default_factory=dict)
    uploads: list[Photo] = field(default_factory=list)
    calls: list[str] = field(default_factory=list)
    next_id: int = 1

    def _maybe_fail(self, operation: str) -> None:
        self.calls.append(operation)
        error = self.failures.get(operation)
        if error is not None:
            raise error

    def add_image(
        self, name: str, size: int, created_at: datetime | None
    ) -> StoredImage:
        image = StoredImage(
            id=self.next_id,
            filename=f"image-{self.next_id}.jpg",
            originalname=name,
            size=size,
            url=f"https://photos.test/uploads/image-{self.next_id}.jpg",
            created_at=created_at,
        )
        self.images[str(image.id)] = image
        self.next_id += 1
        return image

    async def upload_photo(self, photo: Photo) -> StoredImage:
        self._maybe_fail("upload")
        self.uploads.append(photo)
        return self.add_image(photo.name, photo.size, datetime.now(tz=UTC))

    async def list_photos(self) -> list[StoredImage]:
        self._maybe_fail("list")
        return list(self.images.values())

    async def get_photo(self, photo_id: str) -> StoredImage:
        self._maybe_fail("get")
        image = self.images.get(photo_id)
        if image is None:
            raise StorageNotFoundError("Image not found")
        return image

    async def delete_photo(self, photo_id: str) -> None:
        self._maybe_fail("delete")
        if photo_id not in self.images:
            raise StorageNotFoundError("Image not found")
        del self.images[photo_id]

    async def clear_all(self) -> None:
        self._maybe_fail("clear_all")
        self.images.clear()


@dataclass(eq=False)
class FakeStream(StreamHandle):
    """Stream that always renders the same solid frame."""

    constraints: CameraConstraints
    frame: Image.Image | None

    def read_frame(self) -> Image.Image | None:
        return self.frame


@dataclass
class FakeMediaDevice(MediaDevice):
    """Media device that tracks every handle it hands out."""

    permission_granted: bool = True
    unavailable_modes: set[FacingMode] = field(default_factory=set)
    blank_frames: bool = False
    frame_size: tuple[int, int] = (64, 48)
    open_handles: list[FakeStream] = field(default_factory=list)
    max_open_handles: int = 0
    acquire_count: int = 0

    async def request_permission(self) -> bool:
        return self.permission_granted

    async def acquire_stream(self, constraints: CameraConstraints) -> StreamHandle:
        if constraints.facing_mode in self.unavailable_modes:
            raise DeviceUnavailableError(
                f"No {constraints.facing_mode} camera available"
            )
        frame = None if self.blank_frames else Image.new("RGB", self.frame_size, "red")
        stream = FakeStream(constraints=constraints, frame=frame)
        self.open_handles.append(stream)
        self.acquire_count += 1
        self.max_open_handles = max(self.max_open_handles, len(self.open_handles))
        return stream

    async def release_stream(self, handle: StreamHandle) -> None:
        self.open_handles.remove(handle)


@pytest.fixture
def settings() -> Settings:
    return Settings(storage_base_url="https://photos.test")


@pytest.fixture
def storage_client() -> InMemoryStorageClient:
    return InMemoryStorageClient()


@pytest.fixture
def media_device() -> FakeMediaDevice:
    return FakeMediaDevice()


@pytest.fixture
def camera_service(media_device: FakeMediaDevice) -> CameraService:
    return CameraService(device=media_device)


@pytest.fixture
def controller(storage_client: InMemoryStorageClient) -> PhotoStorageController:
    return PhotoStorageController(client=storage_client, quota_bytes=10_000_000)


@pytest.fixture
def container(
    settings: Settings,
    storage_client: InMemoryStorageClient,
    media_device: FakeMediaDevice,
    camera_service: CameraService,
    controller: PhotoStorageController,
) -> AppContainer:
    async def close_resources() -> None:
        await camera_service.close()

    return AppContainer(
        settings=settings,
        storage_client=storage_client,
        media_device=media_device,
        camera_service=camera_service,
        photo_storage=controller,
        gallery_selector=GallerySelector(max_size=settings.gallery_max_bytes),
        close_resources=close_resources,
    )
