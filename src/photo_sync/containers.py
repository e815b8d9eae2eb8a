"""Dependency container wiring for a photo session."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from photo_sync.adapters.media_device import MediaDevice, OpenCVMediaDevice
from photo_sync.adapters.storage_client import HttpxStorageClient, StorageClient
from photo_sync.app_logging import configure_logging
from photo_sync.config import Settings, parse_facing_mode
from photo_sync.services.camera import CameraService
from photo_sync.services.gallery import GallerySelector
from photo_sync.services.photo_storage import PhotoStorageController


@dataclass
class AppContainer:
    """Holds the dependencies of one photo session."""

    settings: Settings
    storage_client: StorageClient
    media_device: MediaDevice
    camera_service: CameraService
    photo_storage: PhotoStorageController
    gallery_selector: GallerySelector
    close_resources: Callable[[], Awaitable[None]]


def build_container(
    settings: Settings | None = None, media_device: MediaDevice | None = None
) -> AppContainer:
    """Create the default dependency container."""
    configure_logging()
    resolved_settings = settings or Settings()
    storage_client = HttpxStorageClient.create(
        base_url=resolved_settings.storage_base_url,
        timeout=resolved_settings.request_timeout_seconds,
    )
    resolved_device = media_device or OpenCVMediaDevice(
        front_index=resolved_settings.camera_index,
        rear_index=resolved_settings.camera_index,
    )
    camera_service = CameraService(
        device=resolved_device,
        facing_mode=parse_facing_mode(resolved_settings.default_facing_mode),
        ideal_width=resolved_settings.capture_width,
        ideal_height=resolved_settings.capture_height,
        jpeg_quality=resolved_settings.jpeg_quality,
    )
    photo_storage = PhotoStorageController(
        client=storage_client,
        quota_bytes=resolved_settings.storage_quota_bytes,
    )
    gallery_selector = GallerySelector(max_size=resolved_settings.gallery_max_bytes)

    async def close_resources() -> None:
        await camera_service.close()
        await storage_client.close()

    return AppContainer(
        settings=resolved_settings,
        storage_client=storage_client,
        media_device=resolved_device,
        camera_service=camera_service,
        photo_storage=photo_storage,
        gallery_selector=gallery_selector,
        close_resources=close_resources,
    )
