"""Platform camera access."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Protocol

from PIL import Image

from photo_sync.domain.camera import CameraConstraints, CameraErrorKind, FacingMode

_logger = logging.getLogger(__name__)


class CameraError(Exception):
    """Base camera error."""

    kind: CameraErrorKind = CameraErrorKind.DEVICE_UNAVAILABLE


class PermissionDeniedError(CameraError):
    """Access to the camera was refused."""

    kind = CameraErrorKind.PERMISSION_DENIED


class DeviceUnavailableError(CameraError):
    """No device matches the requested constraints."""

    kind = CameraErrorKind.DEVICE_UNAVAILABLE


class StreamHandle(Protocol):
    """Live frame feed owned by a single camera adapter."""

    def read_frame(self) -> Image.Image | None:
        """Return the current frame, or None if nothing is renderable."""


class MediaDevice(Protocol):
    """Interface for acquiring and releasing camera streams."""

    async def request_permission(self) -> bool:
        """Ask the platform for camera access."""

    async def acquire_stream(self, constraints: CameraConstraints) -> StreamHandle:
        """Open a stream matching the constraints."""

    async def release_stream(self, handle: StreamHandle) -> None:
        """Release a previously acquired stream."""


@dataclass
class OpenCVStream(StreamHandle):
    """Stream handle wrapping a ``cv2.VideoCapture``."""

    capture: Any
    _last_frame: Image.Image | None = field(default=None, repr=False)

    def read_frame(self) -> Image.Image | None:
        """Grab the newest frame and convert BGR to an RGB Pillow image."""
        ok, frame = self.capture.read()
        if not ok or frame is None:
            return self._last_frame
        self._last_frame = Image.fromarray(frame[:, :, ::-1])
        return self._last_frame


@dataclass
class OpenCVMediaDevice(MediaDevice):
    """Media device backed by OpenCV.

    Desktop webcams do not report a facing direction, so each facing mode is
    mapped to a device index. When only one index is configured both modes
    share it.
    """

    front_index: int = 0
    rear_index: int = 0

    async def request_permission(self) -> bool:
        """OpenCV has no permission prompt; access is checked on open."""
        return True

    async def acquire_stream(self, constraints: CameraConstraints) -> StreamHandle:
        """Open the device for the requested facing mode."""
        import cv2

        index = (
            self.front_index
            if constraints.facing_mode is FacingMode.FRONT
            else self.rear_index
        )
        capture = await asyncio.to_thread(cv2.VideoCapture, index)
        if not capture.isOpened():
            capture.release()
            raise DeviceUnavailableError(f"Camera {index} is not available")
        capture.set(cv2.CAP_PROP_FRAME_WIDTH, constraints.ideal_width)
        capture.set(cv2.CAP_PROP_FRAME_HEIGHT, constraints.ideal_height)
        stream = OpenCVStream(capture=capture)
        frame = await asyncio.to_thread(stream.read_frame)
        if frame is None:
            capture.release()
            raise DeviceUnavailableError(f"Camera {index} returned no frame")
        _logger.info(
            "Opened camera %s at %sx%s", index, frame.width, frame.height
        )
        return stream

    async def release_stream(self, handle: StreamHandle) -> None:
        """Release the underlying capture device."""
        if isinstance(handle, OpenCVStream):
            await asyncio.to_thread(handle.capture.release)
