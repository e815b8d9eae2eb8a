"""Camera lifecycle state machine."""

import asyncio
import io
import logging
from dataclasses import dataclass, field

from photo_sync.adapters.media_device import CameraError, MediaDevice, StreamHandle
from photo_sync.domain.camera import (
    CameraConstraints,
    CameraErrorKind,
    CameraSession,
    CameraState,
    FacingMode,
)

_logger = logging.getLogger(__name__)


@dataclass
class CameraService:
    """Owns at most one live stream and produces still captures from it.

    Failures while starting are recorded in ``state``/``last_error`` and never
    raised; a later ``start`` call is the only way out of ``ERROR``.
    """

    device: MediaDevice
    facing_mode: FacingMode = FacingMode.REAR
    ideal_width: int = 1280
    ideal_height: int = 720
    jpeg_quality: int = 80
    state: CameraState = field(default=CameraState.IDLE, init=False)
    last_error: str | None = field(default=None, init=False)
    last_error_kind: CameraErrorKind | None = field(default=None, init=False)
    _handle: StreamHandle | None = field(default=None, init=False, repr=False)
    _constraints: CameraConstraints | None = field(
        default=None, init=False, repr=False
    )
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)

    @property
    def is_streaming(self) -> bool:
        return self.state is CameraState.STREAMING

    @property
    def session(self) -> CameraSession:
        """Return a snapshot of the current session."""
        return CameraSession(
            state=self.state,
            facing_mode=self.facing_mode,
            is_streaming=self.is_streaming,
            last_error=self.last_error,
            last_error_kind=self.last_error_kind,
            constraints=self._constraints,
            stream_handle=self._handle,
        )

    def default_constraints(self) -> CameraConstraints:
        """Constraints for the remembered facing mode and configured resolution."""
        return CameraConstraints(
            facing_mode=self.facing_mode,
            ideal_width=self.ideal_width,
            ideal_height=self.ideal_height,
        )

    async def start(self, constraints: CameraConstraints | None = None) -> None:
        """Start streaming, replacing any stream with different constraints."""
        async with self._lock:
            await self._start_locked(constraints or self.default_constraints())

    async def stop(self) -> None:
        """Release the stream and return to idle."""
        async with self._lock:
            if self.state is CameraState.IDLE and self._handle is None:
                return
            await self._release()
            self.state = CameraState.IDLE
            _logger.info("Camera stopped")

    async def switch_facing(self) -> None:
        """Toggle facing mode, restarting the stream if one is live."""
        async with self._lock:
            self.facing_mode = self.facing_mode.opposite
            if not self.is_streaming:
                return
            current = self._constraints or self.default_constraints()
            await self._start_locked(current.with_facing(self.facing_mode))

    def capture_photo(self) -> bytes | None:
        """Encode the current frame as JPEG, or return None when not streaming."""
        if not self.is_streaming or self._handle is None:
            return None
        frame = self._handle.read_frame()
        if frame is None:
            return None
        buffer = io.BytesIO()
        frame.convert("RGB").save(buffer, format="JPEG", quality=self.jpeg_quality)
        return buffer.getvalue()

    async def close(self) -> None:
        """Release camera resources on teardown."""
        await self.stop()

    async def _start_locked(self, constraints: CameraConstraints) -> None:
        if self.is_streaming and constraints == self._constraints:
            return
        await self._release()
        self.facing_mode = constraints.facing_mode
        self.state = CameraState.STARTING
        self.last_error = None
        self.last_error_kind = None

        try:
            if not await self.device.request_permission():
                self._fail(
                    CameraErrorKind.PERMISSION_DENIED, "Camera permission denied"
                )
                return
            handle = await self.device.acquire_stream(constraints)
        except CameraError as exc:
            self._fail(exc.kind, str(exc) or "Failed to access camera")
            return
        except Exception as exc:
            _logger.exception("Unexpected error while opening camera")
            self._fail(
                CameraErrorKind.DEVICE_UNAVAILABLE,
                str(exc) or "Failed to access camera",
            )
            return

        self._handle = handle
        if await asyncio.to_thread(handle.read_frame) is None:
            await self._release()
            self._fail(
                CameraErrorKind.DEVICE_UNAVAILABLE,
                "Camera produced no renderable frame",
            )
            return
        self._constraints = constraints
        self.state = CameraState.STREAMING
        _logger.info("Camera streaming (facing=%s)", constraints.facing_mode)

    async def _release(self) -> None:
        handle = self._handle
        self._handle = None
        self._constraints = None
        if handle is None:
            return
        try:
            await self.device.release_stream(handle)
        except Exception as exc:
            _logger.warning("Camera release error: %s", exc)

    def _fail(self, kind: CameraErrorKind, message: str) -> None:
        self.state = CameraState.ERROR
        self.last_error = message
        self.last_error_kind = kind
        _logger.warning("Camera start failed (%s): %s", kind.value, message)
