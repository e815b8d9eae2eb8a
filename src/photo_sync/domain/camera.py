"""Domain models for the camera lifecycle."""

from dataclasses import dataclass
from enum import Enum, StrEnum


class FacingMode(StrEnum):
    """Which physical camera is active."""

    FRONT = "front"
    REAR = "rear"

    @property
    def opposite(self) -> "FacingMode":
        return FacingMode.REAR if self is FacingMode.FRONT else FacingMode.FRONT


class CameraState(Enum):
    """States of the capture device lifecycle."""

    IDLE = "idle"
    STARTING = "starting"
    STREAMING = "streaming"
    ERROR = "error"


class CameraErrorKind(Enum):
    """Failure kinds reported by a media device."""

    PERMISSION_DENIED = "permission_denied"
    DEVICE_UNAVAILABLE = "device_unavailable"


@dataclass(frozen=True)
class CameraConstraints:
    """Requested stream constraints; resolution values are hints."""

    facing_mode: FacingMode = FacingMode.REAR
    ideal_width: int = 1280
    ideal_height: int = 720

    def with_facing(self, facing_mode: FacingMode) -> "CameraConstraints":
        return CameraConstraints(
            facing_mode=facing_mode,
            ideal_width=self.ideal_width,
            ideal_height=self.ideal_height,
        )


@dataclass(frozen=True)
class CameraSession:
    """Snapshot of the current camera session."""

    state: CameraState
    facing_mode: FacingMode
    is_streaming: bool
    last_error: str | None
    last_error_kind: CameraErrorKind | None
    constraints: CameraConstraints | None
    stream_handle: object | None = None
