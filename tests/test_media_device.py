"""Tests for the OpenCV media device."""

import asyncio
import sys
import types

import numpy as np
import pytest

from photo_sync.adapters.media_device import DeviceUnavailableError, OpenCVMediaDevice
from photo_sync.domain.camera import CameraConstraints, FacingMode


class _FakeCapture:
    def __init__(self, index: int, opened: bool = True) -> None:
        self.index = index
        self.opened = opened
        self.released = False
        self.props: dict[int, float] = {}

    def isOpened(self) -> bool:  # noqa: N802
        return self.opened

    def set(self, prop: int, value: float) -> None:
        self.props[prop] = value

    def read(self):  # type: ignore[no-untyped-def]
        frame = np.zeros((48, 64, 3), dtype=np.uint8)
        frame[:, :, 0] = 255
        return True, frame

    def release(self) -> None:
        self.released = True


@pytest.fixture
def fake_cv2(monkeypatch):  # type: ignore[no-untyped-def]
    captures: list[_FakeCapture] = []
    module = types.ModuleType("cv2")
    module.CAP_PROP_FRAME_WIDTH = 3
    module.CAP_PROP_FRAME_HEIGHT = 4
    module.unavailable = set()

    def video_capture(index: int) -> _FakeCapture:
        capture = _FakeCapture(index, opened=index not in module.unavailable)
        captures.append(capture)
        return capture

    module.VideoCapture = video_capture
    module.captures = captures
    monkeypatch.setitem(sys.modules, "cv2", module)
    return module


def test_acquire_stream_uses_facing_index_and_converts_frames(fake_cv2) -> None:
    device = OpenCVMediaDevice(front_index=1, rear_index=0)

    handle = asyncio.run(
        device.acquire_stream(CameraConstraints(FacingMode.FRONT, 640, 480))
    )
    frame = handle.read_frame()

    capture = fake_cv2.captures[0]
    assert capture.index == 1
    assert capture.props == {3: 640, 4: 480}
    assert frame is not None
    assert frame.size == (64, 48)
    assert frame.getpixel((0, 0)) == (0, 0, 255)

    asyncio.run(device.release_stream(handle))

    assert capture.released


def test_acquire_stream_raises_when_device_missing(fake_cv2) -> None:
    fake_cv2.unavailable.add(0)
    device = OpenCVMediaDevice()

    with pytest.raises(DeviceUnavailableError, match="Camera 0"):
        asyncio.run(device.acquire_stream(CameraConstraints()))

    assert fake_cv2.captures[0].released


def test_request_permission_is_granted() -> None:
    assert asyncio.run(OpenCVMediaDevice().request_permission()) is True
