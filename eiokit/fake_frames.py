"""In-memory frame sources and sinks for exercising packet codecs."""

from __future__ import annotations

import io
from collections import deque
from collections.abc import Iterable

from eiokit.frame import FrameType
from eiokit.packet import Frame, PacketType


class _FakeFrame:
    """A frame being written; stored in its owner, if any, when closed."""

    def __init__(self, owner: FakeConnWriter | None, frame_type: FrameType) -> None:
        self._owner = owner
        self._frame_type = frame_type
        self._data = bytearray()
        self._pos = 0

    def write(self, data: bytes) -> int:
        self._data.extend(data)
        return len(data)

    def read(self, size: int = -1) -> bytes:
        end = len(self._data) if size is None or size < 0 else self._pos + size
        chunk = bytes(self._data[self._pos:end])
        self._pos += len(chunk)
        return chunk

    def close(self) -> None:
        if self._owner is not None:
            self._owner.frames.append(Frame(self._frame_type, bytes(self._data[self._pos:])))


class FakeConnWriter:
    """Collects every closed frame in ``frames``."""

    def __init__(self) -> None:
        self.frames: list[Frame] = []

    def next_writer(self, frame_type: FrameType) -> _FakeFrame:
        return _FakeFrame(self, frame_type)


class FakeDiscardWriter:
    """Accepts frames and throws them away."""

    def next_writer(self, frame_type: FrameType) -> _FakeFrame:
        return _FakeFrame(None, frame_type)


class FakeConnReader:
    """Yields the given frames in order, then raises EOFError."""

    def __init__(self, frames: Iterable[Frame]) -> None:
        self._frames = deque(frames)

    def next_reader(self) -> tuple[FrameType, io.BytesIO]:
        if not self._frames:
            raise EOFError("no more frames")
        frame = self._frames.popleft()
        return frame.frame_type, io.BytesIO(frame.data)


class _ConstStream:
    """Endless stream repeating one byte."""

    def __init__(self, value: int) -> None:
        self._chunk = bytes([value])
        self.closed = False

    def read(self, size: int = -1) -> bytes:
        return self._chunk

    def close(self) -> None:
        self.closed = True


class FakeConstReader:
    """Endless source of message frames, alternating text and binary."""

    def __init__(self) -> None:
        self._frame_type = FrameType.STRING

    def next_reader(self) -> tuple[FrameType, _ConstStream]:
        frame_type = self._frame_type
        if frame_type == FrameType.STRING:
            marker = PacketType.MESSAGE.string_byte()
            self._frame_type = FrameType.BINARY
        else:
            marker = PacketType.MESSAGE.binary_byte()
            self._frame_type = FrameType.STRING
        return frame_type, _ConstStream(marker)