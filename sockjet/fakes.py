"""In-memory frame readers and writers for exercising the packet layer."""

from __future__ import annotations

import io
from typing import Iterable, List, Optional, Tuple

from .frame import FrameType
from .packet import Frame, PacketType

__all__ = [
    "FakeConnReader",
    "FakeConstReader",
    "FakeConnWriter",
    "FakeDiscardWriter",
    "FakeFrame",
]


class FakeFrame:
    """A frame being written; on close it is recorded in its owner."""

    def __init__(self, owner: Optional["FakeConnWriter"], frame_type: FrameType) -> None:
        self._owner = owner
        self._frame_type = frame_type
        self._data = bytearray()

    def write(self, data: bytes) -> int:
        self._data.extend(data)
        return len(data)

    def read(self, size: int = -1) -> bytes:
        if size is None or size < 0:
            size = len(self._data)
        chunk = bytes(self._data[:size])
        del self._data[:size]
        return chunk

    def close(self) -> None:
        if self._owner is None:
            return
        self._owner.frames.append(Frame(self._frame_type, bytes(self._data)))


class FakeConnWriter:
    """Collects every closed frame in :attr:`frames`."""

    def __init__(self) -> None:
        self.frames: List[Frame] = []

    def next_writer(self, frame_type: FrameType) -> FakeFrame:
        return FakeFrame(self, frame_type)


class _Discarder:
    """Accepts any bytes and keeps none of them."""

    def __init__(self) -> None:
        self.closed = False

    def write(self, data: bytes) -> int:
        return len(data)

    def close(self) -> None:
        self.closed = True


class FakeDiscardWriter:
    """Hands out frame writers that drop everything."""

    def next_writer(self, frame_type: FrameType) -> _Discarder:
        return _Discarder()


class FakeConnReader:
    """Serves a fixed list of frames, then raises ``EOFError``."""

    def __init__(self, frames: Iterable[Frame]) -> None:
        self._frames = list(frames)

    def next_reader(self) -> Tuple[FrameType, io.BytesIO]:
        if not self._frames:
            raise EOFError("no more frames")
        frame = self._frames.pop(0)
        return frame.frame_type, io.BytesIO(frame.data)


class _ConstStream:
    """Yields the same single byte on every read."""

    def __init__(self, value: int) -> None:
        self._value = value
        self.closed = False

    def read(self, size: int = -1) -> bytes:
        return bytes([self._value])

    def close(self) -> None:
        self.closed = True


class FakeConstReader:
    """Endless message frames, alternating between text and binary."""

    def __init__(self) -> None:
        self._frame_type = FrameType.STRING

    def next_reader(self) -> Tuple[FrameType, _ConstStream]:
        frame_type = self._frame_type
        if frame_type == FrameType.STRING:
            value = PacketType.MESSAGE.string_byte()
            self._frame_type = FrameType.BINARY
        else:
            value = PacketType.MESSAGE.binary_byte()
            self._frame_type = FrameType.STRING
        return frame_type, _ConstStream(value)