"""Packet types and the per-frame packet encoder and decoder."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any, BinaryIO, Tuple

from .frame import FrameType

__all__ = [
    "PacketType",
    "Frame",
    "Packet",
    "PacketDecoder",
    "PacketEncoder",
    "byte_to_packet_type",
]

_log = logging.getLogger(__name__)

_ZERO = ord("0")


class PacketType(enum.IntEnum):
    """Kind of an engine packet."""

    OPEN = 0
    CLOSE = 1
    PING = 2
    PONG = 3
    MESSAGE = 4
    UPGRADE = 5
    NOOP = 6

    def string_byte(self) -> int:
        """Return the packet type as it is written in a text frame."""
        return int(self) + _ZERO

    def binary_byte(self) -> int:
        """Return the packet type as it is written in a binary frame."""
        return int(self)

    def __str__(self) -> str:
        return self.name.lower()


def byte_to_packet_type(b: int, frame_type: FrameType) -> PacketType:
    """Convert the leading byte of a frame to a :class:`PacketType`.

    Raises ``ValueError`` when the byte names no packet type.
    """
    if frame_type == FrameType.STRING:
        b -= _ZERO
    return PacketType(b)


@dataclass(frozen=True)
class Frame:
    """A raw transport frame."""

    frame_type: FrameType
    data: bytes


@dataclass(frozen=True)
class Packet:
    """A decoded packet: frame type, packet type and body."""

    frame_type: FrameType
    packet_type: PacketType
    data: bytes


class PacketDecoder:
    """Reads packets from a source of frames.

    ``reader`` must provide ``next_reader()`` returning ``(FrameType, stream)``
    and raising ``EOFError`` when no frames are left.
    """

    def __init__(self, reader: Any) -> None:
        self._reader = reader

    def next_reader(self) -> Tuple[FrameType, PacketType, BinaryIO]:
        """Return the next frame's type, packet type and body stream."""
        frame_type, stream = self._reader.next_reader()
        head = stream.read(1)
        if not head:
            stream.close()
            raise EOFError("frame has no packet type")
        return frame_type, byte_to_packet_type(head[0], frame_type), stream


class PacketEncoder:
    """Writes packets into a sink of frames.

    ``writer`` must provide ``next_writer(frame_type)`` returning a stream
    with ``write`` and ``close``.
    """

    def __init__(self, writer: Any) -> None:
        self._writer = writer

    def next_writer(self, frame_type: FrameType, packet_type: PacketType) -> Any:
        """Open a frame, write the packet type and return the frame stream."""
        stream = self._writer.next_writer(frame_type)
        if frame_type == FrameType.STRING:
            head = packet_type.string_byte()
        else:
            head = packet_type.binary_byte()
        try:
            stream.write(bytes([head]))
        except Exception:
            try:
                stream.close()
            except Exception as close_err:  # the write error is the one reported
                _log.error("close writer after write: %s", close_err)
            raise
        return stream