"""Frame types used by the transport layer."""

from __future__ import annotations

import enum

__all__ = ["FrameType", "byte_to_frame_type"]


class FrameType(enum.IntEnum):
    """Kind of a transport frame: text or binary."""

    STRING = 0
    BINARY = 1

    def to_byte(self) -> int:
        """Return the frame type as a single byte value."""
        return int(self)


def byte_to_frame_type(b: int) -> FrameType:
    """Convert a byte value to a :class:`FrameType`.

    Raises ``ValueError`` for bytes that name no frame type.
    """
    return FrameType(b)