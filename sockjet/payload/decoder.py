"""Reads packets out of a payload stream."""

from __future__ import annotations

import base64
import io
from typing import BinaryIO, Optional, Protocol, Tuple

from ..frame import FrameType, byte_to_frame_type
from ..packet import PacketType, byte_to_packet_type
from .errors import PayloadError
from .util import read_binary_len, read_text_len

__all__ = ["PayloadDecoder", "ReaderFeeder"]

_CHUNK = 4096


class ReaderFeeder(Protocol):
    """Source of payload streams for a :class:`PayloadDecoder`."""

    def get_reader(self) -> Tuple[BinaryIO, bool]:
        """Return the next payload stream and whether it is in binary form."""

    def put_reader(self, err: Optional[BaseException]) -> None:
        """Report the end of a payload stream, with the error that ended it."""


def _read_byte(reader: BinaryIO) -> int:
    b = reader.read(1)
    if not b:
        raise EOFError("unexpected end of payload")
    return b[0]


def _read_up_to(reader: BinaryIO, length: int) -> bytes:
    parts = []
    while length > 0:
        chunk = reader.read(length)
        if not chunk:
            break
        parts.append(chunk)
        length -= len(chunk)
    return b"".join(parts)


class PayloadDecoder:
    """Splits payload streams from a feeder into packets.

    The decoder is itself the reader of the current packet body: after
    :meth:`next_reader`, read the body with :meth:`read` and end it with
    :meth:`close`. When a stream is exhausted it is handed back to the feeder.
    """

    def __init__(self, feeder: ReaderFeeder) -> None:
        self._feeder = feeder
        self._raw: Optional[BinaryIO] = None
        self._body: Optional[io.BytesIO] = None
        self._remaining = 0
        self._frame_type = FrameType.STRING
        self._packet_type = PacketType.OPEN
        self._support_binary = False

    def next_reader(self) -> Tuple[FrameType, PacketType, "PayloadDecoder"]:
        """Return the next packet's frame type, packet type and body reader."""
        if self._raw is None:
            reader, support_binary = self._feeder.get_reader()
            try:
                self._set_next_reader(reader, support_binary)
            except Exception as err:
                self._send_error(err)
        return self._frame_type, self._packet_type, self

    def read(self, size: int = -1) -> bytes:
        """Read from the body of the current packet."""
        if self._body is not None:
            return self._body.read(size)
        if self._raw is None:
            return b""
        if size is None or size < 0 or size > self._remaining:
            size = self._remaining
        if size == 0:
            return b""
        chunk = self._raw.read(size)
        if not chunk:
            self._remaining = 0
            return b""
        self._remaining -= len(chunk)
        return chunk

    def close(self) -> None:
        """Skip the rest of the current packet and move to the next one."""
        if self._raw is None:
            return
        try:
            while self.read(_CHUNK):
                pass
        except Exception as err:
            self._send_error(err)
        try:
            self._set_next_reader(self._raw, self._support_binary)
        except EOFError:
            self._raw = None
            self._body = None
            self._remaining = 0
            self._send_error(None)
        except Exception as err:
            self._send_error(err)

    def _set_next_reader(self, reader: BinaryIO, support_binary: bool) -> None:
        if support_binary:
            frame_type, packet_type, length = self._binary_read(reader)
        else:
            frame_type, packet_type, length = self._text_read(reader)

        body: Optional[io.BytesIO] = None
        if not support_binary and frame_type == FrameType.BINARY:
            encoded = _read_up_to(reader, length)
            body = io.BytesIO(base64.b64decode(encoded))
            length = 0

        self._frame_type = frame_type
        self._packet_type = packet_type
        self._raw = reader
        self._remaining = length
        self._body = body
        self._support_binary = support_binary

    def _send_error(self, err: Optional[BaseException]) -> None:
        self._feeder.put_reader(err)
        if err is not None:
            raise err

    @staticmethod
    def _text_read(reader: BinaryIO) -> Tuple[FrameType, PacketType, int]:
        length = read_text_len(reader)
        frame_type = FrameType.STRING
        b = _read_byte(reader)
        length -= 1
        if b == ord("b"):
            frame_type = FrameType.BINARY
            b = _read_byte(reader)
            length -= 1
        return frame_type, byte_to_packet_type(b, FrameType.STRING), length

    @staticmethod
    def _binary_read(reader: BinaryIO) -> Tuple[FrameType, PacketType, int]:
        b = _read_byte(reader)
        if b > 1:
            raise PayloadError("invalid payload")
        frame_type = byte_to_frame_type(b)
        length = read_binary_len(reader)
        b = _read_byte(reader)
        return frame_type, byte_to_packet_type(b, frame_type), length - 1