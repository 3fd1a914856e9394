"""Writes packets into a payload stream."""

from __future__ import annotations

import base64
import io
from typing import BinaryIO, Optional, Protocol

from ..frame import FrameType
from ..packet import PacketType
from .util import write_binary_len, write_text_len

__all__ = ["PayloadEncoder", "WriterFeeder"]


class WriterFeeder(Protocol):
    """Sink of payload streams for a :class:`PayloadEncoder`."""

    def get_writer(self) -> BinaryIO:
        """Return the stream the next packet is written to."""

    def put_writer(self, err: Optional[BaseException]) -> None:
        """Report that a packet was written, with the error writing it raised."""


class PayloadEncoder:
    """Frames packets into payload form.

    The encoder is itself the writer of the current packet: after
    :meth:`next_writer`, write the body with :meth:`write` and send it with
    :meth:`close`.
    """

    def __init__(self, support_binary: bool, feeder: Optional[WriterFeeder] = None) -> None:
        self.support_binary = support_binary
        self._feeder = feeder
        self._frame_type = FrameType.STRING
        self._packet_type = PacketType.OPEN
        self._cache = bytearray()
        self._raw: Optional[BinaryIO] = None

    def noop(self) -> bytes:
        """Return a complete payload holding one NOOP packet."""
        if self.support_binary:
            return bytes([0x00, 0x01, 0xFF, ord("6")])
        return b"1:6"

    def next_writer(self, frame_type: FrameType, packet_type: PacketType) -> "PayloadEncoder":
        """Start a packet and return the writer for its body."""
        if self._feeder is None:
            raise RuntimeError("encoder has no writer feeder")
        self._raw = self._feeder.get_writer()
        self._frame_type = frame_type
        self._packet_type = packet_type
        self._cache = bytearray()
        return self

    def write(self, data: bytes) -> int:
        """Append to the body of the current packet."""
        self._cache.extend(data)
        return len(data)

    def close(self) -> None:
        """Write the current packet, header first, to the feeder's stream."""
        body = bytes(self._cache)
        if self.support_binary:
            header = self._binary_header(len(body))
        elif self._frame_type == FrameType.BINARY:
            body = base64.b64encode(body)
            header = self._b64_header(len(body))
        else:
            header = self._text_header(len(body))

        err: Optional[BaseException] = None
        try:
            self._raw.write(header)
            self._raw.write(body)
        except Exception as exc:
            err = exc
        self._feeder.put_writer(err)
        if err is not None:
            raise err

    def _text_header(self, body_len: int) -> bytes:
        buf = io.BytesIO()
        write_text_len(body_len + 1, buf)
        buf.write(bytes([self._packet_type.string_byte()]))
        return buf.getvalue()

    def _b64_header(self, body_len: int) -> bytes:
        buf = io.BytesIO()
        write_text_len(body_len + 2, buf)
        buf.write(b"b")
        buf.write(bytes([self._packet_type.string_byte()]))
        return buf.getvalue()

    def _binary_header(self, body_len: int) -> bytes:
        if self._frame_type == FrameType.BINARY:
            type_byte = self._packet_type.binary_byte()
        else:
            type_byte = self._packet_type.string_byte()
        buf = io.BytesIO()
        buf.write(bytes([self._frame_type.to_byte()]))
        write_binary_len(body_len + 1, buf)
        buf.write(bytes([type_byte]))
        return buf.getvalue()