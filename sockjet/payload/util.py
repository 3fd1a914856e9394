"""Length prefixes of the payload framing."""

from __future__ import annotations

from typing import BinaryIO

from .errors import PayloadError

__all__ = ["write_binary_len", "write_text_len", "read_binary_len", "read_text_len"]

_BINARY_END = 0xFF
_TEXT_END = ord(":")


def write_binary_len(length: int, buf: BinaryIO) -> None:
    """Write ``length`` as one byte per decimal digit, ended by 0xff."""
    if length <= 0:
        buf.write(bytes([0x00, _BINARY_END]))
        return
    buf.write(bytes(int(d) for d in str(length)) + bytes([_BINARY_END]))


def write_text_len(length: int, buf: BinaryIO) -> None:
    """Write ``length`` as ASCII decimal digits, ended by ':'."""
    if length <= 0:
        buf.write(b"0:")
        return
    buf.write(str(length).encode("ascii") + b":")


def _next_byte(reader: BinaryIO) -> int:
    b = reader.read(1)
    if not b:
        raise EOFError("unexpected end of length")
    return b[0]


def read_binary_len(reader: BinaryIO) -> int:
    """Read a length written by :func:`write_binary_len`."""
    result = 0
    while (b := _next_byte(reader)) != _BINARY_END:
        if b > 9:
            raise PayloadError("invalid payload")
        result = result * 10 + b
    return result


def read_text_len(reader: BinaryIO) -> int:
    """Read a length written by :func:`write_text_len`."""
    result = 0
    while (b := _next_byte(reader)) != _TEXT_END:
        if not ord("0") <= b <= ord("9"):
            raise PayloadError("invalid payload")
        result = result * 10 + (b - ord("0"))
    return result