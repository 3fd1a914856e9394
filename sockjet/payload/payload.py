"""Payload framing with hand-over between transport and connection threads."""

from __future__ import annotations

import threading
import time
from datetime import datetime
from typing import Any, BinaryIO, Callable, Optional, Tuple, Union

from ..frame import FrameType
from ..packet import PacketType
from .decoder import PayloadDecoder
from .encoder import PayloadEncoder
from .errors import ERR_OVERLAP, ERR_PAUSED, ERR_TIMEOUT, OpError
from .pauser import Pauser

__all__ = ["Payload"]

# How often waiting threads look again at pause triggers and deadlines.
_POLL = 0.01

Deadline = Union[float, datetime, None]


class _Pausing(Exception):
    """A pause was requested while waiting to hand over a writer."""


class _Offer:
    __slots__ = ("value", "taken")

    def __init__(self, value: Any) -> None:
        self.value = value
        self.taken = False


class _Channel:
    """Unbuffered hand-over of one value between two threads.

    ``check`` is called while waiting; it returns how long to wait before
    looking again, or raises to abandon the operation.
    """

    def __init__(self, cond: threading.Condition) -> None:
        self._cond = cond
        self._offer: Optional[_Offer] = None

    def send(self, value: Any, check: Callable[[], float]) -> None:
        with self._cond:
            while self._offer is not None:
                self._cond.wait(check())
            offer = _Offer(value)
            self._offer = offer
            self._cond.notify_all()
            try:
                while not offer.taken:
                    self._cond.wait(check())
            finally:
                if not offer.taken and self._offer is offer:
                    self._offer = None

    def recv(self, check: Callable[[], float]) -> Any:
        with self._cond:
            while True:
                wait = check()
                offer = self._offer
                if offer is not None:
                    offer.taken = True
                    self._offer = None
                    self._cond.notify_all()
                    return offer.value
                self._cond.wait(wait)


def _to_timestamp(deadline: Deadline) -> Optional[float]:
    if deadline is None:
        return None
    if isinstance(deadline, datetime):
        return deadline.timestamp()
    return float(deadline)


class Payload:
    """Encodes and decodes the payload protocol between two sides.

    The transport side calls :meth:`feed_in` with request bodies and
    :meth:`flush_out` with response streams; the connection side calls
    :meth:`next_reader` and :meth:`next_writer`. Deadlines are absolute
    times, as given by :func:`time.time` or a :class:`datetime`; ``None``
    means no deadline.
    """

    def __init__(self, support_binary: bool) -> None:
        self._cond = threading.Condition()
        self._closed = threading.Event()
        self._err_lock = threading.Lock()
        self._err: Optional[BaseException] = None
        self._flag_lock = threading.Lock()
        self._feeding = False
        self._flushing = False

        self._pauser = Pauser()

        self._reader_chan = _Channel(self._cond)
        self._read_error = _Channel(self._cond)
        self._read_deadline: Optional[float] = None
        self._decoder = PayloadDecoder(self)

        self._writer_chan = _Channel(self._cond)
        self._write_error = _Channel(self._cond)
        self._write_deadline: Optional[float] = None
        self._encoder = PayloadEncoder(support_binary, self)

    # transport side

    def feed_in(self, reader: BinaryIO, support_binary: bool) -> None:
        """Hand a request body to :meth:`next_reader` and wait until it is read.

        Raises ``EOFError`` once closed, a temporary :class:`OpError` when
        paused, the timeout error past the read deadline, and the read error
        wrapped in :class:`OpError` when decoding fails.
        """
        if self._closed.is_set():
            raise self._load()
        self._claim("feeding", "read")
        try:
            if not self._pauser.working():
                raise OpError("payload", ERR_PAUSED)
            try:
                self._reader_chan.send(
                    (reader, support_binary), self._checker("read", close=True)
                )
                err = self._read_error.recv(self._checker("read"))
                result = self.store("read", err)
                if result is not None:
                    raise result
            finally:
                self._pauser.done()
        finally:
            self._feeding = False

    def flush_out(self, writer: BinaryIO) -> None:
        """Hand a response stream to :meth:`next_writer` and wait until written.

        When paused, or when a pause is requested while waiting, a NOOP
        payload is written instead.
        """
        if self._closed.is_set():
            raise self._load()
        self._claim("flushing", "write")
        try:
            if not self._pauser.working():
                writer.write(self._encoder.noop())
                return
            try:
                try:
                    self._writer_chan.send(
                        writer, self._checker("write", close=True, pausing=True)
                    )
                except _Pausing:
                    writer.write(self._encoder.noop())
                    return
                err = self._write_error.recv(self._checker("write"))
                result = self.store("write", err)
                if result is not None:
                    raise result
            finally:
                self._pauser.done()
        finally:
            self._flushing = False

    # connection side

    def next_reader(self) -> Tuple[FrameType, PacketType, PayloadDecoder]:
        """Return the next packet's frame type, packet type and body reader."""
        return self._decoder.next_reader()

    def set_read_deadline(self, deadline: Deadline) -> None:
        """Set the deadline for reading; ``None`` waits forever."""
        self._read_deadline = _to_timestamp(deadline)

    def next_writer(self, frame_type: FrameType, packet_type: PacketType) -> PayloadEncoder:
        """Start a packet and return the writer for its body."""
        return self._encoder.next_writer(frame_type, packet_type)

    def set_write_deadline(self, deadline: Deadline) -> None:
        """Set the deadline for writing; ``None`` waits forever."""
        self._write_deadline = _to_timestamp(deadline)

    # state

    def pause(self) -> None:
        """Wait for every reader and writer in progress, then pause."""
        self._pauser.pause()

    def resume(self) -> None:
        """Resume after :meth:`pause`."""
        self._pauser.resume()

    def close(self) -> None:
        """Close the payload; waiting and later calls end with ``EOFError``."""
        with self._cond:
            self._closed.set()
            self._cond.notify_all()

    def store(self, op: str, err: Optional[BaseException]) -> Optional[BaseException]:
        """Record the first real error and return the error now in effect.

        ``None`` and ``EOFError`` are returned unchanged while no error is
        recorded; any other error is recorded wrapped in :class:`OpError`.
        Once an error is recorded it is returned for every later call.
        """
        with self._err_lock:
            if self._err is None:
                if err is None or isinstance(err, EOFError):
                    return err
                self._err = OpError(op, err)
            return self._err

    # feeder interface of the decoder and encoder

    def get_reader(self) -> Tuple[BinaryIO, bool]:
        """Wait for the next body given to :meth:`feed_in`."""
        if self._closed.is_set():
            raise self._load()
        if not self._pauser.working():
            raise OpError("payload", ERR_PAUSED)
        self._pauser.done()
        return self._reader_chan.recv(self._checker("read", close=True, paused=True))

    def put_reader(self, err: Optional[BaseException]) -> None:
        """Tell the waiting :meth:`feed_in` that its body has been read."""
        if self._closed.is_set():
            raise self._load()
        self._read_error.send(err, self._checker("read", close=True))

    def get_writer(self) -> BinaryIO:
        """Wait for the next stream given to :meth:`flush_out`."""
        if self._closed.is_set():
            raise self._load()
        if not self._pauser.working():
            raise OpError("payload", ERR_PAUSED)
        self._pauser.done()
        return self._writer_chan.recv(self._checker("write", close=True, paused=True))

    def put_writer(self, err: Optional[BaseException]) -> None:
        """Tell the waiting :meth:`flush_out` that its stream has been written."""
        if self._closed.is_set():
            raise self._load()
        self._wait_time("write")
        result = self.store("write", err)
        self._write_error.send(err, self._checker("write", close=True))
        if result is not None:
            raise result

    # helpers

    def _claim(self, flag: str, op: str) -> None:
        with self._flag_lock:
            if getattr(self, "_" + flag):
                raise OpError(op, ERR_OVERLAP)
            setattr(self, "_" + flag, True)

    def _load(self) -> BaseException:
        with self._err_lock:
            if self._err is None:
                return EOFError("payload closed")
            return self._err

    def _wait_time(self, direction: str) -> float:
        deadline = self._read_deadline if direction == "read" else self._write_deadline
        if deadline is None:
            return _POLL
        remaining = deadline - time.time()
        if remaining <= 0:
            err = self.store(direction, ERR_TIMEOUT)
            assert err is not None
            raise err
        return min(remaining, _POLL)

    def _checker(
        self,
        direction: str,
        *,
        close: bool = False,
        paused: bool = False,
        pausing: bool = False,
    ) -> Callable[[], float]:
        def check() -> float:
            wait = self._wait_time(direction)
            if close and self._closed.is_set():
                raise self._load()
            if paused and self._pauser.paused_trigger().is_set():
                raise OpError("payload", ERR_PAUSED)
            if pausing and self._pauser.pausing_trigger().is_set():
                raise _Pausing()
            return wait

        return check