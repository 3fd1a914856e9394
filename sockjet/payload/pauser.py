"""Coordination between workers and a pause request."""

from __future__ import annotations

import enum
import threading

__all__ = ["Pauser"]


class _Status(enum.Enum):
    NORMAL = enum.auto()
    PAUSING = enum.auto()
    PAUSED = enum.auto()


class Pauser:
    """Lets workers register activity and a pauser wait for them to finish.

    While a pause is pending, new workers may still start; once paused, no
    new worker is accepted until :meth:`resume` is called.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._workers = 0
        self._pausing = threading.Event()
        self._paused = threading.Event()
        self._status = _Status.NORMAL

    def pause(self) -> bool:
        """Wait for all workers to finish, then pause.

        Returns True for the call that actually paused, False if the pauser
        was already paused or another call paused it first.
        """
        with self._cond:
            if self._status is _Status.PAUSED:
                return False
            if self._status is _Status.NORMAL:
                self._pausing.set()
                self._status = _Status.PAUSING

            while self._workers != 0:
                self._cond.wait()

            if self._status is _Status.PAUSED:
                return False
            self._paused.set()
            self._status = _Status.PAUSED
            self._cond.notify_all()
            return True

    def resume(self) -> None:
        """Return to the normal state with fresh triggers."""
        with self._cond:
            self._status = _Status.NORMAL
            self._paused = threading.Event()
            self._pausing = threading.Event()

    def working(self) -> bool:
        """Register a worker; returns False if the pauser is paused."""
        with self._cond:
            if self._status is _Status.PAUSED:
                return False
            self._workers += 1
            return True

    def done(self) -> None:
        """Unregister a worker registered by :meth:`working`."""
        with self._cond:
            if self._status is _Status.PAUSED or self._workers == 0:
                return
            self._workers -= 1
            self._cond.notify_all()

    def pausing_trigger(self) -> threading.Event:
        """Event set once a pause has been requested."""
        with self._cond:
            return self._pausing

    def paused_trigger(self) -> threading.Event:
        """Event set once the pause has taken effect."""
        with self._cond:
            return self._paused