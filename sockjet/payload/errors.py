"""Errors raised by the payload layer."""

from __future__ import annotations

__all__ = [
    "PayloadError",
    "OpError",
    "RetryError",
    "ERR_PAUSED",
    "ERR_TIMEOUT",
    "ERR_INVALID_PAYLOAD",
    "ERR_OVERLAP",
]


class PayloadError(Exception):
    """Base payload error."""

    def temporary(self) -> bool:
        """Return True if the operation may be retried."""
        return False


class OpError(PayloadError):
    """An error that happened during a named operation."""

    def __init__(self, op: str, err: BaseException) -> None:
        super().__init__(f"{op}: {err}")
        self.op = op
        self.err = err

    def temporary(self) -> bool:
        if isinstance(self.err, PayloadError):
            return self.err.temporary()
        return False


class RetryError(PayloadError):
    """An error after which the operation may be retried."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def temporary(self) -> bool:
        return True


ERR_PAUSED = RetryError("paused")
ERR_TIMEOUT = PayloadError("timeout")
ERR_INVALID_PAYLOAD = PayloadError("invalid payload")
ERR_OVERLAP = PayloadError("overlap")