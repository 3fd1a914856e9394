"""Settings for the Redis broadcast adapter."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

__all__ = ["RedisAdapterOptions", "default_options", "get_options"]


@dataclass
class RedisAdapterOptions:
    """Connection settings for the Redis adapter.

    ``host`` and ``port`` are kept for older configurations; ``addr`` is
    preferred.
    """

    host: str = ""
    port: str = ""
    addr: str = ""
    prefix: str = ""
    network: str = ""
    password: str = ""
    db: int = 0

    def address(self) -> str:
        """Return ``addr``, filling it from host and port when it is empty."""
        if not self.addr:
            self.addr = f"{self.host}:{self.port}"
        return self.addr


def default_options() -> RedisAdapterOptions:
    """Return the default adapter settings."""
    return RedisAdapterOptions(addr="127.0.0.1:6379", prefix="socket.io", network="tcp")


def get_options(opts: Optional[RedisAdapterOptions]) -> RedisAdapterOptions:
    """Return the defaults overridden by every non-empty field of ``opts``."""
    options = default_options()
    if opts is None:
        return options
    for name in ("host", "port", "addr", "prefix", "network", "password"):
        value = getattr(opts, name)
        if value:
            setattr(options, name, value)
    return options