"""Room membership and broadcasting for connections in one process."""

from __future__ import annotations

import threading
from typing import Any, Callable, Dict, List, Optional

__all__ = ["Broadcast"]


class Broadcast:
    """Tracks which connections are in which rooms and sends to them.

    A connection needs an ``id`` attribute and an ``emit(event, *args)``
    method. Rooms that become empty are removed.
    """

    def __init__(self) -> None:
        self._rooms: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.RLock()

    def name(self) -> str:
        """Name of this adapter."""
        return "local"

    def join(self, room: str, connection: Any) -> None:
        """Add the connection to the room."""
        with self._lock:
            self._rooms.setdefault(room, {})[connection.id] = connection

    def leave(self, room: str, connection: Any) -> None:
        """Remove the connection from the room, if it is there."""
        with self._lock:
            members = self._rooms.get(room)
            if members is None:
                return
            members.pop(connection.id, None)
            if not members:
                del self._rooms[room]

    def leave_all(self, connection: Any) -> None:
        """Remove the connection from every room."""
        with self._lock:
            for room, members in list(self._rooms.items()):
                members.pop(connection.id, None)
                if not members:
                    del self._rooms[room]

    def clear(self, room: str) -> None:
        """Remove the room and all its connections."""
        with self._lock:
            self._rooms.pop(room, None)

    def send(self, room: str, event: str, *args: Any) -> None:
        """Emit the event to every connection in the room."""
        for connection in self._members(room):
            connection.emit(event, *args)

    def send_all(self, event: str, *args: Any) -> None:
        """Emit the event to every connection in every room."""
        with self._lock:
            targets = [c for members in self._rooms.values() for c in members.values()]
        for connection in targets:
            connection.emit(event, *args)

    def for_each(self, room: str, func: Callable[[Any], None]) -> None:
        """Call ``func`` with each connection in the room; nothing if it is absent."""
        for connection in self._members(room):
            func(connection)

    def count(self, room: str) -> int:
        """Number of connections in the room."""
        with self._lock:
            return len(self._rooms.get(room, ()))

    def rooms(self, connection: Optional[Any] = None) -> List[str]:
        """Rooms the connection is in, or every room when no connection is given."""
        if connection is None:
            return self.all_rooms()
        with self._lock:
            return [room for room, members in self._rooms.items() if connection.id in members]

    def all_rooms(self) -> List[str]:
        """Every room that has at least one connection."""
        with self._lock:
            return list(self._rooms)

    def _members(self, room: str) -> List[Any]:
        with self._lock:
            return list(self._rooms.get(room, {}).values())