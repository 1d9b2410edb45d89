"""Room membership and broadcasting to the connections in rooms."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any, Protocol


class Connection(Protocol):
    """What a broadcast needs from a connection."""

    @property
    def id(self) -> str: ...

    def emit(self, event: str, *args: Any) -> None: ...


class Broadcast:
    """Keeps rooms of connections and sends events to them.

    Each room maps connection ids to connections; a room disappears once
    its last connection leaves.
    """

    def __init__(self) -> None:
        self._rooms: dict[str, dict[str, Connection]] = {}
        self._lock = threading.RLock()

    def join(self, room: str, connection: Connection) -> None:
        """Add the connection to the room, creating the room if needed."""
        with self._lock:
            self._rooms.setdefault(room, {})[connection.id] = connection

    def leave(self, room: str, connection: Connection) -> None:
        """Remove the connection from the room, if the room exists."""
        with self._lock:
            members = self._rooms.get(room)
            if members is None:
                return
            members.pop(connection.id, None)
            if not members:
                del self._rooms[room]

    def leave_all(self, connection: Connection) -> None:
        """Remove the connection from every room."""
        with self._lock:
            for room in list(self._rooms):
                members = self._rooms[room]
                members.pop(connection.id, None)
                if not members:
                    del self._rooms[room]

    def clear(self, room: str) -> None:
        """Remove the room and all its connections."""
        with self._lock:
            self._rooms.pop(room, None)

    def send(self, room: str, event: str, *args: Any) -> None:
        """Emit the event with args to every connection in the room."""
        with self._lock:
            for connection in list(self._rooms.get(room, {}).values()):
                connection.emit(event, *args)

    def send_all(self, event: str, *args: Any) -> None:
        """Emit the event with args to every connection in every room."""
        with self._lock:
            for members in list(self._rooms.values()):
                for connection in list(members.values()):
                    connection.emit(event, *args)

    def for_each(self, room: str, func: Callable[[Connection], None]) -> None:
        """Call func for each connection in the room; nothing if it does not exist."""
        with self._lock:
            members = self._rooms.get(room)
            if members is None:
                return
            for connection in list(members.values()):
                func(connection)

    def count(self, room: str) -> int:
        """Number of connections in the room."""
        with self._lock:
            return len(self._rooms.get(room, {}))

    def rooms(self, connection: Connection | None = None) -> list[str]:
        """All rooms, or only the rooms the given connection has joined."""
        with self._lock:
            if connection is None:
                return self.all_rooms()
            return [room for room, members in self._rooms.items() if connection.id in members]

    def all_rooms(self) -> list[str]:
        """Every room that currently has connections."""
        with self._lock:
            return list(self._rooms)