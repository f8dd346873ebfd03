"""In-memory room table with an explicit lifecycle."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List

from .errors import RoomExists, RoomNotFound
from .room import Room

logger = logging.getLogger(__name__)


class RoomStore:
    """Rooms keyed by id, each guarded by its own re-entrant lock.

    Holding a room's lock is what serializes actions on that room; the reaper
    takes the same lock before removing it.
    """

    def __init__(self) -> None:
        self._rooms: Dict[str, Room] = {}
        self._locks: Dict[str, threading.RLock] = {}
        self._table_lock = threading.Lock()

    def add(self, room: Room) -> Room:
        with self._table_lock:
            if room.room_id in self._rooms:
                raise RoomExists(room.room_id)
            self._rooms[room.room_id] = room
            self._locks[room.room_id] = threading.RLock()
        logger.info("Room %s created", room.room_id)
        return room

    def get(self, room_id: str) -> Room:
        room = self._rooms.get(room_id)
        if room is None:
            raise RoomNotFound(room_id)
        return room

    def delete(self, room_id: str) -> bool:
        with self._table_lock:
            removed = self._rooms.pop(room_id, None)
            self._locks.pop(room_id, None)
        return removed is not None

    @contextmanager
    def locked(self, room_id: str) -> Iterator[Room]:
        lock = self._locks.get(room_id)
        if lock is None:
            raise RoomNotFound(room_id)
        with lock:
            # The room may have been removed while we waited for the lock.
            room = self._rooms.get(room_id)
            if room is None:
                raise RoomNotFound(room_id)
            yield room

    def rooms(self) -> List[Room]:
        with self._table_lock:
            return list(self._rooms.values())

    def ids(self) -> List[str]:
        with self._table_lock:
            return list(self._rooms)

    def __contains__(self, room_id: object) -> bool:
        return room_id in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)
