"""Eviction of idle rooms."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, List, Optional

from .errors import RoomNotFound
from .store import RoomStore

logger = logging.getLogger(__name__)


class RoomReaper:
    """Remove rooms whose last activity is older than ``timeout`` seconds.

    Reaping is a hard stop: the room is dropped from the store with no scoring
    and no notice to its players.
    """

    def __init__(
        self,
        store: RoomStore,
        *,
        timeout: float,
        interval: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.store = store
        self.timeout = timeout
        self.interval = interval
        self.clock = clock

    def sweep(self, now: Optional[float] = None) -> List[str]:
        now = self.clock() if now is None else now
        reaped: List[str] = []
        for room_id in self.store.ids():
            try:
                with self.store.locked(room_id) as room:
                    if now - room.last_activity > self.timeout:
                        self.store.delete(room_id)
                        reaped.append(room_id)
            except RoomNotFound:
                continue
        if reaped:
            logger.info("Reaped %d idle room(s): %s", len(reaped), ", ".join(reaped))
        return reaped

    async def run(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            try:
                await asyncio.to_thread(self.sweep)
            except Exception:
                logger.exception("Room sweep failed")
