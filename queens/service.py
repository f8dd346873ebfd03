"""Convenience service layer for the HTTP router."""

from __future__ import annotations

import logging
import time
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from random import Random
from typing import Callable, Iterator, List, Optional, Sequence

from .config import GameConfig
from .errors import IntegrityError
from .reaper import RoomReaper
from .room import Room, RoomPhase
from .store import RoomStore
from .view import RoomView, project_room

logger = logging.getLogger(__name__)


@dataclass
class RoomSummary:
    id: str
    players: int
    max_players: int
    is_full: bool
    phase: str


def _new_id() -> str:
    return uuid.uuid4().hex


class GameService:
    """The operations a router may call, one per inbound action.

    Each mutating call runs under the room's lock, stamps ``last_activity`` with
    the injected clock and returns the caller's view of the room.
    """

    def __init__(
        self,
        store: Optional[RoomStore] = None,
        *,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
        id_factory: Callable[[], str] = _new_id,
    ) -> None:
        self.store = store or RoomStore()
        self.config = config or GameConfig()
        self.rng = Random(seed)
        self.clock = clock
        self.id_factory = id_factory

    # Room lifecycle ----------------------------------------------------

    def create_room(self, room_id: Optional[str] = None) -> RoomView:
        room = Room(
            room_id=room_id or self.id_factory(),
            config=self.config,
            rng=Random(self.rng.getrandbits(64)),
            last_activity=self.clock(),
        )
        self.store.add(room)
        return project_room(room)

    def join(self, room_id: str, player_id: Optional[str] = None) -> RoomView:
        with self._mutating(room_id) as room:
            player, rejoined = room.join(player_id or self.id_factory())
            logger.debug("Room %s: %s seat %d (%s)", room_id, "rejoin" if rejoined else "join", player.index, player.id)
            return project_room(room, player.id)

    def reset(self, room_id: str) -> RoomView:
        with self._mutating(room_id) as room:
            room.reset()
            logger.info("Room %s reset", room_id)
            return project_room(room)

    def make_reaper(self) -> RoomReaper:
        return RoomReaper(
            self.store,
            timeout=self.config.inactivity_timeout,
            interval=self.config.sweep_interval,
            clock=self.clock,
        )

    # Actions -----------------------------------------------------------

    def select_initial_cards(self, room_id: str, player_id: str, card_ids: Sequence[str]) -> RoomView:
        with self._seated(room_id, player_id) as (room, seat):
            room.select_initial_cards(seat, card_ids)
            return project_room(room, player_id)

    def play_card(self, room_id: str, player_id: str, card_id: str) -> RoomView:
        with self._seated(room_id, player_id) as (room, seat):
            room.play_card(seat, card_id)
            return project_room(room, player_id)

    def draw_card(self, room_id: str, player_id: str) -> RoomView:
        with self._seated(room_id, player_id) as (room, seat):
            room.draw_card(seat)
            return project_room(room, player_id)

    def call_queens(self, room_id: str, player_id: str) -> RoomView:
        with self._seated(room_id, player_id) as (room, seat):
            room.call_queens(seat)
            logger.info("Room %s: seat %d called queens", room_id, seat)
            return project_room(room, player_id)

    def king_reveal(self, room_id: str, player_id: str, card_id: str) -> RoomView:
        with self._seated(room_id, player_id) as (room, seat):
            room.king_reveal(seat, card_id)
            return project_room(room, player_id)

    def jack_swap(self, room_id: str, player_id: str, from_id: str, to_id: str) -> RoomView:
        with self._seated(room_id, player_id) as (room, seat):
            room.jack_swap(seat, from_id, to_id)
            return project_room(room, player_id)

    def pass_reaction(self, room_id: str, player_id: str) -> RoomView:
        with self._seated(room_id, player_id) as (room, seat):
            room.pass_reaction(seat)
            return project_room(room, player_id)

    # Views -------------------------------------------------------------

    def get_state(self, room_id: str, player_id: Optional[str] = None) -> RoomView:
        with self.store.locked(room_id) as room:
            return project_room(room, player_id)

    def list_rooms(self) -> List[RoomSummary]:
        return [
            RoomSummary(
                id=room.room_id,
                players=room.player_count,
                max_players=room.config.max_players,
                is_full=room.is_full,
                phase=room.phase.name.lower(),
            )
            for room in self.store.rooms()
        ]

    # Helpers -----------------------------------------------------------

    @contextmanager
    def _mutating(self, room_id: str) -> Iterator[Room]:
        with self.store.locked(room_id) as room:
            phase_before = room.phase
            yield room
            room.last_activity = self.clock()
            try:
                room.check_integrity()
            except IntegrityError:
                logger.exception("Room %s failed its integrity check", room_id)
                raise
            if room.phase is RoomPhase.ENDED and phase_before is not RoomPhase.ENDED:
                result = room.final_score
                logger.info("Room %s ended, scores %s", room_id, list(result.scores) if result else None)

    @contextmanager
    def _seated(self, room_id: str, player_id: str) -> Iterator[tuple[Room, int]]:
        with self._mutating(room_id) as room:
            seat = room.require_player(player_id).index
            logger.debug("Room %s: action from seat %d", room_id, seat)
            yield room, seat
