"""Player-specific snapshots of a room.

``project_room`` is the only way room state leaves the engine. Opponent hands
are reduced to card ids, so it is also the one place that decides what each
player is allowed to see.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .cards import Card, hidden_card, serialize_card
from .player import Player
from .room import PendingEffect, Room, RoomPhase


@dataclass
class PlayerView:
    index: int
    hand_size: int
    initial_selection_complete: bool
    hand: list[dict]
    score: Optional[int]


@dataclass
class RoomView:
    room_id: str
    phase: str
    player_id: Optional[str]
    player_index: Optional[int]
    players: list[PlayerView]
    center_card: Optional[dict]
    current_turn_index: int
    deck_count: int
    discard_count: int
    total_players: int
    room_full: bool
    initial_selection_mode: bool
    reaction_mode: bool
    reaction_value: Optional[int]
    king_reveal_mode: bool
    jack_swap_mode: bool
    pending_player_index: Optional[int]
    queens_triggered: bool
    queens_caller_index: Optional[int]
    final_round_active: bool
    final_turn_count: int
    game_over: bool
    final_score: Optional[dict]
    history: list[dict]


def _own_card(card: Card, player: Player) -> dict:
    payload = serialize_card(card, face_up=card.permanent_face_up)
    payload["selected"] = card.card_id in player.selected_card_ids
    return payload


def _player_view(player: Player, viewer: Optional[Player]) -> PlayerView:
    if viewer is not None and viewer.id == player.id:
        hand = [_own_card(card, player) for card in player.hand]
    else:
        hand = [hidden_card(card) for card in player.hand]
    return PlayerView(
        index=player.index,
        hand_size=len(player.hand),
        initial_selection_complete=player.initial_selection_complete,
        hand=hand,
        score=player.score,
    )


def _final_score(room: Room) -> Optional[dict]:
    result = room.final_score
    if result is None:
        return None
    return {
        "totals": list(result.totals),
        "scores": list(result.scores),
        "caller_index": result.caller_index,
        "caller_won": result.caller_won,
        "winner_index": result.winner_index,
    }


def project_room(room: Room, player_id: Optional[str] = None) -> RoomView:
    """Snapshot ``room`` as seen by ``player_id``; an unknown or absent id sees no hands."""
    viewer = room.find_player(player_id) if player_id is not None else None
    center = serialize_card(room.center_card, face_up=True) if room.center_card is not None else None

    return RoomView(
        room_id=room.room_id,
        phase=room.phase.name.lower(),
        player_id=viewer.id if viewer else None,
        player_index=viewer.index if viewer else None,
        players=[_player_view(player, viewer) for player in room.players],
        center_card=center,
        current_turn_index=room.current_turn_index,
        deck_count=len(room.deck),
        discard_count=len(room.discard),
        total_players=room.player_count,
        room_full=room.is_full,
        initial_selection_mode=room.phase is RoomPhase.INITIAL_SELECTION,
        reaction_mode=room.reaction_mode,
        reaction_value=room.reaction_value,
        king_reveal_mode=room.pending is PendingEffect.KING_REVEAL,
        jack_swap_mode=room.pending is PendingEffect.JACK_SWAP,
        pending_player_index=room.pending_actor,
        queens_triggered=room.queens_caller_index is not None,
        queens_caller_index=room.queens_caller_index,
        final_round_active=room.phase is RoomPhase.FINAL_ROUND,
        final_turn_count=room.final_turn_count,
        game_over=room.phase is RoomPhase.ENDED,
        final_score=_final_score(room),
        history=[{"player": seat, "action": action, "detail": detail} for seat, action, detail in room.history],
    )
