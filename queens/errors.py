"""Errors raised by the Queens engine.

Every user-input mistake surfaces as a ``GameError`` subclass carrying a stable
``kind`` so the router can report it without inspecting messages. Actions
validate before they mutate, so a raised ``GameError`` leaves the room as it was.
"""

from __future__ import annotations


class GameError(RuntimeError):
    """Base class for rejected actions."""

    kind = "GAME_ERROR"

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class RoomNotFound(GameError):
    kind = "ROOM_NOT_FOUND"

    def __init__(self, room_id: str) -> None:
        self.room_id = room_id
        super().__init__(f"Room {room_id} not found.")


class PlayerNotFound(GameError):
    kind = "PLAYER_NOT_FOUND"

    def __init__(self, player_id: object) -> None:
        self.player_id = player_id
        super().__init__(f"Player {player_id} not found.")


class RoomExists(GameError):
    kind = "ROOM_EXISTS"

    def __init__(self, room_id: str) -> None:
        self.room_id = room_id
        super().__init__(f"Room {room_id} already exists.")


class RoomFull(GameError):
    kind = "ROOM_FULL"


class WrongPhase(GameError):
    kind = "WRONG_PHASE"


class NotYourTurn(GameError):
    kind = "NOT_YOUR_TURN"


class CardNotInHand(GameError):
    kind = "CARD_NOT_IN_HAND"

    def __init__(self, card_id: str) -> None:
        self.card_id = card_id
        super().__init__(f"Card {card_id} not in hand.")


class InvalidSelectionCount(GameError):
    kind = "INVALID_SELECTION_COUNT"


class InvalidCardSelection(GameError):
    kind = "INVALID_CARD_SELECTION"


class DeckExhausted(GameError):
    kind = "DECK_EXHAUSTED"

    def __init__(self, message: str = "No cards left in deck.") -> None:
        super().__init__(message)


class IntegrityError(RuntimeError):
    """Raised when an internal invariant is broken; never caused by user input."""
