"""Card-related data structures and helpers for Queens."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class Suit(Enum):
    CLUBS = auto()
    SPADES = auto()
    DIAMONDS = auto()
    HEARTS = auto()

    def __str__(self) -> str:
        return self.name.title()


ACE = 1
JACK = 11
QUEEN = 12
KING = 13

RANKS: tuple[int, ...] = tuple(range(ACE, KING + 1))

# Points a card is worth when hands are totalled at the end of the final round.
SCORE_VALUES: dict[int, int] = {rank: rank for rank in RANKS}
SCORE_VALUES.update({ACE: 1, JACK: 10, QUEEN: 0, KING: 10})

RANK_NAMES: dict[int, str] = {ACE: "Ace", JACK: "Jack", QUEEN: "Queen", KING: "King"}


@dataclass(eq=False)
class Card:
    """A playing card owned by exactly one place in a room at a time."""

    suit: Suit
    rank: int
    card_id: str
    is_face_up: bool = False
    permanent_face_up: bool = False

    @property
    def value(self) -> int:
        return self.rank

    def score_value(self) -> int:
        return SCORE_VALUES[self.rank]

    def key(self) -> tuple[Suit, int]:
        return self.suit, self.rank


def serialize_card(card: Card, *, face_up: Optional[bool] = None) -> dict[str, object]:
    return {
        "card_id": card.card_id,
        "suit": str(card.suit),
        "rank": card.rank,
        "value": card.value,
        "is_face_up": card.is_face_up if face_up is None else face_up,
    }


def hidden_card(card: Card) -> dict[str, object]:
    return {"card_id": card.card_id, "is_face_up": False}


def card_label(card: Card) -> str:
    name = RANK_NAMES.get(card.rank, str(card.rank))
    return f"{name} of {card.suit}"
