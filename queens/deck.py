"""Deck creation utilities for Queens."""

from __future__ import annotations

from random import Random
from typing import Callable, Iterator, List, Optional

from .cards import RANKS, Card, Suit
from .errors import DeckExhausted

STANDARD_DECK_SIZE = len(Suit) * len(RANKS)


def build_deck(id_factory: Callable[[], str]) -> List[Card]:
    """Return the ordered 52-card deck, one card per (suit, rank)."""
    return [Card(suit=suit, rank=rank, card_id=id_factory()) for suit in Suit for rank in RANKS]


def counter_ids(start: int = 1) -> Callable[[], str]:
    """Card id factory backed by a monotonic counter, unique for its lifetime.

    Ids carry no suit or rank, so a redacted card cannot be read from its id.
    """
    counter = start

    def next_id() -> str:
        nonlocal counter
        card_id = f"c{counter}"
        counter += 1
        return card_id

    return next_id


class Deck:
    """A stack of cards; the top of the stack is the end of the list."""

    def __init__(self, cards: Optional[List[Card]] = None) -> None:
        self.cards: List[Card] = list(cards) if cards is not None else []

    @classmethod
    def build(cls, id_factory: Callable[[], str]) -> "Deck":
        return cls(build_deck(id_factory))

    def shuffle(self, rng: Optional[Random] = None) -> None:
        # Random.shuffle is an in-place Fisher-Yates pass.
        (rng or Random()).shuffle(self.cards)

    def draw(self) -> Card:
        if not self.cards:
            raise DeckExhausted()
        return self.cards.pop()

    def draw_or_none(self) -> Optional[Card]:
        return self.cards.pop() if self.cards else None

    def is_empty(self) -> bool:
        return not self.cards

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)
