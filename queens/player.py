"""Per-seat hand bookkeeping."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Set

from .cards import Card
from .errors import CardNotInHand


@dataclass
class Player:
    id: str
    index: int
    hand: List[Card] = field(default_factory=list)
    initial_selection_complete: bool = False
    selected_card_ids: Set[str] = field(default_factory=set)
    score: Optional[int] = None

    def find_card(self, card_id: str) -> Optional[Card]:
        for card in self.hand:
            if card.card_id == card_id:
                return card
        return None

    def require_card(self, card_id: str) -> Card:
        card = self.find_card(card_id)
        if card is None:
            raise CardNotInHand(card_id)
        return card

    def has_card(self, card_id: str) -> bool:
        return self.find_card(card_id) is not None

    def remove_card(self, card_id: str) -> Card:
        card = self.require_card(card_id)
        self.hand.remove(card)
        return card

    def receive(self, card: Card) -> None:
        self.hand.append(card)

    def replace_card(self, card_id: str, new_card: Card) -> Card:
        """Put ``new_card`` at the position of ``card_id`` and return the old card."""
        old = self.require_card(card_id)
        self.hand[self.hand.index(old)] = new_card
        return old
