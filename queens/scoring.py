"""Final-round scoring helpers for Queens."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

from .cards import Card


class ScoringError(ValueError):
    """Raised when scoring is requested with inconsistent inputs."""


@dataclass(frozen=True)
class FinalScoreResult:
    totals: Tuple[int, ...]
    scores: Tuple[int, ...]
    caller_index: int
    caller_won: bool
    winner_index: int


def hand_total(cards: Iterable[Card]) -> int:
    """Queens count 0, Aces 1, Jacks and Kings 10, everything else face value."""
    return sum(card.score_value() for card in cards)


def calculate_final_score(hands: Sequence[Sequence[Card]], caller_index: Optional[int]) -> FinalScoreResult:
    if caller_index is None:
        raise ScoringError("Final score requires a queens caller.")
    if not 0 <= caller_index < len(hands):
        raise ScoringError(f"Caller seat {caller_index} is out of range.")

    totals = tuple(hand_total(hand) for hand in hands)
    caller_total = totals[caller_index]
    others = [seat for seat in range(len(totals)) if seat != caller_index]

    # Ties at the minimum go against the caller.
    caller_won = all(caller_total < totals[seat] for seat in others)
    if caller_won:
        return FinalScoreResult(
            totals=totals,
            scores=totals,
            caller_index=caller_index,
            caller_won=True,
            winner_index=caller_index,
        )

    scores = [0] * len(totals)
    scores[caller_index] = sum(totals[seat] for seat in others)
    winner = min(others, key=lambda seat: (totals[seat], seat))
    return FinalScoreResult(
        totals=totals,
        scores=tuple(scores),
        caller_index=caller_index,
        caller_won=False,
        winner_index=winner,
    )
