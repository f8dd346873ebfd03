"""Per-room state machine for Queens."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from random import Random
from typing import Callable, Iterable, List, Optional, Set, Tuple

from .cards import JACK, KING, QUEEN, Card, card_label
from .config import GameConfig
from .deck import STANDARD_DECK_SIZE, Deck, counter_ids
from .errors import (
    IntegrityError,
    InvalidCardSelection,
    InvalidSelectionCount,
    NotYourTurn,
    PlayerNotFound,
    RoomFull,
    WrongPhase,
)
from .player import Player
from .scoring import FinalScoreResult, calculate_final_score


class RoomPhase(Enum):
    WAITING = auto()
    INITIAL_SELECTION = auto()
    ACTIVE = auto()
    FINAL_ROUND = auto()
    ENDED = auto()


class PendingEffect(Enum):
    KING_REVEAL = auto()
    JACK_SWAP = auto()
    REACTION = auto()


IN_PLAY = (RoomPhase.ACTIVE, RoomPhase.FINAL_ROUND)


@dataclass
class Room:
    """All mutable state of one table.

    Every public action validates first and mutates afterwards, so an action
    that raises leaves the room exactly as it found it.
    """

    room_id: str
    config: GameConfig = field(default_factory=GameConfig)
    rng: Random = field(default_factory=Random)
    last_activity: float = 0.0

    phase: RoomPhase = field(init=False, default=RoomPhase.WAITING)
    players: List[Player] = field(init=False, default_factory=list)
    deck: Deck = field(init=False)
    center_card: Optional[Card] = field(init=False, default=None)
    discard: List[Card] = field(init=False, default_factory=list)
    current_turn_index: int = field(init=False, default=0)
    pending: Optional[PendingEffect] = field(init=False, default=None)
    pending_actor: Optional[int] = field(init=False, default=None)
    reaction_value: Optional[int] = field(init=False, default=None)
    reacting_players: Set[int] = field(init=False, default_factory=set)
    penalized_players: Set[int] = field(init=False, default_factory=set)
    queens_caller_index: Optional[int] = field(init=False, default=None)
    final_turn_count: int = field(init=False, default=0)
    final_score: Optional[FinalScoreResult] = field(init=False, default=None)
    history: List[Tuple[int, str, Optional[str]]] = field(init=False, default_factory=list)
    _card_ids: Callable[[], str] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        # One id counter for the whole life of the room, resets included.
        self._card_ids = counter_ids()
        self.deck = self._fresh_deck()

    # Queries -----------------------------------------------------------

    @property
    def player_count(self) -> int:
        return len(self.players)

    @property
    def is_full(self) -> bool:
        return self.player_count >= self.config.max_players

    @property
    def reaction_mode(self) -> bool:
        return self.pending is PendingEffect.REACTION

    def player(self, seat: int) -> Player:
        if not 0 <= seat < self.player_count:
            raise PlayerNotFound(seat)
        return self.players[seat]

    def find_player(self, player_id: str) -> Optional[Player]:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def require_player(self, player_id: str) -> Player:
        player = self.find_player(player_id)
        if player is None:
            raise PlayerNotFound(player_id)
        return player

    def opponent(self, seat: int) -> Player:
        return self.players[(seat + 1) % self.player_count]

    def eligible_reactors(self) -> List[int]:
        if not self.reaction_mode:
            return []
        return [
            player.index
            for player in self.players
            if player.index != self.pending_actor and player.index not in self.reacting_players
        ]

    def all_cards(self) -> List[Card]:
        cards = list(self.deck)
        for player in self.players:
            cards.extend(player.hand)
        if self.center_card is not None:
            cards.append(self.center_card)
        cards.extend(self.discard)
        return cards

    def check_integrity(self) -> None:
        """Raise ``IntegrityError`` unless every card exists exactly once."""
        cards = self.all_cards()
        keys = {card.key() for card in cards}
        ids = {card.card_id for card in cards}
        if len(cards) != STANDARD_DECK_SIZE or len(keys) != STANDARD_DECK_SIZE or len(ids) != STANDARD_DECK_SIZE:
            raise IntegrityError(
                f"Room {self.room_id} holds {len(cards)} cards, {len(keys)} distinct faces, {len(ids)} distinct ids."
            )
        if self.phase in IN_PLAY and not 0 <= self.current_turn_index < self.player_count:
            raise IntegrityError(f"Room {self.room_id} has turn index {self.current_turn_index}.")

    # Lobby -------------------------------------------------------------

    def join(self, player_id: str) -> Tuple[Player, bool]:
        """Seat ``player_id`` or find their existing seat; returns ``(player, rejoined)``."""
        existing = self.find_player(player_id)
        if existing is not None:
            return existing, True
        if self.is_full:
            raise RoomFull(f"Room {self.room_id} is full.")
        if self.phase is not RoomPhase.WAITING:
            raise WrongPhase(f"Room {self.room_id} is not accepting players.")

        player = Player(id=player_id, index=self.player_count)
        for _ in range(self.config.hand_size):
            card = self.deck.draw_or_none()
            if card is None:
                break
            player.receive(card)
        self.players.append(player)
        self._record(player.index, "join", None)

        if self.is_full:
            self.phase = RoomPhase.INITIAL_SELECTION
            self.current_turn_index = -1
        return player, False

    def select_initial_cards(self, seat: int, card_ids: Iterable[str]) -> None:
        self._ensure_phase(RoomPhase.INITIAL_SELECTION)
        player = self.player(seat)
        if player.initial_selection_complete:
            raise WrongPhase("Initial selection already complete.")
        ids = list(card_ids)
        if len(ids) != self.config.selection_size or len(set(ids)) != len(ids):
            raise InvalidSelectionCount(f"Must select exactly {self.config.selection_size} distinct cards.")
        missing = [card_id for card_id in ids if not player.has_card(card_id)]
        if missing:
            raise InvalidCardSelection(f"Cards not in hand: {missing}")

        for card_id in ids:
            player.require_card(card_id).permanent_face_up = True
        player.selected_card_ids = set(ids)
        player.initial_selection_complete = True
        self._record(seat, "select", None)

        if all(p.initial_selection_complete for p in self.players):
            self.phase = RoomPhase.ACTIVE
            self.peek_or_draw_center()
            self.current_turn_index = 0

    def peek_or_draw_center(self) -> Optional[Card]:
        if self.center_card is None:
            card = self.deck.draw_or_none()
            if card is not None:
                card.is_face_up = True
            self.center_card = card
        return self.center_card

    # Play --------------------------------------------------------------

    def play_card(self, seat: int, card_id: str) -> None:
        self._ensure_phase(*IN_PLAY)
        player = self.player(seat)
        if self.reaction_mode:
            self._react(player, card_id)
            return
        self._ensure_no_pending()
        self._ensure_turn(seat)
        card = player.remove_card(card_id)
        self._record(seat, "play", card_label(card))

        if card.rank == KING:
            self._set_center(card)
            if not player.hand:
                # Nothing left to reveal; the King is spent.
                self.next_turn()
            else:
                self._begin_pending(PendingEffect.KING_REVEAL, seat)
        elif card.rank == JACK:
            self._set_center(card)
            if self._is_locked_caller(seat) or not player.hand or not self.opponent(seat).hand:
                # No legal swap: the caller is locked in the final round or a hand is empty.
                self.next_turn()
            else:
                self._begin_pending(PendingEffect.JACK_SWAP, seat)
        elif card.rank == QUEEN:
            receiver = self.opponent(seat)
            card.is_face_up = False
            card.permanent_face_up = True
            receiver.receive(card)
            self._clear_center()
            self.next_turn(deal=False)
        else:
            self._set_center(card)
            self._begin_pending(PendingEffect.REACTION, seat)
            self.reaction_value = card.value
            self.reacting_players = set()
            self.penalized_players = set()
            self._close_reaction_if_resolved()

    def draw_card(self, seat: int) -> Card:
        self._ensure_phase(*IN_PLAY)
        player = self.player(seat)
        self._ensure_no_pending()
        self._ensure_turn(seat)
        card = self.deck.draw()
        player.receive(card)
        self._record(seat, "draw", None)
        return card

    def call_queens(self, seat: int) -> None:
        self._ensure_phase(RoomPhase.ACTIVE)
        self.player(seat)
        self._ensure_no_pending()
        self._ensure_turn(seat)
        self.phase = RoomPhase.FINAL_ROUND
        self.queens_caller_index = seat
        self.final_turn_count = 0
        self._record(seat, "call_queens", None)
        self._rotate(deal=True)

    def king_reveal(self, seat: int, card_id: str) -> None:
        self._ensure_phase(*IN_PLAY)
        player = self.player(seat)
        self._ensure_pending(PendingEffect.KING_REVEAL, seat)
        card = player.require_card(card_id)
        card.permanent_face_up = True
        self._record(seat, "king_reveal", card_id)
        self._end_pending()
        self.next_turn()

    def jack_swap(self, seat: int, from_id: str, to_id: str) -> None:
        self._ensure_phase(*IN_PLAY)
        player = self.player(seat)
        self._ensure_pending(PendingEffect.JACK_SWAP, seat)
        if self._is_locked_caller(seat):
            raise WrongPhase("The queens caller cannot swap during the final round.")
        opponent = self.opponent(seat)
        own = player.find_card(from_id)
        theirs = opponent.find_card(to_id)
        if own is None or theirs is None:
            raise InvalidCardSelection(
                f"Swap needs {from_id} in seat {seat}'s hand and {to_id} in seat {opponent.index}'s hand."
            )

        player.replace_card(from_id, theirs)
        opponent.replace_card(to_id, own)
        for card in (own, theirs):
            card.is_face_up = False
            card.permanent_face_up = False
        self._record(seat, "jack_swap", f"{from_id}<->{to_id}")
        self._end_pending()
        self.next_turn()

    def pass_reaction(self, seat: int) -> None:
        self._ensure_phase(*IN_PLAY)
        self.player(seat)
        if not self.reaction_mode:
            raise WrongPhase("No reaction window is open.")
        if seat not in self.eligible_reactors():
            raise NotYourTurn(f"Seat {seat} cannot react now.")
        self.reacting_players.add(seat)
        self._record(seat, "pass_reaction", None)
        self._close_reaction_if_resolved()

    def next_turn(self, *, deal: bool = True) -> None:
        if self.phase is RoomPhase.FINAL_ROUND:
            self.final_turn_count += 1
            if self.final_turn_count >= self.player_count:
                self._finish()
                return
        self._rotate(deal=deal)

    def reset(self) -> None:
        self.phase = RoomPhase.WAITING
        self.players = []
        self.deck = self._fresh_deck()
        self.center_card = None
        self.discard = []
        self.current_turn_index = 0
        self._end_pending()
        self.queens_caller_index = None
        self.final_turn_count = 0
        self.final_score = None
        self.history = []

    # Helpers -----------------------------------------------------------

    def _fresh_deck(self) -> Deck:
        deck = Deck.build(self._card_ids)
        deck.shuffle(self.rng)
        return deck

    def _react(self, player: Player, card_id: str) -> None:
        if player.index not in self.eligible_reactors():
            raise NotYourTurn(f"Seat {player.index} cannot react now.")
        card = player.require_card(card_id)

        if card.value == self.reaction_value:
            player.hand.remove(card)
            self._set_center(card)
            self.reacting_players.add(player.index)
            self._record(player.index, "react", card_label(card))
            self._close_reaction_if_resolved()
            return

        # Wrong card: it stays in hand and the first miss in this window costs one card.
        self._record(player.index, "react_miss", None)
        if player.index not in self.penalized_players:
            self.penalized_players.add(player.index)
            penalty = self.deck.draw_or_none()
            if penalty is not None:
                player.receive(penalty)

    def _close_reaction_if_resolved(self) -> None:
        if self.reaction_mode and not self.eligible_reactors():
            self._end_pending()
            self.next_turn()

    def _rotate(self, *, deal: bool) -> None:
        self.current_turn_index = (self.current_turn_index + 1) % self.player_count
        if deal and not self._is_locked_caller(self.current_turn_index):
            card = self.deck.draw_or_none()
            if card is not None:
                self.players[self.current_turn_index].receive(card)

    def _finish(self) -> None:
        result = calculate_final_score([player.hand for player in self.players], self.queens_caller_index)
        for player in self.players:
            player.score = result.scores[player.index]
        self.final_score = result
        self.phase = RoomPhase.ENDED

    def _set_center(self, card: Card) -> None:
        self._clear_center()
        card.is_face_up = True
        self.center_card = card

    def _clear_center(self) -> None:
        if self.center_card is not None:
            self.discard.append(self.center_card)
        self.center_card = None

    def _begin_pending(self, effect: PendingEffect, seat: int) -> None:
        self.pending = effect
        self.pending_actor = seat

    def _end_pending(self) -> None:
        self.pending = None
        self.pending_actor = None
        self.reaction_value = None
        self.reacting_players = set()
        self.penalized_players = set()

    def _is_locked_caller(self, seat: int) -> bool:
        return self.phase is RoomPhase.FINAL_ROUND and seat == self.queens_caller_index

    def _record(self, seat: int, action: str, detail: Optional[str]) -> None:
        self.history.append((seat, action, detail))

    def _ensure_phase(self, *expected: RoomPhase) -> None:
        if self.phase not in expected:
            names = ", ".join(phase.name for phase in expected)
            raise WrongPhase(f"Action not allowed in phase {self.phase.name}. Expected {names}.")

    def _ensure_turn(self, seat: int) -> None:
        if seat != self.current_turn_index:
            raise NotYourTurn(f"Not your turn. Current turn: {self.current_turn_index}")

    def _ensure_no_pending(self) -> None:
        if self.pending is not None:
            raise WrongPhase(f"Waiting for {self.pending.name} from seat {self.pending_actor}.")

    def _ensure_pending(self, effect: PendingEffect, seat: int) -> None:
        if self.pending is not effect:
            raise WrongPhase(f"No {effect.name} is pending.")
        if seat != self.pending_actor:
            raise NotYourTurn(f"Seat {self.pending_actor} must resolve the {effect.name}.")
