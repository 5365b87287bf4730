"""Core game state data structures for Shanko."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Final, Iterable

from .cards import Card
from .melds import ROUND_OBJECTIVES, Combination, RoundObjective

__all__ = [
    "GamePhase",
    "PlayerType",
    "DrawSource",
    "ShankoConfig",
    "DEFAULT_CONFIG",
    "Player",
    "GameState",
]


class GamePhase(str, Enum):
    """Phases of the turn and round state machine."""

    SETUP = "SETUP"
    DRAW = "DRAW"
    MELD = "MELD"
    DISCARD = "DISCARD"
    BUY_WINDOW = "BUY_WINDOW"
    ROUND_END = "ROUND_END"
    GAME_END = "GAME_END"


class PlayerType(str, Enum):
    HUMAN = "HUMAN"
    AI = "AI"


class DrawSource(str, Enum):
    """Pile a player draws from at the start of their turn."""

    DRAW = "DRAW"
    DISCARD = "DISCARD"


@dataclass(frozen=True, slots=True)
class ShankoConfig:
    """Runtime configuration for a Shanko game."""

    hand_size: int = 11
    buys_per_round: int = 3

    def __post_init__(self) -> None:
        if self.hand_size <= 0:
            raise ValueError("hand_size must be positive")
        if self.buys_per_round < 0:
            raise ValueError("buys_per_round cannot be negative")


DEFAULT_CONFIG: Final[ShankoConfig] = ShankoConfig()


@dataclass(frozen=True, slots=True)
class Player:
    """State tracked for each player at the table."""

    id: str
    name: str
    type: PlayerType
    hand: tuple[Card, ...] = ()
    melded_combinations: tuple[Combination, ...] = ()
    has_melded: bool = False
    buys_remaining: int = DEFAULT_CONFIG.buys_per_round
    cumulative_score: int = 0
    round_scores: tuple[int, ...] = ()

    @property
    def is_ai(self) -> bool:
        return self.type is PlayerType.AI

    def find_card(self, card_id: str) -> Card | None:
        return next((card for card in self.hand if card.id == card_id), None)

    def has_card(self, card_id: str) -> bool:
        return self.find_card(card_id) is not None

    def without_cards(self, card_ids: Iterable[str]) -> "Player":
        """Return a copy of the player with ``card_ids`` removed from the hand."""

        removed = set(card_ids)
        return replace(self, hand=tuple(card for card in self.hand if card.id not in removed))

    def with_cards(self, *cards: Card) -> "Player":
        return replace(self, hand=self.hand + cards)

    def melded_card_total(self) -> int:
        return sum(len(combo.cards) for combo in self.melded_combinations)


@dataclass(frozen=True, slots=True)
class GameState:
    """Immutable snapshot of a Shanko game.

    The draw pile's top card is index 0; the discard pile's top card is the
    last element.
    """

    game_id: str
    players: tuple[Player, ...]
    current_player_index: int = 0
    starting_player_index: int = 0
    round: int = 1
    round_objective: RoundObjective = ROUND_OBJECTIVES[0]
    draw_pile: tuple[Card, ...] = ()
    discard_pile: tuple[Card, ...] = ()
    phase: GamePhase = GamePhase.SETUP
    winner: str | None = None
    last_round_winner: str | None = None
    config: ShankoConfig = field(default=DEFAULT_CONFIG)

    @property
    def player_count(self) -> int:
        return len(self.players)

    @property
    def current_player(self) -> Player:
        return self.players[self.current_player_index]

    @property
    def next_player_index(self) -> int:
        return (self.current_player_index + 1) % len(self.players)

    def player_index(self, player_id: str) -> int | None:
        return next((idx for idx, player in enumerate(self.players) if player.id == player_id), None)

    def get_player(self, player_id: str) -> Player | None:
        index = self.player_index(player_id)
        return None if index is None else self.players[index]

    def replace_player(self, index: int, player: Player) -> "GameState":
        """Return a new state with the player at ``index`` swapped for ``player``."""

        players = list(self.players)
        players[index] = player
        return replace(self, players=tuple(players))

    def card_total(self) -> int:
        """Return the number of cards across hands, melds and both piles."""

        total = len(self.draw_pile) + len(self.discard_pile)
        for player in self.players:
            total += len(player.hand) + player.melded_card_total()
        return total

    def all_card_ids(self) -> list[str]:
        ids = [card.id for card in self.draw_pile]
        ids.extend(card.id for card in self.discard_pile)
        for player in self.players:
            ids.extend(card.id for card in player.hand)
            for combo in player.melded_combinations:
                ids.extend(card.id for card in combo.cards)
        return ids
