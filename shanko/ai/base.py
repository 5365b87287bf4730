"""Contract between the flow controller and whatever makes decisions for a seat."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from ..actions import JokerSwap, SequenceExtension
from ..cards import Card
from ..melds import Combination
from ..state import DrawSource, GameState


@dataclass(frozen=True, slots=True)
class MeldDecision:
    should_meld: bool
    combinations: tuple[Combination, ...] = ()


@dataclass(frozen=True, slots=True)
class JokerSwapDecision:
    should_swap: bool
    swap: JokerSwap | None = None


@runtime_checkable
class DecisionMaker(Protocol):
    """Callbacks consulted for every choice a seat has to make.

    Answers are advisory; the rules engine validates each resulting action.
    """

    def decide_draw(self, state: GameState, player_id: str) -> DrawSource:
        ...

    def decide_discard(self, state: GameState, player_id: str) -> Card:
        ...

    def decide_meld(self, state: GameState, player_id: str) -> MeldDecision:
        ...

    def decide_buy(self, state: GameState, player_id: str, card: Card) -> bool:
        ...

    def decide_joker_swap(self, state: GameState, player_id: str) -> JokerSwapDecision:
        ...

    def decide_extension(self, state: GameState, player_id: str) -> SequenceExtension | None:
        ...
