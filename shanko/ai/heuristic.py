"""Reference decision makers built on the hand evaluation helpers."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .. import actions, scoring
from ..actions import SequenceExtension
from ..cards import Card
from ..evaluation import evaluate_hand, find_objective_meld, keep_value
from ..melds import melded_card_count
from ..state import DrawSource, GameState, Player
from .base import JokerSwapDecision, MeldDecision

__all__ = ["HeuristicPlayer", "FirstCardPlayer"]

logger = logging.getLogger(__name__)


def _player(state: GameState, player_id: str) -> Player:
    player = state.get_player(player_id)
    if player is None:
        raise ValueError(f"unknown player {player_id!r}")
    return player


@dataclass(slots=True)
class HeuristicPlayer:
    """Rule-of-thumb opponent that melds, buys and discards from hand structure."""

    draw_keep_threshold: float = 3.0
    buy_keep_threshold: float = 5.0
    meld_points_threshold: int = 80
    late_round: int = 5
    late_round_remaining: int = 4
    buy_deadwood_base: float = 60.0
    buy_deadwood_decay: float = 20.0

    def _completes_objective(self, state: GameState, player: Player, card: Card) -> bool:
        if player.has_melded:
            return False
        if find_objective_meld(player.hand, state.round_objective) is not None:
            return False
        return find_objective_meld((*player.hand, card), state.round_objective) is not None

    def decide_draw(self, state: GameState, player_id: str) -> DrawSource:
        player = _player(state, player_id)
        top = actions.top_discard(state)
        if top is None:
            return DrawSource.DRAW
        if top.is_joker and not player.has_melded:
            return DrawSource.DISCARD
        if self._completes_objective(state, player, top):
            return DrawSource.DISCARD
        if not player.has_melded and keep_value(top, (*player.hand, top)) >= self.draw_keep_threshold:
            return DrawSource.DISCARD
        return DrawSource.DRAW

    def decide_discard(self, state: GameState, player_id: str) -> Card:
        """Shed the least useful card; once melded, shed the most expensive natural."""

        player = _player(state, player_id)
        if not player.hand:
            raise ValueError(f"player {player_id!r} has no cards to discard")
        naturals = [card for card in player.hand if not card.is_joker] or list(player.hand)
        if player.has_melded:
            return max(naturals, key=lambda card: (scoring.get_card_points(card), card.id))
        return min(
            naturals,
            key=lambda card: (keep_value(card, player.hand), -scoring.get_card_points(card), card.id),
        )

    def decide_meld(self, state: GameState, player_id: str) -> MeldDecision:
        player = _player(state, player_id)
        if player.has_melded:
            return MeldDecision(should_meld=False)
        combinations = find_objective_meld(player.hand, state.round_objective, player_id)
        if combinations is None:
            return MeldDecision(should_meld=False)

        remaining = len(player.hand) - melded_card_count(combinations)
        if remaining < 1:
            return MeldDecision(should_meld=False)
        if remaining == 1:
            return MeldDecision(should_meld=True, combinations=combinations)

        opponent_melded = any(other.has_melded for other in state.players if other.id != player_id)
        late = state.round >= self.late_round and remaining <= self.late_round_remaining
        heavy = scoring.calculate_round_score(player.hand) > self.meld_points_threshold
        if opponent_melded or late or heavy:
            logger.debug("player %s melds with %d cards left", player_id, remaining)
            return MeldDecision(should_meld=True, combinations=combinations)
        return MeldDecision(should_meld=False)

    def _buy_deadwood_limit(self, round_number: int) -> float:
        # Buying gets more cautious as objectives grow.
        return self.buy_deadwood_base - (round_number / 7) * self.buy_deadwood_decay

    def decide_buy(self, state: GameState, player_id: str, card: Card) -> bool:
        player = _player(state, player_id)
        if player.has_melded or player.buys_remaining <= 0:
            return False
        if card.is_joker or self._completes_objective(state, player, card):
            return True
        if keep_value(card, (*player.hand, card)) < self.buy_keep_threshold:
            return False
        return evaluate_hand(player.hand).deadwood_points <= self._buy_deadwood_limit(state.round)

    def decide_joker_swap(self, state: GameState, player_id: str) -> JokerSwapDecision:
        swaps = actions.swappable_jokers(state, player_id)
        if not swaps:
            return JokerSwapDecision(should_swap=False)
        return JokerSwapDecision(should_swap=True, swap=swaps[0])

    def decide_extension(self, state: GameState, player_id: str) -> SequenceExtension | None:
        options = actions.extendable_sequences(state, player_id)
        if not options:
            return None
        player = _player(state, player_id)
        points = {card.id: scoring.get_card_points(card) for card in player.hand}
        return max(options, key=lambda option: sum(points[card_id] for card_id in option.card_ids))


class FirstCardPlayer:
    """Deterministic seat: draws blind, never melds or buys, discards its first card."""

    def decide_draw(self, state: GameState, player_id: str) -> DrawSource:
        return DrawSource.DRAW

    def decide_discard(self, state: GameState, player_id: str) -> Card:
        return _player(state, player_id).hand[0]

    def decide_meld(self, state: GameState, player_id: str) -> MeldDecision:
        return MeldDecision(should_meld=False)

    def decide_buy(self, state: GameState, player_id: str, card: Card) -> bool:
        return False

    def decide_joker_swap(self, state: GameState, player_id: str) -> JokerSwapDecision:
        return JokerSwapDecision(should_swap=False)

    def decide_extension(self, state: GameState, player_id: str) -> SequenceExtension | None:
        return None
