"""Read-only selectors and legal action discovery for Shanko."""

from __future__ import annotations

from dataclasses import dataclass

from . import rules, validation
from .cards import Card
from .melds import Combination, CombinationType, SequenceEnd
from .state import GamePhase, GameState, Player

__all__ = [
    "JokerSwap",
    "SequenceExtension",
    "ValidActions",
    "current_player",
    "top_discard",
    "draw_pile_count",
    "discard_pile_count",
    "melded_sets",
    "buy_priority",
    "swappable_jokers",
    "extendable_sequences",
    "valid_actions",
]


@dataclass(frozen=True, slots=True)
class JokerSwap:
    """A legal Joker swap: which Joker leaves which combination for which card."""

    combination_id: str
    joker_card_id: str
    replacement_card_id: str


@dataclass(frozen=True, slots=True)
class SequenceExtension:
    """A legal extension of a melded sequence with cards from hand."""

    combination_id: str
    card_ids: tuple[str, ...]
    position: SequenceEnd


@dataclass(frozen=True, slots=True)
class ValidActions:
    """Flags describing what a player may do in the current state."""

    can_draw_from_deck: bool = False
    can_draw_from_discard: bool = False
    can_discard: bool = False
    can_meld: bool = False
    can_go_out: bool = False
    can_swap_joker: bool = False
    can_extend_sequence: bool = False
    can_buy: bool = False


def current_player(state: GameState) -> Player:
    return state.current_player


def top_discard(state: GameState) -> Card | None:
    return state.discard_pile[-1] if state.discard_pile else None


def draw_pile_count(state: GameState) -> int:
    return len(state.draw_pile)


def discard_pile_count(state: GameState) -> int:
    return len(state.discard_pile)


def melded_sets(state: GameState) -> list[Combination]:
    """Return every melded combination on the table in seat order."""

    return [combo for player in state.players for combo in player.melded_combinations]


def buy_priority(state: GameState) -> tuple[str, ...]:
    return rules.get_buy_priority(state)


def _can_play_on_table(state: GameState, player_id: str) -> bool:
    player = state.get_player(player_id)
    if player is None or not player.has_melded:
        return False
    if state.phase not in (GamePhase.MELD, GamePhase.DISCARD):
        return False
    return state.current_player.id == player_id


def swappable_jokers(state: GameState, player_id: str) -> list[JokerSwap]:
    """Return every Joker swap ``player_id`` could make right now."""

    if not _can_play_on_table(state, player_id):
        return []
    player = state.get_player(player_id)
    assert player is not None
    swaps: list[JokerSwap] = []
    for combination in melded_sets(state):
        if combination.type is not CombinationType.SEQUENCE:
            continue
        for joker in (card for card in combination.cards if card.is_joker):
            for replacement in player.hand:
                if replacement.is_joker:
                    continue
                if validation.can_swap_joker(combination, joker, replacement):
                    swaps.append(JokerSwap(combination.id, joker.id, replacement.id))
    return swaps


def extendable_sequences(state: GameState, player_id: str) -> list[SequenceExtension]:
    """Return single-card sequence extensions open to ``player_id``.

    A player always keeps one card back for the discard, so nothing is
    offered from a one-card hand.
    """

    if not _can_play_on_table(state, player_id):
        return []
    player = state.get_player(player_id)
    assert player is not None
    if len(player.hand) <= 1:
        return []
    extensions: list[SequenceExtension] = []
    for combination in melded_sets(state):
        if combination.type is not CombinationType.SEQUENCE:
            continue
        for card in player.hand:
            for position in SequenceEnd:
                if validation.can_extend_sequence(combination, [card], position):
                    extensions.append(SequenceExtension(combination.id, (card.id,), position))
    return extensions


def valid_actions(state: GameState, player_id: str | None = None) -> ValidActions:
    """Summarise the legal moves for ``player_id`` (the current player by default)."""

    if player_id is None:
        player_id = state.current_player.id
    player = state.get_player(player_id)
    if player is None:
        return ValidActions()

    if state.phase is GamePhase.BUY_WINDOW:
        return ValidActions(can_buy=rules.can_player_buy(state, player_id))
    if state.current_player.id != player_id:
        return ValidActions()

    if state.phase is GamePhase.DRAW:
        return ValidActions(
            can_draw_from_deck=bool(state.draw_pile) or len(state.discard_pile) > 1,
            can_draw_from_discard=bool(state.discard_pile),
        )
    if state.phase in (GamePhase.MELD, GamePhase.DISCARD):
        can_meld = state.phase is GamePhase.MELD and not player.has_melded
        return ValidActions(
            can_discard=bool(player.hand),
            can_meld=can_meld,
            can_go_out=can_meld,
            can_swap_joker=bool(swappable_jokers(state, player_id)),
            can_extend_sequence=bool(extendable_sequences(state, player_id)),
        )
    return ValidActions()
