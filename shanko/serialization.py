"""Plain-data snapshots of game state.

``state_to_dict`` produces only JSON-compatible values (dicts, lists,
strings, ints, bools and ``None``) and ``state_from_dict`` rebuilds an equal
:class:`~shanko.state.GameState` from it.
"""

from __future__ import annotations

from typing import Any, Mapping

from .cards import Card, Rank, Suit
from .melds import Combination, CombinationType, RoundObjective
from .state import GamePhase, GameState, Player, PlayerType, ShankoConfig

__all__ = ["FORMAT_VERSION", "state_to_dict", "state_from_dict"]

FORMAT_VERSION = 1


def _card_to_dict(card: Card) -> dict[str, Any]:
    return {
        "id": card.id,
        "rank": card.rank.value,
        "suit": None if card.suit is None else card.suit.value,
        "deck_index": card.deck_index,
    }


def _card_from_dict(data: Mapping[str, Any]) -> Card:
    suit = data["suit"]
    return Card(
        id=data["id"],
        rank=Rank(data["rank"]),
        suit=None if suit is None else Suit(suit),
        deck_index=int(data["deck_index"]),
    )


def _combination_to_dict(combination: Combination) -> dict[str, Any]:
    return {
        "id": combination.id,
        "type": combination.type.value,
        "cards": [_card_to_dict(card) for card in combination.cards],
        "owner_id": combination.owner_id,
    }


def _combination_from_dict(data: Mapping[str, Any]) -> Combination:
    return Combination(
        id=data["id"],
        type=CombinationType(data["type"]),
        cards=tuple(_card_from_dict(card) for card in data["cards"]),
        owner_id=data["owner_id"],
    )


def _player_to_dict(player: Player) -> dict[str, Any]:
    return {
        "id": player.id,
        "name": player.name,
        "type": player.type.value,
        "hand": [_card_to_dict(card) for card in player.hand],
        "melded_combinations": [_combination_to_dict(combo) for combo in player.melded_combinations],
        "has_melded": player.has_melded,
        "buys_remaining": player.buys_remaining,
        "cumulative_score": player.cumulative_score,
        "round_scores": list(player.round_scores),
    }


def _player_from_dict(data: Mapping[str, Any]) -> Player:
    return Player(
        id=data["id"],
        name=data["name"],
        type=PlayerType(data["type"]),
        hand=tuple(_card_from_dict(card) for card in data["hand"]),
        melded_combinations=tuple(_combination_from_dict(combo) for combo in data["melded_combinations"]),
        has_melded=bool(data["has_melded"]),
        buys_remaining=int(data["buys_remaining"]),
        cumulative_score=int(data["cumulative_score"]),
        round_scores=tuple(int(score) for score in data["round_scores"]),
    )


def state_to_dict(state: GameState) -> dict[str, Any]:
    """Return a JSON-compatible snapshot of ``state``."""

    objective = state.round_objective
    return {
        "version": FORMAT_VERSION,
        "game_id": state.game_id,
        "players": [_player_to_dict(player) for player in state.players],
        "current_player_index": state.current_player_index,
        "starting_player_index": state.starting_player_index,
        "round": state.round,
        "round_objective": {
            "round": objective.round,
            "triplets": objective.triplets,
            "sequences": objective.sequences,
            "total_cards": objective.total_cards,
        },
        "draw_pile": [_card_to_dict(card) for card in state.draw_pile],
        "discard_pile": [_card_to_dict(card) for card in state.discard_pile],
        "phase": state.phase.value,
        "winner": state.winner,
        "last_round_winner": state.last_round_winner,
        "config": {
            "hand_size": state.config.hand_size,
            "buys_per_round": state.config.buys_per_round,
        },
    }


def state_from_dict(data: Mapping[str, Any]) -> GameState:
    """Rebuild a :class:`GameState` from :func:`state_to_dict` output.

    Raises ``ValueError`` for snapshots written in another format version.
    """

    version = data.get("version")
    if version != FORMAT_VERSION:
        raise ValueError(f"unsupported snapshot version: {version!r}")
    objective = data["round_objective"]
    return GameState(
        game_id=data["game_id"],
        players=tuple(_player_from_dict(player) for player in data["players"]),
        current_player_index=int(data["current_player_index"]),
        starting_player_index=int(data["starting_player_index"]),
        round=int(data["round"]),
        round_objective=RoundObjective(
            round=int(objective["round"]),
            triplets=int(objective["triplets"]),
            sequences=int(objective["sequences"]),
            total_cards=int(objective["total_cards"]),
        ),
        draw_pile=tuple(_card_from_dict(card) for card in data["draw_pile"]),
        discard_pile=tuple(_card_from_dict(card) for card in data["discard_pile"]),
        phase=GamePhase(data["phase"]),
        winner=data["winner"],
        last_round_winner=data.get("last_round_winner"),
        config=ShankoConfig(**data["config"]),
    )
