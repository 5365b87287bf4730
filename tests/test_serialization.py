from __future__ import annotations

import json
import random
from dataclasses import replace

import pytest

from shanko import rules, serialization
from shanko.cards import Card, Rank, Suit
from shanko.melds import Combination, CombinationType
from shanko.state import GameState


def _midgame_state() -> GameState:
    state = rules.start_round(rules.initialize_game(4, 1, names=["Ana", "Bo", "Cy", "Di"]), random.Random(3))
    combo = Combination.create(
        CombinationType.TRIPLET,
        [Card.standard(Rank.SEVEN, Suit.HEARTS), Card.standard(Rank.SEVEN, Suit.CLUBS, 1), Card.joker(1)],
        "p2",
    )
    player = replace(state.players[1], melded_combinations=(combo,), has_melded=True, round_scores=(12, 0))
    return replace(state.replace_player(1, player), last_round_winner="p3")


def test_snapshot_survives_json() -> None:
    state = _midgame_state()

    payload = json.loads(json.dumps(serialization.state_to_dict(state)))
    restored = serialization.state_from_dict(payload)

    assert restored == state
    assert restored.players[1].melded_combinations[0].cards[2].is_joker
    assert restored.players[0].name == "Ana"


def test_snapshot_uses_plain_values() -> None:
    data = serialization.state_to_dict(_midgame_state())

    assert data["version"] == serialization.FORMAT_VERSION
    assert data["phase"] == "DRAW"
    assert data["players"][0]["type"] == "HUMAN"
    assert data["discard_pile"][0].keys() == {"id", "rank", "suit", "deck_index"}


def test_snapshot_version_mismatch_is_rejected() -> None:
    data = serialization.state_to_dict(_midgame_state())
    data["version"] = 99

    with pytest.raises(ValueError, match="unsupported snapshot version"):
        serialization.state_from_dict(data)
