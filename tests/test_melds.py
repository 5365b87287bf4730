from __future__ import annotations

import pytest

from shanko.cards import Card, Rank, Suit
from shanko.melds import (
    ROUND_OBJECTIVES,
    TOTAL_ROUNDS,
    Combination,
    CombinationType,
    melded_card_count,
    melded_card_ids,
    objective_for,
)


def test_objective_schedule() -> None:
    table = [(obj.triplets, obj.sequences, obj.total_cards) for obj in ROUND_OBJECTIVES]

    assert TOTAL_ROUNDS == 7
    assert table == [(2, 0, 6), (1, 1, 7), (0, 2, 8), (3, 0, 9), (2, 1, 10), (1, 2, 11), (0, 3, 12)]
    assert [obj.round for obj in ROUND_OBJECTIVES] == list(range(1, 8))


@pytest.mark.parametrize("round_number", [0, 8, -1])
def test_objective_for_rejects_out_of_range(round_number: int) -> None:
    with pytest.raises(ValueError):
        objective_for(round_number)


def test_combination_helpers() -> None:
    cards = [Card.standard(Rank.FIVE, suit) for suit in (Suit.HEARTS, Suit.CLUBS, Suit.SPADES)]
    first = Combination.create(CombinationType.TRIPLET, cards)
    second = Combination.create(CombinationType.TRIPLET, cards, "p2")

    assert first.id != second.id
    assert first.owner_id == ""
    assert first.owned_by("p1").owner_id == "p1"
    assert not first.is_sequence
    assert first.card_ids() == {"5H#0", "5C#0", "5S#0"}
    assert melded_card_ids([first]) == ["5H#0", "5C#0", "5S#0"]
    assert melded_card_count([first, second]) == 6
