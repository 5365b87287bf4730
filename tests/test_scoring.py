from __future__ import annotations

import pytest

from shanko import scoring
from shanko.cards import Card, Rank, Suit
from shanko.state import GameState, Player, PlayerType


def _player(player_id: str, hand: list[Card] | None = None, cumulative: int = 0) -> Player:
    return Player(
        id=player_id,
        name=player_id.upper(),
        type=PlayerType.AI,
        hand=tuple(hand or ()),
        cumulative_score=cumulative,
    )


@pytest.mark.parametrize(
    ("card", "points"),
    [
        (Card.standard(Rank.TWO, Suit.CLUBS), 2),
        (Card.standard(Rank.NINE, Suit.HEARTS), 9),
        (Card.standard(Rank.TEN, Suit.SPADES), 10),
        (Card.standard(Rank.JACK, Suit.DIAMONDS), 10),
        (Card.standard(Rank.QUEEN, Suit.CLUBS), 10),
        (Card.standard(Rank.KING, Suit.HEARTS), 10),
        (Card.standard(Rank.ACE, Suit.SPADES), 15),
        (Card.joker(0), 50),
    ],
)
def test_card_points(card: Card, points: int) -> None:
    assert scoring.get_card_points(card) == points


def test_round_score_sums_hand() -> None:
    hand = [Card.standard(Rank.ACE, Suit.SPADES), Card.joker(1), Card.standard(Rank.FOUR, Suit.HEARTS)]
    assert scoring.calculate_round_score(hand) == 69
    assert scoring.calculate_round_score([]) == 0


def test_round_scores_zero_the_winner() -> None:
    players = [
        _player("p1", [Card.standard(Rank.KING, Suit.HEARTS)]),
        _player("p2", [Card.joker(0), Card.standard(Rank.TWO, Suit.CLUBS)]),
    ]

    assert scoring.calculate_round_scores(players, "p1") == {"p1": 0, "p2": 52}
    assert scoring.calculate_round_scores(players, None) == {"p1": 10, "p2": 52}


def test_update_cumulative_score() -> None:
    assert scoring.update_cumulative_score(_player("p1", cumulative=40), 12) == 52


def test_determine_winner_prefers_lowest_then_first_seat() -> None:
    players = [_player("p1", cumulative=30), _player("p2", cumulative=12), _player("p3", cumulative=12)]

    assert scoring.determine_winner(players).id == "p2"
    assert [player.id for player in scoring.final_standings(players)] == ["p2", "p3", "p1"]


def test_determine_winner_requires_players() -> None:
    with pytest.raises(ValueError):
        scoring.determine_winner([])


def test_apply_round_scores_and_summary() -> None:
    players = scoring.apply_round_scores(
        [_player("p1", cumulative=5), _player("p2", cumulative=7)],
        {"p1": 0, "p2": 20},
    )
    state = GameState(game_id="g", players=players, last_round_winner="p1")

    assert [player.round_scores for player in players] == [(0,), (20,)]
    assert [player.cumulative_score for player in players] == [5, 27]

    summary = scoring.round_summary(state)
    assert summary.round_number == 1
    assert summary.winner_id == "p1"
    assert [(line.player_id, line.round_score, line.won_round) for line in summary.scores] == [
        ("p1", 0, True),
        ("p2", 20, False),
    ]


def test_round_summary_requires_a_completed_round() -> None:
    state = GameState(game_id="g", players=(_player("p1"), _player("p2")))
    with pytest.raises(ValueError):
        scoring.round_summary(state)
