"""Full seven-round games driven through the async flow controller."""

from __future__ import annotations

import random

import pytest

from shanko import flow, rules, scoring
from shanko.ai import FirstCardPlayer, HeuristicPlayer
from shanko.scoring import RoundSummary
from shanko.state import GamePhase


@pytest.mark.asyncio
async def test_full_game_with_mixed_seats() -> None:
    summaries: list[RoundSummary] = []
    state = rules.initialize_game(4, 2)

    final = await flow.play_game(
        state,
        HeuristicPlayer(),
        FirstCardPlayer(),
        rng=random.Random(2024),
        max_turns_per_round=120,
        on_round_end=summaries.append,
    )

    assert final.phase is GamePhase.GAME_END
    assert [summary.round_number for summary in summaries] == list(range(1, 8))
    for player in final.players:
        assert len(player.round_scores) == 7
        assert player.cumulative_score == sum(player.round_scores)
        assert all(score >= 0 for score in player.round_scores)

    lowest = min(player.cumulative_score for player in final.players)
    expected = next(player for player in final.players if player.cumulative_score == lowest)
    assert final.winner == expected.id
    assert scoring.determine_winner(final.players).id == final.winner


@pytest.mark.asyncio
async def test_round_winners_score_zero() -> None:
    summaries: list[RoundSummary] = []

    await flow.play_game(
        rules.initialize_game(3, 0),
        HeuristicPlayer(),
        FirstCardPlayer(),
        rng=random.Random(99),
        max_turns_per_round=150,
        on_round_end=summaries.append,
    )

    assert len(summaries) == 7
    for summary in summaries:
        winners = [line for line in summary.scores if line.won_round]
        if summary.winner_id is None:
            assert winners == []
        else:
            assert [line.player_id for line in winners] == [summary.winner_id]
            assert winners[0].round_score == 0


@pytest.mark.asyncio
async def test_two_player_game_never_opens_a_buy_window() -> None:
    seen_buy_window = False
    state = flow.initialize_round(rules.initialize_game(2, 0), random.Random(8))
    decider = HeuristicPlayer()

    for _ in range(200):
        if state.phase is not GamePhase.DRAW:
            break
        state = await flow.execute_ai_turn(state, decider)
        seen_buy_window = seen_buy_window or state.phase is GamePhase.BUY_WINDOW

    assert not seen_buy_window
    assert all(player.buys_remaining == 3 for player in state.players if not player.has_melded)
    with pytest.raises(rules.BuyingDisabledError):
        rules.buy_card(state, "p2")
