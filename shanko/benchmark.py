"""Batch self-play harness for the Shanko engine."""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass

import numpy as np

from . import deck, flow, rules
from .ai import DecisionMaker, FirstCardPlayer, HeuristicPlayer
from .scoreboard import MatchHistory
from .state import GameState

__all__ = ["BenchmarkConfig", "SeatStatistics", "BenchmarkReport", "play_match", "run_benchmark"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BenchmarkConfig:
    """Settings for a batch of simulated games."""

    games: int = 10
    players: int = 4
    humans: int = 0
    seed: int = 123
    max_turns_per_round: int = 500

    def __post_init__(self) -> None:
        if self.games <= 0:
            raise ValueError("games must be positive")
        deck.validate_player_count(self.players)
        if not 0 <= self.humans <= self.players:
            raise ValueError("humans must be between 0 and the player count")
        if self.max_turns_per_round <= 0:
            raise ValueError("max_turns_per_round must be positive")


@dataclass(frozen=True, slots=True)
class SeatStatistics:
    """Aggregate statistics collected for a single seat across a benchmark."""

    player_id: str
    name: str
    games_won: int
    rounds_won: int
    mean_score: float
    std_score: float
    best_score: int


@dataclass(frozen=True, slots=True, eq=False)
class BenchmarkReport:
    """Final scores per game and per-seat summaries of a benchmark run."""

    config: BenchmarkConfig
    final_scores: np.ndarray
    seats: tuple[SeatStatistics, ...]
    histories: tuple[MatchHistory, ...]

    @property
    def win_rates(self) -> np.ndarray:
        wins = np.array([seat.games_won for seat in self.seats], dtype=float)
        return wins / self.config.games

    @property
    def stalemate_rounds(self) -> int:
        return sum(history.stalemates for history in self.histories)


def play_match(
    players: int,
    humans: int,
    rng: random.Random,
    *,
    decider: DecisionMaker | None = None,
    human_policy: DecisionMaker | None = None,
    max_turns_per_round: int = 500,
) -> tuple[GameState, MatchHistory]:
    """Play one full game and return its final state with the round history."""

    state = rules.initialize_game(players, humans)
    history = MatchHistory(player_ids=[player.id for player in state.players])
    final = asyncio.run(
        flow.play_game(
            state,
            decider if decider is not None else HeuristicPlayer(),
            human_policy if human_policy is not None else FirstCardPlayer(),
            rng=rng,
            max_turns_per_round=max_turns_per_round,
            on_round_end=history.record,
        )
    )
    return final, history


def run_benchmark(
    config: BenchmarkConfig,
    *,
    decider: DecisionMaker | None = None,
    human_policy: DecisionMaker | None = None,
) -> BenchmarkReport:
    """Play ``config.games`` seeded games and aggregate the results."""

    rng = random.Random(config.seed)
    scores = np.zeros((config.games, config.players), dtype=np.int64)
    winners = np.zeros(config.games, dtype=np.int64)
    histories: list[MatchHistory] = []
    final = None

    for game in range(config.games):
        final, history = play_match(
            config.players,
            config.humans,
            rng,
            decider=decider,
            human_policy=human_policy,
            max_turns_per_round=config.max_turns_per_round,
        )
        histories.append(history)
        scores[game] = [player.cumulative_score for player in final.players]
        winner_index = final.player_index(final.winner) if final.winner is not None else None
        if winner_index is None:
            raise RuntimeError("benchmark game finished without a winner")
        winners[game] = winner_index
        logger.debug("game %d won by %s", game + 1, final.winner)

    assert final is not None
    wins = np.bincount(winners, minlength=config.players)
    round_wins = np.zeros(config.players, dtype=np.int64)
    for history in histories:
        round_wins += [total.rounds_won for total in history.totals()]

    means = scores.mean(axis=0)
    stds = scores.std(axis=0)
    bests = scores.min(axis=0)
    seats = tuple(
        SeatStatistics(
            player_id=player.id,
            name=player.name,
            games_won=int(wins[idx]),
            rounds_won=int(round_wins[idx]),
            mean_score=float(means[idx]),
            std_score=float(stds[idx]),
            best_score=int(bests[idx]),
        )
        for idx, player in enumerate(final.players)
    )
    return BenchmarkReport(config=config, final_scores=scores, seats=seats, histories=tuple(histories))
