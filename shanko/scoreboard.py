"""Helpers for tracking multi-round Shanko match results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from .scoring import RoundSummary

__all__ = ["PlayerMatchTotal", "MatchHistory"]


@dataclass(frozen=True, slots=True)
class PlayerMatchTotal:
    """Aggregate match totals accumulated across all recorded rounds."""

    player_id: str
    rounds_won: int
    points: int


@dataclass(slots=True)
class MatchHistory:
    """Mutable tracker that accumulates round summaries for a match."""

    player_ids: Sequence[str]
    rounds: list[RoundSummary] = field(default_factory=list)
    _wins: dict[str, int] = field(init=False, repr=False)
    _points: dict[str, int] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if not self.player_ids:
            raise ValueError("player_ids must not be empty")
        self.player_ids = tuple(self.player_ids)
        self._wins = {player_id: 0 for player_id in self.player_ids}
        self._points = {player_id: 0 for player_id in self.player_ids}

    def record(self, summary: RoundSummary) -> None:
        """Record ``summary`` and update cumulative totals."""

        if len(summary.scores) != len(self.player_ids):
            raise ValueError("score count does not match number of players")
        for score in summary.scores:
            if score.player_id not in self._points:
                raise ValueError(f"unknown player {score.player_id!r}")
        self.rounds.append(summary)
        for score in summary.scores:
            self._points[score.player_id] += score.round_score
            if score.won_round:
                self._wins[score.player_id] += 1

    @property
    def stalemates(self) -> int:
        return sum(1 for summary in self.rounds if summary.winner_id is None)

    def totals(self) -> list[PlayerMatchTotal]:
        """Return the cumulative totals for each player in seating order."""

        return [
            PlayerMatchTotal(
                player_id=player_id,
                rounds_won=self._wins[player_id],
                points=self._points[player_id],
            )
            for player_id in self.player_ids
        ]
