"""Card values, round scoring and winner determination.

Scoring rules:

* number cards (2-10) are worth their face value
* Jack, Queen and King are worth 10
* an Ace is worth 15
* a Joker is worth 50
* the player who goes out scores 0 for the round
* the lowest cumulative score after seven rounds wins
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Final, Iterable, Mapping, Sequence

from .cards import Card, Rank

if TYPE_CHECKING:
    from .state import GameState, Player

__all__ = [
    "CARD_POINTS",
    "PlayerRoundScore",
    "RoundSummary",
    "get_card_points",
    "calculate_round_score",
    "calculate_round_scores",
    "update_cumulative_score",
    "determine_winner",
    "final_standings",
    "round_summary",
]

CARD_POINTS: Final[dict[Rank, int]] = {
    Rank.TWO: 2,
    Rank.THREE: 3,
    Rank.FOUR: 4,
    Rank.FIVE: 5,
    Rank.SIX: 6,
    Rank.SEVEN: 7,
    Rank.EIGHT: 8,
    Rank.NINE: 9,
    Rank.TEN: 10,
    Rank.JACK: 10,
    Rank.QUEEN: 10,
    Rank.KING: 10,
    Rank.ACE: 15,
    Rank.JOKER: 50,
}


@dataclass(frozen=True, slots=True)
class PlayerRoundScore:
    """Per-player scoring line captured at the end of a round."""

    player_id: str
    round_score: int
    cumulative_score: int
    won_round: bool


@dataclass(frozen=True, slots=True)
class RoundSummary:
    """Summary of a single completed round."""

    round_number: int
    winner_id: str | None
    scores: tuple[PlayerRoundScore, ...]


def get_card_points(card: Card) -> int:
    """Return the point value of ``card``."""

    try:
        return CARD_POINTS[card.rank]
    except KeyError:
        raise ValueError(f"unknown card rank: {card.rank!r}") from None


def calculate_round_score(hand: Iterable[Card]) -> int:
    """Return the deadwood total for the cards left in ``hand``."""

    return sum(get_card_points(card) for card in hand)


def calculate_round_scores(players: Sequence["Player"], winner_player_id: str | None) -> dict[str, int]:
    """Return each player's round score; the round winner scores zero.

    ``winner_player_id`` is ``None`` for a stalemate, where every hand counts.
    """

    scores: dict[str, int] = {}
    for player in players:
        if player.id == winner_player_id:
            scores[player.id] = 0
        else:
            scores[player.id] = calculate_round_score(player.hand)
    return scores


def update_cumulative_score(player: "Player", round_score: int) -> int:
    return player.cumulative_score + round_score


def determine_winner(players: Sequence["Player"]) -> "Player":
    """Return the player with the lowest cumulative score.

    Ties go to whoever is seated first, never to a random pick.
    """

    if not players:
        raise ValueError("cannot determine a winner without players")
    winner = players[0]
    for player in players[1:]:
        if player.cumulative_score < winner.cumulative_score:
            winner = player
    return winner


def final_standings(players: Sequence["Player"]) -> list["Player"]:
    """Return players ordered by cumulative score, seat order breaking ties."""

    return sorted(players, key=lambda player: player.cumulative_score)


def apply_round_scores(players: Sequence["Player"], scores: Mapping[str, int]) -> tuple["Player", ...]:
    """Return copies of ``players`` with ``scores`` folded into their totals."""

    updated = []
    for player in players:
        round_score = scores.get(player.id, 0)
        updated.append(
            replace(
                player,
                cumulative_score=update_cumulative_score(player, round_score),
                round_scores=player.round_scores + (round_score,),
            )
        )
    return tuple(updated)


def round_summary(state: "GameState") -> RoundSummary:
    """Describe the most recently completed round of ``state``."""

    played = {len(player.round_scores) for player in state.players}
    if len(played) != 1 or 0 in played:
        raise ValueError("state has no completed round to summarise")
    round_number = played.pop()
    lines = tuple(
        PlayerRoundScore(
            player_id=player.id,
            round_score=player.round_scores[-1],
            cumulative_score=player.cumulative_score,
            won_round=player.id == state.last_round_winner,
        )
        for player in state.players
    )
    return RoundSummary(round_number=round_number, winner_id=state.last_round_winner, scores=lines)
