"""Rendering helpers dedicated to the CLI experience."""

from __future__ import annotations

from typing import Mapping, Sequence

from rich import box
from rich.console import RenderableType
from rich.panel import Panel
from rich.table import Table

from ..benchmark import BenchmarkReport
from ..cards import Card, Suit
from ..melds import ROUND_OBJECTIVES
from ..scoring import RoundSummary
from ..state import GamePhase, GameState

_SUIT_COLORS = {
    Suit.SPADES: "cyan",
    Suit.HEARTS: "red",
    Suit.DIAMONDS: "magenta",
    Suit.CLUBS: "green",
}


def format_card(card: Card) -> str:
    """Return a Rich-rendered label for ``card``."""

    if card.suit is None:
        return f"[yellow]{card.label()}[/yellow]"
    color = _SUIT_COLORS[card.suit]
    return f"[{color}]{card.label()}[/{color}]"


def format_cards(cards: Sequence[Card]) -> str:
    if not cards:
        return "-"
    return " ".join(format_card(card) for card in cards)


def render_objectives() -> Table:
    table = Table(title="Round Objectives", box=box.SIMPLE_HEAVY)
    table.add_column("Round", justify="center")
    table.add_column("Triplets", justify="right")
    table.add_column("Sequences", justify="right")
    table.add_column("Cards", justify="right")
    for objective in ROUND_OBJECTIVES:
        table.add_row(
            str(objective.round),
            str(objective.triplets),
            str(objective.sequences),
            str(objective.total_cards),
        )
    return table


def render_round_summary(summary: RoundSummary, names: Mapping[str, str]) -> Table:
    """Return a Rich table describing the outcome of a round."""

    title = f"Round {summary.round_number} Summary"
    if summary.winner_id is None:
        title += " (stalemate)"
    table = Table(title=title, box=box.SIMPLE_HEAVY)
    table.add_column("Player", justify="center")
    table.add_column("Result", justify="center")
    table.add_column("Round", justify="right")
    table.add_column("Total", justify="right")

    for entry in summary.scores:
        label = names.get(entry.player_id, entry.player_id)
        result = "Loss"
        if entry.won_round:
            label = f"[bold green]{label}[/bold green]"
            result = "[bold green]Out[/bold green]"
        table.add_row(label, result, str(entry.round_score), str(entry.cumulative_score))
    return table


def render_match_summary(report: BenchmarkReport) -> Table:
    table = Table(title="Match Summary", box=box.DOUBLE_EDGE)
    table.add_column("Seat", justify="center")
    table.add_column("Games Won", justify="right")
    table.add_column("Win Rate", justify="right")
    table.add_column("Rounds Won", justify="right")
    table.add_column("Mean Score", justify="right")
    table.add_column("Std Dev", justify="right")
    table.add_column("Best", justify="right")

    for seat, rate in zip(report.seats, report.win_rates):
        table.add_row(
            seat.name,
            str(seat.games_won),
            f"{rate:.0%}",
            str(seat.rounds_won),
            f"{seat.mean_score:.1f}",
            f"{seat.std_score:.1f}",
            str(seat.best_score),
        )
    return table


def render_state(state: GameState, *, reveal: bool = True, title: str = "Shanko") -> RenderableType:
    """Return a Rich panel describing the table."""

    table = Table(box=box.ROUNDED, expand=True)
    table.add_column("Player", justify="left", style="bold")
    table.add_column("Role", justify="left")
    table.add_column("Hand", justify="left")
    table.add_column("Melded", justify="left")
    table.add_column("Buys", justify="right")
    table.add_column("Score", justify="right")

    for idx, player in enumerate(state.players):
        name = player.name
        if idx == state.current_player_index and state.phase not in (GamePhase.ROUND_END, GamePhase.GAME_END):
            name = f"[yellow]{name}[/yellow]"
        if player.id == state.winner:
            name = f"[bold green]{name}[/bold green]"
        hand = format_cards(player.hand) if reveal else f"{len(player.hand)} cards"
        melded = "  ".join(format_cards(combo.cards) for combo in player.melded_combinations) or "-"
        table.add_row(
            name,
            player.type.value.title(),
            hand,
            melded,
            str(player.buys_remaining),
            str(player.cumulative_score),
        )

    top = format_card(state.discard_pile[-1]) if state.discard_pile else "-"
    subtitle = (
        f"Round {state.round} | {state.phase.value} | "
        f"Deck {len(state.draw_pile)} | Discard {top} ({len(state.discard_pile)})"
    )
    return Panel(table, title=title, subtitle=subtitle, padding=(0, 1), border_style="cyan")
