"""Typer entry-point wiring for the Shanko CLI."""

from __future__ import annotations

import logging
import random
from typing import Sequence

import typer
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .. import benchmark, flow
from ..state import Player
from .render import render_match_summary, render_objectives, render_round_summary, render_state

app = typer.Typer(add_completion=False, rich_markup_mode="rich")
console = Console()


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _render_standings(standings: Sequence[Player], winner_id: str | None) -> Table:
    """Return a Rich table ranking players by cumulative score."""

    table = Table(title="Final Standings", box=box.DOUBLE_EDGE)
    table.add_column("Place", justify="center")
    table.add_column("Player", justify="left")
    table.add_column("Role", justify="center")
    table.add_column("Rounds", justify="left")
    table.add_column("Total", justify="right")

    for place, player in enumerate(standings, start=1):
        label = player.name
        if player.id == winner_id:
            label = f"[bold green]{label}[/bold green]"
        table.add_row(
            str(place),
            label,
            player.type.value.title(),
            " ".join(str(score) for score in player.round_scores),
            str(player.cumulative_score),
        )
    return table


@app.command()
def simulate(
    players: int = typer.Option(4, min=2, max=8, help="Number of seated players."),
    humans: int = typer.Option(0, min=0, help="Seats played by the deterministic first-card policy."),
    seed: int = typer.Option(123, help="Random seed for reproducible games."),
    games: int = typer.Option(1, min=1, help="Number of full games to play."),
    max_turns: int = typer.Option(500, min=1, help="Turns per round before it is called a stalemate."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log engine events at DEBUG level."),
) -> None:
    """Play full seven-round games with the reference AI and print the results."""

    _setup_logging(verbose)
    try:
        config = benchmark.BenchmarkConfig(
            games=games,
            players=players,
            humans=humans,
            seed=seed,
            max_turns_per_round=max_turns,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    if games == 1:
        final, history = benchmark.play_match(
            players,
            humans,
            random.Random(seed),
            max_turns_per_round=max_turns,
        )
        names = {player.id: player.name for player in final.players}
        for summary in history.rounds:
            console.print(render_round_summary(summary, names))
        console.print(render_state(final, title="Final Table"))
        console.print(_render_standings(flow.get_final_standings(final), final.winner))
        winner = flow.get_winner(final)
        if winner is not None:
            console.print(f"[bold green]{winner.name} wins with {winner.cumulative_score} points.[/bold green]")
        return

    report = benchmark.run_benchmark(config)
    console.print(render_match_summary(report))
    if report.stalemate_rounds:
        console.print(f"[cyan]{report.stalemate_rounds} round(s) ended in a stalemate.[/cyan]")


@app.command()
def objectives() -> None:
    """Print the meld objective for each of the seven rounds."""

    console.print(render_objectives())


def main() -> None:
    """Entry-point for the ``shanko`` console script."""

    app()


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    main()
