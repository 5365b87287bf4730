from __future__ import annotations

from typer.testing import CliRunner

from shanko.cli.main import app

runner = CliRunner()


def test_objectives_lists_every_round() -> None:
    result = runner.invoke(app, ["objectives"])

    assert result.exit_code == 0
    assert "Round Objectives" in result.output


def test_simulate_single_game_prints_standings() -> None:
    result = runner.invoke(app, ["simulate", "--players", "3", "--seed", "7", "--max-turns", "60"])

    assert result.exit_code == 0, result.output
    assert "Final Standings" in result.output
    assert "Round 7 Summary" in result.output


def test_simulate_many_games_prints_summary() -> None:
    result = runner.invoke(app, ["simulate", "--players", "3", "--games", "2", "--max-turns", "60"])

    assert result.exit_code == 0, result.output
    assert "Match Summary" in result.output


def test_simulate_rejects_too_many_humans() -> None:
    result = runner.invoke(app, ["simulate", "--players", "3", "--humans", "4"])

    assert result.exit_code != 0
