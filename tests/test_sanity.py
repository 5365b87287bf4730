"""Sanity tests ensuring the package imports correctly."""

from __future__ import annotations

import importlib

import pytest


@pytest.mark.parametrize(
    "module_name",
    [
        "shanko",
        "shanko.cards",
        "shanko.deck",
        "shanko.validation",
        "shanko.scoring",
        "shanko.state",
        "shanko.melds",
        "shanko.evaluation",
        "shanko.scoreboard",
        "shanko.rules",
        "shanko.actions",
        "shanko.flow",
        "shanko.ai",
        "shanko.serialization",
        "shanko.benchmark",
        "shanko.cli.main",
    ],
)
def test_modules_import(module_name: str) -> None:
    """Ensure all foundational modules can be imported."""

    assert importlib.import_module(module_name)
