"""Top-level package for the Shanko rules engine."""

from . import actions, cards, deck, flow, melds, rules, scoring, state, validation

__all__ = [
    "actions",
    "cards",
    "deck",
    "flow",
    "melds",
    "rules",
    "scoring",
    "state",
    "validation",
]
