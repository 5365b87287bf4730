"""Combination and round objective data structures for Shanko."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from enum import Enum
from typing import Final, Iterable, Sequence

from .cards import Card


class CombinationType(str, Enum):
    """Kinds of combinations that can be melded."""

    TRIPLET = "TRIPLET"
    SEQUENCE = "SEQUENCE"


class SequenceEnd(str, Enum):
    """Where extension cards are attached to a sequence."""

    START = "START"
    END = "END"


@dataclass(frozen=True, slots=True)
class Combination:
    """A triplet or sequence owned by a player."""

    id: str
    type: CombinationType
    cards: tuple[Card, ...]
    owner_id: str

    @classmethod
    def create(cls, type: CombinationType, cards: Iterable[Card], owner_id: str = "") -> "Combination":
        """Return a combination with a freshly minted identifier."""

        return cls(id=uuid.uuid4().hex, type=type, cards=tuple(cards), owner_id=owner_id)

    @property
    def is_sequence(self) -> bool:
        return self.type is CombinationType.SEQUENCE

    def card_ids(self) -> set[str]:
        return {card.id for card in self.cards}

    def with_cards(self, cards: Iterable[Card]) -> "Combination":
        return replace(self, cards=tuple(cards))

    def owned_by(self, owner_id: str) -> "Combination":
        return replace(self, owner_id=owner_id)


@dataclass(frozen=True, slots=True)
class RoundObjective:
    """The fixed meld requirement for one round."""

    round: int
    triplets: int
    sequences: int
    total_cards: int


ROUND_OBJECTIVES: Final[tuple[RoundObjective, ...]] = (
    RoundObjective(round=1, triplets=2, sequences=0, total_cards=6),
    RoundObjective(round=2, triplets=1, sequences=1, total_cards=7),
    RoundObjective(round=3, triplets=0, sequences=2, total_cards=8),
    RoundObjective(round=4, triplets=3, sequences=0, total_cards=9),
    RoundObjective(round=5, triplets=2, sequences=1, total_cards=10),
    RoundObjective(round=6, triplets=1, sequences=2, total_cards=11),
    RoundObjective(round=7, triplets=0, sequences=3, total_cards=12),
)
TOTAL_ROUNDS: Final[int] = len(ROUND_OBJECTIVES)


def objective_for(round_number: int) -> RoundObjective:
    """Return the objective for the 1-based ``round_number``."""

    if not 1 <= round_number <= TOTAL_ROUNDS:
        raise ValueError(f"round must be between 1 and {TOTAL_ROUNDS}, got {round_number}")
    return ROUND_OBJECTIVES[round_number - 1]


def melded_card_ids(combinations: Sequence[Combination]) -> list[str]:
    """Return every card id used by ``combinations`` in order, duplicates kept."""

    return [card.id for combination in combinations for card in combination.cards]


def melded_card_count(combinations: Sequence[Combination]) -> int:
    return sum(len(combination.cards) for combination in combinations)
