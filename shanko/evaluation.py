"""Hand evaluation helpers for the reference heuristic player."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from itertools import combinations as choose
from typing import Iterable, Sequence

from . import scoring, validation
from .cards import ACE_HIGH_INDEX, Card, Rank, Suit, jokers, non_jokers, rank_index
from .melds import Combination, CombinationType, RoundObjective

__all__ = [
    "MeldCandidate",
    "HandEvaluation",
    "triplet_candidates",
    "sequence_candidates",
    "find_objective_meld",
    "evaluate_hand",
    "keep_value",
]

JOKER_KEEP_VALUE = 100.0


@dataclass(frozen=True, slots=True)
class MeldCandidate:
    """Natural cards that form a minimal combination once Jokers fill the gaps.

    ``slots`` lists the rank index of every position for sequences, with
    ``None`` marking a Joker slot. Triplets leave it empty.
    """

    type: CombinationType
    naturals: tuple[Card, ...]
    jokers_needed: int
    slots: tuple[int | None, ...] = ()

    @property
    def card_ids(self) -> frozenset[str]:
        return frozenset(card.id for card in self.naturals)

    def build(self, joker_pool: list[Card], owner_id: str = "") -> Combination:
        """Materialise the candidate, taking Jokers off the front of ``joker_pool``."""

        if self.type is CombinationType.TRIPLET:
            cards = [*self.naturals, *(joker_pool.pop(0) for _ in range(self.jokers_needed))]
            return Combination.create(CombinationType.TRIPLET, cards, owner_id)
        naturals = iter(self.naturals)
        cards = [next(naturals) if slot is not None else joker_pool.pop(0) for slot in self.slots]
        return Combination.create(CombinationType.SEQUENCE, cards, owner_id)


@dataclass(frozen=True, slots=True)
class HandEvaluation:
    """Structural summary of a hand."""

    triplets: int
    sequences: int
    pairs: int
    near_sequences: int
    jokers: int
    deadwood_points: int


def triplet_candidates(cards: Iterable[Card]) -> list[MeldCandidate]:
    """Return every three-card triplet the naturals in ``cards`` can anchor."""

    by_rank: dict[Rank, list[Card]] = defaultdict(list)
    for card in non_jokers(cards):
        by_rank[card.rank].append(card)

    found: list[MeldCandidate] = []
    for group in by_rank.values():
        for size in (3, 2, 1):
            for naturals in choose(group, size):
                found.append(
                    MeldCandidate(CombinationType.TRIPLET, tuple(naturals), validation.TRIPLET_LENGTH - size)
                )
    return found


def _index_by_suit(cards: Iterable[Card]) -> dict[Suit, dict[int, Card]]:
    positions: dict[Suit, dict[int, Card]] = defaultdict(dict)
    for card in non_jokers(cards):
        assert card.suit is not None
        if card.rank is Rank.ACE:
            positions[card.suit].setdefault(rank_index(card.rank), card)
            positions[card.suit].setdefault(rank_index(card.rank, ace_high=True), card)
        else:
            positions[card.suit].setdefault(rank_index(card.rank), card)
    return positions


def sequence_candidates(
    cards: Iterable[Card],
    length: int = validation.MIN_SEQUENCE_LENGTH,
) -> list[MeldCandidate]:
    """Return every ``length``-card window with natural cards at both ends."""

    found: list[MeldCandidate] = []
    for by_index in _index_by_suit(cards).values():
        for low in range(0, ACE_HIGH_INDEX - length + 2):
            high = low + length - 1
            if low not in by_index or high not in by_index:
                continue
            slots = tuple(idx if idx in by_index else None for idx in range(low, high + 1))
            naturals = tuple(by_index[idx] for idx in slots if idx is not None)
            if len({card.id for card in naturals}) != len(naturals):
                continue
            found.append(
                MeldCandidate(CombinationType.SEQUENCE, naturals, slots.count(None), slots)
            )
    return found


def _choose_disjoint(
    groups: Sequence[tuple[list[MeldCandidate], int]],
    used: frozenset[str],
    jokers_left: int,
) -> list[MeldCandidate] | None:
    if not groups:
        return []
    (options, count), rest = groups[0], groups[1:]

    def pick(start: int, remaining: int, taken: frozenset[str], spare: int) -> list[MeldCandidate] | None:
        if remaining == 0:
            return _choose_disjoint(rest, taken, spare)
        for idx in range(start, len(options)):
            candidate = options[idx]
            if candidate.jokers_needed > spare or taken & candidate.card_ids:
                continue
            tail = pick(idx + 1, remaining - 1, taken | candidate.card_ids, spare - candidate.jokers_needed)
            if tail is not None:
                return [candidate, *tail]
        return None

    return pick(0, count, used, jokers_left)


def _joker_need(candidate: MeldCandidate) -> int:
    return candidate.jokers_needed


def find_objective_meld(
    hand: Sequence[Card],
    objective: RoundObjective,
    owner_id: str = "",
) -> tuple[Combination, ...] | None:
    """Search ``hand`` for combinations that exactly meet ``objective``.

    Candidates needing fewer Jokers are tried first. Returns ``None`` when the
    hand cannot satisfy the objective.
    """

    joker_pool = jokers(hand)
    groups = [
        (sorted(triplet_candidates(hand), key=_joker_need), objective.triplets),
        (sorted(sequence_candidates(hand), key=_joker_need), objective.sequences),
    ]
    chosen = _choose_disjoint(groups, frozenset(), len(joker_pool))
    if chosen is None:
        return None
    built = tuple(candidate.build(joker_pool, owner_id) for candidate in chosen)
    if not validation.meets_round_objective(built, objective):
        return None
    return built


def _runs(indices: set[int]) -> list[tuple[int, int]]:
    runs: list[tuple[int, int]] = []
    for idx in sorted(indices):
        if runs and idx == runs[-1][1] + 1:
            runs[-1] = (runs[-1][0], idx)
        else:
            runs.append((idx, idx))
    return runs


def evaluate_hand(hand: Sequence[Card]) -> HandEvaluation:
    """Count complete and partial structures in ``hand``.

    Jokers are never deadwood here; natural cards outside a complete triplet
    group or a run of four are.
    """

    naturals = non_jokers(hand)
    by_rank: dict[Rank, list[Card]] = defaultdict(list)
    for card in naturals:
        by_rank[card.rank].append(card)

    kept: set[str] = set()
    triplets = pairs = 0
    for group in by_rank.values():
        if len(group) >= validation.TRIPLET_LENGTH:
            triplets += len(group) // validation.TRIPLET_LENGTH
            kept.update(card.id for card in group)
        elif len(group) == 2:
            pairs += 1

    sequences = near = 0
    for by_index in _index_by_suit(naturals).values():
        for low, high in _runs(set(by_index)):
            span = high - low + 1
            if span >= validation.MIN_SEQUENCE_LENGTH:
                sequences += 1
                kept.update(by_index[idx].id for idx in range(low, high + 1))
            elif span >= 2:
                near += 1

    deadwood = scoring.calculate_round_score(card for card in naturals if card.id not in kept)
    return HandEvaluation(
        triplets=triplets,
        sequences=sequences,
        pairs=pairs,
        near_sequences=near,
        jokers=len(hand) - len(naturals),
        deadwood_points=deadwood,
    )


def keep_value(card: Card, hand: Sequence[Card]) -> float:
    """Return a scalar that grows with the desire to keep ``card`` in ``hand``."""

    if card.is_joker:
        return JOKER_KEEP_VALUE
    others = [other for other in non_jokers(hand) if other.id != card.id]
    value = 3.0 * sum(1 for other in others if other.rank is card.rank)

    placements = (False, True) if card.rank is Rank.ACE else (False,)
    for ace_high in placements:
        position = rank_index(card.rank, ace_high=ace_high)
        for other in others:
            if other.suit is not card.suit or other.rank is card.rank:
                continue
            distance = min(
                abs(rank_index(other.rank, ace_high=flag) - position)
                for flag in ((False, True) if other.rank is Rank.ACE else (False,))
            )
            if distance == 1:
                value += 2.0
            elif distance == 2:
                value += 1.0
    return value - 0.05 * scoring.get_card_points(card)
