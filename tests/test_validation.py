"""Tests covering the combination validation rules."""

from __future__ import annotations

from itertools import combinations

import pytest

from shanko import validation
from shanko.cards import Card, Rank, Suit
from shanko.melds import Combination, CombinationType, SequenceEnd, objective_for

_SUITS = {suit.letter: suit for suit in Suit}


def _c(code: str, deck: int = 0) -> Card:
    return Card.standard(Rank(code[:-1]), _SUITS[code[-1]], deck)


def _j(variant: int = 0, deck: int = 0) -> Card:
    return Card.joker(variant, deck)


def _cards(*codes: str) -> list[Card]:
    jokers = 0
    cards = []
    for code in codes:
        if code == "*":
            cards.append(_j(jokers))
            jokers += 1
        else:
            cards.append(_c(code))
    return cards


def _seq(*codes: str) -> Combination:
    return Combination.create(CombinationType.SEQUENCE, _cards(*codes), "p1")


def _trip(*codes: str) -> Combination:
    return Combination.create(CombinationType.TRIPLET, _cards(*codes), "p1")


@pytest.mark.parametrize(
    ("codes", "expected"),
    [
        (("5H", "5D", "5S"), True),
        (("5H", "5D", "*"), True),
        (("5H", "*", "*"), True),
        (("*", "*", "*"), False),
        (("5H", "5D"), False),
        (("5H", "5D", "6S"), False),
        (("5H", "5D", "5S", "5C"), False),
    ],
)
def test_triplet_validity(codes: tuple[str, ...], expected: bool) -> None:
    assert validation.is_valid_triplet(_cards(*codes)) is expected


@pytest.mark.parametrize(
    ("codes", "expected"),
    [
        (("5H", "6H", "7H", "8H"), True),
        (("8H", "5H", "7H", "6H"), True),
        (("5H", "*", "7H", "8H"), True),
        (("5H", "*", "*", "8H"), True),
        (("AH", "2H", "3H", "4H"), True),
        (("JH", "QH", "KH", "AH"), True),
        (("JH", "*", "KH", "AH"), True),
        (("5H", "6H", "7H"), False),
        (("5H", "6D", "7H", "8H"), False),
        (("KH", "AH", "2H", "3H"), False),
        (("QH", "KH", "AH", "2H"), False),
        (("5H", "6H", "7H", "*"), False),
        (("*", "5H", "6H", "7H"), False),
        (("5H", "6H", "8H", "9H"), False),
        (("*", "*", "*", "*"), False),
    ],
)
def test_sequence_validity(codes: tuple[str, ...], expected: bool) -> None:
    assert validation.is_valid_sequence(_cards(*codes)) is expected


_LOW_INDEX = {rank: idx for idx, rank in enumerate(["A", "2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K"])}


def _expected_sequence(ranks: tuple[str, ...], joker_count: int) -> bool:
    size = len(ranks) + joker_count
    if size < 4 or not ranks:
        return False
    for ace_index in (0, 13):
        indices = [ace_index if rank == "A" else _LOW_INDEX[rank] for rank in ranks]
        if len(set(indices)) == len(indices) and max(indices) - min(indices) + 1 == size:
            return True
    return False


def test_sequence_validity_over_every_single_suit_hand() -> None:
    mismatches = []
    for size in range(len(_LOW_INDEX) + 1):
        for ranks in combinations(_LOW_INDEX, size):
            naturals = [_c(f"{rank}S") for rank in ranks]
            for joker_count in range(5):
                cards = naturals + [_j(variant) for variant in range(joker_count)]
                if validation.is_valid_sequence(cards) != _expected_sequence(ranks, joker_count):
                    mismatches.append((ranks, joker_count))

    assert mismatches == []


def test_full_suit_run_from_low_ace_is_valid() -> None:
    codes = ["AS", "2S", "3S", "4S", "5S", "6S", "7S", "8S", "9S", "10S", "JS", "QS", "KS"]
    assert validation.is_valid_sequence(_cards(*codes))


def test_sequence_cannot_use_both_aces() -> None:
    codes = ["AS", "2S", "3S", "4S", "5S", "6S", "7S", "8S", "9S", "10S", "JS", "QS", "KS"]
    cards = [*_cards(*codes), _c("AS", deck=1)]
    assert not validation.is_valid_sequence(cards)


def test_sequence_rejects_duplicate_ranks() -> None:
    cards = [_c("5H"), _c("5H", deck=1), _c("6H"), _c("7H")]
    assert not validation.is_valid_sequence(cards)


def test_meets_round_objective_requires_exact_counts() -> None:
    first = objective_for(1)
    two_triplets = [_trip("5H", "5D", "5S"), _trip("9C", "9D", "*")]

    assert validation.meets_round_objective(two_triplets, first)
    assert not validation.meets_round_objective(two_triplets[:1], first)
    assert not validation.meets_round_objective([*two_triplets, _seq("2H", "3H", "4H", "5H")], first)
    assert validation.meets_round_objective([two_triplets[0], _seq("2H", "3H", "4H", "5H")], objective_for(2))


def test_round_objective_rejects_oversized_combinations() -> None:
    combos = [_trip("5H", "5D", "5S"), _seq("2H", "3H", "4H", "5H", "6H")]
    assert not validation.meets_round_objective(combos, objective_for(2))


def test_joker_stand_in_reports_gap_card() -> None:
    sequence = _seq("5H", "*", "7H", "8H")
    joker = sequence.cards[1]

    assert validation.joker_stand_in(sequence, joker) == (Rank.SIX, Suit.HEARTS)
    assert validation.joker_stand_in(_trip("5H", "5D", "*"), _j(0)) is None


def test_joker_stand_in_for_unordered_layout() -> None:
    sequence = Combination.create(CombinationType.SEQUENCE, [_c("8H"), _j(0), _c("5H"), _c("7H")], "p1")
    assert validation.joker_stand_in(sequence, _j(0)) == (Rank.SIX, Suit.HEARTS)


def test_can_swap_joker_requires_the_represented_card() -> None:
    sequence = _seq("5H", "*", "7H", "8H")
    joker = sequence.cards[1]

    assert validation.can_swap_joker(sequence, joker, _c("6H"))
    assert validation.can_swap_joker(sequence, joker, _c("6H", deck=1))
    assert not validation.can_swap_joker(sequence, joker, _c("6D"))
    assert not validation.can_swap_joker(sequence, joker, _c("9H"))
    assert not validation.can_swap_joker(sequence, joker, _j(3))


def test_can_swap_joker_rejects_triplets_and_missing_jokers() -> None:
    triplet = _trip("5H", "5D", "*")
    assert not validation.can_swap_joker(triplet, triplet.cards[2], _c("5S"))

    sequence = _seq("5H", "*", "7H", "8H")
    assert not validation.can_swap_joker(sequence, _j(3), _c("6H"))
    assert not validation.can_swap_joker(sequence, sequence.cards[0], _c("6H"))


@pytest.mark.parametrize(
    ("extension", "position", "expected"),
    [
        (("9H",), SequenceEnd.END, True),
        (("4H",), SequenceEnd.START, True),
        (("3H", "4H"), SequenceEnd.START, True),
        (("9H",), SequenceEnd.START, False),
        (("4H",), SequenceEnd.END, False),
        (("9D",), SequenceEnd.END, False),
        (("10H",), SequenceEnd.END, False),
        (("*",), SequenceEnd.END, False),
        (("*", "10H"), SequenceEnd.END, True),
    ],
)
def test_can_extend_sequence(extension: tuple[str, ...], position: SequenceEnd, expected: bool) -> None:
    sequence = _seq("5H", "6H", "7H", "8H")
    cards = _cards(*extension)
    assert validation.can_extend_sequence(sequence, cards, position) is expected


def test_can_extend_sequence_rejects_triplets_and_empty_extensions() -> None:
    assert not validation.can_extend_sequence(_trip("5H", "5D", "5S"), [_c("5C")], SequenceEnd.END)
    assert not validation.can_extend_sequence(_seq("5H", "6H", "7H", "8H"), [], SequenceEnd.END)


def test_can_extend_high_ace_onto_king() -> None:
    sequence = _seq("10S", "JS", "QS", "KS")
    assert validation.can_extend_sequence(sequence, [_c("AS")], SequenceEnd.END)
    assert not validation.can_extend_sequence(sequence, [_c("2S")], SequenceEnd.END)
