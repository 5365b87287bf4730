"""Pure rule predicates for triplets, sequences and round objectives."""

from __future__ import annotations

from typing import Sequence

from .cards import ACE_HIGH_INDEX, Card, Rank, Suit, non_jokers, rank_at, rank_index
from .melds import Combination, CombinationType, RoundObjective, SequenceEnd

__all__ = [
    "MIN_SEQUENCE_LENGTH",
    "TRIPLET_LENGTH",
    "is_valid_triplet",
    "is_valid_sequence",
    "is_valid_combination",
    "sequence_positions",
    "sequence_suit",
    "joker_stand_in",
    "meets_round_objective",
    "can_swap_joker",
    "can_extend_sequence",
]

TRIPLET_LENGTH = 3
MIN_SEQUENCE_LENGTH = 4


def is_valid_triplet(cards: Sequence[Card]) -> bool:
    """Return ``True`` for three cards of one rank, Jokers standing in as wildcards."""

    if len(cards) != TRIPLET_LENGTH:
        return False
    naturals = non_jokers(cards)
    if not naturals:
        return False
    first_rank = naturals[0].rank
    return all(card.rank is first_rank for card in naturals)


def _fits_window(indices: list[int], joker_count: int, size: int) -> bool:
    if len(set(indices)) != len(indices):
        return False
    low, high = min(indices), max(indices)
    span = high - low + 1
    if span != size:
        return False
    return span - len(indices) == joker_count


def _ace_placement(cards: Sequence[Card]) -> bool | None:
    """Return the ``ace_high`` flag of the first layout that fits, or ``None``.

    Aces are tried low (A-2-3-4) first and then high (J-Q-K-A). Every Ace in a
    layout takes the same end, so a single sequence never touches both.
    """

    naturals = non_jokers(cards)
    if not naturals:
        return None
    joker_count = len(cards) - len(naturals)
    has_ace = any(card.rank is Rank.ACE for card in naturals)
    placements = (False, True) if has_ace else (False,)
    for ace_high in placements:
        indices = sorted(rank_index(card.rank, ace_high=ace_high) for card in naturals)
        if _fits_window(indices, joker_count, len(cards)):
            return ace_high
    return None


def sequence_positions(cards: Sequence[Card]) -> list[int] | None:
    """Return sorted rank indices of the natural cards, or ``None`` if no layout fits."""

    ace_high = _ace_placement(cards)
    if ace_high is None:
        return None
    return sorted(rank_index(card.rank, ace_high=ace_high) for card in non_jokers(cards))


def sequence_suit(cards: Sequence[Card]) -> Suit | None:
    naturals = non_jokers(cards)
    if not naturals:
        return None
    return naturals[0].suit


def is_valid_sequence(cards: Sequence[Card]) -> bool:
    """Return ``True`` for four or more same-suit cards of consecutive rank.

    Jokers may only fill gaps between natural cards; the window runs from the
    low Ace to the high Ace so a King can never be followed by a Two.
    """

    if len(cards) < MIN_SEQUENCE_LENGTH:
        return False
    naturals = non_jokers(cards)
    if not naturals:
        return False
    suit = naturals[0].suit
    if any(card.suit is not suit for card in naturals):
        return False
    return sequence_positions(cards) is not None


def is_valid_combination(combination: Combination) -> bool:
    if combination.type is CombinationType.TRIPLET:
        return is_valid_triplet(combination.cards)
    return is_valid_sequence(combination.cards)


def joker_stand_in(combination: Combination, joker_card: Card) -> tuple[Rank, Suit] | None:
    """Return the rank and suit a Joker represents inside a melded sequence."""

    if combination.type is not CombinationType.SEQUENCE or not joker_card.is_joker:
        return None
    cards = list(combination.cards)
    positions = sequence_positions(cards)
    suit = sequence_suit(cards)
    if positions is None or suit is None:
        return None
    joker_slots = [idx for idx, card in enumerate(cards) if card.is_joker]
    if not any(cards[slot].id == joker_card.id for slot in joker_slots):
        return None

    low = positions[0]
    ace_high = ACE_HIGH_INDEX in positions
    in_rank_order = all(
        card.is_joker or rank_index(card.rank, ace_high=ace_high) == low + idx
        for idx, card in enumerate(cards)
    )
    if in_rank_order:
        slot = next(idx for idx in joker_slots if cards[idx].id == joker_card.id)
        return rank_at(low + slot), suit

    # Cards were not laid out in rank order; hand out the gaps by appearance.
    gaps = [pos for pos in range(low, low + len(cards)) if pos not in positions]
    for gap, slot in zip(gaps, joker_slots):
        if cards[slot].id == joker_card.id:
            return rank_at(gap), suit
    return None


def meets_round_objective(combinations: Sequence[Combination], objective: RoundObjective) -> bool:
    """Return ``True`` when ``combinations`` exactly match the round objective."""

    triplets = sum(1 for combo in combinations if combo.type is CombinationType.TRIPLET)
    sequences = sum(1 for combo in combinations if combo.type is CombinationType.SEQUENCE)
    if triplets != objective.triplets or sequences != objective.sequences:
        return False
    total_cards = sum(len(combo.cards) for combo in combinations)
    return total_cards == objective.total_cards


def can_swap_joker(combination: Combination, joker_card: Card, replacement_card: Card) -> bool:
    """Return ``True`` if ``replacement_card`` may take the Joker's place.

    Jokers are locked inside triplets. In a sequence the replacement has to be
    the natural card the Joker stands for.
    """

    if combination.type is not CombinationType.SEQUENCE:
        return False
    slot = next((idx for idx, card in enumerate(combination.cards) if card.id == joker_card.id), None)
    if slot is None or not combination.cards[slot].is_joker:
        return False
    if replacement_card.is_joker:
        return False
    if replacement_card.suit is not sequence_suit(combination.cards):
        return False

    stand_in = joker_stand_in(combination, combination.cards[slot])
    if stand_in is not None and stand_in[0] is not replacement_card.rank:
        return False

    swapped = list(combination.cards)
    swapped[slot] = replacement_card
    return is_valid_sequence(swapped)


def can_extend_sequence(
    sequence: Combination,
    extension_cards: Sequence[Card],
    position: SequenceEnd,
) -> bool:
    """Return ``True`` if ``extension_cards`` can be attached at ``position``.

    The extension has to sit below the sequence for START and above it for
    END; a card that would land inside or on the far side is rejected.
    """

    if sequence.type is not CombinationType.SEQUENCE or not extension_cards:
        return False
    at_start = SequenceEnd(position) is SequenceEnd.START
    if at_start:
        extended = [*extension_cards, *sequence.cards]
    else:
        extended = [*sequence.cards, *extension_cards]
    if not is_valid_sequence(extended):
        return False

    ace_high = _ace_placement(extended)
    added = [rank_index(card.rank, ace_high=bool(ace_high)) for card in non_jokers(extension_cards)]
    existing = [rank_index(card.rank, ace_high=bool(ace_high)) for card in non_jokers(sequence.cards)]
    if not added or not existing:
        return True
    if at_start:
        return max(added) < min(existing)
    return min(added) > max(existing)
