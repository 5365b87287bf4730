"""Deck construction and shuffling."""

from __future__ import annotations

import random
from typing import Iterator, Sequence, TypeVar

from .cards import JOKERS_PER_DECK, Card, Rank, Suit

T = TypeVar("T")

MIN_PLAYERS = 2
MAX_PLAYERS = 8


def validate_player_count(player_count: int) -> None:
    if not MIN_PLAYERS <= player_count <= MAX_PLAYERS:
        raise ValueError(
            f"player count must be between {MIN_PLAYERS} and {MAX_PLAYERS}, got {player_count}"
        )


def deck_count(player_count: int) -> int:
    """Return the number of 56-card decks used for ``player_count`` players."""

    validate_player_count(player_count)
    if player_count <= 4:
        return 2
    if player_count <= 6:
        return 3
    return 4


def iter_single_deck(deck_index: int) -> Iterator[Card]:
    """Yield the 52 standard cards and 4 Jokers of one physical deck."""

    for suit in Suit:
        for rank in Rank.standard():
            yield Card.standard(rank, suit, deck_index)
    for variant in range(JOKERS_PER_DECK):
        yield Card.joker(variant, deck_index)


def shuffle(items: Sequence[T], rng: random.Random | None = None) -> list[T]:
    """Return a Fisher-Yates shuffled copy of ``items``."""

    source = rng if rng is not None else random
    shuffled = list(items)
    for i in range(len(shuffled) - 1, 0, -1):
        j = source.randrange(i + 1)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def create_decks(player_count: int, rng: random.Random | None = None) -> tuple[Card, ...]:
    """Build and shuffle every card needed for ``player_count`` players."""

    cards: list[Card] = []
    for deck_index in range(deck_count(player_count)):
        cards.extend(iter_single_deck(deck_index))
    return tuple(shuffle(cards, rng))
