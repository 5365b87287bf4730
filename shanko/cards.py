"""Card abstractions and helpers for Shanko."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Final, Iterable, Sequence


class Suit(str, Enum):
    """Enumeration of the four suits in a Shanko deck."""

    HEARTS = "HEARTS"
    DIAMONDS = "DIAMONDS"
    CLUBS = "CLUBS"
    SPADES = "SPADES"

    @property
    def letter(self) -> str:
        return self.value[0]

    @property
    def symbol(self) -> str:
        return _SUIT_SYMBOLS[self]


class Rank(str, Enum):
    """Enumeration of card ranks, Joker included."""

    TWO = "2"
    THREE = "3"
    FOUR = "4"
    FIVE = "5"
    SIX = "6"
    SEVEN = "7"
    EIGHT = "8"
    NINE = "9"
    TEN = "10"
    JACK = "J"
    QUEEN = "Q"
    KING = "K"
    ACE = "A"
    JOKER = "JOKER"

    @classmethod
    def standard(cls) -> tuple["Rank", ...]:
        """Return the thirteen non-Joker ranks in dealing order."""

        return tuple(rank for rank in cls if rank is not cls.JOKER)


_SUIT_SYMBOLS: Final[dict[Suit, str]] = {
    Suit.HEARTS: "♥",
    Suit.DIAMONDS: "♦",
    Suit.CLUBS: "♣",
    Suit.SPADES: "♠",
}

# Extended order used for sequences: the Ace sits at both ends.
RANK_ORDER: Final[tuple[Rank, ...]] = (
    Rank.ACE,
    Rank.TWO,
    Rank.THREE,
    Rank.FOUR,
    Rank.FIVE,
    Rank.SIX,
    Rank.SEVEN,
    Rank.EIGHT,
    Rank.NINE,
    Rank.TEN,
    Rank.JACK,
    Rank.QUEEN,
    Rank.KING,
    Rank.ACE,
)
ACE_LOW_INDEX: Final[int] = 0
ACE_HIGH_INDEX: Final[int] = len(RANK_ORDER) - 1
JOKERS_PER_DECK: Final[int] = 4
CARDS_PER_DECK: Final[int] = len(Suit) * 13 + JOKERS_PER_DECK


def rank_index(rank: Rank, *, ace_high: bool = False) -> int:
    """Return the position of ``rank`` inside :data:`RANK_ORDER`."""

    if rank is Rank.JOKER:
        raise ValueError("Jokers have no fixed rank index")
    if rank is Rank.ACE:
        return ACE_HIGH_INDEX if ace_high else ACE_LOW_INDEX
    return RANK_ORDER.index(rank)


def rank_at(index: int) -> Rank:
    """Return the rank stored at ``index`` of the extended order."""

    if not ACE_LOW_INDEX <= index <= ACE_HIGH_INDEX:
        raise ValueError(f"rank index {index} out of range")
    return RANK_ORDER[index]


@dataclass(frozen=True, slots=True)
class Card:
    """Value object describing a physical Shanko card."""

    id: str
    rank: Rank
    suit: Suit | None
    deck_index: int = 0

    def __post_init__(self) -> None:
        if (self.rank is Rank.JOKER) != (self.suit is None):
            raise ValueError("suit must be None exactly when the rank is JOKER")

    @classmethod
    def standard(cls, rank: Rank, suit: Suit, deck_index: int = 0) -> "Card":
        return cls(id=f"{rank.value}{suit.letter}#{deck_index}", rank=rank, suit=suit, deck_index=deck_index)

    @classmethod
    def joker(cls, variant: int, deck_index: int = 0) -> "Card":
        return cls(id=f"JOKER{variant}#{deck_index}", rank=Rank.JOKER, suit=None, deck_index=deck_index)

    @property
    def is_joker(self) -> bool:
        """Return ``True`` when the card represents a Joker."""

        return self.rank is Rank.JOKER

    def label(self) -> str:
        """Create a short display label suitable for CLI output."""

        if self.suit is None:
            return "🃏"
        return f"{self.rank.value}{self.suit.symbol}"


def non_jokers(cards: Iterable[Card]) -> list[Card]:
    return [card for card in cards if not card.is_joker]


def jokers(cards: Iterable[Card]) -> list[Card]:
    return [card for card in cards if card.is_joker]


def card_ids(cards: Iterable[Card]) -> list[str]:
    return [card.id for card in cards]


def sort_by_rank(cards: Iterable[Card]) -> list[Card]:
    """Return ``cards`` ordered by suit then rank, Jokers last."""

    suit_order = {suit: idx for idx, suit in enumerate(Suit)}

    def key(card: Card) -> tuple[int, int, str]:
        if card.suit is None:
            return (len(suit_order), 0, card.id)
        return (suit_order[card.suit], rank_index(card.rank, ace_high=True), card.id)

    return sorted(cards, key=key)


def format_cards(cards: Sequence[Card]) -> str:
    return " ".join(card.label() for card in cards)
