from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Literal

TARGET_SUM = 50

PlayerKind = Literal["human", "machine"]

CARD_BACK_ASSET = "back.png"


class Rank(Enum):
    TWO = ("2", 2, 2)
    THREE = ("3", 3, 3)
    FOUR = ("4", 4, 4)
    FIVE = ("5", 5, 5)
    SIX = ("6", 6, 6)
    SEVEN = ("7", 7, 7)
    EIGHT = ("8", 8, 8)
    NINE = ("9", 0, 0)
    TEN = ("10", 10, 10)
    JACK = ("J", -10, -10)
    QUEEN = ("Q", -10, -10)
    KING = ("K", -10, -10)
    ACE = ("A", 1, 10)

    def __init__(self, symbol: str, primary: int, secondary: int) -> None:
        self.symbol = symbol
        self.primary = primary
        self.secondary = secondary

    @property
    def has_dual_value(self) -> bool:
        return self.primary != self.secondary


class Suit(Enum):
    HEARTS = ("H", "Hearts")
    DIAMONDS = ("D", "Diamonds")
    CLUBS = ("C", "Clubs")
    SPADES = ("S", "Spades")

    def __init__(self, symbol: str, display_name: str) -> None:
        self.symbol = symbol
        self.display_name = display_name


@dataclass(frozen=True)
class Card:
    rank: Rank
    suit: Suit

    @property
    def label(self) -> str:
        return f"{self.rank.symbol}{self.suit.symbol}"

    @property
    def asset_id(self) -> str:
        """Image file name for this card, e.g. ``AS.png`` or ``10H.png``."""
        return f"{self.label}.png"

    def effective_value(self, current_sum: int) -> int:
        return effective_value(self, current_sum)

    def is_legal(self, current_sum: int) -> bool:
        return is_legal(self, current_sum)

    def __str__(self) -> str:
        return self.label


def effective_value(card: Card, current_sum: int) -> int:
    """Value `card` adds to the table when played at `current_sum`.

    Dual-valued ranks (the Ace) use their secondary value while it keeps the
    sum within TARGET_SUM and fall back to the primary value otherwise.
    """
    rank = card.rank
    if rank.has_dual_value:
        if current_sum + rank.secondary <= TARGET_SUM:
            return rank.secondary
        return rank.primary
    return rank.primary


def is_legal(card: Card, current_sum: int) -> bool:
    return current_sum + effective_value(card, current_sum) <= TARGET_SUM


def card_from_label(label: str) -> Card:
    """Parse the short form produced by `Card.label` (``"AS"``, ``"10h"``)."""
    text = label.strip().upper()
    if len(text) < 2:
        raise ValueError(f"Not a card: {label!r}")
    rank_sym, suit_sym = text[:-1], text[-1]
    for rank in Rank:
        if rank.symbol == rank_sym:
            break
    else:
        raise ValueError(f"Unknown rank in {label!r}")
    for suit in Suit:
        if suit.symbol == suit_sym:
            break
    else:
        raise ValueError(f"Unknown suit in {label!r}")
    return Card(rank=rank, suit=suit)
