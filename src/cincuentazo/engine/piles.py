from __future__ import annotations

import random
from typing import Iterable, Sequence

from .errors import DeckEmpty
from .types import Card, Rank, Suit, effective_value


def full_deck() -> list[Card]:
    return [Card(rank=rank, suit=suit) for suit in Suit for rank in Rank]


class Deck:
    """Draw pile. Cards leave from the front and are returned at the back.

    Passing `cards` keeps their order as given; otherwise a standard 52-card
    deck is built and shuffled once.
    """

    def __init__(self, cards: Sequence[Card] | None = None, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()
        if cards is None:
            self._cards = full_deck()
            self.shuffle()
        else:
            self._cards = list(cards)

    def __len__(self) -> int:
        return len(self._cards)

    def __contains__(self, card: object) -> bool:
        return card in self._cards

    @property
    def cards(self) -> tuple[Card, ...]:
        return tuple(self._cards)

    def is_empty(self) -> bool:
        return not self._cards

    def shuffle(self) -> None:
        self._rng.shuffle(self._cards)

    def draw(self) -> Card:
        if not self._cards:
            raise DeckEmpty("Cannot draw from an empty deck.")
        return self._cards.pop(0)

    def add_cards(self, cards: Iterable[Card]) -> None:
        self._cards.extend(cards)

    def replenish(self, discard: "DiscardPile") -> int:
        """Shuffle everything under the table card back into the draw pile.

        Returns the number of cards moved. The table card and the running sum
        are left untouched.
        """
        if len(discard) <= 1:
            raise DeckEmpty("Cannot replenish the deck from the table.")
        moved = discard.take_all_but_top()
        self.add_cards(moved)
        self.shuffle()
        return len(moved)


class DiscardPile:
    def __init__(self) -> None:
        self._cards: list[Card] = []
        self._running_sum = 0

    def __len__(self) -> int:
        return len(self._cards)

    def __contains__(self, card: object) -> bool:
        return card in self._cards

    @property
    def cards(self) -> tuple[Card, ...]:
        return tuple(self._cards)

    @property
    def top(self) -> Card | None:
        return self._cards[-1] if self._cards else None

    @property
    def running_sum(self) -> int:
        return self._running_sum

    def place(self, card: Card) -> int:
        # Resolve against the pre-play sum before mutating it.
        delta = effective_value(card, self._running_sum)
        self._cards.append(card)
        self._running_sum += delta
        return delta

    def take_all_but_top(self) -> list[Card]:
        if len(self._cards) <= 1:
            return []
        moved = self._cards[:-1]
        self._cards = self._cards[-1:]
        return moved
