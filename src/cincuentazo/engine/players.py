from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, Sequence

from .errors import IllegalPlay, NoLegalMove
from .types import Card, PlayerKind, effective_value, is_legal


class SelectionStrategy(Protocol):
    def choose(self, hand: Sequence[Card], current_sum: int) -> Card | None: ...


class ExternalChoice:
    """Human seat: the card arrives from outside the engine."""

    def choose(self, hand: Sequence[Card], current_sum: int) -> Card | None:
        return None


class GreedyStrategy:
    """Play the legal card whose resulting sum lands closest to the target.

    Ties keep the first candidate in hand order. No lookahead.
    """

    def choose(self, hand: Sequence[Card], current_sum: int) -> Card | None:
        best: tuple[int, Card] | None = None
        for card in hand:
            if not is_legal(card, current_sum):
                continue
            new_sum = current_sum + effective_value(card, current_sum)
            if best is None or new_sum > best[0]:
                best = (new_sum, card)
        return best[1] if best is not None else None


@dataclass(eq=False)
class Player:
    name: str
    kind: PlayerKind
    strategy: SelectionStrategy
    eliminated: bool = False
    _hand: list[Card] = field(default_factory=list, repr=False)

    @staticmethod
    def human(name: str) -> "Player":
        return Player(name=name, kind="human", strategy=ExternalChoice())

    @staticmethod
    def machine(name: str, strategy: SelectionStrategy | None = None) -> "Player":
        return Player(name=name, kind="machine", strategy=strategy or GreedyStrategy())

    @property
    def is_human(self) -> bool:
        return self.kind == "human"

    @property
    def hand(self) -> tuple[Card, ...]:
        return tuple(self._hand)

    @property
    def hand_size(self) -> int:
        return len(self._hand)

    def holds(self, card: Card) -> bool:
        return card in self._hand

    def add_card(self, card: Card) -> None:
        self._hand.append(card)

    def remove_card(self, card: Card) -> bool:
        try:
            self._hand.remove(card)
        except ValueError:
            return False
        return True

    def take_all_cards(self) -> list[Card]:
        cards = list(self._hand)
        self._hand.clear()
        return cards

    def legal_cards(self, current_sum: int) -> list[Card]:
        return [c for c in self._hand if is_legal(c, current_sum)]

    def has_legal_move(self, current_sum: int) -> bool:
        return any(is_legal(c, current_sum) for c in self._hand)

    def eliminate(self) -> None:
        # The orchestrator empties the hand; this only flips the flag.
        self.eliminated = True

    def select_card(self, current_sum: int) -> Card | None:
        """Pick a card to play at `current_sum`.

        Machine players remove the chosen card from their hand. The human seat
        only checks that a legal move exists and returns None.
        """
        if not self.has_legal_move(current_sum):
            raise NoLegalMove(f"{self.name} has no valid moves.")
        card = self.strategy.choose(self.hand, current_sum)
        if card is not None and not self.remove_card(card):
            raise IllegalPlay(f"{self.name}'s strategy chose {card}, which is not in hand.")
        return card

    def __str__(self) -> str:
        return self.name
