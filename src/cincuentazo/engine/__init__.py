"""Headless rules engine for Cincuentazo.

IMPORTANT: This package must never import the session, the CLI or services.
"""

from .ai import machine_take_turn
from .errors import CardNotInHand, DeckEmpty, EngineError, IllegalPlay, NoLegalMove
from .game import (
    Continued,
    Eliminated,
    GameConfig,
    GameOver,
    GameState,
    TurnOutcome,
    advance_turn,
    draw_for_current_player,
    eliminate_current_player,
    finish_turn,
    new_game,
    play_card,
    play_human_card,
)
from .piles import Deck, DiscardPile, full_deck
from .players import ExternalChoice, GreedyStrategy, Player, SelectionStrategy
from .types import TARGET_SUM, Card, Rank, Suit, effective_value, is_legal

__all__ = [
    "Card",
    "CardNotInHand",
    "Continued",
    "Deck",
    "DeckEmpty",
    "DiscardPile",
    "Eliminated",
    "EngineError",
    "ExternalChoice",
    "GameConfig",
    "GameOver",
    "GameState",
    "GreedyStrategy",
    "IllegalPlay",
    "NoLegalMove",
    "Player",
    "Rank",
    "SelectionStrategy",
    "Suit",
    "TARGET_SUM",
    "TurnOutcome",
    "advance_turn",
    "draw_for_current_player",
    "effective_value",
    "eliminate_current_player",
    "finish_turn",
    "full_deck",
    "is_legal",
    "machine_take_turn",
    "new_game",
    "play_card",
    "play_human_card",
]
