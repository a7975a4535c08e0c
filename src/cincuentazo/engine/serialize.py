from __future__ import annotations

from .game import GameState
from .players import Player
from .types import Card


def _cards(cards: tuple[Card, ...]) -> list[str]:
    return [c.label for c in cards]


def _player_to_dict(p: Player) -> dict[str, object]:
    return {
        "name": p.name,
        "kind": p.kind,
        "hand": _cards(p.hand),
        "eliminated": p.eliminated,
    }


def snapshot(state: GameState) -> dict[str, object]:
    """Return a JSON-serializable canonical snapshot of the current game state."""
    top = state.top_card
    return {
        "seed": state.seed,
        "current_player": state.current_index,
        "running_sum": state.running_sum,
        "top_card": top.label if top is not None else None,
        "table": _cards(state.discard.cards),
        "deck": _cards(state.deck.cards),
        "players": [_player_to_dict(p) for p in state.players],
        "winner": state.winner.name if state.winner is not None else None,
        "event_log": [dict(e) for e in state.event_log],
    }
