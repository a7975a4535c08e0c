from __future__ import annotations

from .errors import IllegalPlay
from .game import GameOver, GameState, TurnOutcome, _play_selected, eliminate_current_player, finish_turn


def machine_take_turn(state: GameState) -> TurnOutcome:
    """Run the current machine player's whole turn.

    A machine with a legal move plays its greedy choice, draws a replacement
    and passes; one without is eliminated.
    """
    if state.winner is not None:
        return GameOver(winner=state.winner)
    player = state.current_player
    if player.is_human:
        raise IllegalPlay("The current player is not a machine.")

    if not player.has_legal_move(state.running_sum):
        return eliminate_current_player(state)

    _play_selected(state)
    return finish_turn(state)
