from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Callable, Literal

from cincuentazo.engine.ai import machine_take_turn
from cincuentazo.engine.errors import CardNotInHand, DeckEmpty, EngineError, IllegalPlay
from cincuentazo.engine.game import (
    Eliminated,
    GameOver,
    GameState,
    TurnOutcome,
    advance_turn,
    eliminate_current_player,
    finish_turn,
    new_game,
    play_human_card,
)
from cincuentazo.engine.piles import Deck
from cincuentazo.engine.serialize import snapshot
from cincuentazo.engine.types import Card
from cincuentazo.services.content import Settings
from cincuentazo.services.telemetry import TelemetryService

logger = logging.getLogger(__name__)

NoticeKind = Literal["info", "warning", "error"]


@dataclass(frozen=True)
class Notice:
    kind: NoticeKind
    title: str
    message: str


class GameSession:
    """Drives one game the way a front end would.

    The human acts through `play`; everything else (machine turns, the pauses
    between them, eliminations) is scheduled on a single timer that the
    caller's loop advances with `update(dt)`. Only one engine call runs at a
    time.
    """

    def __init__(
        self,
        settings: Settings,
        telemetry: TelemetryService | None = None,
        seed: int | None = None,
    ) -> None:
        self.settings = settings
        self.telemetry = telemetry
        self._rng = random.Random(seed)
        self.state: GameState | None = None
        self.busy = False

        self._opponents = 0
        self._notices: list[Notice] = []
        self._timer: float | None = None
        self._pending: Callable[[], None] | None = None
        self._logged_events = 0
        self._reported_game_over = False

    def start(self, opponents: int, deck: Deck | None = None) -> GameState | None:
        self._opponents = opponents
        self._notices.clear()
        self._cancel_pending()
        self._logged_events = 0
        self._reported_game_over = False
        self.busy = True

        seed = self._rng.randrange(1, 2**31 - 1)
        try:
            self.state = new_game(opponents, seed=seed, config=self.settings.game, deck=deck)
        except DeckEmpty as e:
            self.state = None
            self._notify("error", "Game Initialization Failed", str(e))
            return None

        self._telemetry("game_started", {"opponents": opponents, "seed": seed})
        logger.debug("game started with %d opponents (seed %d)", opponents, seed)
        self._begin_turn()
        self._flush_events()
        return self.state

    def restart(self) -> GameState | None:
        if self._opponents == 0:
            raise RuntimeError("No game has been started yet.")
        return self.start(self._opponents)

    @property
    def awaiting_human(self) -> bool:
        state = self.state
        if state is None or state.game_over or self.busy:
            return False
        return state.current_player.is_human

    def seconds_until_next(self) -> float | None:
        return self._timer if self._pending is not None else None

    def pop_notices(self) -> list[Notice]:
        out = list(self._notices)
        self._notices.clear()
        return out

    def play(self, card: Card) -> bool:
        state = self._require_state()
        if self.busy:
            logger.debug("turn is being processed, ignoring play of %s", card)
            return False
        if state.game_over:
            return False
        if not state.current_player.is_human:
            self._notify("warning", "Not Your Turn", "It's not your turn!")
            return False
        if state.human.eliminated:
            self._notify("warning", "Eliminated", "You have been eliminated from the game!")
            return False

        before = state.running_sum
        self.busy = True
        try:
            play_human_card(state, card)
        except (IllegalPlay, CardNotInHand) as e:
            self.busy = False
            self._notify("warning", "Invalid Play", str(e))
            return False

        try:
            outcome = finish_turn(state)
        except DeckEmpty as e:
            # The card is already on the table; pass the turn without a replacement.
            self._notify("error", "Deck Error", str(e))
            outcome = advance_turn(state)
        finally:
            self._flush_events()

        logger.debug("human played %s | %d -> %d", card, before, state.running_sum)
        self._after_outcome(outcome, self.settings.pacing.after_play)
        return True

    def update(self, dt: float) -> None:
        if self._pending is None or self._timer is None:
            return
        self._timer -= dt
        if self._timer > 0:
            return
        action = self._pending
        self._cancel_pending()
        action()
        self._flush_events()

    def run_until_human(self, max_steps: int = 1000) -> None:
        """Fire scheduled steps back to back until the human must act or the game ends."""
        for _ in range(max_steps):
            if self._pending is None:
                return
            self.update(self._timer or 0.0)
        raise RuntimeError("Session did not settle; too many scheduled steps.")

    def _schedule(self, delay: float, action: Callable[[], None]) -> None:
        self.busy = True
        self._timer = max(0.0, delay)
        self._pending = action

    def _cancel_pending(self) -> None:
        self._timer = None
        self._pending = None

    def _delay(self, bounds: tuple[float, float]) -> float:
        low, high = bounds
        return self._rng.uniform(low, high)

    def _begin_turn(self) -> None:
        state = self._require_state()
        if state.game_over:
            self._finish_game()
            return

        player = state.current_player
        logger.debug("turn: %s (sum %d)", player.name, state.running_sum)
        if not player.is_human:
            self._schedule(self._delay(self.settings.pacing.machine_think), self._machine_turn)
            return

        if player.has_legal_move(state.running_sum):
            self.busy = False
            return

        self._notify(
            "warning",
            "You're Eliminated!",
            "You have no cards that can be played without exceeding 50.",
        )
        outcome = eliminate_current_player(state)
        self._after_outcome(outcome, self.settings.pacing.after_elimination)

    def _machine_turn(self) -> None:
        state = self._require_state()
        player = state.current_player
        before = state.running_sum
        try:
            outcome = machine_take_turn(state)
        except EngineError as e:
            self.busy = False
            self._notify("error", "Machine Turn Failed", str(e))
            return

        eliminated = isinstance(outcome, Eliminated) or (
            isinstance(outcome, GameOver) and outcome.eliminated is player
        )
        if eliminated:
            self._notify("info", f"{player.name} Eliminated", f"{player.name} has no valid moves!")
            delay = self.settings.pacing.after_elimination
        else:
            logger.debug("%s played | %d -> %d", player.name, before, state.running_sum)
            delay = self._delay(self.settings.pacing.machine_draw)
        self._after_outcome(outcome, delay)

    def _after_outcome(self, outcome: TurnOutcome, delay: float) -> None:
        if isinstance(outcome, GameOver):
            self._finish_game()
            return
        self._schedule(delay, self._begin_turn)

    def _finish_game(self) -> None:
        state = self._require_state()
        self.busy = True
        if self._reported_game_over or state.winner is None:
            return
        self._reported_game_over = True
        self._flush_events()
        winner = state.winner
        message = "Congratulations! You won!" if winner.is_human else f"{winner.name} wins!"
        self._notify("info", "Game Over", message)
        snap = snapshot(state)
        self._telemetry(
            "game_over",
            {
                "winner": winner.name,
                "human_won": winner.is_human,
                "running_sum": snap["running_sum"],
                "table": snap["table"],
                "events": len(state.event_log),
            },
        )

    def _require_state(self) -> GameState:
        if self.state is None:
            raise RuntimeError("No game in progress.")
        return self.state

    def _notify(self, kind: NoticeKind, title: str, message: str) -> None:
        notice = Notice(kind=kind, title=title, message=message)
        self._notices.append(notice)
        self._telemetry("notice", {"kind": kind, "title": title, "message": message})

    def _telemetry(self, event_type: str, payload: dict[str, object]) -> None:
        if self.telemetry is not None:
            self.telemetry.log(event_type, payload)

    def _flush_events(self) -> None:
        state = self.state
        if state is None:
            return
        fresh = state.event_log[self._logged_events :]
        self._logged_events = len(state.event_log)
        if self.telemetry is not None and fresh:
            self.telemetry.log_engine_events(fresh)
