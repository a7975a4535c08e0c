from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
import time
from typing import Callable

from cincuentazo.engine.game import GameState
from cincuentazo.engine.players import GreedyStrategy
from cincuentazo.engine.types import Card
from cincuentazo.paths import get_paths
from cincuentazo.services.content import ContentError, ContentService, PacingConfig
from cincuentazo.services.telemetry import TelemetryService
from cincuentazo.session import GameSession, Notice

Chooser = Callable[[GameState], Card | None]


def setup_logging(debug: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="[GAME] %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def _print_notice(notice: Notice) -> None:
    marker = {"info": "*", "warning": "!", "error": "x"}[notice.kind]
    print(f"{marker} {notice.title}: {notice.message}")


def _print_table(state: GameState) -> None:
    top = state.top_card
    print()
    table = f"{top.label} ({top.suit.display_name})" if top else "--"
    print(f"Table: {table}   Sum: {state.running_sum}   Deck: {state.draw_pile_size}")
    for p in state.players[1:]:
        status = "ELIMINATED" if p.eliminated else f"Cards: {p.hand_size}"
        print(f"  {p.name}: {status}")


def _prompt_card(state: GameState) -> Card | None:
    _print_table(state)
    hand = state.human.hand
    for i, card in enumerate(hand):
        mark = "" if card.is_legal(state.running_sum) else "  (would exceed 50)"
        print(f"  [{i}] {card.label}{mark}")
    while True:
        try:
            raw = input("Play card # (q to quit): ").strip()
        except EOFError:
            return None
        if raw.lower() in ("q", "quit"):
            return None
        if raw.isdigit() and int(raw) < len(hand):
            return hand[int(raw)]
        print("Pick one of the numbers shown.")


def _autoplay_card(state: GameState) -> Card | None:
    return GreedyStrategy().choose(state.human.hand, state.running_sum)


def run_session(session: GameSession, opponents: int, choose: Chooser, *, realtime: bool) -> int:
    session.start(opponents)
    while True:
        for notice in session.pop_notices():
            _print_notice(notice)
        state = session.state
        if state is None:
            return 1
        if state.game_over:
            break
        if session.awaiting_human:
            card = choose(state)
            if card is None:
                print("Bye.")
                return 0
            session.play(card)
            continue
        wait = session.seconds_until_next()
        if wait is None:
            # Nothing scheduled and nobody to ask: the session hit an engine error.
            return 1
        if realtime and wait > 0:
            time.sleep(wait)
        session.update(wait)

    for notice in session.pop_notices():
        _print_notice(notice)
    return 0


def main() -> int:
    parser = argparse.ArgumentParser(prog="cincuentazo", description="Play Cincuentazo against the machine.")
    parser.add_argument("--opponents", type=int, default=1, help="machine opponents (1-3)")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--autoplay", action="store_true", help="let the greedy strategy play your seat")
    parser.add_argument("--fast", action="store_true", help="skip the pauses between turns")
    parser.add_argument("--debug", action="store_true")
    args = parser.parse_args()

    setup_logging(args.debug)
    paths = get_paths()
    content = ContentService(data_dir=paths.data_dir, schema_dir=paths.schema_dir)
    try:
        settings = content.load_settings()
    except ContentError as e:
        print(e, file=sys.stderr)
        return 2

    cfg = settings.game
    if not cfg.min_opponents <= args.opponents <= cfg.max_opponents:
        parser.error(f"--opponents must be between {cfg.min_opponents} and {cfg.max_opponents}")

    if args.fast:
        settings = dataclasses.replace(settings, pacing=PacingConfig.instant())

    telemetry = TelemetryService(
        paths.userdata_dir / settings.telemetry.file,
        enabled=settings.telemetry.enabled,
    )
    telemetry.log("session_started", {"opponents": args.opponents, "autoplay": args.autoplay})

    session = GameSession(settings, telemetry=telemetry, seed=args.seed)
    choose = _autoplay_card if args.autoplay else _prompt_card
    return run_session(session, args.opponents, choose, realtime=not args.fast)


if __name__ == "__main__":
    raise SystemExit(main())
