from __future__ import annotations

from pathlib import Path
from typing import Sequence

import pytest

from cincuentazo.engine.errors import DeckEmpty
from cincuentazo.engine.game import GameConfig
from cincuentazo.engine.piles import Deck, full_deck
from cincuentazo.engine.players import GreedyStrategy
from cincuentazo.engine.types import card_from_label
from cincuentazo.services.content import PacingConfig, Settings, TelemetryConfig
from cincuentazo.services.telemetry import TelemetryService
from cincuentazo.session import GameSession, Notice


def _settings(pacing: PacingConfig | None = None) -> Settings:
    return Settings(
        game=GameConfig(),
        pacing=pacing or PacingConfig.instant(),
        telemetry=TelemetryConfig(enabled=False),
    )


def _rigged_deck(hands: Sequence[Sequence[str]], table: str, next_draws: Sequence[str] = ()) -> Deck:
    order = []
    for i in range(len(hands[0])):
        for hand in hands:
            order.append(card_from_label(hand[i]))
    order.append(card_from_label(table))
    order.extend(card_from_label(lbl) for lbl in next_draws)
    used = set(order)
    order.extend(c for c in full_deck() if c not in used)
    return Deck(cards=order)


def _titles(notices: list[Notice]) -> list[str]:
    return [n.title for n in notices]


def _human_stuck_deck() -> Deck:
    return _rigged_deck(
        [["10H", "10D", "10C", "10S"], ["9D", "9C", "JD", "QD"]],
        "5S",
        next_draws=["8H", "2C", "7H", "3C", "6H", "4C", "5H", "2S"],
    )


def _machine_stuck_deck() -> Deck:
    return _rigged_deck(
        [["10H", "10D", "10C", "8H"], ["2D", "3D", "4D", "5D"]],
        "10S",
        next_draws=["JH", "5C", "KH", "6D", "QH"],
    )


def _play(session: GameSession, label: str) -> None:
    assert session.awaiting_human
    assert session.play(card_from_label(label))
    session.run_until_human()


def test_start_hands_the_first_turn_to_the_human() -> None:
    session = GameSession(_settings(), seed=1)
    state = session.start(2)
    assert state is not None
    assert session.awaiting_human
    assert not session.busy
    assert session.seconds_until_next() is None
    assert session.pop_notices() == []


def test_human_is_eliminated_and_machine_wins() -> None:
    session = GameSession(_settings(), seed=1)
    session.start(1, deck=_human_stuck_deck())

    for label in ("10H", "10D", "10C", "10S"):
        _play(session, label)

    state = session.state
    assert state is not None
    assert state.running_sum == 50
    assert state.human.eliminated
    assert state.game_over
    assert state.winner is state.players[1]
    notices = session.pop_notices()
    assert _titles(notices) == ["You're Eliminated!", "Game Over"]
    assert notices[-1].message == "Machine 1 wins!"
    assert not session.awaiting_human


def test_machine_is_eliminated_and_human_wins() -> None:
    session = GameSession(_settings(), seed=1)
    session.start(1, deck=_machine_stuck_deck())

    for label in ("10H", "10D", "10C"):
        _play(session, label)

    state = session.state
    assert state is not None
    assert state.players[1].eliminated
    assert state.winner is state.human
    notices = session.pop_notices()
    assert _titles(notices) == ["Machine 1 Eliminated", "Game Over"]
    assert notices[0].message == "Machine 1 has no valid moves!"
    assert notices[1].message == "Congratulations! You won!"
    # Nothing more happens after the round ends.
    assert not session.play(card_from_label("8H"))
    assert session.pop_notices() == []


def test_machine_turns_are_paced_by_the_timer() -> None:
    pacing = PacingConfig(machine_think=(1.0, 1.0), machine_draw=(0.5, 0.5), after_play=0.8, after_elimination=2.0)
    session = GameSession(_settings(pacing), seed=3)
    session.start(1, deck=_machine_stuck_deck())

    assert session.play(card_from_label("10H"))
    assert session.seconds_until_next() == pytest.approx(0.8)
    assert not session.awaiting_human

    session.update(0.5)
    assert session.seconds_until_next() == pytest.approx(0.3)
    session.update(0.5)
    # The machine is now thinking.
    assert session.seconds_until_next() == pytest.approx(1.0)
    assert session.state is not None and session.state.current_index == 1

    session.update(1.0)
    assert session.state.running_sum == 25
    assert session.seconds_until_next() == pytest.approx(0.5)
    session.update(0.5)
    assert session.awaiting_human
    assert session.seconds_until_next() is None


def test_play_is_ignored_while_a_turn_is_in_progress() -> None:
    pacing = PacingConfig(machine_think=(1.0, 1.0), machine_draw=(0.5, 0.5), after_play=0.8, after_elimination=2.0)
    session = GameSession(_settings(pacing), seed=3)
    session.start(1, deck=_machine_stuck_deck())
    assert session.play(card_from_label("10H"))

    assert not session.play(card_from_label("10D"))
    assert session.pop_notices() == []
    assert session.state is not None and session.state.human.holds(card_from_label("10D"))


def test_invalid_card_produces_a_notice() -> None:
    session = GameSession(_settings(), seed=1)
    session.start(1, deck=_machine_stuck_deck())

    assert not session.play(card_from_label("2D"))
    notices = session.pop_notices()
    assert _titles(notices) == ["Invalid Play"]
    assert notices[0].kind == "warning"
    assert session.awaiting_human


def test_failed_deal_reports_an_error() -> None:
    session = GameSession(_settings(), seed=1)
    assert session.start(1, deck=Deck(cards=full_deck()[:5])) is None
    notices = session.pop_notices()
    assert _titles(notices) == ["Game Initialization Failed"]
    assert notices[0].kind == "error"
    assert not session.awaiting_human


def test_restart_requires_a_started_game() -> None:
    session = GameSession(_settings(), seed=1)
    with pytest.raises(RuntimeError):
        session.restart()


def test_restart_deals_a_fresh_game() -> None:
    session = GameSession(_settings(), seed=1)
    session.start(1, deck=_machine_stuck_deck())
    for label in ("10H", "10D", "10C"):
        _play(session, label)
    assert session.state is not None and session.state.game_over

    state = session.restart()

    assert state is not None
    assert not state.game_over
    assert len(state.players) == 2
    assert state.card_count() == 52
    assert session.pop_notices() == []
    assert session.awaiting_human


def test_autoplayed_session_reaches_game_over(tmp_path: Path) -> None:
    telemetry = TelemetryService(tmp_path / "telemetry.jsonl")
    session = GameSession(_settings(), telemetry=telemetry, seed=7)
    session.start(3)
    greedy = GreedyStrategy()

    for _ in range(5000):
        state = session.state
        assert state is not None
        if state.game_over:
            break
        if session.awaiting_human:
            card = greedy.choose(state.human.hand, state.running_sum)
            assert card is not None
            assert session.play(card)
        session.run_until_human()

    state = session.state
    assert state is not None and state.game_over
    assert state.running_sum <= 50
    assert state.card_count() == 52
    notices = session.pop_notices()
    assert notices[-1].title == "Game Over"
    assert _titles(notices).count("Game Over") == 1

    types = [r["type"] for r in telemetry.read_all()]
    assert types[0] == "game_started"
    assert "engine_event" in types
    assert types[-1] == "game_over"
    engine_events = [r["payload"] for r in telemetry.read_all() if r["type"] == "engine_event"]
    assert len(engine_events) == len(state.event_log)


def test_failed_draw_after_a_play_still_passes_the_turn(monkeypatch: pytest.MonkeyPatch) -> None:
    def empty_draw(state):
        raise DeckEmpty("Cannot replenish the deck from the table.")

    session = GameSession(_settings(), seed=1)
    session.start(1, deck=_machine_stuck_deck())
    monkeypatch.setattr("cincuentazo.session.finish_turn", empty_draw)

    assert session.play(card_from_label("10H"))

    state = session.state
    assert state is not None
    assert _titles(session.pop_notices()) == ["Deck Error"]
    assert state.top_card == card_from_label("10H")
    assert state.human.hand_size == 3
    assert state.current_index == 1
    assert state.card_count() == 52
    assert not session.awaiting_human
