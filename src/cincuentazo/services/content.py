from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from jsonschema import Draft202012Validator

from cincuentazo.engine.game import GameConfig


class ContentError(RuntimeError):
    pass


def _load_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ContentError(f"Missing content file: {path}") from e
    except json.JSONDecodeError as e:
        raise ContentError(f"Invalid JSON in {path}: {e}") from e


def validate_json(instance: object, schema: object, *, context: str) -> None:
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda e: list(e.absolute_path))
    if errors:
        lines = [f"Schema validation failed for {context}:"]
        for err in errors[:10]:
            loc = "/".join(str(p) for p in err.absolute_path)
            lines.append(f"- {loc}: {err.message}")
        raise ContentError("\n".join(lines))


def _section(obj: Mapping[str, object], key: str) -> Mapping[str, object]:
    v = obj.get(key)
    if not isinstance(v, dict):
        raise ContentError(f"Expected object for {key}")
    return v


def _seconds(obj: Mapping[str, object], key: str) -> float:
    v = obj.get(key)
    if not isinstance(v, (int, float)):
        raise ContentError(f"Expected number for {key}")
    return float(v)


def _range(obj: Mapping[str, object], key: str) -> tuple[float, float]:
    v = obj.get(key)
    if not isinstance(v, list) or len(v) != 2:
        raise ContentError(f"Expected [low, high] for {key}")
    low, high = float(v[0]), float(v[1])
    if low > high:
        raise ContentError(f"{key}: low bound {low} exceeds high bound {high}")
    return low, high


@dataclass(frozen=True)
class PacingConfig:
    """Delays (seconds) the session waits between steps of the game."""

    machine_think: tuple[float, float] = (2.0, 4.0)
    machine_draw: tuple[float, float] = (1.0, 2.0)
    after_play: float = 0.8
    after_elimination: float = 2.0

    @staticmethod
    def instant() -> "PacingConfig":
        return PacingConfig(machine_think=(0.0, 0.0), machine_draw=(0.0, 0.0), after_play=0.0, after_elimination=0.0)


@dataclass(frozen=True)
class TelemetryConfig:
    enabled: bool = True
    file: str = "telemetry.jsonl"


@dataclass(frozen=True)
class Settings:
    game: GameConfig
    pacing: PacingConfig
    telemetry: TelemetryConfig


class ContentService:
    def __init__(self, data_dir: Path, schema_dir: Path) -> None:
        self._data_dir = data_dir
        self._schema_dir = schema_dir

    def load_settings(self) -> Settings:
        path = self._data_dir / "settings.json"
        schema = _load_json(self._schema_dir / "settings.schema.json")
        raw = _load_json(path)
        validate_json(raw, schema, context=str(path))
        if not isinstance(raw, dict):
            raise ContentError("settings.json must be an object")

        rules = _section(raw, "rules")
        players = _section(raw, "players")
        pacing = _section(raw, "pacing")
        telemetry = _section(raw, "telemetry")

        min_opp = rules.get("min_opponents")
        max_opp = rules.get("max_opponents")
        hand = rules.get("starting_hand")
        if not isinstance(min_opp, int) or not isinstance(max_opp, int) or not isinstance(hand, int):
            raise ContentError("rules values must be integers")
        if min_opp > max_opp:
            raise ContentError("rules.min_opponents exceeds rules.max_opponents")

        game = GameConfig(
            starting_hand=hand,
            min_opponents=min_opp,
            max_opponents=max_opp,
            human_name=str(players.get("human_name")),
            machine_name_template=str(players.get("machine_name_template")),
        )
        return Settings(
            game=game,
            pacing=PacingConfig(
                machine_think=_range(pacing, "machine_think"),
                machine_draw=_range(pacing, "machine_draw"),
                after_play=_seconds(pacing, "after_play"),
                after_elimination=_seconds(pacing, "after_elimination"),
            ),
            telemetry=TelemetryConfig(
                enabled=bool(telemetry.get("enabled")),
                file=str(telemetry.get("file")),
            ),
        )

    def validate_all(self) -> None:
        # Load is validation (schema + parse)
        _ = self.load_settings()
