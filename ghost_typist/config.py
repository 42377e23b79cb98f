from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path


class RecoveryMode(StrEnum):
    # accuracy * 8 + 3 on a perfect word
    accuracy = "accuracy"
    # Deprecated: correct chars + 2 on a perfect word.
    flat = "flat"


@dataclass(frozen=True, slots=True)
class GameConfig:
    """Tuning knobs for the decay/difficulty model.

    Defaults are the reference gameplay values; tests shrink intervals or swap
    the recovery formula by building their own instance.
    """

    decay_interval_ms: int = 100
    difficulty_interval_ms: int = 1000
    # Decay sub-steps per second, so `decrease_rate` reads as "points per second".
    decay_steps_per_second: int = 5
    seconds_per_level: int = 20
    base_decrease_rate: float = 1.0
    decrease_rate_step: float = 0.5
    accuracy_recovery: float = 8.0
    perfect_bonus: float = 3.0
    flat_perfect_bonus: int = 2
    recovery_mode: RecoveryMode = RecoveryMode.accuracy
    max_progress: float = 100.0


def _default_highscore_path() -> Path:
    return Path.home() / ".ghost_typist" / "highscore.json"


@dataclass(frozen=True, slots=True)
class Settings:
    redis_url: str = "redis://localhost:6379/0"
    api_url: str = "http://localhost:8000"
    highscore_path: Path = field(default_factory=_default_highscore_path)
    log_level: str = "INFO"
    http_timeout: float = 5.0


def load_settings() -> Settings:
    env = os.environ
    path = env.get("GHOST_TYPIST_HIGHSCORE_PATH")
    return Settings(
        redis_url=env.get("REDIS_URL", "redis://localhost:6379/0"),
        api_url=env.get("GHOST_TYPIST_API_URL", "http://localhost:8000"),
        highscore_path=Path(path).expanduser() if path else _default_highscore_path(),
        log_level=env.get("GHOST_TYPIST_LOG_LEVEL", "INFO").upper(),
        http_timeout=float(env.get("GHOST_TYPIST_HTTP_TIMEOUT", "5.0")),
    )
