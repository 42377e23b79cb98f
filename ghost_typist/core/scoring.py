"""Scoring and difficulty model.

Every change to `GameData` goes through `reduce`, a pure function called
synchronously by the session's tick and input handlers. Because no handler
awaits between reducing and acting on the result, a decay step, its threshold
check, and the resulting game over can never interleave with an input event.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from ghost_typist.config import GameConfig, RecoveryMode
from ghost_typist.core.events import (
    DecayTick,
    DifficultyTick,
    GameEnded,
    GameEvent,
    HighScoreObserved,
    WordCompleted,
    WordDrawn,
)
from ghost_typist.core.matcher import count_correct


DEFAULT_CONFIG = GameConfig()


@dataclass(frozen=True, slots=True)
class GameData:
    current_word: str = ""
    current_score: int = 0
    high_score: int = 0
    elapsed_seconds: int = 0
    level: int = 1
    progress: float = 100.0
    final_score: int = 0
    decrease_rate: float = 1.0

    @property
    def depleted(self) -> bool:
        return self.progress <= 0


def new_game(*, word: str, high_score: int, config: GameConfig = DEFAULT_CONFIG) -> GameData:
    return GameData(
        current_word=word,
        high_score=high_score,
        progress=config.max_progress,
        decrease_rate=config.base_decrease_rate,
    )


def clamp_progress(value: float, *, config: GameConfig = DEFAULT_CONFIG) -> float:
    return min(config.max_progress, max(0.0, value))


def level_for(elapsed_seconds: int, *, config: GameConfig = DEFAULT_CONFIG) -> int:
    return 1 + elapsed_seconds // config.seconds_per_level


def decrease_rate_for(level: int, *, config: GameConfig = DEFAULT_CONFIG) -> float:
    return config.base_decrease_rate + (level - 1) * config.decrease_rate_step


def progress_recovery(*, typed: str, target: str, config: GameConfig = DEFAULT_CONFIG) -> float:
    correct = count_correct(typed, target)
    perfect = typed == target
    if config.recovery_mode == RecoveryMode.flat:
        return float(correct + (config.flat_perfect_bonus if perfect else 0))
    accuracy = correct / len(target) if target else 0.0
    return accuracy * config.accuracy_recovery + (config.perfect_bonus if perfect else 0.0)


def reduce(data: GameData, event: GameEvent, *, config: GameConfig = DEFAULT_CONFIG) -> GameData:
    if isinstance(event, DecayTick):
        step = data.decrease_rate / config.decay_steps_per_second
        return replace(data, progress=clamp_progress(data.progress - step, config=config))

    if isinstance(event, DifficultyTick):
        elapsed = data.elapsed_seconds + 1
        # Never step back down, even if the config changed mid-session.
        level = max(data.level, level_for(elapsed, config=config))
        return replace(
            data,
            elapsed_seconds=elapsed,
            level=level,
            decrease_rate=max(data.decrease_rate, decrease_rate_for(level, config=config)),
        )

    if isinstance(event, WordCompleted):
        recovery = progress_recovery(typed=event.typed, target=event.target, config=config)
        return replace(
            data,
            current_score=data.current_score + count_correct(event.typed, event.target),
            progress=clamp_progress(data.progress + recovery, config=config),
        )

    if isinstance(event, WordDrawn):
        return replace(data, current_word=event.word)

    if isinstance(event, GameEnded):
        return replace(data, final_score=data.current_score)

    if isinstance(event, HighScoreObserved):
        if event.score <= data.high_score:
            return data
        return replace(data, high_score=event.score)

    raise TypeError(f"Unknown game event: {event!r}")
