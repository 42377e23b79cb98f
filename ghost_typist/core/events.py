from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True, slots=True)
class DecayTick:
    pass


@dataclass(frozen=True, slots=True)
class DifficultyTick:
    pass


@dataclass(frozen=True, slots=True)
class WordCompleted:
    typed: str
    target: str


@dataclass(frozen=True, slots=True)
class WordDrawn:
    word: str


@dataclass(frozen=True, slots=True)
class GameEnded:
    pass


@dataclass(frozen=True, slots=True)
class HighScoreObserved:
    """A high score seen somewhere else (local store, server, end of game)."""

    score: int


GameEvent = Union[DecayTick, DifficultyTick, WordCompleted, WordDrawn, GameEnded, HighScoreObserved]
