from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class LetterState(StrEnum):
    correct = "correct"
    incorrect = "incorrect"
    pending = "pending"


@dataclass(frozen=True, slots=True)
class TypedWordState:
    target_word: str
    typed_text: str
    letter_states: tuple[LetterState, ...]

    @property
    def is_complete(self) -> bool:
        return is_complete(self)


def fresh(target: str) -> TypedWordState:
    """Typing state for a word nobody has started on yet."""

    word = target.lower()
    return TypedWordState(target_word=word, typed_text="", letter_states=(LetterState.pending,) * len(word))


def match(target: str, raw: str) -> TypedWordState:
    """Compare raw input against the target, case-insensitively.

    Only the first `len(target)` typed characters are graded; anything past the
    end of the word is kept in `typed_text` but never produces a letter state.
    """

    word = target.lower()
    typed = raw.lower()
    states = tuple(
        LetterState.pending
        if i >= len(typed)
        else LetterState.correct if typed[i] == letter else LetterState.incorrect
        for i, letter in enumerate(word)
    )
    return TypedWordState(target_word=word, typed_text=typed, letter_states=states)


def is_complete(state: TypedWordState) -> bool:
    # A full-length attempt finishes the word whether or not it was right.
    return len(state.typed_text) >= len(state.target_word)


def count_correct(typed: str, target: str) -> int:
    return sum(1 for a, b in zip(typed, target) if a == b)
