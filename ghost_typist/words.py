from __future__ import annotations

import random
from collections.abc import Sequence


WORD_LIST: tuple[str, ...] = (
    "ghost", "spooky", "type", "keyboard", "haunted",
    "fast", "quick", "game", "spirit", "phantom",
    "monster", "scary", "boo", "creepy", "shadow",
    "danger", "escape", "survive", "chase", "eerie",
    "vanish", "appear", "float", "supernatural", "spectral",
    "dark", "night", "moon", "howl", "fear",
    "scream", "terror", "haunt", "curse", "mist",
    "fog", "grave", "tomb", "crypt", "dead",
    "undead", "zombie", "vampire", "werewolf", "witch",
    "wizard", "magic", "spell", "potion", "ritual",
)


class WordSource:
    """Uniform random pick from a fixed vocabulary. Consecutive repeats are allowed."""

    def __init__(self, words: Sequence[str] = WORD_LIST, *, rng: random.Random | None = None) -> None:
        if not words or any(not w for w in words):
            raise ValueError("vocabulary must contain non-empty words")
        self._words = tuple(words)
        self._rng = rng or random.Random()

    def next_word(self) -> str:
        return self._rng.choice(self._words)


_DEFAULT_SOURCE = WordSource()


def next_word() -> str:
    return _DEFAULT_SOURCE.next_word()
