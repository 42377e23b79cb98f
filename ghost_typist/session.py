from __future__ import annotations

import logging
from collections.abc import Callable
from enum import StrEnum

from ghost_typist.api.models import SessionState, SessionView, TypedWordView
from ghost_typist.config import GameConfig, Settings, load_settings
from ghost_typist.core.events import (
    DecayTick,
    DifficultyTick,
    GameEnded,
    GameEvent,
    HighScoreObserved,
    WordCompleted,
    WordDrawn,
)
from ghost_typist.core.matcher import TypedWordState, fresh, match
from ghost_typist.core.scoring import DEFAULT_CONFIG, GameData, new_game, reduce
from ghost_typist.core.timers import AsyncioScheduler, Scheduler, TimerHandle
from ghost_typist.fsm import SessionFSM
from ghost_typist.gateway import ScoreGateway
from ghost_typist.words import WordSource


logger = logging.getLogger(__name__)

Listener = Callable[["GameSession"], None]


class InputOutcome(StrEnum):
    ignored = "ignored"
    typing = "typing"
    completed = "completed"


class GameSession:
    """One player's run of the game, from idle through any number of restarts.

    Contract:
      - `start()` / `restart()` begin a fresh run from idle or game over.
      - `submit_input(raw)` feeds the current contents of the input field.
      - the decay and difficulty ticks run on `scheduler` while playing; the
        decay tick ends the game when progress hits zero.
      - `close()` tears everything down for good: timers stop and later
        `start()` or `submit_input()` calls are ignored.

    Each periodic callback captures the generation it was scheduled under and
    does nothing once `start()`, game over or `close()` has moved the generation
    on, so a tick that was already queued when its timer got cancelled is harmless.
    """

    def __init__(
        self,
        *,
        scheduler: Scheduler | None = None,
        gateway: ScoreGateway | None = None,
        words: WordSource | None = None,
        config: GameConfig = DEFAULT_CONFIG,
    ) -> None:
        self._scheduler = scheduler or AsyncioScheduler()
        self._gateway = gateway
        self._words = words or WordSource()
        self._config = config
        self._fsm = SessionFSM()
        self._generation = 0
        self._closed = False
        self._timers: list[TimerHandle] = []
        self._listeners: list[Listener] = []
        self._typed: TypedWordState = fresh("")

        local = gateway.load_local_high_score() if gateway is not None else 0
        self._data = self._reduce(GameData(), HighScoreObserved(score=local))

    @classmethod
    async def open(
        cls,
        settings: Settings | None = None,
        *,
        gateway: ScoreGateway | None = None,
        scheduler: Scheduler | None = None,
        words: WordSource | None = None,
        config: GameConfig = DEFAULT_CONFIG,
    ) -> "GameSession":
        """Build a session wired to the configured score stores and sync the remote high score."""

        if gateway is None:
            gateway = ScoreGateway.from_settings(settings or load_settings())
        session = cls(scheduler=scheduler, gateway=gateway, words=words, config=config)
        await session.refresh_high_score()
        return session

    @property
    def state(self) -> SessionState:
        return self._fsm.session_state

    @property
    def data(self) -> GameData:
        return self._data

    @property
    def typed_word(self) -> TypedWordState:
        return self._typed

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def closed(self) -> bool:
        return self._closed

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    def start(self) -> bool:
        if self._closed or not self._fsm.can_play():
            logger.debug("start() ignored while %s (closed=%s)", self.state.value, self._closed)
            return False

        self._cancel_timers()
        generation = self._generation + 1
        # Timers first: if the scheduler can't run them, nothing else has changed yet.
        timers: list[TimerHandle] = []
        try:
            timers.append(
                self._scheduler.every(self._config.decay_interval_ms, lambda: self._on_decay_tick(generation))
            )
            timers.append(
                self._scheduler.every(self._config.difficulty_interval_ms, lambda: self._on_difficulty_tick(generation))
            )
        except Exception:
            for handle in timers:
                handle.cancel()
            raise

        self._generation = generation
        self._timers = timers
        word = self._words.next_word()
        self._data = new_game(word=word, high_score=self._data.high_score, config=self._config)
        self._typed = fresh(word)
        self._fsm.send("play")

        logger.info("Game started (generation=%s, word=%r)", generation, word)
        self._notify()
        return True

    def restart(self) -> bool:
        return self.start()

    def submit_input(self, raw: str) -> InputOutcome:
        if self._closed or self.state != SessionState.playing:
            logger.debug("Input ignored while %s (closed=%s)", self.state.value, self._closed)
            return InputOutcome.ignored

        typed = match(self._data.current_word, raw)
        if not typed.is_complete:
            self._typed = typed
            self._notify()
            return InputOutcome.typing

        self._data = self._reduce(self._data, WordCompleted(typed=typed.typed_text, target=typed.target_word))
        word = self._words.next_word()
        self._data = self._reduce(self._data, WordDrawn(word=word))
        self._typed = fresh(word)
        self._notify()
        return InputOutcome.completed

    def observe_high_score(self, score: int) -> bool:
        """Compare-then-set the high score. Returns True if it went up."""

        updated = self._reduce(self._data, HighScoreObserved(score=score))
        if updated is self._data:
            return False
        self._data = updated
        logger.info("High score raised to %s", score)
        if self._gateway is not None:
            self._gateway.save_local_high_score(score)
        self._notify()
        return True

    async def refresh_high_score(self) -> int:
        if self._gateway is not None:
            remote = await self._gateway.fetch_remote_high_score()
            if remote is not None:
                self.observe_high_score(remote)
        return self._data.high_score

    def close(self) -> None:
        self._closed = True
        self._cancel_timers()
        self._generation += 1

    async def aclose(self) -> None:
        self.close()
        if self._gateway is not None:
            await self._gateway.aclose()

    def view(self) -> SessionView:
        d = self._data
        return SessionView(
            state=self.state,
            current_word=d.current_word,
            current_score=d.current_score,
            high_score=d.high_score,
            elapsed_seconds=d.elapsed_seconds,
            level=d.level,
            progress=d.progress,
            final_score=d.final_score,
            decrease_rate=d.decrease_rate,
            typed_word=TypedWordView(
                target_word=self._typed.target_word,
                typed_text=self._typed.typed_text,
                letter_states=[s.value for s in self._typed.letter_states],
            ),
        )

    def _on_decay_tick(self, generation: int) -> None:
        if not self._is_live(generation):
            return
        self._data = self._reduce(self._data, DecayTick())
        if self._data.depleted:
            self._end()
        self._notify()

    def _on_difficulty_tick(self, generation: int) -> None:
        if not self._is_live(generation):
            return
        before = self._data.level
        self._data = self._reduce(self._data, DifficultyTick())
        if self._data.level != before:
            logger.info("Level %s reached (decrease_rate=%s)", self._data.level, self._data.decrease_rate)
        self._notify()

    def _end(self) -> None:
        self._data = self._reduce(self._data, GameEnded())
        self._cancel_timers()
        self._generation += 1
        self._fsm.send("finish")

        score = self._data.final_score
        logger.info("Game over (final_score=%s, high_score=%s)", score, self._data.high_score)
        if score <= self._data.high_score:
            return

        self._data = self._reduce(self._data, HighScoreObserved(score=score))
        if self._gateway is not None:
            self._gateway.save_local_high_score(score)
            self._scheduler.spawn(self._submit_remote(self._gateway, score), name=f"submit-high-score-{score}")

    async def _submit_remote(self, gateway: ScoreGateway, score: int) -> None:
        confirmed = await gateway.submit_remote_high_score(score)
        if confirmed is not None:
            self.observe_high_score(confirmed)

    def _is_live(self, generation: int) -> bool:
        if generation != self._generation or self.state != SessionState.playing:
            logger.debug("Stale tick dropped (generation=%s, current=%s)", generation, self._generation)
            return False
        return True

    def _cancel_timers(self) -> None:
        for handle in self._timers:
            handle.cancel()
        self._timers = []

    def _reduce(self, data: GameData, event: GameEvent) -> GameData:
        return reduce(data, event, config=self._config)

    def _notify(self) -> None:
        # Listener errors are logged and never reach the tick or input handler that notified.
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Session listener %r failed", listener)
