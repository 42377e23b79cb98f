from __future__ import annotations

import os
from collections.abc import Callable, Coroutine, Generator
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pytest


@pytest.fixture(scope="session", autouse=True)
def _load_dotenv_for_tests() -> None:
    """Load repo .env for local runs (PyCharm/CLI).

    In CI we don't auto-load `.env`, so a developer's local REDIS_URL or API URL
    never leaks into the run. Opt-in with: GHOST_TYPIST_LOAD_DOTENV_FOR_TESTS=1
    """

    if os.environ.get("CI") and os.environ.get("GHOST_TYPIST_LOAD_DOTENV_FOR_TESTS") != "1":
        return

    env_path = Path(__file__).resolve().parents[1] / ".env"
    if env_path.exists():
        from dotenv import load_dotenv

        load_dotenv(dotenv_path=env_path, override=False)


@dataclass
class ManualJob:
    period_ms: int
    callback: Callable[[], None]
    next_at: int
    seq: int
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Deterministic stand-in for the asyncio scheduler.

    Time only moves when a test calls `advance(ms)`; due jobs fire in
    (deadline, registration order). Spawned coroutines are parked until `drain()`.
    """

    def __init__(self) -> None:
        self.now_ms = 0
        self.jobs: list[ManualJob] = []
        self.spawned: list[Coroutine[Any, Any, Any]] = []
        self._seq = 0

    def every(self, period_ms: int, callback: Callable[[], None]) -> ManualJob:
        job = ManualJob(period_ms=period_ms, callback=callback, next_at=self.now_ms + period_ms, seq=self._seq)
        self._seq += 1
        self.jobs.append(job)
        return job

    def spawn(self, coro: Coroutine[Any, Any, Any], *, name: str | None = None) -> None:
        self.spawned.append(coro)

    @property
    def active(self) -> list[ManualJob]:
        return [j for j in self.jobs if not j.cancelled]

    def advance(self, ms: int) -> None:
        target = self.now_ms + ms
        while True:
            due = [j for j in self.active if j.next_at <= target]
            if not due:
                break
            job = min(due, key=lambda j: (j.next_at, j.seq))
            self.now_ms = job.next_at
            job.next_at += job.period_ms
            job.callback()
        self.now_ms = target

    async def drain(self) -> None:
        while self.spawned:
            await self.spawned.pop(0)

    def close(self) -> None:
        for coro in self.spawned:
            coro.close()
        self.spawned.clear()


class ScriptedWords:
    """Hands out words in order, repeating the last one once the script runs out."""

    def __init__(self, *words: str) -> None:
        self._words = list(words)
        self.drawn: list[str] = []

    def next_word(self) -> str:
        word = self._words.pop(0) if len(self._words) > 1 else self._words[0]
        self.drawn.append(word)
        return word


@pytest.fixture()
def scheduler() -> Generator[ManualScheduler, None, None]:
    s = ManualScheduler()
    yield s
    s.close()


@pytest.fixture()
def client_and_redis():
    """FastAPI TestClient wired to a fresh fakeredis instance."""

    from collections.abc import Generator

    import fakeredis
    from fastapi.testclient import TestClient

    from ghost_typist.api.deps import get_redis
    from ghost_typist.main import app

    r = fakeredis.FakeRedis(decode_responses=True)

    def _override() -> Generator[fakeredis.FakeRedis, None, None]:
        yield r

    app.dependency_overrides[get_redis] = _override
    with TestClient(app) as c:
        yield c, r
    app.dependency_overrides.clear()


@pytest.fixture()
def make_words() -> type[ScriptedWords]:
    return ScriptedWords


@pytest.fixture()
def make_gateway(tmp_path: Path):
    """Build a ScoreGateway on a temp-file local store and an httpx MockTransport.

    `handler` receives each outgoing `httpx.Request`; requests are also collected
    on the returned gateway as `gateway.requests`.
    """

    import httpx

    from ghost_typist.gateway import FileHighScoreStore, ScoreGateway

    def _make(handler: Callable[[httpx.Request], httpx.Response], *, local_score: int | None = None) -> ScoreGateway:
        requests: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return handler(request)

        store = FileHighScoreStore(tmp_path / "highscore.json")
        if local_score is not None:
            store.save(local_score)
        client = httpx.AsyncClient(transport=httpx.MockTransport(_record), base_url="http://scores.test")
        gateway = ScoreGateway(local=store, client=client)
        gateway.requests = requests  # type: ignore[attr-defined]
        return gateway

    return _make
