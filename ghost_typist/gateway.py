"""Score persistence gateway.

Two stores sit behind one object:
- a local durable file (synchronous, read at session creation and written on a new best);
- the remote high-score service (async, over HTTP).

Nothing here raises into game logic. Every failure is logged and reported as
"no update available" (`0` for the local read, `None` for remote calls).
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import httpx
from pydantic import ValidationError

from ghost_typist.api.models import HighScoreResponse
from ghost_typist.config import Settings


logger = logging.getLogger(__name__)

HIGHSCORE_PATH = "/api/highscore"


class FileHighScoreStore:
    """Single integer persisted as `{"highScore": n}` in a JSON file."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> int:
        if not self.path.exists():
            return 0
        raw = json.loads(self.path.read_text(encoding="utf-8"))
        return HighScoreResponse.model_validate(raw).high_score

    def save(self, score: int) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = HighScoreResponse(high_score=score).model_dump_json(by_alias=True)
        # Write-then-rename so a crash never leaves a half-written file behind.
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".highscore-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp, self.path)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise


class ScoreGateway:
    def __init__(self, *, local: FileHighScoreStore, client: httpx.AsyncClient) -> None:
        self._local = local
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "ScoreGateway":
        client = httpx.AsyncClient(base_url=settings.api_url, timeout=settings.http_timeout)
        return cls(local=FileHighScoreStore(settings.highscore_path), client=client)

    def load_local_high_score(self) -> int:
        try:
            return self._local.load()
        except (OSError, ValueError) as e:
            # pydantic's ValidationError and json's JSONDecodeError are both ValueErrors.
            logger.warning("Failed to read local high score from %s: %s", self._local.path, e)
            return 0

    def save_local_high_score(self, score: int) -> None:
        try:
            self._local.save(score)
        except OSError as e:
            logger.warning("Failed to save local high score to %s: %s", self._local.path, e)

    async def fetch_remote_high_score(self) -> int | None:
        return await self._request("GET", None)

    async def submit_remote_high_score(self, score: int) -> int | None:
        return await self._request("POST", {"score": score})

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, body: dict[str, Any] | None) -> int | None:
        try:
            resp = await self._client.request(method, HIGHSCORE_PATH, json=body)
            resp.raise_for_status()
            return HighScoreResponse.model_validate(resp.json()).high_score
        except httpx.HTTPStatusError as e:
            logger.warning("%s %s rejected with %s", method, HIGHSCORE_PATH, e.response.status_code)
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, HIGHSCORE_PATH, e)
        except (ValueError, ValidationError) as e:
            logger.warning("%s %s returned an unreadable body: %s", method, HIGHSCORE_PATH, e)
        return None
