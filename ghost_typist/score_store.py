from __future__ import annotations

import logging

import redis


logger = logging.getLogger(__name__)

HIGHSCORE_KEY = "ghost_typist:highscore"


def get_high_score(*, r: redis.Redis) -> int:
    raw = r.get(HIGHSCORE_KEY)
    if not raw:
        return 0
    return int(raw)


def save_high_score(*, r: redis.Redis, score: int) -> int:
    """Store `score` if it beats the stored value; return the resulting high score.

    Runs as a WATCH/MULTI transaction, so two concurrent submissions can never
    leave the smaller one behind.
    """

    if score < 0:
        raise ValueError("score must be non-negative")

    result: dict[str, int] = {}

    def _apply(pipe: redis.client.Pipeline) -> None:
        raw = pipe.get(HIGHSCORE_KEY)
        current = int(raw) if raw else 0
        if score <= current:
            result["high_score"] = current
            result["written"] = 0
            return
        pipe.multi()
        pipe.set(HIGHSCORE_KEY, str(score))
        result["high_score"] = score
        result["written"] = 1

    r.transaction(_apply, HIGHSCORE_KEY)
    if result.get("written"):
        logger.info("Stored new high score %s", score)
    return result["high_score"]
