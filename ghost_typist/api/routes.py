from __future__ import annotations

import json
import logging
import math
from typing import Any

import redis
from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from ghost_typist.api.deps import get_redis
from ghost_typist.api.models import ErrorResponse, HighScoreResponse
from ghost_typist.score_store import get_high_score, save_high_score

logger = logging.getLogger(__name__)

router = APIRouter()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(message=message).model_dump())


def _parse_score(body: Any) -> int | None:
    """Return the submitted score as an int, or None when it's not a non-negative number."""

    if not isinstance(body, dict):
        return None
    score = body.get("score")
    # bool is an int subclass; `true` is not a score.
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        return None
    if not math.isfinite(score) or score < 0:
        return None
    return math.floor(score)


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/api/highscore",
    response_model=HighScoreResponse,
    responses={500: {"model": ErrorResponse}},
)
async def get_highscore_route(r: redis.Redis = Depends(get_redis)) -> HighScoreResponse | JSONResponse:
    try:
        high_score = get_high_score(r=r)
    except (redis.RedisError, ValueError):
        logger.exception("Failed to read high score")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to get high score")
    return HighScoreResponse(high_score=high_score)


@router.post(
    "/api/highscore",
    response_model=HighScoreResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def post_highscore_route(request: Request, r: redis.Redis = Depends(get_redis)) -> HighScoreResponse | JSONResponse:
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        body = None

    score = _parse_score(body)
    if score is None:
        return _error(status.HTTP_400_BAD_REQUEST, "Invalid score")

    try:
        high_score = save_high_score(r=r, score=score)
    except (redis.RedisError, ValueError):
        logger.exception("Failed to update high score")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to update high score")
    return HighScoreResponse(high_score=high_score)
