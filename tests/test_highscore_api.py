from __future__ import annotations

from collections.abc import Generator

import fakeredis
import pytest
from fastapi.testclient import TestClient

from ghost_typist.api.deps import get_redis
from ghost_typist.main import app
from ghost_typist.score_store import HIGHSCORE_KEY, save_high_score


def test_healthcheck_and_info(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis
    assert client.get("/healthcheck").json() == {"status": "ok"}
    assert client.get("/info").json()["name"] == "ghost-typist"


def test_empty_store_reports_zero(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis
    resp = client.get("/api/highscore")
    assert resp.status_code == 200
    assert resp.json() == {"highScore": 0}


def test_post_keeps_the_maximum(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, r = client_and_redis

    assert client.post("/api/highscore", json={"score": 10}).json() == {"highScore": 10}
    assert client.post("/api/highscore", json={"score": 4}).json() == {"highScore": 10}
    assert r.get(HIGHSCORE_KEY) == "10"

    assert client.post("/api/highscore", json={"score": 25}).json() == {"highScore": 25}
    assert client.get("/api/highscore").json() == {"highScore": 25}


def test_zero_is_a_valid_score(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, r = client_and_redis
    resp = client.post("/api/highscore", json={"score": 0})
    assert resp.status_code == 200
    assert resp.json() == {"highScore": 0}
    assert r.get(HIGHSCORE_KEY) is None


def test_fractional_scores_are_floored(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis
    assert client.post("/api/highscore", json={"score": 12.9}).json() == {"highScore": 12}


def test_negative_score_is_rejected(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, r = client_and_redis
    resp = client.post("/api/highscore", json={"score": -1})
    assert resp.status_code == 400
    assert resp.json() == {"message": "Invalid score"}
    assert r.get(HIGHSCORE_KEY) is None


@pytest.mark.parametrize("body", [{"score": "12"}, {"score": True}, {"score": None}, {}, [12], 12])
def test_non_numeric_payloads_are_rejected(client_and_redis: tuple[TestClient, fakeredis.FakeRedis], body: object) -> None:
    client, _ = client_and_redis
    resp = client.post("/api/highscore", json=body)
    assert resp.status_code == 400
    assert resp.json()["message"] == "Invalid score"


def test_malformed_json_is_rejected(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis
    resp = client.post("/api/highscore", content=b"{score: 5", headers={"content-type": "application/json"})
    assert resp.status_code == 400


def test_store_never_regresses() -> None:
    r = fakeredis.FakeRedis(decode_responses=True)
    results = [save_high_score(r=r, score=s) for s in (3, 9, 1, 9, 7, 15, 2)]
    assert results == [3, 9, 9, 9, 9, 15, 15]
    with pytest.raises(ValueError):
        save_high_score(r=r, score=-5)


def test_storage_outage_returns_500() -> None:
    server = fakeredis.FakeServer()
    server.connected = False
    r = fakeredis.FakeRedis(server=server, decode_responses=True)

    def _override() -> Generator[fakeredis.FakeRedis, None, None]:
        yield r

    app.dependency_overrides[get_redis] = _override
    try:
        with TestClient(app) as client:
            get_resp = client.get("/api/highscore")
            post_resp = client.post("/api/highscore", json={"score": 5})
    finally:
        app.dependency_overrides.clear()

    assert get_resp.status_code == 500
    assert get_resp.json() == {"message": "Failed to get high score"}
    assert post_resp.status_code == 500
    assert post_resp.json() == {"message": "Failed to update high score"}
