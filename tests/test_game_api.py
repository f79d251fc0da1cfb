from __future__ import annotations

import fakeredis
from fastapi.testclient import TestClient

from meaningless.lock import session_lock


def _correct_index(round_data: dict) -> int:
    return next(o["index"] for o in round_data["options"] if o["is_correct"])


def test_healthcheck_and_info(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis
    assert client.get("/healthcheck").json() == {"status": "ok"}
    assert client.get("/info").json()["name"] == "meaningless"


def test_full_game_flow(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis

    res = client.post("/players/p1/game", json={"difficulty": "easy", "round_count": 2, "time_limit": 30})
    assert res.status_code == 201, res.text
    session = res.json()
    assert session["current_round"] == 0
    assert len(session["rounds"]) == 2
    assert session["settings"]["difficulty"] == "easy"

    res = client.post("/players/p1/game/actions/next_round")
    assert res.status_code == 200, res.text
    assert res.json()["started"] is True

    rnd = client.get("/players/p1/game/round").json()
    res = client.post("/players/p1/game/actions/select", json={"option_index": _correct_index(rnd), "time_spent": 15})
    assert res.status_code == 200, res.text
    body = res.json()
    assert body["round"]["completed"] is True
    assert body["session"]["score"] > 0

    contradiction = client.get("/players/p1/game/contradiction")
    assert contradiction.status_code == 200
    assert '<span class="highlight">' in contradiction.json()["highlighted_sentence"]

    assert client.get("/players/p1/game/message").status_code == 200

    client.post("/players/p1/game/actions/next_round")
    res = client.post("/players/p1/game/actions/timeout")
    assert res.status_code == 200, res.text
    assert res.json()["round"]["time_spent"] == 30

    res = client.post("/players/p1/game/actions/next_round")
    assert res.json()["started"] is False

    res = client.post("/players/p1/game/actions/complete")
    assert res.status_code == 200, res.text
    summary = res.json()["summary"]
    assert summary["total_rounds"] == 2
    assert summary["difficulty"] == "easy"

    takeaways = client.get("/players/p1/game/takeaways").json()["takeaways"]
    assert takeaways

    history = client.get("/players/p1/history").json()["games"]
    assert [g["id"] for g in history] == [session["id"]]

    progress = client.get("/players/p1/progress").json()
    assert progress["games_played"] == 1
    assert progress["difficulty_progression"]["easy"] == 1

    res = client.post("/players/p1/game/actions/complete")
    assert res.status_code == 409

    res = client.post("/players/p1/game/actions/next_round")
    assert res.status_code == 200, res.text
    assert res.json()["started"] is False


def test_second_selection_conflicts(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis
    client.post("/players/p1/game", json={"round_count": 1})
    client.post("/players/p1/game/actions/next_round")

    first = client.post("/players/p1/game/actions/select", json={"option_index": 0, "time_spent": 3})
    assert first.status_code == 200
    score = first.json()["session"]["score"]

    late_timer = client.post("/players/p1/game/actions/timeout")
    assert late_timer.status_code == 409
    assert client.get("/players/p1/game").json()["score"] == score


def test_busy_player_gets_conflict(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, r = client_and_redis
    client.post("/players/p1/game", json={"round_count": 1})

    with session_lock(r=r, player_id="p1"):
        res = client.post("/players/p1/game/actions/next_round")
    assert res.status_code == 409
    assert res.json()["detail"] == "Game is busy"


def test_errors_map_to_statuses(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis

    assert client.get("/players/ghost/game").status_code == 404
    assert client.post("/players/ghost/game/actions/next_round").status_code == 404

    client.post("/players/p1/game", json={"round_count": 1})
    assert client.get("/players/p1/game/round").status_code == 422
    assert client.get("/players/p1/game/contradiction").status_code == 422
    assert client.post("/players/p1/game/actions/skip").status_code == 422

    client.post("/players/p1/game/actions/next_round")
    res = client.post("/players/p1/game/actions/select", json={"option_index": 9, "time_spent": 1})
    assert res.status_code == 422
    res = client.post("/players/p1/game/actions/select", json={"option_index": 0})
    assert res.status_code == 422

    res = client.post("/players/p1/game", json={"round_count": 0})
    assert res.status_code == 422


def test_new_game_uses_stored_settings(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis

    res = client.patch("/players/p1/settings", json={"default_difficulty": "hard", "default_round_count": 3})
    assert res.status_code == 200
    assert res.json()["default_time_limit"] == 30

    session = client.post("/players/p1/game", json={}).json()
    assert session["settings"]["difficulty"] == "hard"
    assert session["total_rounds"] == 3


def test_consecutive_games_avoid_recent_words(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis

    first = client.post("/players/p1/game", json={"difficulty": "hard", "round_count": 2}).json()
    second = client.post("/players/p1/game", json={"difficulty": "hard", "round_count": 2}).json()

    first_ids = {rnd["word"]["id"] for rnd in first["rounds"]}
    second_ids = {rnd["word"]["id"] for rnd in second["rounds"]}
    assert not first_ids & second_ids


def test_reset_and_recover(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, r = client_and_redis
    session = client.post("/players/p1/game", json={"round_count": 2}).json()

    r.delete("meaningless:player:p1:current_game")
    assert client.get("/players/p1/game").json()["id"] == session["id"]

    assert client.delete("/players/p1/game").status_code == 200
    assert client.get("/players/p1/game").status_code == 404


def test_reference_lookups(client_and_redis: tuple[TestClient, fakeredis.FakeRedis]) -> None:
    client, _ = client_and_redis

    assert client.get("/words/word_001").json()["text"] == "bank"
    assert client.get("/words/missing").status_code == 404
    assert client.get("/concepts/homonym").json()["id"] == "homonym"
    assert client.get("/concepts/missing").status_code == 404

    assert client.get("/players/p1/tutorial").json() == {"seen": False}
    client.post("/players/p1/tutorial")
    assert client.get("/players/p1/tutorial").json() == {"seen": True}
