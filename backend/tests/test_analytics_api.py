import pytest
from fastapi.testclient import TestClient

from padelboard.main import app
from padelboard.routers import analytics

client = TestClient(app)

BASE = "/api/v0/analytics"


def test_full_analytics(break_match):
    resp = client.post(BASE, json={"snapshots": break_match, "status": "Finished"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["snapshotCount"] == 10
    assert data["status"] == "finished"
    assert data["mvp"] == [True, False, True, False]
    assert data["teamRows"][1]["breakpoints"] == 2


def test_events_endpoint(break_match):
    resp = client.post(f"{BASE}/events", json={"snapshots": break_match})
    assert resp.status_code == 200
    data = resp.json()
    assert data["snapshotCount"] == 10
    assert len(data["events"]) == 9
    assert data["events"][0] == {
        "index": 1,
        "playerIndex": 2,
        "team": 2,
        "eventType": "winner",
        "detail": None,
    }


def test_events_endpoint_prefers_stored_events(break_match):
    events = [{"id": i, "raw": snap, "watchTimestamp": None} for i, snap in enumerate(break_match)]
    resp = client.post(f"{BASE}/events", json={"snapshots": [], "events": events})
    assert resp.status_code == 200
    assert resp.json()["snapshotCount"] == 10


def test_key_moments_endpoint(break_match):
    roster = [{"team": 1, "slot": 1, "name": "Ana"}, {"team": 1, "slot": 2, "name": "Bea"}]
    resp = client.post(f"{BASE}/key-moments", json={"snapshots": break_match, "players": roster})
    assert resp.status_code == 200
    team = resp.json()["team"]
    texts = [m["text"] for m in team]
    assert "Longest point run: Ana/Bea (4)" in texts
    assert resp.json()["player"] == []


def test_summary_endpoint_sorts_rows(break_match):
    resp = client.post(
        f"{BASE}/summary",
        params={"sort": "impact", "descending": "true"},
        json={"snapshots": break_match, "status": "finished"},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert [row["team"] for row in data["teamRows"]] == [1, 2]
    assert [row["index"] for row in data["playerRows"]] == [0, 2, 1, 3]
    assert data["mvp"] == [True, False, True, False]


def test_summary_rejects_unknown_sort_column(break_match):
    resp = client.post(
        f"{BASE}/summary", params={"sort": "name"}, json={"snapshots": break_match}
    )
    assert resp.status_code == 422
    assert resp.headers["content-type"].startswith("application/problem+json")
    assert resp.json()["code"] == "invalid_sort"


def test_summary_of_empty_history_is_a_problem():
    resp = client.post(f"{BASE}/summary", json={"snapshots": [{"status": "finished"}]})
    assert resp.status_code == 404
    body = resp.json()
    assert body["code"] == "empty_match_history"
    assert body["title"] == "No snapshots"


@pytest.mark.parametrize(
    "payload",
    [
        {"snapshots": "6-4"},
        {"snapshots": [1, 2]},
        {"snapshots": [], "events": [{"raw": "x"}]},
        {"snapshots": [], "players": [{"team": 5, "slot": 1}]},
    ],
    ids=["string", "non-object-entries", "bad-event-raw", "bad-roster"],
)
def test_invalid_payloads_return_problem(payload):
    resp = client.post(BASE, json=payload)
    assert resp.status_code == 422
    assert resp.headers["content-type"].startswith("application/problem+json")
    body = resp.json()
    assert body["code"] == "invalid_snapshots"
    assert body["status"] == 422


def test_too_many_snapshots(monkeypatch):
    monkeypatch.setattr(analytics, "MAX_SNAPSHOTS", 3)
    resp = client.post(BASE, json={"snapshots": [{}] * 4})
    assert resp.status_code == 422
    assert "Max allowed is 3" in resp.json()["detail"]


def test_oversized_counters_are_rejected():
    players = [{"winners": 3_000_000, "errors": 0}, {}, {}, {}]
    resp = client.post(
        f"{BASE}/events", json={"snapshots": [{"players": []}, {"players": players}]}
    )
    assert resp.status_code == 422
    assert resp.json()["code"] == "invalid_snapshots"
    assert "exceeds" in resp.json()["detail"]


def test_too_many_point_events(monkeypatch, break_match):
    monkeypatch.setattr(analytics, "MAX_POINT_EVENTS", 8)
    resp = client.post(BASE, json={"snapshots": break_match})
    assert resp.status_code == 422
    assert "Max allowed is 8" in resp.json()["detail"]


def test_sets_parse_endpoint():
    resp = client.post(
        f"{BASE}/sets/parse",
        json={"sets": "6-4 / 3-6 / 0-0", "status": "finished"},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["sets"] == [
        {"team1": 6, "team2": 4, "hidden": False},
        {"team1": 3, "team2": 6, "hidden": False},
        {"team1": 0, "team2": 0, "hidden": True},
    ]
    assert data["setsWon"] == {"team1": 1, "team2": 1}
    assert data["sanitized"] == "6-4 / 3-6"
    assert data["setsPlayed"] == 2


def test_sets_parse_with_structured_sets_and_games():
    resp = client.post(
        f"{BASE}/sets/parse",
        json={"sets": {"team1": 1, "team2": 0}, "games": {"team1": 2, "team2": 5}},
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["sets"] == [{"team1": 2, "team2": 5, "hidden": False}]
    assert data["setsWon"] == {"team1": 1, "team2": 0}
    assert data["sanitized"] == ""
    assert data["setsPlayed"] == 1


def test_rate_limit_returns_problem(monkeypatch):
    monkeypatch.setenv("DISABLE_ANALYTICS_RATE_LIMITS", "false")
    monkeypatch.setattr(analytics, "ANALYTICS_RATE_LIMIT", "2/minute")
    analytics.limiter.reset()
    try:
        for _ in range(2):
            assert client.post(f"{BASE}/sets/parse", json={"sets": "6-4"}).status_code == 200
        resp = client.post(f"{BASE}/sets/parse", json={"sets": "6-4"})
        assert resp.status_code == 429
        assert resp.json()["code"] == "rate_limit_exceeded"
    finally:
        analytics.limiter.reset()


def test_health_checks():
    assert client.get("/healthz").json() == {"status": "ok"}
    assert client.get("/api/healthz").json() == {"status": "ok"}
    assert client.post("/api/sentry-test").status_code == 400
