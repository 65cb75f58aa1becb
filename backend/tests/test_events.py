from conftest import make_snapshot

from padelboard.services.events import (
    ERROR,
    WINNER,
    PointEvent,
    build_point_log,
    collect_point_events,
    detail_breakdown,
    normalize_error_detail,
    normalize_winner_detail,
    point_outcome,
)


def test_delta_conservation(break_match):
    events = collect_point_events(break_match)
    first, final = break_match[0]["players"], break_match[-1]["players"]
    for i in range(4):
        winners = sum(1 for ev in events if ev.player_index == i and ev.event_type == WINNER)
        errors = sum(1 for ev in events if ev.player_index == i and ev.event_type == ERROR)
        assert winners == final[i]["winners"] - first[i]["winners"]
        assert errors == final[i]["errors"] - first[i]["errors"]


def test_events_ordered_by_slot_then_type():
    snaps = [
        make_snapshot(),
        make_snapshot(players=((0, 0), (2, 1), (0, 1), (0, 0)), extra_info="door"),
    ]
    events = collect_point_events(snaps)
    assert [(ev.player_index, ev.event_type) for ev in events] == [
        (1, WINNER),
        (1, WINNER),
        (1, ERROR),
        (2, ERROR),
    ]
    assert all(ev.index == 1 for ev in events)
    assert all(ev.detail == "door" for ev in events)
    assert [ev.team for ev in events] == [1, 1, 1, 2]


def test_counter_decrease_emits_nothing():
    snaps = [
        make_snapshot(players=((3, 2), (0, 0), (0, 0), (0, 0))),
        make_snapshot(players=((1, 0), (0, 0), (0, 0), (0, 0))),
    ]
    assert collect_point_events(snaps) == []


def test_fewer_than_two_snapshots_have_no_events():
    assert collect_point_events([]) == []
    assert collect_point_events([make_snapshot()]) == []


def test_point_team_of_error_is_the_opponent():
    winner = PointEvent(index=1, player_index=0, team=1, event_type=WINNER)
    error = PointEvent(index=1, player_index=0, team=1, event_type=ERROR)
    assert winner.point_team == 1
    assert error.point_team == 2
    assert error.as_dict() == {
        "index": 1,
        "playerIndex": 0,
        "team": 1,
        "eventType": "error",
        "detail": None,
    }


def test_detail_normalization():
    assert normalize_winner_detail(" X3 ") == "x3"
    assert normalize_winner_detail("lob") == "normal"
    assert normalize_winner_detail(None) == "normal"
    assert normalize_error_detail("Forced") == "forced"
    assert normalize_error_detail("") == "unforced"


def test_detail_breakdown_buckets_one_player():
    snaps = [
        make_snapshot(),
        make_snapshot(players=((1, 0), (0, 0), (0, 0), (0, 0)), extra_info="barbaridad"),
        make_snapshot(players=((2, 0), (0, 0), (0, 0), (0, 0))),
        make_snapshot(players=((2, 1), (1, 0), (0, 0), (0, 0)), extra_info="beer"),
    ]
    breakdown = detail_breakdown(snaps, 0)
    assert breakdown["winners"]["barbaridad"] == 1
    assert breakdown["winners"]["normal"] == 1
    assert breakdown["errors"]["beer"] == 1
    assert breakdown["totalEvents"] == 3
    assert detail_breakdown(snaps, 3)["totalEvents"] == 0


def test_point_outcome_prefers_last_winner():
    err = PointEvent(index=2, player_index=2, team=2, event_type=ERROR)
    win = PointEvent(index=2, player_index=1, team=1, event_type=WINNER)
    assert point_outcome([win, err]) == win
    assert point_outcome([err]) == err
    assert point_outcome([]) is None


def test_point_log(break_match):
    log = build_point_log(break_match)
    assert len(log) == len(break_match) - 1

    first = log[0]
    assert first["index"] == 1
    assert first["durationSec"] == 10.0
    assert first["startTime"] == 0.0
    assert first["endTime"] == 10.0
    assert first["scoreLabel"] == "0-15"
    assert first["serverTeam"] == 1
    assert first["serverPlayerIndex"] == 0
    assert first["outcome"]["playerIndex"] == 2

    game_two = log[5]
    assert game_two["serverRaw"] == 3
    assert game_two["serverTeam"] == 2

    assert [entry["gamePoint"] for entry in log[:5]] == [[], [], [], [2], [2]]
    assert all(entry["setPoint"] == [] for entry in log)
    assert {entry["setNumber"] for entry in log} == {1}


def test_point_log_set_point():
    snaps = [
        make_snapshot(points=("40", "15"), games=(5, 4), sets="6-3 / 5-4"),
        make_snapshot(
            points=("0", "0"),
            games=(0, 0),
            sets="6-3 / 6-4 / 0-0",
            players=((1, 0), (0, 0), (0, 0), (0, 0)),
        ),
        make_snapshot(
            points=("15", "0"),
            games=(0, 0),
            sets="6-3 / 6-4 / 0-0",
            players=((2, 0), (0, 0), (0, 0), (0, 0)),
        ),
    ]
    first, second = build_point_log(snaps)
    assert first["gamePoint"] == [1]
    assert first["setPoint"] == [1]
    assert first["setNumber"] == 2
    assert second["gamePoint"] == []
    assert second["setPoint"] == []


def test_point_log_minimum_duration():
    snaps = [
        make_snapshot(timestamp=100),
        make_snapshot(players=((1, 0), (0, 0), (0, 0), (0, 0)), timestamp=100.2),
        make_snapshot(players=((1, 0), (0, 0), (0, 0), (0, 0))),
    ]
    log = build_point_log(snaps)
    assert log[0]["durationSec"] == 1.0
    assert log[1]["durationSec"] == 1.0
    assert log[1]["outcome"] is None
