import pytest

from conftest import make_snapshot

from padelboard.services.breaks import compute_break_stats, derive_game_outcomes


def _game_won_from(points, winner=1, server=1):
    """A two-snapshot history where ``winner`` takes the game from ``points``."""

    scorer = ((1, 0), (0, 0), (0, 0), (0, 0)) if winner == 1 else ((0, 0), (0, 0), (1, 0), (0, 0))
    games = (1, 0) if winner == 1 else (0, 1)
    return [
        make_snapshot(points=points, server=server),
        make_snapshot(points=("0", "0"), games=games, server=server, players=scorer),
    ]


def test_outcomes_for_broken_games(break_match):
    outcomes = derive_game_outcomes(break_match)
    assert [o.index for o in outcomes] == [5, 9]
    assert [o.game_number for o in outcomes] == [1, 2]
    assert [o.winner_team for o in outcomes] == [2, 1]
    assert [o.server_team for o in outcomes] == [1, 2]
    assert [o.was_break for o in outcomes] == [True, True]
    assert [o.was_golden for o in outcomes] == [False, False]
    assert outcomes[0].final_event.player_index == 2
    assert outcomes[1].final_event.player_index == 0
    assert outcomes[0].loser_team == 1


@pytest.mark.parametrize(
    "points, golden",
    [(("40", "40"), True), (("40", "30"), False), ((" 40 ", "40"), True)],
    ids=["golden", "not-golden", "padded"],
)
def test_golden_point_detection(points, golden):
    (outcome,) = derive_game_outcomes(_game_won_from(points))
    assert outcome.was_golden is golden


def test_hold_is_not_a_break():
    (outcome,) = derive_game_outcomes(_game_won_from(("40", "15"), winner=1, server=2))
    assert outcome.server_team == 1
    assert outcome.server_player_index == 1
    assert outcome.was_break is False


def test_server_falls_back_to_previous_snapshot():
    snaps = _game_won_from(("40", "15"), winner=2, server=4)
    snaps[1]["server"] = None
    (outcome,) = derive_game_outcomes(snaps)
    assert outcome.server_team == 2
    assert outcome.was_break is False


def test_unknown_server_is_never_a_break():
    snaps = _game_won_from(("40", "15"), winner=2, server=None)
    (outcome,) = derive_game_outcomes(snaps)
    assert outcome.server_team is None
    assert outcome.was_break is False


def test_multi_game_jumps_are_not_completions():
    snaps = [
        make_snapshot(games=(0, 0)),
        make_snapshot(games=(1, 1)),
        make_snapshot(games=(3, 1)),
        make_snapshot(sets="6-4 / 0-0", games=(0, 0)),
    ]
    assert derive_game_outcomes(snaps) == []


def test_game_without_counter_change_has_no_final_event():
    snaps = [
        make_snapshot(points=("40", "0")),
        make_snapshot(points=("0", "0"), games=(1, 0)),
    ]
    (outcome,) = derive_game_outcomes(snaps)
    assert outcome.final_event is None


def test_final_event_matches_winning_side():
    snaps = [
        make_snapshot(points=("40", "0")),
        # team 2 error hands team 1 the game; team 1 error is unrelated
        make_snapshot(points=("0", "0"), games=(1, 0), players=((0, 1), (0, 0), (0, 1), (0, 0))),
    ]
    (outcome,) = derive_game_outcomes(snaps)
    assert outcome.final_event.player_index == 2
    assert outcome.final_event.event_type == "error"


def test_break_stats(break_match):
    assert compute_break_stats(break_match) == {
        "team1": {"breaks": 1, "breakpoints": 1},
        "team2": {"breaks": 1, "breakpoints": 2},
    }


def test_repeated_breakpoint_snapshots_count_once():
    snaps = [
        make_snapshot(points=("0", "0"), server=1),
        make_snapshot(points=("30", "40"), server=1),
        make_snapshot(points=("30", "40"), server=1),
        make_snapshot(points=("40", "40"), server=1),
        make_snapshot(points=("40", "AD"), server=1),
        make_snapshot(points=("40", "40"), server=1),
        make_snapshot(points=("AD", "40"), server=1),
        make_snapshot(points=("0", "0"), games=(1, 0), server=1),
    ]
    # 30-40, the first 40-40 and 40-AD; deuce after advantage is not golden
    assert compute_break_stats(snaps) == {
        "team1": {"breaks": 0, "breakpoints": 0},
        "team2": {"breaks": 0, "breakpoints": 3},
    }


def test_golden_point_is_a_breakpoint_without_advantage():
    snaps = _game_won_from(("40", "40"), winner=2, server=1)
    assert compute_break_stats(snaps) == {
        "team1": {"breaks": 0, "breakpoints": 0},
        "team2": {"breaks": 1, "breakpoints": 1},
    }


def test_break_stats_empty_history():
    assert compute_break_stats([]) == {
        "team1": {"breaks": 0, "breakpoints": 0},
        "team2": {"breaks": 0, "breakpoints": 0},
    }
