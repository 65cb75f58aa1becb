import os
import sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

# main.py fails fast without explicit CORS origins
os.environ.setdefault("ALLOWED_ORIGINS", "http://localhost:3000")
os.environ.setdefault("ALLOW_CREDENTIALS", "false")
os.environ.setdefault("DISABLE_ANALYTICS_RATE_LIMITS", "true")


def make_snapshot(
    points=("0", "0"),
    games=(0, 0),
    server=1,
    players=((0, 0), (0, 0), (0, 0), (0, 0)),
    timestamp=None,
    sets=None,
    extra_info=None,
    status="live",
):
    """Build a raw snapshot dict the way the scoring watch posts it."""

    snap = {
        "points": {"team1": points[0], "team2": points[1]},
        "games": {"team1": games[0], "team2": games[1]},
        "server": server,
        "players": [{"winners": w, "errors": e} for w, e in players],
        "status": status,
    }
    if timestamp is not None:
        snap["timestamp"] = timestamp
    if sets is not None:
        snap["sets"] = sets
    if extra_info is not None:
        snap["extraInfo"] = extra_info
    return snap


@pytest.fixture
def break_match():
    """Two games, each won against serve, ten seconds per point.

    Team 1 serves game one and loses it from 0-40; team 2 serves game two and
    loses it from 40-0.  Final counters: P1 3/1, P2 1/0, P3 2/0, P4 1/1.
    """

    rows = [
        # points, games, server, players
        (("0", "0"), (0, 0), 1, ((0, 0), (0, 0), (0, 0), (0, 0))),
        (("0", "15"), (0, 0), 1, ((0, 0), (0, 0), (1, 0), (0, 0))),
        (("0", "30"), (0, 0), 1, ((0, 0), (0, 0), (1, 0), (1, 0))),
        (("0", "40"), (0, 0), 1, ((0, 1), (0, 0), (1, 0), (1, 0))),
        (("15", "40"), (0, 0), 1, ((1, 1), (0, 0), (1, 0), (1, 0))),
        (("0", "0"), (0, 1), 1, ((1, 1), (0, 0), (2, 0), (1, 0))),
        (("15", "0"), (0, 1), 3, ((2, 1), (0, 0), (2, 0), (1, 0))),
        (("30", "0"), (0, 1), 3, ((2, 1), (1, 0), (2, 0), (1, 0))),
        (("40", "0"), (0, 1), 3, ((2, 1), (1, 0), (2, 0), (1, 1))),
        (("0", "0"), (1, 1), 3, ((3, 1), (1, 0), (2, 0), (1, 1))),
    ]
    return [
        make_snapshot(points=p, games=g, server=s, players=pl, timestamp=1000 + 10 * i)
        for i, (p, g, s, pl) in enumerate(rows)
    ]
