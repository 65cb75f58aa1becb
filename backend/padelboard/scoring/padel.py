"""Padel scoring rules.

Classifies point scores (game point, breakpoint, golden point) and resolves
which team or player is serving from the device's ``server`` field.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

ADVANTAGE_VALUES = frozenset({"AD", "A"})
TEAMS = (1, 2)


def other_team(team: int) -> int:
    return 2 if team == 1 else 1


def team_of_player(player_index: int) -> int:
    return 1 if player_index < 2 else 2


def normalize_point(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip().upper()


def _as_server_number(server: Any) -> Optional[int]:
    if isinstance(server, bool) or not isinstance(server, (int, float)):
        return None
    if isinstance(server, float) and not server.is_integer():
        return None
    return int(server)


def server_player_index(server: Any) -> Optional[int]:
    """Return the 0-based index of the serving player.

    Values ``1``-``4`` identify players; anything else is unknown.  The
    team-only fallback for ``1``/``2`` can never trigger because both values
    are already inside the player range.
    """

    value = _as_server_number(server)
    if value is None:
        return None
    if 1 <= value <= 4:
        return value - 1
    return None


def server_team(server: Any) -> Optional[int]:
    """Return the serving team (``1`` or ``2``) for a raw ``server`` value."""

    value = _as_server_number(server)
    if value is None:
        return None
    if 1 <= value <= 4:
        return 1 if value <= 2 else 2
    return None


def team_points(points: Optional[Mapping[str, Any]], team: int) -> str:
    points = points or {}
    return normalize_point(points.get("team1" if team == 1 else "team2"))


def is_golden_point(points: Optional[Mapping[str, Any]]) -> bool:
    return team_points(points, 1) == "40" and team_points(points, 2) == "40"


def has_advantage(points: Optional[Mapping[str, Any]]) -> bool:
    return (
        team_points(points, 1) in ADVANTAGE_VALUES
        or team_points(points, 2) in ADVANTAGE_VALUES
    )


def is_classic_break_point(server_pts: Any, receiver_pts: Any) -> bool:
    s = normalize_point(server_pts)
    r = normalize_point(receiver_pts)
    if r == "40" and s in ("0", "15", "30"):
        return True
    if r in ADVANTAGE_VALUES and s == "40":
        return True
    return False


def is_breakpoint_for(
    serving_team: Optional[int],
    points: Optional[Mapping[str, Any]],
    team: int,
) -> bool:
    """True when ``team`` is receiving and holds a classic breakpoint."""

    if serving_team not in TEAMS or team == serving_team:
        return False
    return is_classic_break_point(
        team_points(points, serving_team), team_points(points, team)
    )


def is_game_point(team_pts: Any, opp_pts: Any) -> bool:
    a = normalize_point(team_pts)
    b = normalize_point(opp_pts)
    if a in ADVANTAGE_VALUES:
        return True
    if a == "40" and b in ("0", "15", "30", "40"):
        return True
    return False


def is_set_point(team_games: Any, opp_games: Any) -> bool:
    a = _int_or_zero(team_games)
    b = _int_or_zero(opp_games)
    return a >= 5 and a - b >= 1


def is_finished_set(team1_games: int, team2_games: int) -> bool:
    high = max(team1_games, team2_games)
    diff = abs(team1_games - team2_games)
    # 7-6 closes a set through the tiebreak
    return (high >= 6 and diff >= 2) or (high >= 7 and diff >= 1)


def _int_or_zero(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def _finite_pair(values: Optional[Mapping[str, Any]]) -> Optional[tuple[float, float]]:
    if not isinstance(values, Mapping):
        return None
    pair = []
    for key in ("team1", "team2"):
        raw = values.get(key)
        if isinstance(raw, bool) or raw is None:
            return None
        try:
            number = float(raw)
        except (TypeError, ValueError):
            return None
        if number != number or number in (float("inf"), float("-inf")):
            return None
        pair.append(number)
    return pair[0], pair[1]


def determine_winner_team(
    sets_won: Optional[Mapping[str, Any]],
    games: Optional[Mapping[str, Any]] = None,
    points: Optional[Mapping[str, Any]] = None,
) -> Optional[int]:
    """Decide the leading team from sets, then games, then points.

    Each argument is a ``{"team1", "team2"}`` mapping.  The first level whose
    two values are numeric and different decides; ``None`` when every level
    is level or unusable.
    """

    for level in (sets_won, games, points):
        pair = _finite_pair(level)
        if pair is not None and pair[0] != pair[1]:
            return 1 if pair[0] > pair[1] else 2
    return None
