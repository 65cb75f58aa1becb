"""Streaks, clutch-point credits and key-moment superlatives.

Streaks are a left fold over the point events carrying an immutable
:class:`StreakState`.  Clutch credits go to the player whose shot ended a
game (a winner by the winning side or an error by the losing side); games
without such a shot are not credited to anyone.

Team break totals are taken from :func:`compute_break_stats` so key moments
agree with the summary rows; player break credits are capped to them in
game order.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from functools import reduce
from typing import Any, Callable, Optional, Sequence

from ..config import PLAYER_SLOTS
from ..scoring.padel import TEAMS, other_team, team_of_player
from ..time_utils import format_duration, relative_point_times
from .breaks import GameOutcome, compute_break_stats, derive_game_outcomes
from .events import PointEvent, collect_point_events
from .snapshots import normalize_snapshots, player_names, team_label

CREDIT_KEYS = (
    "goldenWon",
    "goldenLost",
    "gamePointWon",
    "gamePointLost",
    "breakWon",
    "breakLost",
)

PLAYER_THRESHOLD = 1
TEAM_THRESHOLD = 0
GAP_THRESHOLD = 0


@dataclass(frozen=True)
class Best:
    value: int = 0
    index: Optional[int] = None


def _zeros(n: int) -> tuple[int, ...]:
    return (0,) * n


def _bests(n: int) -> tuple[Best, ...]:
    return (Best(),) * n


@dataclass(frozen=True)
class StreakState:
    """Running streak counters and their maxima.

    Per player: consecutive winners, consecutive errors and consecutive
    points won.  Per team: the same three counters.  Each ``best_*`` entry
    remembers the first event index at which its maximum was reached.

    A player's point run grows with each of their winners and ends when the
    partner or the other side wins a point; an opponent's error hands the
    point over without touching it.
    """

    winner: tuple[int, ...] = _zeros(PLAYER_SLOTS)
    error: tuple[int, ...] = _zeros(PLAYER_SLOTS)
    points: tuple[int, ...] = _zeros(PLAYER_SLOTS)
    team_winner: tuple[int, ...] = _zeros(2)
    team_error: tuple[int, ...] = _zeros(2)
    team_points: tuple[int, ...] = _zeros(2)
    best_winner: tuple[Best, ...] = _bests(PLAYER_SLOTS)
    best_error: tuple[Best, ...] = _bests(PLAYER_SLOTS)
    best_points: tuple[Best, ...] = _bests(PLAYER_SLOTS)
    best_team_winner: tuple[Best, ...] = _bests(2)
    best_team_error: tuple[Best, ...] = _bests(2)
    best_team_points: tuple[Best, ...] = _bests(2)


def _bump(counters: tuple[int, ...], slot: int) -> tuple[int, ...]:
    # only the scorer keeps a running count
    return tuple(c + 1 if i == slot else 0 for i, c in enumerate(counters))


def _record(bests: tuple[Best, ...], counters: tuple[int, ...], index: int) -> tuple[Best, ...]:
    return tuple(
        Best(c, index) if c > b.value else b for b, c in zip(bests, counters)
    )


def _player_points(counters: tuple[int, ...], ev: PointEvent) -> tuple[int, ...]:
    if ev.is_winner:
        return _bump(counters, ev.player_index)
    return tuple(
        c if team_of_player(i) == ev.point_team else 0 for i, c in enumerate(counters)
    )


def advance_streaks(state: StreakState, ev: PointEvent) -> StreakState:
    team_slot = ev.team - 1
    if ev.is_winner:
        winner = _bump(state.winner, ev.player_index)
        error = _zeros(PLAYER_SLOTS)
        team_winner = _bump(state.team_winner, team_slot)
        team_error = _zeros(2)
    else:
        winner = _zeros(PLAYER_SLOTS)
        error = _bump(state.error, ev.player_index)
        team_winner = _zeros(2)
        team_error = _bump(state.team_error, team_slot)
    points = _player_points(state.points, ev)
    team_points = _bump(state.team_points, ev.point_team - 1)

    return replace(
        state,
        winner=winner,
        error=error,
        points=points,
        team_winner=team_winner,
        team_error=team_error,
        team_points=team_points,
        best_winner=_record(state.best_winner, winner, ev.index),
        best_error=_record(state.best_error, error, ev.index),
        best_points=_record(state.best_points, points, ev.index),
        best_team_winner=_record(state.best_team_winner, team_winner, ev.index),
        best_team_error=_record(state.best_team_error, team_error, ev.index),
        best_team_points=_record(state.best_team_points, team_points, ev.index),
    )


def fold_streaks(events: Sequence[PointEvent]) -> StreakState:
    return reduce(advance_streaks, events, StreakState())


def streak_series(events: Sequence[PointEvent]) -> list[dict[str, tuple[int, ...]]]:
    """Streak counters after each event, for charting and inspection."""

    series = []
    state = StreakState()
    for ev in events:
        state = advance_streaks(state, ev)
        series.append(
            {
                "winner": state.winner,
                "error": state.error,
                "points": state.points,
                "teamPoints": state.team_points,
            }
        )
    return series


def _team_slots(team: int) -> tuple[int, int]:
    return (0, 1) if team == 1 else (2, 3)


def _credit_table(
    outcomes: Sequence[GameOutcome],
    break_stats: dict[str, dict[str, int]],
):
    players = [{key: 0 for key in CREDIT_KEYS} for _ in range(PLAYER_SLOTS)]
    reached: list[dict[str, Optional[int]]] = [
        {key: None for key in CREDIT_KEYS} for _ in range(PLAYER_SLOTS)
    ]

    def credit(slot: int, key: str, index: int) -> None:
        players[slot][key] += 1
        reached[slot][key] = index

    # break credits never outnumber the breaks compute_break_stats reports
    breaks = {team: break_stats[f"team{team}"]["breaks"] for team in TEAMS}
    sealed = {team: 0 for team in TEAMS}
    last_break: dict[int, Optional[int]] = {team: None for team in TEAMS}

    for outcome in outcomes:
        counted = False
        winner = outcome.winner_team
        if outcome.was_break and sealed.get(winner, 0) < breaks.get(winner, 0):
            sealed[winner] += 1
            last_break[winner] = outcome.index
            counted = True

        ev = outcome.final_event
        if ev is None:
            continue
        suffix = "Won" if ev.is_winner else "Lost"
        credit(ev.player_index, f"gamePoint{suffix}", ev.index)
        if outcome.was_golden:
            credit(ev.player_index, f"golden{suffix}", ev.index)
        if counted:
            credit(ev.player_index, f"break{suffix}", ev.index)

    teams = []
    team_reached = []
    for team in TEAMS:
        slots = _team_slots(team)
        totals = {key: sum(players[s][key] for s in slots) for key in CREDIT_KEYS}
        totals["breakWon"] = breaks[team]
        totals["breakLost"] = breaks[other_team(team)]
        teams.append(totals)

        latest = {
            key: max(
                (reached[s][key] for s in slots if reached[s][key] is not None),
                default=None,
            )
            for key in CREDIT_KEYS
        }
        latest["breakWon"] = last_break[team]
        latest["breakLost"] = last_break[other_team(team)]
        team_reached.append(latest)
    return players, reached, teams, team_reached


def compute_game_credits(
    snapshots: Sequence[Any],
    *,
    outcomes: Optional[Sequence[GameOutcome]] = None,
    break_stats: Optional[dict[str, dict[str, int]]] = None,
) -> dict[str, list[dict[str, int]]]:
    """Golden-point, game-point and break credits per player and per team."""

    snaps = normalize_snapshots(snapshots)
    if outcomes is None:
        outcomes = derive_game_outcomes(snaps)
    if break_stats is None:
        break_stats = compute_break_stats(snaps)
    players, _, teams, _ = _credit_table(outcomes, break_stats)
    return {"players": players, "teams": teams}


def _longest_gap(error_indices: Sequence[int], times: Sequence[float]) -> Best:
    best_gap = 0.0
    best_index = None
    for before, after in zip(error_indices, error_indices[1:]):
        gap = times[after] - times[before]
        if gap > best_gap:
            best_gap = gap
            best_index = after
    return Best(best_gap, best_index)


@dataclass(frozen=True)
class Moment:
    key: str
    text: str
    point_index: int
    value: float
    holders: tuple[int, ...]

    def as_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "text": self.text,
            "pointIndex": self.point_index,
            "value": self.value,
            "holders": list(self.holders),
        }


@dataclass(frozen=True)
class KeyMoments:
    player: tuple[Moment, ...] = ()
    team: tuple[Moment, ...] = ()

    def as_dict(self) -> dict[str, list[dict[str, Any]]]:
        return {
            "player": [m.as_dict() for m in self.player],
            "team": [m.as_dict() for m in self.team],
        }


def _superlative(
    key: str,
    label: str,
    bests: Sequence[Best],
    names: Sequence[str],
    threshold: float,
    fmt: Callable[[Any], str] = str,
) -> Optional[Moment]:
    top = max(b.value for b in bests)
    if top <= threshold:
        return None
    holders = tuple(i for i, b in enumerate(bests) if b.value == top)
    point_index = min(
        (bests[i].index for i in holders if bests[i].index is not None), default=0
    )
    who = " / ".join(names[i] for i in holders)
    return Moment(
        key=key,
        text=f"{label}: {who} ({fmt(top)})",
        point_index=point_index,
        value=top,
        holders=holders,
    )


CREDIT_LABELS = (
    ("goldenWon", "Most winners on golden point"),
    ("goldenLost", "Most errors on golden point"),
    ("gamePointWon", "Most winners on game point"),
    ("gamePointLost", "Most errors on game point"),
    ("breakWon", "Most breaks sealed"),
    ("breakLost", "Most breaks conceded"),
)


def compute_key_moments(
    snapshots: Sequence[Any],
    *,
    names: Optional[Sequence[str]] = None,
    events: Optional[Sequence[PointEvent]] = None,
    outcomes: Optional[Sequence[GameOutcome]] = None,
    break_stats: Optional[dict[str, dict[str, int]]] = None,
) -> KeyMoments:
    """Superlatives for players and teams over a whole snapshot history.

    A metric is reported only when its maximum clears the threshold: above 1
    for player counts and streaks, above 0 for team metrics and error gaps.
    Ties are reported together in one moment.
    """

    snaps = normalize_snapshots(snapshots)
    if events is None:
        events = collect_point_events(snaps)
    if outcomes is None:
        outcomes = derive_game_outcomes(snaps, events)
    if break_stats is None:
        break_stats = compute_break_stats(snaps)
    if names is None:
        names = player_names(final=snaps[-1] if snaps else None)
    teams = [team_label(names, team) for team in TEAMS]

    streaks = fold_streaks(events)
    players, reached, team_credits, team_reached = _credit_table(outcomes, break_stats)

    times = relative_point_times(snaps)
    player_gaps = [
        _longest_gap(
            [ev.index for ev in events if not ev.is_winner and ev.player_index == slot],
            times,
        )
        for slot in range(PLAYER_SLOTS)
    ]
    team_gaps = [
        _longest_gap(
            [ev.index for ev in events if not ev.is_winner and ev.team == team],
            times,
        )
        for team in TEAMS
    ]

    player_moments: list[Optional[Moment]] = []
    team_moments: list[Optional[Moment]] = []
    for key, label in CREDIT_LABELS:
        player_moments.append(
            _superlative(
                key,
                label,
                [Best(players[s][key], reached[s][key]) for s in range(PLAYER_SLOTS)],
                names,
                PLAYER_THRESHOLD,
            )
        )
        team_moments.append(
            _superlative(
                key,
                label,
                [Best(team_credits[t][key], team_reached[t][key]) for t in range(2)],
                teams,
                TEAM_THRESHOLD,
            )
        )

    player_moments += [
        _superlative("pointRun", "Longest point run", streaks.best_points, names, PLAYER_THRESHOLD),
        _superlative("winnerStreak", "Longest winner streak", streaks.best_winner, names, PLAYER_THRESHOLD),
        _superlative("errorStreak", "Longest error streak", streaks.best_error, names, PLAYER_THRESHOLD),
        _superlative("errorGap", "Longest gap between errors", player_gaps, names, GAP_THRESHOLD, format_duration),
    ]
    team_moments += [
        _superlative("pointRun", "Longest point run", streaks.best_team_points, teams, TEAM_THRESHOLD),
        _superlative("winnerStreak", "Longest winner streak", streaks.best_team_winner, teams, TEAM_THRESHOLD),
        _superlative("errorStreak", "Longest error streak", streaks.best_team_error, teams, TEAM_THRESHOLD),
        _superlative("errorGap", "Longest gap between errors", team_gaps, teams, GAP_THRESHOLD, format_duration),
    ]

    return KeyMoments(
        player=tuple(m for m in player_moments if m is not None),
        team=tuple(m for m in team_moments if m is not None),
    )
