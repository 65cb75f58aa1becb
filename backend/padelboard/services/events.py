"""Point events derived from consecutive snapshots.

Player counters are cumulative, so every increment of ``winners`` or
``errors`` between two snapshots is one point-ending shot by that player.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Optional, Sequence

from ..config import PLAYER_SLOTS
from ..scoring.padel import (
    TEAMS,
    is_game_point,
    is_set_point,
    normalize_point,
    other_team,
    server_player_index,
    server_team,
    team_of_player,
    team_points,
)
from ..time_utils import relative_point_times
from .sets import current_set_number
from .snapshots import Snapshot, normalize_snapshots

logger = logging.getLogger(__name__)

WINNER = "winner"
ERROR = "error"

WINNER_DETAIL_KEYS = ("normal", "home", "x3", "x4", "door", "barbaridad")
ERROR_DETAIL_KEYS = ("unforced", "forced", "beer")


@dataclass(frozen=True)
class PointEvent:
    index: int
    player_index: int
    team: int
    event_type: str
    detail: Optional[str] = None

    @property
    def is_winner(self) -> bool:
        return self.event_type == WINNER

    @property
    def point_team(self) -> int:
        """Team that won the point this event ended."""
        if self.is_winner:
            return self.team
        return 2 if self.team == 1 else 1

    def as_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "playerIndex": self.player_index,
            "team": self.team,
            "eventType": self.event_type,
            "detail": self.detail,
        }


def transition_events(prev: Snapshot, curr: Snapshot, index: int) -> list[PointEvent]:
    """Events between two snapshots.

    Ordered by player slot, winners before errors within a slot, one event per
    unit of positive delta.
    """

    events: list[PointEvent] = []
    for slot in range(PLAYER_SLOTS):
        before, after = prev.players[slot], curr.players[slot]
        team = team_of_player(slot)
        for event_type, delta in (
            (WINNER, after.winners - before.winners),
            (ERROR, after.errors - before.errors),
        ):
            for _ in range(max(delta, 0)):
                events.append(
                    PointEvent(
                        index=index,
                        player_index=slot,
                        team=team,
                        event_type=event_type,
                        detail=curr.extra_info,
                    )
                )
    if len(events) > 1:
        logger.debug("Snapshot %d carries %d point events", index, len(events))
    return events


def collect_point_events(snapshots: Sequence[Any]) -> list[PointEvent]:
    snaps = normalize_snapshots(snapshots)
    events: list[PointEvent] = []
    for i in range(1, len(snaps)):
        events.extend(transition_events(snaps[i - 1], snaps[i], i))
    return events


def normalize_winner_detail(detail: Any) -> str:
    key = detail.strip().lower() if isinstance(detail, str) else ""
    return key if key in WINNER_DETAIL_KEYS else "normal"


def normalize_error_detail(detail: Any) -> str:
    key = detail.strip().lower() if isinstance(detail, str) else ""
    return key if key in ERROR_DETAIL_KEYS else "unforced"


def detail_breakdown(snapshots: Sequence[Any], player_index: int) -> dict[str, Any]:
    """Bucket one player's winners and errors by shot tag."""

    totals: dict[str, Any] = {
        "winners": {key: 0 for key in WINNER_DETAIL_KEYS},
        "errors": {key: 0 for key in ERROR_DETAIL_KEYS},
        "totalEvents": 0,
    }
    for ev in collect_point_events(snapshots):
        if ev.player_index != player_index:
            continue
        if ev.is_winner:
            totals["winners"][normalize_winner_detail(ev.detail)] += 1
        else:
            totals["errors"][normalize_error_detail(ev.detail)] += 1
        totals["totalEvents"] += 1
    return totals


def point_outcome(events: Sequence[PointEvent]) -> Optional[PointEvent]:
    """The shot credited with ending a point: last winner, else last error."""

    for ev in reversed(events):
        if ev.is_winner:
            return ev
    return events[-1] if events else None


def _score_label(points: dict) -> str:
    p1 = normalize_point(points.get("team1")) or "-"
    p2 = normalize_point(points.get("team2")) or "-"
    return f"{p1}-{p2}"


def _game_point_teams(snap: Snapshot) -> list[int]:
    return [
        team
        for team in TEAMS
        if is_game_point(team_points(snap.points, team), team_points(snap.points, other_team(team)))
    ]


def _set_point_teams(snap: Snapshot, game_point: Sequence[int]) -> list[int]:
    games = snap.games or {}
    return [
        team
        for team in game_point
        if is_set_point(games.get(f"team{team}"), games.get(f"team{other_team(team)}"))
    ]


def build_point_log(snapshots: Sequence[Any]) -> list[dict[str, Any]]:
    """One entry per point with server, score, timing and the deciding shot.

    ``gamePoint`` and ``setPoint`` list the teams that held one when the
    point was played, judged from the previous snapshot.
    """

    snaps = normalize_snapshots(snapshots)
    times = relative_point_times(snaps)
    log: list[dict[str, Any]] = []
    for i in range(1, len(snaps)):
        prev, curr = snaps[i - 1], snaps[i]
        server_raw = curr.server if curr.server is not None else prev.server
        events = transition_events(prev, curr, i)
        outcome = point_outcome(events)
        game_point = _game_point_teams(prev)
        log.append(
            {
                "index": i,
                "durationSec": max(1.0, times[i] - times[i - 1]),
                "serverRaw": server_raw,
                "serverTeam": server_team(server_raw),
                "serverPlayerIndex": server_player_index(server_raw),
                "scoreLabel": _score_label(curr.points),
                "setNumber": current_set_number(prev),
                "gamePoint": game_point,
                "setPoint": _set_point_teams(prev, game_point),
                "events": [ev.as_dict() for ev in events],
                "outcome": outcome.as_dict() if outcome else None,
                "startTime": times[i - 1],
                "endTime": times[i],
            }
        )
    return log
