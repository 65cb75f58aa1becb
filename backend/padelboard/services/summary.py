"""Team and player stat rows for the match tables."""

from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from ..config import FINISHED_STATUS, PLAYER_SLOTS
from ..scoring.padel import TEAMS, team_of_player
from ..time_utils import finite_number
from .breaks import compute_break_stats
from .snapshots import Snapshot, normalize_snapshot, normalize_snapshots, player_names, team_label


def _final(snaps: Sequence[Snapshot]) -> Snapshot:
    return snaps[-1] if snaps else Snapshot()


def player_rows(
    snapshots: Sequence[Any],
    names: Optional[Sequence[str]] = None,
) -> list[dict[str, Any]]:
    snaps = normalize_snapshots(snapshots)
    final = _final(snaps)
    if names is None:
        names = player_names(final=final)
    return [
        {
            "index": i,
            "name": names[i],
            "team": team_of_player(i),
            "winners": stats.winners,
            "errors": stats.errors,
            "impact": stats.impact,
        }
        for i, stats in enumerate(final.players)
    ]


def team_rows(
    snapshots: Sequence[Any],
    names: Optional[Sequence[str]] = None,
    break_stats: Optional[dict[str, dict[str, int]]] = None,
) -> list[dict[str, Any]]:
    """Winners, errors, impact and breaks/breakpoints per team."""

    snaps = normalize_snapshots(snapshots)
    final = _final(snaps)
    if names is None:
        names = player_names(final=final)
    if break_stats is None:
        break_stats = compute_break_stats(snaps)

    rows = []
    for team in TEAMS:
        members = [p for i, p in enumerate(final.players) if team_of_player(i) == team]
        winners = sum(p.winners for p in members)
        errors = sum(p.errors for p in members)
        bp = break_stats[f"team{team}"]
        rows.append(
            {
                "index": team - 1,
                "team": team,
                "label": team_label(names, team),
                "winners": winners,
                "errors": errors,
                "impact": winners - errors,
                "breaks": bp["breaks"],
                "breakpoints": bp["breakpoints"],
            }
        )
    return rows


def is_finished(status: Any) -> bool:
    return isinstance(status, str) and status.strip().lower() == FINISHED_STATUS


def mvp_indices(final: Any, status: Any) -> list[int]:
    """Players sharing the best impact in a finished match.

    Nothing is awarded while the match is still running, or when the final
    snapshot carries no player list at all.
    """

    if not is_finished(status) or final is None:
        return []
    if isinstance(final, Mapping) and not final.get("players"):
        return []
    impacts = [p.impact for p in normalize_snapshot(final).players]
    best = max(impacts)
    return [i for i, impact in enumerate(impacts) if impact == best]


def mvp_flags(final: Any, status: Any) -> list[bool]:
    if not is_finished(status):
        return []
    winners = set(mvp_indices(final, status))
    return [i in winners for i in range(PLAYER_SLOTS)]


def sort_rows(
    rows: Sequence[Mapping[str, Any]],
    key: str,
    descending: bool = False,
) -> list[Mapping[str, Any]]:
    """Sort rows by a numeric column; ties keep original index order."""

    def sort_key(item):
        position, row = item
        value = finite_number(row.get(key)) or 0.0
        index = row.get("index", position)
        return (-value if descending else value, index)

    return [row for _, row in sorted(enumerate(rows), key=sort_key)]
