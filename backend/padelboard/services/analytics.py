"""Full analytics pipeline: snapshot history in, display-ready aggregates out.

Everything is recomputed from the complete history on each call; nothing is
cached between calls.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

from ..config import PLAYER_SLOTS
from ..scoring.padel import TEAMS, determine_winner_team
from ..time_utils import compute_time_stats, relative_point_times
from .breaks import compute_break_stats, derive_game_outcomes
from .events import build_point_log, collect_point_events, detail_breakdown
from .moments import compute_game_credits, compute_key_moments
from .sets import sets_from_snapshot, sets_won_from_snapshot, should_hide_set
from .snapshots import player_names, snapshot_timeline, team_label
from .stats import game_set_markers, impact_series
from .summary import is_finished, mvp_flags, player_rows, team_rows


def build_match_analytics(
    snapshots: Optional[Sequence[Any]] = None,
    *,
    events: Optional[Sequence[Any]] = None,
    roster: Optional[Sequence[Any]] = None,
    status: Optional[str] = None,
) -> dict[str, Any]:
    """Run every analytics stage over one match.

    Args:
        snapshots: Raw snapshot objects in occurrence order.
        events: Stored events whose ``raw`` payloads replace ``snapshots``
            when present.
        roster: ``{"team", "slot", "name"}`` entries naming the players.
        status: Match status; falls back to the final snapshot's status.
    """

    snaps = snapshot_timeline(snapshots, events)
    final = snaps[-1] if snaps else None
    if status is None and final is not None:
        status = final.status
    finished = is_finished(status)
    names = player_names(roster, final)

    point_events = collect_point_events(snaps)
    outcomes = derive_game_outcomes(snaps, point_events)
    break_stats = compute_break_stats(snaps)
    moments = compute_key_moments(
        snaps,
        names=names,
        events=point_events,
        outcomes=outcomes,
        break_stats=break_stats,
    )
    credits = compute_game_credits(snaps, outcomes=outcomes, break_stats=break_stats)

    sets = sets_from_snapshot(final) if final is not None else []
    sets_won = sets_won_from_snapshot(final) if final is not None else {"team1": 0, "team2": 0}
    winner_team = None
    if finished and final is not None:
        winner_team = determine_winner_team(sets_won, final.games, final.points)

    return {
        "snapshotCount": len(snaps),
        "status": status,
        "players": names,
        "teams": [team_label(names, team) for team in TEAMS],
        "sets": [
            {**s, "hidden": should_hide_set(finished, s["team1"], s["team2"])}
            for s in sets
        ],
        "setsWon": sets_won,
        "winnerTeam": winner_team,
        "events": [ev.as_dict() for ev in point_events],
        "games": [outcome.as_dict() for outcome in outcomes],
        "breakStats": break_stats,
        "keyMoments": moments.as_dict(),
        "credits": credits,
        "teamRows": team_rows(snaps, names, break_stats),
        "playerRows": player_rows(snaps, names),
        "mvp": mvp_flags(final, status),
        "timeStats": compute_time_stats(snaps),
        "markers": game_set_markers(snaps, relative_point_times(snaps)),
        "impactSeries": impact_series(snaps),
        "pointLog": build_point_log(snaps),
        "details": [detail_breakdown(snaps, i) for i in range(PLAYER_SLOTS)],
    }
