"""Chart-ready series: per-player impact and game/set timeline markers."""

from __future__ import annotations

from typing import Any, Optional, Sequence

from ..config import PLAYER_SLOTS
from ..time_utils import relative_point_times
from .sets import sets_from_snapshot
from .snapshots import normalize_snapshots


def impact_series(snapshots: Sequence[Any]) -> list[list[int]]:
    """Return each player's running impact (winners - errors).

    Args:
        snapshots: Ordered snapshot history.
    Returns:
        Four lists, one per player slot, each with one value per snapshot.
    """
    snaps = normalize_snapshots(snapshots)
    return [[snap.players[i].impact for snap in snaps] for i in range(PLAYER_SLOTS)]


def game_set_markers(
    snapshots: Sequence[Any],
    times: Optional[Sequence[float]] = None,
) -> dict[str, list[dict[str, Any]]]:
    """Timeline markers for every completed game and set.

    A game marker is added for each newly counted game; a set marker when the
    parsed set list grows, labelled with the set that just closed.

    Args:
        snapshots: Ordered snapshot history.
        times: Relative times per snapshot; derived from the timestamps when
            omitted.
    Returns:
        ``{"games": [...], "sets": [...]}`` with ``{"timeSec", "label"}`` items.
    """
    snaps = normalize_snapshots(snapshots)
    if times is None:
        times = relative_point_times(snaps)

    markers: dict[str, list[dict[str, Any]]] = {"games": [], "sets": []}
    prev_games: Optional[int] = None
    prev_slices: Optional[int] = None
    for snap, time_sec in zip(snaps, times):
        parsed = sets_from_snapshot(snap)
        total_games = sum(s["team1"] + s["team2"] for s in parsed)
        slices = len(parsed)

        if prev_games is not None and total_games > prev_games:
            for game in range(prev_games + 1, total_games + 1):
                markers["games"].append({"timeSec": time_sec, "label": f"Game {game}"})

        if prev_slices is not None and slices > prev_slices and slices - 1 > 0:
            markers["sets"].append({"timeSec": time_sec, "label": f"Set {slices - 1}"})

        prev_games = total_games
        prev_slices = slices
    return markers
