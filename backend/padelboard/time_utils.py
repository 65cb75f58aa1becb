"""Helpers for working with point timestamps."""

from __future__ import annotations

import math
from typing import Any, Mapping, Optional, Sequence


def finite_number(value: Any) -> Optional[float]:
    """Return ``value`` as a finite float, or ``None``."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str) and not value.strip():
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def timestamp_of(snap: Any) -> Optional[float]:
    if isinstance(snap, Mapping):
        return finite_number(snap.get("timestamp"))
    return finite_number(getattr(snap, "timestamp", None))


def relative_point_times(snapshots: Sequence[Any]) -> list[float]:
    """Return each snapshot's time in seconds relative to the first timestamp.

    The first snapshot with a finite timestamp is ``t=0``.  A snapshot without
    a usable timestamp repeats the previous relative time, so the sequence
    never contains ``NaN`` and never raises on missing data.

    Args:
        snapshots: Raw snapshot mappings or normalized snapshots.

    Returns:
        One float per snapshot, in input order.
    """

    times: list[float] = []
    base: Optional[float] = None
    last = 0.0
    for raw in snapshots:
        ts = timestamp_of(raw)
        if ts is not None:
            if base is None:
                base = ts
            last = ts - base
        times.append(last)
    return times


def compute_time_stats(snapshots: Sequence[Any]) -> Optional[dict[str, float]]:
    """Match duration and per-point timings.

    Point durations come from consecutive snapshot pairs whose timestamps are
    both finite and non-decreasing.  Returns ``None`` when fewer than two
    snapshots or no usable pair exist.
    """

    if len(snapshots) < 2:
        return None

    times = [timestamp_of(raw) for raw in snapshots]
    deltas = [
        t1 - t0
        for t0, t1 in zip(times, times[1:])
        if t0 is not None and t1 is not None and t1 >= t0
    ]
    if not deltas:
        return None

    finite = [t for t in times if t is not None]
    start, end = finite[0], finite[-1]
    if end < start:
        return None

    return {
        "matchDuration": end - start,
        "shortestPoint": min(deltas),
        "longestPoint": max(deltas),
        "averagePoint": sum(deltas) / len(deltas),
        "pointCount": len(deltas),
    }


def format_duration(seconds: Any) -> str:
    """Render seconds as ``m:ss`` or ``h:mm:ss``; ``"N/A"`` when unusable."""

    if isinstance(seconds, bool) or not isinstance(seconds, (int, float)):
        return "N/A"
    if not math.isfinite(seconds) or seconds < 0:
        return "N/A"
    total = int(math.floor(seconds + 0.5))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"
