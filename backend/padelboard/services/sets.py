"""Set and game score parsing.

``parse_sets`` turns any of the device's set representations into an ordered
list of ``{"team1": int, "team2": int}`` game counts, one entry per set.
"""

from __future__ import annotations

import logging
import math
import re
from typing import Any, Mapping, Optional

from ..scoring.padel import is_finished_set
from .snapshots import normalize_snapshot

logger = logging.getLogger(__name__)

_SET_RE = re.compile(r"(\d+)\s*-\s*(\d+)")
_LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)")
_EMPTY_SET_RE = re.compile(r"^0\s*-\s*0$")
_PLACEHOLDERS = {"-", "?"}


def to_int(value: Any) -> Optional[int]:
    """Parse the leading integer of ``value``; ``None`` when there is none."""

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    match = _LEADING_INT_RE.match(str(value))
    return int(match.group(1)) if match else None


def _has_team_value(values: Any) -> bool:
    return isinstance(values, Mapping) and (
        values.get("team1") is not None or values.get("team2") is not None
    )


def parse_sets(
    sets_text: Any,
    sets_won: Optional[Mapping[str, Any]] = None,
    games: Optional[Mapping[str, Any]] = None,
) -> list[dict[str, int]]:
    """Return per-set game counts.

    Args:
        sets_text: String form such as ``"6-0 / 1-0"``.  Takes precedence when
            non-empty; segments without a ``<int>-<int>`` pair are skipped.
        sets_won: Structured ``{"team1", "team2"}`` object used as a single
            set when the string yields nothing.
        games: Live game count of the set in progress.  Overwrites the last
            parsed set, or becomes the only set when nothing else parsed.
    """

    sets: list[dict[str, int]] = []

    if isinstance(sets_text, str) and sets_text.strip():
        for part in sets_text.split("/"):
            part = part.strip()
            if not part:
                continue
            match = _SET_RE.search(part)
            if match is None:
                logger.debug("Skipping malformed set segment %r", part)
                continue
            sets.append({"team1": int(match.group(1)), "team2": int(match.group(2))})

    if not sets and _has_team_value(sets_won):
        sets.append(
            {
                "team1": to_int(sets_won.get("team1")) or 0,
                "team2": to_int(sets_won.get("team2")) or 0,
            }
        )

    if not sets and _has_team_value(games):
        sets.append(
            {
                "team1": to_int(games.get("team1")) or 0,
                "team2": to_int(games.get("team2")) or 0,
            }
        )
    elif sets and isinstance(games, Mapping):
        g1 = to_int(games.get("team1"))
        g2 = to_int(games.get("team2"))
        if g1 is not None:
            sets[-1]["team1"] = g1
        if g2 is not None:
            sets[-1]["team2"] = g2

    return sets


def sets_from_snapshot(snap: Any) -> list[dict[str, int]]:
    snap = normalize_snapshot(snap)
    return parse_sets(snap.sets_text, snap.sets_won, snap.games)


def game_totals(snap: Any) -> tuple[int, int]:
    """Games won by each team across every parsed set."""

    g1 = g2 = 0
    for set_score in sets_from_snapshot(snap):
        g1 += set_score["team1"]
        g2 += set_score["team2"]
    return g1, g2


def current_set_number(snap: Any) -> int:
    return len(sets_from_snapshot(snap)) or 1


def _normalize_set_cell(value: Any):
    if value is None:
        return None
    trimmed = str(value).strip()
    if not trimmed or trimmed in _PLACEHOLDERS:
        return None
    try:
        return float(trimmed)
    except ValueError:
        return trimmed


def should_hide_set(is_finished: bool, top: Any, bottom: Any) -> bool:
    """True for an unplayed trailing set slot of a finished match."""

    if not is_finished:
        return False
    top_norm = _normalize_set_cell(top)
    bottom_norm = _normalize_set_cell(bottom)
    if top_norm is None and bottom_norm is None:
        return True
    return (
        isinstance(top_norm, float)
        and isinstance(bottom_norm, float)
        and top_norm == 0
        and bottom_norm == 0
    )


def sanitize_sets_string(raw: Any) -> str:
    """Normalize separators and drop trailing ``0-0`` placeholder sets."""

    if not isinstance(raw, str):
        return ""
    parts = [p.strip() for p in raw.split("/") if p.strip()]
    while parts and _EMPTY_SET_RE.match(parts[-1]):
        parts.pop()
    return " / ".join(parts)


def derive_set_counts(sets_text: Any) -> dict[str, int]:
    """Count finished sets won by each team in a sets string."""

    counts = {"team1": 0, "team2": 0}
    if not isinstance(sets_text, str):
        return counts
    for set_score in parse_sets(sets_text):
        a, b = set_score["team1"], set_score["team2"]
        if not is_finished_set(a, b):
            continue
        if a > b:
            counts["team1"] += 1
        elif b > a:
            counts["team2"] += 1
    return counts


def sets_won_from_snapshot(snap: Any) -> dict[str, int]:
    snap = normalize_snapshot(snap)
    if snap.sets_text is not None:
        return derive_set_counts(snap.sets_text)
    if snap.sets_won is not None:
        return {
            "team1": to_int(snap.sets_won.get("team1")) or 0,
            "team2": to_int(snap.sets_won.get("team2")) or 0,
        }
    return {"team1": 0, "team2": 0}


def count_sets_played(raw_sets: Any) -> int:
    if isinstance(raw_sets, str):
        parts = [p for p in sanitize_sets_string(raw_sets).split("/") if p.strip()]
        return len(parts) or 1
    if isinstance(raw_sets, Mapping):
        total = (to_int(raw_sets.get("team1")) or 0) + (to_int(raw_sets.get("team2")) or 0)
        return total if total > 0 else 1
    return 1
