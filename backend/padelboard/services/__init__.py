"""Internal application services (pure helpers, no I/O)."""

from .validation import (
    ValidationError,
    validate_event_list,
    validate_point_counters,
    validate_roster,
    validate_snapshot_list,
)
from .snapshots import Snapshot, normalize_snapshots, snapshot_timeline
from .sets import parse_sets
from .events import PointEvent, collect_point_events
from .breaks import GameOutcome, compute_break_stats, derive_game_outcomes
from .moments import compute_game_credits, compute_key_moments
from .summary import mvp_indices, player_rows, team_rows
from .analytics import build_match_analytics

__all__ = [
    "ValidationError",
    "validate_snapshot_list",
    "validate_event_list",
    "validate_point_counters",
    "validate_roster",
    "Snapshot",
    "normalize_snapshots",
    "snapshot_timeline",
    "parse_sets",
    "PointEvent",
    "collect_point_events",
    "GameOutcome",
    "derive_game_outcomes",
    "compute_break_stats",
    "compute_game_credits",
    "compute_key_moments",
    "team_rows",
    "player_rows",
    "mvp_indices",
    "build_match_analytics",
]
