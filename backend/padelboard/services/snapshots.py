"""Normalization of raw device snapshots.

The scoring watch posts loosely-typed JSON: ``sets`` may be a string such as
``"6-4 / 2-1"`` or an object of set wins, the shot tag may be spelled
``extraInfo`` or ``extra_info``, player entries may be missing and timestamps
may be absent or garbage.  Everything downstream works on :class:`Snapshot`,
produced here without ever raising.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any, Iterable, Mapping, Optional, Sequence

from ..config import PLAYER_SLOTS
from ..time_utils import finite_number

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlayerStats:
    winners: int = 0
    errors: int = 0
    name: Optional[str] = None

    @property
    def impact(self) -> int:
        return self.winners - self.errors


def _empty_players() -> tuple[PlayerStats, ...]:
    return tuple(PlayerStats() for _ in range(PLAYER_SLOTS))


@dataclass(frozen=True)
class Snapshot:
    """Match state after one point, in canonical form.

    ``sets_text`` holds the string form of ``sets`` and ``sets_won`` the
    object form; at most one of them is set.  ``players`` always has exactly
    four entries.
    """

    timestamp: Optional[float] = None
    points: dict = field(default_factory=dict)
    sets_text: Optional[str] = None
    sets_won: Optional[dict] = None
    games: Optional[dict] = None
    server: Optional[int] = None
    players: tuple[PlayerStats, ...] = field(default_factory=_empty_players)
    extra_info: Optional[str] = None
    status: Optional[str] = None


def _count(value: Any) -> int:
    number = finite_number(value)
    return int(number) if number is not None else 0


def _team_pair(value: Any) -> Optional[dict]:
    if not isinstance(value, Mapping):
        return None
    return {"team1": value.get("team1"), "team2": value.get("team2")}


def _server(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not value.is_integer():
        return None
    return int(value)


def _players(value: Any) -> tuple[PlayerStats, ...]:
    entries = value if isinstance(value, (list, tuple)) else []
    players = []
    for i in range(PLAYER_SLOTS):
        entry = entries[i] if i < len(entries) else None
        if not isinstance(entry, Mapping):
            players.append(PlayerStats())
            continue
        name = entry.get("name")
        players.append(
            PlayerStats(
                winners=_count(entry.get("winners")),
                errors=_count(entry.get("errors")),
                name=name.strip() or None if isinstance(name, str) else None,
            )
        )
    return tuple(players)


def extra_info_of(raw: Mapping[str, Any]) -> Optional[str]:
    value = raw.get("extraInfo")
    if value is None:
        value = raw.get("extra_info")
    return value if isinstance(value, str) else None


def normalize_snapshot(raw: Any) -> Snapshot:
    if isinstance(raw, Snapshot):
        return raw
    if not isinstance(raw, Mapping):
        return Snapshot()

    sets = raw.get("sets")
    status = raw.get("status")
    return Snapshot(
        timestamp=finite_number(raw.get("timestamp")),
        points=_team_pair(raw.get("points")) or {},
        sets_text=sets if isinstance(sets, str) else None,
        sets_won=_team_pair(sets),
        games=_team_pair(raw.get("games")),
        server=_server(raw.get("server")),
        players=_players(raw.get("players")),
        extra_info=extra_info_of(raw),
        status=status.strip().lower() or None if isinstance(status, str) else None,
    )


def normalize_snapshots(raws: Optional[Iterable[Any]]) -> list[Snapshot]:
    if raws is None:
        return []
    return [normalize_snapshot(raw) for raw in raws]


def is_status_only_event(raw: Any) -> bool:
    """True for a bare "match finished" marker that carries no score state."""

    if not isinstance(raw, Mapping):
        return False
    status = raw.get("status")
    if not isinstance(status, str) or status.lower() != "finished":
        return False

    has_points = isinstance(raw.get("points"), Mapping)
    sets = raw.get("sets")
    has_sets = (isinstance(sets, str) and bool(sets.strip())) or (
        isinstance(sets, Mapping) and bool(sets)
    )
    games = raw.get("games")
    has_games = isinstance(games, Mapping) and bool(games)
    players = raw.get("players")
    has_players = isinstance(players, list) and bool(players)
    has_server = any(
        isinstance(raw.get(key), (int, float)) and not isinstance(raw.get(key), bool)
        for key in ("server", "serverPlayer")
    )
    return not (has_points or has_sets or has_games or has_players or has_server)


def snapshot_timeline(
    snapshots: Optional[Sequence[Any]] = None,
    events: Optional[Sequence[Any]] = None,
) -> list[Snapshot]:
    """Build the ordered snapshot list used by the analytics.

    When stored events are supplied their ``raw`` payloads win over the bare
    ``snapshots`` array.  Status-only markers are dropped either way.
    """

    raws: list[Any] = []
    if events:
        raws = [
            ev.get("raw")
            for ev in events
            if isinstance(ev, Mapping) and isinstance(ev.get("raw"), Mapping)
        ]
    if not raws:
        raws = list(snapshots or [])

    kept = [raw for raw in raws if not is_status_only_event(raw)]
    if len(kept) != len(raws):
        logger.debug("Dropped %d status-only events", len(raws) - len(kept))
    return normalize_snapshots(kept)


def _roster_index(team: Any, slot: Any) -> Optional[int]:
    team_no = _count(team)
    slot_no = _count(slot)
    if team_no == 1:
        return 1 if slot_no == 2 else 0
    if team_no == 2:
        return 3 if slot_no == 2 else 2
    return None


def player_names(
    roster: Optional[Sequence[Any]] = None,
    final: Optional[Snapshot] = None,
) -> list[str]:
    """Display names for the four player slots.

    Roster entries (``{"team", "slot", "name"}``) win, then names carried by
    the final snapshot, then ``P1``..``P4``.
    """

    names: list[Optional[str]] = [None] * PLAYER_SLOTS
    for entry in roster or []:
        if not isinstance(entry, Mapping):
            continue
        idx = _roster_index(entry.get("team"), entry.get("slot"))
        name = entry.get("name")
        if idx is not None and isinstance(name, str) and name.strip():
            names[idx] = name.strip()

    if final is not None:
        for i, stats in enumerate(final.players):
            if names[i] is None and stats.name:
                names[i] = stats.name

    return [name or f"P{i + 1}" for i, name in enumerate(names)]


def team_label(names: Sequence[str], team: int) -> str:
    first = 0 if team == 1 else 2
    return f"{names[first]}/{names[first + 1]}"
