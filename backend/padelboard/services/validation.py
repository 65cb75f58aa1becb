from typing import Any, List, Optional

from ..config import MAX_POINT_COUNTER, MAX_POINT_EVENTS, MAX_SNAPSHOTS, PLAYER_SLOTS
from ..time_utils import finite_number

COUNTER_KEYS = ("winners", "errors")


class ValidationError(Exception):
    """Raised when a submitted match history cannot be analysed."""

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


def _counters(entry: Any) -> Optional[List[int]]:
    """Winners/errors per slot as the engine reads them, or ``None``."""

    players = entry.get("players") if isinstance(entry, dict) else None
    if not isinstance(players, list) or not players:
        return None
    counters = []
    for slot in range(PLAYER_SLOTS):
        player = players[slot] if slot < len(players) else None
        for key in COUNTER_KEYS:
            number = finite_number(player.get(key)) if isinstance(player, dict) else None
            counters.append(int(number) if number is not None else 0)
    return counters


def validate_point_counters(
    entries: List[Any],
    *,
    max_counter: Optional[int] = MAX_POINT_COUNTER,
    max_point_events: Optional[int] = MAX_POINT_EVENTS,
    label: str = "Snapshot",
) -> None:
    """Bound the player counters of a history.

    Every increment of a counter between consecutive entries becomes one
    point event, so both a single counter and the running sum of increments
    are capped.  Entries without a ``players`` list are skipped.
    """

    previous = None
    total = 0
    for i, entry in enumerate(entries, start=1):
        counters = _counters(entry)
        if counters is None:
            continue
        if max_counter is not None:
            for pos, value in enumerate(counters):
                if abs(value) > max_counter:
                    slot, key = divmod(pos, len(COUNTER_KEYS))
                    raise ValidationError(
                        f"{label} #{i} player {slot + 1} {COUNTER_KEYS[key]} "
                        f"exceeds {max_counter}."
                    )
        if previous is not None:
            total += sum(max(after - before, 0) for after, before in zip(counters, previous))
            if max_point_events is not None and total > max_point_events:
                raise ValidationError(
                    f"Too many point events. Max allowed is {max_point_events}."
                )
        previous = counters


def validate_snapshot_list(
    snapshots: Any,
    *,
    max_snapshots: Optional[int] = MAX_SNAPSHOTS,
    max_counter: Optional[int] = MAX_POINT_COUNTER,
    max_point_events: Optional[int] = MAX_POINT_EVENTS,
    label: str = "Snapshot",
) -> List[Any]:
    """Validate the outer shape of a snapshot (or event) array.

    Rules:
    - ``None`` is treated as an empty history
    - The value must be a list
    - Length must be <= ``max_snapshots`` (if provided)
    - Every entry must be an object
    - Player counters stay within ``max_counter`` and ``max_point_events``

    Other field contents are not checked here; the analytics tolerate
    malformed fields inside each object.
    """

    if snapshots is None:
        return []
    if not isinstance(snapshots, list):
        raise ValidationError(f"{label}s must be provided as a list.")
    if max_snapshots is not None and len(snapshots) > max_snapshots:
        raise ValidationError(
            f"Too many {label.lower()}s. Max allowed is {max_snapshots}."
        )
    for i, entry in enumerate(snapshots, start=1):
        if not isinstance(entry, dict):
            raise ValidationError(f"{label} #{i} must be an object.")
    validate_point_counters(
        snapshots,
        max_counter=max_counter,
        max_point_events=max_point_events,
        label=label,
    )
    return snapshots


def validate_event_list(
    events: Any,
    *,
    max_events: Optional[int] = MAX_SNAPSHOTS,
    max_counter: Optional[int] = MAX_POINT_COUNTER,
    max_point_events: Optional[int] = MAX_POINT_EVENTS,
) -> List[Any]:
    """Validate stored events: objects whose ``raw`` is an object or null."""

    events = validate_snapshot_list(events, max_snapshots=max_events, label="Event")
    for i, event in enumerate(events, start=1):
        raw = event.get("raw")
        if raw is not None and not isinstance(raw, dict):
            raise ValidationError(f"Event #{i} raw payload must be an object.")
    validate_point_counters(
        [event.get("raw") for event in events],
        max_counter=max_counter,
        max_point_events=max_point_events,
        label="Event",
    )
    return events


def validate_roster(players: Any) -> List[Any]:
    """Validate roster entries ``{team, slot, name}``.

    ``team`` and ``slot`` must be the integers 1 or 2 (booleans are
    rejected) and no team/slot pair may appear twice.
    """

    if players is None:
        return []
    if not isinstance(players, list):
        raise ValidationError("Players must be provided as a list.")

    seen = set()
    for i, entry in enumerate(players, start=1):
        if not isinstance(entry, dict):
            raise ValidationError(f"Player #{i} must be an object.")
        team, slot = entry.get("team"), entry.get("slot")
        if isinstance(team, bool) or isinstance(slot, bool):
            raise ValidationError(f"Player #{i} team and slot must be integers (not booleans).")
        if team not in (1, 2) or slot not in (1, 2):
            raise ValidationError(f"Player #{i} team and slot must be 1 or 2.")
        if (team, slot) in seen:
            raise ValidationError(f"Player #{i} repeats team {team} slot {slot}.")
        seen.add((team, slot))
        name = entry.get("name")
        if name is not None and not isinstance(name, str):
            raise ValidationError(f"Player #{i} name must be a string.")
    return players
