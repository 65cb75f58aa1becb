"""Game completion and break-of-serve attribution."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
import logging
from typing import Any, Optional, Sequence

from ..scoring.padel import (
    TEAMS,
    has_advantage,
    is_breakpoint_for,
    is_golden_point,
    normalize_point,
    other_team,
    server_player_index,
    server_team,
)
from .events import PointEvent, collect_point_events
from .sets import game_totals
from .snapshots import normalize_snapshots

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GameOutcome:
    index: int
    game_number: int
    winner_team: int
    server_team: Optional[int]
    server_player_index: Optional[int]
    was_golden: bool
    was_break: bool
    final_event: Optional[PointEvent] = None

    @property
    def loser_team(self) -> int:
        return other_team(self.winner_team)

    def as_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "gameNumber": self.game_number,
            "winnerTeam": self.winner_team,
            "serverTeam": self.server_team,
            "serverPlayerIndex": self.server_player_index,
            "wasGolden": self.was_golden,
            "wasBreak": self.was_break,
            "finalEvent": self.final_event.as_dict() if self.final_event else None,
        }


def _ends_game_for(ev: PointEvent, winner: int) -> bool:
    if ev.is_winner:
        return ev.team == winner
    return ev.team != winner


def derive_game_outcomes(
    snapshots: Sequence[Any],
    events: Optional[Sequence[PointEvent]] = None,
) -> list[GameOutcome]:
    """Detect completed games from cumulative game-count deltas.

    A transition completes a game only when exactly one team gains exactly
    one game.  Any other change (none, several, or a set reset) is ignored.
    """

    snaps = normalize_snapshots(snapshots)
    if events is None:
        events = collect_point_events(snaps)
    by_index: dict[int, list[PointEvent]] = defaultdict(list)
    for ev in events:
        by_index[ev.index].append(ev)

    totals = [game_totals(snap) for snap in snaps]
    outcomes: list[GameOutcome] = []
    for i in range(1, len(snaps)):
        d1 = totals[i][0] - totals[i - 1][0]
        d2 = totals[i][1] - totals[i - 1][1]
        if (d1, d2) not in ((1, 0), (0, 1)):
            continue
        winner = 1 if d1 == 1 else 2

        prev, curr = snaps[i - 1], snaps[i]
        server_raw = curr.server if curr.server is not None else prev.server
        serving = server_team(server_raw)
        if serving is None:
            logger.debug("Game completed at snapshot %d has no known server (%r)", i, server_raw)

        final_event = None
        for ev in reversed(by_index.get(i, [])):
            if _ends_game_for(ev, winner):
                final_event = ev
                break

        outcomes.append(
            GameOutcome(
                index=i,
                game_number=sum(totals[i]),
                winner_team=winner,
                server_team=serving,
                server_player_index=server_player_index(server_raw),
                was_golden=is_golden_point(prev.points),
                was_break=serving is not None and serving != winner,
                final_event=final_event,
            )
        )
    return outcomes


@dataclass
class _GameRecord:
    start: int
    end: int
    serving_team: Optional[int] = None
    chances: dict = field(default_factory=lambda: {1: 0, 2: 0})
    last_key: dict = field(default_factory=lambda: {1: None, 2: None})
    saw_advantage: bool = False


def compute_break_stats(snapshots: Sequence[Any]) -> dict[str, dict[str, int]]:
    """Breakpoints earned and breaks converted per team.

    Snapshots are grouped into games by their total game count.  Within a
    game a receiving team earns one breakpoint per distinct score state that
    offers one (``0/15/30-40``, ``40-AD``, or ``40-40`` when the game has
    not gone to advantage).  A game counts as a break for a team that won it
    after holding at least one breakpoint.
    """

    snaps = normalize_snapshots(snapshots)
    empty = {"breaks": 0, "breakpoints": 0}
    if not snaps:
        return {"team1": dict(empty), "team2": dict(empty)}

    totals = [game_totals(snap) for snap in snaps]
    games: dict[int, _GameRecord] = {}

    for i, snap in enumerate(snaps):
        game_index = sum(totals[i])
        rec = games.setdefault(game_index, _GameRecord(start=i, end=i))
        rec.end = i

        serving = server_team(snap.server)
        if rec.serving_team is None and serving is not None:
            rec.serving_team = serving
        elif serving is None:
            serving = rec.serving_team

        if has_advantage(snap.points):
            rec.saw_advantage = True

        holding = {1: False, 2: False}
        if serving in TEAMS:
            receiver = other_team(serving)
            if is_breakpoint_for(serving, snap.points, receiver):
                holding[receiver] = True
        if (
            not rec.saw_advantage
            and is_golden_point(snap.points)
            and rec.serving_team in TEAMS
        ):
            holding[other_team(rec.serving_team)] = True

        key = (
            normalize_point(snap.points.get("team1")),
            normalize_point(snap.points.get("team2")),
        )
        for team in TEAMS:
            if not holding[team]:
                rec.last_key[team] = None
            elif rec.last_key[team] != key:
                rec.chances[team] += 1
                rec.last_key[team] = key

    breakpoints = {1: 0, 2: 0}
    breaks = {1: 0, 2: 0}
    for game_index in sorted(games):
        rec = games[game_index]
        for team in TEAMS:
            breakpoints[team] += rec.chances[team]

        start_g1, start_g2 = totals[rec.start]
        winner = None
        for j in range(rec.end + 1, len(snaps)):
            if sum(totals[j]) > game_index:
                d1 = totals[j][0] - start_g1
                d2 = totals[j][1] - start_g2
                if d1 + d2 == 1:
                    if d1 == 1:
                        winner = 1
                    elif d2 == 1:
                        winner = 2
                break

        if winner is not None and rec.chances[winner] > 0:
            breaks[winner] += 1

    return {
        "team1": {"breaks": breaks[1], "breakpoints": breakpoints[1]},
        "team2": {"breaks": breaks[2], "breakpoints": breakpoints[2]},
    }
