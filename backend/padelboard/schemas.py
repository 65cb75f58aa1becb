from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AnalyticsRequest(BaseModel):
    """One match history as fetched from the scoreboard store.

    ``snapshots``, ``events`` and ``players`` are kept loosely typed here;
    their shape is checked by :mod:`padelboard.services.validation` so a bad
    payload surfaces as a problem document rather than a pydantic error list.
    """

    snapshots: Optional[Any] = None
    events: Optional[Any] = None
    players: Optional[Any] = None
    status: Optional[str] = None

    model_config = ConfigDict(extra="ignore")

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: Any) -> Optional[str]:
        if value is None:
            return None
        if not isinstance(value, str):
            raise TypeError("status must be a string")
        trimmed = value.strip().lower()
        return trimmed or None


class SetsParseRequest(BaseModel):
    sets: Optional[Any] = None
    games: Optional[Dict[str, Any]] = None
    status: Optional[str] = None


class SetScoreOut(BaseModel):
    team1: int
    team2: int
    hidden: bool = False


class SetsParseOut(BaseModel):
    sets: List[SetScoreOut]
    setsWon: Dict[str, int]
    sanitized: str
    setsPlayed: int


class PointEventOut(BaseModel):
    index: int
    playerIndex: int
    team: int
    eventType: str
    detail: Optional[str] = None


class EventsOut(BaseModel):
    snapshotCount: int
    events: List[PointEventOut]


class MomentOut(BaseModel):
    key: str
    text: str
    pointIndex: int
    value: float
    holders: List[int]


class KeyMomentsOut(BaseModel):
    player: List[MomentOut] = Field(default_factory=list)
    team: List[MomentOut] = Field(default_factory=list)


class PlayerRowOut(BaseModel):
    index: int
    name: str
    team: int
    winners: int
    errors: int
    impact: int


class TeamRowOut(BaseModel):
    index: int
    team: int
    label: str
    winners: int
    errors: int
    impact: int
    breaks: int
    breakpoints: int


class SummaryOut(BaseModel):
    status: Optional[str] = None
    teamRows: List[TeamRowOut]
    playerRows: List[PlayerRowOut]
    mvp: List[bool]
