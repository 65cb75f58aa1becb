import logging
import os
from typing import Any, Optional

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded

from ..config import (
    ANALYTICS_RATE_LIMIT,
    MAX_POINT_COUNTER,
    MAX_POINT_EVENTS,
    MAX_SNAPSHOTS,
)
from ..exceptions import EmptyMatchHistory, ProblemDetail, http_problem
from ..schemas import (
    AnalyticsRequest,
    EventsOut,
    KeyMomentsOut,
    SetsParseOut,
    SetsParseRequest,
    SummaryOut,
)
from ..services.analytics import build_match_analytics
from ..services.events import collect_point_events
from ..services.moments import compute_key_moments
from ..services.sets import (
    count_sets_played,
    derive_set_counts,
    parse_sets,
    sanitize_sets_string,
    should_hide_set,
    to_int,
)
from ..services.snapshots import player_names, snapshot_timeline
from ..services.summary import is_finished, mvp_flags, player_rows, sort_rows, team_rows
from ..services.validation import (
    ValidationError,
    validate_event_list,
    validate_roster,
    validate_snapshot_list,
)

logger = logging.getLogger(__name__)

SORTABLE_COLUMNS = {"winners", "errors", "impact", "breaks", "breakpoints"}


def _rate_limits_disabled() -> bool:
    return (os.getenv("DISABLE_ANALYTICS_RATE_LIMITS") or "").lower() == "true"


def _get_client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        parts = [ip.strip() for ip in forwarded.split(",") if ip.strip()]
        if parts:
            return parts[-1]
    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip
    return request.client.host if request.client else ""


def analytics_rate_limit() -> str:
    if _rate_limits_disabled():
        return "1000/second"
    return ANALYTICS_RATE_LIMIT


limiter = Limiter(key_func=_get_client_ip)
router = APIRouter(prefix="/analytics", tags=["analytics"])


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    detail = exc.detail if isinstance(exc.detail, str) else ""
    if detail:
        message = f"rate limit exceeded: {detail}"
    else:
        message = "rate limit exceeded: please wait before submitting another request."
    problem = ProblemDetail(
        title="Too Many Requests",
        detail=message,
        status=429,
        code="rate_limit_exceeded",
    )
    return JSONResponse(
        status_code=429,
        content=problem.model_dump(),
        media_type="application/problem+json",
    )


def _load_history(body: AnalyticsRequest) -> tuple[list[Any], list[Any], list[Any]]:
    try:
        snapshots = validate_snapshot_list(
            body.snapshots,
            max_snapshots=MAX_SNAPSHOTS,
            max_counter=MAX_POINT_COUNTER,
            max_point_events=MAX_POINT_EVENTS,
        )
        events = validate_event_list(
            body.events,
            max_events=MAX_SNAPSHOTS,
            max_counter=MAX_POINT_COUNTER,
            max_point_events=MAX_POINT_EVENTS,
        )
        roster = validate_roster(body.players)
    except ValidationError as exc:
        raise http_problem(
            status_code=422,
            detail=exc.detail,
            code="invalid_snapshots",
        )
    return snapshots, events, roster


# POST /api/v0/analytics
@router.post("")
@limiter.limit(analytics_rate_limit)
async def match_analytics(request: Request, body: AnalyticsRequest) -> dict[str, Any]:
    snapshots, events, roster = _load_history(body)
    result = build_match_analytics(
        snapshots, events=events, roster=roster, status=body.status
    )
    logger.debug(
        "Analysed %d snapshots into %d events",
        result["snapshotCount"],
        len(result["events"]),
    )
    return result


# POST /api/v0/analytics/events
@router.post("/events", response_model=EventsOut)
@limiter.limit(analytics_rate_limit)
async def point_events(request: Request, body: AnalyticsRequest) -> EventsOut:
    snapshots, events, _ = _load_history(body)
    snaps = snapshot_timeline(snapshots, events)
    return EventsOut(
        snapshotCount=len(snaps),
        events=[ev.as_dict() for ev in collect_point_events(snaps)],
    )


# POST /api/v0/analytics/key-moments
@router.post("/key-moments", response_model=KeyMomentsOut)
@limiter.limit(analytics_rate_limit)
async def key_moments(request: Request, body: AnalyticsRequest) -> KeyMomentsOut:
    snapshots, events, roster = _load_history(body)
    snaps = snapshot_timeline(snapshots, events)
    names = player_names(roster, snaps[-1] if snaps else None)
    return KeyMomentsOut(**compute_key_moments(snaps, names=names).as_dict())


# POST /api/v0/analytics/summary
@router.post("/summary", response_model=SummaryOut)
@limiter.limit(analytics_rate_limit)
async def match_summary(
    request: Request,
    body: AnalyticsRequest,
    sort: Optional[str] = Query(None),
    descending: bool = Query(False),
) -> SummaryOut:
    if sort is not None and sort not in SORTABLE_COLUMNS:
        raise http_problem(
            status_code=422,
            detail=f"cannot sort by '{sort}'",
            code="invalid_sort",
        )
    snapshots, events, roster = _load_history(body)
    snaps = snapshot_timeline(snapshots, events)
    if not snaps:
        raise EmptyMatchHistory()

    final = snaps[-1]
    status = body.status if body.status is not None else final.status
    names = player_names(roster, final)
    teams = team_rows(snaps, names)
    players = player_rows(snaps, names)
    if sort is not None:
        teams = sort_rows(teams, sort, descending)
        # players have no break columns; fall back to table order
        if sort in {"winners", "errors", "impact"}:
            players = sort_rows(players, sort, descending)
    return SummaryOut(
        status=status,
        teamRows=teams,
        playerRows=players,
        mvp=mvp_flags(final, status),
    )


# POST /api/v0/analytics/sets/parse
@router.post("/sets/parse", response_model=SetsParseOut)
@limiter.limit(analytics_rate_limit)
async def parse_set_scores(request: Request, body: SetsParseRequest) -> SetsParseOut:
    sets_text = body.sets if isinstance(body.sets, str) else None
    sets_won = body.sets if isinstance(body.sets, dict) else None
    finished = is_finished(body.status)
    parsed = parse_sets(sets_text, sets_won, body.games)

    if sets_text is not None:
        won = derive_set_counts(sets_text)
    elif sets_won is not None:
        won = {
            "team1": to_int(sets_won.get("team1")) or 0,
            "team2": to_int(sets_won.get("team2")) or 0,
        }
    else:
        won = {"team1": 0, "team2": 0}

    return SetsParseOut(
        sets=[
            {**s, "hidden": should_hide_set(finished, s["team1"], s["team2"])}
            for s in parsed
        ],
        setsWon=won,
        sanitized=sanitize_sets_string(sets_text),
        setsPlayed=count_sets_played(body.sets),
    )
