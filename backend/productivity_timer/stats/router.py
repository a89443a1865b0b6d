from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query, Response, status

from ..auth.deps import CurrentUserIdDep
from ..clock import ClockDep
from ..db import SessionDep
from ..timers.repository import TimerRepository
from ..timers.schemas import TimerSessionPublic
from .ranges import parse_date_range
from .schemas import StatsSummaryPublic, TagSessionsResponse, UserTagStatsPublic
from .service import StatsService

router = APIRouter(prefix="/stats", tags=["Stats"])


def get_stats_service(db: SessionDep) -> StatsService:
    return StatsService(TimerRepository(db))


StatsServiceDep = Annotated[StatsService, Depends(get_stats_service)]


def date_range(
    clock: ClockDep,
    start: Optional[str] = Query(None, examples=["2026-01-01T00:00"]),
    end: Optional[str] = Query(None, examples=["2026-01-31T23:59"]),
):
    """Inclusive date range from query params, defaulting to today (UTC)."""
    return parse_date_range(start, end, clock().date())


DateRangeDep = Annotated[tuple, Depends(date_range)]


@router.get("/summary", response_model=StatsSummaryPublic)
def get_stats_summary(
    user_id: CurrentUserIdDep, stats: StatsServiceDep, period: DateRangeDep
):
    start, end = period
    return stats.get_stats_summary(user_id, start, end)


@router.get("/tags", response_model=List[UserTagStatsPublic])
def list_tag_stats(user_id: CurrentUserIdDep, stats: StatsServiceDep):
    """Lifetime totals for every tag the user has started."""
    return [
        UserTagStatsPublic.model_validate(row, from_attributes=True)
        for row in stats.list_tag_stats(user_id)
    ]


@router.get("/tags/{tag}/sessions", response_model=TagSessionsResponse)
def get_tag_sessions(
    tag: str,
    user_id: CurrentUserIdDep,
    stats: StatsServiceDep,
    period: DateRangeDep,
):
    start, end = period
    sessions = stats.get_tag_sessions(user_id, tag, start, end)
    return TagSessionsResponse(
        tag=tag.strip(),
        sessions=[
            TimerSessionPublic.model_validate(s, from_attributes=True)
            for s in sessions
        ],
    )


@router.delete("/tags/{tag}", status_code=status.HTTP_204_NO_CONTENT)
def delete_tag(tag: str, user_id: CurrentUserIdDep, stats: StatsServiceDep):
    stats.delete_tag(user_id, tag)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
