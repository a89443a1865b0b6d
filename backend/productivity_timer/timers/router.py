from typing import Annotated

from fastapi import APIRouter, Depends

from ..auth.deps import CurrentUserIdDep
from ..clock import ClockDep
from ..db import SessionDep
from .repository import TimerRepository
from .schemas import TagListResponse, TimerResponse, TimerSessionPublic
from .service import TimerService, TimerState

router = APIRouter(prefix="/timers", tags=["Timers"])


def get_timer_service(db: SessionDep, clock: ClockDep) -> TimerService:
    return TimerService(TimerRepository(db), now=clock)


TimerServiceDep = Annotated[TimerService, Depends(get_timer_service)]


def to_response(state: TimerState) -> TimerResponse:
    return TimerResponse(
        session=TimerSessionPublic.model_validate(state.session, from_attributes=True),
        duration=state.duration,
        status=state.status,
    )


@router.post("/{tag}/start", response_model=TimerResponse)
def start_timer(tag: str, user_id: CurrentUserIdDep, timers: TimerServiceDep):
    return to_response(timers.start(user_id, tag))


@router.post("/{tag}/stop", response_model=TimerResponse)
def stop_timer(tag: str, user_id: CurrentUserIdDep, timers: TimerServiceDep):
    return to_response(timers.stop(user_id, tag))


@router.post("/{tag}/reset", response_model=TagListResponse)
def reset_timer(tag: str, user_id: CurrentUserIdDep, timers: TimerServiceDep):
    """Complete the stopped timer and return the tags available to start again."""
    return TagListResponse(tags=timers.reset(user_id, tag))


@router.get("/{tag}", response_model=TimerResponse)
def get_current_timer(tag: str, user_id: CurrentUserIdDep, timers: TimerServiceDep):
    return to_response(timers.current(user_id, tag))
