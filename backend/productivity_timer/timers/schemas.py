from typing import List, Optional
from datetime import datetime

from pydantic import BaseModel

from ..models import TimerStatus


class TimerSessionPublic(BaseModel):
    id: int
    tag: str
    start_time: datetime
    end_time: Optional[datetime] = None
    duration: int
    status: TimerStatus
    created_at: datetime
    last_updated: datetime


class TimerResponse(BaseModel):
    session: TimerSessionPublic
    duration: int
    status: TimerStatus


class TagListResponse(BaseModel):
    tags: List[str]
