from typing import List
from datetime import datetime

from pydantic import BaseModel

from ..timers.schemas import TimerSessionPublic


class TagStatsPublic(BaseModel):
    """Stats for a single tag within a time period"""
    tag: str
    total_duration: int  # in seconds
    session_count: int
    average_session: int  # in seconds
    percentage_of_total: float


class StatsSummaryPublic(BaseModel):
    """Aggregated stats for a time period"""
    total_duration: int  # across all tags, in seconds
    total_sessions: int
    average_session: int
    most_used_tag: str
    tag_breakdown: List[TagStatsPublic]


class UserTagStatsPublic(BaseModel):
    tag: str
    total_duration: int
    session_count: int
    last_updated: datetime


class TagSessionsResponse(BaseModel):
    tag: str
    sessions: List[TimerSessionPublic]
