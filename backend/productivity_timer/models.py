from enum import Enum
from typing import Optional, TYPE_CHECKING
from datetime import datetime

from sqlalchemy import UniqueConstraint
from sqlmodel import Field as SQLField, SQLModel, Relationship

from .clock import UTCDateTime, utcnow

if TYPE_CHECKING:
    from .users.models import User  # noqa: F401


class TimerStatus(str, Enum):
    RUNNING = "running"
    STOPPED = "stopped"
    COMPLETED = "completed"


class TimerSession(SQLModel, table=True):
    __tablename__ = "timer_session"

    id: Optional[int] = SQLField(default=None, primary_key=True)
    user_id: int = SQLField(foreign_key="user.id", index=True)
    tag: str = SQLField(index=True)
    start_time: datetime = SQLField(
        default_factory=utcnow, sa_type=UTCDateTime, index=True
    )
    end_time: Optional[datetime] = SQLField(
        default=None, sa_type=UTCDateTime
    )  # set only once completed
    duration: int = SQLField(default=0)  # accumulated seconds
    status: TimerStatus = SQLField(default=TimerStatus.RUNNING, index=True)
    created_at: datetime = SQLField(default_factory=utcnow, sa_type=UTCDateTime)
    last_updated: datetime = SQLField(default_factory=utcnow, sa_type=UTCDateTime)

    user: Optional["User"] = Relationship(back_populates="timer_sessions")


class UserTagStats(SQLModel, table=True):
    """Lifetime running totals for one (user, tag) pair."""

    __tablename__ = "user_tag_stats"
    __table_args__ = (UniqueConstraint("user_id", "tag"),)

    id: Optional[int] = SQLField(default=None, primary_key=True)
    user_id: int = SQLField(foreign_key="user.id", index=True)
    tag: str = SQLField(index=True)
    total_duration: int = SQLField(default=0)  # in seconds
    session_count: int = SQLField(default=1)
    last_updated: datetime = SQLField(default_factory=utcnow, sa_type=UTCDateTime)

    user: Optional["User"] = Relationship(back_populates="tag_stats")
