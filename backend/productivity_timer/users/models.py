from typing import Optional, List, TYPE_CHECKING
from datetime import datetime

from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field, Relationship

from ..clock import UTCDateTime, utcnow

if TYPE_CHECKING:
    from ..models import TimerSession, UserTagStats  # noqa: F401


class User(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("provider", "provider_id"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    provider: str = Field(index=True)
    provider_id: str = Field(index=True)
    email: str = Field(default="", index=True)
    name: str = ""
    first_name: str = ""
    last_name: str = ""
    nick_name: str = ""
    avatar_url: str = ""
    created_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    last_login_at: datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)

    timer_sessions: List["TimerSession"] = Relationship(back_populates="user")
    tag_stats: List["UserTagStats"] = Relationship(back_populates="user")
