from datetime import datetime

from pydantic import field_validator
from sqlmodel import SQLModel


class IdentityProfile(SQLModel):
    """Profile returned by the identity provider after a successful OAuth handshake."""

    provider_id: str
    email: str = ""
    name: str = ""
    first_name: str = ""
    last_name: str = ""
    nick_name: str = ""
    avatar_url: str = ""

    @field_validator("provider_id")
    def provider_id_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("provider_id cannot be empty")
        return value


class UserPublic(SQLModel):
    id: int
    provider: str
    email: str
    name: str
    first_name: str
    last_name: str
    nick_name: str
    avatar_url: str
    created_at: datetime
    last_login_at: datetime
