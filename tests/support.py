"""Shared fixtures for the test modules: in-memory database and a settable clock."""
import os
from datetime import datetime, timedelta, timezone

# Set required environment variables before the package reads its settings
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("IDENTITY_ASSERTION_SECRET", "test-assertion-secret")

import jwt
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

import productivity_timer.db  # noqa: F401  (registers every table)
from productivity_timer.config import settings
from productivity_timer.users.models import User


def make_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    return engine


def make_user(db: Session, provider_id: str = "alice-123", email: str = "alice@example.com") -> User:
    user = User(provider="google", provider_id=provider_id, email=email, name=email.split("@")[0])
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime = datetime(2026, 3, 2, 9, 0, 0, tzinfo=timezone.utc)):
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def advance(self, seconds: float):
        self.current = self.current + timedelta(seconds=seconds)


def make_assertion(
    provider_id: str,
    provider: str = "google",
    secret: str | None = None,
    expires_in: int = 300,
    **profile,
) -> str:
    """Identity assertion as the OAuth front end would sign it."""
    claims = {
        "sub": provider_id,
        "provider": provider,
        "aud": settings.identity_assertion_audience,
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
        **profile,
    }
    return jwt.encode(
        claims,
        secret if secret is not None else settings.identity_assertion_secret,
        algorithm=settings.algorithm,
    )
