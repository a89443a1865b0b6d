import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from ..clock import Clock, utcnow
from ..errors import PersistenceError
from .models import User
from .schemas import IdentityProfile

logger = logging.getLogger(__name__)

PROFILE_FIELDS = (
    "email",
    "name",
    "first_name",
    "last_name",
    "nick_name",
    "avatar_url",
)


def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.get(User, user_id)


def find_or_create_user(
    db: Session, provider: str, profile: IdentityProfile, now: Clock = utcnow
) -> User:
    """Upsert a user keyed by (provider, provider_id).

    An existing user gets every profile field overwritten from the identity
    provider and ``last_login_at`` refreshed; a new user is inserted with
    ``created_at`` and ``last_login_at`` set to now.
    """
    timestamp = now()
    try:
        user = db.exec(
            select(User).where(
                User.provider == provider, User.provider_id == profile.provider_id
            )
        ).first()

        if user is None:
            user = User(
                provider=provider,
                provider_id=profile.provider_id,
                created_at=timestamp,
                last_login_at=timestamp,
                **profile.model_dump(include=set(PROFILE_FIELDS)),
            )
            logger.info("Creating user for %s:%s", provider, profile.provider_id)
        else:
            for field in PROFILE_FIELDS:
                setattr(user, field, getattr(profile, field))
            user.last_login_at = timestamp

        db.add(user)
        db.commit()
        db.refresh(user)
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Failed to upsert user %s:%s", provider, profile.provider_id)
        raise PersistenceError("Failed to save user") from e

    return user
