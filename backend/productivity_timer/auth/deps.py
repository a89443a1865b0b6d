import logging
from datetime import datetime, timedelta, timezone
from typing import Annotated, Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt.exceptions import InvalidTokenError

from ..config import settings
from ..db import SessionDep
from ..errors import AuthError
from ..users.models import User
from ..users.schemas import IdentityProfile
from ..users.service import get_user
from .schemas import TokenData

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"

PROFILE_CLAIMS = ("email", "name", "first_name", "last_name", "nick_name", "avatar_url")


def create_token(data: dict, expires_delta: timedelta | None = None):
    to_encode = data.copy()
    if expires_delta is not None:
        expire = datetime.now(timezone.utc) + expires_delta
        to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def create_access_token(data: dict, expires_delta: timedelta | None = None):
    return create_token(
        {**data, "type": ACCESS_TOKEN},
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes),
    )


def create_refresh_token(data: dict, expires_delta: timedelta | None = None):
    return create_token(
        {**data, "type": REFRESH_TOKEN},
        expires_delta or timedelta(minutes=settings.refresh_token_expire_minutes),
    )


def decode_token(token: str, expected_type: str = ACCESS_TOKEN) -> TokenData:
    try:
        payload = jwt.decode(
            token, settings.secret_key, algorithms=[settings.algorithm]
        )
        user_id = payload.get("user_id")
        token_type = payload.get("type")
        if user_id is None or token_type != expected_type:
            raise AuthError()
        return TokenData(user_id=int(user_id), token_type=token_type)
    except (InvalidTokenError, ValueError) as e:
        logger.debug("Rejected bearer token: %s", e)
        raise AuthError() from e


def verify_identity_assertion(provider: str, assertion: str) -> IdentityProfile:
    """Check a signed identity assertion and return the profile it carries.

    The assertion is a JWT issued by the OAuth front end once the provider
    has confirmed who the user is. It must be signed with the shared
    ``identity_assertion_secret``, target our audience, be unexpired and name
    the same provider as the login path.
    """
    if not settings.identity_assertion_secret:
        logger.warning("Login attempted for '%s' but no assertion secret is set", provider)
        raise AuthError("Login is not configured")

    try:
        claims = jwt.decode(
            assertion,
            settings.identity_assertion_secret,
            algorithms=[settings.algorithm],
            audience=settings.identity_assertion_audience,
            options={"require": ["exp", "sub", "provider"]},
        )
    except InvalidTokenError as e:
        logger.info("Rejected identity assertion for '%s': %s", provider, e)
        raise AuthError("Invalid identity assertion") from e

    if str(claims["provider"]).strip().lower() != provider:
        logger.info(
            "Identity assertion for '%s' presented to '%s' login",
            claims["provider"],
            provider,
        )
        raise AuthError("Invalid identity assertion")

    try:
        return IdentityProfile(
            provider_id=str(claims["sub"]),
            **{field: claims[field] for field in PROFILE_CLAIMS if field in claims},
        )
    except ValueError as e:
        raise AuthError("Invalid identity assertion") from e


def get_bearer_token(
    credentials: Annotated[
        Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)
    ],
) -> str:
    if credentials is None or not credentials.credentials:
        raise AuthError("Not authenticated")
    return credentials.credentials


async def get_current_user(
    session: SessionDep, token: Annotated[str, Depends(get_bearer_token)]
) -> User:
    token_data = decode_token(token)
    user = get_user(session, token_data.user_id)
    if user is None:
        raise AuthError()
    return user


async def get_current_user_id(
    current_user: Annotated[User, Depends(get_current_user)],
) -> int:
    return current_user.id


BearerTokenDep = Annotated[str, Depends(get_bearer_token)]
CurrentUserDep = Annotated[User, Depends(get_current_user)]
CurrentUserIdDep = Annotated[int, Depends(get_current_user_id)]
