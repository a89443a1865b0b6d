from fastapi import APIRouter, status

from ..db import SessionDep
from ..errors import AuthError, ValidationError
from ..users.schemas import UserPublic
from ..users.service import find_or_create_user, get_user
from .schemas import LoginRequest, Token
from .deps import (
    REFRESH_TOKEN,
    BearerTokenDep,
    CurrentUserDep,
    create_access_token,
    create_refresh_token,
    decode_token,
    verify_identity_assertion,
)

router = APIRouter(prefix="/auth", tags=["Auth"])


def issue_tokens(user_id: int) -> Token:
    return Token(
        access_token=create_access_token(data={"user_id": str(user_id)}),
        refresh_token=create_refresh_token(data={"user_id": str(user_id)}),
        token_type="bearer",
    )


@router.post("/{provider}/login", response_model=Token, status_code=status.HTTP_200_OK)
def login(provider: str, body: LoginRequest, session: SessionDep):
    """Complete a login with an identity assertion from the OAuth front end.

    The OAuth redirect and consent screens are handled in front of this API.
    Once the provider confirms the user, the front end signs the profile into
    a short-lived assertion and posts it here.
    """
    provider = provider.strip().lower()
    if not provider:
        raise ValidationError("Provider cannot be empty")

    profile = verify_identity_assertion(provider, body.assertion)
    user = find_or_create_user(session, provider, profile)
    return issue_tokens(user.id)


@router.post("/token/refresh", response_model=Token)
def refresh_token_endpoint(session: SessionDep, refresh_token: BearerTokenDep):
    """Exchange a valid refresh token for a new access & refresh token."""
    token_data = decode_token(refresh_token, expected_type=REFRESH_TOKEN)
    user = get_user(session, token_data.user_id)
    if user is None:
        raise AuthError()

    return issue_tokens(user.id)


@router.get("/me", response_model=UserPublic)
def read_current_user(current_user: CurrentUserDep):
    return current_user
