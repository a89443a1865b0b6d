from sqlmodel import SQLModel


class Token(SQLModel):
    access_token: str
    refresh_token: str
    token_type: str


class TokenData(SQLModel):
    user_id: int | None = None
    token_type: str | None = None


class LoginRequest(SQLModel):
    # JWT signed by the OAuth front end after the provider confirmed the user
    assertion: str
