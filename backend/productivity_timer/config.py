from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration using pydantic-settings.

    Values come from the environment and, if present, a .env file. Use the
    exported `settings` instance.
    """

    database_url: str = "sqlite:///database.db"
    database_echo: bool = False
    environment: str = "development"
    log_level: str = "info"
    secret_key: str = "please_change_this"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 30
    refresh_token_expire_minutes: int = 60 * 24 * 7  # 7 days
    # Shared with the OAuth front end that signs identity assertions.
    # Login is refused while this is empty.
    identity_assertion_secret: str = ""
    identity_assertion_audience: str = "productivity-timer"
    cors_origins: List[str] = ["*"]
    host: str = "0.0.0.0"
    port: int = 8080

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


# singleton settings instance to import across the app
settings = Settings()
