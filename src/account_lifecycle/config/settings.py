"""Runtime settings loaded from environment variables."""

from functools import lru_cache
from typing import Annotated

from pydantic import Field, HttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict

NonEmptyStr = Annotated[str, Field(min_length=1)]
PositiveInt = Annotated[int, Field(gt=0)]
PortInt = Annotated[int, Field(gt=0, le=65535)]


class Settings(BaseSettings):
    """Environment-driven application settings."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    database_url: NonEmptyStr = Field(validation_alias="DATABASE_URL")
    reset_token_ttl_minutes: PositiveInt = Field(
        default=60,
        validation_alias="RESET_TOKEN_TTL_MINUTES",
    )
    invalidate_previous_reset_tokens: bool = Field(
        default=False,
        validation_alias="INVALIDATE_PREVIOUS_RESET_TOKENS",
    )
    session_ttl_hours: PositiveInt = Field(default=12, validation_alias="SESSION_TTL_HOURS")
    session_cookie_secure: bool = Field(default=False, validation_alias="SESSION_COOKIE_SECURE")
    password_reset_url: HttpUrl = Field(
        default="http://localhost:8000/reset-password",
        validate_default=True,
        validation_alias="PASSWORD_RESET_URL",
    )
    smtp_host: NonEmptyStr | None = Field(default=None, validation_alias="SMTP_HOST")
    smtp_port: PortInt = Field(default=587, validation_alias="SMTP_PORT")
    smtp_username: NonEmptyStr | None = Field(default=None, validation_alias="SMTP_USERNAME")
    smtp_password: NonEmptyStr | None = Field(default=None, validation_alias="SMTP_PASSWORD")
    smtp_from: NonEmptyStr | None = Field(default=None, validation_alias="SMTP_FROM")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")

    @property
    def smtp_enabled(self) -> bool:
        """Return whether enough SMTP settings exist to deliver real email."""

        return self.smtp_host is not None and self.smtp_from is not None


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    """Load and cache application settings."""

    return Settings()  # type: ignore[call-arg]
