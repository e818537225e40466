from datetime import datetime
from functools import lru_cache
from typing import List
from zoneinfo import ZoneInfo

from pydantic import AnyHttpUrl, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    app_name: str = Field(default="Maternity Front Desk Service")
    cors_origins: List[AnyHttpUrl] = Field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ]
    )
    timezone: str = Field(
        default="Africa/Lagos"
    )
    directory_base_url: AnyHttpUrl | None = Field(
        default=None
    )
    directory_timeout: float = Field(
        default=10.0
    )
    directory_token: str | None = Field(
        default=None
    )
    use_mock_data: bool = Field(
        default=True
    )
    jwt_secret: str = Field(
        default="change-me-in-production"
    )
    jwt_algorithm: str = Field(
        default="HS256"
    )
    session_cookie_name: str = Field(
        default="admin_token"
    )
    session_ttl_hours: int = Field(
        default=8
    )

    model_config = SettingsConfigDict(env_prefix="MATERNITY_", case_sensitive=False)

    @field_validator("cors_origins", mode="before")
    def _split_origins(cls, value):
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached application settings."""

    return Settings()


def clinic_now() -> datetime:
    """Current instant expressed in the clinic's local timezone."""

    return datetime.now(get_settings().tzinfo)


def start_of_day(moment: datetime) -> datetime:
    """Local midnight of the day containing ``moment``."""

    return moment.replace(hour=0, minute=0, second=0, microsecond=0)
