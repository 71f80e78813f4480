"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from club_scheduler.domain.schedule import parse_weekday

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    airtable_api_key: str
    airtable_base_id: str
    airtable_table_name: str = "Matches"
    airtable_base_url: str = "https://api.airtable.com/v0"
    airtable_timeout: float = 15.0
    airtable_text_limit: int = 100_000
    access_passphrase: str
    session_weekday: str = "wednesday"
    same_day_cutoff_hour: int = 12
    upcoming_session_count: int = 8
    club_timezone: str = "America/Los_Angeles"
    receipt_max_bytes: int = 10 * 1024 * 1024
    receipt_max_dimension: int = 1600
    receipt_jpeg_quality: int = 80
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def weekday_index(self) -> int:
        """Configured session weekday as a Monday=0 index."""
        return parse_weekday(self.session_weekday)
