"""Application settings, read from ``HOMECAL_*`` environment variables or ``.env``."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_title: str = "Household Calendar Service"
    log_level: str = "INFO"

    # Zone stamped on new events that do not name one
    default_timezone: str = "Australia/Melbourne"

    model_config = SettingsConfigDict(
        env_prefix="HOMECAL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
