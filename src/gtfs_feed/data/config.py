from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class FeedSettings(BaseSettings):
    """Configuration for reading, writing and matching GTFS feeds.

    Automatically loads from environment variables and .env file.
    """

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    strict: bool = Field(default=False, alias="GTFS_STRICT")
    delimiter: str = Field(default=",", alias="GTFS_DELIMITER", min_length=1, max_length=1)
    encoding: str = Field(default="utf-8-sig", alias="GTFS_ENCODING")

    # Stop-to-shape matching, in meters
    max_shape_tolerance: float = Field(default=20.0, alias="GTFS_MAX_SHAPE_TOLERANCE", gt=1.0)


@lru_cache
def get_settings() -> FeedSettings:
    """Get feed configuration (cached singleton).

    Returns:
        FeedSettings with values from .env file or environment variables.
    """
    return FeedSettings()
