"""Configuration management."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Library settings pulled from PY_FORTUNE_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PY_FORTUNE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    log_format: str = Field(default="plain", description="Logging format (plain or json)")

    # Clipping
    clip_tolerance: float = Field(
        default=1e-9, ge=0,
        description="Slack when testing whether a vertex lies inside the bounding rectangle, relative to its larger side"
    )

    # Site generation
    default_seed: str = Field(default="default", description="Seed used when none is given")
    default_rect_width: float = Field(default=800.0, gt=0, description="Default bounding rectangle width")
    default_rect_height: float = Field(default=600.0, gt=0, description="Default bounding rectangle height")
    relax_iterations: int = Field(default=3, ge=0, description="Lloyd relaxation passes")


settings = Settings()
