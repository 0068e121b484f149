"""Driver settings."""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DriverSettings(BaseSettings):
    """Settings of the demo driver, read from VORONOI_* environment variables."""

    model_config = SettingsConfigDict(env_prefix="VORONOI_")

    canvas_size: float = Field(default=698.0, gt=0, description="Canvas pixels per unit length")
    batch_size: int = Field(default=100, ge=0, description="Sites added per batch")
    margin: float = Field(default=0.1, ge=0.0, lt=0.5, description="Keep random sites this far from the border")
    seed: Optional[int] = Field(default=None, description="Seed of the random site generator")
    log_level: str = Field(default="INFO", description="Log level")
