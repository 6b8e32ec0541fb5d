"""Configuration management."""

import os
from pathlib import Path

from dotenv import dotenv_values
from pydantic import Field
from pydantic_settings import BaseSettings

from .core.propagation import DistanceMode
from .core.transport import AbsorbPolicy, ClampPolicy

# Load .env for local runs, without overriding variables already set
BASE_DIR = Path(__file__).resolve().parent.parent
env_file = BASE_DIR / ".env"

if env_file.exists():
    file_env = dotenv_values(env_file)
    missing_keys = {k: v for k, v in file_env.items() if k not in os.environ and v is not None}
    for k, v in missing_keys.items():
        os.environ[k] = v


class Settings(BaseSettings):
    """Application settings pulled from ``DISCHARGE_*`` environment variables."""

    # Grid
    grid_width: int = Field(default=256, gt=0, description="Grid width in cells")
    grid_height: int = Field(default=256, gt=0, description="Grid height in cells")
    scaling: int = Field(default=8, ge=1, description="Pointer pixels per grid cell")

    # Charge
    max_charge: int = Field(default=16, ge=1, description="Charge capacity of a cell")
    absorb_policy: AbsorbPolicy = Field(
        default=AbsorbPolicy.DECREMENT, description="How ground cells consume charge"
    )
    absorb_rate: int = Field(default=1, ge=1, description="Units a ground cell absorbs per frame")
    clamp_policy: ClampPolicy = Field(
        default=ClampPolicy.CLAMP, description="How staged overshoot is committed"
    )

    # Distance field
    distance_mode: DistanceMode = Field(
        default=DistanceMode.UNIFORM, description="Uniform or cost-weighted edges"
    )

    # Input
    interpolate_strokes: bool = Field(
        default=True, description="Paint every cell crossed by a pointer move"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Logging format (plain or json)")
    stats_interval: int = Field(
        default=0, ge=0, description="Log frame stats at INFO every N frames, 0 disables"
    )

    class Config:
        env_prefix = "DISCHARGE_"
        extra = "ignore"


# Instantiate singleton settings object
settings = Settings()
