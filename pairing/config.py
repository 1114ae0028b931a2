from __future__ import annotations

import os
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv
from pydantic import BaseModel, Field


ENV_MAX_RETRIES = "PAIRING_MAX_RETRIES"
ENV_RANDOM_SEED = "PAIRING_RANDOM_SEED"


class EngineSettings(BaseModel):
    """Knobs the pairing engine reads at construction time."""

    max_retries: int = Field(default=0, ge=0, description="Reshuffles allowed when a run repeats a past pair")
    random_seed: Optional[int] = Field(default=None, description="Fixed seed for reproducible runs")


def load_settings(env_file: Optional[Union[str, Path]] = None) -> EngineSettings:
    """Build settings from the environment, loading a .env file first if present.

    Raises:
        pydantic.ValidationError: If a variable is set to an invalid value.
    """
    load_dotenv(env_file)
    raw = {}
    max_retries = os.environ.get(ENV_MAX_RETRIES, "").strip()
    if max_retries:
        raw["max_retries"] = max_retries
    random_seed = os.environ.get(ENV_RANDOM_SEED, "").strip()
    if random_seed:
        raw["random_seed"] = random_seed
    return EngineSettings.model_validate(raw)
