"""Configuration loader for matchelo."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass
from typing import Dict

from dotenv import load_dotenv
from loguru import logger


DEFAULT_K_FACTOR = 20.0
DEFAULT_HOME_ADVANTAGE = 65.0
DEFAULT_GOALS_SLOPE = 0.0017854953143549
DEFAULT_GOALS_INTERCEPT = 1.3218390804597700

_ENV_DEFAULTS: Dict[str, float] = {
    "ELO_K_FACTOR": DEFAULT_K_FACTOR,
    "ELO_HOME_ADVANTAGE": DEFAULT_HOME_ADVANTAGE,
    "ELO_GOALS_SLOPE": DEFAULT_GOALS_SLOPE,
    "ELO_GOALS_INTERCEPT": DEFAULT_GOALS_INTERCEPT,
}


@dataclass(frozen=True)
class Settings:
    """Default rating parameters loaded from environment variables."""

    k_factor: float = DEFAULT_K_FACTOR
    home_advantage: float = DEFAULT_HOME_ADVANTAGE
    goals_slope: float = DEFAULT_GOALS_SLOPE
    goals_intercept: float = DEFAULT_GOALS_INTERCEPT


def _read_float(name: str, default: float) -> float | None:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def load_settings() -> Settings:
    """Load environment variables and return settings."""
    load_dotenv()
    values: Dict[str, float] = {}
    invalid = []
    for name, default in _ENV_DEFAULTS.items():
        value = _read_float(name, default)
        if value is None:
            invalid.append(name)
        else:
            values[name] = value

    if invalid:
        logger.error(f"Invalid rating settings in environment: {invalid}")
        raise RuntimeError(
            "Environment variables must be finite numbers: " + ", ".join(invalid)
        )

    settings = Settings(
        k_factor=values["ELO_K_FACTOR"],
        home_advantage=values["ELO_HOME_ADVANTAGE"],
        goals_slope=values["ELO_GOALS_SLOPE"],
        goals_intercept=values["ELO_GOALS_INTERCEPT"],
    )
    logger.info(
        f"Rating settings: k_factor={settings.k_factor} "
        f"home_advantage={settings.home_advantage}"
    )
    return settings


def get_settings() -> Settings:
    """Get cached settings instance."""
    if not hasattr(get_settings, "_settings"):
        get_settings._settings = load_settings()
    return get_settings._settings
