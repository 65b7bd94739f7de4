"""Poisson goal model for simulating a match from two ratings."""

from __future__ import annotations

import math
from typing import Optional, Tuple

import numpy as np
from loguru import logger
from scipy.stats import poisson

from matchelo.models.elo import EloUpdate, update_ratings_after_match


MIN_GOAL_RATE = 0.001


def expected_goals(
    rating_home: float,
    rating_away: float,
    home_advantage: float,
    goals_slope: float,
    goals_intercept: float,
) -> Tuple[float, float]:
    """Expected goals for home and away from the (unclamped) rating delta."""
    delta = rating_home + home_advantage - rating_away
    lambda_home = max(delta * goals_slope + goals_intercept, MIN_GOAL_RATE)
    lambda_away = max(-delta * goals_slope + goals_intercept, MIN_GOAL_RATE)
    return lambda_home, lambda_away


def _goals_from_quantile(quantile: float, lam: float) -> float:
    if not 0.0 <= quantile < 1.0:
        raise ValueError(f"Random quantile must be in [0, 1), got {quantile!r}")
    # scipy maps q=0 to -1; a match cannot have fewer than zero goals.
    return max(float(poisson.ppf(quantile, lam)), 0.0)


def simulate_goals(
    random_home: float,
    random_away: float,
    lambda_home: float,
    lambda_away: float,
) -> Tuple[float, float]:
    """Turn two uniform quantiles into a scoreline."""
    return (
        _goals_from_quantile(random_home, lambda_home),
        _goals_from_quantile(random_away, lambda_away),
    )


def simulate_match(
    rating_home: float,
    rating_away: float,
    random_home: Optional[float] = None,
    random_away: Optional[float] = None,
    *,
    sensitivity: float,
    home_advantage: float,
    goals_slope: float,
    goals_intercept: float,
    rng: Optional[np.random.Generator] = None,
) -> EloUpdate:
    """Simulate a scoreline and apply it to the ratings.

    Quantiles that are not supplied are drawn from ``rng`` (a fresh default
    generator when omitted).
    """
    for name, value in (
        ("rating_home", rating_home),
        ("rating_away", rating_away),
        ("home_advantage", home_advantage),
        ("goals_slope", goals_slope),
        ("goals_intercept", goals_intercept),
    ):
        if not math.isfinite(value):
            raise ValueError(f"{name} must be a finite number, got {value!r}")

    if random_home is None or random_away is None:
        rng = rng if rng is not None else np.random.default_rng()
        if random_home is None:
            random_home = float(rng.random())
        if random_away is None:
            random_away = float(rng.random())

    lambda_home, lambda_away = expected_goals(
        rating_home, rating_away, home_advantage, goals_slope, goals_intercept
    )
    logger.debug(f"Goal rates: home={lambda_home:.3f} away={lambda_away:.3f}")
    goals_home, goals_away = simulate_goals(random_home, random_away, lambda_home, lambda_away)

    return update_ratings_after_match(
        rating_home,
        rating_away,
        goals_home,
        goals_away,
        sensitivity,
        home_advantage,
    )
