"""Vectorised rating updates over many matches at once."""

from __future__ import annotations

from typing import NamedTuple

import numpy as np
import numpy.typing as npt
from loguru import logger

from matchelo.models.elo import MAX_RATING_GAP, SCALE


class EloBatchUpdate(NamedTuple):
    """Column arrays in the same order as EloUpdate."""

    rating_home: np.ndarray
    rating_away: np.ndarray
    goals_home: np.ndarray
    goals_away: np.ndarray
    win_probability_home: np.ndarray

    def as_matrix(self) -> np.ndarray:
        """Stack into an (n, 5) array, one row per match."""
        return np.column_stack(self)


def _as_float_arrays(**values: npt.ArrayLike) -> dict[str, np.ndarray]:
    arrays = {name: np.asarray(value, dtype=float) for name, value in values.items()}
    try:
        broadcast = np.broadcast_arrays(*arrays.values())
    except ValueError as exc:
        shapes = {name: array.shape for name, array in arrays.items()}
        raise ValueError(f"Batch inputs cannot be broadcast together: {shapes}") from exc

    arrays = {name: array.copy() for name, array in zip(arrays.keys(), broadcast)}
    for name, array in arrays.items():
        if not np.all(np.isfinite(array)):
            raise ValueError(f"{name} must contain only finite numbers")
    return arrays


def update_ratings_batch(
    rating_home: npt.ArrayLike,
    rating_away: npt.ArrayLike,
    goals_home: npt.ArrayLike,
    goals_away: npt.ArrayLike,
    sensitivity: npt.ArrayLike,
    home_advantage: npt.ArrayLike,
) -> EloBatchUpdate:
    """Apply update_ratings_after_match element-wise.

    Every argument may be a scalar or an array; they are broadcast against each
    other. Matches are independent of one another, so a team appearing twice
    is updated from the same pre-match rating both times.
    """
    arrays = _as_float_arrays(
        rating_home=rating_home,
        rating_away=rating_away,
        goals_home=goals_home,
        goals_away=goals_away,
        sensitivity=sensitivity,
        home_advantage=home_advantage,
    )
    home = arrays["rating_home"]
    away = arrays["rating_away"]
    home_goals = arrays["goals_home"]
    away_goals = arrays["goals_away"]

    if np.any(home_goals < 0) or np.any(away_goals < 0):
        raise ValueError("goals_home and goals_away must be >= 0")

    raw_gap = away - home - arrays["home_advantage"]
    gap = np.clip(raw_gap, -MAX_RATING_GAP, MAX_RATING_GAP)
    win_probability = 1 / (1 + 10 ** (gap / SCALE))

    goal_diff = np.rint(home_goals) - np.rint(away_goals)
    result_home = (np.sign(goal_diff) + 1) / 2
    weight = np.sqrt(np.maximum(np.abs(goal_diff), 1))
    delta = (result_home - win_probability) * weight * arrays["sensitivity"]

    clamped = int(np.count_nonzero(np.abs(raw_gap) > MAX_RATING_GAP))
    logger.debug(f"Updated ratings for {home.size} matches ({clamped} gaps clamped)")

    return EloBatchUpdate(
        rating_home=home + delta,
        rating_away=away - delta,
        goals_home=home_goals,
        goals_away=away_goals,
        win_probability_home=win_probability,
    )
