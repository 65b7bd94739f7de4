"""Elo rating system with home advantage and goal-difference weighting."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, NamedTuple, Optional

import numpy as np
import numpy.typing as npt

from matchelo.config import (
    DEFAULT_GOALS_INTERCEPT,
    DEFAULT_GOALS_SLOPE,
    DEFAULT_HOME_ADVANTAGE,
    DEFAULT_K_FACTOR,
    Settings,
    get_settings,
)

if TYPE_CHECKING:
    from matchelo.engine.batch import EloBatchUpdate


MAX_RATING_GAP = 400.0
SCALE = 400.0


class EloUpdate(NamedTuple):
    """Ratings after a match. Positional order is part of the interface."""

    rating_home: float
    rating_away: float
    goals_home: float
    goals_away: float
    win_probability_home: float


def _require_finite(**values: float) -> None:
    for name, value in values.items():
        if not math.isfinite(value):
            raise ValueError(f"{name} must be a finite number, got {value!r}")


def _require_goals(**values: float) -> None:
    _require_finite(**values)
    for name, value in values.items():
        if value < 0:
            raise ValueError(f"{name} must be >= 0, got {value!r}")


def _clamp_gap(gap: float) -> float:
    return min(max(gap, -MAX_RATING_GAP), MAX_RATING_GAP)


def expected_home_score(
    rating_home: float,
    rating_away: float,
    home_advantage: float = 0.0,
) -> float:
    """Expected score for the home team.

    The away-minus-home gap (home advantage credited to the home side) is
    clamped to +/-400 before the logistic, so the result stays in [1/11, 10/11].
    """
    _require_finite(
        rating_home=rating_home,
        rating_away=rating_away,
        home_advantage=home_advantage,
    )
    gap = _clamp_gap(rating_away - rating_home - home_advantage)
    return 1 / (1 + 10 ** (gap / SCALE))


def match_result(goals_home: float, goals_away: float) -> float:
    """1.0 for a home win, 0.5 for a draw, 0.0 for a home loss."""
    goal_diff = round(goals_home) - round(goals_away)
    if goal_diff > 0:
        return 1.0
    if goal_diff < 0:
        return 0.0
    return 0.5


def goal_weight(goals_home: float, goals_away: float) -> float:
    goal_diff = round(goals_home) - round(goals_away)
    return math.sqrt(max(abs(goal_diff), 1))


def update_ratings_after_match(
    rating_home: float,
    rating_away: float,
    goals_home: float,
    goals_away: float,
    sensitivity: float,
    home_advantage: float,
) -> EloUpdate:
    """Apply one observed result to a pair of ratings.

    Args:
        rating_home: Pre-match rating of the home team.
        rating_away: Pre-match rating of the away team.
        goals_home: Goals scored by the home team.
        goals_away: Goals scored by the away team.
        sensitivity: K-factor scaling the size of the update.
        home_advantage: Rating bonus for the home side when computing the
            expectation. Positive values favour the home team.

    Returns:
        EloUpdate with the new ratings, the goals as given, and the pre-match
        home expectation.

    Raises:
        ValueError: If any input is not finite or a goal count is negative.
    """
    _require_finite(sensitivity=sensitivity)
    _require_goals(goals_home=goals_home, goals_away=goals_away)
    win_probability = expected_home_score(rating_home, rating_away, home_advantage)

    result_home = match_result(goals_home, goals_away)
    weight = goal_weight(goals_home, goals_away)
    delta = (result_home - win_probability) * weight * sensitivity

    return EloUpdate(
        rating_home=rating_home + delta,
        rating_away=rating_away - delta,
        goals_home=goals_home,
        goals_away=goals_away,
        win_probability_home=win_probability,
    )


@dataclass
class EloRating:
    """Elo rating engine."""

    k_factor: float = DEFAULT_K_FACTOR
    home_advantage: float = DEFAULT_HOME_ADVANTAGE
    goals_slope: float = DEFAULT_GOALS_SLOPE
    goals_intercept: float = DEFAULT_GOALS_INTERCEPT

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "EloRating":
        if settings is None:
            settings = get_settings()
        return cls(
            k_factor=settings.k_factor,
            home_advantage=settings.home_advantage,
            goals_slope=settings.goals_slope,
            goals_intercept=settings.goals_intercept,
        )

    def expected_score(self, home_rating: float, away_rating: float) -> float:
        """Expected score for home team."""
        return expected_home_score(home_rating, away_rating, self.home_advantage)

    def update_ratings(
        self,
        home_rating: float,
        away_rating: float,
        home_goals: float,
        away_goals: float,
    ) -> EloUpdate:
        """Update ratings based on match outcome."""
        return update_ratings_after_match(
            home_rating,
            away_rating,
            home_goals,
            away_goals,
            self.k_factor,
            self.home_advantage,
        )

    def update_batch(
        self,
        home_ratings: npt.ArrayLike,
        away_ratings: npt.ArrayLike,
        home_goals: npt.ArrayLike,
        away_goals: npt.ArrayLike,
    ) -> EloBatchUpdate:
        """Update ratings element-wise over arrays of matches."""
        from matchelo.engine.batch import update_ratings_batch

        return update_ratings_batch(
            home_ratings,
            away_ratings,
            home_goals,
            away_goals,
            self.k_factor,
            self.home_advantage,
        )

    def simulate(
        self,
        home_rating: float,
        away_rating: float,
        random_home: Optional[float] = None,
        random_away: Optional[float] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> EloUpdate:
        """Play a match from Poisson goal rates and update ratings."""
        from matchelo.models.poisson import simulate_match

        return simulate_match(
            home_rating,
            away_rating,
            random_home,
            random_away,
            sensitivity=self.k_factor,
            home_advantage=self.home_advantage,
            goals_slope=self.goals_slope,
            goals_intercept=self.goals_intercept,
            rng=rng,
        )
