"""Single-match rating update on the EGD scale.

The update for a player with rating ``r`` against an opponent rated ``o``::

    beta(r) = -7 * ln(C - r)
    Se      = 1 / (1 + exp(beta(o) - beta(r)))
    con(r)  = ((C - r) / base) ** exponent
    r'      = max(r + factor * con(r) * (S - Se) [+ bonus(r)], MIN_RATING)

where ``C`` is the rating ceiling (3300 by default) and ``S`` the game result
(1 win, 0.5 draw, 0 loss).
"""

# Player Ratings
# Copyright (C) 2025  Player Ratings developers
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <http://www.gnu.org/licenses/>.

import math
from typing import Optional, Tuple

from playerratings.config import EngineConfig
from playerratings.constants import (
    BETA_SCALE,
    DEFAULT_FACTOR,
    DEFLATION_DIVISOR,
    DEFLATION_PIVOT,
    DEFLATION_SCALE,
    DRAW_SCORE,
    LOSS_SCORE,
    WIN_SCORE,
)
from playerratings.exceptions import ScoreValidationException
from playerratings.utils.validation import validate_factor_strict

# Ratings are kept strictly below the ceiling so that ln(C - r) stays finite.
_CEILING_MARGIN = 1e-6

_VALID_RESULTS = (LOSS_SCORE, DRAW_SCORE, WIN_SCORE)


class RatingFormula:
    """Pure rating update function parameterized by :class:`EngineConfig`."""

    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        self.config = config or EngineConfig()

    def clamp(self, rating: float) -> float:
        """Keep ``rating`` within [min_rating, ceiling)."""
        upper = self.config.rating_ceiling - _CEILING_MARGIN
        return max(self.config.min_rating, min(rating, upper))

    def beta(self, rating: float) -> float:
        return -BETA_SCALE * math.log(self.config.rating_ceiling - self.clamp(rating))

    def expected_score(self, rating: float, opponent_rating: float) -> float:
        """Expected result of ``rating`` against ``opponent_rating`` (0..1)."""
        exponent = self.beta(opponent_rating) - self.beta(rating)
        # exp overflows beyond ~709; the probability is 0 there anyway
        if exponent > 700:
            return 0.0
        return 1.0 / (1.0 + math.exp(exponent))

    def con(self, rating: float) -> float:
        """Step size at ``rating``; shrinks as the rating approaches the ceiling."""
        distance = self.config.rating_ceiling - self.clamp(rating)
        return (
            self.config.k_multiplier
            * (distance / self.config.con_base) ** self.config.con_exponent
        )

    def deflation_bonus(self, rating: float) -> float:
        if not self.config.deflation_bonus:
            return 0.0
        x = (DEFLATION_PIVOT - rating) / DEFLATION_SCALE
        # softplus; ln(1 + e^x) ~ x for large x
        softplus = x if x > 30 else math.log1p(math.exp(x))
        return softplus / DEFLATION_DIVISOR

    def update(
        self,
        rating: float,
        opponent_rating: float,
        result: float,
        factor: float = 1.0,
    ) -> float:
        """New rating of a player after one game.

        Args:
            rating: Player's rating before the game
            opponent_rating: Opponent's rating before the game
            result: 1.0 win, 0.5 draw, 0.0 loss
            factor: Match weight; 0 returns ``rating`` unchanged

        Raises:
            ScoreValidationException: If ``result`` is not 0, 0.5 or 1
            FactorValidationException: If ``factor`` is negative or not finite
        """
        if result not in _VALID_RESULTS:
            raise ScoreValidationException(
                f"Game result must be 0, 0.5 or 1, got {result!r}"
            )
        factor = validate_factor_strict(factor)
        if factor is None:
            factor = DEFAULT_FACTOR
        if factor == 0:
            return rating

        expected = self.expected_score(rating, opponent_rating)
        new_rating = (
            rating
            + factor * self.con(rating) * (result - expected)
            + self.deflation_bonus(rating)
        )
        return self.clamp(new_rating)

    def update_pair(
        self,
        rating_a: float,
        rating_b: float,
        result_a: float,
        factor_a: float = 1.0,
        factor_b: Optional[float] = None,
    ) -> Tuple[float, float]:
        """New ratings of both players.

        Each side uses the step size of its own rating rather than one step
        taken from ``rating_a`` for both, so a game between unequal ratings is
        not zero-sum: the weaker player moves further than the stronger one.
        """
        if factor_b is None:
            factor_b = factor_a
        return (
            self.update(rating_a, rating_b, result_a, factor_a),
            self.update(rating_b, rating_a, WIN_SCORE - result_a, factor_b),
        )

    def shift(
        self, rating: float, opponent_rating: float, result: float, factor: float = 1.0
    ) -> float:
        """Rating change for one game, used for forecasts."""
        return self.update(rating, opponent_rating, result, factor) - rating
