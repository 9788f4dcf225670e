"""Rating computation: formula, rank table, promotions, engine and full runs."""

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

from playerratings.rating.calculation import (
    RankedPlayer,
    RatingRun,
    calculate_ratings,
    filter_matches,
    forecast,
    is_active,
    is_hidden,
    position_of,
    promotion_bonuses_between,
    rank_players,
    ranked_players,
    ranked_status,
    ratings_and_ranked_status,
)
from playerratings.rating.engine import RatingChange, RatingEngine, performance_rating
from playerratings.rating.formula import RatingFormula
from playerratings.rating.promotion import PromotionTracker
from playerratings.rating.ranks import RankTable, single_rank_difference
from playerratings.rating.stats import Stat, WinRateStat

__all__ = [
    "RatingFormula",
    "RankTable",
    "single_rank_difference",
    "PromotionTracker",
    "RatingEngine",
    "RatingChange",
    "performance_rating",
    "Stat",
    "WinRateStat",
    "RatingRun",
    "RankedPlayer",
    "filter_matches",
    "calculate_ratings",
    "is_active",
    "is_hidden",
    "rank_players",
    "ranked_players",
    "position_of",
    "forecast",
    "ranked_status",
    "ratings_and_ranked_status",
    "promotion_bonuses_between",
]
