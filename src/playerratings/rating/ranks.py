"""Mapping between skill grades and the rating scale."""

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

from typing import Optional, Tuple

from playerratings.config import EngineConfig
from playerratings.constants import (
    DAN_GRADE_DIFF,
    DEFAULT_RATING,
    FOREIGN_ONE_D_RATING_DELTA,
    MAX_KYU_GRADE,
    MAX_PRO_GRADE,
    MIN_RATING,
    ONE_D_RATING,
    ONE_P_RATING,
    ORG_SWA,
    PRO_GRADE_DIFF,
    THRESHOLD_1D,
    THRESHOLD_1K_4K,
    THRESHOLD_2D_PLUS,
    THRESHOLD_5K_9K,
    THRESHOLD_10K_19K,
)
from playerratings.models.ranking import RankRecord


def pro_rating(pro: int) -> int:
    """1P = 2740, 2P = 2780, ..., 9P = 3060."""
    pro = max(1, min(pro, MAX_PRO_GRADE))
    return ONE_P_RATING + (pro - 1) * PRO_GRADE_DIFF


def dan_rating(dan: int) -> int:
    """1D = 2100, 2D = 2200, ..., 7D = 2700."""
    return ONE_D_RATING + (dan - 1) * DAN_GRADE_DIFF


def kyu_difference(kyu: int) -> int:
    """Points between ``kyu`` and the next stronger grade."""
    if kyu == 1:
        return 50
    if kyu <= 5:
        return 25
    if kyu <= 10:
        return 30
    if kyu <= 20:
        return 40
    return 50


def kyu_rating(kyu: int) -> int:
    """1K = 2050, 5K = 1950, 10K = 1800, 20K = 1400, 30K = 900."""
    rating = ONE_D_RATING
    for k in range(1, min(kyu, MAX_KYU_GRADE) + 1):
        rating -= kyu_difference(k)
    return max(rating, MIN_RATING)


def single_rank_difference(rating: float) -> int:
    """Width of one grade step at ``rating``."""
    if rating >= THRESHOLD_2D_PLUS:
        return DAN_GRADE_DIFF
    if rating >= THRESHOLD_1D:
        return 50
    if rating > THRESHOLD_1K_4K:
        return 25
    if rating > THRESHOLD_5K_9K:
        return 30
    if rating > THRESHOLD_10K_19K:
        return 40
    return 50


class RankTable:
    """Rank-to-rating lookups bound to one configuration.

    Dan grades issued outside SWA count one dan lower in non-international
    leagues, except a foreign 1D which sits between SWA 1K and 1D.
    """

    def __init__(self, config: Optional[EngineConfig] = None) -> None:
        self.config = config or EngineConfig()

    def rating_for_grade(self, grade: str, organization: Optional[str]) -> int:
        record = RankRecord(grade=grade or "", organization=organization)
        return self.rating_for(record)

    def rating_for(self, record: Optional[RankRecord]) -> int:
        """Rating implied by ``record``; unknown grades map to the default rating."""
        if record is None or record.is_uncertain:
            return DEFAULT_RATING
        parsed = record.parsed
        if parsed is None:
            return DEFAULT_RATING
        number, kind = parsed

        delta = 0
        is_swa = (record.organization or "").upper() == ORG_SWA
        if kind == "D" and not is_swa and not self.config.is_international:
            if number == 1:
                delta = FOREIGN_ONE_D_RATING_DELTA
            else:
                number -= 1

        if kind == "P":
            return pro_rating(number)
        if kind == "D":
            return dan_rating(number) + delta
        return kyu_rating(number)

    @staticmethod
    def single_rank_difference(rating: float) -> int:
        return single_rank_difference(rating)

    def protected_floor(self, record: Optional[RankRecord]) -> Optional[float]:
        """Lowest rating a holder of ``record`` may fall to, or None if unprotected."""
        if record is None or record.is_uncertain:
            return None
        if not self.config.is_trusted(record.organization):
            return None
        rating = self.rating_for(record)
        return float(rating - single_rank_difference(rating))

    def is_trusted(self, record: Optional[RankRecord]) -> bool:
        return record is not None and self.config.is_trusted(record.organization)

    def is_local(self, record: Optional[RankRecord]) -> bool:
        return record is not None and self.config.is_local_organization(
            record.organization
        )

    def sort_key(self, record: Optional[RankRecord]) -> Tuple[int, str]:
        """Ascending key ordering stronger grades first."""
        if record is None:
            return (-DEFAULT_RATING, "")
        return (-self.rating_for(record), record.normalized_grade)
