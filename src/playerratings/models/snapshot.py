"""Output records: promotion bonuses and monthly rating snapshots."""

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

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class PromotionBonus:
    """A one-time rating bonus injected when a player's rank was raised.

    Attributes:
        date: Effective instant of the promotion
        from_grade: Grade before the promotion
        from_organization: Issuer of the previous grade
        to_grade: Grade after the promotion
        to_organization: Issuer of the new grade
        amount: Rating points added to reach the promotion floor
    """

    date: datetime
    from_grade: str
    from_organization: Optional[str]
    to_grade: str
    to_organization: Optional[str]
    amount: float

    def display(self) -> str:
        """Short label such as ``"2K→1K +12.5"``."""
        return f"{self.from_grade}→{self.to_grade} +{self.amount:.1f}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "from_grade": self.from_grade,
            "from_organization": self.from_organization,
            "to_grade": self.to_grade,
            "to_organization": self.to_organization,
            "amount": self.amount,
        }


@dataclass
class MonthlySnapshot:
    """A player's frozen rating and position at a calendar month boundary.

    Attributes:
        month: End-of-month instant identifying the month
        effective_at: Instant the values were taken (``now`` for the current month)
        rating: Public rating at ``effective_at``
        matches_in_month: Number of the player's matches in this month
        match_keys: Distinct tournament/match keys played this month, in order
        position: 1-based rank among eligible players, None when not ranked
        total_ranked: Number of eligible players at ``effective_at``
        promotion_bonuses: Bonuses attributed to this month
    """

    month: datetime
    effective_at: datetime
    rating: Optional[float]
    matches_in_month: int = 0
    match_keys: List[str] = field(default_factory=list)
    position: Optional[int] = None
    total_ranked: int = 0
    promotion_bonuses: List[PromotionBonus] = field(default_factory=list)

    @property
    def month_label(self) -> str:
        return self.month.strftime("%b %Y")

    @property
    def promotion_bonus_total(self) -> float:
        return sum(b.amount for b in self.promotion_bonuses)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize snapshot to dictionary."""
        return {
            "month": self.month.isoformat(),
            "month_label": self.month_label,
            "effective_at": self.effective_at.isoformat(),
            "rating": self.rating,
            "matches_in_month": self.matches_in_month,
            "match_keys": list(self.match_keys),
            "position": self.position,
            "total_ranked": self.total_ranked,
            "promotion_bonuses": [b.to_dict() for b in self.promotion_bonuses],
        }
