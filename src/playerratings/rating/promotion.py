"""Promotion bonuses: lift a player's rating when an external rank is raised.

When a trusted organization promotes a player, the player's computed rating
is raised to a floor derived from the new grade. Every bonus is recorded in
the player's ledger so that reports can consume it exactly once.
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

from datetime import datetime, time, timedelta
from typing import List, Optional

from playerratings.config import EngineConfig
from playerratings.constants import PROMOTION_BONUS_CEILING, PROMOTION_FLOOR_FRACTION
from playerratings.models.player import Player, PlayerState
from playerratings.models.ranking import RankRecord
from playerratings.models.snapshot import PromotionBonus
from playerratings.rating.ranks import RankTable, single_rank_difference
from playerratings.utils import setup_logger

logger = setup_logger(__name__)


class PromotionTracker:
    """Detects rank promotions and applies the matching rating floor.

    The tracker keeps no state of its own: the last rank it saw and the bonus
    ledger live on each :class:`PlayerState`, so resetting the engine resets
    the tracker too. Checking the same player twice at the same instant is a
    no-op the second time.
    """

    def __init__(
        self, rank_table: RankTable, config: Optional[EngineConfig] = None
    ) -> None:
        self.rank_table = rank_table
        self.config = config or rank_table.config

    @property
    def enabled(self) -> bool:
        return self.config.promotion_bonus

    def check(
        self, player: Player, state: Optional[PlayerState], instant: datetime
    ) -> Optional[PromotionBonus]:
        """Apply a promotion bonus if the rank in force at ``instant`` is a promotion.

        Args:
            player: Profile holding the rank history
            state: Engine state of the player; None when they have not played
            instant: As-of instant of the check

        Returns:
            The bonus that was applied, or None
        """
        if not self.enabled or state is None:
            return None

        current = player.rank_at(instant)
        if current is None or current.is_uncertain:
            return None

        previous = state.last_known_rank
        if previous is None:
            earliest = _earliest_graded(player)
            if earliest is not None and not earliest.same_rank(current):
                previous = earliest

        bonus = None
        if previous is not None and not previous.same_rank(current):
            if self.rank_table.is_trusted(current):
                previous_rating = self.rank_table.rating_for(previous)
                current_rating = self.rank_table.rating_for(current)
                if current_rating > previous_rating:
                    bonus = self._apply_floor(
                        player, state, previous, current, current_rating, instant
                    )
            else:
                logger.debug(
                    "Ignoring rank change of %s to %s: untrusted issuer",
                    player.id,
                    current.label(),
                )

        state.last_known_rank = current
        return bonus

    def _apply_floor(
        self,
        player: Player,
        state: PlayerState,
        previous: RankRecord,
        current: RankRecord,
        current_rating: int,
        instant: datetime,
    ) -> Optional[PromotionBonus]:
        if current.is_pro or (
            not player.is_local and not self.rank_table.is_local(current)
        ):
            floor = float(current_rating)
            was_kyu = False
        elif current_rating < PROMOTION_BONUS_CEILING:
            was_kyu = _is_kyu_grade(previous)
            floor = current_rating - PROMOTION_FLOOR_FRACTION * single_rank_difference(
                current_rating
            )
        else:
            return None

        if state.rating is None or state.rating >= floor:
            return None

        bonus = PromotionBonus(
            date=effective_instant(current, instant),
            from_grade=previous.normalized_grade,
            from_organization=previous.organization,
            to_grade=current.normalized_grade,
            to_organization=current.organization,
            amount=floor - state.rating,
        )
        state.rating = floor
        state.promotion_bonuses.append(bonus)
        if was_kyu:
            # only promotions out of a kyu grade end the performance estimate
            state.tracks_performance = False
            state.grace_games = []
            state.estimated_initial_rating = None
        logger.info(
            "Promotion bonus for %s: %s (%s -> %.1f)",
            player.id,
            bonus.display(),
            current.label(),
            floor,
        )
        return bonus

    @staticmethod
    def consume(
        state: Optional[PlayerState],
        up_to: datetime,
        since: Optional[datetime] = None,
    ) -> List[PromotionBonus]:
        """Remove and return ledger entries dated on or before ``up_to``.

        Entries dated before the player's first match are dropped without being
        returned. With ``since``, only entries dated on or after it are returned,
        but every entry up to ``up_to`` is still removed.
        """
        if state is None or not state.promotion_bonuses:
            return []

        taken = [b for b in state.promotion_bonuses if b.date <= up_to]
        state.promotion_bonuses = [
            b for b in state.promotion_bonuses if b.date > up_to
        ]

        first = state.first_match
        result = [b for b in taken if first is None or b.date >= first]
        if since is not None:
            result = [b for b in result if b.date >= since]
        return result


def effective_instant(record: RankRecord, fallback: datetime) -> datetime:
    """Instant a rank record takes effect: the start of the day after its date."""
    if record.effective_date is None:
        return fallback
    return datetime.combine(
        record.effective_date + timedelta(days=1), time.min, tzinfo=fallback.tzinfo
    )


def _earliest_graded(player: Player) -> Optional[RankRecord]:
    for record in player.rankings:
        if record.grade.strip():
            return record
    return None


def _is_kyu_grade(record: RankRecord) -> bool:
    grade = record.normalized_grade
    return not grade or "K" in grade
