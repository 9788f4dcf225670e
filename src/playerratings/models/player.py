"""Player profiles and the per-run player state the engine mutates."""

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

from playerratings.constants import RETURN_GAP_DAYS
from playerratings.models.ranking import RankRecord
from playerratings.models.snapshot import PromotionBonus
from playerratings.type_hints import GraceGames, PlayerId
from playerratings.utils import setup_logger

logger = setup_logger(__name__)


class Player:
    """A long-lived player profile.

    Profiles are read-only inputs to a calculation run. Everything that
    changes while matches are replayed lives in :class:`PlayerState`, which
    is owned by a single engine instance.

    Attributes:
        id: Unique identifier for the player
        display_name: Name shown in rankings, used as the last tie-break
        rankings: Rank records in any order
        is_local: Whether the player counts for local-only rankings
        is_hidden: Manually hidden from public rankings
        is_virtual: Placeholder/visiting entry, never ranked
        is_blocked: Blocked from the league; excluded from active sets
    """

    def __init__(
        self,
        id: PlayerId,
        display_name: Optional[str] = None,
        rankings: Optional[List[RankRecord]] = None,
        is_local: bool = True,
        is_hidden: bool = False,
        is_virtual: bool = False,
        is_blocked: bool = False,
    ) -> None:
        self.id: PlayerId = id
        self.display_name: str = display_name or id
        self.rankings: List[RankRecord] = sorted(
            rankings or [], key=lambda r: r.sort_date
        )
        self.is_local: bool = is_local
        self.is_hidden: bool = is_hidden
        self.is_virtual: bool = is_virtual
        self.is_blocked: bool = is_blocked

    # ========== Rank lookups ==========

    @property
    def earliest_rank(self) -> Optional[RankRecord]:
        """Oldest known rank record, or None if the player has none."""
        return self.rankings[0] if self.rankings else None

    @property
    def latest_rank(self) -> Optional[RankRecord]:
        return self.rankings[-1] if self.rankings else None

    def rank_at(self, instant: datetime) -> Optional[RankRecord]:
        """The rank in force at ``instant``.

        When no record is in force yet, the earliest record applies so that a
        newcomer's first known grade is used retroactively.
        """
        current: Optional[RankRecord] = None
        for record in self.rankings:
            if record.in_force_at(instant):
                current = record
            else:
                break
        return current or self.earliest_rank

    def rank_by_id(self, rank_id: Optional[str]) -> Optional[RankRecord]:
        if rank_id is None:
            return None
        for record in self.rankings:
            if record.id == rank_id:
                return record
        return None

    def is_pro_at(self, instant: datetime) -> bool:
        rank = self.rank_at(instant)
        return rank is not None and rank.is_pro

    # ========== Serialization ==========

    def to_dict(self) -> Dict[str, Any]:
        """Serialize player profile to dictionary."""
        return {
            "id": self.id,
            "display_name": self.display_name,
            "rankings": [r.to_dict() for r in self.rankings],
            "is_local": self.is_local,
            "is_hidden": self.is_hidden,
            "is_virtual": self.is_virtual,
            "is_blocked": self.is_blocked,
        }

    @classmethod
    def from_dict(cls, player_data: Dict[str, Any]) -> "Player":
        """Create a Player from serialized dictionary data."""
        return cls(
            id=str(player_data["id"]),
            display_name=player_data.get("display_name") or player_data.get("name"),
            rankings=[RankRecord.from_dict(r) for r in player_data.get("rankings", [])],
            is_local=player_data.get("is_local", True),
            is_hidden=player_data.get("is_hidden", False),
            is_virtual=player_data.get("is_virtual", False),
            is_blocked=player_data.get("is_blocked", False),
        )

    def __repr__(self) -> str:
        return f"Player(id='{self.id}', display_name='{self.display_name}')"

    def __str__(self) -> str:
        rank = self.latest_rank
        return f"{self.display_name} ({rank.normalized_grade if rank else '?'})"


@dataclass
class PlayerState:
    """Mutable per-run accumulator for one player.

    Created lazily by the engine on the first match that references the
    player and thrown away with the engine's state on ``reset()``.

    Attributes:
        player_id: Player this state belongs to
        rating: Current internal rating (published only outside the grace period)
        initial_rating: Rank-derived rating at the first match
        first_match: Timestamp of the first match in this run
        last_match: Timestamp of the latest match
        previous_match: Timestamp of the match before ``last_match``
        match_count: Every recorded match, rated or not, byes included
        rated_match_count: Matches that went through the rating formula
        wins, losses, draws: Tallies of matches with factor > 0
        matches_since_return: Counter restarted after a long absence
        in_grace: Whether the player entered with an unknown/untrusted rank
        estimated_initial_rating: Running performance estimate, set only
            while the player is in the grace period
        grace_games: (opponent rating, score) pairs of grace-period games
        tracks_performance: Whether grace games still feed the estimate; a
            promotion out of a kyu grade stops it
        last_known_rank: Rank last seen by the promotion check
        promotion_bonuses: Unconsumed promotion bonus ledger
    """

    player_id: PlayerId
    rating: Optional[float] = None
    initial_rating: Optional[float] = None
    first_match: Optional[datetime] = None
    last_match: Optional[datetime] = None
    previous_match: Optional[datetime] = None
    match_count: int = 0
    rated_match_count: int = 0
    wins: int = 0
    losses: int = 0
    draws: int = 0
    matches_since_return: int = 0
    in_grace: bool = False
    estimated_initial_rating: Optional[float] = None
    grace_games: GraceGames = field(default_factory=list)
    tracks_performance: bool = True
    last_known_rank: Optional[RankRecord] = None
    promotion_bonuses: List[PromotionBonus] = field(default_factory=list)

    def record_activity(
        self, instant: datetime, return_gap_days: int = RETURN_GAP_DAYS
    ) -> None:
        """Update activity timestamps and counters for a match at ``instant``."""
        if self.first_match is None:
            self.first_match = instant

        if self.last_match is not None:
            gap = instant - self.last_match
            if gap.days > return_gap_days:
                logger.debug(
                    "Player %s returns after %s days", self.player_id, gap.days
                )
                self.matches_since_return = 1
            elif self.matches_since_return > 0:
                self.matches_since_return += 1

        self.previous_match = self.last_match
        self.last_match = instant
        self.match_count += 1

    def record_result(self, result: float) -> None:
        if result > 0.5:
            self.wins += 1
        elif result < 0.5:
            self.losses += 1
        else:
            self.draws += 1

    @property
    def has_played(self) -> bool:
        return self.first_match is not None

    @property
    def is_returning(self) -> bool:
        """True while the player is re-establishing after a long absence."""
        return self.matches_since_return > 0

    def in_grace_period(self, grace_games: int) -> bool:
        """True while an unknown-ranked player has recorded fewer than ``grace_games`` games."""
        return self.in_grace and self.match_count < grace_games
