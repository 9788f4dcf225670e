"""Month-by-month rating history of one player.

History is built in a single forward pass over the league's matches with one
shared engine. Whenever the stream moves into a new calendar month, the
previous month is closed: promotions are re-checked for everybody seen so
far, the player's rating and position are frozen into a
:class:`~playerratings.models.MonthlySnapshot`, and any months without
matches in between are filled with flat snapshots.
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

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Mapping, Optional

from playerratings.config import RatingContext
from playerratings.models.match import Match
from playerratings.models.player import Player
from playerratings.models.ranking import RankRecord
from playerratings.models.snapshot import MonthlySnapshot
from playerratings.rating.calculation import filter_matches, position_of, rank_players
from playerratings.rating.engine import RatingEngine
from playerratings.type_hints import PlayerId
from playerratings.utils import (
    iter_months,
    month_end,
    month_start,
    next_month,
    same_month,
    setup_logger,
)

logger = setup_logger(__name__)


@dataclass
class GameRecord:
    """One game of the focal player, as listed under the rating history."""

    date: datetime
    match_id: str
    match_name: Optional[str]
    opponent_id: Optional[PlayerId]
    opponent_name: str
    opponent_rank: Optional[RankRecord]
    result: str


@dataclass
class PlayerHistory:
    """Snapshots, game list and current position of one player."""

    player_id: PlayerId
    snapshots: List[MonthlySnapshot] = field(default_factory=list)
    games: List[GameRecord] = field(default_factory=list)
    position: Optional[int] = None
    total_ranked: int = 0


class _MonthAccumulator:
    """Matches of the focal player seen in the month currently open."""

    def __init__(self, month: datetime) -> None:
        self.month = month
        self.count = 0
        self.keys: List[str] = []

    def add(self, match: Match) -> None:
        self.count += 1
        if match.grouping_key not in self.keys:
            self.keys.append(match.grouping_key)


class SnapshotHistoryBuilder:
    """Builds the monthly history of a player from a league's matches.

    Args:
        matches: League matches in any order; filtered with ``ctx``
        players: Player profiles keyed by id
        ctx: Cutoff, configuration and the "now" instant of the open month
    """

    def __init__(
        self,
        matches: Iterable[Match],
        players: Mapping[PlayerId, Player],
        ctx: RatingContext,
    ) -> None:
        self.ctx = ctx
        self.players = players
        self.matches = filter_matches(matches, ctx)

    @property
    def present(self) -> datetime:
        return self.ctx.current_instant

    def build(self, player_id: PlayerId) -> List[MonthlySnapshot]:
        """One snapshot per month from the player's first published month to now.

        Returns an empty list when the player has no matches, or never leaves
        the grace period.
        """
        if not any(m.involves(player_id) for m in self.matches):
            logger.info("No matches for %s; no history", player_id)
            return []

        engine = RatingEngine(self.players, self.ctx.config)
        snapshots: List[MonthlySnapshot] = []
        current: Optional[_MonthAccumulator] = None

        for match in self.matches:
            opened = month_start(match.timestamp)
            if current is None:
                current = _MonthAccumulator(opened)
            elif opened != current.month:
                self._close(engine, player_id, current, snapshots)
                # flat months between the closed month and this match's month
                for gap in iter_months(next_month(current.month), opened):
                    if gap == opened:
                        break
                    self._close(engine, player_id, _MonthAccumulator(gap), snapshots)
                current = _MonthAccumulator(opened)

            engine.add_match(match)
            if match.involves(player_id):
                current.add(match)

        self._close(engine, player_id, current, snapshots)
        if month_start(self.present) > current.month:
            for trailing in iter_months(next_month(current.month), self.present):
                self._close(engine, player_id, _MonthAccumulator(trailing), snapshots)

        logger.info("Built %s monthly snapshots for %s", len(snapshots), player_id)
        return snapshots

    def _close(
        self,
        engine: RatingEngine,
        player_id: PlayerId,
        month: _MonthAccumulator,
        snapshots: List[MonthlySnapshot],
    ) -> None:
        end = month_end(month.month)
        effective = self.present if same_month(month.month, self.present) else end

        engine.apply_promotions(effective)
        rating = engine.floored_rating(player_id, effective)
        if rating is None:
            return

        ranked = rank_players(engine, self.players, effective, self.ctx.config)
        position, total = position_of(ranked, player_id)
        snapshots.append(
            MonthlySnapshot(
                month=end,
                effective_at=effective,
                rating=rating,
                matches_in_month=month.count,
                match_keys=list(month.keys),
                position=position,
                total_ranked=total,
                promotion_bonuses=engine.consume_promotion_bonuses(player_id, effective),
            )
        )

    # ========== Game list ==========

    def game_records(self, player_id: PlayerId) -> List[GameRecord]:
        """The player's games, oldest first, with the opponent's rank at match time."""
        records = []
        for match in self.matches:
            if not match.involves(player_id):
                continue
            opponent_id = match.opponent_of(player_id)
            opponent = self.players.get(opponent_id) if opponent_id else None
            own, other = match.scores_for(player_id)
            if own > other:
                result = "Win"
            elif own < other:
                result = "Loss"
            else:
                result = "Draw"
            records.append(
                GameRecord(
                    date=match.timestamp,
                    match_id=match.id,
                    match_name=match.name,
                    opponent_id=opponent_id,
                    opponent_name=(
                        opponent.display_name if opponent else (opponent_id or "BYE")
                    ),
                    opponent_rank=opponent.rank_at(match.timestamp) if opponent else None,
                    result=result,
                )
            )
        return records

    def build_history(self, player_id: PlayerId) -> PlayerHistory:
        """Snapshots plus game list; position and total come from the last snapshot."""
        snapshots = self.build(player_id)
        history = PlayerHistory(
            player_id=player_id,
            snapshots=snapshots,
            games=self.game_records(player_id),
        )
        if snapshots:
            history.position = snapshots[-1].position
            history.total_ranked = snapshots[-1].total_ranked
        return history
