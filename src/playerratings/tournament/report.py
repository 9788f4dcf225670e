"""Tournament report: Swiss standings next to stored positions and rating changes."""

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
from datetime import datetime, time, timedelta
from typing import Dict, List, Optional

from playerratings.config import EngineConfig, RatingContext
from playerratings.exceptions import PlayerRatingsException
from playerratings.models.dataset import LeagueData
from playerratings.models.match import Match
from playerratings.models.ranking import RankRecord
from playerratings.models.tournament import Tournament
from playerratings.rating.calculation import (
    calculate_ratings,
    promotion_bonuses_between,
    ranked_status,
)
from playerratings.rating.engine import RatingChange
from playerratings.tournament.swiss import SwissRecord, SwissScorer
from playerratings.type_hints import PlayerId
from playerratings.utils import setup_logger

logger = setup_logger(__name__)

_ONE_MICROSECOND = timedelta(microseconds=1)


@dataclass
class ParticipantReport:
    """One participant row of the report.

    Attributes:
        player_id: Participant
        display_name: Name shown in the table
        rank_before: Official rank in force when the tournament started
        stored_position: Manually stored position, if any
        calculated_position: Position from the Swiss scorer (0 if never played)
        standing: Swiss tallies, None if the participant played no game
        rating_before: Rating just before the first tournament game
        rating_after: Rating after the last tournament game
        ranked_before: Whether the player appeared in the ranked list before
        ranked_after: Whether the player appears in the ranked list after
        promotion: Rank awarded after the tournament, if linked
        promotion_bonus: Rating bonus that promotion produced, if any
    """

    player_id: PlayerId
    display_name: str
    rank_before: Optional[RankRecord] = None
    stored_position: Optional[int] = None
    calculated_position: int = 0
    standing: Optional[SwissRecord] = None
    rating_before: Optional[float] = None
    rating_after: Optional[float] = None
    ranked_before: bool = False
    ranked_after: bool = False
    promotion: Optional[RankRecord] = None
    promotion_bonus: Optional[float] = None

    @property
    def display_position(self) -> int:
        if self.stored_position is not None:
            return self.stored_position
        return self.calculated_position

    @property
    def is_calculated_position(self) -> bool:
        return self.stored_position is None

    @property
    def rating_change(self) -> Optional[float]:
        """Only defined when the player was ranked both before and after."""
        if not (self.ranked_before and self.ranked_after):
            return None
        if self.rating_before is None or self.rating_after is None:
            return None
        return self.rating_after - self.rating_before

    @property
    def promotion_display(self) -> Optional[str]:
        if self.promotion is None:
            return None
        if self.promotion_bonus:
            return f"{self.promotion.normalized_grade} +{self.promotion_bonus:.1f}"
        return self.promotion.normalized_grade


@dataclass
class MatchReport:
    """One tournament game with the ratings going into it."""

    match: Match
    first_rating_before: Optional[float] = None
    second_rating_before: Optional[float] = None
    first_shift: Optional[float] = None
    second_shift: Optional[float] = None

    def shift_text(self) -> str:
        """``"+12.3"``, or both shifts when they differ in size."""
        if self.first_shift is None:
            return ""
        text = f"{self.first_shift:+.1f}"
        if self.second_shift is not None and round(-self.first_shift, 1) != round(
            self.second_shift, 1
        ):
            text += f"/{self.second_shift:+.1f}"
        return text


@dataclass
class TournamentReport:
    tournament: Tournament
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    participants: List[ParticipantReport] = field(default_factory=list)
    matches: List[MatchReport] = field(default_factory=list)

    @property
    def max_rounds(self) -> int:
        rounds = [m.match.round for m in self.matches if m.match.round is not None]
        return max(rounds) if rounds else 0


def build_tournament_report(
    league: LeagueData,
    tournament_id: str,
    config: Optional[EngineConfig] = None,
) -> TournamentReport:
    """Assemble the full report of one tournament.

    Ratings are computed over the whole league: "before" just ahead of the
    first tournament game, "after" at the last one. Promotion bonuses are
    looked up up to the start of the day after the tournament ended, when
    a promotion awarded on the final day takes effect.

    Raises:
        PlayerRatingsException: If the tournament is unknown
    """
    config = config or EngineConfig(is_international=league.is_international)
    tournament = league.tournament(tournament_id)
    matches = league.tournament_matches(tournament_id)
    report = TournamentReport(tournament=tournament)

    participant_ids = list(tournament.participant_ids)
    for match in matches:
        for pid in match.player_ids:
            if pid not in participant_ids:
                participant_ids.append(pid)

    standings: Dict[PlayerId, SwissRecord] = {
        r.player_id: r for r in SwissScorer().score(matches)
    }

    if not matches:
        logger.warning("Tournament %s has no matches", tournament_id)
        report.participants = [
            _participant(league, tournament, pid, standings, None) for pid in participant_ids
        ]
        return report

    report.start = matches[0].timestamp
    report.end = matches[-1].timestamp

    before_run = calculate_ratings(
        league.matches, league.players, RatingContext(report.start - _ONE_MICROSECOND, config)
    )
    after_run = calculate_ratings(
        league.matches,
        league.players,
        RatingContext(report.end, config),
        record_changes=True,
    )
    before = ranked_status(before_run, participant_ids)
    after = ranked_status(after_run, participant_ids)

    promotion_cutoff = datetime.combine(
        report.end.date() + timedelta(days=1), time.min, tzinfo=report.end.tzinfo
    )
    bonuses = promotion_bonuses_between(
        league.matches,
        league.players,
        RatingContext(promotion_cutoff, config),
        report.start,
        participant_ids,
    )

    for pid in participant_ids:
        row = _participant(league, tournament, pid, standings, report.start)
        if pid in before:
            row.rating_before, row.ranked_before = before[pid]
        if pid in after:
            row.rating_after, row.ranked_after = after[pid]
        if row.promotion is not None:
            row.promotion_bonus = bonuses.get(pid)
        report.participants.append(row)

    report.participants.sort(key=lambda p: (p.display_position or 10**9, p.display_name))
    report.matches = _match_rows(matches, after_run.engine.changes)
    logger.info(
        "Built report for %s: %s participants, %s matches",
        tournament.name,
        len(report.participants),
        len(report.matches),
    )
    return report


def _participant(
    league: LeagueData,
    tournament: Tournament,
    player_id: PlayerId,
    standings: Dict[PlayerId, SwissRecord],
    start: Optional[datetime],
) -> ParticipantReport:
    try:
        player = league.player(player_id)
    except PlayerRatingsException:
        player = None
    entry = tournament.participant(player_id)
    standing = standings.get(player_id)
    return ParticipantReport(
        player_id=player_id,
        display_name=player.display_name if player else player_id,
        rank_before=player.rank_at(start) if player and start else None,
        stored_position=entry.position if entry else None,
        calculated_position=standing.position if standing else 0,
        standing=standing,
        promotion=(
            player.rank_by_id(entry.promotion_rank_id) if player and entry else None
        ),
    )


def _match_rows(matches: List[Match], changes: List[RatingChange]) -> List[MatchReport]:
    by_key = {(c.match_id, c.player_id): c for c in changes}
    rows = []
    for match in sorted(matches, key=lambda m: (m.timestamp, m.round or 0)):
        row = MatchReport(match=match)
        first = by_key.get((match.id, match.first_player_id))
        second = by_key.get((match.id, match.second_player_id))
        if first is not None:
            row.first_rating_before = first.before
            row.first_shift = first.shift
        if second is not None:
            row.second_rating_before = second.before
            row.second_shift = second.shift
        rows.append(row)
    return rows
