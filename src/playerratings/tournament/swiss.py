"""Swiss-system standings with SOS and SOSOS tie-breaks.

This module scores a tournament's match list independently of any rating.
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
from typing import Dict, Iterable, List, Optional, Tuple

from playerratings.constants import DRAW_SCORE, LOSS_SCORE, WIN_SCORE
from playerratings.models.match import Match, sort_matches
from playerratings.type_hints import DRAW, LOSS, WIN, MaybePlayerId, Outcome, PlayerId
from playerratings.utils import setup_logger

logger = setup_logger(__name__)


@dataclass(frozen=True)
class RoundResult:
    """One game of a participant as shown in the standings table."""

    round: Optional[int]
    match_id: str
    opponent_id: MaybePlayerId
    outcome: Outcome
    score_text: str

    @property
    def is_bye(self) -> bool:
        return self.opponent_id is None


@dataclass
class SwissRecord:
    """Tallies and tie-breaks of one participant.

    Attributes:
        player_id: Participant
        wins: Wins with each draw counted as half a win
        win_count: Whole wins only
        losses: Number of losses
        draws: Number of draws
        points_for: Points scored in games against real opponents
        points_against: Points conceded in games against real opponents
        opponents: Real opponents in playing order (byes excluded)
        sos: Sum of opponents' wins
        sosos: Sum of opponents' SOS
        position: Calculated finishing position (1-based)
        rounds: Per-round results in playing order
    """

    player_id: PlayerId
    wins: float = 0.0
    win_count: int = 0
    losses: int = 0
    draws: int = 0
    points_for: float = 0.0
    points_against: float = 0.0
    opponents: List[PlayerId] = field(default_factory=list)
    sos: float = 0.0
    sosos: float = 0.0
    position: int = 0
    rounds: List[RoundResult] = field(default_factory=list)

    @property
    def is_undefeated(self) -> bool:
        """No losses and at least one win."""
        return self.losses == 0 and self.win_count >= 1

    @property
    def point_differential(self) -> float:
        return self.points_for - self.points_against

    @property
    def games(self) -> int:
        return self.win_count + self.losses + self.draws

    def tie_key(self) -> Tuple[float, float, float]:
        return (self.wins, self.sos, self.sosos)

    def record_text(self) -> str:
        """``"W-L"`` or ``"W-L-D"`` when draws occurred."""
        if self.draws:
            return f"{self.win_count}-{self.losses}-{self.draws}"
        return f"{self.win_count}-{self.losses}"


class SwissScorer:
    """Calculates Swiss standings for one tournament.

    Standings order:

    - Undefeated players (no loss, at least one win) first
    - Wins, descending (draws count half)
    - SOS: sum of opponents' wins, descending
    - SOSOS: sum of opponents' SOS, descending
    - Point differential, descending

    Every undefeated player shares position 1. Defeated players are numbered
    by their index in the sorted order, and defeated players tied on wins, SOS
    and SOSOS share a position.
    """

    def score(self, matches: Iterable[Match]) -> List[SwissRecord]:
        """Score ``matches`` and return records in standings order.

        Args:
            matches: The tournament's matches in any order
        """
        records = self._tally(sort_matches(list(matches)))
        self._calculate_sos(records)
        self._calculate_sosos(records)
        standings = sorted(records.values(), key=self._sort_key)
        self._assign_positions(standings)
        logger.debug("Scored Swiss standings for %s players", len(standings))
        return standings

    def _tally(self, matches: List[Match]) -> Dict[PlayerId, SwissRecord]:
        records: Dict[PlayerId, SwissRecord] = {}

        for match in matches:
            for pid in match.player_ids:
                record = records.setdefault(pid, SwissRecord(player_id=pid))
                result = match.result_for(pid)
                opponent = match.opponent_of(pid)

                if result == WIN_SCORE:
                    record.wins += WIN_SCORE
                    record.win_count += 1
                    outcome = WIN
                elif result == LOSS_SCORE:
                    record.losses += 1
                    outcome = LOSS
                else:
                    record.wins += DRAW_SCORE
                    record.draws += 1
                    outcome = DRAW

                if opponent is not None:
                    own, other = match.scores_for(pid)
                    record.points_for += own
                    record.points_against += other
                    record.opponents.append(opponent)

                record.rounds.append(
                    RoundResult(
                        round=match.round,
                        match_id=match.id,
                        opponent_id=opponent,
                        outcome=outcome,
                        score_text=match.score_text(),
                    )
                )
        return records

    def _calculate_sos(self, records: Dict[PlayerId, SwissRecord]) -> None:
        for record in records.values():
            record.sos = sum(records[opp].wins for opp in record.opponents)

    def _calculate_sosos(self, records: Dict[PlayerId, SwissRecord]) -> None:
        for record in records.values():
            record.sosos = sum(records[opp].sos for opp in record.opponents)

    @staticmethod
    def _sort_key(record: SwissRecord) -> tuple:
        return (
            not record.is_undefeated,
            -record.wins,
            -record.sos,
            -record.sosos,
            -record.point_differential,
            record.player_id,
        )

    @staticmethod
    def _assign_positions(standings: List[SwissRecord]) -> None:
        previous: Optional[SwissRecord] = None
        for index, record in enumerate(standings):
            if record.is_undefeated:
                record.position = 1
            elif (
                previous is not None
                and not previous.is_undefeated
                and previous.tie_key() == record.tie_key()
            ):
                record.position = previous.position
            else:
                record.position = index + 1
            previous = record


def calculate_standings(matches: Iterable[Match]) -> List[SwissRecord]:
    """Shortcut for ``SwissScorer().score(matches)``."""
    return SwissScorer().score(matches)
