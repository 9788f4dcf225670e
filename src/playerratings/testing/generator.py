"""Random League Generator (RLG) - synthetic datasets for exercising the engine.

Generates players with a hidden playing strength, runs a series of small
Swiss tournaments between them and records the games, byes and the rank
promotions earned along the way as a :class:`LeagueData`.
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

import random
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple

from playerratings.config import EngineConfig
from playerratings.constants import DRAW_SCORE, LOSS_SCORE, ORG_SWA, ORG_TGA, WIN_SCORE
from playerratings.models.dataset import LeagueData
from playerratings.models.match import Match
from playerratings.models.player import Player
from playerratings.models.ranking import RankRecord
from playerratings.models.tournament import Tournament, TournamentParticipant
from playerratings.rating.formula import RatingFormula
from playerratings.rating.ranks import RankTable
from playerratings.type_hints import PlayerId
from playerratings.utils import setup_logger

logger = setup_logger(__name__)

# Grades a generated player can hold, weakest first
GRADE_LADDER = [f"{k}K" for k in range(20, 0, -1)] + [f"{d}D" for d in range(1, 8)]


class StrengthDistribution(Enum):
    """Strength distribution patterns for generated leagues."""

    UNIFORM = "uniform"
    NORMAL = "normal"
    CLUB = "club"


@dataclass
class GeneratorConfig:
    """Configuration for the Random League Generator."""

    num_players: int = 16
    num_tournaments: int = 4
    num_rounds: int = 5
    start: datetime = datetime(2024, 1, 6, 10, 0, tzinfo=timezone.utc)
    days_between_tournaments: int = 30
    strength_distribution: StrengthDistribution = StrengthDistribution.NORMAL
    strength_range: Tuple[int, int] = (1000, 2400)
    draw_percentage: int = 2
    unknown_rank_rate: float = 0.1
    foreign_rank_rate: float = 0.1
    improvement_per_tournament: float = 15.0
    promotion_margin: float = 30.0
    seed: Optional[int] = None


class LeagueGenerator:
    """Builds a reproducible synthetic league.

    The same seed always produces the same dataset, so generated leagues can
    be used in regression tests and benchmarks.
    """

    def __init__(self, config: Optional[GeneratorConfig] = None):
        self.config = config or GeneratorConfig()
        self.random = (
            random.Random(self.config.seed)
            if self.config.seed is not None
            else random.Random()
        )
        self.rank_table = RankTable(EngineConfig())
        self.formula = RatingFormula(EngineConfig())
        self._strength: Dict[PlayerId, float] = {}
        self._grade: Dict[PlayerId, Optional[str]] = {}
        self._match_counter = 0

    def generate(self, name: str = "Generated League") -> LeagueData:
        players = self._create_players()
        league = LeagueData(name=name, players={p.id: p for p in players})

        when = self.config.start
        for number in range(1, self.config.num_tournaments + 1):
            tournament, matches = self._play_tournament(number, players, when)
            league.tournaments[tournament.id] = tournament
            league.matches.extend(matches)
            self._award_promotions(league, tournament, matches[-1].timestamp)
            when += timedelta(days=self.config.days_between_tournaments)

        league.matches.sort(key=lambda m: m.timestamp)
        logger.info(
            "Generated %s: %s players, %s tournaments, %s matches",
            name,
            len(league.players),
            len(league.tournaments),
            len(league.matches),
        )
        return league

    # ========== Players ==========

    def _create_players(self) -> List[Player]:
        players = []
        for i in range(self.config.num_players):
            pid = f"p{i + 1:03d}"
            strength = self._generate_strength()
            self._strength[pid] = strength

            roll = self.random.random()
            if roll < self.config.unknown_rank_rate:
                rankings = [RankRecord("?", organization=ORG_SWA)]
                self._grade[pid] = None
            elif roll < self.config.unknown_rank_rate + self.config.foreign_rank_rate:
                grade = self._grade_for(strength)
                rankings = [RankRecord(grade, organization=ORG_TGA)]
                self._grade[pid] = grade
            else:
                grade = self._grade_for(strength)
                rankings = [RankRecord(grade, organization=ORG_SWA)]
                self._grade[pid] = grade

            players.append(
                Player(pid, display_name=f"Player {i + 1:03d}", rankings=rankings)
            )

        logger.info(
            "Created %s players with %s distribution",
            len(players),
            self.config.strength_distribution.value,
        )
        return players

    def _generate_strength(self) -> float:
        low, high = self.config.strength_range
        if self.config.strength_distribution == StrengthDistribution.UNIFORM:
            return float(self.random.randint(low, high))
        if self.config.strength_distribution == StrengthDistribution.CLUB:
            base = self.random.choice([1200, 1500, 1800, 2100])
            return float(self.random.randint(base - 100, base + 100))
        mean = (low + high) / 2
        std_dev = (high - low) / 6
        return float(max(low, min(high, int(self.random.gauss(mean, std_dev)))))

    def _grade_for(self, strength: float) -> str:
        """Highest ladder grade whose rating does not exceed ``strength``."""
        grade = GRADE_LADDER[0]
        for candidate in GRADE_LADDER:
            if self.rank_table.rating_for_grade(candidate, ORG_SWA) <= strength:
                grade = candidate
        return grade

    # ========== Tournaments ==========

    def _play_tournament(
        self, number: int, players: List[Player], start: datetime
    ) -> Tuple[Tournament, List[Match]]:
        tid = f"t{number:02d}"
        name = f"SWA Monthly {number}"
        tournament = Tournament(
            id=tid,
            name=name,
            organizer=ORG_SWA,
            participants=[TournamentParticipant(p.id) for p in players],
        )

        scores: Dict[PlayerId, float] = {p.id: 0.0 for p in players}
        played: Set[Tuple[PlayerId, PlayerId]] = set()
        had_bye: Set[PlayerId] = set()
        matches: List[Match] = []

        for round_number in range(1, self.config.num_rounds + 1):
            when = start + timedelta(hours=2 * (round_number - 1))
            pairs, bye = self._pair_round(scores, played, had_bye)
            for first, second in pairs:
                first_score, second_score = self._simulate_result(first, second)
                scores[first] += first_score
                scores[second] += second_score
                played.add((first, second))
                played.add((second, first))
                matches.append(
                    self._match(when, first, second, first_score, second_score,
                                tid, round_number, name)
                )
            if bye is not None:
                had_bye.add(bye)
                scores[bye] += WIN_SCORE
                matches.append(
                    self._match(when, bye, None, WIN_SCORE, LOSS_SCORE,
                                tid, round_number, name)
                )

        for pid in scores:
            self._strength[pid] += self.random.uniform(
                0, 2 * self.config.improvement_per_tournament
            )
        return tournament, matches

    def _pair_round(
        self,
        scores: Dict[PlayerId, float],
        played: Set[Tuple[PlayerId, PlayerId]],
        had_bye: Set[PlayerId],
    ) -> Tuple[List[Tuple[PlayerId, PlayerId]], Optional[PlayerId]]:
        """Greedy Swiss pairing: score groups top-down, avoiding rematches."""
        order = sorted(scores, key=lambda pid: (-scores[pid], -self._strength[pid], pid))

        bye = None
        if len(order) % 2:
            candidates = [pid for pid in reversed(order) if pid not in had_bye]
            bye = candidates[0] if candidates else order[-1]
            order.remove(bye)

        pairs = []
        while order:
            first = order.pop(0)
            index = next(
                (i for i, pid in enumerate(order) if (first, pid) not in played), 0
            )
            second = order.pop(index)
            if self.random.random() < 0.5:
                first, second = second, first
            pairs.append((first, second))
        return pairs, bye

    def _simulate_result(self, first: PlayerId, second: PlayerId) -> Tuple[float, float]:
        if self.random.random() < self.config.draw_percentage / 100.0:
            return DRAW_SCORE, DRAW_SCORE
        expected = self.formula.expected_score(self._strength[first], self._strength[second])
        if self.random.random() < expected:
            return WIN_SCORE, LOSS_SCORE
        return LOSS_SCORE, WIN_SCORE

    def _match(
        self,
        when: datetime,
        first: PlayerId,
        second: Optional[PlayerId],
        first_score: float,
        second_score: float,
        tournament_id: str,
        round_number: int,
        name: str,
    ) -> Match:
        self._match_counter += 1
        return Match(
            id=f"m{self._match_counter:05d}",
            timestamp=when,
            first_player_id=first,
            second_player_id=second,
            first_player_score=first_score,
            second_player_score=second_score,
            tournament_id=tournament_id,
            round=round_number,
            name=name,
            organizer=ORG_SWA,
        )

    # ========== Promotions ==========

    def _award_promotions(
        self, league: LeagueData, tournament: Tournament, finished: datetime
    ) -> None:
        """Promote players whose strength clearly outgrew their grade."""
        promoted = 0
        for entry in tournament.participants:
            pid = entry.player_id
            grade = self._grade.get(pid)
            if grade is None or grade == GRADE_LADDER[-1]:
                continue
            next_grade = GRADE_LADDER[GRADE_LADDER.index(grade) + 1]
            threshold = self.rank_table.rating_for_grade(next_grade, ORG_SWA)
            if self._strength[pid] < threshold + self.config.promotion_margin:
                continue

            record = RankRecord(
                next_grade,
                organization=ORG_SWA,
                effective_date=finished.date(),
                id=f"{tournament.id}-{pid}",
                tournament_id=tournament.id,
            )
            player = league.players[pid]
            player.rankings = sorted(player.rankings + [record], key=lambda r: r.sort_date)
            entry.promotion_rank_id = record.id
            self._grade[pid] = next_grade
            promoted += 1

        logger.debug("Tournament %s: %s promotions", tournament.id, promoted)


def generate_league(
    seed: Optional[int] = None, name: str = "Generated League", **options
) -> LeagueData:
    """Shortcut for ``LeagueGenerator(GeneratorConfig(seed=seed, **options)).generate()``."""
    return LeagueGenerator(GeneratorConfig(seed=seed, **options)).generate(name)
