"""Time-ordered rating engine.

The engine replays matches in ascending timestamp order and keeps one
:class:`~playerratings.models.PlayerState` per participant. Player profiles
are never mutated; all run-specific values live in the engine and disappear
on :meth:`RatingEngine.reset`.
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
from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from playerratings.config import EngineConfig
from playerratings.constants import (
    DEFAULT_RATING,
    ESTABLISHED_OPPONENT_FACTOR,
    ESTIMATE_CORRECTION_FRACTION,
    NEW_PLAYERS_FACTOR_CAP,
    PERFORMANCE_DIFF_CAP,
    PERFORMANCE_EXTRAPOLATION_LIMIT,
    PERFORMANCE_LOGIT_SCALE,
    PERFORMANCE_WEIGHT_BASE,
    UNCERTAINTY_DIVISOR,
    WIN_SCORE,
)
from playerratings.exceptions import EngineStateException, MatchOrderException
from playerratings.models.match import Match
from playerratings.models.player import Player, PlayerState
from playerratings.models.ranking import RankRecord
from playerratings.models.snapshot import PromotionBonus
from playerratings.rating.formula import RatingFormula
from playerratings.rating.promotion import PromotionTracker
from playerratings.rating.ranks import RankTable
from playerratings.rating.stats import Stat
from playerratings.type_hints import GraceGames, PlayerId, RatingMap
from playerratings.utils import setup_logger

logger = setup_logger(__name__)


@dataclass(frozen=True)
class RatingChange:
    """Rating of one player before and after one match."""

    match_id: str
    player_id: PlayerId
    before: float
    after: float

    @property
    def shift(self) -> float:
        return self.after - self.before


class RatingEngine:
    """Single-pass processor of a time-ordered match stream.

    Typical use::

        engine = RatingEngine(players, config)
        for match in matches:
            engine.add_match(match)
        engine.apply_promotions(cutoff)
        engine.finalize(cutoff)
        engine.rating_of("alice")

    Args:
        players: Player profiles keyed by id; unknown ids get a bare profile
        config: Engine configuration
        stats: Extra statistics fed every accepted match
        record_changes: Keep a :class:`RatingChange` for every rated match
    """

    def __init__(
        self,
        players: Optional[Mapping[PlayerId, Player]] = None,
        config: Optional[EngineConfig] = None,
        stats: Iterable[Stat] = (),
        record_changes: bool = False,
    ) -> None:
        self.config = config or EngineConfig()
        self.rank_table = RankTable(self.config)
        self.formula = RatingFormula(self.config)
        self.promotions = PromotionTracker(self.rank_table, self.config)
        self.stats: List[Stat] = list(stats)
        self.record_changes = record_changes
        self._players: Dict[PlayerId, Player] = dict(players or {})
        self._states: Dict[PlayerId, PlayerState] = {}
        self._changes: List[RatingChange] = []
        self._last_timestamp: Optional[datetime] = None
        self._finalized = False

    # ========== Lifecycle ==========

    def reset(self) -> None:
        """Drop every player state and return to a fresh, unfinalized engine."""
        self._states = {}
        self._changes = []
        self._last_timestamp = None
        self._finalized = False
        for stat in self.stats:
            stat.reset()

    @property
    def finalized(self) -> bool:
        return self._finalized

    @property
    def last_timestamp(self) -> Optional[datetime]:
        return self._last_timestamp

    def finalize(self, at: Optional[datetime] = None) -> None:
        """Apply protected rating floors; must be called exactly once per run.

        Args:
            at: Instant whose ranks define the floors; defaults to the last match

        Raises:
            EngineStateException: If the engine was already finalized
        """
        if self._finalized:
            raise EngineStateException("Engine already finalized; call reset() first")

        instant = at or self._last_timestamp
        raised = 0
        if instant is not None and self.config.protected_ratings:
            for pid, state in self._states.items():
                floor = self.floor_for(pid, instant)
                if floor is not None and state.rating < floor:
                    logger.debug(
                        "Raising %s from %.1f to protected floor %.1f",
                        pid,
                        state.rating,
                        floor,
                    )
                    state.rating = floor
                    raised += 1

        self._finalized = True
        logger.info(
            "Finalized ratings for %s players (%s raised to floor)",
            len(self._states),
            raised,
        )

    # ========== Match processing ==========

    def add_matches(self, matches: Iterable[Match]) -> int:
        count = 0
        for match in matches:
            self.add_match(match)
            count += 1
        return count

    def add_match(self, match: Match) -> None:
        """Feed one match into the engine.

        Raises:
            EngineStateException: If the engine has been finalized
            MatchOrderException: If the match is older than the previous one
        """
        if self._finalized:
            raise EngineStateException(
                f"Cannot add match {match.id}: engine already finalized"
            )
        if self._last_timestamp is not None and match.timestamp < self._last_timestamp:
            raise MatchOrderException(
                f"Match {match.id} at {match.timestamp.isoformat()} precedes "
                f"previous match at {self._last_timestamp.isoformat()}"
            )
        self._last_timestamp = match.timestamp

        if match.is_bye:
            self._add_bye(match)
        else:
            self._add_game(match)

        for stat in self.stats:
            stat.add_match(match)

    def _add_bye(self, match: Match) -> None:
        pid = match.player_ids[0]
        state = self._ensure_state(pid, match.timestamp)
        state.record_activity(match.timestamp, self.config.return_gap_days)
        if match.effective_factor > 0:
            state.record_result(match.result_for(pid))
        self._close_estimate(state)
        logger.debug("Bye for %s in match %s", pid, match.id)

    def _add_game(self, match: Match) -> None:
        first_id, second_id = match.first_player_id, match.second_player_id
        instant = match.timestamp

        # promotions effective before this game lift ratings first
        self.check_promotion(first_id, instant)
        self.check_promotion(second_id, instant)

        first = self._ensure_state(first_id, instant)
        second = self._ensure_state(second_id, instant)
        first.record_activity(instant, self.config.return_gap_days)
        second.record_activity(instant, self.config.return_gap_days)

        if match.effective_factor == 0:
            logger.debug("Unrated match %s recorded without rating change", match.id)
            self._close_estimate(first)
            self._close_estimate(second)
            return

        first.rated_match_count += 1
        second.rated_match_count += 1
        result = match.first_player_result
        first.record_result(result)
        second.record_result(WIN_SCORE - result)

        first_dynamic = self._is_dynamic(first)
        second_dynamic = self._is_dynamic(second)
        first_factor, second_factor = self._factors(
            match, first_dynamic, second_dynamic
        )

        first_before, second_before = first.rating, second.rating
        first.rating, second.rating = self.formula.update_pair(
            first_before, second_before, result, first_factor, second_factor
        )

        if first_dynamic:
            self._track_estimate(first, second_before, result)
        if second_dynamic:
            self._track_estimate(second, first_before, WIN_SCORE - result)

        if self.record_changes:
            self._changes.append(
                RatingChange(match.id, first_id, first_before, first.rating)
            )
            self._changes.append(
                RatingChange(match.id, second_id, second_before, second.rating)
            )

        logger.debug(
            "Match %s: %s %.1f -> %.1f, %s %.1f -> %.1f",
            match.id,
            first_id,
            first_before,
            first.rating,
            second_id,
            second_before,
            second.rating,
        )

    def _ensure_state(self, player_id: PlayerId, instant: datetime) -> PlayerState:
        state = self._states.get(player_id)
        if state is not None:
            return state

        rank = self.player(player_id).rank_at(instant)
        initial = float(self.rank_table.rating_for(rank))
        state = PlayerState(
            player_id=player_id,
            rating=initial,
            initial_rating=initial,
            in_grace=not self.config.is_international and self._is_unknown_rank(rank),
            last_known_rank=rank if rank is not None and not rank.is_uncertain else None,
        )
        self._states[player_id] = state
        logger.debug(
            "New player %s at %.1f (%s)%s",
            player_id,
            initial,
            rank.label() if rank else "no rank",
            " in grace period" if state.in_grace else "",
        )
        return state

    def _is_unknown_rank(self, rank: Optional[RankRecord]) -> bool:
        return (
            rank is None
            or rank.is_uncertain
            or not self.config.is_trusted(rank.organization)
        )

    def _is_dynamic(self, state: PlayerState) -> bool:
        """Whether the player's rating still converges with a boosted step."""
        if not (state.in_grace or self.config.is_international):
            return False
        return state.match_count <= self.config.grace_period_games

    def _uncertainty_factor(self, games: int) -> float:
        """3.0 at no games, 2.0 at half the grace period, 1.0 from its end."""
        return 1 + max(0.0, (self.config.grace_period_games - games) / UNCERTAINTY_DIVISOR)

    def _factors(
        self, match: Match, first_dynamic: bool, second_dynamic: bool
    ) -> Tuple[float, float]:
        factor = match.effective_factor
        if not match.has_default_factor:
            return factor, factor

        first_factor = second_factor = factor
        first_state = self._states[match.first_player_id]
        second_state = self._states[match.second_player_id]

        if first_dynamic:
            first_factor = self._uncertainty_factor(first_state.match_count)
            if not second_dynamic and not self.player(
                match.second_player_id
            ).is_pro_at(match.timestamp):
                second_factor = ESTABLISHED_OPPONENT_FACTOR
        if second_dynamic:
            second_factor = self._uncertainty_factor(second_state.match_count)
            if not first_dynamic and not self.player(
                match.first_player_id
            ).is_pro_at(match.timestamp):
                first_factor = ESTABLISHED_OPPONENT_FACTOR
        if first_dynamic and second_dynamic:
            first_factor = min(first_factor, NEW_PLAYERS_FACTOR_CAP)
            second_factor = min(second_factor, NEW_PLAYERS_FACTOR_CAP)

        return first_factor, second_factor

    def _track_estimate(
        self, state: PlayerState, opponent_rating: float, result: float
    ) -> None:
        if not state.tracks_performance:
            return
        state.grace_games.append((opponent_rating, result))
        state.estimated_initial_rating = performance_rating(state.grace_games)
        self._close_estimate(state)

    def _close_estimate(self, state: PlayerState) -> None:
        """Correct the rating by the estimate once the grace window closes."""
        if not state.grace_games or state.match_count < self.config.grace_period_games:
            return

        estimate = performance_rating(state.grace_games)
        correction = (estimate - state.initial_rating) * ESTIMATE_CORRECTION_FRACTION
        state.rating = self.formula.clamp(state.rating + correction)
        logger.info(
            "Player %s estimated at %.1f after %s games; rating corrected by %+.1f",
            state.player_id,
            estimate,
            len(state.grace_games),
            correction,
        )
        state.grace_games = []
        state.estimated_initial_rating = None

    # ========== Promotions ==========

    def check_promotion(
        self, player_id: PlayerId, instant: datetime
    ) -> Optional[PromotionBonus]:
        """Apply a pending promotion bonus for one player (no-op if not played)."""
        return self.promotions.check(
            self.player(player_id), self._states.get(player_id), instant
        )

    def apply_promotions(
        self, instant: datetime, player_ids: Optional[Iterable[PlayerId]] = None
    ) -> List[PromotionBonus]:
        """Check promotions for every player seen so far (or the given ones)."""
        ids = list(self._states) if player_ids is None else list(player_ids)
        bonuses = []
        for pid in ids:
            bonus = self.check_promotion(pid, instant)
            if bonus is not None:
                bonuses.append(bonus)
        return bonuses

    def consume_promotion_bonuses(
        self,
        player_id: PlayerId,
        up_to: datetime,
        since: Optional[datetime] = None,
    ) -> List[PromotionBonus]:
        """Read-once access to a player's promotion ledger; empty when none match."""
        return self.promotions.consume(self._states.get(player_id), up_to, since)

    # ========== Queries ==========

    def player(self, player_id: PlayerId) -> Player:
        """Profile for ``player_id``; a bare unranked profile if none was supplied."""
        player = self._players.get(player_id)
        if player is None:
            logger.warning("No profile for player %s; treating as unranked", player_id)
            player = Player(player_id)
            self._players[player_id] = player
        return player

    @property
    def states(self) -> Mapping[PlayerId, PlayerState]:
        return MappingProxyType(self._states)

    @property
    def changes(self) -> List[RatingChange]:
        return list(self._changes)

    def state_of(self, player_id: PlayerId) -> Optional[PlayerState]:
        return self._states.get(player_id)

    def has_played(self, player_id: PlayerId) -> bool:
        return player_id in self._states

    def in_grace_period(self, player_id: PlayerId) -> bool:
        state = self._states.get(player_id)
        return state is not None and state.in_grace_period(
            self.config.grace_period_games
        )

    def internal_rating_of(self, player_id: PlayerId) -> Optional[float]:
        """Raw rating, including players still in the grace period."""
        state = self._states.get(player_id)
        return None if state is None else state.rating

    def rating_of(self, player_id: PlayerId) -> Optional[float]:
        """Published rating, or None when unknown or still in the grace period."""
        state = self._states.get(player_id)
        if state is None or state.in_grace_period(self.config.grace_period_games):
            return None
        return state.rating

    def rating_or_rank(self, player_id: PlayerId, instant: datetime) -> float:
        """Published rating, falling back to the rank-derived estimate."""
        rating = self.rating_of(player_id)
        if rating is not None:
            return rating
        if player_id not in self._players:
            return float(DEFAULT_RATING)
        return float(
            self.rank_table.rating_for(self._players[player_id].rank_at(instant))
        )

    def floor_for(self, player_id: PlayerId, instant: datetime) -> Optional[float]:
        """Protected floor of a non-grace player at ``instant``, if any."""
        if not self.config.protected_ratings:
            return None
        state = self._states.get(player_id)
        if state is None or state.in_grace_period(self.config.grace_period_games):
            return None
        return self.rank_table.protected_floor(self.player(player_id).rank_at(instant))

    def floored_rating(self, player_id: PlayerId, instant: datetime) -> Optional[float]:
        """Published rating with the protected floor at ``instant`` applied."""
        rating = self.rating_of(player_id)
        if rating is None:
            return None
        floor = self.floor_for(player_id, instant)
        return rating if floor is None else max(rating, floor)

    def ratings(self) -> RatingMap:
        """Published ratings of every player past the grace period."""
        return {
            pid: state.rating
            for pid, state in self._states.items()
            if not state.in_grace_period(self.config.grace_period_games)
        }


def performance_rating(games: GraceGames) -> float:
    """Conservative performance estimate from (opponent rating, result) pairs.

    Stronger opponents weigh more, extreme score rates are compressed, and the
    estimate never exceeds the strongest win (or undercuts the weakest loss)
    by more than 150 points.
    """
    if not games:
        return float(DEFAULT_RATING)

    strongest_win = -math.inf
    weakest_loss = math.inf
    weighted_opponents = weighted_scores = weight_sum = 0.0

    for opponent_rating, score in games:
        weight = math.sqrt(max(PERFORMANCE_WEIGHT_BASE, opponent_rating) / PERFORMANCE_WEIGHT_BASE)
        weighted_opponents += opponent_rating * weight
        weighted_scores += score * weight
        weight_sum += weight
        if score >= 0.5:
            strongest_win = max(strongest_win, opponent_rating)
        if score <= 0.5:
            weakest_loss = min(weakest_loss, opponent_rating)

    average_opponent = weighted_opponents / weight_sum
    rate = weighted_scores / weight_sum

    if rate >= 0.99:
        diff = PERFORMANCE_DIFF_CAP
    elif rate <= 0.01:
        diff = -PERFORMANCE_DIFF_CAP
    else:
        logit = PERFORMANCE_LOGIT_SCALE * math.log(rate / (1 - rate))
        diff = math.copysign(
            min(abs(logit), PERFORMANCE_DIFF_CAP + math.sqrt(abs(logit))), logit
        )

    estimate = average_opponent + diff
    if strongest_win != -math.inf:
        estimate = min(estimate, strongest_win + PERFORMANCE_EXTRAPOLATION_LIMIT)
    if weakest_loss != math.inf:
        estimate = max(estimate, weakest_loss - PERFORMANCE_EXTRAPOLATION_LIMIT)
    return estimate
