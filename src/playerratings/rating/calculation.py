"""Full rating runs over a league: filtering, ratings, ranked lists, forecasts."""

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
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple

from dateutil.relativedelta import relativedelta

from playerratings.config import EngineConfig, RatingContext
from playerratings.constants import MATCH_SWA, RANK_CHANGE_ACTIVE_MONTHS
from playerratings.models.match import Match, sort_matches
from playerratings.models.player import Player
from playerratings.models.ranking import RankRecord
from playerratings.rating.engine import RatingEngine
from playerratings.rating.stats import WinRateStat
from playerratings.type_hints import ForecastMatrix, PlayerId, PositionInfo, RatingMap
from playerratings.utils import setup_logger

logger = setup_logger(__name__)


@dataclass
class RankedPlayer:
    """One row of a ranked list."""

    position: int
    player: Player
    rating: float
    rank: Optional[RankRecord] = None

    @property
    def player_id(self) -> PlayerId:
        return self.player.id


@dataclass
class RatingRun:
    """Result of :func:`calculate_ratings`.

    Attributes:
        context: Cutoff and configuration of the run
        engine: Finalized engine holding every player state
        players: Player profiles used for the run
        matches: Matches that passed the filters, oldest first
        active_ids: Players that took part in at least one accepted match
        win_rate: Win-rate statistic, when enabled in the configuration
    """

    context: RatingContext
    engine: RatingEngine
    players: Mapping[PlayerId, Player]
    matches: List[Match] = field(default_factory=list)
    active_ids: Set[PlayerId] = field(default_factory=set)
    win_rate: Optional[WinRateStat] = None

    @property
    def ratings(self) -> RatingMap:
        """Published ratings of active players."""
        return {
            pid: rating
            for pid, rating in self.engine.ratings().items()
            if pid in self.active_ids
        }

    def rating_of(self, player_id: PlayerId) -> Optional[float]:
        return self.engine.rating_of(player_id)

    def ranked_players(self, local: Optional[bool] = None) -> List[RankedPlayer]:
        return ranked_players(self, local=local)

    def recent_matches(self, months: int = 1) -> List[Match]:
        """Accepted matches from the last ``months`` months before the cutoff."""
        since = self.context.cutoff - relativedelta(months=months)
        return [m for m in self.matches if m.timestamp > since]


# ========== Filtering ==========


def is_swa_match(match: Match) -> bool:
    """SWA-tagged by match name or by tournament organizer."""
    by_name = bool(match.name) and MATCH_SWA in match.name
    by_organizer = bool(match.organizer) and MATCH_SWA.strip() in match.organizer
    return by_name or by_organizer


def filter_matches(matches: Iterable[Match], ctx: RatingContext) -> List[Match]:
    """Matches inside the context's date window, SWA-filtered when requested.

    The cutoff is inclusive. The result is sorted by timestamp; matches with
    equal timestamps keep their input order.
    """
    selected = [
        m
        for m in matches
        if m.timestamp <= ctx.cutoff
        and (ctx.rating_start is None or m.timestamp >= ctx.rating_start)
    ]
    if ctx.config.uses_swa_filter:
        selected = [m for m in selected if is_swa_match(m)]
    return sort_matches(selected)


# ========== Rating runs ==========


def calculate_ratings(
    matches: Iterable[Match],
    players: Mapping[PlayerId, Player],
    ctx: RatingContext,
    eligible_ids: Optional[Set[PlayerId]] = None,
    record_changes: bool = False,
) -> RatingRun:
    """Replay the filtered matches and finalize ratings at the cutoff.

    Args:
        matches: Candidate matches in any order
        players: Player profiles keyed by id
        ctx: Cutoff and configuration
        eligible_ids: When given, only these players can become active
            (blocked players are left out); everyone is still rated
        record_changes: Keep per-match rating changes on the engine
    """
    filtered = filter_matches(matches, ctx)
    win_rate = WinRateStat() if ctx.config.track_win_rate else None
    engine = RatingEngine(
        players,
        ctx.config,
        stats=[win_rate] if win_rate is not None else [],
        record_changes=record_changes,
    )

    active: Set[PlayerId] = set()
    for match in filtered:
        engine.add_match(match)
        for pid in match.player_ids:
            if eligible_ids is None or pid in eligible_ids:
                active.add(pid)

    engine.apply_promotions(ctx.cutoff, sorted(active))
    engine.finalize(ctx.cutoff)

    logger.info(
        "Calculated ratings at %s: %s matches, %s active players",
        ctx.cutoff.isoformat(),
        len(filtered),
        len(active),
    )
    return RatingRun(
        context=ctx,
        engine=engine,
        players=players,
        matches=filtered,
        active_ids=active,
        win_rate=win_rate,
    )


# ========== Ranked lists ==========


def is_active(
    engine: RatingEngine, player: Player, instant: datetime, config: EngineConfig
) -> bool:
    """Virtual players, players whose last match is recent enough, and kyu
    players whose rank changed within the last six months."""
    if player.is_virtual:
        return True
    state = engine.state_of(player.id)
    if state is not None and state.last_match is not None:
        if state.last_match > instant - relativedelta(years=config.active_years):
            return True
    return _recent_kyu_rank_change(player, instant)


def _recent_kyu_rank_change(player: Player, instant: datetime) -> bool:
    current = player.rank_at(instant)
    if current is None or "K" not in current.normalized_grade:
        return False
    earlier = player.rank_at(instant - relativedelta(months=RANK_CHANGE_ACTIVE_MONTHS))
    return not current.same_rank(earlier)


def is_new_kyu(
    engine: RatingEngine, player: Player, instant: datetime, config: EngineConfig
) -> bool:
    """Still short of the grace-period games after starting below dan grade."""
    state = engine.state_of(player.id)
    if state is None or state.first_match is None:
        return False
    if player.is_virtual or player.is_pro_at(instant):
        return False
    if state.match_count >= config.grace_period_games:
        return False
    initial = player.rank_at(state.first_match)
    return initial is None or "D" not in initial.normalized_grade


def is_hidden(
    engine: RatingEngine, player: Player, instant: datetime, config: EngineConfig
) -> bool:
    """Manually hidden, in the grace period, or a new kyu player."""
    return (
        player.is_hidden
        or engine.in_grace_period(player.id)
        or is_new_kyu(engine, player, instant, config)
    )


def is_eligible(
    engine: RatingEngine,
    player: Player,
    instant: datetime,
    config: EngineConfig,
    local: Optional[bool] = None,
) -> bool:
    """Whether ``player`` belongs in the public ranked list at ``instant``.

    Args:
        local: True keeps local players only, False non-local only, None
            follows ``config.local_only``
    """
    if player.is_virtual or player.is_blocked:
        return False
    if engine.rating_of(player.id) is None:
        return False
    if not is_active(engine, player, instant, config):
        return False
    if player.is_pro_at(instant):
        return False
    if config.is_international:
        return True
    if is_hidden(engine, player, instant, config):
        return False
    if local is None:
        local = True if config.local_only else None
    if local is not None and player.is_local != local:
        return False
    return True


def rank_players(
    engine: RatingEngine,
    players: Mapping[PlayerId, Player],
    instant: datetime,
    config: EngineConfig,
    candidate_ids: Optional[Iterable[PlayerId]] = None,
    local: Optional[bool] = None,
) -> List[RankedPlayer]:
    """Eligible players ordered by rating, then official rank, then name.

    Ratings are read with the protected floor at ``instant`` applied, so an
    unfinalized engine can be ranked at any month boundary.
    """
    ids = engine.states.keys() if candidate_ids is None else candidate_ids
    rows: List[Tuple[float, Player, Optional[RankRecord]]] = []
    for pid in ids:
        player = players.get(pid) or engine.player(pid)
        if not is_eligible(engine, player, instant, config, local):
            continue
        rating = engine.floored_rating(pid, instant)
        rows.append((rating, player, player.rank_at(instant)))

    rows.sort(
        key=lambda row: (
            -row[0],
            engine.rank_table.sort_key(row[2]),
            row[1].display_name,
        )
    )
    return [
        RankedPlayer(position=i, player=player, rating=rating, rank=rank)
        for i, (rating, player, rank) in enumerate(rows, start=1)
    ]


def ranked_players(run: RatingRun, local: Optional[bool] = None) -> List[RankedPlayer]:
    """Ranked list of a finished run at its cutoff."""
    return rank_players(
        run.engine,
        run.players,
        run.context.cutoff,
        run.context.config,
        candidate_ids=sorted(run.active_ids),
        local=local,
    )


def position_of(ranked: List[RankedPlayer], player_id: PlayerId) -> PositionInfo:
    """(1-based position or None, number of ranked players)."""
    for row in ranked:
        if row.player_id == player_id:
            return row.position, len(ranked)
    return None, len(ranked)


# ========== Derived views ==========


def forecast(run: RatingRun) -> ForecastMatrix:
    """Rating gain of each active player for a hypothetical win against each other."""
    cutoff = run.context.cutoff
    ids = sorted(run.active_ids)
    ratings = {pid: run.engine.rating_or_rank(pid, cutoff) for pid in ids}
    matrix: ForecastMatrix = {}
    for pid in ids:
        row = {}
        for other in ids:
            if other == pid:
                continue
            row[other] = run.engine.formula.shift(ratings[pid], ratings[other], 1.0, 1.0)
        matrix[pid] = row
    return matrix


def ratings_and_ranked_status(
    matches: Iterable[Match],
    players: Mapping[PlayerId, Player],
    ctx: RatingContext,
    player_ids: Iterable[PlayerId],
) -> Dict[PlayerId, Tuple[float, bool]]:
    """Rating (rank-derived when unrated) and "would be ranked" flag per player.

    A player counts as ranked when they played, are active or professional,
    and outside international leagues are neither hidden nor non-local.
    """
    return ranked_status(calculate_ratings(matches, players, ctx), player_ids)


def ranked_status(
    run: RatingRun, player_ids: Iterable[PlayerId]
) -> Dict[PlayerId, Tuple[float, bool]]:
    """Rating and "would be ranked" flag per player for a finished run."""
    ctx = run.context
    config = ctx.config
    results: Dict[PlayerId, Tuple[float, bool]] = {}
    for pid in player_ids:
        player = run.players.get(pid)
        if player is None:
            continue
        rating = run.engine.rating_or_rank(pid, ctx.cutoff)
        ranked = False
        if pid in run.active_ids:
            active = is_active(run.engine, player, ctx.cutoff, config) or (
                player.is_pro_at(ctx.cutoff)
            )
            visible = config.is_international or (
                not is_hidden(run.engine, player, ctx.cutoff, config)
                and player.is_local
            )
            ranked = active and visible
        results[pid] = (rating, ranked)
    return results


def promotion_bonuses_between(
    matches: Iterable[Match],
    players: Mapping[PlayerId, Player],
    ctx: RatingContext,
    start: datetime,
    player_ids: Iterable[PlayerId],
) -> Dict[PlayerId, float]:
    """Total promotion bonus per player awarded between ``start`` and the cutoff.

    Players without a bonus in the window are left out of the result.
    """
    run = calculate_ratings(matches, players, ctx)
    totals: Dict[PlayerId, float] = {}
    for pid in player_ids:
        bonuses = run.engine.consume_promotion_bonuses(pid, ctx.cutoff, since=start)
        total = sum(b.amount for b in bonuses)
        if total > 0:
            totals[pid] = total
    return totals
