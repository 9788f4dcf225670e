"""Command line interface for Player Ratings.

Reads a league dataset (JSON), runs the rating engine and prints ranked
lists, monthly histories and tournament reports.
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

import argparse
import json
import logging
import sys
from dataclasses import replace
from datetime import datetime
from typing import List, Optional

from dateutil.parser import isoparse

from playerratings import APP_VERSION
from playerratings.config import EngineConfig, RatingContext, load_config
from playerratings.exceptions import PlayerRatingsException
from playerratings.history import SnapshotHistoryBuilder
from playerratings.models.dataset import LeagueData, load_dataset, save_dataset
from playerratings.rating.calculation import calculate_ratings, ranked_players
from playerratings.testing import GeneratorConfig, LeagueGenerator, StrengthDistribution
from playerratings.tournament import build_tournament_report
from playerratings.utils import set_log_level, setup_logger

logger = setup_logger(__name__)


def parse_instant(value: str) -> datetime:
    """Parse an ISO 8601 date or datetime argument.

    Raises:
        argparse.ArgumentTypeError: If the value is not ISO 8601
    """
    try:
        return isoparse(value)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"Invalid date '{value}'. Use ISO 8601, e.g. 2024-05-31 or 2024-05-31T18:00"
        ) from None


def _resolve_config(args: argparse.Namespace, league: LeagueData) -> EngineConfig:
    config = load_config(args.config)
    if league.is_international and not config.is_international:
        config = replace(config, is_international=True)
    return config


def _context(args: argparse.Namespace, league: LeagueData) -> RatingContext:
    """Rating context from ``--at``/``--now``; defaults to the present."""
    config = _resolve_config(args, league)
    tz = league.matches[-1].timestamp.tzinfo if league.matches else None
    now = getattr(args, "now", None) or datetime.now(tz)
    cutoff = args.at or now
    return RatingContext(cutoff=cutoff, config=config, now=now)


def _print_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


# ========== Commands ==========


def run_ratings(args: argparse.Namespace) -> int:
    league = load_dataset(args.dataset)
    ctx = _context(args, league)
    run = calculate_ratings(league.matches, league.players, ctx)
    local = True if args.local else (False if args.non_local else None)
    rows = ranked_players(run, local=local)

    if args.json:
        _print_json(
            [
                {
                    "position": row.position,
                    "player_id": row.player_id,
                    "name": row.player.display_name,
                    "rank": row.rank.normalized_grade if row.rank else None,
                    "rating": round(row.rating, 2),
                }
                for row in rows
            ]
        )
        return 0

    print(f"{league.name} ratings at {ctx.cutoff.date().isoformat()}")
    for row in rows[: args.limit] if args.limit else rows:
        grade = row.rank.normalized_grade if row.rank else "?"
        print(f"{row.position:>4}  {row.player.display_name:<30} {grade:>4}  {row.rating:8.1f}")
    return 0


def run_history(args: argparse.Namespace) -> int:
    league = load_dataset(args.dataset)
    ctx = _context(args, league)
    player = league.find_player(args.player)
    history = SnapshotHistoryBuilder(league.matches, league.players, ctx).build_history(
        player.id
    )

    if args.json:
        _print_json(
            {
                "player_id": history.player_id,
                "position": history.position,
                "total_ranked": history.total_ranked,
                "snapshots": [s.to_dict() for s in history.snapshots],
            }
        )
        return 0

    print(f"{player.display_name}: position {history.position or '-'} of {history.total_ranked}")
    for snap in history.snapshots:
        bonus = ", ".join(b.display() for b in snap.promotion_bonuses)
        position = snap.position if snap.position is not None else "-"
        print(
            f"{snap.month_label:>9}  {snap.rating:8.1f}  #{position:<4} "
            f"{snap.matches_in_month:>3} games  {bonus}".rstrip()
        )
    if args.games:
        print()
        for game in history.games:
            print(
                f"{game.date.date().isoformat()}  {game.result:<5} vs "
                f"{game.opponent_name} ({game.match_name or game.match_id})"
            )
    return 0


def run_report(args: argparse.Namespace) -> int:
    league = load_dataset(args.dataset)
    report = build_tournament_report(
        league, args.tournament, _resolve_config(args, league)
    )

    print(report.tournament.name)
    for row in report.participants:
        standing = row.standing
        marker = "*" if row.is_calculated_position and row.display_position else " "
        change = f"{row.rating_change:+.1f}" if row.rating_change is not None else ""
        print(
            f"{row.display_position or '-':>3}{marker} {row.display_name:<30} "
            f"{standing.record_text() if standing else '':>6} "
            f"SOS {standing.sos if standing else 0:5.1f}  {change:>7}  "
            f"{row.promotion_display or ''}".rstrip()
        )
    return 0


def run_generate(args: argparse.Namespace) -> int:
    config = GeneratorConfig(
        num_players=args.players,
        num_tournaments=args.tournaments,
        num_rounds=args.rounds,
        strength_distribution=StrengthDistribution[args.distribution.upper()],
        seed=args.seed,
    )
    league = LeagueGenerator(config).generate(args.name)
    save_dataset(league, args.output)
    print(f"Wrote {len(league.matches)} matches to {args.output}")
    return 0


# ========== Parser ==========


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser for CLI.

    Returns:
        Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="playerratings",
        description="Compute player ratings, histories and tournament reports",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Current ranked list
  playerratings ratings league.json

  # Ranked list at the end of 2023, local players only
  playerratings ratings league.json --at 2023-12-31T23:59:59 --local

  # Monthly history of one player
  playerratings history league.json p001 --games

  # Tournament report
  playerratings report league.json t01

  # Generate a synthetic league
  playerratings generate --players 24 --tournaments 6 --seed 7 -o league.json
        """,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")
    parser.add_argument("--config", help="Load engine configuration from JSON file")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    ratings = subparsers.add_parser("ratings", help="Print the ranked list")
    ratings.add_argument("dataset", help="League dataset (JSON)")
    ratings.add_argument("--at", type=parse_instant, help="Cutoff instant (default: now)")
    group = ratings.add_mutually_exclusive_group()
    group.add_argument("--local", action="store_true", help="Local players only")
    group.add_argument("--non-local", action="store_true", help="Non-local players only")
    ratings.add_argument("--limit", type=int, help="Show only the first N rows")
    ratings.add_argument("--json", action="store_true", help="Print JSON")
    ratings.set_defaults(handler=run_ratings)

    history = subparsers.add_parser("history", help="Print a player's monthly history")
    history.add_argument("dataset", help="League dataset (JSON)")
    history.add_argument("player", help="Player id or display name")
    history.add_argument("--at", type=parse_instant, help="Cutoff instant (default: now)")
    history.add_argument(
        "--now", type=parse_instant, help="Instant used for the current month"
    )
    history.add_argument("--games", action="store_true", help="Also list the games")
    history.add_argument("--json", action="store_true", help="Print JSON")
    history.set_defaults(handler=run_history)

    report = subparsers.add_parser("report", help="Print a tournament report")
    report.add_argument("dataset", help="League dataset (JSON)")
    report.add_argument("tournament", help="Tournament id")
    report.set_defaults(handler=run_report)

    generate = subparsers.add_parser("generate", help="Generate a synthetic league")
    generate.add_argument("--players", type=int, default=16, help="Number of players")
    generate.add_argument("--tournaments", type=int, default=4, help="Number of tournaments")
    generate.add_argument("--rounds", type=int, default=5, help="Rounds per tournament")
    generate.add_argument(
        "--distribution",
        default="normal",
        choices=[d.value for d in StrengthDistribution],
        help="Strength distribution",
    )
    generate.add_argument("--seed", type=int, help="Random seed for reproducibility")
    generate.add_argument("--name", default="Generated League", help="League name")
    generate.add_argument("-o", "--output", required=True, help="Output file path")
    generate.set_defaults(handler=run_generate)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI.

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        set_log_level(logging.DEBUG)

    try:
        return args.handler(args)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except PlayerRatingsException as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
