"""Data model for Player Ratings.

Immutable inputs (matches, rank records, player profiles, tournaments),
the per-run player state and the output records.
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

from playerratings.models.dataset import LeagueData, load_dataset, save_dataset
from playerratings.models.match import Match, sort_matches
from playerratings.models.player import Player, PlayerState
from playerratings.models.ranking import RankRecord
from playerratings.models.snapshot import MonthlySnapshot, PromotionBonus
from playerratings.models.tournament import Tournament, TournamentParticipant

__all__ = [
    "Match",
    "sort_matches",
    "RankRecord",
    "Player",
    "PlayerState",
    "Tournament",
    "TournamentParticipant",
    "PromotionBonus",
    "MonthlySnapshot",
    "LeagueData",
    "load_dataset",
    "save_dataset",
]
