"""League datasets: players, tournaments and matches loaded from JSON."""

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

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from playerratings.exceptions import (
    FileLoadException,
    FileSaveException,
    PlayerNotFoundException,
    PlayerRatingsException,
)
from playerratings.models.match import Match, sort_matches
from playerratings.models.player import Player
from playerratings.models.tournament import Tournament
from playerratings.type_hints import PlayerId
from playerratings.utils import setup_logger

logger = setup_logger(__name__)


@dataclass
class LeagueData:
    """Everything one calculation scope needs: players, tournaments, matches.

    Attributes:
        name: League name
        is_international: Disables SWA-only and hidden-player filtering
        players: Player profiles keyed by id
        tournaments: Tournaments keyed by id
        matches: Matches in ascending timestamp order
    """

    name: str = "League"
    is_international: bool = False
    players: Dict[PlayerId, Player] = field(default_factory=dict)
    tournaments: Dict[str, Tournament] = field(default_factory=dict)
    matches: List[Match] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.matches = sort_matches(self.matches)

    def player(self, player_id: PlayerId) -> Player:
        """Look up a player profile.

        Raises:
            PlayerNotFoundException: If the id is unknown
        """
        try:
            return self.players[player_id]
        except KeyError:
            raise PlayerNotFoundException(f"Unknown player: {player_id}") from None

    def find_player(self, reference: str) -> Player:
        """Resolve a player by id or by exact display name."""
        if reference in self.players:
            return self.players[reference]
        for player in self.players.values():
            if player.display_name == reference:
                return player
        raise PlayerNotFoundException(f"Unknown player: {reference}")

    def tournament(self, tournament_id: str) -> Tournament:
        try:
            return self.tournaments[tournament_id]
        except KeyError:
            raise PlayerRatingsException(
                f"Unknown tournament: {tournament_id}"
            ) from None

    def tournament_matches(self, tournament_id: str) -> List[Match]:
        return [m for m in self.matches if m.tournament_id == tournament_id]

    def names(self) -> Dict[PlayerId, str]:
        return {pid: p.display_name for pid, p in self.players.items()}

    def to_dict(self) -> Dict[str, Any]:
        """Serialize the dataset to dictionary."""
        return {
            "name": self.name,
            "is_international": self.is_international,
            "players": [p.to_dict() for p in self.players.values()],
            "tournaments": [t.to_dict() for t in self.tournaments.values()],
            "matches": [m.to_dict() for m in self.matches],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LeagueData":
        """Deserialize the dataset from dictionary.

        Match organizers missing from the match record are taken from the
        owning tournament.
        """
        players = [Player.from_dict(p) for p in data.get("players", [])]
        tournaments = [Tournament.from_dict(t) for t in data.get("tournaments", [])]
        organizers = {t.id: t.organizer for t in tournaments}

        matches: List[Match] = []
        for raw in data.get("matches", []):
            record = dict(raw)
            if not record.get("organizer") and record.get("tournament_id"):
                record["organizer"] = organizers.get(record["tournament_id"])
            matches.append(Match.from_dict(record))

        return cls(
            name=data.get("name", "League"),
            is_international=data.get("is_international", False),
            players={p.id: p for p in players},
            tournaments={t.id: t for t in tournaments},
            matches=matches,
        )


def load_dataset(path: Union[str, Path]) -> LeagueData:
    """Load a league dataset from a JSON file.

    Raises:
        FileLoadException: If the file cannot be read or parsed
    """
    dataset_path = Path(path)
    try:
        with open(dataset_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise FileLoadException(f"Could not load dataset {dataset_path}: {e}") from e

    league = LeagueData.from_dict(data)
    logger.info(
        "Loaded %s: %s players, %s matches",
        dataset_path,
        len(league.players),
        len(league.matches),
    )
    return league


def save_dataset(
    league: LeagueData, path: Union[str, Path], indent: Optional[int] = 2
) -> None:
    """Write a league dataset to a JSON file.

    Raises:
        FileSaveException: If the file cannot be written
    """
    dataset_path = Path(path)
    try:
        dataset_path.parent.mkdir(parents=True, exist_ok=True)
        with open(dataset_path, "w", encoding="utf-8") as f:
            json.dump(league.to_dict(), f, indent=indent, ensure_ascii=False)
    except OSError as e:
        raise FileSaveException(f"Could not save dataset {dataset_path}: {e}") from e
    logger.info("Dataset saved to: %s", dataset_path)
