"""Tournament and participant records."""

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
from typing import Any, Dict, List, Optional

from playerratings.type_hints import PlayerId


@dataclass
class TournamentParticipant:
    """A player's membership in a tournament.

    Attributes:
        player_id: Participating player
        position: Manually stored finishing position, if any
        promotion_rank_id: Id of the RankRecord awarded after this tournament
    """

    player_id: PlayerId
    position: Optional[int] = None
    promotion_rank_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize participant to dictionary."""
        return {
            "player_id": self.player_id,
            "position": self.position,
            "promotion_rank_id": self.promotion_rank_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TournamentParticipant":
        """Deserialize participant from dictionary."""
        return cls(
            player_id=str(data["player_id"]),
            position=data.get("position"),
            promotion_rank_id=data.get("promotion_rank_id"),
        )


@dataclass
class Tournament:
    """A group of matches played as one event.

    Matches reference the tournament through ``Match.tournament_id``; the
    tournament itself only carries descriptive data and participants.

    Attributes:
        id: Unique tournament identifier
        name: Display name
        organizer: Organizing body, used by the SWA-only filter
        participants: Registered participants
    """

    id: str
    name: str
    organizer: Optional[str] = None
    participants: List[TournamentParticipant] = field(default_factory=list)

    def participant(self, player_id: PlayerId) -> Optional[TournamentParticipant]:
        for entry in self.participants:
            if entry.player_id == player_id:
                return entry
        return None

    @property
    def participant_ids(self) -> List[PlayerId]:
        return [p.player_id for p in self.participants]

    def to_dict(self) -> Dict[str, Any]:
        """Serialize tournament to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "organizer": self.organizer,
            "participants": [p.to_dict() for p in self.participants],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Tournament":
        """Deserialize tournament from dictionary."""
        return cls(
            id=str(data["id"]),
            name=data.get("name", "Untitled Tournament"),
            organizer=data.get("organizer"),
            participants=[
                TournamentParticipant.from_dict(p) for p in data.get("participants", [])
            ],
        )
