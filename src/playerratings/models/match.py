"""A single recorded game between two players (or a bye)."""

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

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from dateutil.parser import isoparse

from playerratings.constants import (
    BYE_NAME,
    DEFAULT_FACTOR,
    DRAW_SCORE,
    LOSS_SCORE,
    WIN_SCORE,
)
from playerratings.exceptions import InvalidMatchException
from playerratings.type_hints import MaybePlayerId, PlayerId
from playerratings.utils.validation import validate_match_strict


@dataclass(frozen=True)
class Match:
    """An immutable match record.

    Attributes
    ----------
    id : str
        Unique identifier of the match
    timestamp : datetime
        When the game was played; the engine consumes matches in this order
    first_player_id : Optional[str]
        First side, ``None`` when the first side is a bye
    second_player_id : Optional[str]
        Second side, ``None`` when the second side is a bye
    first_player_score, second_player_score : float
        Recorded points; only their comparison decides the outcome
    factor : Optional[float]
        Weighting factor, ``None`` means the default of 1, 0 means unrated
    tournament_id : Optional[str]
        Tournament this game belongs to
    round : Optional[int]
        Round number inside the tournament
    name : Optional[str]
        Display name, e.g. "SWA Open 2024"
    organizer : Optional[str]
        Organizer of the owning tournament, used by the SWA-only filter
    """

    id: str
    timestamp: datetime
    first_player_id: MaybePlayerId
    second_player_id: MaybePlayerId
    first_player_score: float = 0.0
    second_player_score: float = 0.0
    factor: Optional[float] = None
    tournament_id: Optional[str] = None
    round: Optional[int] = None
    name: Optional[str] = None
    organizer: Optional[str] = None

    def __post_init__(self) -> None:
        validate_match_strict(self)

    # ========== Derived properties ==========

    @property
    def is_bye(self) -> bool:
        """True when exactly one side is missing."""
        return self.first_player_id is None or self.second_player_id is None

    @property
    def effective_factor(self) -> float:
        """The weighting factor with the default applied."""
        return DEFAULT_FACTOR if self.factor is None else float(self.factor)

    @property
    def has_default_factor(self) -> bool:
        return self.factor is None or float(self.factor) == DEFAULT_FACTOR

    @property
    def is_rated(self) -> bool:
        """Whether this match may change anyone's rating."""
        return not self.is_bye and self.effective_factor > 0

    @property
    def first_player_result(self) -> float:
        """Game result for the first side: 1.0 win, 0.5 draw, 0.0 loss."""
        if self.first_player_score > self.second_player_score:
            return WIN_SCORE
        if self.first_player_score < self.second_player_score:
            return LOSS_SCORE
        return DRAW_SCORE

    @property
    def player_ids(self) -> List[PlayerId]:
        """The real (non-bye) participants."""
        return [
            pid
            for pid in (self.first_player_id, self.second_player_id)
            if pid is not None
        ]

    @property
    def grouping_key(self) -> str:
        """Key used to de-duplicate matches of the same event in a month."""
        if self.tournament_id:
            return self.tournament_id
        if self.name:
            return self.name
        return self.id

    def involves(self, player_id: PlayerId) -> bool:
        return player_id in (self.first_player_id, self.second_player_id)

    def result_for(self, player_id: PlayerId) -> float:
        """Game result from ``player_id``'s point of view."""
        if player_id == self.first_player_id:
            return self.first_player_result
        if player_id == self.second_player_id:
            return WIN_SCORE - self.first_player_result
        raise InvalidMatchException(
            f"Player {player_id} did not play in match {self.id}"
        )

    def scores_for(self, player_id: PlayerId) -> Tuple[float, float]:
        """(own score, opponent score) from ``player_id``'s point of view."""
        if player_id == self.first_player_id:
            return self.first_player_score, self.second_player_score
        if player_id == self.second_player_id:
            return self.second_player_score, self.first_player_score
        raise InvalidMatchException(
            f"Player {player_id} did not play in match {self.id}"
        )

    def opponent_of(self, player_id: PlayerId) -> MaybePlayerId:
        """The other side, or ``None`` for a bye."""
        if player_id == self.first_player_id:
            return self.second_player_id
        if player_id == self.second_player_id:
            return self.first_player_id
        raise InvalidMatchException(
            f"Player {player_id} did not play in match {self.id}"
        )

    def score_text(self) -> str:
        """Winner-first score, e.g. ``"3 : 1"``."""
        high = max(self.first_player_score, self.second_player_score)
        low = min(self.first_player_score, self.second_player_score)
        return f"{high:g} : {low:g}"

    def describe(self, names: Optional[Dict[PlayerId, str]] = None) -> str:
        """Winner-first description, e.g. ``"Alice - Bob"``."""
        names = names or {}

        def label(pid: MaybePlayerId) -> str:
            if pid is None:
                return BYE_NAME
            return names.get(pid, pid)

        if self.first_player_score > self.second_player_score:
            return f"{label(self.first_player_id)} - {label(self.second_player_id)}"
        return f"{label(self.second_player_id)} - {label(self.first_player_id)}"

    # ========== Serialization ==========

    def to_dict(self) -> Dict[str, Any]:
        """Serialize match to dictionary."""
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "first_player_id": self.first_player_id,
            "second_player_id": self.second_player_id,
            "first_player_score": self.first_player_score,
            "second_player_score": self.second_player_score,
            "factor": self.factor,
            "tournament_id": self.tournament_id,
            "round": self.round,
            "name": self.name,
            "organizer": self.organizer,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Match":
        """Deserialize match from dictionary.

        Raises:
            InvalidMatchException: If the record is malformed
        """
        timestamp = data.get("timestamp")
        if isinstance(timestamp, str):
            try:
                timestamp = isoparse(timestamp)
            except ValueError as e:
                raise InvalidMatchException(
                    f"Match {data.get('id')}: invalid timestamp {timestamp!r}"
                ) from e
        return cls(
            id=str(data.get("id", "")),
            timestamp=timestamp,
            first_player_id=data.get("first_player_id"),
            second_player_id=data.get("second_player_id"),
            first_player_score=data.get("first_player_score", 0.0),
            second_player_score=data.get("second_player_score", 0.0),
            factor=data.get("factor"),
            tournament_id=data.get("tournament_id"),
            round=data.get("round"),
            name=data.get("name"),
            organizer=data.get("organizer"),
        )


def sort_matches(matches: List[Match]) -> List[Match]:
    """Stable ascending sort by timestamp."""
    return sorted(matches, key=lambda m: m.timestamp)
