"""Per-match statistics that can ride along with a rating run."""

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

from abc import ABC, abstractmethod
from typing import Dict, Optional

from playerratings.models.match import Match
from playerratings.type_hints import PlayerId


class Stat(ABC):
    """
    Capability interface for a statistic fed one match at a time.

    The rating engine calls :meth:`add_match` for every match it accepts, in
    timestamp order, and :meth:`reset` whenever the engine itself is reset.

    Notes
    -----
    - A statistic never changes ratings; it only observes matches.
    - Byes are passed in as well; implementations decide whether to count them.
    """

    #: Short label used as a column header
    name: str = ""

    @abstractmethod
    def reset(self) -> None:
        """Forget everything seen so far."""
        raise NotImplementedError

    @abstractmethod
    def add_match(self, match: Match) -> None:
        """Observe one match."""
        raise NotImplementedError

    @abstractmethod
    def result(self, player_id: PlayerId) -> str:
        """Display value for ``player_id``; empty when nothing is known."""
        raise NotImplementedError


class WinRateStat(Stat):
    """Share of games won, e.g. ``"66.7% (2/3)"``. Draws count as played, not won."""

    name = "Win rate"

    def __init__(self) -> None:
        self._wins: Dict[PlayerId, int] = {}
        self._total: Dict[PlayerId, int] = {}

    def reset(self) -> None:
        self._wins.clear()
        self._total.clear()

    def add_match(self, match: Match) -> None:
        if match.is_bye or match.effective_factor == 0:
            return

        for pid in match.player_ids:
            self._wins.setdefault(pid, 0)
            self._total[pid] = self._total.get(pid, 0) + 1

        if match.first_player_score > match.second_player_score:
            self._wins[match.first_player_id] += 1
        elif match.second_player_score > match.first_player_score:
            self._wins[match.second_player_id] += 1

    def win_rate(self, player_id: PlayerId) -> Optional[float]:
        total = self._total.get(player_id, 0)
        if not total:
            return None
        return self._wins[player_id] / total

    def result(self, player_id: PlayerId) -> str:
        rate = self.win_rate(player_id)
        if rate is None:
            return ""
        return f"{rate:.1%} ({self._wins[player_id]}/{self._total[player_id]})"
