"""Externally asserted skill grades (rank records)."""

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

import re
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Any, Dict, Optional

from dateutil.parser import isoparse

from playerratings.constants import ORG_SWA, ORG_TGA, UNKNOWN_GRADE_MARKER
from playerratings.exceptions import InvalidRankingException

_GRADE_PATTERN = re.compile(r"^\s*(\d+)\s*([KDP])\s*(\??)\s*$", re.IGNORECASE)
_FOREIGN_ORGANIZATION = "Foreign"


@dataclass(frozen=True)
class RankRecord:
    """A skill grade issued to a player by an organization.

    The record is read-only input to the engine. A record dated D is in force
    from the start of day D+1: promotions take effect at the end of the day
    they are awarded, after that day's games.

    Attributes:
        grade: Grade text such as "5K", "1D", "2P"; empty or "?" when unknown
        organization: Issuing organization, e.g. "SWA", "TGA", "KBA"
        effective_date: Day the grade was awarded; None means "always known"
        id: Optional identifier used to link tournament promotions
        tournament_id: Tournament that produced this promotion, if any
        note: Free-form note (certificate number, event name, ...)
    """

    grade: str
    organization: Optional[str] = ORG_SWA
    effective_date: Optional[date] = None
    id: Optional[str] = None
    tournament_id: Optional[str] = None
    note: Optional[str] = None

    def __post_init__(self) -> None:
        if self.grade is None:
            raise InvalidRankingException("Rank grade cannot be None")
        if self.grade.strip() and not self.is_uncertain and not self.parsed:
            raise InvalidRankingException(f"Unrecognized rank grade: {self.grade!r}")

    # ========== Grade parsing ==========

    @property
    def parsed(self) -> Optional[tuple]:
        """(number, kind) with kind one of "K", "D", "P", or None when unparseable."""
        m = _GRADE_PATTERN.match(self.grade)
        if not m:
            return None
        return int(m.group(1)), m.group(2).upper()

    @property
    def normalized_grade(self) -> str:
        return self.grade.strip().upper()

    @property
    def is_uncertain(self) -> bool:
        """True when the grade is missing or flagged with "?"."""
        text = self.grade.strip()
        return not text or UNKNOWN_GRADE_MARKER in text

    @property
    def number(self) -> int:
        parsed = self.parsed
        return parsed[0] if parsed else 0

    @property
    def is_pro(self) -> bool:
        parsed = self.parsed
        return bool(parsed) and parsed[1] == "P"

    @property
    def is_dan(self) -> bool:
        parsed = self.parsed
        return bool(parsed) and parsed[1] == "D"

    @property
    def is_kyu(self) -> bool:
        parsed = self.parsed
        return bool(parsed) and parsed[1] == "K"

    # ========== Time handling ==========

    def in_force_at(self, instant: datetime) -> bool:
        """Whether this record applies at ``instant`` (end-of-day rule)."""
        if self.effective_date is None:
            return True
        return self.effective_date < instant.date()

    @property
    def sort_date(self) -> date:
        return self.effective_date or date.min

    def same_rank(self, other: Optional["RankRecord"]) -> bool:
        """Same grade from the same organization (case-insensitive)."""
        if other is None:
            return False
        return self.normalized_grade == other.normalized_grade and (
            (self.organization or "").upper() == (other.organization or "").upper()
        )

    def label(self) -> str:
        org = self.organization or "?"
        return f"{self.normalized_grade or UNKNOWN_GRADE_MARKER} ({org})"

    # ========== Serialization ==========

    @classmethod
    def from_legacy(
        cls, text: str, effective_date: Optional[date] = None
    ) -> "RankRecord":
        """Parse a legacy combined ranking string.

        ``"1D"`` is an SWA grade, ``"(1D)"`` a TGA grade and ``"[1D CWA]"`` a
        foreign grade issued by CWA. In ``"1D (2D)"`` the leading SWA grade wins.
        """
        text = (text or "").strip().upper()
        if " " in text and text[0] not in "[(":
            text = text.split(" ", 1)[0]

        if text.startswith("["):
            parts = text.strip("[]").split()
            grade = parts[0] if parts else ""
            organization = parts[1] if len(parts) > 1 else _FOREIGN_ORGANIZATION
            return cls(grade=grade, organization=organization, effective_date=effective_date)
        if text.startswith("("):
            return cls(
                grade=text.strip("()"), organization=ORG_TGA, effective_date=effective_date
            )
        return cls(grade=text, organization=ORG_SWA, effective_date=effective_date)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize rank record to dictionary."""
        return {
            "grade": self.grade,
            "organization": self.organization,
            "effective_date": (
                self.effective_date.isoformat() if self.effective_date else None
            ),
            "id": self.id,
            "tournament_id": self.tournament_id,
            "note": self.note,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RankRecord":
        """Deserialize rank record from dictionary."""
        effective = data.get("effective_date")
        if isinstance(effective, str):
            try:
                effective = isoparse(effective).date()
            except ValueError as e:
                raise InvalidRankingException(
                    f"Invalid rank date {effective!r}"
                ) from e
        elif isinstance(effective, datetime):
            effective = effective.date()
        if "grade" not in data and "ranking" in data:
            legacy = cls.from_legacy(data["ranking"], effective)
            return replace(legacy, id=data.get("id"), tournament_id=data.get("tournament_id"))
        return cls(
            grade=data.get("grade", ""),
            organization=data.get("organization", ORG_SWA),
            effective_date=effective,
            id=data.get("id"),
            tournament_id=data.get("tournament_id"),
            note=data.get("note"),
        )
