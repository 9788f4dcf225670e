"""Validation utilities for Player Ratings.

This module provides reusable validation functions with consistent error handling.
Each check returns a :class:`ValidationResult`; the ``*_strict`` variants raise.
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
from datetime import datetime
from typing import Any, Optional

from playerratings.exceptions import (
    FactorValidationException,
    InvalidMatchException,
    ScoreValidationException,
)


class ValidationResult:
    """Result of a validation operation.

    Attributes:
        is_valid: Whether the validation passed
        error_message: Human-readable error message if invalid
        sanitized_value: Cleaned/normalized value if valid
    """

    def __init__(
        self,
        is_valid: bool,
        error_message: Optional[str] = None,
        sanitized_value: Any = None,
    ):
        self.is_valid = is_valid
        self.error_message = error_message
        self.sanitized_value = sanitized_value

    def __bool__(self) -> bool:
        """Allow using result in boolean context: if result: ..."""
        return self.is_valid

    def __repr__(self) -> str:
        if self.is_valid:
            return f"ValidationResult(VALID, {self.sanitized_value!r})"
        return f"ValidationResult(INVALID, {self.error_message!r})"


# ========== Score Validation ==========


def validate_score(score: Any) -> ValidationResult:
    """Validate a recorded game score (points won by one side).

    Scores are non-negative finite numbers; the engine only compares the two
    sides, so any scale (1-0, 3-1, 185-176) is accepted.

    Example:
        >>> validate_score(2).sanitized_value
        2.0
    """
    if isinstance(score, bool) or score is None:
        return ValidationResult(
            is_valid=False, error_message=f"Score must be a number: {score!r}"
        )
    try:
        value = float(score)
    except (TypeError, ValueError):
        return ValidationResult(
            is_valid=False, error_message=f"Score must be a number: {score!r}"
        )

    if not math.isfinite(value) or value < 0:
        return ValidationResult(
            is_valid=False,
            error_message=f"Score must be a finite non-negative number: {score!r}",
        )
    return ValidationResult(is_valid=True, sanitized_value=value)


def validate_score_strict(score: Any) -> float:
    """Validate a score and raise if invalid.

    Raises:
        ScoreValidationException: If score is invalid
    """
    result = validate_score(score)
    if not result.is_valid:
        raise ScoreValidationException(result.error_message)
    return result.sanitized_value


# ========== Factor Validation ==========


def validate_factor(factor: Any) -> ValidationResult:
    """Validate a match weighting factor.

    ``None`` means "not specified" and is kept as ``None``; 0 means the match
    is recorded but must not affect ratings.
    """
    if factor is None:
        return ValidationResult(is_valid=True, sanitized_value=None)
    if isinstance(factor, bool):
        return ValidationResult(
            is_valid=False, error_message=f"Factor must be a number: {factor!r}"
        )
    try:
        value = float(factor)
    except (TypeError, ValueError):
        return ValidationResult(
            is_valid=False, error_message=f"Factor must be a number: {factor!r}"
        )

    if not math.isfinite(value) or value < 0:
        return ValidationResult(
            is_valid=False,
            error_message=f"Factor must be a finite number >= 0: {factor!r}",
        )
    return ValidationResult(is_valid=True, sanitized_value=value)


def validate_factor_strict(factor: Any) -> Optional[float]:
    """Validate a factor and raise if invalid.

    Raises:
        FactorValidationException: If factor is invalid
    """
    result = validate_factor(factor)
    if not result.is_valid:
        raise FactorValidationException(result.error_message)
    return result.sanitized_value


# ========== Match Validation ==========


def validate_match_fields(
    match_id: Any,
    timestamp: Any,
    first_player_id: Optional[str],
    second_player_id: Optional[str],
) -> ValidationResult:
    """Validate the identity fields of a match record.

    At most one side may be missing (a bye); both missing is invalid, and a
    player cannot play against themself.
    """
    if match_id is None or str(match_id) == "":
        return ValidationResult(is_valid=False, error_message="Match id is required")

    if not isinstance(timestamp, datetime):
        return ValidationResult(
            is_valid=False,
            error_message=f"Match {match_id}: timestamp must be a datetime, got {timestamp!r}",
        )

    if first_player_id is None and second_player_id is None:
        return ValidationResult(
            is_valid=False,
            error_message=f"Match {match_id}: both player references are missing",
        )

    if first_player_id is not None and first_player_id == second_player_id:
        return ValidationResult(
            is_valid=False,
            error_message=f"Match {match_id}: player {first_player_id} cannot play themself",
        )

    return ValidationResult(is_valid=True, sanitized_value=str(match_id))


def validate_match_strict(match: Any) -> None:
    """Validate a full match record and raise if any field is invalid.

    Args:
        match: A :class:`playerratings.models.Match` (or anything shaped like one)

    Raises:
        InvalidMatchException: If the record must not be processed
    """
    result = validate_match_fields(
        match.id, match.timestamp, match.first_player_id, match.second_player_id
    )
    if not result.is_valid:
        raise InvalidMatchException(result.error_message)

    for label, score in (
        ("first player score", match.first_player_score),
        ("second player score", match.second_player_score),
    ):
        score_result = validate_score(score)
        if not score_result.is_valid:
            raise InvalidMatchException(
                f"Match {match.id}: invalid {label}: {score_result.error_message}"
            )

    factor_result = validate_factor(match.factor)
    if not factor_result.is_valid:
        raise InvalidMatchException(
            f"Match {match.id}: {factor_result.error_message}"
        )
