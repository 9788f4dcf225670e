"""Exceptions for use in Player Ratings"""

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


# ========== Base Application Exception ==========


class PlayerRatingsException(Exception):
    """Base exception for all Player Ratings errors.

    All custom exceptions in the package inherit from this class, so callers
    can catch every engine-specific error with a single except clause.
    """

    pass


# ========== Match Exceptions ==========


class MatchException(PlayerRatingsException):
    """Base exception for match-related errors."""

    pass


class InvalidMatchException(MatchException):
    """Raised when a match record is malformed (e.g., both players missing)."""

    pass


class MatchOrderException(InvalidMatchException):
    """Raised when matches are fed to the engine out of timestamp order."""

    pass


# ========== Ranking Exceptions ==========


class RankingException(PlayerRatingsException):
    """Base exception for rank record errors."""

    pass


class InvalidRankingException(RankingException):
    """Raised when a rank record cannot be interpreted."""

    pass


# ========== Engine Exceptions ==========


class EngineException(PlayerRatingsException):
    """Base exception for rating engine errors."""

    pass


class EngineStateException(EngineException):
    """Raised when the engine is in an invalid state for the requested operation."""

    pass


# ========== Player Exceptions ==========


class PlayerException(PlayerRatingsException):
    """Base exception for player-related errors."""

    pass


class PlayerNotFoundException(PlayerException):
    """Raised when a requested player cannot be found."""

    pass


# ========== Validation Exceptions ==========


class ValidationException(PlayerRatingsException):
    """Base exception for validation errors."""

    pass


class ScoreValidationException(ValidationException):
    """Raised when a match score is invalid."""

    pass


class FactorValidationException(ValidationException):
    """Raised when a match weighting factor is invalid."""

    pass


# ========== Configuration Exceptions ==========


class ConfigurationException(PlayerRatingsException):
    """Base exception for configuration errors."""

    pass


class InvalidConfigurationException(ConfigurationException):
    """Raised when configuration data is invalid."""

    pass


class MissingConfigurationException(ConfigurationException):
    """Raised when required configuration is missing."""

    pass


# ========== File/Resource Exceptions ==========


class ResourceException(PlayerRatingsException):
    """Base exception for resource-related errors."""

    pass


class FileLoadException(ResourceException):
    """Raised when a file cannot be loaded."""

    pass


class FileSaveException(ResourceException):
    """Raised when a file cannot be saved."""

    pass
