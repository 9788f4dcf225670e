"""Engine configuration and the explicit calculation context.

Configuration is a plain dataclass that can be stored as JSON. Every
calculation receives a :class:`RatingContext` carrying the cutoff instant and
the configuration, so no date-relative state is kept at module level.
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

import json
import math
from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

from playerratings.constants import (
    ACTIVE_YEARS,
    CON_BASE,
    CON_EXPONENT,
    GRACE_PERIOD_GAMES,
    LOCAL_ORGANIZATIONS,
    MIN_RATING,
    RATING_CEILING,
    RETURN_GAP_DAYS,
    TRUSTED_ORGANIZATIONS,
)
from playerratings.exceptions import (
    FileLoadException,
    FileSaveException,
    InvalidConfigurationException,
    MissingConfigurationException,
)
from playerratings.utils import setup_logger

logger = setup_logger(__name__)


@dataclass
class EngineConfig:
    """Tunable parameters of a rating calculation.

    Attributes:
        k_multiplier: Global multiplier on the per-match step size
        rating_ceiling: Asymptote of the rating scale
        con_base: Divisor of the step-size curve
        con_exponent: Exponent of the step-size curve
        min_rating: Lowest rating a player can reach
        deflation_bonus: Add the small anti-deflation bonus to every update
        grace_period_games: Rated games before an unknown-ranked player is published
        return_gap_days: Absence that marks a player as returning
        active_years: Years since last match during which a player stays active
        protected_ratings: Apply rank-derived rating floors on finalize
        promotion_bonus: Raise ratings to the floor of a newly awarded rank
        swa_only: Keep only SWA-tagged matches (ignored for international leagues)
        is_international: International league; disables local filters
        local_only: Rank only local players
        track_win_rate: Attach a win-rate statistic to every calculation run
        trusted_organizations: Issuers whose ranks are believed
        local_organizations: Issuers considered local
    """

    k_multiplier: float = 1.0
    rating_ceiling: float = RATING_CEILING
    con_base: float = CON_BASE
    con_exponent: float = CON_EXPONENT
    min_rating: float = MIN_RATING
    deflation_bonus: bool = False
    grace_period_games: int = GRACE_PERIOD_GAMES
    return_gap_days: int = RETURN_GAP_DAYS
    active_years: int = ACTIVE_YEARS
    protected_ratings: bool = True
    promotion_bonus: bool = True
    swa_only: bool = False
    is_international: bool = False
    local_only: bool = False
    track_win_rate: bool = False
    trusted_organizations: Tuple[str, ...] = field(
        default_factory=lambda: tuple(TRUSTED_ORGANIZATIONS)
    )
    local_organizations: Tuple[str, ...] = field(
        default_factory=lambda: tuple(LOCAL_ORGANIZATIONS)
    )

    def __post_init__(self) -> None:
        self.trusted_organizations = tuple(self.trusted_organizations)
        self.local_organizations = tuple(self.local_organizations)

    def validate(self) -> None:
        """Check value ranges.

        Raises:
            InvalidConfigurationException: If any value is out of range
        """
        for name in ("k_multiplier", "rating_ceiling", "con_base", "con_exponent"):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or not math.isfinite(value):
                raise InvalidConfigurationException(f"{name} must be a finite number")
            if value <= 0:
                raise InvalidConfigurationException(f"{name} must be positive")
        if self.min_rating >= self.rating_ceiling:
            raise InvalidConfigurationException(
                "min_rating must be below rating_ceiling"
            )
        if self.grace_period_games < 1:
            raise InvalidConfigurationException("grace_period_games must be >= 1")
        if self.return_gap_days < 1 or self.active_years < 1:
            raise InvalidConfigurationException(
                "return_gap_days and active_years must be >= 1"
            )

    def is_trusted(self, organization: Optional[str]) -> bool:
        return _contains_ignore_case(self.trusted_organizations, organization)

    def is_local_organization(self, organization: Optional[str]) -> bool:
        return _contains_ignore_case(self.local_organizations, organization)

    @property
    def uses_swa_filter(self) -> bool:
        return self.swa_only and not self.is_international

    def to_dict(self) -> Dict[str, Any]:
        """Serialize configuration to dictionary."""
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["trusted_organizations"] = list(self.trusted_organizations)
        data["local_organizations"] = list(self.local_organizations)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineConfig":
        """Deserialize and validate configuration.

        Unknown keys are ignored with a warning.

        Raises:
            InvalidConfigurationException: If a value is invalid
        """
        if not isinstance(data, dict):
            raise InvalidConfigurationException("Configuration must be a JSON object")
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning("Ignoring unknown configuration keys: %s", ", ".join(unknown))
        try:
            config = cls(**{k: v for k, v in data.items() if k in known})
        except TypeError as e:
            raise InvalidConfigurationException(str(e)) from e
        config.validate()
        return config


def _contains_ignore_case(values: Tuple[str, ...], item: Optional[str]) -> bool:
    if not item:
        return False
    needle = item.strip().upper()
    return any(v.upper() == needle for v in values)


@dataclass(frozen=True)
class RatingContext:
    """Explicit inputs that every date-relative calculation needs.

    Attributes:
        cutoff: Matches after this instant are ignored; activity is measured here
        config: Engine configuration
        rating_start: Matches before this instant are ignored, if set
        now: Wall-clock instant used for the current, still open month
    """

    cutoff: datetime
    config: EngineConfig = field(default_factory=EngineConfig)
    rating_start: Optional[datetime] = None
    now: Optional[datetime] = None

    @property
    def current_instant(self) -> datetime:
        return self.now or self.cutoff

    def at(self, cutoff: datetime) -> "RatingContext":
        """Copy of this context with a different cutoff."""
        return replace(self, cutoff=cutoff)


def load_config(path: Union[str, Path, None]) -> EngineConfig:
    """Load engine configuration from a JSON file.

    Raises:
        MissingConfigurationException: If the file does not exist
        FileLoadException: If the file cannot be parsed
        InvalidConfigurationException: If a value is invalid
    """
    if not path:
        return EngineConfig()

    config_path = Path(path)
    if not config_path.exists():
        raise MissingConfigurationException(
            f"Configuration file not found: {config_path}"
        )
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise FileLoadException(f"Failed to load configuration: {e}") from e

    config = EngineConfig.from_dict(data)
    logger.info("Loaded configuration from: %s", config_path)
    return config


def save_config(config: EngineConfig, path: Union[str, Path]) -> None:
    """Write engine configuration to a JSON file."""
    config_path = Path(path)
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(config.to_dict(), f, indent=2)
    except OSError as e:
        raise FileSaveException(f"Could not save configuration: {e}") from e
    logger.info("Configuration saved to: %s", config_path)
