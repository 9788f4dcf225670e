"""Shared helpers for Player Ratings: logging setup and calendar-month arithmetic."""

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

import logging
import sys
from datetime import datetime, timedelta
from typing import Iterator

from dateutil.relativedelta import relativedelta

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_ONE_MICROSECOND = timedelta(microseconds=1)


def setup_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """Return a module logger with a single stream handler attached.

    Calling this repeatedly for the same name never stacks handlers.

    Args:
        name: Logger name, usually ``__name__``
        level: Initial level for the logger

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.setLevel(level)
        logger.propagate = False
    return logger


def set_log_level(level: int) -> None:
    """Set the level of every logger created under the package namespace."""
    logging.getLogger("playerratings").setLevel(level)
    for name, logger in logging.Logger.manager.loggerDict.items():
        if name.startswith("playerratings") and isinstance(logger, logging.Logger):
            logger.setLevel(level)


# ========== Calendar months ==========


def month_start(instant: datetime) -> datetime:
    """First instant of the calendar month containing ``instant``."""
    return instant.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def month_end(instant: datetime) -> datetime:
    """Last representable instant of the calendar month containing ``instant``."""
    return month_start(instant) + relativedelta(months=1) - _ONE_MICROSECOND


def next_month(instant: datetime) -> datetime:
    """First instant of the month following the one containing ``instant``."""
    return month_start(instant) + relativedelta(months=1)


def same_month(a: datetime, b: datetime) -> bool:
    return a.year == b.year and a.month == b.month


def iter_months(first: datetime, last: datetime) -> Iterator[datetime]:
    """Yield the start of every calendar month from ``first`` to ``last`` inclusive."""
    current = month_start(first)
    stop = month_start(last)
    while current <= stop:
        yield current
        current = current + relativedelta(months=1)


def months_between(first: datetime, last: datetime) -> int:
    """Number of whole calendar months from ``first``'s month to ``last``'s month."""
    delta = relativedelta(month_start(last), month_start(first))
    return delta.years * 12 + delta.months
