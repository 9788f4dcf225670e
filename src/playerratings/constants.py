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

# --- Constants ---
DATASET_FILE_EXTENSION = ".json"

# Game outcome scores
WIN_SCORE = 1.0
DRAW_SCORE = 0.5
LOSS_SCORE = 0.0

# Default weighting factor for a match when none is recorded
DEFAULT_FACTOR = 1.0

# Rating scale (EGD style)
ONE_D_RATING = 2100
ONE_P_RATING = 2740  # 1P > 7D (2700)
DAN_GRADE_DIFF = 100
PRO_GRADE_DIFF = 40
MAX_PRO_GRADE = 9
MAX_KYU_GRADE = 30
DEFAULT_RATING = 1700
MIN_RATING = -900
FOREIGN_ONE_D_RATING_DELTA = -25  # (1D) = 2075, between SWA 1K and 1D

# Rating thresholds for single-rank differences
THRESHOLD_2D_PLUS = 2200
THRESHOLD_1D = 2100
THRESHOLD_1K_4K = 1950
THRESHOLD_5K_9K = 1800
THRESHOLD_10K_19K = 1400

# Promotions at or above this rank rating (5D) get no bonus
PROMOTION_BONUS_CEILING = 2500
PROMOTION_FLOOR_FRACTION = 0.5

# RatingFormula parameters
RATING_CEILING = 3300.0
CON_BASE = 200.0
CON_EXPONENT = 1.6
BETA_SCALE = 7.0
DEFLATION_PIVOT = 2300.0
DEFLATION_SCALE = 80.0
DEFLATION_DIVISOR = 5.0

# Grace period / uncertainty handling
GRACE_PERIOD_GAMES = 12
UNCERTAINTY_DIVISOR = 6.0
ESTABLISHED_OPPONENT_FACTOR = 0.5
NEW_PLAYERS_FACTOR_CAP = 2.0
ESTIMATE_CORRECTION_FRACTION = 0.5

# Performance estimate shaping
PERFORMANCE_LOGIT_SCALE = 100.0
PERFORMANCE_DIFF_CAP = 200.0
PERFORMANCE_EXTRAPOLATION_LIMIT = 150.0
PERFORMANCE_WEIGHT_BASE = 1000.0

# Activity
RETURN_GAP_DAYS = 365 * 2
ACTIVE_YEARS = 2
RANK_CHANGE_ACTIVE_MONTHS = 6

# Organizations
ORG_SWA = "SWA"
ORG_TGA = "TGA"
LOCAL_ORGANIZATIONS = (ORG_SWA, ORG_TGA)
TRUSTED_ORGANIZATIONS = (ORG_SWA, ORG_TGA, "MWA", "KBA", "Thailand", "Vietnam", "EGF")

# Match name tag used by the SWA-only filter
MATCH_SWA = "SWA "

# Grade markers
UNKNOWN_GRADE_MARKER = "?"

# Swiss standings
BYE_NAME = "BYE"
