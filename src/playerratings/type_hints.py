"""Type hints used in Player Ratings."""

from datetime import datetime
from typing import Dict, List, Literal, Optional, Tuple

# Player identifiers are opaque strings
PlayerId = str
MaybePlayerId = Optional[PlayerId]

# Outcome of a single game from one player's point of view
Outcome = Literal["win", "loss", "draw"]
WIN: Outcome = "win"
LOSS: Outcome = "loss"
DRAW: Outcome = "draw"

# player id -> rating
RatingMap = Dict[PlayerId, float]
# player id -> opponent id -> expected rating shift for a win
ForecastMatrix = Dict[PlayerId, Dict[PlayerId, float]]
# (opponent rating, score) pairs collected during the grace period
GraceGames = List[Tuple[float, float]]
# (position, total ranked players)
PositionInfo = Tuple[Optional[int], int]
MaybeInstant = Optional[datetime]

#  LocalWords:  RatingMap ForecastMatrix
