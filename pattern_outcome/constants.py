"""Constants for pattern outcome computation."""

from enum import Enum
from typing import Final


# --- Outcome States ---
class OutcomeStatus(str, Enum):
    """Terminal state of a simulated pattern."""

    TARGET_HIT = "target_hit"
    STOP_HIT = "stop_hit"
    TIMED_OUT = "timed_out"
    NO_DATA = "no_data"


# --- Data Source Tags ---
class DataSourceTag(str, Enum):
    """Which bar source produced the series an outcome was simulated on."""

    PRIMARY = "primary"
    FALLBACK = "fallback"
    NONE = "none"


# Group label for records without a pattern type or timeframe
UNKNOWN_GROUP: Final[str] = "unknown"
