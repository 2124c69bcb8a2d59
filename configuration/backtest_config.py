"""Simulation and batch configuration.

Simulation rules are fixed so that win rates stay comparable across runs;
only the batch/fetch policy is tunable through the environment.
"""
from __future__ import annotations

import os
from typing import Final

from .timeframes import TIMEFRAME_1D, TIMEFRAME_1W, TIMEFRAME_4H

# =============================================================================
# Outcome simulation
# =============================================================================
# Forced exit horizon, counted in bars after the aligned entry bar
OUTCOME_WINDOW_BARS: Final[int] = 30

# Returned instead of infinity when a group has profit but no losses
PROFIT_FACTOR_SENTINEL: Final[float] = 999.0

# How far (in bars of the pattern's timeframe) the detection time may sit
# outside the fetched series before alignment is rejected
ALIGNMENT_TOLERANCE_BARS: Final[int] = int(os.getenv("ALIGNMENT_TOLERANCE_BARS", "5"))

# =============================================================================
# Statistics
# =============================================================================
# (label, inclusive upper bound); a score equal to a bound belongs to that bucket
CONFIDENCE_BUCKETS: Final[tuple[tuple[str, float], ...]] = (
    ("0-25", 25.0),
    ("26-50", 50.0),
    ("51-75", 75.0),
    ("76-100", 100.0),
)

# Minimum trades before a pattern type / timeframe can be named "best"
MIN_SAMPLE_SIZE: Final[int] = 5

# Std-dev of P/L percent at which the consistency score bottoms out
CONSISTENCY_MAX_STD: Final[float] = 20.0

# =============================================================================
# Fetch window
# =============================================================================
SWING_TIMEFRAMES: Final[frozenset[str]] = frozenset({TIMEFRAME_4H, TIMEFRAME_1D, TIMEFRAME_1W})

SWING_UNIVERSE: Final[frozenset[str]] = frozenset(
    symbol.strip().upper()
    for symbol in os.getenv("SWING_UNIVERSE", "").split(",")
    if symbol.strip()
)

SWING_LOOKBACK_YEARS: Final[float] = 0.5
DEFAULT_HISTORICAL_YEARS: Final[float] = float(os.getenv("DEFAULT_HISTORICAL_YEARS", "1"))

# =============================================================================
# Fetch retries, concurrency and caching
# =============================================================================
MAX_FETCH_ATTEMPTS: Final[int] = int(os.getenv("MAX_FETCH_ATTEMPTS", "3"))
FETCH_RETRY_BASE_DELAY: Final[float] = float(os.getenv("FETCH_RETRY_BASE_DELAY", "1.0"))
FETCH_WORKERS: Final[int] = int(os.getenv("FETCH_WORKERS", "4"))
BAR_CACHE_TTL_SECONDS: Final[float] = float(os.getenv("BAR_CACHE_TTL_SECONDS", "900"))
