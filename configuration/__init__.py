import core.env  # noqa: F401  (loads .env before any getenv below)

from .backtest_config import (
    ALIGNMENT_TOLERANCE_BARS,
    BAR_CACHE_TTL_SECONDS,
    CONFIDENCE_BUCKETS,
    CONSISTENCY_MAX_STD,
    DEFAULT_HISTORICAL_YEARS,
    FETCH_RETRY_BASE_DELAY,
    FETCH_WORKERS,
    MAX_FETCH_ATTEMPTS,
    MIN_SAMPLE_SIZE,
    OUTCOME_WINDOW_BARS,
    PROFIT_FACTOR_SENTINEL,
    SWING_LOOKBACK_YEARS,
    SWING_TIMEFRAMES,
    SWING_UNIVERSE,
)
from .data_source_config import (
    CSV_DATA_DIR,
    FALLBACK_DATA_SOURCE,
    PRIMARY_DATA_SOURCE,
    REQUEST_TIMEOUT_SECONDS,
    SOURCE_CSV,
    SOURCE_NONE,
    SOURCE_TWELVEDATA,
    SOURCE_YAHOO,
    TWELVEDATA_API_KEY,
    TWELVEDATA_BASE_URL,
    TWELVEDATA_MAX_OUTPUTSIZE,
)
from .timeframes import (
    TIMEFRAME_DURATIONS,
    TWELVEDATA_INTERVALS,
    YAHOO_INTERVALS,
    normalize_timeframe,
    timeframe_duration,
)

__all__ = [
    "ALIGNMENT_TOLERANCE_BARS",
    "BAR_CACHE_TTL_SECONDS",
    "CONFIDENCE_BUCKETS",
    "CONSISTENCY_MAX_STD",
    "DEFAULT_HISTORICAL_YEARS",
    "FETCH_RETRY_BASE_DELAY",
    "FETCH_WORKERS",
    "MAX_FETCH_ATTEMPTS",
    "MIN_SAMPLE_SIZE",
    "OUTCOME_WINDOW_BARS",
    "PROFIT_FACTOR_SENTINEL",
    "SWING_LOOKBACK_YEARS",
    "SWING_TIMEFRAMES",
    "SWING_UNIVERSE",
    "CSV_DATA_DIR",
    "FALLBACK_DATA_SOURCE",
    "PRIMARY_DATA_SOURCE",
    "REQUEST_TIMEOUT_SECONDS",
    "SOURCE_CSV",
    "SOURCE_NONE",
    "SOURCE_TWELVEDATA",
    "SOURCE_YAHOO",
    "TWELVEDATA_API_KEY",
    "TWELVEDATA_BASE_URL",
    "TWELVEDATA_MAX_OUTPUTSIZE",
    "TIMEFRAME_DURATIONS",
    "TWELVEDATA_INTERVALS",
    "YAHOO_INTERVALS",
    "normalize_timeframe",
    "timeframe_duration",
]
