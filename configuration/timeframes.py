"""Timeframe labels, bar durations and provider interval codes."""
from __future__ import annotations

from datetime import timedelta
from typing import Final, Mapping

TIMEFRAME_1M: Final[str] = "1m"
TIMEFRAME_5M: Final[str] = "5m"
TIMEFRAME_15M: Final[str] = "15m"
TIMEFRAME_30M: Final[str] = "30m"
TIMEFRAME_1H: Final[str] = "1h"
TIMEFRAME_4H: Final[str] = "4h"
TIMEFRAME_1D: Final[str] = "1d"
TIMEFRAME_1W: Final[str] = "1w"

TIMEFRAME_DURATIONS: Final[Mapping[str, timedelta]] = {
    TIMEFRAME_1M: timedelta(minutes=1),
    TIMEFRAME_5M: timedelta(minutes=5),
    TIMEFRAME_15M: timedelta(minutes=15),
    TIMEFRAME_30M: timedelta(minutes=30),
    TIMEFRAME_1H: timedelta(hours=1),
    TIMEFRAME_4H: timedelta(hours=4),
    TIMEFRAME_1D: timedelta(days=1),
    TIMEFRAME_1W: timedelta(weeks=1),
}

# Labels seen in detector output that map onto the canonical set
_ALIASES: Final[Mapping[str, str]] = {
    "1min": TIMEFRAME_1M,
    "5min": TIMEFRAME_5M,
    "15min": TIMEFRAME_15M,
    "30min": TIMEFRAME_30M,
    "60m": TIMEFRAME_1H,
    "1hour": TIMEFRAME_1H,
    "4hour": TIMEFRAME_4H,
    "1day": TIMEFRAME_1D,
    "daily": TIMEFRAME_1D,
    "1wk": TIMEFRAME_1W,
    "1week": TIMEFRAME_1W,
    "weekly": TIMEFRAME_1W,
}

TWELVEDATA_INTERVALS: Final[Mapping[str, str]] = {
    TIMEFRAME_1M: "1min",
    TIMEFRAME_5M: "5min",
    TIMEFRAME_15M: "15min",
    TIMEFRAME_30M: "30min",
    TIMEFRAME_1H: "1h",
    TIMEFRAME_4H: "4h",
    TIMEFRAME_1D: "1day",
    TIMEFRAME_1W: "1week",
}

# Yahoo has no 4h interval; 4h is resampled from 1h
YAHOO_INTERVALS: Final[Mapping[str, str]] = {
    TIMEFRAME_1M: "1m",
    TIMEFRAME_5M: "5m",
    TIMEFRAME_15M: "15m",
    TIMEFRAME_30M: "30m",
    TIMEFRAME_1H: "60m",
    TIMEFRAME_4H: "60m",
    TIMEFRAME_1D: "1d",
    TIMEFRAME_1W: "1wk",
}


def normalize_timeframe(label: str) -> str | None:
    """Return the canonical timeframe label, or None if it is not supported."""
    if not isinstance(label, str):
        return None
    cleaned = label.strip().lower()
    cleaned = _ALIASES.get(cleaned, cleaned)
    return cleaned if cleaned in TIMEFRAME_DURATIONS else None


def timeframe_duration(timeframe: str) -> timedelta:
    canonical = normalize_timeframe(timeframe)
    if canonical is None:
        raise ValueError(f"Unsupported timeframe {timeframe!r}")
    return TIMEFRAME_DURATIONS[canonical]
