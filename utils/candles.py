from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping

import pandas as pd

OHLC_COLUMNS = ["open", "high", "low", "close"]
BAR_COLUMNS = ["time", *OHLC_COLUMNS, "volume"]
INDICATOR_COLUMNS = ["rsi", "atr"]

_COLUMN_ALIASES: Mapping[str, str] = {
    "datetime": "time",
    "date": "time",
    "timestamp": "time",
    "adj close": "adj_close",
}


def to_utc_timestamp(value: Any) -> pd.Timestamp:
    """Convert a datetime-like value to a tz-aware UTC timestamp (naive = UTC)."""
    ts = pd.Timestamp(value)
    if ts.tzinfo is None:
        return ts.tz_localize("UTC")
    return ts.tz_convert("UTC")


def empty_bars() -> pd.DataFrame:
    """Return an empty frame with the bar column layout."""
    frame = pd.DataFrame(columns=BAR_COLUMNS)
    frame["time"] = pd.to_datetime(frame["time"], utc=True)
    return frame


def normalize_bars(
    df: pd.DataFrame | None,
    *,
    start: datetime | None = None,
    end: datetime | None = None,
) -> pd.DataFrame:
    """
    Bring a provider frame into the bar layout used by the simulator.

    Lower-cases column names, converts ``time`` to UTC, coerces prices to
    numbers, drops rows with missing OHLC, sorts by time and keeps only the
    last row for a duplicated timestamp so times are strictly increasing.
    Optionally clips the frame to ``[start, end]``.
    """
    if df is None or df.empty:
        return empty_bars()

    frame = df.copy()
    frame.columns = [_COLUMN_ALIASES.get(str(col).strip().lower(), str(col).strip().lower()) for col in frame.columns]

    if "time" not in frame.columns:
        frame = frame.reset_index()
        frame.columns = [_COLUMN_ALIASES.get(str(col).strip().lower(), str(col).strip().lower()) for col in frame.columns]
        if "time" not in frame.columns:
            raise ValueError("Bar frame has no time column")

    missing = [col for col in OHLC_COLUMNS if col not in frame.columns]
    if missing:
        raise ValueError(f"Bar frame is missing columns: {missing}")

    if "volume" not in frame.columns:
        frame["volume"] = 0.0

    frame["time"] = pd.to_datetime(frame["time"], utc=True, errors="coerce")
    numeric = [*OHLC_COLUMNS, "volume", *[col for col in INDICATOR_COLUMNS if col in frame.columns]]
    frame[numeric] = frame[numeric].apply(pd.to_numeric, errors="coerce")
    frame["volume"] = frame["volume"].fillna(0.0)

    frame = frame.dropna(subset=["time", *OHLC_COLUMNS])
    frame = frame.sort_values("time", kind="mergesort")
    frame = frame.drop_duplicates(subset="time", keep="last")

    if start is not None:
        frame = frame[frame["time"] >= to_utc_timestamp(start)]
    if end is not None:
        frame = frame[frame["time"] <= to_utc_timestamp(end)]

    keep = BAR_COLUMNS + [col for col in INDICATOR_COLUMNS if col in frame.columns]
    return frame[keep].reset_index(drop=True)


def resample_bars(df: pd.DataFrame, rule: str) -> pd.DataFrame:
    """Aggregate normalized bars into a coarser interval (e.g. 1h -> 4h)."""
    if df.empty:
        return df

    resampled = (
        df.set_index("time")
        .resample(rule, label="left", closed="left")
        .agg({"open": "first", "high": "max", "low": "min", "close": "last", "volume": "sum"})
        .dropna(subset=OHLC_COLUMNS)
        .reset_index()
    )
    return resampled
