"""Locates the bar a pattern's simulation starts from."""

from __future__ import annotations

from datetime import datetime

import numpy as np
import pandas as pd

from configuration import ALIGNMENT_TOLERANCE_BARS, timeframe_duration
from utils.candles import to_utc_timestamp


def _utc_times(bars: pd.DataFrame) -> pd.Series:
    times = pd.to_datetime(bars["time"])
    if times.dt.tz is None:
        return times.dt.tz_localize("UTC")
    return times.dt.tz_convert("UTC")


def find_closest_bar_index(bars: pd.DataFrame, target_time: datetime) -> int | None:
    """
    Return the index of the bar whose time is closest to ``target_time``.

    Ties resolve to the earlier bar. Returns None for an empty series.
    """
    if bars is None or bars.empty:
        return None

    distances = (_utc_times(bars) - to_utc_timestamp(target_time)).abs().to_numpy()

    # argmin returns the first occurrence, i.e. the earlier bar on a tie
    return int(np.argmin(distances))


def align_entry(
    bars: pd.DataFrame,
    target_time: datetime,
    timeframe: str,
    tolerance_bars: int = ALIGNMENT_TOLERANCE_BARS,
) -> int | None:
    """
    Return the entry index for a pattern detected at ``target_time``.

    None when the series is empty or when ``target_time`` falls outside the
    series by more than ``tolerance_bars`` bars of ``timeframe``.
    """
    if bars is None or bars.empty:
        return None

    target = to_utc_timestamp(target_time)
    tolerance = pd.Timedelta(timeframe_duration(timeframe) * tolerance_bars)

    times = _utc_times(bars)
    if target < times.iloc[0] - tolerance or target > times.iloc[-1] + tolerance:
        return None

    return find_closest_bar_index(bars, target)
