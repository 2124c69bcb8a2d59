from __future__ import annotations

from datetime import datetime, timedelta

import pandas as pd
import yfinance as yf

from configuration import YAHOO_INTERVALS, normalize_timeframe
from configuration.timeframes import TIMEFRAME_4H
from utils.candles import normalize_bars, resample_bars


class YahooDataError(Exception):
    """Raised when Yahoo Finance cannot serve a request."""


def _flatten_columns(data: pd.DataFrame) -> pd.DataFrame:
    # yfinance may return MultiIndex columns with a ticker level
    if isinstance(data.columns, pd.MultiIndex):
        new_cols = []
        for c in data.columns:
            if c[0] and c[0] != "":
                new_cols.append(c[0])
            else:
                new_cols.append(c[1])
        data.columns = new_cols
    return data


def fetch_yahoo_bars(
    symbol: str,
    timeframe: str,
    from_date: datetime,
    to_date: datetime,
) -> pd.DataFrame:
    """Fetch historical bars for ``symbol`` from Yahoo Finance.

    ``4h`` bars are built by resampling ``60m`` bars since Yahoo has no 4h
    interval.
    """
    canonical = normalize_timeframe(timeframe)
    interval = YAHOO_INTERVALS.get(canonical) if canonical else None
    if interval is None:
        raise YahooDataError(f"No Yahoo interval for timeframe {timeframe!r}")

    try:
        data = yf.download(
            symbol,
            start=from_date,
            # Yahoo treats ``end`` as exclusive
            end=to_date + timedelta(days=1),
            interval=interval,
            progress=False,
            auto_adjust=False,
            threads=False,
        )
    except Exception as exc:  # yfinance surfaces transport errors as bare exceptions
        raise YahooDataError(f"Yahoo download failed for {symbol}: {exc}") from exc

    if data is None or data.empty:
        return pd.DataFrame()

    data = _flatten_columns(data).reset_index()

    if canonical == TIMEFRAME_4H:
        return resample_bars(normalize_bars(data), "4h")
    return data
