"""Fetches historical bars for outcome computation.

Policy only: which window to ask for, which source to ask first, how often
to retry. The actual network/storage access lives in ``externals``.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Iterable

import pandas as pd

from configuration import (
    DEFAULT_HISTORICAL_YEARS,
    FALLBACK_DATA_SOURCE,
    FETCH_RETRY_BASE_DELAY,
    MAX_FETCH_ATTEMPTS,
    PRIMARY_DATA_SOURCE,
    SWING_LOOKBACK_YEARS,
    SWING_TIMEFRAMES,
    SWING_UNIVERSE,
)
from externals.data_fetcher import BarSource, build_bar_source
from logger import get_logger
from models.market import PredictedPattern
from utils.candles import normalize_bars, to_utc_timestamp
from utils.indicators import attach_indicators

from .candle_cache import BarSeriesCache
from .constants import DataSourceTag

logger = get_logger(__name__)

DAYS_PER_YEAR = 365


class DataUnavailableError(Exception):
    """Raised when no source could deliver bars for a symbol/timeframe."""


@dataclass(frozen=True)
class FetchedSeries:
    bars: pd.DataFrame
    data_source: DataSourceTag


def lookback_years(symbol: str, timeframe: str, historical_years: float) -> float:
    """Swing timeframes and the swing universe only look back half a year."""
    if timeframe in SWING_TIMEFRAMES or symbol.upper() in SWING_UNIVERSE:
        return SWING_LOOKBACK_YEARS
    return historical_years


def fetch_window(
    patterns: Iterable[PredictedPattern],
    as_of: datetime,
    historical_years: float = DEFAULT_HISTORICAL_YEARS,
) -> tuple[datetime, datetime]:
    """
    Window covering every pattern of one (symbol, timeframe) group.

    Starts ``lookback`` before the earliest detection and ends at ``as_of``.
    """
    group = list(patterns)
    if not group:
        raise ValueError("fetch_window needs at least one pattern")

    first = group[0]
    years = lookback_years(first.symbol, first.timeframe, historical_years)
    earliest = min(to_utc_timestamp(pattern.detected_at) for pattern in group)

    from_date = earliest.to_pydatetime() - timedelta(days=round(DAYS_PER_YEAR * years))
    to_date = to_utc_timestamp(as_of).to_pydatetime()
    return from_date, max(to_date, earliest.to_pydatetime())


class CandleFetcher:
    """
    Primary/fallback bar retrieval with bounded exponential backoff.

    A source that raises is retried up to ``max_attempts`` times, sleeping
    ``base_delay * 2 ** attempt`` between attempts. An empty series is taken
    as the source's final answer and is not retried. When the primary source
    gives nothing the fallback is tried under the same policy.
    """

    def __init__(
        self,
        primary: BarSource | None,
        fallback: BarSource | None = None,
        *,
        cache: BarSeriesCache | None = None,
        max_attempts: int = MAX_FETCH_ATTEMPTS,
        base_delay: float = FETCH_RETRY_BASE_DELAY,
        sleep: Callable[[float], None] = time.sleep,
        with_indicators: bool = True,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._primary = primary
        self._fallback = fallback
        self._cache = cache
        self._max_attempts = max_attempts
        self._base_delay = base_delay
        self._sleep = sleep
        self._with_indicators = with_indicators

    def fetch(
        self, symbol: str, timeframe: str, from_date: datetime, to_date: datetime
    ) -> FetchedSeries:
        """
        Return bars for the window, tagged with the source that served them.

        Raises:
            DataUnavailableError: If neither source produced any bars.
        """
        if self._cache is not None:
            cached = self._cache.get(symbol, timeframe, from_date, to_date)
            if cached is not None:
                logger.debug("BAR_CACHE_HIT|symbol=%s|timeframe=%s", symbol, timeframe)
                return FetchedSeries(
                    bars=normalize_bars(cached.bars, start=from_date, end=to_date),
                    data_source=cached.data_source,
                )

        for source, tag in (
            (self._primary, DataSourceTag.PRIMARY),
            (self._fallback, DataSourceTag.FALLBACK),
        ):
            if source is None:
                continue

            try:
                bars = self._fetch_with_retry(source, tag, symbol, timeframe, from_date, to_date)
            except Exception as exc:
                logger.warning(
                    "FETCH_FAILED|source=%s|symbol=%s|timeframe=%s|error=%s",
                    tag.value,
                    symbol,
                    timeframe,
                    exc,
                )
                continue

            if bars.empty:
                logger.info(
                    "FETCH_EMPTY|source=%s|symbol=%s|timeframe=%s", tag.value, symbol, timeframe
                )
                continue

            if self._cache is not None:
                self._cache.put(symbol, timeframe, bars, tag, from_date, to_date)
            return FetchedSeries(bars=bars, data_source=tag)

        raise DataUnavailableError(f"No bars for {symbol} {timeframe} from any source")

    def _fetch_with_retry(
        self,
        source: BarSource,
        tag: DataSourceTag,
        symbol: str,
        timeframe: str,
        from_date: datetime,
        to_date: datetime,
    ) -> pd.DataFrame:
        last_exception = None

        for attempt in range(self._max_attempts):
            try:
                raw = source(symbol, timeframe, from_date, to_date)
                return self._prepare(raw, from_date, to_date)
            except Exception as exc:
                last_exception = exc
                if attempt == self._max_attempts - 1:
                    raise

                delay = self._base_delay * (2**attempt)
                logger.warning(
                    "FETCH_RETRY|source=%s|symbol=%s|timeframe=%s|attempt=%d|max=%d|delay=%.2f|error=%s",
                    tag.value,
                    symbol,
                    timeframe,
                    attempt + 1,
                    self._max_attempts,
                    delay,
                    exc,
                )
                self._sleep(delay)

        raise last_exception

    def _prepare(
        self, raw: pd.DataFrame | None, from_date: datetime, to_date: datetime
    ) -> pd.DataFrame:
        bars = normalize_bars(raw)
        if bars.empty:
            return bars
        if self._with_indicators:
            bars = attach_indicators(bars)
        # Indicators are computed on the full series before clipping so the
        # first bars of the window are already warmed up
        return normalize_bars(bars, start=from_date, end=to_date)


def build_default_fetcher(cache: BarSeriesCache | None = None) -> CandleFetcher:
    """Fetcher wired to the configured primary/fallback sources."""
    return CandleFetcher(
        primary=build_bar_source(PRIMARY_DATA_SOURCE),
        fallback=build_bar_source(FALLBACK_DATA_SOURCE),
        cache=cache if cache is not None else BarSeriesCache(),
    )
