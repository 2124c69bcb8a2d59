"""In-memory cache of fetched bar series, keyed by (symbol, timeframe)."""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

import pandas as pd

from configuration import BAR_CACHE_TTL_SECONDS
from utils.candles import to_utc_timestamp

from .constants import DataSourceTag


@dataclass(frozen=True)
class CachedSeries:
    bars: pd.DataFrame
    data_source: DataSourceTag
    from_date: pd.Timestamp
    to_date: pd.Timestamp
    stored_at: float

    def covers(self, from_date: datetime, to_date: datetime) -> bool:
        return self.from_date <= to_utc_timestamp(from_date) and self.to_date >= to_utc_timestamp(to_date)


class BarSeriesCache:
    """
    Holds fetched series for one owner (usually one batch run).

    An entry is served only while younger than ``ttl_seconds`` and only if
    its window covers the requested one. Safe to share between worker
    threads.
    """

    def __init__(
        self,
        ttl_seconds: float = BAR_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[tuple[str, str], CachedSeries] = {}
        self._lock = threading.Lock()

    def get(
        self, symbol: str, timeframe: str, from_date: datetime, to_date: datetime
    ) -> CachedSeries | None:
        key = (symbol, timeframe)
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() - entry.stored_at > self._ttl:
                del self._entries[key]
                return None
            if not entry.covers(from_date, to_date):
                return None
            return entry

    def put(
        self,
        symbol: str,
        timeframe: str,
        bars: pd.DataFrame,
        data_source: DataSourceTag,
        from_date: datetime,
        to_date: datetime,
    ) -> CachedSeries:
        entry = CachedSeries(
            bars=bars,
            data_source=data_source,
            from_date=to_utc_timestamp(from_date),
            to_date=to_utc_timestamp(to_date),
            stored_at=self._clock(),
        )
        with self._lock:
            self._entries[(symbol, timeframe)] = entry
        return entry

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
