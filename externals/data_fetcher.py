from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

import pandas as pd

from configuration import (
    SOURCE_CSV,
    SOURCE_NONE,
    SOURCE_TWELVEDATA,
    SOURCE_YAHOO,
)


class BarSource(Protocol):
    """Anything that returns historical bars for a symbol/timeframe window.

    Implementations may raise on transport errors or return an empty frame
    when the provider has nothing; callers treat both as "no bars".
    """

    def __call__(
        self,
        symbol: str,
        timeframe: str,
        from_date: datetime,
        to_date: datetime,
    ) -> Optional[pd.DataFrame]: ...


def build_bar_source(name: str) -> BarSource | None:
    """Return the bar source registered under ``name`` (``None`` for NONE)."""

    provider = (name or SOURCE_NONE).upper()

    if provider == SOURCE_TWELVEDATA:
        from externals.twelvedata_client import fetch_twelvedata_bars

        return fetch_twelvedata_bars
    if provider == SOURCE_YAHOO:
        from externals.yahoo_client import fetch_yahoo_bars

        return fetch_yahoo_bars
    if provider == SOURCE_CSV:
        from externals.csv_client import CsvBarSource

        return CsvBarSource()
    if provider == SOURCE_NONE:
        return None

    raise ValueError(f"Unsupported data source {name!r}")
