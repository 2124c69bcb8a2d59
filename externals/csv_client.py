from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pandas as pd

from configuration import CSV_DATA_DIR, normalize_timeframe
from utils.candles import normalize_bars


class CsvBarSource:
    """Reads bars from ``<data_dir>/<SYMBOL>_<timeframe>.csv`` (or ``<SYMBOL>.csv``).

    Files need a time column (``time``/``date``/``datetime``) and OHLC
    columns; volume and indicator columns are optional.
    """

    def __init__(self, data_dir: str | Path = CSV_DATA_DIR):
        self._data_dir = Path(data_dir)

    def _candidate_paths(self, symbol: str, timeframe: str) -> list[Path]:
        canonical = normalize_timeframe(timeframe) or timeframe
        base = symbol.strip().upper()
        return [
            self._data_dir / f"{base}_{canonical}.csv",
            self._data_dir / f"{base}.csv",
        ]

    def __call__(
        self,
        symbol: str,
        timeframe: str,
        from_date: datetime,
        to_date: datetime,
    ) -> pd.DataFrame:
        for path in self._candidate_paths(symbol, timeframe):
            if path.exists():
                return normalize_bars(pd.read_csv(path), start=from_date, end=to_date)
        return pd.DataFrame()
