"""Data source selection and provider-specific configuration."""
from __future__ import annotations

import os
from typing import Final, Literal

DataSourceName = Literal["TWELVEDATA", "YAHOO", "CSV", "NONE"]

SOURCE_TWELVEDATA: Final[DataSourceName] = "TWELVEDATA"
SOURCE_YAHOO: Final[DataSourceName] = "YAHOO"
SOURCE_CSV: Final[DataSourceName] = "CSV"
SOURCE_NONE: Final[DataSourceName] = "NONE"

PRIMARY_DATA_SOURCE: DataSourceName = os.getenv("PRIMARY_DATA_SOURCE", SOURCE_TWELVEDATA).upper()  # type: ignore[assignment]
FALLBACK_DATA_SOURCE: DataSourceName = os.getenv("FALLBACK_DATA_SOURCE", SOURCE_YAHOO).upper()  # type: ignore[assignment]

TWELVEDATA_API_KEY: str | None = os.getenv("TWELVEDATA_API_KEY")
TWELVEDATA_BASE_URL: str = os.getenv("TWELVEDATA_BASE_URL", "https://api.twelvedata.com")
# TwelveData caps a single time_series response at 5000 rows
TWELVEDATA_MAX_OUTPUTSIZE: Final[int] = 5000

CSV_DATA_DIR: str = os.getenv("CSV_DATA_DIR", "data")

REQUEST_TIMEOUT_SECONDS: float = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "15"))
