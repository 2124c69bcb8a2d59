from __future__ import annotations

from datetime import datetime

import pandas as pd
import requests

from configuration import (
    REQUEST_TIMEOUT_SECONDS,
    TWELVEDATA_API_KEY,
    TWELVEDATA_BASE_URL,
    TWELVEDATA_INTERVALS,
    TWELVEDATA_MAX_OUTPUTSIZE,
    normalize_timeframe,
)
from logger import get_logger

logger = get_logger(__name__)


class TwelveDataAPIError(Exception):
    """Raised when the Twelve Data API returns an unexpected response."""


def _format_symbol(symbol: str) -> str:
    """Convert an internal forex symbol to the Twelve Data format; stocks pass through."""

    if "/" in symbol:
        return symbol.upper()

    cleaned = symbol.strip().upper()
    if len(cleaned) == 6 and cleaned.isalpha() and cleaned.endswith(("USD", "JPY", "EUR", "GBP", "CHF", "CAD", "AUD", "NZD")):
        return f"{cleaned[:3]}/{cleaned[3:]}"

    return cleaned


def _is_no_data_error(payload: dict) -> bool:
    message = str(payload.get("message", "")).lower()
    return payload.get("code") == 400 and "no data" in message


def fetch_twelvedata_bars(
    symbol: str,
    timeframe: str,
    from_date: datetime,
    to_date: datetime,
) -> pd.DataFrame:
    """Fetch historical bars for ``symbol`` between two dates from Twelve Data.

    Returns:
        Raw frame with ``time``/OHLC(V) columns, ascending. Empty when the
        provider has no bars for the window.

    Raises:
        TwelveDataAPIError: If the API key is missing, the timeframe has no
            Twelve Data interval, or the request fails.
    """

    if not TWELVEDATA_API_KEY:
        raise TwelveDataAPIError("TWELVEDATA_API_KEY environment variable is not set.")

    canonical = normalize_timeframe(timeframe)
    interval = TWELVEDATA_INTERVALS.get(canonical) if canonical else None
    if interval is None:
        raise TwelveDataAPIError(f"No Twelve Data interval for timeframe {timeframe!r}")

    params = {
        "symbol": _format_symbol(symbol),
        "interval": interval,
        "start_date": from_date.strftime("%Y-%m-%d %H:%M:%S"),
        "end_date": to_date.strftime("%Y-%m-%d %H:%M:%S"),
        "outputsize": TWELVEDATA_MAX_OUTPUTSIZE,
        "order": "ASC",
        "timezone": "UTC",
        "format": "JSON",
        "apikey": TWELVEDATA_API_KEY,
    }

    try:
        response = requests.get(
            f"{TWELVEDATA_BASE_URL.rstrip('/')}/time_series",
            params=params,
            timeout=REQUEST_TIMEOUT_SECONDS,
        )
        response.raise_for_status()
    except requests.RequestException as request_error:
        raise TwelveDataAPIError(
            f"Request to Twelve Data failed: {request_error}"
        ) from request_error

    payload = response.json()

    if payload.get("status") == "error":
        if _is_no_data_error(payload):
            logger.info("TwelveData has no bars for %s (%s)", symbol, interval)
            return pd.DataFrame()
        message = payload.get("message", "Unknown error")
        code = payload.get("code")
        raise TwelveDataAPIError(f"Twelve Data error ({code}): {message}")

    values = payload.get("values")
    if not values:
        return pd.DataFrame()

    df = pd.DataFrame(values)
    if len(df) >= TWELVEDATA_MAX_OUTPUTSIZE:
        # Capped response: the window may not reach back to every detection
        logger.warning(
            "TWELVEDATA_ROW_CAP|symbol=%s|interval=%s|rows=%d|first=%s|last=%s|requested_from=%s",
            symbol,
            interval,
            len(df),
            df["datetime"].iloc[0] if "datetime" in df.columns else None,
            df["datetime"].iloc[-1] if "datetime" in df.columns else None,
            params["start_date"],
        )
    return df.rename(columns={"datetime": "time"})
