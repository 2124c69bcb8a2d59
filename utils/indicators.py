"""Technical indicator utilities."""

from __future__ import annotations

import pandas as pd
from ta.momentum import RSIIndicator
from ta.volatility import AverageTrueRange

RSI_LENGTH = 14
ATR_LENGTH = 14


def attach_indicators(df: pd.DataFrame) -> pd.DataFrame:
    """Return a copy of ``df`` with ``rsi`` and ``atr`` columns.

    Columns the provider already supplied are left untouched. Series shorter
    than the indicator window get an all-NaN column.
    """
    frame = df.copy()

    if "rsi" not in frame.columns:
        if len(frame) > RSI_LENGTH:
            frame["rsi"] = RSIIndicator(frame["close"], window=RSI_LENGTH).rsi()
        else:
            frame["rsi"] = float("nan")

    if "atr" not in frame.columns:
        if len(frame) > ATR_LENGTH:
            atr = AverageTrueRange(
                frame["high"], frame["low"], frame["close"], window=ATR_LENGTH
            ).average_true_range()
            # ta fills the warm-up rows with zeros
            frame["atr"] = atr.where(atr > 0)
        else:
            frame["atr"] = float("nan")

    return frame
