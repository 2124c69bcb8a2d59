"""Bar-by-bar replay of a predicted pattern against historical bars."""

from __future__ import annotations

from datetime import datetime

import pandas as pd

from configuration import OUTCOME_WINDOW_BARS
from models.market import PredictedPattern

from .bar_aligner import align_entry
from .constants import DataSourceTag, OutcomeStatus
from .models import OutcomeRecord


def simulate_outcome(
    pattern: PredictedPattern,
    bars: pd.DataFrame,
    entry_index: int,
    data_source: DataSourceTag = DataSourceTag.PRIMARY,
    max_bars: int = OUTCOME_WINDOW_BARS,
) -> OutcomeRecord:
    """
    Replay ``pattern`` over ``bars`` starting at the bar after ``entry_index``.

    Entry price and date come from the aligned bar, not from the pattern.
    On every bar the target is checked before the stop, so a bar that
    touches both resolves as a win. Without a hit the trade is closed at the
    close of bar ``entry_index + max_bars``, or of the last available bar if
    the series ends sooner.

    Args:
        pattern: The predicted pattern
        bars: Normalized bar frame (``time``, OHLC, optional ``rsi``/``atr``)
        entry_index: Aligned entry bar (see ``bar_aligner.align_entry``)
        data_source: Tag of the source ``bars`` came from
        max_bars: Forced exit horizon in bars

    Returns:
        OutcomeRecord for the pattern
    """
    if not 0 <= entry_index < len(bars):
        raise IndexError(f"entry_index {entry_index} outside series of {len(bars)} bars")

    is_long = pattern.is_long
    highs = bars["high"].to_numpy(dtype=float)
    lows = bars["low"].to_numpy(dtype=float)
    closes = bars["close"].to_numpy(dtype=float)

    entry_price = float(closes[entry_index])
    target_price = pattern.target_price
    stop_price = pattern.stop_loss

    exit_index: int | None = None
    exit_price = entry_price
    successful = False
    status = OutcomeStatus.TIMED_OUT
    max_adverse = 0.0

    for i in range(entry_index + 1, len(bars)):
        high = highs[i]
        low = lows[i]

        max_adverse = max(
            max_adverse, _adverse_excursion_percent(high, low, entry_price, is_long)
        )

        if _is_target_hit(high, low, target_price, is_long):
            exit_index, exit_price = i, target_price
            successful = True
            status = OutcomeStatus.TARGET_HIT
            break

        if _is_stop_hit(high, low, stop_price, is_long):
            exit_index, exit_price = i, stop_price
            status = OutcomeStatus.STOP_HIT
            break

        if i - entry_index >= max_bars:
            exit_index, exit_price = i, float(closes[i])
            successful = _closed_beyond_entry(exit_price, entry_price, is_long)
            break

    if exit_index is None:
        # Series ran out before any exit condition
        exit_index = len(bars) - 1
        exit_price = float(closes[exit_index])
        successful = _closed_beyond_entry(exit_price, entry_price, is_long)

    profit_loss = exit_price - entry_price if is_long else entry_price - exit_price

    return OutcomeRecord(
        pattern_id=pattern.id,
        symbol=pattern.symbol,
        pattern_type=pattern.pattern_type,
        timeframe=pattern.timeframe,
        direction=pattern.direction,
        confidence_score=pattern.confidence_score,
        entry_price=entry_price,
        entry_date=_bar_time(bars, entry_index),
        exit_price=exit_price,
        exit_date=_bar_time(bars, exit_index),
        target_price=target_price,
        stop_loss=stop_price,
        profit_loss=profit_loss,
        profit_loss_percent=profit_loss / entry_price * 100,
        bars_to_exit=exit_index - entry_index,
        max_adverse_excursion=max_adverse,
        successful=successful,
        status=status,
        data_source=data_source,
        rsi_at_entry=_indicator_at(bars, "rsi", entry_index),
        atr_at_entry=_indicator_at(bars, "atr", entry_index),
        risk_reward_ratio=pattern.risk_reward_ratio,
    )


def build_no_data_outcome(pattern: PredictedPattern) -> OutcomeRecord:
    """Sentinel record for a valid pattern that had no usable price history."""
    return OutcomeRecord(
        pattern_id=pattern.id,
        symbol=pattern.symbol,
        pattern_type=pattern.pattern_type,
        timeframe=pattern.timeframe,
        direction=pattern.direction,
        confidence_score=pattern.confidence_score,
        entry_price=pattern.entry_price,
        entry_date=pattern.detected_at,
        exit_price=pattern.entry_price,
        exit_date=pattern.detected_at,
        target_price=pattern.target_price,
        stop_loss=pattern.stop_loss,
        profit_loss=0.0,
        profit_loss_percent=0.0,
        bars_to_exit=0,
        max_adverse_excursion=0.0,
        successful=False,
        status=OutcomeStatus.NO_DATA,
        data_source=DataSourceTag.NONE,
        risk_reward_ratio=pattern.risk_reward_ratio,
    )


def replay_pattern(
    pattern: PredictedPattern,
    bars: pd.DataFrame | None,
    data_source: DataSourceTag,
    max_bars: int = OUTCOME_WINDOW_BARS,
) -> OutcomeRecord:
    """
    Align and simulate one pattern; unusable series produce a no-data record.

    A series is unusable when it is empty, when the detection time cannot be
    aligned within tolerance, or when the aligned close is not positive.
    """
    if bars is None or bars.empty or data_source is DataSourceTag.NONE:
        return build_no_data_outcome(pattern)

    entry_index = align_entry(bars, pattern.detected_at, pattern.timeframe)
    if entry_index is None:
        return build_no_data_outcome(pattern)

    if not float(bars["close"].iloc[entry_index]) > 0:
        return build_no_data_outcome(pattern)

    return simulate_outcome(pattern, bars, entry_index, data_source, max_bars)


def _adverse_excursion_percent(
    high: float, low: float, entry_price: float, is_long: bool
) -> float:
    """Unrealized loss on this bar as a percent of entry (never negative)."""
    if is_long:
        return (entry_price - min(low, entry_price)) / entry_price * 100
    return (max(high, entry_price) - entry_price) / entry_price * 100


def _is_target_hit(high: float, low: float, target_price: float, is_long: bool) -> bool:
    if is_long:
        return high >= target_price
    return low <= target_price


def _is_stop_hit(high: float, low: float, stop_price: float, is_long: bool) -> bool:
    if is_long:
        return low <= stop_price
    return high >= stop_price


def _closed_beyond_entry(close: float, entry_price: float, is_long: bool) -> bool:
    if is_long:
        return close > entry_price
    return close < entry_price


def _bar_time(bars: pd.DataFrame, index: int) -> datetime:
    value = bars["time"].iloc[index]
    if hasattr(value, "to_pydatetime"):
        return value.to_pydatetime()
    return value


def _indicator_at(bars: pd.DataFrame, column: str, index: int) -> float | None:
    if column not in bars.columns:
        return None
    value = bars[column].iloc[index]
    if pd.isna(value):
        return None
    return float(value)
