"""Aggregate statistics over outcome records.

Everything here is a pure function of its input: callers pass a snapshot of
records and get freshly allocated results back. No-data records never enter
``total`` or any ratio; they are only counted in ``no_data_count``.
"""

from __future__ import annotations

import math
from collections import defaultdict
from typing import Callable, Iterable, Mapping, Sequence

import numpy as np

from configuration import (
    CONFIDENCE_BUCKETS,
    CONSISTENCY_MAX_STD,
    MIN_SAMPLE_SIZE,
    PROFIT_FACTOR_SENTINEL,
)
from utils.candles import to_utc_timestamp

from .constants import UNKNOWN_GROUP
from .models import BacktestStatistics, OutcomeRecord, StatisticsGroup


def aggregate_outcomes(records: Iterable[OutcomeRecord]) -> BacktestStatistics:
    """Compute overall statistics plus one group per pattern type, timeframe,
    direction and confidence bucket."""
    snapshot = tuple(records)

    by_pattern_type = _group_by(snapshot, _pattern_type_key)
    by_timeframe = _group_by(snapshot, _timeframe_key)

    return BacktestStatistics(
        overall=compute_group(snapshot),
        by_pattern_type=by_pattern_type,
        by_timeframe=by_timeframe,
        by_direction=_group_by(snapshot, _direction_key),
        by_confidence=_group_by(snapshot, lambda record: confidence_bucket(record.confidence_score)),
        best_pattern_type=_best_group(by_pattern_type),
        best_timeframe=_best_group(by_timeframe),
    )


def compute_group(records: Sequence[OutcomeRecord]) -> StatisticsGroup:
    """Summarize one set of records."""
    traded = [record for record in records if record.has_data]
    no_data_count = len(records) - len(traded)
    total = len(traded)

    if total == 0:
        return StatisticsGroup(no_data_count=no_data_count)

    winners = [record for record in traded if record.successful]
    losers = [record for record in traded if not record.successful]
    wins = len(winners)
    losses = len(losers)

    pl_values = [record.profit_loss_percent for record in traded]
    win_rate = wins / total
    avg_win = _mean([record.profit_loss_percent for record in winners])
    avg_loss = _mean([record.profit_loss_percent for record in losers])

    return StatisticsGroup(
        total=total,
        wins=wins,
        losses=losses,
        no_data_count=no_data_count,
        win_rate=win_rate,
        profit_factor=profit_factor(pl_values),
        avg_win_percent=avg_win,
        avg_loss_percent=avg_loss,
        avg_bars_to_exit=_mean([record.bars_to_exit for record in winners]),
        total_profit_loss_percent=float(sum(pl_values)),
        avg_profit_loss_percent=_mean(pl_values),
        max_profit_percent=max(max(pl_values), 0.0),
        max_loss_percent=min(min(pl_values), 0.0),
        expectancy=win_rate * avg_win + (1 - win_rate) * avg_loss,
        risk_reward_ratio=abs(avg_win / avg_loss) if avg_loss != 0 else 0.0,
        max_win_streak=_max_streak(traded, True),
        max_loss_streak=_max_streak(traded, False),
        consistency_score=consistency_score(pl_values),
        avg_confidence_score=_mean(
            [r.confidence_score for r in traded if math.isfinite(r.confidence_score) and r.confidence_score > 0]
        ),
        avg_rsi_at_entry=_mean([r.rsi_at_entry for r in traded if r.rsi_at_entry]),
        avg_atr_percent=_mean(
            [r.atr_at_entry / r.entry_price * 100 for r in traded if r.atr_at_entry and r.entry_price > 0]
        ),
        avg_max_adverse_excursion=_mean([record.max_adverse_excursion for record in traded]),
    )


def profit_factor(pl_values: Iterable[float]) -> float:
    """
    Gross profit over gross loss magnitude.

    Returns PROFIT_FACTOR_SENTINEL when there is profit but no loss, and 0
    when there is neither.
    """
    values = list(pl_values)
    gross_profit = sum(value for value in values if value > 0)
    gross_loss = abs(sum(value for value in values if value < 0))

    if gross_loss == 0:
        return PROFIT_FACTOR_SENTINEL if gross_profit > 0 else 0.0
    return gross_profit / gross_loss


def consistency_score(pl_values: Sequence[float]) -> float:
    """0-100; 100 means every trade returned the same percent."""
    if not pl_values:
        return 0.0
    std = float(np.std(pl_values))
    return 100 * (1 - min(std, CONSISTENCY_MAX_STD) / CONSISTENCY_MAX_STD)


def confidence_bucket(score: float) -> str:
    """Map a 0-100 confidence score to its bucket label (boundaries go low).

    A non-finite score counts as 0, like a missing one.
    """
    if not math.isfinite(score):
        score = 0.0
    clamped = min(max(score, 0.0), 100.0)
    for label, upper in CONFIDENCE_BUCKETS:
        if clamped <= upper:
            return label
    return CONFIDENCE_BUCKETS[-1][0]


def _group_by(
    records: Sequence[OutcomeRecord], key: Callable[[OutcomeRecord], str]
) -> dict[str, StatisticsGroup]:
    buckets: dict[str, list[OutcomeRecord]] = defaultdict(list)
    for record in records:
        buckets[key(record)].append(record)
    return {name: compute_group(buckets[name]) for name in sorted(buckets)}


def _best_group(groups: Mapping[str, StatisticsGroup]) -> str | None:
    best_name = None
    best_rate = 0.0
    for name, group in groups.items():
        if group.total >= MIN_SAMPLE_SIZE and group.win_rate > best_rate:
            best_name = name
            best_rate = group.win_rate
    return best_name


def _max_streak(records: Sequence[OutcomeRecord], successful: bool) -> int:
    ordered = sorted(records, key=lambda record: to_utc_timestamp(record.entry_date))
    best = current = 0
    for record in ordered:
        if record.successful == successful:
            current += 1
            best = max(best, current)
        else:
            current = 0
    return best


def _pattern_type_key(record: OutcomeRecord) -> str:
    return record.pattern_type or UNKNOWN_GROUP


def _timeframe_key(record: OutcomeRecord) -> str:
    return record.timeframe or UNKNOWN_GROUP


def _direction_key(record: OutcomeRecord) -> str:
    return record.direction.value


def _mean(values: Sequence[float]) -> float:
    return float(sum(values) / len(values)) if values else 0.0
