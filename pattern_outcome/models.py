"""Data models for pattern outcome computation."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping

from models.market import PredictedPattern, TradeDirection

from .constants import DataSourceTag, OutcomeStatus


@dataclass(frozen=True)
class OutcomeRecord:
    """Realized result of one predicted pattern replayed against history."""

    pattern_id: str
    symbol: str
    pattern_type: str
    timeframe: str
    direction: TradeDirection
    confidence_score: float
    entry_price: float
    entry_date: datetime
    exit_price: float
    exit_date: datetime
    target_price: float
    stop_loss: float
    profit_loss: float
    profit_loss_percent: float
    bars_to_exit: int
    max_adverse_excursion: float  # percent of entry
    successful: bool
    status: OutcomeStatus
    data_source: DataSourceTag
    rsi_at_entry: float | None = None
    atr_at_entry: float | None = None
    risk_reward_ratio: float = 0.0

    @property
    def has_data(self) -> bool:
        return self.status is not OutcomeStatus.NO_DATA

    @property
    def actual_direction(self) -> TradeDirection | None:
        """Direction price actually resolved in; None when there was no data."""
        if not self.has_data:
            return None
        return self.direction if self.successful else self.direction.opposite


@dataclass(frozen=True)
class RejectedPattern:
    """A raw pattern that failed validation and was kept out of the batch."""

    raw: Mapping[str, Any] | PredictedPattern
    reason: str


@dataclass(frozen=True)
class StatisticsGroup:
    """Summary of a set of outcome records."""

    total: int = 0
    wins: int = 0
    losses: int = 0
    no_data_count: int = 0
    win_rate: float = 0.0
    profit_factor: float = 0.0
    avg_win_percent: float = 0.0
    avg_loss_percent: float = 0.0
    avg_bars_to_exit: float = 0.0
    total_profit_loss_percent: float = 0.0
    avg_profit_loss_percent: float = 0.0
    max_profit_percent: float = 0.0
    max_loss_percent: float = 0.0
    expectancy: float = 0.0
    risk_reward_ratio: float = 0.0
    max_win_streak: int = 0
    max_loss_streak: int = 0
    consistency_score: float = 0.0
    avg_confidence_score: float = 0.0
    avg_rsi_at_entry: float = 0.0
    avg_atr_percent: float = 0.0
    avg_max_adverse_excursion: float = 0.0


@dataclass(frozen=True)
class BacktestStatistics:
    """Overall and per-dimension statistics for a collection of outcomes."""

    overall: StatisticsGroup
    by_pattern_type: dict[str, StatisticsGroup] = field(default_factory=dict)
    by_timeframe: dict[str, StatisticsGroup] = field(default_factory=dict)
    by_direction: dict[str, StatisticsGroup] = field(default_factory=dict)
    by_confidence: dict[str, StatisticsGroup] = field(default_factory=dict)
    best_pattern_type: str | None = None
    best_timeframe: str | None = None


@dataclass(frozen=True)
class BatchResult:
    """Everything a batch run produced."""

    outcomes: tuple[OutcomeRecord, ...]
    rejected: tuple[RejectedPattern, ...]
    unprocessed: tuple[PredictedPattern, ...]
    statistics: BacktestStatistics

    @property
    def processed(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.has_data)

    @property
    def no_data(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.has_data)

    def summary(self) -> str:
        return (
            f"Processed: {self.processed} | "
            f"No data: {self.no_data} | "
            f"Rejected: {len(self.rejected)} | "
            f"Unprocessed: {len(self.unprocessed)}"
        )
