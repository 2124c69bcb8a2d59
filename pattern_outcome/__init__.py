"""Pattern outcome computation.

Replays predicted chart patterns against historical bars and aggregates the
realized outcomes into reliability statistics.
"""

from .bar_aligner import align_entry, find_closest_bar_index
from .candle_cache import BarSeriesCache
from .candle_fetcher import CandleFetcher, DataUnavailableError
from .constants import DataSourceTag, OutcomeStatus
from .models import BacktestStatistics, BatchResult, OutcomeRecord, RejectedPattern, StatisticsGroup
from .outcome_processor import PatternBacktester, run_pattern_backtest
from .outcome_simulator import build_no_data_outcome, replay_pattern, simulate_outcome
from .statistics import aggregate_outcomes, compute_group
from .validation import InvalidPatternError, parse_pattern, partition_patterns

__all__ = [
    "align_entry",
    "find_closest_bar_index",
    "BarSeriesCache",
    "CandleFetcher",
    "DataUnavailableError",
    "DataSourceTag",
    "OutcomeStatus",
    "BacktestStatistics",
    "BatchResult",
    "OutcomeRecord",
    "RejectedPattern",
    "StatisticsGroup",
    "PatternBacktester",
    "run_pattern_backtest",
    "build_no_data_outcome",
    "replay_pattern",
    "simulate_outcome",
    "aggregate_outcomes",
    "compute_group",
    "InvalidPatternError",
    "parse_pattern",
    "partition_patterns",
]
