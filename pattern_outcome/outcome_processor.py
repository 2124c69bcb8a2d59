"""Batch processor: fetch bars, replay every pattern, aggregate statistics."""

from __future__ import annotations

import threading
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping

import pandas as pd

from configuration import DEFAULT_HISTORICAL_YEARS, FETCH_WORKERS, OUTCOME_WINDOW_BARS
from logger import get_logger
from models.market import PredictedPattern

from .candle_fetcher import CandleFetcher, DataUnavailableError, build_default_fetcher, fetch_window
from .constants import DataSourceTag
from .models import BatchResult, OutcomeRecord
from .outcome_simulator import build_no_data_outcome, replay_pattern
from .statistics import aggregate_outcomes
from .validation import partition_patterns

logger = get_logger(__name__)

# (position in the input, pattern)
_IndexedPattern = tuple[int, PredictedPattern]


class PatternBacktester:
    """
    Replays a batch of predicted patterns against historical bars.

    Patterns are grouped by (symbol, timeframe) so each series is fetched
    once; groups run on a bounded thread pool. A failure inside one group or
    one pattern degrades to no-data records for the affected patterns only.
    """

    def __init__(
        self,
        fetcher: CandleFetcher | None = None,
        *,
        max_workers: int = FETCH_WORKERS,
        max_bars: int = OUTCOME_WINDOW_BARS,
    ):
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self._fetcher = fetcher if fetcher is not None else build_default_fetcher()
        self._max_workers = max_workers
        self._max_bars = max_bars
        self._stop_event = threading.Event()

    def stop(self) -> None:
        """Stop scheduling new fetches; groups already running finish."""
        self._stop_event.set()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def run(
        self,
        patterns: Iterable[Mapping[str, Any] | PredictedPattern],
        *,
        as_of: datetime | None = None,
        historical_years: float = DEFAULT_HISTORICAL_YEARS,
    ) -> BatchResult:
        """
        Process a batch end to end.

        Args:
            patterns: PredictedPattern objects or raw detector mappings
            as_of: End of the fetch window (default: now, UTC)
            historical_years: Lookback for non-swing patterns

        Returns:
            BatchResult with outcomes in input order, rejected inputs,
            patterns skipped after ``stop()``, and aggregate statistics
        """
        as_of = as_of or datetime.now(timezone.utc)
        valid, rejected = partition_patterns(patterns)

        for rejection in rejected:
            logger.warning("PATTERN_REJECTED|reason=%s|raw=%s", rejection.reason, rejection.raw)

        logger.info(
            "--- Running pattern backtest: %d pattern(s), %d rejected ---",
            len(valid),
            len(rejected),
        )

        groups: dict[tuple[str, str], list[_IndexedPattern]] = defaultdict(list)
        for position, pattern in enumerate(valid):
            groups[(pattern.symbol, pattern.timeframe)].append((position, pattern))

        outcomes: list[tuple[int, OutcomeRecord]] = []
        unprocessed: list[_IndexedPattern] = []

        with ThreadPoolExecutor(max_workers=self._max_workers) as executor:
            futures = [
                executor.submit(self._process_group, symbol, timeframe, members, as_of, historical_years)
                for (symbol, timeframe), members in groups.items()
            ]
            for future, members in zip(futures, groups.values()):
                group_outcomes = future.result()
                if group_outcomes is None:
                    unprocessed.extend(members)
                else:
                    outcomes.extend(group_outcomes)

        records = tuple(record for _, record in sorted(outcomes, key=lambda item: item[0]))
        result = BatchResult(
            outcomes=records,
            rejected=tuple(rejected),
            unprocessed=tuple(pattern for _, pattern in sorted(unprocessed, key=lambda item: item[0])),
            statistics=aggregate_outcomes(records),
        )

        logger.info("  %s", result.summary())
        logger.info("--- Pattern backtest complete ---")
        return result

    def _process_group(
        self,
        symbol: str,
        timeframe: str,
        members: list[_IndexedPattern],
        as_of: datetime,
        historical_years: float,
    ) -> list[tuple[int, OutcomeRecord]] | None:
        """Fetch one series and replay its patterns; None when skipped after stop()."""
        if self._stop_event.is_set():
            return None

        from_date, to_date = fetch_window((pattern for _, pattern in members), as_of, historical_years)

        try:
            series = self._fetcher.fetch(symbol, timeframe, from_date, to_date)
        except DataUnavailableError as exc:
            logger.warning(
                "DATA_UNAVAILABLE|symbol=%s|timeframe=%s|patterns=%s|error=%s",
                symbol,
                timeframe,
                ",".join(pattern.id for _, pattern in members),
                exc,
            )
            return [(position, build_no_data_outcome(pattern)) for position, pattern in members]
        except Exception:
            logger.exception("FETCH_ERROR|symbol=%s|timeframe=%s", symbol, timeframe)
            return [(position, build_no_data_outcome(pattern)) for position, pattern in members]

        results = []
        for position, pattern in members:
            results.append((position, self._replay_one(pattern, series.bars, series.data_source)))
        return results

    def _replay_one(
        self, pattern: PredictedPattern, bars: pd.DataFrame, data_source: DataSourceTag
    ) -> OutcomeRecord:
        try:
            outcome = replay_pattern(pattern, bars, data_source, self._max_bars)
        except Exception:
            logger.exception(
                "SIMULATION_FAILED|symbol=%s|timeframe=%s|pattern_id=%s",
                pattern.symbol,
                pattern.timeframe,
                pattern.id,
            )
            return build_no_data_outcome(pattern)

        if not outcome.has_data:
            logger.warning(
                "ALIGNMENT_FAILED|symbol=%s|timeframe=%s|pattern_id=%s|detected_at=%s",
                pattern.symbol,
                pattern.timeframe,
                pattern.id,
                pattern.detected_at.isoformat(),
            )
        return outcome


def run_pattern_backtest(
    patterns: Iterable[Mapping[str, Any] | PredictedPattern],
    *,
    as_of: datetime | None = None,
    historical_years: float = DEFAULT_HISTORICAL_YEARS,
    max_workers: int = FETCH_WORKERS,
) -> BatchResult:
    """Run a batch with the configured data sources and a fresh bar cache."""
    backtester = PatternBacktester(max_workers=max_workers)
    return backtester.run(patterns, as_of=as_of, historical_years=historical_years)
