import os
import sys
import unittest
from datetime import timedelta
from unittest.mock import Mock, call

import pandas as pd

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from bar_factory import START, flat_bars, make_pattern
from pattern_outcome.candle_cache import BarSeriesCache
from pattern_outcome.candle_fetcher import (
    CandleFetcher,
    DataUnavailableError,
    fetch_window,
    lookback_years,
)
from pattern_outcome.constants import DataSourceTag

FROM_DATE = START
TO_DATE = START + timedelta(days=60)


class TestCandleFetcher(unittest.TestCase):
    def setUp(self):
        self.sleep = Mock()
        self.bars = flat_bars(20)

    def _fetcher(self, primary, fallback=None, **kwargs):
        kwargs.setdefault("with_indicators", False)
        kwargs.setdefault("max_attempts", 3)
        kwargs.setdefault("base_delay", 1.0)
        return CandleFetcher(primary, fallback, sleep=self.sleep, **kwargs)

    def test_primary_success(self):
        primary = Mock(return_value=self.bars)
        fallback = Mock()

        series = self._fetcher(primary, fallback).fetch("AAPL", "1d", FROM_DATE, TO_DATE)

        self.assertEqual(series.data_source, DataSourceTag.PRIMARY)
        self.assertEqual(len(series.bars), 20)
        primary.assert_called_once_with("AAPL", "1d", FROM_DATE, TO_DATE)
        fallback.assert_not_called()
        self.sleep.assert_not_called()

    def test_retries_with_exponential_backoff(self):
        primary = Mock(side_effect=[ConnectionError("reset"), TimeoutError("slow"), self.bars])

        series = self._fetcher(primary).fetch("AAPL", "1d", FROM_DATE, TO_DATE)

        self.assertEqual(series.data_source, DataSourceTag.PRIMARY)
        self.assertEqual(primary.call_count, 3)
        self.assertEqual(self.sleep.call_args_list, [call(1.0), call(2.0)])

    def test_falls_back_after_exhausting_retries(self):
        primary = Mock(side_effect=ConnectionError("down"))
        fallback = Mock(return_value=self.bars)

        series = self._fetcher(primary, fallback).fetch("AAPL", "1d", FROM_DATE, TO_DATE)

        self.assertEqual(series.data_source, DataSourceTag.FALLBACK)
        self.assertEqual(primary.call_count, 3)
        self.assertEqual(self.sleep.call_args_list, [call(1.0), call(2.0)])

    def test_empty_primary_goes_straight_to_fallback(self):
        primary = Mock(return_value=pd.DataFrame())
        fallback = Mock(return_value=self.bars)

        series = self._fetcher(primary, fallback).fetch("AAPL", "1d", FROM_DATE, TO_DATE)

        self.assertEqual(series.data_source, DataSourceTag.FALLBACK)
        primary.assert_called_once()
        self.sleep.assert_not_called()

    def test_none_result_counts_as_empty(self):
        primary = Mock(return_value=None)
        fallback = Mock(return_value=self.bars)

        series = self._fetcher(primary, fallback).fetch("AAPL", "1d", FROM_DATE, TO_DATE)

        self.assertEqual(series.data_source, DataSourceTag.FALLBACK)

    def test_raises_when_no_source_has_bars(self):
        primary = Mock(side_effect=ConnectionError("down"))
        fallback = Mock(return_value=pd.DataFrame())

        with self.assertRaises(DataUnavailableError):
            self._fetcher(primary, fallback).fetch("AAPL", "1d", FROM_DATE, TO_DATE)

    def test_missing_primary_uses_fallback(self):
        fallback = Mock(return_value=self.bars)

        series = self._fetcher(None, fallback).fetch("AAPL", "1d", FROM_DATE, TO_DATE)

        self.assertEqual(series.data_source, DataSourceTag.FALLBACK)

    def test_clips_to_window(self):
        primary = Mock(return_value=self.bars)

        series = self._fetcher(primary).fetch(
            "AAPL", "1d", START + timedelta(days=5), START + timedelta(days=9)
        )

        self.assertEqual(len(series.bars), 5)
        self.assertEqual(series.bars["time"].iloc[0], pd.Timestamp(START + timedelta(days=5)))

    def test_cache_hit_skips_source(self):
        primary = Mock(return_value=self.bars)
        fetcher = self._fetcher(primary, cache=BarSeriesCache())

        first = fetcher.fetch("AAPL", "1d", FROM_DATE, TO_DATE)
        second = fetcher.fetch("AAPL", "1d", FROM_DATE + timedelta(days=1), TO_DATE)

        primary.assert_called_once()
        self.assertEqual(second.data_source, first.data_source)
        self.assertEqual(len(second.bars), 19)

    def test_indicators_are_attached(self):
        primary = Mock(return_value=self.bars)

        series = self._fetcher(primary, with_indicators=True).fetch("AAPL", "1d", FROM_DATE, TO_DATE)

        self.assertIn("rsi", series.bars.columns)
        self.assertIn("atr", series.bars.columns)

    def test_rejects_non_positive_attempts(self):
        with self.assertRaises(ValueError):
            CandleFetcher(Mock(), max_attempts=0)


class TestFetchWindow(unittest.TestCase):
    def test_swing_timeframes_use_half_year(self):
        self.assertEqual(lookback_years("AAPL", "1d", 2.0), 0.5)
        self.assertEqual(lookback_years("AAPL", "4h", 2.0), 0.5)
        self.assertEqual(lookback_years("AAPL", "1h", 2.0), 2.0)

    def test_window_spans_earliest_detection_to_as_of(self):
        patterns = [
            make_pattern(timeframe="1h", detected_at=START + timedelta(days=10)),
            make_pattern(timeframe="1h", detected_at=START + timedelta(days=5)),
        ]
        as_of = START + timedelta(days=100)

        from_date, to_date = fetch_window(patterns, as_of, historical_years=1)

        self.assertEqual(from_date, START + timedelta(days=5) - timedelta(days=365))
        self.assertEqual(to_date, as_of)

    def test_as_of_before_detection_is_extended(self):
        patterns = [make_pattern(timeframe="1h", detected_at=START + timedelta(days=10))]

        _, to_date = fetch_window(patterns, START, historical_years=1)

        self.assertEqual(to_date, START + timedelta(days=10))

    def test_empty_group(self):
        with self.assertRaises(ValueError):
            fetch_window([], START)


if __name__ == "__main__":
    unittest.main()
