import os
import sys
import unittest
from datetime import datetime, timedelta, timezone

import pandas as pd

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from bar_factory import START, flat_bars
from pattern_outcome.bar_aligner import align_entry, find_closest_bar_index
from utils.candles import empty_bars


class TestFindClosestBarIndex(unittest.TestCase):
    def setUp(self):
        self.bars = flat_bars(10)

    def test_exact_match(self):
        self.assertEqual(find_closest_bar_index(self.bars, START + timedelta(days=3)), 3)

    def test_nearest_bar_wins(self):
        target = START + timedelta(days=4, hours=20)
        self.assertEqual(find_closest_bar_index(self.bars, target), 5)

    def test_tie_prefers_earlier_bar(self):
        """Case: target exactly halfway between two bars."""
        target = START + timedelta(days=6, hours=12)
        self.assertEqual(find_closest_bar_index(self.bars, target), 6)

    def test_empty_series_returns_none(self):
        self.assertIsNone(find_closest_bar_index(empty_bars(), START))

    def test_naive_target_is_treated_as_utc(self):
        target = datetime(2024, 1, 3)
        self.assertEqual(find_closest_bar_index(self.bars, target), 2)

    def test_target_before_series_maps_to_first_bar(self):
        self.assertEqual(find_closest_bar_index(self.bars, START - timedelta(days=30)), 0)


class TestAlignEntry(unittest.TestCase):
    def setUp(self):
        self.bars = flat_bars(10)

    def test_inside_range(self):
        self.assertEqual(align_entry(self.bars, START + timedelta(days=2), "1d"), 2)

    def test_within_tolerance_after_last_bar(self):
        target = START + timedelta(days=9 + 3)
        self.assertEqual(align_entry(self.bars, target, "1d", tolerance_bars=5), 9)

    def test_beyond_tolerance_before_first_bar(self):
        target = START - timedelta(days=6)
        self.assertIsNone(align_entry(self.bars, target, "1d", tolerance_bars=5))

    def test_beyond_tolerance_after_last_bar(self):
        target = START + timedelta(days=9 + 6)
        self.assertIsNone(align_entry(self.bars, target, "1d", tolerance_bars=5))

    def test_tolerance_scales_with_timeframe(self):
        hourly = flat_bars(10, freq="1h")
        target = START + timedelta(hours=9 + 6)
        self.assertIsNone(align_entry(hourly, target, "1h", tolerance_bars=5))
        self.assertEqual(align_entry(hourly, target, "1d", tolerance_bars=5), 9)

    def test_empty_series(self):
        self.assertIsNone(align_entry(empty_bars(), START, "1d"))

    def test_accepts_pandas_timestamp(self):
        target = pd.Timestamp("2024-01-05T00:00:00", tz="UTC")
        self.assertEqual(align_entry(self.bars, target, "1d"), 4)


if __name__ == "__main__":
    unittest.main()
