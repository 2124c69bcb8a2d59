import os
import sys
import unittest
from datetime import datetime, timedelta, timezone

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from bar_factory import make_pattern
from models.market import TradeDirection
from pattern_outcome.validation import InvalidPatternError, parse_pattern, partition_patterns


def _raw(**overrides):
    raw = {
        "id": "abc",
        "symbol": "aapl",
        "timeframe": "1d",
        "patternType": "Bull Flag",
        "direction": "bullish",
        "entryPrice": 100,
        "targetPrice": "110.5",
        "stopLoss": 95,
        "detectedAt": "2024-03-01T14:30:00Z",
        "confidenceScore": 72,
    }
    raw.update(overrides)
    return raw


class TestParsePattern(unittest.TestCase):
    def test_camel_case_input(self):
        pattern = parse_pattern(_raw())

        self.assertEqual(pattern.id, "abc")
        self.assertEqual(pattern.symbol, "AAPL")
        self.assertEqual(pattern.timeframe, "1d")
        self.assertEqual(pattern.pattern_type, "Bull Flag")
        self.assertEqual(pattern.direction, TradeDirection.LONG)
        self.assertEqual(pattern.entry_price, 100.0)
        self.assertEqual(pattern.target_price, 110.5)
        self.assertEqual(pattern.stop_loss, 95.0)
        self.assertEqual(pattern.detected_at, datetime(2024, 3, 1, 14, 30, tzinfo=timezone.utc))
        self.assertEqual(pattern.confidence_score, 72.0)

    def test_snake_case_input(self):
        pattern = parse_pattern(
            {
                "pattern_id": "x1",
                "symbol": "MSFT",
                "timeframe": "4H",
                "pattern_type": "Head and Shoulders",
                "direction": "sell",
                "entry_price": 300,
                "target_price": 280,
                "stop_loss": 310,
                "detected_at": datetime(2024, 3, 1, 12, 0),
            }
        )

        self.assertEqual(pattern.id, "x1")
        self.assertEqual(pattern.timeframe, "4h")
        self.assertEqual(pattern.direction, TradeDirection.SHORT)
        self.assertEqual(pattern.detected_at.utcoffset(), timedelta(0))
        self.assertEqual(pattern.confidence_score, 0.0)

    def test_epoch_seconds_and_milliseconds(self):
        seconds = parse_pattern(_raw(detectedAt=1709303400))
        millis = parse_pattern(_raw(detectedAt=1709303400000))

        self.assertEqual(seconds.detected_at, millis.detected_at)
        self.assertEqual(seconds.detected_at, datetime(2024, 3, 1, 14, 30, tzinfo=timezone.utc))

    def test_missing_id_is_derived(self):
        pattern = parse_pattern(_raw(id=None))

        self.assertEqual(pattern.id, "AAPL-1d-2024-03-01T14:30:00+00:00")

    def test_existing_pattern_is_kept(self):
        pattern = make_pattern()

        self.assertEqual(parse_pattern(pattern), pattern)

    def test_missing_symbol(self):
        with self.assertRaises(InvalidPatternError):
            parse_pattern(_raw(symbol="  "))

    def test_unknown_timeframe(self):
        with self.assertRaises(InvalidPatternError):
            parse_pattern(_raw(timeframe="3d"))

    def test_unknown_direction(self):
        with self.assertRaises(InvalidPatternError):
            parse_pattern(_raw(direction="sideways"))

    def test_non_positive_price(self):
        with self.assertRaises(InvalidPatternError):
            parse_pattern(_raw(stopLoss=0))

    def test_non_numeric_price(self):
        with self.assertRaises(InvalidPatternError):
            parse_pattern(_raw(entryPrice="n/a"))

    def test_missing_price(self):
        raw = _raw()
        del raw["targetPrice"]

        with self.assertRaises(InvalidPatternError):
            parse_pattern(raw)

    def test_unparseable_detection_time(self):
        with self.assertRaises(InvalidPatternError):
            parse_pattern(_raw(detectedAt="not a date"))

    def test_missing_detection_time(self):
        with self.assertRaises(InvalidPatternError):
            parse_pattern(_raw(detectedAt=None))

    def test_non_mapping_input(self):
        with self.assertRaises(InvalidPatternError):
            parse_pattern(["AAPL", "1d"])


class TestParseExistingPattern(unittest.TestCase):
    """PredictedPattern inputs go through the same checks as mappings."""

    def test_fields_are_canonicalized(self):
        pattern = make_pattern(symbol=" msft ", timeframe="Daily", detected_at=datetime(2024, 3, 1, 12, 0))

        parsed = parse_pattern(pattern)

        self.assertEqual(parsed.symbol, "MSFT")
        self.assertEqual(parsed.timeframe, "1d")
        self.assertEqual(parsed.detected_at.utcoffset(), timedelta(0))
        self.assertEqual(parsed.id, pattern.id)

    def test_unknown_timeframe(self):
        with self.assertRaises(InvalidPatternError):
            parse_pattern(make_pattern(timeframe="2h"))

    def test_non_finite_prices(self):
        for overrides in ({"target": float("nan")}, {"entry": float("inf")}, {"stop": -1.0}):
            with self.subTest(**{key: str(value) for key, value in overrides.items()}):
                with self.assertRaises(InvalidPatternError):
                    parse_pattern(make_pattern(**overrides))

    def test_non_finite_confidence(self):
        with self.assertRaises(InvalidPatternError):
            parse_pattern(make_pattern(confidence=float("nan")))

    def test_missing_symbol(self):
        with self.assertRaises(InvalidPatternError):
            parse_pattern(make_pattern(symbol=""))

    def test_partition_rejects_invalid_objects(self):
        valid, rejected = partition_patterns(
            [make_pattern(pattern_id="ok"), make_pattern(pattern_id="bad-tf", timeframe="2h")]
        )

        self.assertEqual([pattern.id for pattern in valid], ["ok"])
        self.assertEqual(rejected[0].raw.id, "bad-tf")
        self.assertIn("timeframe", rejected[0].reason)


class TestPartitionPatterns(unittest.TestCase):
    def test_splits_valid_and_rejected(self):
        valid, rejected = partition_patterns([_raw(id="a"), _raw(id="b", direction=None), _raw(id="c")])

        self.assertEqual([pattern.id for pattern in valid], ["a", "c"])
        self.assertEqual(len(rejected), 1)
        self.assertEqual(rejected[0].raw["id"], "b")
        self.assertIn("direction", rejected[0].reason)


if __name__ == "__main__":
    unittest.main()
