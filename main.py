"""Entry point for replaying detector patterns against historical bars.

    python main.py --patterns patterns.json
    python main.py --patterns patterns.csv --as-of 2024-06-30T00:00:00 --output-dir results
"""

import argparse
import json
import sys
from datetime import datetime, timezone
from pathlib import Path

import pandas as pd

from configuration import DEFAULT_HISTORICAL_YEARS, FETCH_WORKERS
from logger import get_logger, separation, set_level
from pattern_outcome import run_pattern_backtest
from pattern_outcome.serialization import write_outcomes_csv, write_statistics_json

logger = get_logger(__name__)


def load_patterns(path: Path) -> list[dict]:
    """Read raw detector output from a JSON list or a CSV file."""
    if path.suffix.lower() == ".csv":
        return pd.read_csv(path).to_dict(orient="records")

    with open(path, encoding="utf-8") as fh:
        payload = json.load(fh)
    if isinstance(payload, dict):
        payload = payload.get("patterns", [])
    return list(payload)


def _parse_as_of(value: str | None) -> datetime | None:
    if value is None:
        return None
    parsed = datetime.fromisoformat(value)
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


def run():
    """CLI entrypoint."""
    parser = argparse.ArgumentParser(
        description="Replay predicted chart patterns against historical bars"
    )
    parser.add_argument("--patterns", type=Path, required=True, help="JSON or CSV file of patterns")
    parser.add_argument("--as-of", type=str, default=None, help="End of fetch window, ISO format (default: now)")
    parser.add_argument(
        "--years",
        type=float,
        default=DEFAULT_HISTORICAL_YEARS,
        help=f"Lookback for non-swing timeframes (default: {DEFAULT_HISTORICAL_YEARS})",
    )
    parser.add_argument("--workers", type=int, default=FETCH_WORKERS, help=f"Fetch workers (default: {FETCH_WORKERS})")
    parser.add_argument("--output-dir", type=Path, default=Path("results"), help="Where to write outcomes and statistics")
    parser.add_argument("--log-level", type=str, default=None, help="Override LOG_LEVEL for this run")

    args = parser.parse_args()
    if args.log_level:
        set_level(args.log_level)

    result = run_pattern_backtest(
        load_patterns(args.patterns),
        as_of=_parse_as_of(args.as_of),
        historical_years=args.years,
        max_workers=args.workers,
    )

    outcomes_path = write_outcomes_csv(result.outcomes, args.output_dir / "outcomes.csv")
    stats_path = write_statistics_json(result.statistics, args.output_dir / "statistics.json")

    overall = result.statistics.overall
    separation()
    logger.info("Win rate: %.1f%% over %d trade(s)", overall.win_rate * 100, overall.total)
    logger.info("Profit factor: %.2f | No data: %d", overall.profit_factor, overall.no_data_count)
    logger.info("Outcomes: %s | Statistics: %s", outcomes_path, stats_path)
    separation()

    # Nothing was actually simulated
    sys.exit(1 if result.processed == 0 else 0)


if __name__ == "__main__":
    run()
