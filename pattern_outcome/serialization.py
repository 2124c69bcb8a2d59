"""Export helpers. Field names follow the camelCase outcome/statistics schema."""

from __future__ import annotations

import json
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable

import pandas as pd

from .models import BacktestStatistics, OutcomeRecord, StatisticsGroup


def _iso(value: datetime) -> str:
    return value.isoformat()


def outcome_to_dict(record: OutcomeRecord) -> dict[str, Any]:
    actual = record.actual_direction
    return {
        "patternId": record.pattern_id,
        "symbol": record.symbol,
        "patternType": record.pattern_type,
        "timeframe": record.timeframe,
        "direction": record.direction.value,
        "actualDirection": actual.value if actual is not None else None,
        "confidenceScore": record.confidence_score,
        "entryPrice": record.entry_price,
        "entryDate": _iso(record.entry_date),
        "exitPrice": record.exit_price,
        "exitDate": _iso(record.exit_date),
        "targetPrice": record.target_price,
        "stopLoss": record.stop_loss,
        "profitLoss": record.profit_loss,
        "profitLossPercent": record.profit_loss_percent,
        "barsToExit": record.bars_to_exit,
        "maxAdverseExcursion": record.max_adverse_excursion,
        "successful": record.successful,
        "status": record.status.value,
        "dataSource": record.data_source.value,
        "rsiAtEntry": record.rsi_at_entry,
        "atrAtEntry": record.atr_at_entry,
        "riskRewardRatio": record.risk_reward_ratio,
    }


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def group_to_dict(group: StatisticsGroup) -> dict[str, Any]:
    return {_camel(key): value for key, value in asdict(group).items()}


def statistics_to_dict(statistics: BacktestStatistics) -> dict[str, Any]:
    return {
        "overall": group_to_dict(statistics.overall),
        "byPatternType": {name: group_to_dict(g) for name, g in statistics.by_pattern_type.items()},
        "byTimeframe": {name: group_to_dict(g) for name, g in statistics.by_timeframe.items()},
        "byDirection": {name: group_to_dict(g) for name, g in statistics.by_direction.items()},
        "byConfidence": {name: group_to_dict(g) for name, g in statistics.by_confidence.items()},
        "bestPatternType": statistics.best_pattern_type,
        "bestTimeframe": statistics.best_timeframe,
    }


def outcomes_to_frame(records: Iterable[OutcomeRecord]) -> pd.DataFrame:
    return pd.DataFrame([outcome_to_dict(record) for record in records])


def write_outcomes_csv(records: Iterable[OutcomeRecord], path: str | Path) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    outcomes_to_frame(records).to_csv(target, index=False)
    return target


def write_statistics_json(statistics: BacktestStatistics, path: str | Path) -> Path:
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    with open(target, "w", encoding="utf-8") as fh:
        json.dump(statistics_to_dict(statistics), fh, indent=2)
    return target
