"""Validation of raw detector output into PredictedPattern records."""

from __future__ import annotations

import math
from dataclasses import replace
from datetime import datetime
from typing import Any, Iterable, Mapping

import pandas as pd

from configuration import normalize_timeframe
from models.market import PredictedPattern, TradeDirection
from utils.candles import to_utc_timestamp

from .models import RejectedPattern

# Epoch values above this are milliseconds rather than seconds
_EPOCH_MS_THRESHOLD = 1e11

_FIELD_ALIASES: Mapping[str, tuple[str, ...]] = {
    "id": ("id", "pattern_id", "patternId"),
    "symbol": ("symbol", "ticker"),
    "timeframe": ("timeframe", "interval"),
    "pattern_type": ("pattern_type", "patternType", "pattern_name", "patternName"),
    "direction": ("direction", "predicted_direction", "predictedDirection"),
    "entry_price": ("entry_price", "entryPrice", "entry"),
    "target_price": ("target_price", "targetPrice", "target"),
    "stop_loss": ("stop_loss", "stopLoss", "stop_price", "stopPrice", "stop"),
    "detected_at": ("detected_at", "detectedAt", "created_at", "createdAt", "timestamp"),
    "confidence_score": ("confidence_score", "confidenceScore", "confidence"),
}


class InvalidPatternError(ValueError):
    """Raised when a raw pattern lacks a field the simulation needs."""


def parse_pattern(raw: Mapping[str, Any] | PredictedPattern) -> PredictedPattern:
    """
    Build a PredictedPattern from a raw mapping (snake_case or camelCase keys).

    A PredictedPattern input is checked against the same rules and returned
    with its symbol, timeframe and detection time in canonical form.

    Raises:
        InvalidPatternError: If symbol, timeframe, direction, a price or the
            detection time is missing or malformed.
    """
    if isinstance(raw, PredictedPattern):
        return _validate_pattern(raw)
    if not isinstance(raw, Mapping):
        raise InvalidPatternError(f"Unsupported pattern input type {type(raw).__name__}")

    symbol = _lookup(raw, "symbol")
    if not isinstance(symbol, str) or not symbol.strip():
        raise InvalidPatternError("missing symbol")
    symbol = symbol.strip().upper()

    raw_timeframe = _lookup(raw, "timeframe")
    timeframe = normalize_timeframe(raw_timeframe) if raw_timeframe is not None else None
    if timeframe is None:
        raise InvalidPatternError(f"unsupported timeframe {raw_timeframe!r}")

    direction = TradeDirection.from_raw(_lookup(raw, "direction"))
    if direction is None:
        raise InvalidPatternError(f"unknown direction {_lookup(raw, 'direction')!r}")

    entry_price = _require_price(raw, "entry_price")
    target_price = _require_price(raw, "target_price")
    stop_loss = _require_price(raw, "stop_loss")
    detected_at = _parse_timestamp(_lookup(raw, "detected_at"))

    confidence = _optional_number(_lookup(raw, "confidence_score")) or 0.0

    pattern_id = _lookup(raw, "id")
    if pattern_id is None or str(pattern_id).strip() == "":
        pattern_id = f"{symbol}-{timeframe}-{detected_at.isoformat()}"

    pattern_type = _lookup(raw, "pattern_type")

    return PredictedPattern(
        id=str(pattern_id),
        symbol=symbol,
        timeframe=timeframe,
        pattern_type=str(pattern_type).strip() if pattern_type else "",
        direction=direction,
        entry_price=entry_price,
        target_price=target_price,
        stop_loss=stop_loss,
        detected_at=detected_at,
        confidence_score=confidence,
    )


def partition_patterns(
    raws: Iterable[Mapping[str, Any] | PredictedPattern],
) -> tuple[list[PredictedPattern], list[RejectedPattern]]:
    """Split raw inputs into valid patterns and rejected inputs with reasons."""
    valid: list[PredictedPattern] = []
    rejected: list[RejectedPattern] = []

    for raw in raws:
        try:
            valid.append(parse_pattern(raw))
        except InvalidPatternError as exc:
            rejected.append(RejectedPattern(raw=raw, reason=str(exc)))

    return valid, rejected


def _lookup(raw: Mapping[str, Any], field: str) -> Any:
    for key in _FIELD_ALIASES[field]:
        value = raw.get(key)
        if value is not None and not (isinstance(value, float) and math.isnan(value)):
            return value
    return None


def _optional_number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _require_price(raw: Mapping[str, Any], field: str) -> float:
    return _check_price(field, _lookup(raw, field))


def _check_price(field: str, value: Any) -> float:
    number = _optional_number(value)
    if number is None:
        raise InvalidPatternError(f"{field} is missing or not numeric: {value!r}")
    if number <= 0:
        raise InvalidPatternError(f"{field} must be positive: {number}")
    return number


def _validate_pattern(pattern: PredictedPattern) -> PredictedPattern:
    if not isinstance(pattern.symbol, str) or not pattern.symbol.strip():
        raise InvalidPatternError("missing symbol")

    timeframe = normalize_timeframe(pattern.timeframe)
    if timeframe is None:
        raise InvalidPatternError(f"unsupported timeframe {pattern.timeframe!r}")

    if not isinstance(pattern.direction, TradeDirection):
        raise InvalidPatternError(f"unknown direction {pattern.direction!r}")

    for field in ("entry_price", "target_price", "stop_loss"):
        _check_price(field, getattr(pattern, field))

    if _optional_number(pattern.confidence_score) is None:
        raise InvalidPatternError(f"confidence_score is not a finite number: {pattern.confidence_score!r}")

    if not isinstance(pattern.detected_at, datetime) or pd.isna(pattern.detected_at):
        raise InvalidPatternError(f"unparseable detection time {pattern.detected_at!r}")

    return replace(
        pattern,
        symbol=pattern.symbol.strip().upper(),
        timeframe=timeframe,
        detected_at=to_utc_timestamp(pattern.detected_at).to_pydatetime(),
    )


def _parse_timestamp(value: Any) -> datetime:
    if value is None:
        raise InvalidPatternError("missing detection time")

    try:
        if isinstance(value, bool):
            raise TypeError("boolean is not a timestamp")
        if isinstance(value, (int, float)):
            unit = "ms" if value > _EPOCH_MS_THRESHOLD else "s"
            ts = pd.Timestamp(value, unit=unit, tz="UTC")
        else:
            ts = to_utc_timestamp(value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise InvalidPatternError(f"unparseable detection time {value!r}") from exc

    if pd.isna(ts):
        raise InvalidPatternError(f"unparseable detection time {value!r}")
    return ts.to_pydatetime()
