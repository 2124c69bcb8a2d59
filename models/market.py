from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Mapping


class TradeDirection(Enum):
    LONG = "long"
    SHORT = "short"

    @classmethod
    def from_raw(cls, raw: Any) -> "TradeDirection | None":
        """Normalize raw direction input (enum, 'long'/'short', 'bullish'/'bearish')."""

        if isinstance(raw, cls):
            return raw

        if isinstance(raw, str):
            cleaned = raw.strip().lower()
            cleaned = _DIRECTION_ALIASES.get(cleaned, cleaned)
            try:
                return cls(cleaned)
            except ValueError:
                return None

        return None

    @property
    def opposite(self) -> "TradeDirection":
        return TradeDirection.SHORT if self is TradeDirection.LONG else TradeDirection.LONG


_DIRECTION_ALIASES: Mapping[str, str] = {
    "bullish": "long",
    "buy": "long",
    "bearish": "short",
    "sell": "short",
}


@dataclass(frozen=True)
class PredictedPattern:
    """A detector prediction: the trade a chart pattern implies."""

    id: str
    symbol: str
    timeframe: str
    pattern_type: str
    direction: TradeDirection
    entry_price: float
    target_price: float
    stop_loss: float
    detected_at: datetime
    confidence_score: float = 0.0

    @property
    def is_long(self) -> bool:
        return self.direction is TradeDirection.LONG

    @property
    def risk_reward_ratio(self) -> float:
        """Planned reward over planned risk, 0 when the stop sits on the entry."""
        risk = abs(self.entry_price - self.stop_loss)
        if risk == 0:
            return 0.0
        return abs(self.target_price - self.entry_price) / risk

