"""Data models for OHLC candle data.

CRITICAL: All price fields use Decimal. Never use float for prices.
"""

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class Candle:
    """A single OHLC price bar.

    Candle sequences are ordered by timestamp ascending and never mutated
    once produced.
    """

    timestamp_ms: int
    open: Decimal
    high: Decimal
    low: Decimal
    close: Decimal

    def to_dict(self) -> dict:
        """Serialize to dict for JSON output, Decimals as strings."""
        return {
            "timestamp_ms": self.timestamp_ms,
            "open": str(self.open),
            "high": str(self.high),
            "low": str(self.low),
            "close": str(self.close),
        }
