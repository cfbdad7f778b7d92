"""Screening rule data models.

CRITICAL: All ADX values and thresholds use Decimal. Never use float.
"""

from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum

from regime.exceptions import InvalidConfigError


class Regime(str, Enum):
    """Market regime classification from an ADX reading."""

    LATERAL = "lateral"
    TRENDING = "trending"


@dataclass(frozen=True)
class ScreeningConfig:
    """Parameters of the ADX screening rule.

    Attributes:
        period: ADX period. Signals require at least 2 * period candles.
        max_lateral_threshold: ADX at or below this value is a lateral market.
    """

    period: int = 14
    max_lateral_threshold: Decimal = Decimal("15.0")

    def __post_init__(self) -> None:
        if not isinstance(self.max_lateral_threshold, Decimal):
            object.__setattr__(
                self, "max_lateral_threshold", Decimal(str(self.max_lateral_threshold))
            )
        if not isinstance(self.period, int) or self.period < 1:
            raise InvalidConfigError(
                f"period must be a positive integer, got {self.period!r}"
            )
        if not self.max_lateral_threshold.is_finite():
            raise InvalidConfigError(
                f"max_lateral_threshold must be finite, got {self.max_lateral_threshold}"
            )

    @property
    def warmup_candles(self) -> int:
        """Number of candles before the first possible signal."""
        return self.period * 2

    def with_overrides(self, **kwargs: object) -> "ScreeningConfig":
        """Return a new ScreeningConfig with specified fields overridden."""
        return replace(self, **kwargs)

    def to_dict(self) -> dict:
        return {
            "period": self.period,
            "max_lateral_threshold": str(self.max_lateral_threshold),
        }


@dataclass(frozen=True)
class ScreeningSignal:
    """Regime classification at one candle index.

    Attributes:
        adx_value: ADX reading at this index (never the pre-seed 0).
        is_lateral: True when adx_value <= max_lateral_threshold.
        timestamp_ms: Timestamp of the candle the signal belongs to.
    """

    adx_value: Decimal
    is_lateral: bool
    timestamp_ms: int

    @property
    def regime(self) -> Regime:
        return Regime.LATERAL if self.is_lateral else Regime.TRENDING

    def to_dict(self) -> dict:
        return {
            "adx_value": str(self.adx_value),
            "is_lateral": self.is_lateral,
            "regime": self.regime.value,
            "timestamp_ms": self.timestamp_ms,
        }
