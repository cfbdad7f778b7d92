"""ADX lateral-market screening rule.

Flags a lateral (ranging) market when ADX is at or below a threshold, on the
principle that a low ADX means a weak trend / consolidation.

A reading of exactly 0 is treated as "no signal": the indicator reports 0
before its ADX filter is seeded, and a genuine zero reading is not told
apart from that.
"""

from decimal import Decimal

from regime.data.models import Candle
from regime.indicators.adx import AdxSample, adx_at, compute_adx
from regime.signals.models import ScreeningConfig, ScreeningSignal

_ZERO = Decimal("0")


class AdxScreeningStrategy:
    """Classifies each candle index as lateral or trending from its ADX.

    The strategy is stateless apart from its frozen config, so one instance
    can be shared across runs and threads.

    Args:
        config: Screening parameters. Defaults to period 14, threshold 15.
    """

    def __init__(self, config: ScreeningConfig | None = None) -> None:
        self._config = config if config is not None else ScreeningConfig()

    @property
    def params(self) -> ScreeningConfig:
        return self._config

    def with_params(self, **overrides: object) -> "AdxScreeningStrategy":
        """Return a new strategy with overridden parameters."""
        return AdxScreeningStrategy(self._config.with_overrides(**overrides))

    def _to_signal(
        self, sample: AdxSample | None, candle: Candle
    ) -> ScreeningSignal | None:
        if sample is None or sample.adx == _ZERO:
            return None
        return ScreeningSignal(
            adx_value=sample.adx,
            is_lateral=sample.adx <= self._config.max_lateral_threshold,
            timestamp_ms=candle.timestamp_ms,
        )

    def screen(self, candles: list[Candle], index: int) -> ScreeningSignal | None:
        """Screen a single candle index using only candles up to ``index``.

        Args:
            candles: Candles ordered by timestamp ascending.
            index: Index to classify.

        Returns:
            ScreeningSignal, or None when index < 2 * period or ADX is 0.
        """
        if index < self._config.warmup_candles or index >= len(candles):
            return None
        sample = adx_at(candles, index, self._config.period)
        return self._to_signal(sample, candles[index])

    def screen_all(self, candles: list[Candle]) -> list[ScreeningSignal | None]:
        """Screen every candle index with a single indicator pass.

        Args:
            candles: Candles ordered by timestamp ascending.

        Returns:
            One entry per candle, in order; None where no signal exists.
        """
        samples = compute_adx(candles, self._config.period)
        warmup = self._config.warmup_candles
        return [
            self._to_signal(sample, candle) if idx >= warmup else None
            for idx, (sample, candle) in enumerate(zip(samples, candles))
        ]
