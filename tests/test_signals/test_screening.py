"""Tests for the ADX lateral-market screening rule."""

from decimal import Decimal

import pytest

from conftest import flat_candles, ranging_candles, ranging_then_trend, uptrend_candles
from regime.exceptions import InvalidConfigError
from regime.signals.models import Regime, ScreeningConfig, ScreeningSignal
from regime.signals.screening import AdxScreeningStrategy


class TestScreeningConfig:
    """Tests for ScreeningConfig validation and helpers."""

    def test_defaults(self) -> None:
        config = ScreeningConfig()
        assert config.period == 14
        assert config.max_lateral_threshold == Decimal("15.0")
        assert config.warmup_candles == 28

    def test_threshold_coerced_to_decimal(self) -> None:
        config = ScreeningConfig(period=10, max_lateral_threshold="20")
        assert config.max_lateral_threshold == Decimal("20")
        assert isinstance(config.max_lateral_threshold, Decimal)

    @pytest.mark.parametrize("period", [0, -1])
    def test_rejects_non_positive_period(self, period: int) -> None:
        with pytest.raises(InvalidConfigError):
            ScreeningConfig(period=period)

    def test_rejects_non_finite_threshold(self) -> None:
        with pytest.raises(InvalidConfigError):
            ScreeningConfig(max_lateral_threshold=Decimal("NaN"))

    def test_with_overrides_returns_new_config(self) -> None:
        config = ScreeningConfig()
        changed = config.with_overrides(period=7)
        assert changed.period == 7
        assert config.period == 14

    def test_to_dict(self) -> None:
        assert ScreeningConfig(period=5).to_dict() == {
            "period": 5,
            "max_lateral_threshold": "15.0",
        }


class TestScreeningSignal:
    """Tests for ScreeningSignal."""

    def test_regime_property(self) -> None:
        lateral = ScreeningSignal(Decimal("12"), True, 0)
        trending = ScreeningSignal(Decimal("30"), False, 0)
        assert lateral.regime == Regime.LATERAL
        assert trending.regime == Regime.TRENDING

    def test_to_dict(self) -> None:
        sig = ScreeningSignal(Decimal("12.5"), True, 1000)
        assert sig.to_dict() == {
            "adx_value": "12.5",
            "is_lateral": True,
            "regime": "lateral",
            "timestamp_ms": 1000,
        }


class TestScreen:
    """Tests for AdxScreeningStrategy.screen()."""

    def test_no_signal_before_two_periods(self, screening_config) -> None:
        strategy = AdxScreeningStrategy(screening_config)
        candles = ranging_candles(30)
        for index in range(10):
            assert strategy.screen(candles, index) is None
        assert strategy.screen(candles, 10) is not None

    def test_no_signal_on_short_series(self, screening_config) -> None:
        strategy = AdxScreeningStrategy(screening_config)
        candles = ranging_candles(9)
        assert all(strategy.screen(candles, i) is None for i in range(9))

    def test_zero_adx_is_no_signal(self, screening_config) -> None:
        strategy = AdxScreeningStrategy(screening_config)
        candles = flat_candles(40)
        assert all(strategy.screen(candles, i) is None for i in range(40))

    def test_ranging_series_is_lateral(self, screening_config) -> None:
        strategy = AdxScreeningStrategy(screening_config)
        candles = ranging_candles(40)
        sig = strategy.screen(candles, 20)
        assert sig is not None
        assert sig.is_lateral is True
        assert sig.adx_value <= Decimal("15")
        assert sig.timestamp_ms == candles[20].timestamp_ms

    def test_uptrend_is_trending(self, screening_config) -> None:
        strategy = AdxScreeningStrategy(screening_config)
        sig = strategy.screen(uptrend_candles(30), 15)
        assert sig is not None
        assert sig.adx_value == Decimal("100")
        assert sig.is_lateral is False

    def test_threshold_is_inclusive(self) -> None:
        """ADX exactly at the threshold counts as lateral."""
        candles = uptrend_candles(30)
        at = AdxScreeningStrategy(
            ScreeningConfig(period=5, max_lateral_threshold=Decimal("100"))
        )
        below = AdxScreeningStrategy(
            ScreeningConfig(period=5, max_lateral_threshold=Decimal("99.99"))
        )
        assert at.screen(candles, 15).is_lateral is True
        assert below.screen(candles, 15).is_lateral is False

    def test_out_of_range_index(self, screening_config) -> None:
        strategy = AdxScreeningStrategy(screening_config)
        candles = ranging_candles(20)
        assert strategy.screen(candles, 20) is None

    def test_idempotent(self, screening_config) -> None:
        strategy = AdxScreeningStrategy(screening_config)
        candles = ranging_then_trend()
        assert strategy.screen(candles, 35) == strategy.screen(candles, 35)

    def test_ignores_future_candles(self, screening_config) -> None:
        strategy = AdxScreeningStrategy(screening_config)
        candles = ranging_then_trend()
        assert strategy.screen(candles, 25) == strategy.screen(candles[:26], 25)


class TestScreenAll:
    """Tests for AdxScreeningStrategy.screen_all()."""

    def test_matches_per_index_screen(self, screening_config) -> None:
        strategy = AdxScreeningStrategy(screening_config)
        candles = ranging_then_trend()
        signals = strategy.screen_all(candles)
        assert len(signals) == len(candles)
        for index, sig in enumerate(signals):
            assert sig == strategy.screen(candles, index)

    def test_regime_switches_when_trend_starts(self, screening_config) -> None:
        strategy = AdxScreeningStrategy(screening_config)
        signals = strategy.screen_all(ranging_then_trend())
        assert all(s.is_lateral for s in signals[10:30])
        assert signals[30].is_lateral is False
        assert signals[40].adx_value > Decimal("25")

    def test_short_series_is_all_none(self) -> None:
        strategy = AdxScreeningStrategy()
        assert strategy.screen_all(ranging_candles(27)) == [None] * 27

    def test_empty_series(self) -> None:
        assert AdxScreeningStrategy().screen_all([]) == []


class TestWithParams:
    """Tests for AdxScreeningStrategy.with_params()."""

    def test_returns_new_strategy(self) -> None:
        strategy = AdxScreeningStrategy()
        tuned = strategy.with_params(period=7, max_lateral_threshold=Decimal("20"))
        assert tuned.params.period == 7
        assert tuned.params.max_lateral_threshold == Decimal("20")
        assert strategy.params.period == 14

    def test_default_config(self) -> None:
        assert AdxScreeningStrategy().params == ScreeningConfig()
