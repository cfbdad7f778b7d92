"""Tests for pydantic-settings configuration and the frozen run configs."""

from decimal import Decimal

import pytest

from regime.backtest.models import BacktestConfig, TradingMode
from regime.config import AppSettings, BacktestSettings, DataSettings, ScreeningSettings
from regime.exceptions import InvalidConfigError
from regime.signals.models import ScreeningConfig


class TestSettingsDefaults:
    """Defaults match the reference screen and simulator parameters."""

    def test_screening_defaults(self, monkeypatch) -> None:
        monkeypatch.delenv("SCREENING_PERIOD", raising=False)
        settings = ScreeningSettings()
        assert settings.period == 14
        assert settings.max_lateral_threshold == Decimal("15.0")

    def test_backtest_defaults(self) -> None:
        settings = BacktestSettings()
        assert settings.initial_capital == Decimal("10000")
        assert settings.position_size_fraction == Decimal("0.1")
        assert settings.commission_rate == Decimal("0.001")
        assert settings.slippage_rate == Decimal("0.0005")
        assert settings.max_holding_period is None
        assert settings.trading_mode == "long"

    def test_data_defaults(self) -> None:
        settings = DataSettings()
        assert settings.csv_path is None
        assert settings.synthetic_candles == 1000


class TestEnvironmentOverrides:
    def test_screening_from_env(self, monkeypatch) -> None:
        monkeypatch.setenv("SCREENING_PERIOD", "10")
        monkeypatch.setenv("SCREENING_MAX_LATERAL_THRESHOLD", "22.5")
        settings = ScreeningSettings()
        assert settings.period == 10
        assert settings.max_lateral_threshold == Decimal("22.5")

    def test_backtest_from_env(self, monkeypatch) -> None:
        monkeypatch.setenv("BACKTEST_TRADING_MODE", "short")
        monkeypatch.setenv("BACKTEST_MAX_HOLDING_PERIOD", "25")
        config = BacktestSettings().to_config()
        assert config.trading_mode == TradingMode.SHORT
        assert config.max_holding_period == 25

    def test_nested_app_settings(self, monkeypatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        settings = AppSettings()
        assert settings.log_level == "DEBUG"
        assert isinstance(settings.screening, ScreeningSettings)

    def test_log_format_from_env(self, monkeypatch) -> None:
        monkeypatch.setenv("LOG_FORMAT", "json")
        assert AppSettings().log_format == "json"


class TestToConfig:
    def test_screening_to_config(self) -> None:
        config = ScreeningSettings(period=7, max_lateral_threshold=Decimal("20")).to_config()
        assert config == ScreeningConfig(period=7, max_lateral_threshold=Decimal("20"))

    def test_backtest_to_config(self) -> None:
        config = BacktestSettings(initial_capital=Decimal("500")).to_config()
        assert isinstance(config, BacktestConfig)
        assert config.initial_capital == Decimal("500")
        assert config.trading_mode == TradingMode.LONG

    def test_invalid_values_surface_on_to_config(self) -> None:
        with pytest.raises(InvalidConfigError):
            ScreeningSettings(period=0).to_config()


class TestBacktestConfigValidation:
    """Tests for BacktestConfig.__post_init__."""

    def test_coerces_numbers_to_decimal(self) -> None:
        config = BacktestConfig(initial_capital=5000, commission_rate="0.002")
        assert config.initial_capital == Decimal("5000")
        assert config.commission_rate == Decimal("0.002")
        assert isinstance(config.commission_rate, Decimal)

    def test_accepts_mode_string(self) -> None:
        assert BacktestConfig(trading_mode="both").trading_mode == TradingMode.BOTH

    @pytest.mark.parametrize(
        "overrides",
        [
            {"initial_capital": Decimal("0")},
            {"initial_capital": Decimal("-1")},
            {"position_size_fraction": Decimal("0")},
            {"position_size_fraction": Decimal("1.5")},
            {"commission_rate": Decimal("-0.001")},
            {"slippage_rate": Decimal("-0.001")},
            {"max_holding_period": 0},
            {"trading_mode": "sideways"},
        ],
    )
    def test_rejects_out_of_range(self, overrides) -> None:
        with pytest.raises(InvalidConfigError):
            BacktestConfig(**overrides)

    def test_full_position_allowed(self) -> None:
        assert BacktestConfig(position_size_fraction=Decimal("1")).position_size_fraction == 1

    def test_with_overrides_validates(self) -> None:
        with pytest.raises(InvalidConfigError):
            BacktestConfig().with_overrides(initial_capital=Decimal("0"))

    def test_to_dict(self) -> None:
        d = BacktestConfig(max_holding_period=5).to_dict()
        assert d["initial_capital"] == "10000"
        assert d["max_holding_period"] == 5
        assert d["trading_mode"] == "long"
