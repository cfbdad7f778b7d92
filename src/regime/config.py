"""Configuration system using pydantic-settings with environment variable loading.

Settings classes hold the environment-driven defaults. Each run works on a
frozen config record built via ``to_config()``, so independent runs (e.g. a
parameter sweep) never share mutable parameters.
"""

from decimal import Decimal
from typing import TYPE_CHECKING, Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from regime.backtest.models import BacktestConfig
    from regime.signals.models import ScreeningConfig


class ScreeningSettings(BaseSettings):
    """ADX screening rule parameters."""

    model_config = SettingsConfigDict(env_prefix="SCREENING_")

    period: int = 14
    max_lateral_threshold: Decimal = Decimal("15.0")  # ADX at or below -> lateral

    def to_config(self) -> "ScreeningConfig":
        """Build the frozen ScreeningConfig used by a single run."""
        from regime.signals.models import ScreeningConfig

        return ScreeningConfig(
            period=self.period,
            max_lateral_threshold=self.max_lateral_threshold,
        )


class BacktestSettings(BaseSettings):
    """Trade simulator parameters.

    All fields configurable via BACKTEST_ environment variable prefix.
    Rates are fractions (0.001 = 0.1%).
    """

    model_config = SettingsConfigDict(env_prefix="BACKTEST_")

    initial_capital: Decimal = Decimal("10000")
    position_size_fraction: Decimal = Decimal("0.1")  # 10% of capital per trade
    commission_rate: Decimal = Decimal("0.001")  # charged on entry and exit
    slippage_rate: Decimal = Decimal("0.0005")
    max_holding_period: int | None = None  # bars; None = unlimited
    trading_mode: Literal["long", "short", "both"] = "long"

    def to_config(self) -> "BacktestConfig":
        """Build the frozen BacktestConfig used by a single run."""
        from regime.backtest.models import BacktestConfig, TradingMode

        return BacktestConfig(
            initial_capital=self.initial_capital,
            position_size_fraction=self.position_size_fraction,
            commission_rate=self.commission_rate,
            slippage_rate=self.slippage_rate,
            max_holding_period=self.max_holding_period,
            trading_mode=TradingMode(self.trading_mode),
        )


class DataSettings(BaseSettings):
    """Market data source configuration.

    Either a CSV path is given, or synthetic candles are generated.
    """

    model_config = SettingsConfigDict(env_prefix="DATA_")

    csv_path: str | None = None
    synthetic_candles: int = 1000
    synthetic_start_price: Decimal = Decimal("100")
    synthetic_volatility: Decimal = Decimal("0.5")
    synthetic_timeframe_ms: int = 3_600_000  # 1h candles
    seed: int | None = None


class AppSettings(BaseSettings):
    """Root application settings, composing all sub-settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
    )

    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"  # LOG_FORMAT
    screening: ScreeningSettings = ScreeningSettings()
    backtest: BacktestSettings = BacktestSettings()
    data: DataSettings = DataSettings()
