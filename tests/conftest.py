"""Shared test fixtures and candle builders for the ADX regime backtester."""

from decimal import Decimal

import pytest

from regime.backtest.models import BacktestConfig
from regime.data.models import Candle
from regime.signals.models import ScreeningConfig, ScreeningSignal

HOUR_MS = 3_600_000
START_MS = 1_700_000_000_000


def make_candle(
    index: int,
    high: Decimal | str,
    low: Decimal | str,
    close: Decimal | str | None = None,
    open_: Decimal | str | None = None,
) -> Candle:
    """Build a 1h candle at position ``index``; close/open default to the midpoint."""
    high = Decimal(high)
    low = Decimal(low)
    mid = (high + low) / 2
    return Candle(
        timestamp_ms=START_MS + index * HOUR_MS,
        open=Decimal(open_) if open_ is not None else mid,
        high=high,
        low=low,
        close=Decimal(close) if close is not None else mid,
    )


def flat_candles(n: int) -> list[Candle]:
    """Constant OHLC: high 101, low 99, close 100."""
    return [make_candle(i, "101", "99", "100", "100") for i in range(n)]


def uptrend_candles(n: int) -> list[Candle]:
    """Highs and lows rise by 1 every bar; true range is constant at 2."""
    return [
        make_candle(i, Decimal(100 + i), Decimal(98 + i), Decimal(99 + i))
        for i in range(n)
    ]


def ranging_candles(n: int) -> list[Candle]:
    """Alternate between a 101/99 bar and a 101.5/99.5 bar.

    +DM and -DM alternate at 0.5 each, so ADX settles near 11 with no trend.
    """
    candles = []
    for i in range(n):
        if i % 2 == 0:
            candles.append(make_candle(i, "101", "99"))
        else:
            candles.append(make_candle(i, "101.5", "99.5"))
    return candles


def ranging_then_trend(ranging: int = 30, trending: int = 30) -> list[Candle]:
    """``ranging`` alternating bars followed by ``trending`` bars rising 2 per bar."""
    candles = ranging_candles(ranging)
    last_high = candles[-1].high
    for k in range(1, trending + 1):
        high = last_high + 2 * k
        candles.append(make_candle(ranging + k - 1, high, high - 2))
    return candles


def signal(lateral: bool, index: int = 0, adx: str | None = None) -> ScreeningSignal:
    """Hand-made screening signal for driving the simulator directly."""
    return ScreeningSignal(
        adx_value=Decimal(adx) if adx is not None else Decimal("10" if lateral else "30"),
        is_lateral=lateral,
        timestamp_ms=START_MS + index * HOUR_MS,
    )


def constant_close_candles(n: int, close: str = "100") -> list[Candle]:
    price = Decimal(close)
    return [
        make_candle(i, price + 1, price - 1, price, price) for i in range(n)
    ]


@pytest.fixture
def screening_config() -> ScreeningConfig:
    """Short-period screening config used by the scenario tests."""
    return ScreeningConfig(period=5, max_lateral_threshold=Decimal("15"))


@pytest.fixture
def frictionless_config() -> BacktestConfig:
    """Backtest config without commission or slippage."""
    return BacktestConfig(
        initial_capital=Decimal("10000"),
        position_size_fraction=Decimal("0.1"),
        commission_rate=Decimal("0"),
        slippage_rate=Decimal("0"),
    )
