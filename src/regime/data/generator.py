"""Synthetic OHLC market data generation.

Two generators are provided:
- generate_market_data: random walk with a constant drift.
- generate_phased_market_data: alternating lateral / uptrend / lateral /
  downtrend phases, useful for exercising the regime screen.

Both take an explicit seed so runs are reproducible. Prices are quantized to
8 decimal places to keep Decimal representations bounded.
"""

import random
from dataclasses import dataclass
from decimal import Decimal

from regime.data.models import Candle

_PRICE_QUANTIZE = Decimal("0.00000001")
_MIN_PRICE = Decimal("0.01")


@dataclass(frozen=True)
class MarketDataConfig:
    """Parameters for synthetic candle generation.

    Attributes:
        start_price: Price of the first candle.
        num_candles: Number of candles to generate.
        volatility: Relative volatility (0-1).
        trend_strength: Drift per candle (-1 to 1, negative = downtrend).
        start_timestamp_ms: Timestamp of the first candle.
        timeframe_ms: Milliseconds between candles (3_600_000 = 1h).
        seed: Seed for the random generator; None for a random seed.
    """

    start_price: Decimal = Decimal("100")
    num_candles: int = 1000
    volatility: Decimal = Decimal("0.5")
    trend_strength: Decimal = Decimal("0")
    start_timestamp_ms: int = 1_700_000_000_000
    timeframe_ms: int = 3_600_000
    seed: int | None = None


def _rand(rng: random.Random) -> Decimal:
    return Decimal(str(rng.random()))


def _make_candle(
    rng: random.Random,
    open_price: Decimal,
    volatility_range: Decimal,
    timestamp_ms: int,
) -> Candle:
    """Build one candle around ``open_price`` with a random high/low/close."""
    high = open_price + _rand(rng) * volatility_range
    low = max(_MIN_PRICE, open_price - _rand(rng) * volatility_range)
    close = low + _rand(rng) * (high - low)
    return Candle(
        timestamp_ms=timestamp_ms,
        open=open_price.quantize(_PRICE_QUANTIZE),
        high=high.quantize(_PRICE_QUANTIZE),
        low=low.quantize(_PRICE_QUANTIZE),
        close=close.quantize(_PRICE_QUANTIZE),
    )


def generate_market_data(config: MarketDataConfig) -> list[Candle]:
    """Generate a random walk with constant drift.

    Args:
        config: Generation parameters.

    Returns:
        Candles ordered by timestamp ascending.
    """
    rng = random.Random(config.seed)
    candles: list[Candle] = []
    price = config.start_price
    base = config.volatility * config.start_price

    for i in range(config.num_candles):
        drift = config.trend_strength * base * Decimal("0.01")
        noise = (_rand(rng) - Decimal("0.5")) * base * Decimal("0.02")
        price = max(_MIN_PRICE, price + drift + noise)

        candle = _make_candle(
            rng,
            price,
            base * Decimal("0.01"),
            config.start_timestamp_ms + i * config.timeframe_ms,
        )
        candles.append(candle)
        price = candle.close

    return candles


def generate_phased_market_data(config: MarketDataConfig) -> list[Candle]:
    """Generate candles cycling through lateral and trending phases.

    The series is split into eight equal phases following the pattern
    lateral, uptrend, lateral, downtrend (repeated). Trending phases use 70%
    of the configured volatility and a strong drift; lateral phases use a
    small random drift. ``trend_strength`` is ignored.

    Args:
        config: Generation parameters.

    Returns:
        Candles ordered by timestamp ascending.
    """
    rng = random.Random(config.seed)
    candles: list[Candle] = []
    price = config.start_price
    floor = config.start_price * Decimal("0.1")
    phase_length = max(1, config.num_candles // 8)

    for i in range(config.num_candles):
        phase = (i // phase_length) % 4

        if phase in (0, 2):
            trend_strength = (_rand(rng) - Decimal("0.5")) * Decimal("0.2")
            volatility = config.volatility
        elif phase == 1:
            trend_strength = Decimal("0.5") + _rand(rng) * Decimal("0.3")
            volatility = config.volatility * Decimal("0.7")
        else:
            trend_strength = -(Decimal("0.5") + _rand(rng) * Decimal("0.3"))
            volatility = config.volatility * Decimal("0.7")

        base = volatility * config.start_price
        drift = trend_strength * base * Decimal("0.01")
        noise = (_rand(rng) - Decimal("0.5")) * base * Decimal("0.02")
        price = max(floor, price + drift + noise)

        candle = _make_candle(
            rng,
            price,
            base * Decimal("0.01"),
            config.start_timestamp_ms + i * config.timeframe_ms,
        )
        candles.append(candle)
        price = candle.close

    return candles
