"""Historical and synthetic candle data.

Provides the Candle model, a CSV loader with boundary validation, and a
seeded synthetic market data generator.
"""

from regime.data.generator import (
    MarketDataConfig,
    generate_market_data,
    generate_phased_market_data,
)
from regime.data.loader import load_candles_csv, parse_candles_csv, validate_candles
from regime.data.models import Candle

__all__ = [
    "Candle",
    "MarketDataConfig",
    "generate_market_data",
    "generate_phased_market_data",
    "load_candles_csv",
    "parse_candles_csv",
    "validate_candles",
]
