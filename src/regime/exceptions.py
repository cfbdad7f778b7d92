"""Custom exceptions for the ADX regime backtester.

The numeric core (indicator, screening, simulator, metrics) never raises for
well-formed input. These exceptions are raised only at the boundary: config
construction, candle validation and data loading.
"""


class RegimeError(Exception):
    """Base exception for all backtester errors."""


class InvalidConfigError(RegimeError):
    """Raised when a screening or backtest config holds an out-of-range value."""


class InvalidCandleDataError(RegimeError):
    """Raised when candle data is non-finite or not in ascending time order."""


class DataLoadError(RegimeError):
    """Raised when historical candle data cannot be read."""
