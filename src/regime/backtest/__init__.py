"""Backtest engine package.

Provides the single-position trade simulator driven by the ADX regime
screen, high-level runners, parameter sweeps over screening parameters, and
text/CSV rendering of results.
"""

from regime.backtest.models import (
    BacktestConfig,
    BacktestMetrics,
    BacktestResult,
    EquityPoint,
    ExitReason,
    Position,
    PositionSide,
    SweepResult,
    Trade,
    TradingMode,
)
from regime.backtest.engine import BacktestEngine
from regime.backtest.presets import STRATEGY_PRESETS
from regime.backtest.report import (
    format_backtest_summary,
    format_equity_curve,
    format_trades_csv,
)
from regime.backtest.runner import load_candles, run_backtest, run_from_settings
from regime.backtest.sweep import ParameterSweep, format_sweep_summary

__all__ = [
    "STRATEGY_PRESETS",
    "BacktestConfig",
    "BacktestEngine",
    "BacktestMetrics",
    "BacktestResult",
    "EquityPoint",
    "ExitReason",
    "ParameterSweep",
    "Position",
    "PositionSide",
    "SweepResult",
    "Trade",
    "TradingMode",
    "format_backtest_summary",
    "format_equity_curve",
    "format_sweep_summary",
    "format_trades_csv",
    "load_candles",
    "run_backtest",
    "run_from_settings",
]
