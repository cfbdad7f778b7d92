"""Data models for the backtest engine.

Defines the run configuration, the open-position and closed-trade records,
the equity curve, aggregate metrics, and single-run / sweep results.

CRITICAL: All monetary values use Decimal. Never use float for prices, capital or P&L.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from decimal import Decimal
from enum import Enum

from regime.exceptions import InvalidConfigError
from regime.signals.models import ScreeningConfig


class TradingMode(str, Enum):
    """Which side(s) the simulator may open."""

    LONG = "long"
    SHORT = "short"
    BOTH = "both"


class PositionSide(str, Enum):
    LONG = "long"
    SHORT = "short"


class ExitReason(str, Enum):
    """Why a position was closed."""

    SIGNAL = "signal"  # screen turned non-lateral
    MAX_HOLDING = "max_holding"  # holding period cap reached
    END_OF_DATA = "end_of_data"  # forced close after the last candle


def _as_decimal(value: object) -> Decimal:
    return value if isinstance(value, Decimal) else Decimal(str(value))


@dataclass(frozen=True)
class BacktestConfig:
    """Configuration for a single backtest run.

    Rates are fractions: commission_rate=0.001 is 0.1% per side.
    Numeric fields given as int/float/str are converted to Decimal.
    """

    initial_capital: Decimal = Decimal("10000")
    position_size_fraction: Decimal = Decimal("0.1")
    commission_rate: Decimal = Decimal("0.001")
    slippage_rate: Decimal = Decimal("0.0005")
    max_holding_period: int | None = None  # bars; None = unlimited
    trading_mode: TradingMode = TradingMode.LONG

    def __post_init__(self) -> None:
        for name in (
            "initial_capital",
            "position_size_fraction",
            "commission_rate",
            "slippage_rate",
        ):
            object.__setattr__(self, name, _as_decimal(getattr(self, name)))
        try:
            object.__setattr__(self, "trading_mode", TradingMode(self.trading_mode))
        except ValueError as e:
            raise InvalidConfigError(
                f"trading_mode must be one of long/short/both, got {self.trading_mode!r}"
            ) from e

        if self.initial_capital <= Decimal("0"):
            raise InvalidConfigError(
                f"initial_capital must be positive, got {self.initial_capital}"
            )
        if not Decimal("0") < self.position_size_fraction <= Decimal("1"):
            raise InvalidConfigError(
                f"position_size_fraction must be in (0, 1], got {self.position_size_fraction}"
            )
        if self.commission_rate < Decimal("0") or self.slippage_rate < Decimal("0"):
            raise InvalidConfigError("commission_rate and slippage_rate must be >= 0")
        if self.max_holding_period is not None and self.max_holding_period < 1:
            raise InvalidConfigError(
                f"max_holding_period must be a positive bar count, got {self.max_holding_period}"
            )

    def with_overrides(self, **kwargs: object) -> BacktestConfig:
        """Return a new BacktestConfig with specified fields overridden."""
        return replace(self, **kwargs)

    def to_dict(self) -> dict:
        return {
            "initial_capital": str(self.initial_capital),
            "position_size_fraction": str(self.position_size_fraction),
            "commission_rate": str(self.commission_rate),
            "slippage_rate": str(self.slippage_rate),
            "max_holding_period": self.max_holding_period,
            "trading_mode": self.trading_mode.value,
        }


@dataclass(frozen=True)
class Position:
    """An open exposure. entry_price already includes slippage."""

    side: PositionSide
    entry_index: int
    entry_price: Decimal


@dataclass(frozen=True)
class Trade:
    """A closed round-trip trade.

    Attributes:
        entry_index: Candle index of the entry fill.
        exit_index: Candle index of the exit fill (always > entry_index).
        entry_price: Slippage-adjusted entry fill.
        exit_price: Slippage-adjusted exit fill.
        entry_time_ms: Timestamp of the entry candle.
        exit_time_ms: Timestamp of the exit candle.
        pnl: Dollar P&L on the capital allocated to the trade.
        pnl_percent: Return as a fraction, net of round-trip commission.
        side: Long or short.
        exit_reason: What triggered the exit.
    """

    entry_index: int
    exit_index: int
    entry_price: Decimal
    exit_price: Decimal
    entry_time_ms: int
    exit_time_ms: int
    pnl: Decimal
    pnl_percent: Decimal
    side: PositionSide
    exit_reason: ExitReason = ExitReason.SIGNAL

    @property
    def duration_bars(self) -> int:
        return self.exit_index - self.entry_index

    @property
    def is_win(self) -> bool:
        return self.pnl > Decimal("0")

    def to_dict(self) -> dict:
        return {
            "entry_index": self.entry_index,
            "exit_index": self.exit_index,
            "entry_price": str(self.entry_price),
            "exit_price": str(self.exit_price),
            "entry_time_ms": self.entry_time_ms,
            "exit_time_ms": self.exit_time_ms,
            "pnl": str(self.pnl),
            "pnl_percent": str(self.pnl_percent),
            "side": self.side.value,
            "exit_reason": self.exit_reason.value,
            "duration_bars": self.duration_bars,
        }


@dataclass(frozen=True)
class EquityPoint:
    """Capital after a trade close (or at the start of the run).

    Attributes:
        index: Candle index of the close (-1 for the starting point).
        timestamp_ms: Timestamp of that candle (first candle for the start).
        capital: Running capital after the close.
        drawdown: Peak capital minus running capital at this point.
    """

    index: int
    timestamp_ms: int
    capital: Decimal
    drawdown: Decimal


@dataclass(frozen=True)
class BacktestMetrics:
    """Aggregate statistics of a completed run.

    Monetary fields are Decimal. Statistics over empty sets are 0, and
    profit_factor is Decimal("Infinity") when there are profits but no
    losses. win_rate is a fraction; the *_percent fields and
    screening_success_rate are percentages.
    """

    total_trades: int
    winning_trades: int
    losing_trades: int
    win_rate: Decimal
    total_pnl: Decimal
    total_pnl_percent: Decimal
    average_pnl: Decimal
    average_win: Decimal
    average_loss: Decimal
    largest_win: Decimal
    largest_loss: Decimal
    profit_factor: Decimal
    final_capital: Decimal
    max_drawdown: Decimal
    max_drawdown_percent: Decimal
    sharpe_ratio: Decimal
    screening_signals: int
    screening_success_rate: Decimal
    average_holding_bars: Decimal

    def to_dict(self) -> dict:
        """Serialize to dict; Decimals as strings, ints unchanged."""
        return {
            key: str(value) if isinstance(value, Decimal) else value
            for key, value in self.__dict__.items()
        }


@dataclass(frozen=True)
class BacktestResult:
    """Complete result of a single backtest run."""

    screening_config: ScreeningConfig
    config: BacktestConfig
    metrics: BacktestMetrics
    trades: tuple[Trade, ...] = ()
    equity_curve: tuple[EquityPoint, ...] = ()

    def compact(self) -> BacktestResult:
        """Return a copy without trades and equity curve (metrics only)."""
        return replace(self, trades=(), equity_curve=())

    def to_dict(self) -> dict:
        return {
            "screening_config": self.screening_config.to_dict(),
            "config": self.config.to_dict(),
            "metrics": self.metrics.to_dict(),
            "trades": [t.to_dict() for t in self.trades],
            "equity_curve": [
                {
                    "index": ep.index,
                    "timestamp_ms": ep.timestamp_ms,
                    "capital": str(ep.capital),
                    "drawdown": str(ep.drawdown),
                }
                for ep in self.equity_curve
            ],
        }


@dataclass
class SweepResult:
    """Result of a parameter sweep across screening configurations.

    Attributes:
        param_grid: The grid that was swept (param_name -> list of values).
        results: (param_combination_dict, BacktestResult) pairs in grid order.
    """

    param_grid: dict[str, list]
    results: list[tuple[dict, BacktestResult]] = field(default_factory=list)

    @property
    def best(self) -> tuple[dict, BacktestResult] | None:
        """The combination with the highest total P&L (first one on ties)."""
        if not self.results:
            return None
        return max(self.results, key=lambda item: item[1].metrics.total_pnl)

    def to_dict(self) -> dict:
        return {
            "param_grid": {
                k: [str(v) if isinstance(v, Decimal) else v for v in vals]
                for k, vals in self.param_grid.items()
            },
            "results": [
                {
                    "params": {
                        k: str(v) if isinstance(v, Decimal) else v
                        for k, v in params.items()
                    },
                    "result": result.to_dict(),
                }
                for params, result in self.results
            ],
        }
