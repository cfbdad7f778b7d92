"""Performance analytics for completed backtest runs.

Pure Decimal analytics over a list of closed trades. Degenerate inputs
(no trades, no losses, zero variance, no signals) resolve to documented
values instead of raising:
- statistics over an empty set are 0
- profit factor is Infinity with profits but no losses, 0 with neither
- Sharpe is 0 with fewer than two trades or zero standard deviation

No external dependencies (no pandas, numpy, quantstats).
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from regime.backtest.models import BacktestMetrics, Trade

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")
INFINITY = Decimal("Infinity")


def _mean(values: list[Decimal]) -> Decimal:
    if not values:
        return _ZERO
    return sum(values, _ZERO) / Decimal(len(values))


def win_rate(trades: list[Trade]) -> Decimal:
    """Fraction of trades with pnl > 0, or 0 without trades."""
    if not trades:
        return _ZERO
    wins = sum(1 for t in trades if t.pnl > _ZERO)
    return Decimal(wins) / Decimal(len(trades))


def profit_factor(gross_profit: Decimal, gross_loss: Decimal) -> Decimal:
    """Gross profit over gross loss (both non-negative).

    Returns:
        The ratio; Infinity if gross_loss is 0 and gross_profit > 0;
        0 if both are 0.
    """
    if gross_loss > _ZERO:
        return gross_profit / gross_loss
    if gross_profit > _ZERO:
        return INFINITY
    return _ZERO


def sharpe_ratio(returns: list[Decimal]) -> Decimal:
    """Per-trade Sharpe-like ratio: mean / sample standard deviation.

    Uses the unbiased (n-1) estimator, no risk-free rate and no
    annualization.

    Args:
        returns: Per-trade returns as fractions.

    Returns:
        The ratio, or 0 with fewer than two returns or zero deviation.
    """
    if len(returns) < 2:
        return _ZERO

    n = Decimal(len(returns))
    mean = sum(returns, _ZERO) / n
    variance = sum(((r - mean) ** 2 for r in returns), _ZERO) / (n - Decimal("1"))
    std_dev = variance.sqrt()

    if std_dev == _ZERO:
        return _ZERO
    return mean / std_dev


def compute_metrics(
    trades: list[Trade],
    final_capital: Decimal,
    max_drawdown: Decimal,
    screening_signals: int,
    initial_capital: Decimal,
) -> BacktestMetrics:
    """Aggregate closed trades and capital figures into BacktestMetrics.

    Args:
        trades: Closed trades in close order.
        final_capital: Capital after the last close.
        max_drawdown: Largest peak-to-trough capital decline (absolute).
        screening_signals: Number of lateral-regime bars seen by the run.
        initial_capital: Starting capital.

    Returns:
        BacktestMetrics. screening_success_rate divides winning trades by the
        number of lateral bars, not by the number of trades.
    """
    from regime.backtest.models import BacktestMetrics

    wins = [t.pnl for t in trades if t.pnl > _ZERO]
    losses = [t.pnl for t in trades if t.pnl < _ZERO]
    pnls = [t.pnl for t in trades]

    total_pnl = sum(pnls, _ZERO)
    gross_profit = sum(wins, _ZERO)
    gross_loss = abs(sum(losses, _ZERO))

    success_rate = (
        Decimal(len(wins)) / Decimal(screening_signals) * _HUNDRED
        if screening_signals > 0
        else _ZERO
    )

    return BacktestMetrics(
        total_trades=len(trades),
        winning_trades=len(wins),
        losing_trades=len(losses),
        win_rate=win_rate(trades),
        total_pnl=total_pnl,
        total_pnl_percent=(final_capital - initial_capital) / initial_capital * _HUNDRED,
        average_pnl=_mean(pnls),
        average_win=_mean(wins),
        average_loss=_mean(losses),
        largest_win=max(wins) if wins else _ZERO,
        largest_loss=min(losses) if losses else _ZERO,
        profit_factor=profit_factor(gross_profit, gross_loss),
        final_capital=final_capital,
        max_drawdown=max_drawdown,
        max_drawdown_percent=max_drawdown / initial_capital * _HUNDRED,
        sharpe_ratio=sharpe_ratio([t.pnl_percent for t in trades]),
        screening_signals=screening_signals,
        screening_success_rate=success_rate,
        average_holding_bars=_mean([Decimal(t.duration_bars) for t in trades]),
    )
