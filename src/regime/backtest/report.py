"""Text and CSV rendering of backtest results.

Consumes BacktestResult only; nothing here feeds back into a run.
"""

import csv
import io
from datetime import datetime, timezone
from decimal import Decimal

from regime.backtest.models import BacktestResult, Trade

_WIDTH = 60


def _iso(timestamp_ms: int) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc).isoformat()


def _signed(value: Decimal, places: int = 2) -> str:
    sign = "+" if value >= 0 else ""
    return f"{sign}{value:.{places}f}"


def _section(title: str) -> list[str]:
    return [title, "-" * _WIDTH]


def format_backtest_summary(
    result: BacktestResult,
    show_trades: bool = True,
    max_trades: int = 10,
) -> str:
    """Format a console summary of a backtest run.

    Args:
        result: The completed run.
        show_trades: Include the per-trade listing.
        max_trades: Maximum number of trades listed.

    Returns:
        Multi-line summary string.
    """
    m = result.metrics
    sc = result.screening_config
    pf = "inf" if m.profit_factor.is_infinite() else f"{m.profit_factor:.2f}"

    lines: list[str] = ["=" * _WIDTH, "ADX SCREENING BACKTEST RESULTS", "=" * _WIDTH]
    lines.append(
        f"ADX period {sc.period}, lateral when ADX <= {sc.max_lateral_threshold}, "
        f"mode {result.config.trading_mode.value}"
    )
    lines.append("")

    lines += _section("PERFORMANCE SUMMARY")
    lines.append(f"Final Capital:          ${m.final_capital:.2f}")
    lines.append(
        f"Total P&L:              ${m.total_pnl:.2f} ({_signed(m.total_pnl_percent)}%)"
    )
    lines.append(
        f"Max Drawdown:           ${m.max_drawdown:.2f} ({m.max_drawdown_percent:.2f}%)"
    )
    lines.append(f"Sharpe Ratio:           {m.sharpe_ratio:.3f}")
    lines.append("")

    lines += _section("TRADE STATISTICS")
    lines.append(f"Total Trades:           {m.total_trades}")
    lines.append(f"Winning Trades:         {m.winning_trades}")
    lines.append(f"Losing Trades:          {m.losing_trades}")
    lines.append(f"Win Rate:               {m.win_rate * 100:.2f}%")
    lines.append(f"Profit Factor:          {pf}")
    lines.append(f"Avg Holding (bars):     {m.average_holding_bars:.1f}")
    lines.append("")

    lines += _section("AVERAGE PERFORMANCE")
    lines.append(f"Average P&L:            ${m.average_pnl:.2f}")
    lines.append(f"Average Win:            ${m.average_win:.2f}")
    lines.append(f"Average Loss:           ${m.average_loss:.2f}")
    lines.append(f"Largest Win:            ${m.largest_win:.2f}")
    lines.append(f"Largest Loss:           ${m.largest_loss:.2f}")
    lines.append("")

    lines += _section("SCREENING STATISTICS")
    lines.append(f"Lateral Bars:           {m.screening_signals}")
    lines.append(f"Signal Success Rate:    {m.screening_success_rate:.2f}%")
    lines.append("")

    if show_trades and result.trades:
        lines += _section("TRADES")
        for number, trade in enumerate(result.trades[:max_trades], start=1):
            status = "WIN " if trade.is_win else "LOSS"
            lines.append(f"[{status}] Trade #{number} ({trade.side.value.upper()})")
            lines.append(f"   Entry:  {_iso(trade.entry_time_ms)} @ ${trade.entry_price:.2f}")
            lines.append(f"   Exit:   {_iso(trade.exit_time_ms)} @ ${trade.exit_price:.2f}")
            lines.append(
                f"   P&L:    {_signed(trade.pnl)} ({_signed(trade.pnl_percent * 100)}%)"
            )
            lines.append(
                f"   Duration: {trade.duration_bars} bars, exit: {trade.exit_reason.value}"
            )
        remaining = len(result.trades) - max_trades
        if remaining > 0:
            lines.append(f"... and {remaining} more trades")
        lines.append("")

    lines.append("=" * _WIDTH)
    return "\n".join(lines)


def format_trades_csv(trades: list[Trade] | tuple[Trade, ...]) -> str:
    """Render trades as CSV with a header row.

    Columns: trade, side, entry_time, entry_price, exit_time, exit_price,
    duration_bars, pnl, pnl_percent, exit_reason. pnl_percent is a
    percentage (fraction * 100).
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow([
        "trade",
        "side",
        "entry_time",
        "entry_price",
        "exit_time",
        "exit_price",
        "duration_bars",
        "pnl",
        "pnl_percent",
        "exit_reason",
    ])
    for number, trade in enumerate(trades, start=1):
        writer.writerow([
            number,
            trade.side.value,
            _iso(trade.entry_time_ms),
            f"{trade.entry_price:.2f}",
            _iso(trade.exit_time_ms),
            f"{trade.exit_price:.2f}",
            trade.duration_bars,
            f"{trade.pnl:.2f}",
            f"{trade.pnl_percent * 100:.4f}",
            trade.exit_reason.value,
        ])
    return buffer.getvalue()


def format_equity_curve(
    result: BacktestResult, width: int = _WIDTH, height: int = 20
) -> str:
    """Render the capital trace (start + one point per close) as ASCII art.

    Returns:
        Chart string, or "No trades to display" for a run without trades.
    """
    if not result.trades:
        return "No trades to display"

    points = [ep.capital for ep in result.equity_curve]
    top = max(points)
    bottom = min(points)
    span = top - bottom

    grid = [[" "] * width for _ in range(height)]
    last = len(points) - 1
    for i, capital in enumerate(points):
        normalized = (capital - bottom) / span if span > 0 else Decimal("0.5")
        row = int((1 - normalized) * (height - 1))
        col = int(Decimal(i) / Decimal(last) * (width - 1)) if last else 0
        grid[row][col] = "*"

    lines = ["EQUITY CURVE", "-" * width]
    lines.append(f"${top:.2f}")
    lines += ["|" + "".join(row) for row in grid]
    lines.append(f"${bottom:.2f}")
    lines.append("-" * width)
    return "\n".join(lines)
