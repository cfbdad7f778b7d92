"""Single-position trade simulator driven by the ADX regime screen.

Walks the candle sequence in ascending time order with a two-state machine:

- NoPosition -> Holding: the bar's screening signal is lateral. The fill is
  the bar's own close adjusted for slippage; the entry bar evaluates no exit.
- Holding -> NoPosition: the signal turns non-lateral, or the configured
  max holding period (in bars) has elapsed. A bar that closes a position
  does not open a new one.

Any position still open after the last candle is force-closed at the last
close. Capital compounds trade by trade; peak capital and max drawdown are
updated after every close.

The engine performs no I/O apart from logging and raises nothing for
well-formed input. Each run keeps its state in local variables, so one
engine instance can serve concurrent runs.

CRITICAL: All monetary values use Decimal. Never use float for prices, capital or P&L.
"""

from decimal import Decimal, getcontext, localcontext

from regime.analytics.metrics import compute_metrics
from regime.backtest.models import (
    BacktestConfig,
    BacktestResult,
    EquityPoint,
    ExitReason,
    Position,
    PositionSide,
    Trade,
    TradingMode,
)
from regime.data.models import Candle
from regime.logging import get_logger
from regime.signals.models import ScreeningSignal
from regime.signals.screening import AdxScreeningStrategy

logger = get_logger(__name__)

#: Fixed precision for per-trade dollar P&L. Keeps every capital update an
#: exact Decimal addition so final capital == initial capital + sum(pnl).
_PNL_QUANTIZE = Decimal("0.0000000001")

_ONE = Decimal("1")
_TWO = Decimal("2")
_ZERO = Decimal("0")


def _ledger_precision(*values: Decimal) -> int:
    """Context precision that holds ``values`` to 10 places without rounding.

    Covers the whole-number digits of the largest value, the 10 fractional
    digits and a carry digit; never less than the current precision.
    """
    widest = max(v.adjusted() for v in values)
    return max(getcontext().prec, widest + 13)


class BacktestEngine:
    """Simulates the lateral-market entry/exit rule over a candle series.

    Args:
        strategy: Screening strategy producing the per-bar regime signals.
        config: Capital, sizing, cost and trading-mode parameters.
    """

    def __init__(
        self,
        strategy: AdxScreeningStrategy,
        config: BacktestConfig | None = None,
    ) -> None:
        self._strategy = strategy
        self._config = config if config is not None else BacktestConfig()

    @property
    def config(self) -> BacktestConfig:
        return self._config

    def _entry_side(self) -> PositionSide:
        # Mode "both" opens longs, matching mode "long" (see DESIGN.md).
        if self._config.trading_mode == TradingMode.SHORT:
            return PositionSide.SHORT
        return PositionSide.LONG

    def _entry_price(self, side: PositionSide, close: Decimal) -> Decimal:
        slippage = self._config.slippage_rate
        if side == PositionSide.LONG:
            return close * (_ONE + slippage)
        return close * (_ONE - slippage)

    def _exit_price(self, side: PositionSide, close: Decimal) -> Decimal:
        slippage = self._config.slippage_rate
        if side == PositionSide.LONG:
            return close * (_ONE - slippage)
        return close * (_ONE + slippage)

    def _pnl_percent(self, position: Position, exit_price: Decimal) -> Decimal:
        """Return net of round-trip commission, as a fraction."""
        if position.side == PositionSide.LONG:
            raw = (exit_price - position.entry_price) / position.entry_price
        else:
            raw = (position.entry_price - exit_price) / position.entry_price
        return raw - self._config.commission_rate * _TWO

    def _holding_expired(self, position: Position, index: int) -> bool:
        cap = self._config.max_holding_period
        return cap is not None and index - position.entry_index >= cap

    def _close(
        self,
        position: Position,
        candles: list[Candle],
        index: int,
        capital: Decimal,
        reason: ExitReason,
    ) -> Trade:
        """Build the Trade for closing ``position`` at ``candles[index]``."""
        exit_price = self._exit_price(position.side, candles[index].close)
        pnl_percent = self._pnl_percent(position, exit_price)
        raw_pnl = capital * self._config.position_size_fraction * pnl_percent
        with localcontext() as ctx:
            ctx.prec = _ledger_precision(raw_pnl)
            pnl = raw_pnl.quantize(_PNL_QUANTIZE)

        return Trade(
            entry_index=position.entry_index,
            exit_index=index,
            entry_price=position.entry_price,
            exit_price=exit_price,
            entry_time_ms=candles[position.entry_index].timestamp_ms,
            exit_time_ms=candles[index].timestamp_ms,
            pnl=pnl,
            pnl_percent=pnl_percent,
            side=position.side,
            exit_reason=reason,
        )

    def run(
        self,
        candles: list[Candle],
        signals: list[ScreeningSignal | None] | None = None,
    ) -> BacktestResult:
        """Run the simulation and aggregate the results.

        Args:
            candles: Candles ordered by timestamp ascending.
            signals: Precomputed screening signals, one per candle. Computed
                with the engine's strategy when omitted.

        Returns:
            BacktestResult with the trade list, equity curve and metrics.
        """
        config = self._config
        if signals is None:
            signals = self._strategy.screen_all(candles)

        capital = config.initial_capital
        peak_capital = capital
        max_drawdown = _ZERO
        position: Position | None = None
        trades: list[Trade] = []
        lateral_bars = 0
        last_index = len(candles) - 1

        equity_curve: list[EquityPoint] = [
            EquityPoint(
                index=-1,
                timestamp_ms=candles[0].timestamp_ms if candles else 0,
                capital=capital,
                drawdown=_ZERO,
            )
        ]

        logger.info(
            "backtest_starting",
            candle_count=len(candles),
            period=self._strategy.params.period,
            max_lateral_threshold=str(self._strategy.params.max_lateral_threshold),
            trading_mode=config.trading_mode.value,
            max_holding_period=config.max_holding_period,
        )

        def record_close(trade: Trade) -> None:
            nonlocal capital, peak_capital, max_drawdown
            with localcontext() as ctx:
                ctx.prec = _ledger_precision(capital, peak_capital, trade.pnl)
                capital += trade.pnl
                if capital > peak_capital:
                    peak_capital = capital
                drawdown = peak_capital - capital
            trades.append(trade)
            if drawdown > max_drawdown:
                max_drawdown = drawdown
            equity_curve.append(
                EquityPoint(
                    index=trade.exit_index,
                    timestamp_ms=trade.exit_time_ms,
                    capital=capital,
                    drawdown=drawdown,
                )
            )
            logger.debug(
                "position_closed",
                side=trade.side.value,
                entry_index=trade.entry_index,
                exit_index=trade.exit_index,
                reason=trade.exit_reason.value,
                pnl=str(trade.pnl),
                capital=str(capital),
            )

        for i, (candle, signal) in enumerate(zip(candles, signals)):
            if signal is not None and signal.is_lateral:
                lateral_bars += 1

            if position is None:
                # A fill on the last bar could not exit on a later bar
                if signal is not None and signal.is_lateral and i < last_index:
                    side = self._entry_side()
                    position = Position(
                        side=side,
                        entry_index=i,
                        entry_price=self._entry_price(side, candle.close),
                    )
                    logger.debug(
                        "position_opened",
                        side=side.value,
                        index=i,
                        entry_price=str(position.entry_price),
                        adx=str(signal.adx_value),
                    )
                continue

            reason: ExitReason | None = None
            if signal is not None and not signal.is_lateral:
                reason = ExitReason.SIGNAL
            elif self._holding_expired(position, i):
                reason = ExitReason.MAX_HOLDING

            if reason is not None:
                record_close(self._close(position, candles, i, capital, reason))
                position = None

        if position is not None:
            record_close(
                self._close(position, candles, last_index, capital, ExitReason.END_OF_DATA)
            )
            position = None

        metrics = compute_metrics(
            trades,
            final_capital=capital,
            max_drawdown=max_drawdown,
            screening_signals=lateral_bars,
            initial_capital=config.initial_capital,
        )

        logger.info(
            "backtest_complete",
            total_trades=metrics.total_trades,
            final_capital=str(metrics.final_capital),
            total_pnl=str(metrics.total_pnl),
            max_drawdown=str(metrics.max_drawdown),
            screening_signals=lateral_bars,
        )

        return BacktestResult(
            screening_config=self._strategy.params,
            config=config,
            metrics=metrics,
            trades=tuple(trades),
            equity_curve=tuple(equity_curve),
        )
