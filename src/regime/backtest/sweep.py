"""Parameter sweep engine for grid search over screening configurations.

Generates all combinations of parameter values via itertools.product,
runs a backtest for each, and returns a SweepResult with metrics.

Runs share only the read-only candle list and frozen configs, so they can be
fanned out over a thread pool (``max_workers > 1``) without locking.

Memory management: only the best result (highest total P&L) retains its
trades and equity curve; all others are compacted to metrics only.
"""

from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import fields
from decimal import Decimal
from itertools import product

from regime.backtest.engine import BacktestEngine
from regime.backtest.models import BacktestConfig, BacktestResult, SweepResult
from regime.data.models import Candle
from regime.logging import get_logger, run_context
from regime.signals.models import ScreeningConfig
from regime.signals.screening import AdxScreeningStrategy

logger = get_logger(__name__)

_SCREENING_FIELDS = {f.name for f in fields(ScreeningConfig)}
_BACKTEST_FIELDS = {f.name for f in fields(BacktestConfig)}


class ParameterSweep:
    """Grid search over screening and backtest parameters.

    Args:
        candles: Candles shared (read-only) by every run.
        max_workers: Thread pool size; 1 runs sequentially.
    """

    def __init__(self, candles: list[Candle], max_workers: int = 1) -> None:
        self._candles = candles
        self._max_workers = max(1, max_workers)

    def _build_configs(
        self,
        params: dict,
        base_screening: ScreeningConfig,
        base_backtest: BacktestConfig,
    ) -> tuple[ScreeningConfig, BacktestConfig]:
        screening_overrides: dict[str, object] = {}
        backtest_overrides: dict[str, object] = {}
        for key, value in params.items():
            if key in _SCREENING_FIELDS:
                base_value = getattr(base_screening, key)
                if isinstance(base_value, Decimal) and not isinstance(value, Decimal):
                    value = Decimal(str(value))
                screening_overrides[key] = value
            else:
                backtest_overrides[key] = value
        return (
            base_screening.with_overrides(**screening_overrides),
            base_backtest.with_overrides(**backtest_overrides),
        )

    def _run_one(
        self, screening: ScreeningConfig, backtest: BacktestConfig
    ) -> BacktestResult:
        engine = BacktestEngine(AdxScreeningStrategy(screening), backtest)
        with run_context(
            run="sweep",
            sweep_period=screening.period,
            sweep_threshold=screening.max_lateral_threshold,
        ):
            return engine.run(self._candles)

    def run(
        self,
        param_grid: dict[str, list],
        base_screening: ScreeningConfig | None = None,
        base_backtest: BacktestConfig | None = None,
        progress_callback: Callable | None = None,
    ) -> SweepResult:
        """Run a backtest for every parameter combination in the grid.

        Args:
            param_grid: Maps ScreeningConfig or BacktestConfig field names
                to lists of values.
            base_screening: Screening config the combinations override.
            base_backtest: Backtest config the combinations override.
            progress_callback: Optional callback(current_index, total, params, result).

        Returns:
            SweepResult with results in grid order.

        Raises:
            ValueError: If a param_grid key is not a config field.
            InvalidConfigError: If a combination produces an invalid config.
        """
        base_screening = base_screening or ScreeningConfig()
        base_backtest = base_backtest or BacktestConfig()

        for key in param_grid:
            if key not in _SCREENING_FIELDS and key not in _BACKTEST_FIELDS:
                raise ValueError(
                    f"Invalid parameter '{key}': not a ScreeningConfig or BacktestConfig field"
                )

        keys = list(param_grid.keys())
        combinations = [dict(zip(keys, combo)) for combo in product(*param_grid.values())]
        configs = [
            self._build_configs(params, base_screening, base_backtest)
            for params in combinations
        ]
        total = len(combinations)

        logger.info(
            "sweep_starting",
            parameters=keys,
            total_combinations=total,
            max_workers=self._max_workers,
        )

        if self._max_workers > 1:
            with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
                raw_results = list(pool.map(lambda c: self._run_one(*c), configs))
        else:
            raw_results = [self._run_one(*c) for c in configs]

        results: list[tuple[dict, BacktestResult]] = []
        best_pnl: Decimal | None = None
        best_index = -1

        for idx, (params, result) in enumerate(zip(combinations, raw_results)):
            if best_pnl is None or result.metrics.total_pnl > best_pnl:
                if best_index >= 0:
                    prev_params, prev = results[best_index]
                    results[best_index] = (prev_params, prev.compact())
                best_pnl = result.metrics.total_pnl
                best_index = len(results)
                results.append((params, result))
            else:
                results.append((params, result.compact()))

            if progress_callback is not None:
                progress_callback(idx + 1, total, params, result)

            logger.debug(
                "sweep_run_complete",
                index=idx + 1,
                total=total,
                params={k: str(v) for k, v in params.items()},
                total_pnl=str(result.metrics.total_pnl),
            )

        logger.info(
            "sweep_complete",
            total_combinations=total,
            best_pnl=str(best_pnl) if best_pnl is not None else None,
        )

        return SweepResult(param_grid=param_grid, results=results)

    @staticmethod
    def generate_default_grid() -> dict[str, list]:
        """Default grid over ADX period and lateral threshold."""
        return {
            "period": [7, 10, 14, 20],
            "max_lateral_threshold": [
                Decimal("10"),
                Decimal("15"),
                Decimal("20"),
                Decimal("25"),
            ],
        }


def _profit_factor_cell(value: Decimal) -> str:
    return "inf" if value.is_infinite() else f"{value:.2f}"


def format_sweep_summary(sweep_result: SweepResult, top: int | None = None) -> str:
    """Render the sweep as a ranking table, highest total P&L first.

    Each row shows the swept parameter values, then trade count, lateral
    bars seen by the screen, win rate, profit factor, total P&L and max
    drawdown. The footer repeats the best combination with its screening
    success rate.

    Args:
        sweep_result: The completed sweep result.
        top: Show only the first ``top`` ranked rows; all when None.
    """
    if not sweep_result.results:
        return "No sweep results to display."

    ranked = sorted(
        sweep_result.results,
        key=lambda item: item[1].metrics.total_pnl,
        reverse=True,
    )
    shown = ranked if top is None else ranked[:top]
    names = list(sweep_result.param_grid.keys())

    columns = [*names, "trades", "lateral", "win%", "pf", "total_pnl", "max_dd%"]
    widths = [max(len(c), 10) for c in columns]

    def row(cells: list[str]) -> str:
        return "  ".join(cell.rjust(width) for cell, width in zip(cells, widths))

    header = row(columns)
    lines = [
        f"ADX SCREEN SWEEP: {len(ranked)} combinations ranked by total P&L",
        header,
        "-" * len(header),
    ]
    for params, result in shown:
        m = result.metrics
        lines.append(
            row([
                *(str(params.get(name, "")) for name in names),
                str(m.total_trades),
                str(m.screening_signals),
                f"{m.win_rate * 100:.1f}",
                _profit_factor_cell(m.profit_factor),
                f"{m.total_pnl:.2f}",
                f"{m.max_drawdown_percent:.2f}",
            ])
        )
    if len(shown) < len(ranked):
        lines.append(f"({len(ranked) - len(shown)} more not shown)")

    best_params, best = ranked[0]
    combo = ", ".join(f"{name}={best_params.get(name)}" for name in names)
    lines.append("")
    lines.append(
        f"Best: {combo} -> P&L {best.metrics.total_pnl:.2f}, "
        f"success rate {best.metrics.screening_success_rate:.2f}% "
        f"of {best.metrics.screening_signals} lateral bars"
    )
    return "\n".join(lines)
