"""Command-line entry point for the ADX regime backtester.

Wiring order:
1. AppSettings (environment / .env defaults)
2. Logging setup
3. CLI overrides (preset first, then explicit flags)
4. Candle source (CSV file or seeded synthetic data)
5. Single backtest run, or a parameter sweep with --sweep
6. Report rendering (stdout) and optional trades CSV export

Exit codes: 0 on success, 2 on a RegimeError (bad config or data).
"""

import argparse
import sys
from decimal import Decimal
from pathlib import Path

from regime.backtest.presets import STRATEGY_PRESETS
from regime.backtest.report import (
    format_backtest_summary,
    format_equity_curve,
    format_trades_csv,
)
from regime.backtest.runner import load_candles, run_backtest
from regime.backtest.sweep import ParameterSweep, format_sweep_summary
from regime.config import AppSettings
from regime.exceptions import RegimeError
from regime.logging import get_logger, setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="regime-backtest",
        description="Backtest an ADX lateral-market screen over OHLC candles.",
    )
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--csv", help="CSV file with timestamp,open,high,low,close")
    source.add_argument(
        "--synthetic", type=int, metavar="N", help="generate N synthetic candles"
    )
    parser.add_argument("--seed", type=int, help="seed for synthetic data")
    parser.add_argument("--preset", choices=sorted(STRATEGY_PRESETS))
    parser.add_argument("--period", type=int, help="ADX period")
    parser.add_argument(
        "--max-lateral", type=Decimal, help="ADX threshold for a lateral market"
    )
    parser.add_argument("--mode", choices=["long", "short", "both"])
    parser.add_argument("--max-holding", type=int, help="max bars per trade")
    parser.add_argument("--capital", type=Decimal, help="initial capital")
    parser.add_argument("--position-size", type=Decimal, help="capital fraction per trade")
    parser.add_argument("--commission", type=Decimal, help="commission rate per side")
    parser.add_argument("--slippage", type=Decimal, help="slippage rate per fill")
    parser.add_argument("--trades-csv", type=Path, help="write trades to this CSV file")
    parser.add_argument("--max-trades", type=int, default=10, help="trades listed in summary")
    parser.add_argument("--sweep", action="store_true", help="grid search period/threshold")
    parser.add_argument("--workers", type=int, default=1, help="threads for --sweep")
    parser.add_argument("--log-level", help="override LOG_LEVEL")
    parser.add_argument("--log-format", choices=["console", "json"], help="override LOG_FORMAT")
    return parser


def apply_overrides(settings: AppSettings, args: argparse.Namespace) -> AppSettings:
    """Return settings updated by the preset and explicit CLI flags."""
    screening: dict[str, object] = {}
    backtest: dict[str, object] = {}
    data: dict[str, object] = {}

    if args.preset:
        preset = STRATEGY_PRESETS[args.preset]
        screening.update(preset["screening"])
        backtest.update(preset["backtest"])

    flag_map = {
        "period": (screening, "period"),
        "max_lateral": (screening, "max_lateral_threshold"),
        "mode": (backtest, "trading_mode"),
        "max_holding": (backtest, "max_holding_period"),
        "capital": (backtest, "initial_capital"),
        "position_size": (backtest, "position_size_fraction"),
        "commission": (backtest, "commission_rate"),
        "slippage": (backtest, "slippage_rate"),
        "csv": (data, "csv_path"),
        "synthetic": (data, "synthetic_candles"),
        "seed": (data, "seed"),
    }
    for attr, (target, key) in flag_map.items():
        value = getattr(args, attr)
        if value is not None:
            target[key] = value

    if args.synthetic is not None:
        data["csv_path"] = None

    return settings.model_copy(
        update={
            "screening": settings.screening.model_copy(update=screening),
            "backtest": settings.backtest.model_copy(update=backtest),
            "data": settings.data.model_copy(update=data),
            "log_level": args.log_level or settings.log_level,
            "log_format": args.log_format or settings.log_format,
        }
    )


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = apply_overrides(AppSettings(), args)

    setup_logging(settings.log_level, settings.log_format)
    logger = get_logger("regime.main")

    try:
        screening_config = settings.screening.to_config()
        backtest_config = settings.backtest.to_config()
        candles = load_candles(settings.data)

        if args.sweep:
            sweep = ParameterSweep(candles, max_workers=args.workers)
            sweep_result = sweep.run(
                ParameterSweep.generate_default_grid(),
                base_screening=screening_config,
                base_backtest=backtest_config,
            )
            print(format_sweep_summary(sweep_result))
            return 0

        result = run_backtest(candles, screening_config, backtest_config)
    except RegimeError as e:
        logger.error("backtest_failed", error=str(e), error_type=type(e).__name__)
        return 2

    print(format_backtest_summary(result, max_trades=args.max_trades))
    print(format_equity_curve(result))

    if args.trades_csv is not None:
        args.trades_csv.write_text(format_trades_csv(result.trades), encoding="utf-8")
        logger.info("trades_csv_written", path=str(args.trades_csv), count=len(result.trades))

    return 0


if __name__ == "__main__":
    sys.exit(main())
