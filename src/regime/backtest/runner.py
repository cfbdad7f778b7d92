"""High-level entry points for running backtests.

Provides run_backtest() for a single run over an in-memory candle list,
load_candles() to obtain candles from a CSV file or the synthetic
generator, and run_from_settings() wiring both from AppSettings.
"""

import time

from regime.backtest.engine import BacktestEngine
from regime.backtest.models import BacktestConfig, BacktestResult
from regime.config import AppSettings, DataSettings
from regime.data.generator import MarketDataConfig, generate_phased_market_data
from regime.data.loader import load_candles_csv, validate_candles
from regime.data.models import Candle
from regime.logging import get_logger, run_context
from regime.signals.models import ScreeningConfig
from regime.signals.screening import AdxScreeningStrategy

logger = get_logger(__name__)


def run_backtest(
    candles: list[Candle],
    screening_config: ScreeningConfig | None = None,
    backtest_config: BacktestConfig | None = None,
    validate: bool = True,
) -> BacktestResult:
    """Run a single backtest over ``candles``.

    Args:
        candles: Candles ordered by timestamp ascending.
        screening_config: Screening parameters. Defaults to period 14 / 15.0.
        backtest_config: Simulator parameters. Defaults to BacktestConfig().
        validate: Check candle preconditions before running.

    Returns:
        BacktestResult for the run.

    Raises:
        InvalidCandleDataError: If ``validate`` is set and the candles are
            non-finite or out of order.
    """
    if validate:
        validate_candles(candles)

    strategy = AdxScreeningStrategy(screening_config)
    engine = BacktestEngine(strategy, backtest_config)

    start_time = time.monotonic()
    with run_context(run="single"):
        result = engine.run(candles)
    elapsed = time.monotonic() - start_time

    logger.info(
        "run_backtest_complete",
        candle_count=len(candles),
        period=strategy.params.period,
        max_lateral_threshold=str(strategy.params.max_lateral_threshold),
        total_trades=result.metrics.total_trades,
        total_pnl=str(result.metrics.total_pnl),
        elapsed_seconds=round(elapsed, 3),
    )
    return result


def load_candles(settings: DataSettings) -> list[Candle]:
    """Load candles from the configured CSV file, or generate synthetic ones.

    Args:
        settings: Data source settings.

    Returns:
        Candles ordered by timestamp ascending.

    Raises:
        DataLoadError: If the CSV file cannot be read.
        InvalidCandleDataError: If the CSV content is malformed.
    """
    if settings.csv_path:
        return load_candles_csv(settings.csv_path, strict=True)

    config = MarketDataConfig(
        start_price=settings.synthetic_start_price,
        num_candles=settings.synthetic_candles,
        volatility=settings.synthetic_volatility,
        timeframe_ms=settings.synthetic_timeframe_ms,
        seed=settings.seed,
    )
    candles = generate_phased_market_data(config)
    logger.info(
        "synthetic_candles_generated",
        count=len(candles),
        seed=settings.seed,
    )
    return candles


def run_from_settings(settings: AppSettings) -> tuple[list[Candle], BacktestResult]:
    """Load data and run one backtest using application settings.

    Returns:
        Tuple of (candles, result) so callers can reuse the candles.
    """
    candles = load_candles(settings.data)
    result = run_backtest(
        candles,
        screening_config=settings.screening.to_config(),
        backtest_config=settings.backtest.to_config(),
    )
    return candles, result
