"""CSV loading and validation for historical candle data.

Expected column order: ``timestamp,open,high,low,close``. A header row is
detected and skipped. Timestamps are integer milliseconds or ISO-8601
date/datetime strings (interpreted as UTC when no offset is given).

The backtest engine assumes well-formed input; validation happens here, at
the boundary, and nowhere in the numeric core.
"""

import csv
import io
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from pathlib import Path

from regime.data.models import Candle
from regime.exceptions import DataLoadError, InvalidCandleDataError
from regime.logging import get_logger

logger = get_logger(__name__)

_HEADER_MARKERS = ("timestamp", "date", "time")


def _parse_timestamp(raw: str) -> int:
    """Parse an epoch-millisecond integer or an ISO-8601 date string."""
    raw = raw.strip()
    try:
        return int(raw)
    except ValueError:
        pass
    dt = datetime.fromisoformat(raw)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)


def _parse_row(row: list[str]) -> Candle:
    """Convert one CSV row into a Candle.

    Raises:
        ValueError: If the timestamp cannot be parsed.
        InvalidOperation: If a price field is not a valid decimal.
    """
    timestamp_ms = _parse_timestamp(row[0])
    open_, high, low, close = (Decimal(field.strip()) for field in row[1:5])
    return Candle(
        timestamp_ms=timestamp_ms,
        open=open_,
        high=high,
        low=low,
        close=close,
    )


def validate_candles(candles: list[Candle]) -> None:
    """Check the caller preconditions of the backtest engine.

    Args:
        candles: Candle sequence to check.

    Raises:
        InvalidCandleDataError: If any price is non-finite or timestamps are
            not strictly ascending.
    """
    prev_ts: int | None = None
    for idx, candle in enumerate(candles):
        for name in ("open", "high", "low", "close"):
            value: Decimal = getattr(candle, name)
            if not value.is_finite():
                raise InvalidCandleDataError(
                    f"Candle {idx} has non-finite {name}: {value}"
                )
        if prev_ts is not None and candle.timestamp_ms <= prev_ts:
            raise InvalidCandleDataError(
                f"Candle {idx} timestamp {candle.timestamp_ms} is not after "
                f"previous timestamp {prev_ts}"
            )
        prev_ts = candle.timestamp_ms


def parse_candles_csv(content: str, strict: bool = False) -> list[Candle]:
    """Parse CSV text into a list of candles.

    Rows with fewer than five columns or unparseable values are skipped
    (logged at debug level) unless ``strict`` is set.

    Args:
        content: CSV text, ``timestamp,open,high,low,close`` per row.
        strict: Raise on malformed rows and validate the result.

    Returns:
        Candles in file order.

    Raises:
        InvalidCandleDataError: In strict mode, on a malformed row or on
            data failing validate_candles().
    """
    rows = [row for row in csv.reader(io.StringIO(content.strip())) if row]
    if not rows:
        return []

    first = rows[0][0].strip().lower()
    if any(marker in first for marker in _HEADER_MARKERS):
        rows = rows[1:]

    candles: list[Candle] = []
    skipped = 0
    for line_no, row in enumerate(rows, start=1):
        if len(row) < 5:
            if strict:
                raise InvalidCandleDataError(
                    f"Row {line_no} has {len(row)} columns, expected 5"
                )
            skipped += 1
            continue
        try:
            candle = _parse_row(row)
        except (ValueError, InvalidOperation) as e:
            if strict:
                raise InvalidCandleDataError(
                    f"Row {line_no} could not be parsed: {e}"
                ) from e
            skipped += 1
            logger.debug("csv_row_skipped", line=line_no, error=str(e))
            continue
        candles.append(candle)

    if strict:
        validate_candles(candles)

    if skipped:
        logger.warning("csv_rows_skipped", skipped=skipped, parsed=len(candles))

    return candles


def load_candles_csv(path: str | Path, strict: bool = False) -> list[Candle]:
    """Load candles from a CSV file.

    Args:
        path: Path to the CSV file.
        strict: See parse_candles_csv().

    Returns:
        Candles in file order.

    Raises:
        DataLoadError: If the file cannot be read.
        InvalidCandleDataError: In strict mode, on malformed data.
    """
    try:
        content = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise DataLoadError(f"Cannot read candle file {path}: {e}") from e

    candles = parse_candles_csv(content, strict=strict)
    logger.info("candles_loaded", path=str(path), count=len(candles))
    return candles
