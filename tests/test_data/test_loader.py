"""Tests for CSV candle loading and validation."""

from decimal import Decimal

import pytest

from conftest import HOUR_MS, START_MS, make_candle
from regime.data.loader import load_candles_csv, parse_candles_csv, validate_candles
from regime.data.models import Candle
from regime.exceptions import DataLoadError, InvalidCandleDataError

CSV_WITH_HEADER = """timestamp,open,high,low,close
1700000000000,100,101,99,100.5
1700003600000,100.5,102,100,101.25
1700007200000,101.25,101.5,99.75,100
"""


class TestParseCandlesCsv:
    """Tests for parse_candles_csv()."""

    def test_parses_rows_with_header(self) -> None:
        candles = parse_candles_csv(CSV_WITH_HEADER)
        assert len(candles) == 3
        assert candles[0] == Candle(
            timestamp_ms=1_700_000_000_000,
            open=Decimal("100"),
            high=Decimal("101"),
            low=Decimal("99"),
            close=Decimal("100.5"),
        )
        assert candles[1].close == Decimal("101.25")

    def test_parses_rows_without_header(self) -> None:
        content = "1700000000000,100,101,99,100.5\n1700003600000,100,101,99,100\n"
        assert len(parse_candles_csv(content)) == 2

    def test_iso_timestamps(self) -> None:
        content = "date,open,high,low,close\n2024-01-01,1,2,0.5,1.5\n2024-01-01T01:00:00,1,2,0.5,1.5\n"
        candles = parse_candles_csv(content)
        assert candles[0].timestamp_ms == 1_704_067_200_000
        assert candles[1].timestamp_ms == 1_704_067_200_000 + HOUR_MS

    def test_empty_content(self) -> None:
        assert parse_candles_csv("") == []
        assert parse_candles_csv("timestamp,open,high,low,close\n") == []

    def test_malformed_rows_skipped(self) -> None:
        content = CSV_WITH_HEADER + "1700010800000,abc,1,1,1\n1700014400000,1,2\n"
        candles = parse_candles_csv(content)
        assert len(candles) == 3

    def test_strict_rejects_short_row(self) -> None:
        with pytest.raises(InvalidCandleDataError, match="columns"):
            parse_candles_csv(CSV_WITH_HEADER + "1700010800000,1,2\n", strict=True)

    def test_strict_rejects_bad_price(self) -> None:
        with pytest.raises(InvalidCandleDataError, match="could not be parsed"):
            parse_candles_csv(CSV_WITH_HEADER + "1700010800000,x,1,1,1\n", strict=True)

    def test_strict_validates_order(self) -> None:
        content = "1700003600000,1,2,0.5,1\n1700000000000,1,2,0.5,1\n"
        with pytest.raises(InvalidCandleDataError, match="not after"):
            parse_candles_csv(content, strict=True)


class TestLoadCandlesCsv:
    """Tests for load_candles_csv()."""

    def test_reads_file(self, tmp_path) -> None:
        path = tmp_path / "candles.csv"
        path.write_text(CSV_WITH_HEADER, encoding="utf-8")
        candles = load_candles_csv(path)
        assert [c.timestamp_ms for c in candles] == [
            1_700_000_000_000,
            1_700_003_600_000,
            1_700_007_200_000,
        ]

    def test_missing_file_raises_data_load_error(self, tmp_path) -> None:
        with pytest.raises(DataLoadError):
            load_candles_csv(tmp_path / "missing.csv")


class TestValidateCandles:
    """Tests for validate_candles()."""

    def test_accepts_ordered_finite_candles(self) -> None:
        validate_candles([make_candle(i, "101", "99") for i in range(5)])

    def test_accepts_empty(self) -> None:
        validate_candles([])

    def test_rejects_duplicate_timestamp(self) -> None:
        candles = [make_candle(0, "101", "99"), make_candle(0, "101", "99")]
        with pytest.raises(InvalidCandleDataError):
            validate_candles(candles)

    @pytest.mark.parametrize("bad", ["NaN", "Infinity", "-Infinity"])
    def test_rejects_non_finite_price(self, bad: str) -> None:
        candle = Candle(
            timestamp_ms=START_MS,
            open=Decimal("100"),
            high=Decimal("101"),
            low=Decimal("99"),
            close=Decimal(bad),
        )
        with pytest.raises(InvalidCandleDataError, match="non-finite close"):
            validate_candles([candle])
