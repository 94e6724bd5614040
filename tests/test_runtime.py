from __future__ import annotations

from datetime import UTC, date, datetime
from pathlib import Path

import pandas as pd
import pytest

from benchview.config import Settings
from benchview.data.csv_data import CsvSeriesFetcher
from benchview.data.yfinance_data import YFinanceSeriesFetcher
from benchview.domain.models import (
    DateRange,
    FetchErrorReason,
    FetchFailure,
    FetchResult,
    FetchSuccess,
    RequestSnapshot,
)
from benchview.runtime import build_fetcher, report_filename, run

RANGE = DateRange(start=date(2025, 1, 1), end=date(2025, 1, 10))


def _bars(prices: list[float]) -> pd.DataFrame:
    index = pd.DatetimeIndex(pd.bdate_range("2025-01-02", periods=len(prices)), name="date")
    return pd.DataFrame(
        {
            "open": prices,
            "high": prices,
            "low": prices,
            "close": prices,
            "adj_close": prices,
            "volume": [500.0] * len(prices),
        },
        index=index,
    )


class StaticFetcher:
    def __init__(self, failing: set[str] | None = None) -> None:
        self.failing = failing or set()

    def fetch(self, symbol: str, start: date, end: date) -> FetchResult:
        if symbol in self.failing:
            return FetchFailure(symbol, FetchErrorReason.UNKNOWN_SYMBOL, f"{symbol} not found")
        return FetchSuccess(symbol, _bars([10.0, 11.0, 12.1]))


def _clock() -> datetime:
    return datetime(2025, 1, 15, tzinfo=UTC)


def test_run_prints_summary_and_writes_report(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    settings = Settings(reports_dir=str(tmp_path))

    code = run(settings, "Microsoft", RANGE, fetcher=StaticFetcher(), clock=_clock)

    assert code == 0
    assert (tmp_path / "MSFT_2025-01-01_2025-01-10.html").exists()
    output = capsys.readouterr().out
    assert "Microsoft (MSFT) summary" in output
    assert "Performance vs S&P 500:" in output
    assert "MSFT total return: +21.00%" in output


def test_run_reports_instrument_failure_but_still_writes_report(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    settings = Settings(reports_dir=str(tmp_path))

    code = run(settings, "AAPL", RANGE, fetcher=StaticFetcher(failing={"AAPL"}), clock=_clock)

    assert code == 1
    report = (tmp_path / "AAPL_2025-01-01_2025-01-10.html").read_text(encoding="utf-8")
    assert "AAPL not found" in report
    assert "Summary unavailable" in capsys.readouterr().out


def test_run_benchmark_failure_keeps_instrument_views(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    settings = Settings(reports_dir=str(tmp_path), write_report=False)

    code = run(settings, "AAPL", RANGE, fetcher=StaticFetcher(failing={"^GSPC"}), clock=_clock)

    assert code == 0
    assert list(tmp_path.iterdir()) == []
    output = capsys.readouterr().out
    assert "Apple (AAPL) summary" in output
    assert "Performance vs S&P 500 unavailable" in output


@pytest.mark.parametrize(
    ("symbol", "expected"),
    [
        ("^GSPC", "GSPC_2025-01-01_2025-01-10.html"),
        ("BRK-B", "BRK-B_2025-01-01_2025-01-10.html"),
        ("7203.T", "7203-T_2025-01-01_2025-01-10.html"),
    ],
)
def test_report_filename_is_filesystem_safe(symbol: str, expected: str) -> None:
    snapshot = RequestSnapshot(
        instrument_name="Example",
        symbol=symbol,
        benchmark_symbol="^GSPC",
        start=RANGE.start,
        end=RANGE.end,
        instrument_result=FetchSuccess(symbol, _bars([1.0])),
        benchmark_result=FetchSuccess("^GSPC", _bars([1.0])),
    )

    assert report_filename(snapshot) == expected


def test_build_fetcher_follows_data_source(tmp_path: Path) -> None:
    csv_settings = Settings(data_source="csv", historical_data_dir=str(tmp_path))

    assert isinstance(build_fetcher(csv_settings), CsvSeriesFetcher)
    assert isinstance(build_fetcher(Settings()), YFinanceSeriesFetcher)
