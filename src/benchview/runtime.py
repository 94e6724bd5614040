"""Runtime wiring: settings to fetcher, snapshot, views and report."""

from __future__ import annotations

import re
from pathlib import Path

from benchview.config import Settings
from benchview.data.base import SeriesFetcher
from benchview.data.csv_data import CsvSeriesFetcher
from benchview.data.yfinance_data import YFinanceSeriesFetcher
from benchview.domain.models import DateRange, FetchFailure, RequestSnapshot, Unavailable, ViewName
from benchview.logging.logger import HumanLogger
from benchview.report import write_html_report
from benchview.snapshot import Clock, SnapshotCoordinator, utc_now
from benchview.views import LabeledSeries, SummaryReport, ViewModel, render_all


def run(
    settings: Settings,
    selection: str,
    date_range: DateRange,
    fetcher: SeriesFetcher | None = None,
    clock: Clock = utc_now,
) -> int:
    """Fetch one request, print its summary and write the HTML report."""
    human_logger = HumanLogger(level=settings.log_level)
    coordinator = SnapshotCoordinator(
        catalog=settings.catalog(),
        fetcher=fetcher or build_fetcher(settings),
        benchmark_symbol=settings.benchmark_symbol,
        logger=human_logger,
        clock=clock,
    )
    try:
        snapshot = coordinator.refresh(selection, date_range)
    finally:
        coordinator.close()
    if snapshot is None:
        human_logger.error("no snapshot was produced for this request")
        return 1

    views = render_all(snapshot)
    for view in views.values():
        if isinstance(view, Unavailable):
            human_logger.view_unavailable(view)
    print_views(views, settings)

    if settings.write_report:
        report_path = Path(settings.reports_dir) / report_filename(snapshot)
        write_html_report(views, str(report_path), title=report_title(snapshot, settings))
        human_logger.report_written(str(report_path))

    if isinstance(snapshot.instrument_result, FetchFailure):
        return 1
    return 0


def print_views(views: dict[ViewName, ViewModel | Unavailable], settings: Settings) -> None:
    summary = views[ViewName.SUMMARY]
    if isinstance(summary, SummaryReport):
        print(summary.text)
    else:
        print(f"Summary unavailable: {summary.message}")
    performance = views[ViewName.PERFORMANCE]
    print()
    if isinstance(performance, LabeledSeries):
        print(f"Performance vs {settings.benchmark_name}:")
        for note in performance.notes:
            print(f"  {note}")
    else:
        print(f"Performance vs {settings.benchmark_name} unavailable: {performance.message}")


def list_instruments(settings: Settings) -> int:
    """Print the selectable instruments and the benchmark."""
    catalog = settings.catalog()
    width = max(len(name) for name in catalog.names())
    for instrument in catalog:
        print(f"{instrument.name:<{width}}  {instrument.symbol}")
    print(f"\nBenchmark: {settings.benchmark_name} ({settings.benchmark_symbol})")
    return 0


def report_filename(snapshot: RequestSnapshot) -> str:
    symbol = re.sub(r"[^A-Za-z0-9]+", "-", snapshot.symbol).strip("-") or "instrument"
    return f"{symbol}_{snapshot.start.isoformat()}_{snapshot.end.isoformat()}.html"


def report_title(snapshot: RequestSnapshot, settings: Settings) -> str:
    return (
        f"{snapshot.instrument_name} ({snapshot.symbol}) vs {settings.benchmark_name}, "
        f"{snapshot.start.isoformat()} to {snapshot.end.isoformat()}"
    )


def build_fetcher(settings: Settings) -> SeriesFetcher:
    """Select fetcher implementation from the data source."""
    if settings.data_source == "csv":
        return CsvSeriesFetcher(data_dir=settings.historical_data_dir)
    return YFinanceSeriesFetcher()
