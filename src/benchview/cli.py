"""Command-line interface for benchview."""

from __future__ import annotations

import argparse
import sys
from datetime import date, timedelta

from benchview.config import DATA_SOURCES, Settings
from benchview.domain.models import DateRange
from benchview.errors import ConfigError
from benchview.runtime import list_instruments, run
from benchview.snapshot import utc_now


def parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid date {value!r}, expected YYYY-MM-DD") from exc


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser."""
    parser = argparse.ArgumentParser(
        description="Compare an instrument's daily history against a benchmark index"
    )
    parser.add_argument("--instrument", type=str, help="Instrument name or symbol")
    parser.add_argument("--start", type=parse_date, help="First date (YYYY-MM-DD)")
    parser.add_argument("--end", type=parse_date, help="Last date (YYYY-MM-DD), default today")
    parser.add_argument(
        "--lookback-days",
        type=int,
        help="Days before --end to start from when --start is omitted",
    )
    parser.add_argument("--benchmark", type=str, help="Benchmark symbol, e.g. ^GSPC")
    parser.add_argument(
        "--benchmark-name",
        type=str,
        help="Benchmark display name; defaults to the symbol when --benchmark is given",
    )
    parser.add_argument("--data-source", choices=list(DATA_SOURCES), help="Data source")
    parser.add_argument("--historical-dir", type=str, help="CSV historical data directory")
    parser.add_argument("--report-dir", type=str, help="Directory for the HTML report")
    parser.add_argument("--no-report", action="store_true", help="Skip writing the HTML report")
    parser.add_argument(
        "--list-instruments",
        action="store_true",
        help="List selectable instruments and the benchmark, then exit",
    )
    return parser


def apply_cli_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Apply CLI values onto environment-derived settings."""
    overrides: dict[str, object] = {}
    if args.benchmark:
        overrides["benchmark_symbol"] = args.benchmark.strip().upper()
        overrides["benchmark_name"] = args.benchmark_name or overrides["benchmark_symbol"]
    elif args.benchmark_name:
        overrides["benchmark_name"] = args.benchmark_name
    if args.data_source:
        overrides["data_source"] = args.data_source
    if args.historical_dir:
        overrides["historical_data_dir"] = args.historical_dir
    if args.lookback_days is not None:
        overrides["lookback_days"] = args.lookback_days
    if args.report_dir:
        overrides["reports_dir"] = args.report_dir
    if args.no_report:
        overrides["write_report"] = False
    return settings.with_overrides(**overrides)


def resolve_date_range(settings: Settings, args: argparse.Namespace, today: date) -> DateRange:
    """Fill in missing bounds from today and the lookback window, then validate."""
    end = args.end or today
    start = args.start or end - timedelta(days=settings.lookback_days)
    return DateRange(start=start, end=end).validate(today=today)


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        settings = apply_cli_overrides(Settings.from_env(), args)
        if args.list_instruments:
            return list_instruments(settings)
        catalog = settings.catalog()
        instrument = catalog.resolve(args.instrument) if args.instrument else next(iter(catalog))
        date_range = resolve_date_range(settings, args, today=utc_now().date())
    except ConfigError as exc:
        print(f"Configuration error: {exc}")
        return 2
    return run(settings, instrument.symbol, date_range)


if __name__ == "__main__":
    sys.exit(main())
