"""Environment and CLI runtime configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Self

from dotenv import load_dotenv

from benchview.catalog import (
    DEFAULT_INSTRUMENTS,
    Instrument,
    InstrumentCatalog,
    parse_instruments,
)
from benchview.errors import ConfigError

DATA_SOURCES = ("yfinance", "csv")


def parse_bool(value: str | None, default: bool) -> bool:
    """Parse truthy environment strings."""
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def parse_positive_int(value: str | None, default: int, *, field_name: str) -> int:
    """Parse positive integer values from env strings."""
    if value is None or not value.strip():
        return default
    try:
        parsed = int(value.strip())
    except ValueError as exc:
        raise ConfigError(f"{field_name} must be an integer, got '{value}'") from exc
    if parsed <= 0:
        raise ConfigError(f"{field_name} must be positive")
    return parsed


@dataclass(frozen=True)
class Settings:
    """Immutable runtime settings."""

    benchmark_symbol: str = "^GSPC"
    benchmark_name: str = "S&P 500"
    data_source: str = "yfinance"
    historical_data_dir: str = "historical_data"
    lookback_days: int = 365
    reports_dir: str = "reports"
    write_report: bool = True
    log_level: str = "INFO"
    instruments: tuple[Instrument, ...] = DEFAULT_INSTRUMENTS

    @classmethod
    def from_env(cls) -> Self:
        """Create settings from environment variables."""
        load_dotenv()
        benchmark_symbol = str(os.getenv("BENCHMARK_SYMBOL", "^GSPC")).strip().upper()
        # A custom benchmark without a name is labeled by its symbol.
        default_name = "S&P 500" if benchmark_symbol == "^GSPC" else benchmark_symbol
        raw = cls(
            benchmark_symbol=benchmark_symbol,
            benchmark_name=str(os.getenv("BENCHMARK_NAME") or default_name).strip(),
            data_source=str(os.getenv("DATA_SOURCE", "yfinance")).strip().lower(),
            historical_data_dir=str(os.getenv("HISTORICAL_DATA_DIR", "historical_data")).strip(),
            lookback_days=parse_positive_int(
                os.getenv("LOOKBACK_DAYS"),
                365,
                field_name="lookback_days",
            ),
            reports_dir=str(os.getenv("REPORTS_DIR", "reports")).strip(),
            write_report=parse_bool(os.getenv("WRITE_REPORT"), True),
            log_level=str(os.getenv("LOG_LEVEL", "INFO")).strip().upper(),
            instruments=parse_instruments(os.getenv("INSTRUMENTS")),
        )
        return raw.validate()

    def with_overrides(self, **kwargs: object) -> Self:
        """Return a new settings object with updated values."""
        updated = replace(self, **kwargs)
        return updated.validate()

    def catalog(self) -> InstrumentCatalog:
        return InstrumentCatalog(instruments=self.instruments)

    def validate(self) -> Self:
        """Validate settings fields."""
        if not self.benchmark_symbol.strip():
            raise ConfigError("benchmark_symbol must not be empty")
        if self.data_source not in DATA_SOURCES:
            raise ConfigError(f"data_source must be one of {', '.join(DATA_SOURCES)}")
        if self.lookback_days <= 0:
            raise ConfigError("lookback_days must be positive")
        if self.data_source == "csv" and not self.historical_data_dir.strip():
            raise ConfigError("historical_data_dir is required for the csv data source")
        self.catalog()
        return self
