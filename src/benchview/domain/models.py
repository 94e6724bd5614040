"""Core request and fetch models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from enum import StrEnum
from uuid import uuid4

import pandas as pd

from benchview.errors import InvalidDateRangeError

OHLCV_COLUMNS = ("open", "high", "low", "close", "adj_close", "volume")


class FetchErrorReason(StrEnum):
    """Why a series fetch produced no data."""

    UNKNOWN_SYMBOL = "unknown_symbol"
    NO_DATA_IN_RANGE = "no_data_in_range"
    TRANSPORT_ERROR = "transport_error"


class UnavailableKind(StrEnum):
    """Why a derived view could not be produced."""

    FETCH_FAILURE = "fetch_failure"
    EMPTY_SERIES = "empty_series"
    NO_DATA = "no_data"
    EMPTY_ALIGNMENT = "empty_alignment"


class ViewName(StrEnum):
    """Derived views fanned out from one snapshot."""

    PRICE = "price"
    PERFORMANCE = "performance"
    DUAL_AXIS = "dual_axis"
    SUMMARY = "summary"
    TABLE = "table"


@dataclass(frozen=True)
class DateRange:
    """Inclusive daily range for one request."""

    start: date
    end: date

    def validate(self, today: date) -> DateRange:
        """Check ordering and that the range does not reach into the future."""
        if self.start > self.end:
            raise InvalidDateRangeError(
                f"start date {self.start.isoformat()} is after end date {self.end.isoformat()}"
            )
        if self.end > today:
            raise InvalidDateRangeError(
                f"end date {self.end.isoformat()} is after today ({today.isoformat()})"
            )
        return self


@dataclass(frozen=True)
class FetchSuccess:
    """Normalized daily bars for a symbol. Always holds at least one bar."""

    symbol: str
    bars: pd.DataFrame

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class FetchFailure:
    """Fetch outcome carrying no data, only a reason."""

    symbol: str
    reason: FetchErrorReason
    message: str

    @property
    def ok(self) -> bool:
        return False


FetchResult = FetchSuccess | FetchFailure


def fetch_result_from_bars(symbol: str, bars: pd.DataFrame) -> FetchResult:
    """Wrap normalized bars, turning an empty frame into a no-data failure."""
    if bars.empty:
        return FetchFailure(
            symbol=symbol,
            reason=FetchErrorReason.NO_DATA_IN_RANGE,
            message=f"no valid bars for {symbol} in the requested range",
        )
    return FetchSuccess(symbol=symbol, bars=bars)


@dataclass(frozen=True)
class RequestSnapshot:
    """One user request and both of its fetch results.

    Built once per trigger and never mutated; every view reads the same
    instance.
    """

    instrument_name: str
    symbol: str
    benchmark_symbol: str
    start: date
    end: date
    instrument_result: FetchResult
    benchmark_result: FetchResult
    triggered_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
    request_id: str = field(default_factory=lambda: uuid4().hex)

    @property
    def date_range(self) -> DateRange:
        return DateRange(start=self.start, end=self.end)


@dataclass(frozen=True)
class Unavailable:
    """A view that could not be rendered, with a short explanation."""

    view: ViewName
    kind: UnavailableKind
    message: str
