"""Domain models for requests, fetch results and view availability."""

from .models import (
    OHLCV_COLUMNS,
    DateRange,
    FetchErrorReason,
    FetchFailure,
    FetchResult,
    FetchSuccess,
    RequestSnapshot,
    Unavailable,
    UnavailableKind,
    ViewName,
    fetch_result_from_bars,
)

__all__ = [
    "OHLCV_COLUMNS",
    "DateRange",
    "FetchErrorReason",
    "FetchFailure",
    "FetchResult",
    "FetchSuccess",
    "RequestSnapshot",
    "Unavailable",
    "UnavailableKind",
    "ViewName",
    "fetch_result_from_bars",
]
