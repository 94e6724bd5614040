"""Derivations over a request snapshot.

Primitives (`adjusted_close`, `daily_return`, `cumulative_growth`, `align`,
`summarize`) are pure and raise typed `DerivationError`s. The per-view
`derive_*` functions depend on the snapshot alone, and `derive_views` is the
boundary where those errors become `Unavailable` values.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from typing import Any

import numpy as np
import pandas as pd

from benchview.domain.models import (
    FetchFailure,
    FetchResult,
    RequestSnapshot,
    Unavailable,
    UnavailableKind,
    ViewName,
)
from benchview.errors import (
    DerivationError,
    EmptyAlignmentError,
    EmptySeriesError,
    FetchFailedError,
    NoDataError,
)


@dataclass(frozen=True)
class ColumnSummary:
    """Five-number-style statistics for one numeric column."""

    count: int
    undefined: int
    mean: float
    std: float
    min: float
    q1: float
    median: float
    q3: float
    max: float


@dataclass(frozen=True)
class Summary:
    """Per-column statistics plus the chronologically last row."""

    row_count: int
    columns: dict[str, ColumnSummary]
    last_date: pd.Timestamp
    last_row: dict[str, float]


@dataclass(frozen=True)
class PriceHistory:
    symbol: str
    close: pd.Series
    adj_close: pd.Series


@dataclass(frozen=True)
class PerformanceComparison:
    """Growth of a unit investment in the instrument and the benchmark."""

    symbol: str
    benchmark_symbol: str
    instrument_growth: pd.Series
    benchmark_growth: pd.Series
    instrument_total_return: float
    benchmark_total_return: float
    excess_return: float
    correlation: float
    beta: float
    instrument_undefined: int
    benchmark_undefined: int
    undefined_total: int


@dataclass(frozen=True)
class DualAxisComparison:
    symbol: str
    benchmark_symbol: str
    instrument: pd.Series
    benchmark: pd.Series


@dataclass(frozen=True)
class SnapshotSummary:
    instrument_name: str
    symbol: str
    start: date
    end: date
    bars: Summary
    returns: Summary | None


def require_bars(result: FetchResult, role: str) -> pd.DataFrame:
    """Return the bars of a successful fetch or raise FetchFailedError."""
    if isinstance(result, FetchFailure):
        raise FetchFailedError(
            f"{role} data for {result.symbol} is unavailable ({result.reason}): {result.message}"
        )
    return result.bars


def adjusted_close(bars: pd.DataFrame) -> pd.Series:
    """Project the adjusted-close column as a price series."""
    if bars is None or len(bars) == 0:
        raise EmptySeriesError("series has no bars")
    return bars["adj_close"].astype(float).rename("adj_close")


def daily_return(prices: pd.Series) -> pd.Series:
    """Fractional change from each date to the next; the first date is dropped.

    A zero previous price yields NaN for that date instead of raising.
    """
    values = prices.astype(float)
    previous = values.shift(1)
    with np.errstate(divide="ignore", invalid="ignore"):
        returns = values / previous - 1.0
    returns = returns.where(previous != 0.0, np.nan)
    return returns.iloc[1:].rename("daily_return")


def cumulative_growth(returns: pd.Series) -> pd.Series:
    """Compounded value of a unit investment; NaN from the first undefined return on."""
    return (1.0 + returns.astype(float)).cumprod(skipna=False).rename("growth")


def align(left: pd.Series, right: pd.Series) -> tuple[pd.Series, pd.Series]:
    """Restrict two date-indexed series to the dates they share."""
    aligned_left, aligned_right = left.align(right, join="inner")
    if aligned_left.empty:
        raise EmptyAlignmentError(
            f"{left.name or 'left'} and {right.name or 'right'} share no common dates"
        )
    return aligned_left.sort_index(), aligned_right.sort_index()


def summarize(data: pd.DataFrame | pd.Series) -> Summary:
    """Describe each numeric column; NaN and infinite values are counted as undefined."""
    if isinstance(data, pd.Series):
        data = data.to_frame(name=data.name if data.name is not None else "value")
    if data is None or len(data) == 0:
        raise NoDataError("no rows to summarize")
    numeric = data.select_dtypes(include="number").sort_index()
    if numeric.shape[1] == 0:
        raise NoDataError("no numeric columns to summarize")

    columns: dict[str, ColumnSummary] = {}
    for name in numeric.columns:
        columns[str(name)] = _summarize_column(numeric[name].astype(float))
    last_row = {str(name): float(numeric[name].iloc[-1]) for name in numeric.columns}
    return Summary(
        row_count=len(numeric),
        columns=columns,
        last_date=pd.Timestamp(numeric.index[-1]),
        last_row=last_row,
    )


def _summarize_column(values: pd.Series) -> ColumnSummary:
    defined = values[np.isfinite(values.to_numpy())]
    undefined = len(values) - len(defined)
    if defined.empty:
        nan = math.nan
        return ColumnSummary(0, undefined, nan, nan, nan, nan, nan, nan, nan)
    q1, median, q3 = (float(value) for value in defined.quantile([0.25, 0.5, 0.75]))
    return ColumnSummary(
        count=len(defined),
        undefined=undefined,
        mean=float(defined.mean()),
        std=float(defined.std()) if len(defined) > 1 else math.nan,
        min=float(defined.min()),
        q1=q1,
        median=median,
        q3=q3,
        max=float(defined.max()),
    )


def total_return(growth: pd.Series) -> float:
    if growth.empty:
        return math.nan
    return float(growth.iloc[-1]) - 1.0


def return_beta(returns: pd.Series, benchmark_returns: pd.Series) -> float:
    """Covariance with the benchmark over benchmark variance, on dates both define."""
    mask = returns.notna() & benchmark_returns.notna()
    if int(mask.sum()) < 2:
        return math.nan
    variance = float(benchmark_returns[mask].var())
    if not variance > 0.0:
        return math.nan
    return float(returns[mask].cov(benchmark_returns[mask])) / variance


def derive_price_history(snapshot: RequestSnapshot) -> PriceHistory:
    bars = require_bars(snapshot.instrument_result, "Instrument")
    prices = adjusted_close(bars)
    return PriceHistory(
        symbol=snapshot.symbol,
        close=bars["close"].astype(float).rename("close"),
        adj_close=prices,
    )


def derive_performance(snapshot: RequestSnapshot) -> PerformanceComparison:
    """Compare compounded growth on the trading dates both series share.

    Prices are aligned before returns are computed so each return spans the
    same pair of dates for both series.
    """
    instrument_prices, benchmark_prices = _aligned_prices(snapshot)
    if len(instrument_prices) < 2:
        raise NoDataError("at least two common trading dates are needed to compare performance")

    instrument_returns = daily_return(instrument_prices)
    benchmark_returns = daily_return(benchmark_prices)
    instrument_growth = cumulative_growth(instrument_returns)
    benchmark_growth = cumulative_growth(benchmark_returns)
    instrument_total = total_return(instrument_growth)
    benchmark_total = total_return(benchmark_growth)
    instrument_undefined = int(instrument_returns.isna().sum())
    benchmark_undefined = int(benchmark_returns.isna().sum())
    return PerformanceComparison(
        symbol=snapshot.symbol,
        benchmark_symbol=snapshot.benchmark_symbol,
        instrument_growth=instrument_growth,
        benchmark_growth=benchmark_growth,
        instrument_total_return=instrument_total,
        benchmark_total_return=benchmark_total,
        excess_return=instrument_total - benchmark_total,
        correlation=float(instrument_returns.corr(benchmark_returns)),
        beta=return_beta(instrument_returns, benchmark_returns),
        instrument_undefined=instrument_undefined,
        benchmark_undefined=benchmark_undefined,
        undefined_total=instrument_undefined + benchmark_undefined,
    )


def derive_dual_axis(snapshot: RequestSnapshot) -> DualAxisComparison:
    instrument_prices, benchmark_prices = _aligned_prices(snapshot)
    return DualAxisComparison(
        symbol=snapshot.symbol,
        benchmark_symbol=snapshot.benchmark_symbol,
        instrument=instrument_prices,
        benchmark=benchmark_prices,
    )


def derive_summary(snapshot: RequestSnapshot) -> SnapshotSummary:
    bars = require_bars(snapshot.instrument_result, "Instrument")
    bar_summary = summarize(bars)
    returns = daily_return(adjusted_close(bars))
    return SnapshotSummary(
        instrument_name=snapshot.instrument_name,
        symbol=snapshot.symbol,
        start=snapshot.start,
        end=snapshot.end,
        bars=bar_summary,
        returns=summarize(returns) if len(returns) else None,
    )


def derive_table(snapshot: RequestSnapshot) -> pd.DataFrame:
    bars = require_bars(snapshot.instrument_result, "Instrument")
    if len(bars) == 0:
        raise EmptySeriesError(f"{snapshot.symbol} has no bars")
    return bars.sort_index().copy()


def _aligned_prices(snapshot: RequestSnapshot) -> tuple[pd.Series, pd.Series]:
    # Both-or-neither: comparison views need both fetches.
    instrument_bars = require_bars(snapshot.instrument_result, "Instrument")
    benchmark_bars = require_bars(snapshot.benchmark_result, "Benchmark")
    instrument_prices = adjusted_close(instrument_bars).rename(snapshot.symbol)
    benchmark_prices = adjusted_close(benchmark_bars).rename(snapshot.benchmark_symbol)
    return align(instrument_prices, benchmark_prices)


VIEW_DERIVATIONS: dict[ViewName, Callable[[RequestSnapshot], Any]] = {
    ViewName.PRICE: derive_price_history,
    ViewName.PERFORMANCE: derive_performance,
    ViewName.DUAL_AXIS: derive_dual_axis,
    ViewName.SUMMARY: derive_summary,
    ViewName.TABLE: derive_table,
}

_UNAVAILABLE_KINDS: tuple[tuple[type[DerivationError], UnavailableKind], ...] = (
    (FetchFailedError, UnavailableKind.FETCH_FAILURE),
    (EmptySeriesError, UnavailableKind.EMPTY_SERIES),
    (EmptyAlignmentError, UnavailableKind.EMPTY_ALIGNMENT),
    (NoDataError, UnavailableKind.NO_DATA),
)


def unavailable_kind(exc: DerivationError) -> UnavailableKind:
    for error_type, kind in _UNAVAILABLE_KINDS:
        if isinstance(exc, error_type):
            return kind
    return UnavailableKind.NO_DATA


def derive_view(view: ViewName, snapshot: RequestSnapshot) -> Any:
    """Run one view derivation, returning Unavailable instead of raising."""
    try:
        return VIEW_DERIVATIONS[view](snapshot)
    except DerivationError as exc:
        return Unavailable(view=view, kind=unavailable_kind(exc), message=str(exc))


def derive_views(snapshot: RequestSnapshot) -> dict[ViewName, Any]:
    """Fan one snapshot out to every view; failures stay local to their view."""
    return {view: derive_view(view, snapshot) for view in VIEW_DERIVATIONS}
