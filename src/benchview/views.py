"""Presentation-ready view models built from engine outputs.

Adapters only relabel and format; every number shown here was computed by
`benchview.engine`.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from typing import Any

import pandas as pd

from benchview.domain.models import RequestSnapshot, Unavailable, ViewName
from benchview.engine import (
    ColumnSummary,
    DualAxisComparison,
    PerformanceComparison,
    PriceHistory,
    SnapshotSummary,
    Summary,
    derive_view,
)

COLUMN_HEADERS = {
    "date": "Date",
    "open": "Open",
    "high": "High",
    "low": "Low",
    "close": "Close",
    "adj_close": "Adj Close",
    "volume": "Volume",
    "daily_return": "Daily Return",
}

UNDEFINED_TEXT = "n/a"


@dataclass(frozen=True)
class SeriesLine:
    """One labeled line; `None` marks an undefined point."""

    label: str
    dates: tuple[date, ...]
    values: tuple[float | None, ...]
    axis: str = "primary"


@dataclass(frozen=True)
class LabeledSeries:
    view: ViewName
    title: str
    y_label: str
    lines: tuple[SeriesLine, ...]
    secondary_y_label: str | None = None
    notes: tuple[str, ...] = ()


@dataclass(frozen=True)
class SummaryReport:
    view: ViewName
    title: str
    lines: tuple[str, ...]

    @property
    def text(self) -> str:
        return "\n".join((self.title, *self.lines))


@dataclass(frozen=True)
class TableRows:
    view: ViewName
    columns: tuple[str, ...]
    rows: tuple[tuple[Any, ...], ...]


ViewModel = LabeledSeries | SummaryReport | TableRows


def human_header(column: str) -> str:
    """Display header for a raw column name, dropping any `SYMBOL.` prefix."""
    key = str(column).split(".")[-1].strip()
    normalized = key.lower().replace(" ", "_")
    if normalized in {"adjusted", "adjclose"}:
        normalized = "adj_close"
    return COLUMN_HEADERS.get(normalized, key.replace("_", " ").title())


def series_line(series: pd.Series, label: str, axis: str = "primary") -> SeriesLine:
    dates = tuple(pd.Timestamp(stamp).date() for stamp in series.index)
    values = tuple(_defined_or_none(value) for value in series.tolist())
    return SeriesLine(label=label, dates=dates, values=values, axis=axis)


def format_number(value: float | None, digits: int = 2) -> str:
    if value is None or math.isnan(value):
        return UNDEFINED_TEXT
    return f"{value:,.{digits}f}"


def format_pct(value: float | None, digits: int = 2) -> str:
    if value is None or math.isnan(value):
        return UNDEFINED_TEXT
    return f"{value * 100.0:+,.{digits}f}%"


def render_price_chart(snapshot: RequestSnapshot) -> LabeledSeries | Unavailable:
    result = derive_view(ViewName.PRICE, snapshot)
    if isinstance(result, Unavailable):
        return result
    history: PriceHistory = result
    return LabeledSeries(
        view=ViewName.PRICE,
        title=f"{snapshot.instrument_name} ({history.symbol}) price",
        y_label="Price",
        lines=(
            series_line(history.close, "Close"),
            series_line(history.adj_close, "Adj Close"),
        ),
    )


def render_performance(snapshot: RequestSnapshot) -> LabeledSeries | Unavailable:
    result = derive_view(ViewName.PERFORMANCE, snapshot)
    if isinstance(result, Unavailable):
        return result
    comparison: PerformanceComparison = result
    notes = [
        f"{comparison.symbol} total return: {format_pct(comparison.instrument_total_return)}",
        f"{comparison.benchmark_symbol} total return: "
        f"{format_pct(comparison.benchmark_total_return)}",
        f"Excess return: {format_pct(comparison.excess_return)}",
        f"Correlation of daily returns: {format_number(comparison.correlation, 3)}",
        f"Beta: {format_number(comparison.beta, 3)}",
    ]
    if comparison.undefined_total:
        notes.append(
            f"Undefined daily returns (zero prior price): {comparison.undefined_total}"
        )
    return LabeledSeries(
        view=ViewName.PERFORMANCE,
        title=f"Growth of 1 invested: {comparison.symbol} vs {comparison.benchmark_symbol}",
        y_label="Growth of 1",
        lines=(
            series_line(comparison.instrument_growth, comparison.symbol),
            series_line(comparison.benchmark_growth, comparison.benchmark_symbol),
        ),
        notes=tuple(notes),
    )


def render_dual_axis(snapshot: RequestSnapshot) -> LabeledSeries | Unavailable:
    result = derive_view(ViewName.DUAL_AXIS, snapshot)
    if isinstance(result, Unavailable):
        return result
    comparison: DualAxisComparison = result
    return LabeledSeries(
        view=ViewName.DUAL_AXIS,
        title=f"{comparison.symbol} and {comparison.benchmark_symbol} adjusted close",
        y_label=f"{comparison.symbol} price",
        secondary_y_label=f"{comparison.benchmark_symbol} level",
        lines=(
            series_line(comparison.instrument, comparison.symbol, axis="primary"),
            series_line(comparison.benchmark, comparison.benchmark_symbol, axis="secondary"),
        ),
    )


def render_summary(snapshot: RequestSnapshot) -> SummaryReport | Unavailable:
    result = derive_view(ViewName.SUMMARY, snapshot)
    if isinstance(result, Unavailable):
        return result
    summary: SnapshotSummary = result
    lines = [
        f"Period: {summary.start.isoformat()} .. {summary.end.isoformat()}",
        f"Trading days: {summary.bars.row_count}",
        "",
        _summary_header(),
    ]
    lines.extend(
        _summary_row(human_header(name), column) for name, column in summary.bars.columns.items()
    )
    lines.append("")
    lines.append(_last_row_line(summary.bars))
    if summary.returns is not None:
        returns = summary.returns.columns["daily_return"]
        lines.append("")
        lines.append(
            f"Daily returns: {returns.count} defined, {returns.undefined} undefined"
            f" | mean {format_pct(returns.mean, 3)}"
            f" | std {format_pct(returns.std, 3)}"
            f" | min {format_pct(returns.min, 3)}"
            f" | max {format_pct(returns.max, 3)}"
        )
    return SummaryReport(
        view=ViewName.SUMMARY,
        title=f"{summary.instrument_name} ({summary.symbol}) summary",
        lines=tuple(lines),
    )


def render_table(snapshot: RequestSnapshot) -> TableRows | Unavailable:
    result = derive_view(ViewName.TABLE, snapshot)
    if isinstance(result, Unavailable):
        return result
    bars: pd.DataFrame = result
    columns = (COLUMN_HEADERS["date"], *(human_header(name) for name in bars.columns))
    rows = tuple(
        (pd.Timestamp(stamp).date().isoformat(), *(_defined_or_none(value) for value in values))
        for stamp, values in zip(bars.index, bars.itertuples(index=False, name=None))
    )
    return TableRows(view=ViewName.TABLE, columns=columns, rows=rows)


RENDERERS: dict[ViewName, Callable[[RequestSnapshot], ViewModel | Unavailable]] = {
    ViewName.PRICE: render_price_chart,
    ViewName.PERFORMANCE: render_performance,
    ViewName.DUAL_AXIS: render_dual_axis,
    ViewName.SUMMARY: render_summary,
    ViewName.TABLE: render_table,
}


def render_all(snapshot: RequestSnapshot) -> dict[ViewName, ViewModel | Unavailable]:
    """Render every view from the same snapshot."""
    return {view: render(snapshot) for view, render in RENDERERS.items()}


def _summary_header() -> str:
    labels = ("", "min", "q1", "median", "mean", "q3", "max")
    return f"{labels[0]:<10}" + "".join(f"{label:>16}" for label in labels[1:])


def _summary_row(header: str, column: ColumnSummary) -> str:
    values = (column.min, column.q1, column.median, column.mean, column.q3, column.max)
    return f"{header:<10}" + "".join(f"{format_number(value):>16}" for value in values)


def _last_row_line(summary: Summary) -> str:
    parts = [
        f"{human_header(name)} {format_number(value)}" for name, value in summary.last_row.items()
    ]
    return f"Most recent bar ({summary.last_date.date().isoformat()}): " + ", ".join(parts)


def _defined_or_none(value: Any) -> float | None:
    number = float(value)
    if math.isnan(number) or math.isinf(number):
        return None
    return number
