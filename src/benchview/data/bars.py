"""Normalization of provider payloads into canonical daily OHLCV frames."""

from __future__ import annotations

import re
from datetime import date
from typing import Any

import pandas as pd

from benchview.domain.models import OHLCV_COLUMNS

ADJ_CLOSE_ALIASES = ("adj_close", "adjclose", "adjusted_close", "adjusted", "adj")


def normalize_bars(frame: pd.DataFrame, symbol: str) -> pd.DataFrame:
    """Return bars indexed by trading date with the six OHLCV float columns.

    Bars missing any field are dropped, dates are sorted, and a duplicated
    date keeps its last bar. Raises ValueError when a required column is
    absent from the payload.
    """
    if frame.empty:
        return empty_bars()

    open_column = pick_column(frame, "open", symbol)
    high_column = pick_column(frame, "high", symbol)
    low_column = pick_column(frame, "low", symbol)
    close_column = pick_column(frame, "close", symbol)
    volume_column = pick_column(frame, "volume", symbol)
    adj_close_column = None
    for alias in ADJ_CLOSE_ALIASES:
        adj_close_column = pick_column(frame, alias, symbol)
        if adj_close_column is not None:
            break
    if adj_close_column is None:
        adj_close_column = close_column

    sources = {
        "open": open_column,
        "high": high_column,
        "low": low_column,
        "close": close_column,
        "adj_close": adj_close_column,
        "volume": volume_column,
    }
    missing = [name for name, column in sources.items() if column is None]
    if missing:
        raise ValueError(f"{symbol}: payload missing columns: {', '.join(missing)}")

    normalized = pd.DataFrame(index=to_trading_dates(frame.index))
    for name in OHLCV_COLUMNS:
        normalized[name] = pd.to_numeric(frame[sources[name]].to_numpy(), errors="coerce")
    normalized = normalized[normalized.index.notna()]
    normalized = normalized.dropna(subset=list(OHLCV_COLUMNS))
    normalized = normalized.sort_index(kind="stable")
    normalized = normalized[~normalized.index.duplicated(keep="last")]
    normalized.index.name = "date"
    return normalized.astype(float)


def empty_bars() -> pd.DataFrame:
    frame = pd.DataFrame(
        {name: pd.Series(dtype=float) for name in OHLCV_COLUMNS},
        index=pd.DatetimeIndex([], name="date"),
    )
    return frame


def to_trading_dates(values: Any) -> pd.DatetimeIndex:
    """Convert timestamps to tz-naive midnight dates in their local calendar."""
    try:
        index = pd.DatetimeIndex(pd.to_datetime(values, errors="coerce"))
    except (TypeError, ValueError):
        index = pd.DatetimeIndex(pd.to_datetime(values, errors="coerce", utc=True))
    if index.tz is not None:
        index = index.tz_localize(None)
    return index.normalize()


def slice_range(bars: pd.DataFrame, start: date, end: date) -> pd.DataFrame:
    """Keep bars whose date falls within [start, end]."""
    lower = pd.Timestamp(start)
    upper = pd.Timestamp(end)
    mask = (bars.index >= lower) & (bars.index <= upper)
    return bars.loc[mask].copy()


def pick_column(frame: pd.DataFrame, field: str, symbol: str = "") -> Any | None:
    prefix = f"{column_key(symbol)}_" if symbol else ""
    for column in frame.columns:
        key = column_key(column)
        if prefix and key.startswith(prefix):
            key = key[len(prefix) :]
        if key == field or key.startswith(f"{field}_"):
            return column
    return None


def column_key(value: Any) -> str:
    if isinstance(value, tuple):
        text = "_".join(str(part) for part in value if part is not None)
    else:
        text = str(value)
    normalized = re.sub(r"[^a-zA-Z0-9]+", "_", text).strip("_").lower()
    return normalized
