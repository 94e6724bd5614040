"""CSV-backed series fetcher."""

from __future__ import annotations

from datetime import date
from pathlib import Path

import pandas as pd

from benchview.data.bars import normalize_bars, slice_range
from benchview.domain.models import (
    FetchErrorReason,
    FetchFailure,
    FetchResult,
    fetch_result_from_bars,
)


class CsvSeriesFetcher:
    """Load daily OHLCV bars from local CSV files, one file per symbol.

    Files are re-read on every fetch.
    """

    date_column_candidates = ("date", "datetime", "timestamp")

    def __init__(self, data_dir: str) -> None:
        self.data_dir = Path(data_dir)

    def fetch(self, symbol: str, start: date, end: date) -> FetchResult:
        path = self._resolve_path(symbol)
        if path is None:
            return FetchFailure(
                symbol=symbol,
                reason=FetchErrorReason.UNKNOWN_SYMBOL,
                message=f"No CSV found for {symbol} under {self.data_dir}",
            )
        try:
            bars = self._load_bars(path, symbol)
        except (OSError, ValueError, pd.errors.ParserError) as exc:
            return FetchFailure(
                symbol=symbol,
                reason=FetchErrorReason.TRANSPORT_ERROR,
                message=f"Could not read {path}: {exc}",
            )
        return fetch_result_from_bars(symbol, slice_range(bars, start, end))

    def _load_bars(self, path: Path, symbol: str) -> pd.DataFrame:
        frame = pd.read_csv(path)
        lower_to_original = {str(column).strip().lower(): column for column in frame.columns}
        date_column = self._pick_date_column(lower_to_original)
        frame = frame.set_index(date_column)
        return normalize_bars(frame, symbol)

    def _resolve_path(self, symbol: str) -> Path | None:
        bare_symbol = self.file_stem(symbol)
        candidates = [
            self.data_dir / f"{bare_symbol.upper()}.csv",
            self.data_dir / f"{bare_symbol.lower()}.csv",
        ]
        for candidate in candidates:
            if candidate.exists():
                return candidate
        return None

    @staticmethod
    def file_stem(symbol: str) -> str:
        """File name stem for a symbol; index symbols drop their leading caret."""
        return symbol.strip().lstrip("^")

    def _pick_date_column(self, lower_to_original: dict[str, str]) -> str:
        for candidate in self.date_column_candidates:
            if candidate in lower_to_original:
                return lower_to_original[candidate]
        candidates = ", ".join(self.date_column_candidates)
        raise ValueError(f"CSV missing date column. Expected one of: {candidates}")
