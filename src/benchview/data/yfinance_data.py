"""Yahoo Finance series fetcher."""

from __future__ import annotations

from datetime import date, timedelta

from benchview.data.bars import normalize_bars
from benchview.domain.models import (
    FetchErrorReason,
    FetchFailure,
    FetchResult,
    fetch_result_from_bars,
)

# Checked in order; prices-missing subclasses ticker-missing in yfinance.
_ERROR_REASONS = (
    ("YFPricesMissingError", FetchErrorReason.NO_DATA_IN_RANGE),
    ("YFTzMissingError", FetchErrorReason.UNKNOWN_SYMBOL),
    ("YFTickerMissingError", FetchErrorReason.UNKNOWN_SYMBOL),
)


class YFinanceSeriesFetcher:
    """Fetch daily OHLCV bars from Yahoo Finance via yfinance.

    One `history` call per fetch; retries are left to the caller.
    """

    interval = "1d"

    def fetch(self, symbol: str, start: date, end: date) -> FetchResult:
        try:
            import yfinance as yf
        except ImportError as exc:
            return FetchFailure(
                symbol=symbol,
                reason=FetchErrorReason.TRANSPORT_ERROR,
                message=f"yfinance is not installed: {exc}",
            )

        ticker = self._resolve_yfinance_symbol(symbol)
        try:
            history = yf.Ticker(ticker).history(
                start=start.isoformat(),
                # yfinance treats `end` as exclusive.
                end=(end + timedelta(days=1)).isoformat(),
                interval=self.interval,
                auto_adjust=False,
                actions=False,
                raise_errors=True,
            )
        except Exception as exc:
            return FetchFailure(
                symbol=symbol,
                reason=self._classify_error(exc),
                message=f"yfinance request failed for {symbol} ({ticker}): {exc}",
            )

        if history is None or len(history) == 0:
            return FetchFailure(
                symbol=symbol,
                reason=FetchErrorReason.NO_DATA_IN_RANGE,
                message=(
                    f"yfinance returned no rows for {symbol} between "
                    f"{start.isoformat()} and {end.isoformat()}"
                ),
            )
        try:
            bars = normalize_bars(history, ticker)
        except ValueError as exc:
            return FetchFailure(
                symbol=symbol,
                reason=FetchErrorReason.TRANSPORT_ERROR,
                message=f"yfinance payload for {symbol} is malformed: {exc}",
            )
        return fetch_result_from_bars(symbol, bars)

    @staticmethod
    def _classify_error(exc: Exception) -> FetchErrorReason:
        names = {cls.__name__ for cls in type(exc).__mro__}
        for name, reason in _ERROR_REASONS:
            if name in names:
                return reason
        return FetchErrorReason.TRANSPORT_ERROR

    @staticmethod
    def _resolve_yfinance_symbol(symbol: str) -> str:
        return symbol.strip().upper()
