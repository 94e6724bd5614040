"""Concise human-readable pipeline logger."""

from __future__ import annotations

import logging
from datetime import date

from benchview.domain.models import FetchFailure, FetchResult, Unavailable


class HumanLogger:
    """Console logger with fixed line types."""

    def __init__(self, level: str = "INFO") -> None:
        self._logger = logging.getLogger("benchview")
        self._logger.setLevel(getattr(logging, level.upper(), logging.INFO))
        self._logger.propagate = False
        if not self._logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter("%(asctime)s | %(message)s", "%Y-%m-%d %H:%M:%S")
            handler.setFormatter(formatter)
            self._logger.addHandler(handler)

    def request(self, symbol: str, benchmark_symbol: str, start: date, end: date) -> None:
        self._logger.info(
            "request | %s vs %s | %s .. %s",
            symbol,
            benchmark_symbol,
            start.isoformat(),
            end.isoformat(),
        )

    def fetch_result(self, result: FetchResult) -> None:
        if isinstance(result, FetchFailure):
            self._logger.warning(
                "fetch | %s | failed: %s | %s", result.symbol, result.reason, result.message
            )
            return
        bars = result.bars
        self._logger.info(
            "fetch | %s | %d bars | %s .. %s",
            result.symbol,
            len(bars),
            self._short_date(bars.index[0]),
            self._short_date(bars.index[-1]),
        )

    def snapshot_ready(self, request_id: str, symbol: str) -> None:
        self._logger.info("snapshot | %s | %s | ready", self._short_id(request_id), symbol)

    def snapshot_discarded(self, request_id: str, symbol: str) -> None:
        self._logger.info(
            "snapshot | %s | %s | discarded: superseded by a newer request",
            self._short_id(request_id),
            symbol,
        )

    def view_unavailable(self, unavailable: Unavailable) -> None:
        self._logger.info(
            "view | %s | unavailable (%s) | %s",
            unavailable.view,
            unavailable.kind,
            unavailable.message,
        )

    def report_written(self, path: str) -> None:
        self._logger.info("report | %s", path)

    def error(self, message: str) -> None:
        self._logger.error("error | %s", message)

    @staticmethod
    def _short_id(value: str | None, head: int = 10) -> str:
        if not value:
            return ""
        return str(value)[:head]

    @staticmethod
    def _short_date(value: object) -> str:
        if hasattr(value, "date"):
            return value.date().isoformat()
        return str(value)
