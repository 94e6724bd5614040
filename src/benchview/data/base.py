"""Series fetcher contract."""

from __future__ import annotations

from datetime import date
from typing import Protocol

from benchview.domain.models import FetchResult


class SeriesFetcher(Protocol):
    """Interface for daily bar retrieval over an inclusive date range."""

    def fetch(self, symbol: str, start: date, end: date) -> FetchResult:
        """Return normalized bars or a failure value; never raise."""
