"""Series fetcher implementations."""

from .base import SeriesFetcher
from .csv_data import CsvSeriesFetcher
from .yfinance_data import YFinanceSeriesFetcher

__all__ = [
    "SeriesFetcher",
    "CsvSeriesFetcher",
    "YFinanceSeriesFetcher",
]
