"""Request snapshot construction and trigger coordination."""

from __future__ import annotations

import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import UTC, datetime

from benchview.catalog import InstrumentCatalog
from benchview.data.base import SeriesFetcher
from benchview.domain.models import (
    DateRange,
    FetchErrorReason,
    FetchFailure,
    FetchResult,
    RequestSnapshot,
)
from benchview.logging.logger import HumanLogger

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


def safe_fetch(fetcher: SeriesFetcher, symbol: str, date_range: DateRange) -> FetchResult:
    """Call the fetcher, turning a contract-violating exception into a failure value."""
    try:
        return fetcher.fetch(symbol, date_range.start, date_range.end)
    except Exception as exc:
        return FetchFailure(
            symbol=symbol,
            reason=FetchErrorReason.TRANSPORT_ERROR,
            message=f"fetch for {symbol} raised {type(exc).__name__}: {exc}",
        )


def build_snapshot(
    fetcher: SeriesFetcher,
    instrument_name: str,
    symbol: str,
    benchmark_symbol: str,
    date_range: DateRange,
    triggered_at: datetime | None = None,
) -> RequestSnapshot:
    """Fetch instrument and benchmark concurrently and wait for both.

    A symbol is fetched at most once per call; when the instrument is the
    benchmark both legs share one result.
    """
    with ThreadPoolExecutor(max_workers=2, thread_name_prefix="benchview-fetch") as pool:
        instrument_future = pool.submit(safe_fetch, fetcher, symbol, date_range)
        if benchmark_symbol == symbol:
            benchmark_future = instrument_future
        else:
            benchmark_future = pool.submit(safe_fetch, fetcher, benchmark_symbol, date_range)
        instrument_result = instrument_future.result()
        benchmark_result = benchmark_future.result()
    return RequestSnapshot(
        instrument_name=instrument_name,
        symbol=symbol,
        benchmark_symbol=benchmark_symbol,
        start=date_range.start,
        end=date_range.end,
        instrument_result=instrument_result,
        benchmark_result=benchmark_result,
        triggered_at=triggered_at or utc_now(),
    )


class SnapshotCoordinator:
    """Turn user triggers into snapshots with a last-trigger-wins policy.

    Every trigger builds a new snapshot from scratch. A snapshot is published
    to `current` only if no newer trigger was issued while it was being
    built; otherwise it is discarded. Publication swaps the whole reference
    under a lock. A failed build leaves the last published snapshot in place.
    """

    policy = "last-trigger-wins"

    def __init__(
        self,
        catalog: InstrumentCatalog,
        fetcher: SeriesFetcher,
        benchmark_symbol: str,
        logger: HumanLogger | None = None,
        clock: Clock = utc_now,
        max_pending: int = 4,
    ) -> None:
        self.catalog = catalog
        self.fetcher = fetcher
        self.benchmark_symbol = benchmark_symbol
        self.logger = logger
        self.clock = clock
        self._executor = ThreadPoolExecutor(
            max_workers=max(1, max_pending),
            thread_name_prefix="benchview-request",
        )
        self._lock = threading.Lock()
        self._generation = 0
        self._completed_generation = 0
        self._current: RequestSnapshot | None = None

    @property
    def current(self) -> RequestSnapshot | None:
        with self._lock:
            return self._current

    @property
    def in_flight(self) -> bool:
        """True while the latest trigger has not resolved."""
        with self._lock:
            return self._completed_generation < self._generation

    def trigger(self, selection: str, date_range: DateRange) -> Future[RequestSnapshot]:
        """Validate a request and start building its snapshot in the background."""
        instrument = self.catalog.resolve(selection)
        triggered_at = self.clock()
        date_range.validate(today=triggered_at.date())
        with self._lock:
            self._generation += 1
            generation = self._generation
        if self.logger is not None:
            self.logger.request(
                instrument.symbol,
                self.benchmark_symbol,
                date_range.start,
                date_range.end,
            )
        return self._executor.submit(
            self._build_and_publish,
            generation,
            instrument.name,
            instrument.symbol,
            date_range,
            triggered_at,
        )

    def refresh(self, selection: str, date_range: DateRange) -> RequestSnapshot | None:
        """Trigger and wait; returns whatever snapshot is current afterwards."""
        self.trigger(selection, date_range).result()
        return self.current

    def close(self) -> None:
        self._executor.shutdown(wait=True)

    def _build_and_publish(
        self,
        generation: int,
        instrument_name: str,
        symbol: str,
        date_range: DateRange,
        triggered_at: datetime,
    ) -> RequestSnapshot:
        try:
            snapshot = build_snapshot(
                self.fetcher,
                instrument_name,
                symbol,
                self.benchmark_symbol,
                date_range,
                triggered_at,
            )
        except Exception as exc:
            # The previously published snapshot stays current.
            with self._lock:
                if generation == self._generation:
                    self._completed_generation = generation
            if self.logger is not None:
                self.logger.error(f"snapshot build failed for {symbol}: {exc}")
            raise

        with self._lock:
            is_latest = generation == self._generation
            if is_latest:
                self._completed_generation = generation
                self._current = snapshot
        if self.logger is not None:
            for result in (snapshot.instrument_result, snapshot.benchmark_result):
                self.logger.fetch_result(result)
            if is_latest:
                self.logger.snapshot_ready(snapshot.request_id, snapshot.symbol)
            else:
                self.logger.snapshot_discarded(snapshot.request_id, snapshot.symbol)
        return snapshot
