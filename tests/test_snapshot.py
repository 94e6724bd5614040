from __future__ import annotations

import threading
from datetime import UTC, date, datetime

import pandas as pd
import pytest

from benchview.catalog import InstrumentCatalog
from benchview.domain.models import (
    DateRange,
    FetchErrorReason,
    FetchFailure,
    FetchResult,
    FetchSuccess,
)
from benchview.errors import InvalidDateRangeError, UnknownInstrumentError
from benchview.snapshot import SnapshotCoordinator, build_snapshot

RANGE = DateRange(start=date(2025, 1, 1), end=date(2025, 1, 10))


def _bars(count: int = 3) -> pd.DataFrame:
    index = pd.DatetimeIndex(pd.bdate_range("2025-01-02", periods=count), name="date")
    prices = [100.0 + offset for offset in range(count)]
    return pd.DataFrame(
        {
            "open": prices,
            "high": prices,
            "low": prices,
            "close": prices,
            "adj_close": prices,
            "volume": [1000.0] * count,
        },
        index=index,
    )


class RecordingFetcher:
    def __init__(self) -> None:
        self.calls: list[tuple[str, date, date]] = []
        self._lock = threading.Lock()

    def fetch(self, symbol: str, start: date, end: date) -> FetchResult:
        with self._lock:
            self.calls.append((symbol, start, end))
        return FetchSuccess(symbol=symbol, bars=_bars())


def _fixed_clock() -> datetime:
    return datetime(2025, 1, 15, 12, 0, tzinfo=UTC)


def _coordinator(fetcher) -> SnapshotCoordinator:
    return SnapshotCoordinator(
        catalog=InstrumentCatalog(),
        fetcher=fetcher,
        benchmark_symbol="^GSPC",
        clock=_fixed_clock,
    )


def test_build_snapshot_fetches_instrument_and_benchmark_once() -> None:
    fetcher = RecordingFetcher()

    snapshot = build_snapshot(fetcher, "Apple", "AAPL", "^GSPC", RANGE)

    assert sorted(fetcher.calls) == sorted(
        [("AAPL", RANGE.start, RANGE.end), ("^GSPC", RANGE.start, RANGE.end)]
    )
    assert isinstance(snapshot.instrument_result, FetchSuccess)
    assert snapshot.instrument_result.symbol == "AAPL"
    assert snapshot.benchmark_result.symbol == "^GSPC"
    assert snapshot.date_range == RANGE


def test_build_snapshot_runs_fetches_concurrently() -> None:
    barrier = threading.Barrier(2, timeout=5)

    class BarrierFetcher:
        def fetch(self, symbol: str, start: date, end: date) -> FetchResult:
            barrier.wait()
            return FetchSuccess(symbol=symbol, bars=_bars())

    snapshot = build_snapshot(BarrierFetcher(), "Apple", "AAPL", "^GSPC", RANGE)

    assert isinstance(snapshot.instrument_result, FetchSuccess)
    assert isinstance(snapshot.benchmark_result, FetchSuccess)


def test_build_snapshot_turns_raising_fetcher_into_failure() -> None:
    class FlakyFetcher:
        def fetch(self, symbol: str, start: date, end: date) -> FetchResult:
            if symbol == "^GSPC":
                raise RuntimeError("socket closed")
            return FetchSuccess(symbol=symbol, bars=_bars())

    snapshot = build_snapshot(FlakyFetcher(), "Apple", "AAPL", "^GSPC", RANGE)

    assert isinstance(snapshot.instrument_result, FetchSuccess)
    assert isinstance(snapshot.benchmark_result, FetchFailure)
    assert snapshot.benchmark_result.reason == FetchErrorReason.TRANSPORT_ERROR
    assert "socket closed" in snapshot.benchmark_result.message


def test_snapshot_is_immutable() -> None:
    snapshot = build_snapshot(RecordingFetcher(), "Apple", "AAPL", "^GSPC", RANGE)

    with pytest.raises(AttributeError):
        snapshot.symbol = "MSFT"  # type: ignore[misc]


def test_coordinator_rejects_unknown_instrument_without_fetching() -> None:
    fetcher = RecordingFetcher()
    coordinator = _coordinator(fetcher)

    with pytest.raises(UnknownInstrumentError, match="Supported"):
        coordinator.trigger("Not A Company", RANGE)

    coordinator.close()
    assert fetcher.calls == []
    assert coordinator.current is None


@pytest.mark.parametrize(
    "date_range",
    [
        DateRange(start=date(2025, 1, 10), end=date(2025, 1, 1)),
        DateRange(start=date(2025, 1, 1), end=date(2025, 1, 16)),
    ],
)
def test_coordinator_rejects_invalid_ranges(date_range: DateRange) -> None:
    fetcher = RecordingFetcher()
    coordinator = _coordinator(fetcher)

    with pytest.raises(InvalidDateRangeError):
        coordinator.trigger("Apple", date_range)

    coordinator.close()
    assert fetcher.calls == []


def test_coordinator_refresh_publishes_snapshot_by_name_or_symbol() -> None:
    fetcher = RecordingFetcher()
    coordinator = _coordinator(fetcher)

    first = coordinator.refresh("apple", RANGE)
    second = coordinator.refresh("AAPL", RANGE)
    coordinator.close()

    assert first is not None and second is not None
    assert first is not second
    assert first.symbol == second.symbol == "AAPL"
    assert first.instrument_name == "Apple"
    assert first.triggered_at == _fixed_clock()
    assert coordinator.current is second
    assert len(fetcher.calls) == 4
    assert not coordinator.in_flight


def test_coordinator_discards_superseded_snapshot() -> None:
    release_first = threading.Event()
    first_started = threading.Event()

    class BlockingFetcher:
        def fetch(self, symbol: str, start: date, end: date) -> FetchResult:
            if symbol == "AAPL":
                first_started.set()
                assert release_first.wait(timeout=5)
            return FetchSuccess(symbol=symbol, bars=_bars())

    coordinator = _coordinator(BlockingFetcher())

    first_future = coordinator.trigger("Apple", RANGE)
    assert first_started.wait(timeout=5)
    assert coordinator.in_flight
    second_future = coordinator.trigger("Microsoft", RANGE)
    second = second_future.result(timeout=5)

    assert coordinator.current is second
    assert not coordinator.in_flight

    release_first.set()
    first = first_future.result(timeout=5)
    coordinator.close()

    assert first.symbol == "AAPL"
    assert coordinator.current is second
    assert coordinator.current.symbol == "MSFT"


def test_build_snapshot_fetches_shared_symbol_once() -> None:
    fetcher = RecordingFetcher()

    snapshot = build_snapshot(fetcher, "Apple", "AAPL", "AAPL", RANGE)

    assert fetcher.calls == [("AAPL", RANGE.start, RANGE.end)]
    assert snapshot.instrument_result is snapshot.benchmark_result


def test_coordinator_keeps_last_snapshot_when_build_fails(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    coordinator = _coordinator(RecordingFetcher())
    published = coordinator.refresh("Apple", RANGE)

    def broken_build(*args, **kwargs):
        raise RuntimeError("executor exploded")

    monkeypatch.setattr("benchview.snapshot.build_snapshot", broken_build)
    future = coordinator.trigger("Microsoft", RANGE)
    with pytest.raises(RuntimeError, match="executor exploded"):
        future.result(timeout=5)
    coordinator.close()

    assert published is not None
    assert coordinator.current is published
    assert not coordinator.in_flight
