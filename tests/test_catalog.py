from __future__ import annotations

import pytest

from benchview.catalog import (
    DEFAULT_INSTRUMENTS,
    Instrument,
    InstrumentCatalog,
    parse_instruments,
)
from benchview.errors import ConfigError, UnknownInstrumentError


def test_catalog_resolves_by_name_or_symbol() -> None:
    catalog = InstrumentCatalog()

    assert catalog.resolve("Apple").symbol == "AAPL"
    assert catalog.resolve("  microsoft ").symbol == "MSFT"
    assert catalog.resolve("nvda").name == "NVIDIA"
    assert len(catalog) == len(DEFAULT_INSTRUMENTS)


def test_catalog_rejects_unknown_selection() -> None:
    catalog = InstrumentCatalog((Instrument("Apple", "AAPL"),))

    with pytest.raises(UnknownInstrumentError, match="Supported: Apple"):
        catalog.resolve("GME")


def test_catalog_rejects_duplicates_and_empty_tables() -> None:
    with pytest.raises(ConfigError, match="duplicate instrument symbol"):
        InstrumentCatalog((Instrument("Apple", "AAPL"), Instrument("Apple Inc", "aapl")))
    with pytest.raises(ConfigError, match="duplicate instrument name"):
        InstrumentCatalog((Instrument("Apple", "AAPL"), Instrument("apple", "AAPL.MX")))
    with pytest.raises(ConfigError, match="must not be empty"):
        InstrumentCatalog(())


def test_parse_instruments_reads_name_symbol_pairs() -> None:
    instruments = parse_instruments("Apple=aapl; Toyota = 7203.T ;")

    assert instruments == (Instrument("Apple", "AAPL"), Instrument("Toyota", "7203.T"))
    assert parse_instruments(None) == DEFAULT_INSTRUMENTS
    assert parse_instruments("  ") == DEFAULT_INSTRUMENTS


def test_parse_instruments_rejects_malformed_entries() -> None:
    with pytest.raises(ConfigError, match="Name=SYMBOL"):
        parse_instruments("Apple")
