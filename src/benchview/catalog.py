"""Read-only instrument catalog mapping display names to fetchable symbols."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from benchview.errors import ConfigError, UnknownInstrumentError


@dataclass(frozen=True)
class Instrument:
    """Selectable instrument."""

    name: str
    symbol: str


DEFAULT_INSTRUMENTS: tuple[Instrument, ...] = (
    Instrument("Apple", "AAPL"),
    Instrument("Microsoft", "MSFT"),
    Instrument("Amazon", "AMZN"),
    Instrument("Alphabet", "GOOGL"),
    Instrument("Meta Platforms", "META"),
    Instrument("NVIDIA", "NVDA"),
    Instrument("Tesla", "TSLA"),
    Instrument("JPMorgan Chase", "JPM"),
    Instrument("Berkshire Hathaway", "BRK-B"),
    Instrument("Nasdaq 100 ETF", "QQQ"),
)


@dataclass(frozen=True)
class InstrumentCatalog:
    """Immutable name -> symbol table passed to whatever validates selections."""

    instruments: tuple[Instrument, ...] = DEFAULT_INSTRUMENTS

    def __post_init__(self) -> None:
        if not self.instruments:
            raise ConfigError("instrument catalog must not be empty")
        names: set[str] = set()
        symbols: set[str] = set()
        for instrument in self.instruments:
            name_key = instrument.name.strip().lower()
            symbol_key = instrument.symbol.strip().upper()
            if not name_key or not symbol_key:
                raise ConfigError("instrument name and symbol must be non-empty")
            if name_key in names:
                raise ConfigError(f"duplicate instrument name '{instrument.name}'")
            if symbol_key in symbols:
                raise ConfigError(f"duplicate instrument symbol '{instrument.symbol}'")
            names.add(name_key)
            symbols.add(symbol_key)

    def __iter__(self) -> Iterator[Instrument]:
        return iter(self.instruments)

    def __len__(self) -> int:
        return len(self.instruments)

    def names(self) -> list[str]:
        return [instrument.name for instrument in self.instruments]

    def symbols(self) -> list[str]:
        return [instrument.symbol for instrument in self.instruments]

    def resolve(self, selection: str) -> Instrument:
        """Look up an instrument by display name or symbol, case-insensitively."""
        key = selection.strip()
        for instrument in self.instruments:
            if instrument.name.lower() == key.lower():
                return instrument
        for instrument in self.instruments:
            if instrument.symbol.upper() == key.upper():
                return instrument
        supported = ", ".join(self.names())
        raise UnknownInstrumentError(f"Unknown instrument '{selection}'. Supported: {supported}")


def parse_instruments(value: str | None) -> tuple[Instrument, ...]:
    """Parse `Name=SYMBOL;Name=SYMBOL` strings, falling back to the defaults."""
    if value is None or not value.strip():
        return DEFAULT_INSTRUMENTS
    instruments: list[Instrument] = []
    for item in value.split(";"):
        text = item.strip()
        if not text:
            continue
        if "=" not in text:
            raise ConfigError(f"instrument entry '{text}' must look like Name=SYMBOL")
        name, symbol = text.split("=", 1)
        instruments.append(Instrument(name=name.strip(), symbol=symbol.strip().upper()))
    return tuple(instruments) or DEFAULT_INSTRUMENTS
