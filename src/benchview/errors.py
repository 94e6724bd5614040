"""Custom exceptions for clearer error handling across the pipeline."""


class BenchviewError(Exception):
    """Base exception for all benchview errors."""


class ConfigError(BenchviewError):
    """Raised when settings or CLI input are invalid."""


class UnknownInstrumentError(ConfigError):
    """Raised when a selection is not present in the instrument catalog."""


class InvalidDateRangeError(ConfigError):
    """Raised when a requested date range cannot be fetched."""


class DerivationError(BenchviewError):
    """Raised when a derived view cannot be computed from a snapshot."""


class FetchFailedError(DerivationError):
    """Raised when a view needs a series whose fetch failed."""


class EmptySeriesError(DerivationError):
    """Raised when a series has zero bars."""


class NoDataError(DerivationError):
    """Raised when there is nothing to summarize."""


class EmptyAlignmentError(DerivationError):
    """Raised when two series share no common date."""
