from __future__ import annotations


class HistevalError(Exception):
    """Base class for every error raised by histeval."""


class RecordError(HistevalError):
    """History input is corrupt or does not match the declared mode.

    Fatal: no partial evaluation over such input is trustworthy.
    """


class DataRootError(HistevalError):
    """Batch data root is missing, unreadable or not a directory."""


class StrategyError(HistevalError):
    """A strategy could not update or reset its history."""
