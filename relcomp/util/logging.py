"""Print-based logging for verbose translations.

relcomp never configures the `logging` module of the standard library. Components that support verbose output create a
dedicated log function via `make_logger` instead and call it just like `print`. Disabled log functions do nothing, so call
sites never have to check whether logging is enabled.
"""
from __future__ import annotations

import sys
from collections.abc import Callable
from datetime import datetime
from typing import IO, Any


def timestamp() -> str:
    """Provides the current time of day with millisecond precision, e.g. ``14:03:59.120``."""
    return datetime.now().strftime("%H:%M:%S.%f")[:-3]


def _discard(*args: Any) -> None:
    pass


def make_logger(enabled: bool = True, *, file: IO[str] = sys.stderr,
                prefix: str | Callable[[], str] = "") -> Callable[..., None]:
    """Creates a new print-like log function.

    Parameters
    ----------
    enabled : bool, optional
        Whether the log entries should actually be written, by default *True*
    file : IO[str], optional
        Destination of the log entries, by default ``sys.stderr``
    prefix : str | Callable[[], str], optional
        A common prefix of all log entries. Can be either a fixed string, or a callable that produces a new prefix for
        each entry (e.g. `timestamp`).

    Returns
    -------
    Callable[..., None]
        The log function. All positional arguments are joined by spaces, just like `print` does.
    """
    if not enabled:
        return _discard

    def _log(*args: Any) -> None:
        head = prefix() if callable(prefix) else prefix
        entries = [head, *args] if head else args
        print(*entries, file=file, flush=True)

    return _log
