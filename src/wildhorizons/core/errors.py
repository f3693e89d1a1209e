"""Exception types raised by the Wild Horizons core.

Taxonomy
--------
- :class:`QueryValidationError`: a filter key outside the allowlist. Client
  error; retrying with the same input never helps.
- :class:`MalformedInputError`: a draft or request payload that cannot be
  decoded into a JSON object. Raised by collaborators (HTTP, CLI).
- :class:`PersistenceError`: the store could not complete an append. The
  record must not be reported as saved.

An empty or missing snapshot on ``load()`` is *not* an error: it is the valid
initial state of a store and is returned as ``[]``.

The value-error subclasses map to HTTP 400 in the API layer; persistence
failures map to 5xx.
"""

from __future__ import annotations

from pathlib import Path


class WildHorizonsError(Exception):
    """Base class for all errors raised deliberately by this package."""


class QueryValidationError(WildHorizonsError, ValueError):
    """A query mapping contains a key that is not a recognized filter."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f'Invalid filter key: "{key}".')


class MalformedInputError(WildHorizonsError, ValueError):
    """A payload could not be decoded into a draft record."""


class PersistenceError(WildHorizonsError, RuntimeError):
    """Writing a snapshot to storage failed."""

    def __init__(self, message: str, path: Path | None = None) -> None:
        self.path = path
        super().__init__(message)


class StoreCorruptError(PersistenceError):
    """The persisted snapshot exists but cannot be read as an array of objects.

    Raised only on the read phase of ``append``: appending on top of a masked
    empty snapshot would overwrite the existing data.
    """


class StoreClosedError(PersistenceError):
    """An append was attempted on a store that is not open."""


__all__ = [
    "WildHorizonsError",
    "QueryValidationError",
    "MalformedInputError",
    "PersistenceError",
    "StoreCorruptError",
    "StoreClosedError",
]
