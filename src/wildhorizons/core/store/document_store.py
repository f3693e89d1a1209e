"""
Append-only JSON document store backed by a single snapshot file.

Responsibilities
----------------
- **Load**: return the whole persisted snapshot, or ``[]`` for a store that
  has never been written (or whose file cannot be used, see below).
- **Append**: assign an identifier to a draft, add it to the end of the
  snapshot and persist the full snapshot.
- **Lifecycle**: ``open()`` once at startup, ``close()`` at shutdown. A closed
  store still serves reads but rejects writes.

Concurrency
-----------
Every ``append`` runs its read-modify-write sequence as a single
worker-thread call under one ``threading.Lock`` owned by the store. Without
it, two requests that both read the same snapshot would each write back
their own version and one record would be lost. The lock is held by the
thread, not the awaiting task, so a cancelled ``append`` still finishes its
write before the next one reads. Reads do not take the lock: the writer publishes a new
snapshot only through an atomic file replace, so a reader sees the state
before or after an append, never a partial file.

Bootstrap vs. corruption
------------------------
``load()`` never raises. A missing or blank file is the normal first-run
state. A file that exists but is unreadable or not an array of objects is
logged as an error and also served as ``[]``. ``append()`` does *not* mask
that case: it raises :class:`StoreCorruptError` instead of writing a
one-record snapshot over the existing file.
"""

from __future__ import annotations

import asyncio
import copy
import threading
from collections.abc import Mapping
from pathlib import Path
from types import TracebackType
from typing import Literal

from wildhorizons.core.errors import (
    MalformedInputError,
    PersistenceError,
    StoreClosedError,
    StoreCorruptError,
)
from wildhorizons.core.identity import IdFactory, new_id
from wildhorizons.core.records import UUID_FIELD, Draft, Record, Snapshot
from wildhorizons.core.settings import get_logger

from .snapshot import SnapshotFile

StoreState = Literal["new", "open", "closed"]

# Identifier draws per append before giving up on a misbehaving id factory.
MAX_ID_ATTEMPTS = 8


class DocumentStore:
    """
    A schemaless record collection persisted as one JSON array.

    Parameters
    ----------
    path : Path | str
        Snapshot file. Its parent directory is created on ``open()``.
    id_factory : IdFactory
        Zero-argument callable producing identifiers; defaults to UUID4 text.
    indent : int
        JSON indentation used when persisting.
    read_only : bool
        Reject every ``append`` (used for the destinations catalog).
    name : str | None
        Label used in log lines; defaults to the file stem.
    """

    def __init__(
        self,
        path: Path | str,
        *,
        id_factory: IdFactory = new_id,
        indent: int = 2,
        read_only: bool = False,
        name: str | None = None,
    ) -> None:
        self._file = SnapshotFile(Path(path), indent=indent)
        self._id_factory = id_factory
        self._read_only = read_only
        self._write_lock = threading.Lock()
        self._state: StoreState = "new"
        self.name: str = name or self._file.path.stem
        self._logger = get_logger(f"wildhorizons.store.{self.name}")

    # ------------------------------- Properties -----------------------------

    @property
    def path(self) -> Path:
        return self._file.path

    @property
    def read_only(self) -> bool:
        return self._read_only

    @property
    def is_open(self) -> bool:
        return self._state == "open"

    # ------------------------------- Lifecycle ------------------------------

    async def open(self) -> DocumentStore:
        """Mark the store ready for writes, creating its directory if needed."""
        if self._state == "open":
            return self
        if not self._read_only:
            await asyncio.to_thread(self.path.parent.mkdir, parents=True, exist_ok=True)
        self._state = "open"
        self._logger.info("Opened %s store at %s", self.name, self.path)
        return self

    async def close(self) -> None:
        """Wait for the in-flight append, if any, then refuse further writes."""
        await asyncio.to_thread(self._mark_closed)

    def _mark_closed(self) -> None:
        with self._write_lock:
            if self._state != "closed":
                self._state = "closed"
                self._logger.info("Closed %s store", self.name)

    async def __aenter__(self) -> DocumentStore:
        return await self.open()

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    # ------------------------------- Reads ----------------------------------

    async def load(self) -> Snapshot:
        """Return the current snapshot; ``[]`` for a missing or unusable file."""
        try:
            return await asyncio.to_thread(self._file.read)
        except StoreCorruptError as exc:
            self._logger.error("%s; serving an empty snapshot", exc)
            return []

    # ------------------------------- Writes ---------------------------------

    async def append(self, draft: Draft) -> Record:
        """
        Assign an identifier to ``draft``, persist it and return the record.

        The draft is copied, never mutated. A ``uuid`` supplied by the caller
        is replaced. The read-modify-write runs as one worker-thread call under
        the store's write lock, so cancelling the awaiting task does not cut
        the critical section short: the write still completes before the next
        append reads the snapshot.

        Raises
        ------
        MalformedInputError
            ``draft`` is not a mapping.
        StoreClosedError
            The store is not open.
        StoreCorruptError
            The existing snapshot cannot be read; nothing is written.
        PersistenceError
            The new snapshot could not be written; the record is not saved.
        """
        if not isinstance(draft, Mapping):
            raise MalformedInputError(
                f"A draft record must be a JSON object, got {type(draft).__name__}"
            )
        if self._read_only:
            raise PersistenceError(f"The {self.name} store is read-only", self.path)

        record: Record = copy.deepcopy(dict(draft))
        return await asyncio.to_thread(self._commit, record)

    def _commit(self, record: Record) -> Record:
        with self._write_lock:
            if self._state != "open":
                raise StoreClosedError(f"The {self.name} store is not open", self.path)

            record[UUID_FIELD] = self._id_factory()
            snapshot = self._file.read()
            record[UUID_FIELD] = self._unique_id(record[UUID_FIELD], snapshot)
            snapshot.append(record)
            self._file.write(snapshot)

        self._logger.info(
            "Appended record %s to %s (%d total)", record[UUID_FIELD], self.name, len(snapshot)
        )
        return record

    def _unique_id(self, candidate: str, snapshot: Snapshot) -> str:
        taken = {item[UUID_FIELD] for item in snapshot if isinstance(item.get(UUID_FIELD), str)}
        for _ in range(MAX_ID_ATTEMPTS):
            if candidate and candidate not in taken:
                return candidate
            self._logger.warning("Identifier %r unusable in %s, drawing again", candidate, self.name)
            candidate = self._id_factory()
        raise PersistenceError(f"Could not assign a unique identifier in {self.name}", self.path)


__all__ = ["DocumentStore", "MAX_ID_ATTEMPTS"]
