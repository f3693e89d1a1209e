"""Disk format for record snapshots.

A snapshot is persisted as one UTF-8 JSON document holding a top-level array
of objects, pretty-printed and terminated by a newline:

    [
      {
        "title": "Red fox",
        "uuid": "1b4e28ba-2fa1-4d3b-a3f5-ef19b5a7633b"
      }
    ]

Reads
-----
:meth:`SnapshotFile.read` is *strict*. A missing file or a blank file is the
valid empty state and reads as ``[]``; anything else that is not an array of
objects raises :class:`StoreCorruptError`. Whether to mask that error is the
caller's decision (see :class:`DocumentStore.load`).

Writes
------
:meth:`SnapshotFile.write` replaces the whole file. The payload is written to
a temporary sibling and moved over the target with :func:`os.replace`, so a
concurrent reader sees either the previous or the new snapshot.
"""

from __future__ import annotations

import json
import os
import stat
import tempfile
from pathlib import Path

from wildhorizons.core.errors import PersistenceError, StoreCorruptError
from wildhorizons.core.records import Snapshot
from wildhorizons.core.settings import get_logger

logger = get_logger("wildhorizons.store")


class SnapshotFile:
    """Read and atomically replace a JSON-array snapshot on disk."""

    def __init__(self, path: Path, indent: int = 2) -> None:
        self.path: Path = path
        self.indent = indent

    def exists(self) -> bool:
        return self.path.is_file()

    def read(self) -> Snapshot:
        """Return the persisted records, ``[]`` when nothing has been written yet."""
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug("No snapshot at %s yet", self.path)
            return []
        except (OSError, UnicodeDecodeError) as exc:
            raise StoreCorruptError(f"Cannot read snapshot {self.path}: {exc}", self.path) from exc

        if not raw.strip():
            return []

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StoreCorruptError(
                f"Snapshot {self.path} is not valid JSON: {exc}", self.path
            ) from exc

        if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
            raise StoreCorruptError(
                f"Snapshot {self.path} is not a JSON array of objects", self.path
            )
        return data

    def _keep_mode(self, tmp_path: Path) -> None:
        """Give the replacement file the permissions of the file it replaces."""
        try:
            mode = stat.S_IMODE(self.path.stat().st_mode)
        except FileNotFoundError:
            return
        os.chmod(tmp_path, mode)

    def write(self, snapshot: Snapshot) -> None:
        """Replace the persisted snapshot with ``snapshot``.

        Raises
        ------
        PersistenceError
            If the snapshot cannot be serialized or the file cannot be replaced.
        """
        try:
            payload = json.dumps(snapshot, ensure_ascii=False, indent=self.indent)
        except (TypeError, ValueError) as exc:
            raise PersistenceError(f"Snapshot is not JSON-serializable: {exc}", self.path) from exc

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            tmp_path = Path(tmp_name)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                    f.write("\n")
                    f.flush()
                    os.fsync(f.fileno())
                self._keep_mode(tmp_path)
                os.replace(tmp_path, self.path)
            except BaseException:
                tmp_path.unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise PersistenceError(f"Cannot write snapshot {self.path}: {exc}", self.path) from exc


__all__ = ["SnapshotFile"]
