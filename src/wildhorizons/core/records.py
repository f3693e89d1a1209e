"""Shared type aliases for schemaless JSON documents.

A *record* is one JSON object as decoded by :mod:`json`: field names map to
strings, booleans, a nested ``details`` list of objects, or anything else a
client chose to submit. No schema is enforced; consumers must tolerate any
shape. A *snapshot* is the ordered list of every record in one store.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

Record = dict[str, Any]
Snapshot = list[Record]
Draft = Mapping[str, Any]

UUID_FIELD = "uuid"
DETAILS_FIELD = "details"

__all__ = ["Record", "Snapshot", "Draft", "UUID_FIELD", "DETAILS_FIELD"]
