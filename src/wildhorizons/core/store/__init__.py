"""Persisted JSON-document stores."""

from __future__ import annotations

from .document_store import DocumentStore
from .snapshot import SnapshotFile

__all__ = ["DocumentStore", "SnapshotFile"]
