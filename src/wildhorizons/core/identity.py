"""Identifier generation for new records."""

from __future__ import annotations

import uuid
from collections.abc import Callable

IdFactory = Callable[[], str]


def new_id() -> str:
    """Return a random 128-bit identifier in canonical UUID4 text form."""
    return str(uuid.uuid4())


__all__ = ["IdFactory", "new_id"]
