"""Core package for Wild Horizons.

Downstream code imports from the submodules directly, e.g.:
    from wildhorizons.core.store import DocumentStore
    from wildhorizons.core.query import filter_records, validate_query
"""

from __future__ import annotations

__all__ = ["__doc__"]
