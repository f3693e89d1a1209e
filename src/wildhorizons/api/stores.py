"""
Store registry shared by the API routers.

The application owns exactly two stores, built once per app instance from
:class:`Settings` and attached to ``app.state``:

- **sightings**: writable, append-only log at ``SIGHTINGS_PATH``.
- **destinations**: read-only catalog at ``DESTINATIONS_PATH`` (or the
  bundled file).

Routers receive them through the ``get_*_store`` dependencies instead of
module-level globals, so every test app gets its own files.
"""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request

from wildhorizons.core.settings import Settings
from wildhorizons.core.store import DocumentStore


@dataclass(frozen=True, slots=True)
class StoreRegistry:
    """The stores served by one application instance."""

    sightings: DocumentStore
    destinations: DocumentStore

    def all(self) -> tuple[DocumentStore, ...]:
        return (self.sightings, self.destinations)


def build_stores(settings: Settings) -> StoreRegistry:
    """Create (but do not open) the stores described by ``settings``."""
    return StoreRegistry(
        sightings=DocumentStore(
            settings.sightings_path,
            indent=settings.json_indent,
            name="sightings",
        ),
        destinations=DocumentStore(
            settings.catalog_path,
            read_only=True,
            name="destinations",
        ),
    )


def get_stores(request: Request) -> StoreRegistry:
    registry: StoreRegistry = request.app.state.stores
    return registry


def get_sightings_store(request: Request) -> DocumentStore:
    return get_stores(request).sightings


def get_destinations_store(request: Request) -> DocumentStore:
    return get_stores(request).destinations


__all__ = [
    "StoreRegistry",
    "build_stores",
    "get_destinations_store",
    "get_sightings_store",
    "get_stores",
]
