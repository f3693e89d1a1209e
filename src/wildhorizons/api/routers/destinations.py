"""
API Routes for the destinations catalog.

Endpoints
---------
- `GET /api`: the catalog filtered by query-string parameters.
- `GET /api/continent/{continent}`: same, restricted to one continent.
- `GET /api/country/{country}`: same, restricted to one country.

Design Decisions
----------------
- **Validate before merge**: only the query string is checked against the
  allowlist; path-derived keys are always recognized filters.
- **Path wins**: `/api/continent/africa?continent=asia` returns African
  destinations. The path value overwrites the query value.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from wildhorizons.api.stores import get_destinations_store
from wildhorizons.core.query import QueryValidator, filter_records, merge_path_filter
from wildhorizons.core.records import Record
from wildhorizons.core.settings import get_logger
from wildhorizons.core.store import DocumentStore

router = APIRouter(prefix="/api", tags=["Destinations"])
logger = get_logger("wildhorizons.api.destinations")

_validator = QueryValidator()


def validated_query(request: Request) -> dict[str, str]:
    """Dependency: the query string as a plain mapping, allowlist-checked.

    Repeated keys keep their last value.
    """
    query = dict(request.query_params)
    _validator.require_valid(query)
    return query


@router.get("", summary="List destinations matching the query filters")
async def list_destinations(
    query: dict[str, str] = Depends(validated_query),
    store: DocumentStore = Depends(get_destinations_store),
) -> list[Record]:
    destinations = await store.load()
    return filter_records(destinations, query)


@router.get("/continent/{continent}", summary="List destinations on one continent")
async def list_by_continent(
    continent: str,
    query: dict[str, str] = Depends(validated_query),
    store: DocumentStore = Depends(get_destinations_store),
) -> list[Record]:
    logger.info("Requested continent: %s", continent)
    destinations = await store.load()
    return filter_records(destinations, merge_path_filter(query, "continent", continent))


@router.get("/country/{country}", summary="List destinations in one country")
async def list_by_country(
    country: str,
    query: dict[str, str] = Depends(validated_query),
    store: DocumentStore = Depends(get_destinations_store),
) -> list[Record]:
    logger.info("Requested country: %s", country)
    destinations = await store.load()
    return filter_records(destinations, merge_path_filter(query, "country", country))


__all__ = ["router", "validated_query"]
