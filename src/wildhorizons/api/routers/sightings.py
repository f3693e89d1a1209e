"""
API Routes for the sightings log.

Endpoints
---------
- `GET /api/sightings`: every recorded sighting, oldest first.
- `POST /api/sightings`: record a new sighting (201 Created).

The request body may carry any fields; it only has to be a JSON object. The
store assigns the `uuid`.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status
from pydantic import ValidationError

from wildhorizons.api.schemas import DraftAdapter, SightingCreated
from wildhorizons.api.stores import get_sightings_store
from wildhorizons.core.errors import MalformedInputError
from wildhorizons.core.records import Record
from wildhorizons.core.settings import get_logger
from wildhorizons.core.store import DocumentStore

router = APIRouter(prefix="/api/sightings", tags=["Sightings"])
logger = get_logger("wildhorizons.api.sightings")


@router.get("", summary="List all sightings")
async def list_sightings(
    store: DocumentStore = Depends(get_sightings_store),
) -> list[Record]:
    return await store.load()


@router.post(
    "",
    response_model=SightingCreated,
    status_code=status.HTTP_201_CREATED,
    summary="Record a new sighting",
)
async def create_sighting(
    request: Request,
    store: DocumentStore = Depends(get_sightings_store),
) -> SightingCreated:
    """
    Decode the body into a draft and append it to the log.

    Errors
    ------
    - 400 if the body is not a JSON object.
    - 500 if the log could not be written; nothing is reported as saved.
    """
    body = await request.body()
    try:
        draft = DraftAdapter.validate_json(body)
    except ValidationError as exc:
        raise MalformedInputError(f"Invalid JSON format: {exc.errors()[0]['msg']}") from exc

    record = await store.append(draft)
    logger.info("Stored sighting %s", record["uuid"])
    return SightingCreated(data=record)


__all__ = ["router"]
