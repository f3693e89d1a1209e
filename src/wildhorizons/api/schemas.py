"""Pydantic models describing the HTTP payloads.

Records themselves stay schemaless (``dict[str, Any]``); only the envelopes
around them are typed.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, TypeAdapter

from wildhorizons.core.settings import EnvName

# Request bodies for POST /api/sightings must decode to one JSON object.
DraftAdapter: TypeAdapter[dict[str, Any]] = TypeAdapter(dict[str, Any])


class HealthStatus(BaseModel):
    """Liveness payload for ``GET /health``."""

    status: str = "ok"
    environment: EnvName
    version: str


class ErrorBody(BaseModel):
    """Uniform error envelope returned for every non-2xx response."""

    error: str = Field(description="Reason phrase for the status code, e.g. 'Bad Request'")
    message: str = Field(description="Human-readable detail")


class SightingCreated(BaseModel):
    """Response for a successfully persisted sighting."""

    message: str = "Data received"
    data: dict[str, Any]


__all__ = ["DraftAdapter", "ErrorBody", "HealthStatus", "SightingCreated"]
