"""Error envelope helpers.

Every error leaves the API as ``{"error": <reason phrase>, "message": <detail>}``
with the reason phrase derived from the status code.
"""

from __future__ import annotations

from fastapi.responses import JSONResponse

from .schemas import ErrorBody

STATUS_MESSAGES: dict[int, str] = {
    400: "Bad Request",
    401: "Unauthorized",
    403: "Forbidden",
    404: "Not Found",
    405: "Method Not Allowed",
    500: "Internal Server Error",
    503: "Service Unavailable",
}


def status_message(status_code: int) -> str:
    """Return the reason phrase for ``status_code``, or ``"Unknown Error"``."""
    return STATUS_MESSAGES.get(status_code, "Unknown Error")


def error_response(status_code: int, message: str) -> JSONResponse:
    """Build the JSON error envelope for ``status_code``."""
    body = ErrorBody(error=status_message(status_code), message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump())


__all__ = ["STATUS_MESSAGES", "error_response", "status_message"]
