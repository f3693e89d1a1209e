"""
FastAPI Application Factory & Configuration.

This module initializes the FastAPI application instance. It is responsible for:
1.  **Middleware Setup**: CORS for the front ends, plus one log line per request.
2.  **Exception Handling**: Global handlers so all errors share one JSON envelope.
3.  **Routing**: Mounting the destinations and sightings routers.
4.  **Lifecycle**: Opening the document stores at startup, closing them at shutdown.

Design Pattern
--------------
We use an **Application Factory** pattern (`create_app`). This allows for:
-   Easy testing (each test app gets its own settings and storage files).
-   Configuration injection (passing distinct settings for Dev/Prod).
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from wildhorizons import __version__
from wildhorizons.api.responses import error_response
from wildhorizons.api.routers import destinations, sightings
from wildhorizons.api.schemas import HealthStatus
from wildhorizons.api.stores import StoreRegistry, build_stores
from wildhorizons.core.errors import (
    MalformedInputError,
    PersistenceError,
    QueryValidationError,
    StoreClosedError,
)
from wildhorizons.core.settings import Settings, get_logger, load_settings

logger = get_logger("wildhorizons.api")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    ASGI Lifespan context manager.

    - **Startup**: open every store (creates the sightings directory if needed).
    - **Shutdown**: close the stores, waiting for an in-flight append.
    """
    registry: StoreRegistry = app.state.stores
    for store in registry.all():
        await store.open()
    logger.info("Wild Horizons API started (%s)", app.state.settings.environment)

    yield

    for store in registry.all():
        await store.close()
    logger.info("Wild Horizons API stopped")


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Construct and configure the Wild Horizons FastAPI application.

    Parameters
    ----------
    settings : Settings | None
        Configuration to use; defaults to the cached process settings.

    Returns
    -------
    FastAPI
        The configured ASGI application ready to be served by Uvicorn.
    """
    settings = settings or load_settings()

    app = FastAPI(
        title="Wild Horizons API",
        description="Destinations catalog and wildlife sightings log",
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.stores = build_stores(settings)

    # -----------------------------------------------------------------------
    # Middleware
    # -----------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        logger.info("Request URL: %s, Method: %s", request.url, request.method)
        return await call_next(request)

    # -----------------------------------------------------------------------
    # Global Exception Handlers
    # -----------------------------------------------------------------------
    @app.exception_handler(QueryValidationError)
    async def query_error_handler(request: Request, exc: QueryValidationError) -> JSONResponse:
        """Unknown filter keys are client errors (400)."""
        return error_response(400, str(exc))

    @app.exception_handler(MalformedInputError)
    async def malformed_input_handler(request: Request, exc: MalformedInputError) -> JSONResponse:
        return error_response(400, str(exc))

    @app.exception_handler(StoreClosedError)
    async def store_closed_handler(request: Request, exc: StoreClosedError) -> JSONResponse:
        return error_response(503, str(exc))

    @app.exception_handler(PersistenceError)
    async def persistence_error_handler(request: Request, exc: PersistenceError) -> JSONResponse:
        """The write did not complete; the client must not assume the record exists."""
        logger.error("Persistence failure on %s: %s", request.url.path, exc)
        return error_response(500, str(exc))

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        """Map Python ValueErrors to HTTP 400 Bad Request."""
        return error_response(400, str(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return error_response(400, str(exc.errors()))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        if exc.status_code == 404:
            return error_response(404, "The requested route does not exist")
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all handler so unhandled exceptions still return structured JSON."""
        logger.exception("Unhandled error on %s", request.url.path)
        return error_response(500, str(exc))

    # -----------------------------------------------------------------------
    # Routes
    # -----------------------------------------------------------------------
    app.include_router(sightings.router)
    app.include_router(destinations.router)

    @app.get("/health", tags=["System"], response_model=HealthStatus)
    async def health_check() -> HealthStatus:
        """Liveness check."""
        return HealthStatus(environment=settings.environment, version=__version__)

    return app


__all__ = ["create_app", "lifespan"]
