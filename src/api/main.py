"""Main FastAPI application entry point."""

import uuid
from contextlib import asynccontextmanager
from importlib.metadata import PackageNotFoundError, version
from typing import Annotated

from fastapi import Depends, FastAPI, HTTPException, Request, status
from pymongo.errors import PyMongoError

from infrastructure.database.connection_cache import ConnectionCache
from infrastructure.database.exceptions import DatabaseConnectionError
from infrastructure.dependencies import (
    close_connection_cache,
    get_connection_cache,
    get_request_connection_cache,
)
from infrastructure.logging import configure_logging
from infrastructure.observability import ObservationContext
from infrastructure.settings import get_settings

try:
    __version__ = version("tether-api")
except PackageNotFoundError:
    # Running from a source checkout without `pip install -e .`
    __version__ = "0.0.0+dev"


@asynccontextmanager
async def tether_lifespan(app: FastAPI):
    """Application lifespan context.

    Manages:
    - Logging configuration
    - Connection cache lifecycle (fails fast on missing configuration,
      connects lazily on first use, closed on shutdown)
    """
    configure_logging(debug=get_settings().debug)
    app.state.connection_cache = get_connection_cache()

    yield

    await close_connection_cache()


app = FastAPI(
    title="Tether API",
    description="Cached MongoDB connection for serverless and hot-reloading hosts",
    version=__version__,
    lifespan=tether_lifespan,
)


@app.get("/health")
def health():
    """Basic health check endpoint."""
    return {"status": "ok"}


@app.get("/health/db")
async def health_db(
    request: Request,
    cache: Annotated[ConnectionCache, Depends(get_request_connection_cache)],
) -> dict:
    """Check database connection health.

    Connects through the shared cache, so the first call after startup
    also warms the connection. Connection events are tagged with the
    caller's ``X-Request-ID`` (or a generated id).
    """
    context = ObservationContext(
        request_id=request.headers.get("x-request-id") or uuid.uuid4().hex,
        invocation="health_db",
    )
    try:
        connection = await cache.get_connection(context)
        is_healthy = await connection.ping()
    except (DatabaseConnectionError, PyMongoError) as e:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=DatabaseConnectionError.GENERIC_MESSAGE,
        ) from e

    return {
        "status": "ok" if is_healthy else "unhealthy",
        "connected": cache.is_connected(),
        "database": connection.database_name,
    }
