"""FastAPI application factory.

Lifespan
--------
On startup the app builds a single :class:`MetadataQueryService` (shared
across all requests via ``request.app.state.metadata``).  The service opens
and closes its own connection per query, so nothing needs closing on
shutdown.

Routers
-------
    /metadata  inventory lookups (services, instances, endpoints, databases)
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from inventory.config import settings
from inventory.db import MetadataQueryService, SqliteExecutor, init_db, scoped_connection
from inventory.log import setup_logging

from inventory.api.routers import metadata as metadata_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Ensure the schema exists and wire the query service."""
    setup_logging(settings.log_level)
    with scoped_connection() as conn:
        init_db(conn)
    app.state.metadata = MetadataQueryService(
        SqliteExecutor(settings.db_path), settings.query_config()
    )
    yield


def create_app() -> FastAPI:
    """Return a fully-configured FastAPI application instance."""
    app = FastAPI(
        title="Inventory Metadata API",
        description=(
            "Read-only REST interface over the service inventory: services, "
            "service instances, endpoints and databases seen in a time window."
        ),
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.include_router(metadata_router.router, prefix="/metadata", tags=["metadata"])

    return app


# Module-level instance used by uvicorn:
#   uvicorn inventory.api.app:app --reload
app = create_app()
