"""FastAPI application entry point for the Resumify API."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from resumify.api.routes import assets, catalog, health, pdf, public, resumes

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Initialize resources on startup and clean up on shutdown."""
    from resumify.config import configure_logging
    from resumify.data.db import init_db
    from resumify.services.render_pipeline import set_render_pipeline

    configure_logging()
    init_db()
    logger.info("Resumify API started")
    yield
    pipeline = set_render_pipeline(None)
    if pipeline is not None:
        # Let queued renders finish so their artifacts are reconciled.
        pipeline.shutdown(wait=True)


app = FastAPI(
    title="Resumify API",
    description="API for editing resumes and publishing their PDF renderings",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(assets.router)
app.include_router(catalog.router, prefix="/api")
app.include_router(public.router, prefix="/api")
app.include_router(resumes.router, prefix="/api")
app.include_router(pdf.router, prefix="/api")


def main() -> None:
    """Start the development server."""
    import uvicorn

    uvicorn.run(
        "resumify.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )


if __name__ == "__main__":
    main()
