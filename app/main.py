from __future__ import annotations
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI

from app.api import router
from datastore.sensor_registry import SensorRegistry
from logging_config import configure_logging
from services.pipeline import build_default_pipeline


def create_app(registry: Optional[SensorRegistry] = None) -> FastAPI:
    """Build the query API; without ``registry`` the configured folder is ingested on startup."""

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if registry is not None:
            app.state.registry = registry
            yield
            return

        pipeline = build_default_pipeline()
        try:
            app.state.registry = pipeline.build_dataset()
            yield
        finally:
            app.state.registry = None
            pipeline.close()
            build_default_pipeline.cache_clear()

    configure_logging()
    app = FastAPI(
        title="Melbourne Foot Traffic",
        description="Read-only queries over hourly pedestrian counts.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(router)
    return app

app = create_app()
