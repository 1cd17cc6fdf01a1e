from __future__ import annotations
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.api import router
from datastore.alert_store import build_default_alert_store
from logging_config import configure_logging
from services.pipeline import build_default_pipeline
from storage.sensor_store import build_default_sensor_store


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    build_default_pipeline()
    try:
        yield
    finally:
        build_default_pipeline.cache_clear()
        build_default_sensor_store.cache_clear()
        build_default_alert_store.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Mesh Sensor Alerts",
        description="Per-node sensor snapshots with variance alerts persisted to InfluxDB.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(router)
    return app


app = create_app()
