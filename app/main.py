from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from app.api import router
from app.web import router as web_router
from logging_config import configure_logging
from services.compaction import CompactionWorker
from services.pool_service import build_default_service
from settings import RETENTION_WINDOW, get_settings
from storage.report_store import build_default_store

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    service = build_default_service()
    worker = None
    if settings.retention_policy == RETENTION_WINDOW:
        worker = CompactionWorker(service, interval=settings.compaction_interval)
        worker.start()

    logger.info(
        "Mining pool service started; using in-memory storage",
        extra={"window_seconds": service.aggregator.window_seconds},
    )
    for route in web_router.routes + router.routes:
        methods = ",".join(sorted(getattr(route, "methods", None) or ()))
        logger.info("Endpoint %s %s", methods, getattr(route, "path", ""))

    try:
        yield
    finally:
        if worker is not None:
            worker.stop()
        build_default_service.cache_clear()
        build_default_store.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Mining Pool Service",
        description="In-memory ingestion of mining worker reports with windowed pool statistics.",
        version="0.1.0",
        lifespan=lifespan,
    )
    static_dir = Path(__file__).resolve().parent / "static"
    app.mount("/static", StaticFiles(directory=static_dir), name="static")
    app.include_router(router)
    app.include_router(web_router)
    return app

app = create_app()
