from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.api import router
from logging_config import configure_logging
from services.snapshot_query import build_default_query_service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    service = build_default_query_service()
    logger.info(
        "Snapshot service ready",
        extra={"reason": f"container={service.container.name}"},
    )
    try:
        yield
    finally:
        build_default_query_service.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Irrigation Snapshot Service",
        description="Latest sensor snapshot retrieval backed by a mocked document store.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(router)
    return app

app = create_app()
