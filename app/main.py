from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.api import router
from logging_config import configure_logging
from services.aggregator import StatsAggregator
from services.location import LocationGate
from settings import get_settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logger.info(
        "Transaction stats service starting (window=%ss)",
        app.state.aggregator.window.total_seconds(),
    )
    try:
        yield
    finally:
        logger.info("Transaction stats service stopping")


async def _validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    # Malformed bodies are client errors; 422 is kept for future-dated transactions.
    logger.info("Rejected malformed request body", extra={"reason": "validation"})
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": jsonable_encoder(exc.errors())},
    )


def create_app(
    aggregator: Optional[StatsAggregator] = None,
    location_gate: Optional[LocationGate] = None,
) -> FastAPI:
    configure_logging()
    settings = get_settings()
    app = FastAPI(
        title="Transaction Stats",
        description="In-memory running statistics for recent transactions.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.aggregator = aggregator or StatsAggregator(window_seconds=settings.window_seconds)
    app.state.location_gate = location_gate or LocationGate(
        authorized_city=settings.authorized_city
    )
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.include_router(router)
    return app

app = create_app()
