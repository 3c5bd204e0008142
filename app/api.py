"""HTTP route definitions for the service.

Handlers are plain ``def`` functions so FastAPI runs them in its threadpool;
the state objects use blocking locks.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from app.schemas import LocationIn, StatisticsResponse, TransactionIn
from models.records import Transaction
from services.aggregator import IngestOutcome, StatsAggregator
from services.errors import FutureTimestampError, UnauthorizedLocationError
from services.location import LocationGate
from services.statistics import read_statistics

# Starlette renamed the 422 constant; the bare code works across versions.
UNPROCESSABLE_STATUS = 422

router = APIRouter()


def get_aggregator(request: Request) -> StatsAggregator:
    return request.app.state.aggregator


def get_location_gate(request: Request) -> LocationGate:
    return request.app.state.location_gate


@router.post(
    "/transactions",
    status_code=status.HTTP_201_CREATED,
    response_class=Response,
    responses={
        status.HTTP_204_NO_CONTENT: {"description": "Transaction older than the window; ignored."},
        UNPROCESSABLE_STATUS: {"description": "Transaction timestamp is in the future."},
    },
    summary="Record a transaction.",
)
def create_transaction(
    payload: TransactionIn,
    aggregator: StatsAggregator = Depends(get_aggregator),
) -> Response:
    transaction = Transaction(amount=payload.amount, timestamp=payload.timestamp)
    try:
        outcome = aggregator.ingest(transaction)
    except FutureTimestampError as exc:
        raise HTTPException(
            status_code=UNPROCESSABLE_STATUS,
            detail=str(exc),
        ) from exc
    if outcome is IngestOutcome.discarded:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return Response(status_code=status.HTTP_201_CREATED)


@router.get(
    "/statistics",
    response_model=None,
    responses={
        status.HTTP_200_OK: {
            "model": StatisticsResponse,
            "description": "Statistics, or an empty object when nothing was admitted recently.",
        },
        status.HTTP_401_UNAUTHORIZED: {"description": "Current location is not authorized."},
    },
    summary="Read statistics for recent transactions.",
)
def get_statistics(
    gate: LocationGate = Depends(get_location_gate),
    aggregator: StatsAggregator = Depends(get_aggregator),
) -> dict[str, Any]:
    try:
        snapshot = read_statistics(gate, aggregator)
    except UnauthorizedLocationError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(exc),
        ) from exc
    if snapshot is None:
        return {}
    return StatisticsResponse.from_snapshot(snapshot).model_dump()


@router.delete(
    "/reset",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Clear all statistics.",
)
def reset_statistics(aggregator: StatsAggregator = Depends(get_aggregator)) -> Response:
    aggregator.reset()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/location",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Set the location that gates statistics reads.",
)
def set_location(
    payload: LocationIn,
    gate: LocationGate = Depends(get_location_gate),
) -> Response:
    gate.set(payload.city)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/location/reset",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Clear the location gate.",
)
def reset_location(gate: LocationGate = Depends(get_location_gate)) -> Response:
    gate.reset()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
