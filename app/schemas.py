"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field, field_validator

from models.records import as_utc
from services.aggregator import StatsSnapshot


class TransactionIn(BaseModel):
    """Inbound transaction event."""

    amount: float = Field(
        ...,
        strict=True,
        allow_inf_nan=False,
        description="Signed transaction amount; must be a finite JSON number.",
    )
    timestamp: datetime = Field(
        ..., description="ISO-8601 time of the transaction; naive values are read as UTC."
    )

    @field_validator("timestamp", mode="before")
    @classmethod
    def _require_iso_string(cls, value: Any) -> Any:
        if not isinstance(value, str):
            raise ValueError("timestamp must be an ISO-8601 string")
        try:
            float(value)
        except ValueError:
            return value
        raise ValueError("timestamp must be an ISO-8601 string, not an epoch number")

    @field_validator("timestamp")
    @classmethod
    def _normalize_timestamp(cls, value: datetime) -> datetime:
        return as_utc(value)


class LocationIn(BaseModel):
    """Inbound location update."""

    city: str


class StatisticsResponse(BaseModel):
    """Aggregate statistics for recently admitted transactions."""

    sum: float
    avg: float
    max: float
    min: float
    count: int = Field(..., ge=0)

    @classmethod
    def from_snapshot(cls, snapshot: StatsSnapshot) -> "StatisticsResponse":
        return cls(
            sum=snapshot.sum,
            avg=snapshot.avg,
            max=snapshot.max,
            min=snapshot.min,
            count=snapshot.count,
        )
