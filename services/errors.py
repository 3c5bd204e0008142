"""Exceptions raised by the stats and location services."""

from __future__ import annotations

from datetime import datetime


class StatsServiceError(Exception):
    """Base class for errors the HTTP layer maps to client responses."""


class FutureTimestampError(StatsServiceError):
    """Raised when a transaction is dated after the current time."""

    def __init__(self, timestamp: datetime, now: datetime) -> None:
        super().__init__(
            f"Transaction timestamp {timestamp.isoformat()} is in the future "
            f"(now {now.isoformat()})."
        )
        self.timestamp = timestamp
        self.now = now


class UnauthorizedLocationError(StatsServiceError):
    """Raised when the configured location does not grant statistics access."""

    def __init__(self, city: str) -> None:
        super().__init__(f"Location {city!r} is not authorized to read statistics.")
        self.city = city
