"""Running transaction statistics over a trailing staleness window."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Optional

from models.records import Transaction, as_utc
from services.errors import FutureTimestampError
from services.locking import ReadWriteLock

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

DEFAULT_WINDOW_SECONDS = 60.0


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class IngestOutcome(str, Enum):
    """Result of a successful ingest call."""

    admitted = "admitted"
    discarded = "discarded"


@dataclass
class AggregateStats:
    """Mutable running totals; ``min == 0`` doubles as "no minimum yet"."""

    sum: float = 0.0
    count: int = 0
    max: float = 0.0
    min: float = 0.0
    last_updated: Optional[datetime] = None


@dataclass(frozen=True)
class StatsSnapshot:
    """Point-in-time copy of the aggregate handed out to readers."""

    sum: float
    avg: float
    max: float
    min: float
    count: int


class StatsAggregator:
    """Accumulates admitted transactions and suppresses stale results.

    A transaction dated after ``clock()`` is rejected. One older than the
    window is accepted but not folded in. Reads return ``None`` once the
    window has passed since the last admitted transaction.
    """

    def __init__(
        self,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        clock: Clock = utc_now,
    ) -> None:
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive.")
        self.window = timedelta(seconds=window_seconds)
        self._clock = clock
        self._stats = AggregateStats()
        self._lock = ReadWriteLock()

    def ingest(self, transaction: Transaction) -> IngestOutcome:
        timestamp = as_utc(transaction.timestamp)
        now = self._clock()

        if timestamp > now:
            logger.info(
                "Rejected future-dated transaction",
                extra={"amount": transaction.amount, "transaction_ts": timestamp.isoformat()},
            )
            raise FutureTimestampError(timestamp, now)

        if now - timestamp > self.window:
            logger.debug(
                "Discarded stale transaction",
                extra={
                    "amount": transaction.amount,
                    "transaction_ts": timestamp.isoformat(),
                    "outcome": IngestOutcome.discarded.value,
                },
            )
            return IngestOutcome.discarded

        amount = transaction.amount
        with self._lock.write():
            stats = self._stats
            stats.sum += amount
            stats.count += 1
            if amount > stats.max:
                stats.max = amount
            # A zero min reads as unset; see test_zero_amount_min_quirk.
            if stats.min == 0 or amount < stats.min:
                stats.min = amount
            stats.last_updated = self._clock()
            count = stats.count

        logger.debug(
            "Admitted transaction",
            extra={
                "amount": amount,
                "transaction_ts": timestamp.isoformat(),
                "outcome": IngestOutcome.admitted.value,
                "count": count,
            },
        )
        return IngestOutcome.admitted

    def snapshot(self) -> Optional[StatsSnapshot]:
        """Return current statistics, or ``None`` when nothing recent was admitted."""
        with self._lock.read():
            stats = self._stats
            if stats.last_updated is None:
                return None
            if self._clock() - stats.last_updated > self.window:
                return None
            avg = stats.sum / stats.count if stats.count else 0.0
            return StatsSnapshot(
                sum=stats.sum,
                avg=avg,
                max=stats.max,
                min=stats.min,
                count=stats.count,
            )

    def reset(self) -> None:
        with self._lock.write():
            self._stats = AggregateStats()
        logger.info("Statistics reset")

    def _raw_stats(self) -> AggregateStats:
        """Copy of the underlying fields, ignoring staleness; for inspection in tests."""
        with self._lock.read():
            stats = self._stats
            return AggregateStats(
                sum=stats.sum,
                count=stats.count,
                max=stats.max,
                min=stats.min,
                last_updated=stats.last_updated,
            )
