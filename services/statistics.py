"""Gated statistics reads spanning the location and stats locks."""

from __future__ import annotations

from typing import Optional

from services.aggregator import StatsAggregator, StatsSnapshot
from services.errors import UnauthorizedLocationError
from services.location import LocationGate


def read_statistics(gate: LocationGate, aggregator: StatsAggregator) -> Optional[StatsSnapshot]:
    """Check the gate, then snapshot the aggregate.

    Acquires the location lock before the stats lock and holds both until the
    snapshot is taken. This is the only code path that holds two locks.
    """
    with gate.authorization() as auth:
        if not auth.authorized:
            raise UnauthorizedLocationError(auth.city)
        return aggregator.snapshot()
