"""Location value that gates access to statistics."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, NamedTuple

from services.locking import ReadWriteLock

logger = logging.getLogger(__name__)

DEFAULT_AUTHORIZED_CITY = "bangalore"


class Authorization(NamedTuple):
    authorized: bool
    city: str


class LocationGate:
    """Holds the current city; reads are allowed when it is unset or authorized."""

    def __init__(self, authorized_city: str = DEFAULT_AUTHORIZED_CITY) -> None:
        self.authorized_city = authorized_city
        self._city = ""
        self._lock = ReadWriteLock()

    @property
    def city(self) -> str:
        with self._lock.read():
            return self._city

    def set(self, city: str) -> None:
        with self._lock.write():
            self._city = city
        logger.info("Location set", extra={"city": city})

    def reset(self) -> None:
        with self._lock.write():
            self._city = ""
        logger.info("Location reset")

    def is_authorized(self) -> bool:
        with self._lock.read():
            return self._check()

    @contextmanager
    def authorization(self) -> Iterator[Authorization]:
        """Yield the authorization result while keeping the location read-locked.

        Callers that go on to take the stats lock must do so inside the block so
        the location-then-stats acquisition order holds. The lock is not
        reentrant: do not read ``city`` inside the block.
        """
        with self._lock.read():
            result = Authorization(authorized=self._check(), city=self._city)
            if not result.authorized:
                logger.warning(
                    "Statistics access denied",
                    extra={"city": result.city, "reason": "unauthorized location"},
                )
            yield result

    def _check(self) -> bool:
        return self._city == "" or self._city == self.authorized_city
