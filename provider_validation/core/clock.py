"""Time and identifier collaborators injected into the services."""

import uuid
from datetime import datetime, timezone
from typing import Callable, Protocol


class Clock(Protocol):
    """Source of the current time for every ``now()`` in the core."""

    def now(self) -> datetime:
        ...


class SystemClock:
    """Wall clock returning timezone-aware UTC datetimes."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """Clock frozen at a given instant; ``advance`` moves it forward."""

    def __init__(self, instant: datetime):
        if instant.tzinfo is None:
            raise ValueError("FixedClock requires a timezone-aware datetime")
        self.instant = instant

    def now(self) -> datetime:
        return self.instant

    def advance(self, delta) -> None:
        self.instant = self.instant + delta


IdFactory = Callable[[], uuid.UUID]

default_id_factory: IdFactory = uuid.uuid4
