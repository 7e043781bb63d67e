"""
Injectable time source for the ledger and the costing engine.

History entries and ``last_updated`` stamps take their time from a Clock
handed in at construction, never from ``datetime.now()`` inline, so a
test can pin every timestamp in a scenario.
"""

from abc import ABC, abstractmethod
from datetime import UTC, datetime, timedelta

DEFAULT_DETERMINISTIC_TIME = datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)


class Clock(ABC):
    """Source of timezone-aware timestamps."""

    @abstractmethod
    def now(self) -> datetime:
        ...


class SystemClock(Clock):
    """Wall-clock UTC time."""

    def now(self) -> datetime:
        return datetime.now(UTC)


class DeterministicClock(Clock):
    """
    A clock that only moves when told to.

    ``now()`` keeps returning the same instant until ``advance()`` or
    ``set_time()`` is called.
    """

    def __init__(self, start: datetime | None = None):
        self._current = start or DEFAULT_DETERMINISTIC_TIME

    def now(self) -> datetime:
        return self._current

    def set_time(self, when: datetime) -> None:
        self._current = when

    def advance(self, step: timedelta | int = 1) -> datetime:
        """Move forward by ``step`` (seconds when given an int); returns the new time."""
        if not isinstance(step, timedelta):
            step = timedelta(seconds=step)
        if step < timedelta(0):
            raise ValueError("DeterministicClock cannot move backwards")
        self._current += step
        return self._current
