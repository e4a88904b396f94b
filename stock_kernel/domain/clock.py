"""
Injectable time source.

Engines never read the wall clock themselves: the audit trail's date and
time come from the ``Clock`` carried on the engine context, which makes
every audit record reproducible under test.
"""

from abc import ABC, abstractmethod
from datetime import UTC, date, datetime, timedelta


class Clock(ABC):
    """Source of timezone-aware ``datetime`` values."""

    @abstractmethod
    def now(self) -> datetime: ...

    def today(self) -> date:
        return self.now().date()


class SystemClock(Clock):
    """Wall-clock time in the host's local zone, as shown to plant staff."""

    def now(self) -> datetime:
        return datetime.now(UTC).astimezone()


class DeterministicClock(Clock):
    """
    Clock frozen at a chosen instant.

    ``now()`` keeps returning the same value until the test moves it with
    ``advance()`` or ``set_time()``.
    """

    DEFAULT_START = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)

    def __init__(self, start: datetime | None = None):
        self._current = start or self.DEFAULT_START

    def now(self) -> datetime:
        return self._current

    def set_time(self, moment: datetime) -> None:
        self._current = moment

    def advance(self, seconds: float = 1) -> datetime:
        self._current += timedelta(seconds=seconds)
        return self._current
