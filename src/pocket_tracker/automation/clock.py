from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta


class Clock(ABC):
    """Source of the current instant. Injected so time-windowed logic is testable."""

    @abstractmethod
    def now(self) -> datetime:
        pass

    def today(self) -> date:
        return self.now().date()


class SystemClock(Clock):
    """Local wall-clock time"""

    def now(self) -> datetime:
        return datetime.now()


class FixedClock(Clock):
    """Clock frozen at a given instant until moved explicitly."""

    def __init__(self, instant: datetime):
        self._instant = instant

    def now(self) -> datetime:
        return self._instant

    def set(self, instant: datetime) -> None:
        self._instant = instant

    def advance(self, delta: timedelta) -> None:
        self._instant += delta

    def __repr__(self) -> str:
        return f"FixedClock({self._instant.isoformat()})"
