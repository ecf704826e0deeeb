# File: src/lotsim/infrastructure/clock.py
"""
Time sources

Entry times and fees read the current time through a Clock so the wall clock
is an injected dependency rather than a hidden global. The command line uses
SystemClock; tests drive a FixedClock by hand.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Optional


class Clock(ABC):
    """Source of the current local time"""

    @abstractmethod
    def now(self) -> datetime:
        pass


class SystemClock(Clock):
    """Wall-clock time"""

    def now(self) -> datetime:
        return datetime.now()


class FixedClock(Clock):
    """
    Clock that only moves when told to

    Useful for reproducing fee calculations at exact instants.
    """

    def __init__(self, start: Optional[datetime] = None):
        self._current = start or datetime(2024, 1, 1, 8, 0, 0)

    def now(self) -> datetime:
        return self._current

    def set(self, moment: datetime) -> None:
        self._current = moment

    def advance(self, delta: timedelta) -> datetime:
        """Move the clock forward and return the new time"""
        self._current = self._current + delta
        return self._current
