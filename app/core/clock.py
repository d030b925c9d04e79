"""
Clock abstraction for code that depends on the current time.

Services that compute deadlines or token ages take a Clock instead of
calling timezone.now() directly, so tests can pin time without patching.

Usage:
    from core.clock import FixedClock, SystemClock

    engine = DelinquencyEngine(clock=SystemClock())

    # In tests
    clock = FixedClock(datetime(2024, 6, 15, 12, 0, tzinfo=UTC))
    engine = DelinquencyEngine(clock=clock)
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Protocol, runtime_checkable

from django.utils import timezone


@runtime_checkable
class Clock(Protocol):
    """
    Protocol for current-time providers.

    now() must return a timezone-aware datetime.
    """

    def now(self) -> datetime: ...

    def today(self) -> date: ...


class SystemClock:
    """Clock backed by django.utils.timezone (honors USE_TZ / TIME_ZONE)."""

    def now(self) -> datetime:
        return timezone.now()

    def today(self) -> date:
        return timezone.localdate()


class FixedClock:
    """
    Clock frozen at a given instant.

    The instant can be moved with advance(); naive datetimes are
    interpreted in the current Django timezone.
    """

    def __init__(self, instant: datetime):
        if timezone.is_naive(instant):
            instant = timezone.make_aware(instant)
        self._instant = instant

    def now(self) -> datetime:
        return self._instant

    def today(self) -> date:
        return timezone.localtime(self._instant).date()

    def advance(self, delta) -> None:
        self._instant = self._instant + delta
