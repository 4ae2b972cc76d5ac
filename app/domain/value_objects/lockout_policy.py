"""Tiered account lockout thresholds"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional


@dataclass(frozen=True)
class LockoutPolicy:
    short_threshold: int = 3
    short_duration: timedelta = timedelta(minutes=15)
    long_threshold: int = 5
    long_duration: timedelta = timedelta(minutes=60)

    @classmethod
    def from_settings(cls, settings) -> "LockoutPolicy":
        return cls(
            short_threshold=settings.LOCKOUT_SHORT_THRESHOLD,
            short_duration=timedelta(minutes=settings.LOCKOUT_SHORT_MINUTES),
            long_threshold=settings.LOCKOUT_LONG_THRESHOLD,
            long_duration=timedelta(minutes=settings.LOCKOUT_LONG_MINUTES),
        )

    def duration_for(self, attempts: int) -> Optional[timedelta]:
        """Lock duration earned by ``attempts`` consecutive failures, if any."""
        if attempts >= self.long_threshold:
            return self.long_duration
        if attempts >= self.short_threshold:
            return self.short_duration
        return None

    def locked_until(self, attempts: int, now: datetime) -> Optional[datetime]:
        duration = self.duration_for(attempts)
        return now + duration if duration else None
