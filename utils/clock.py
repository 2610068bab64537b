"""
utils/clock.py
--------------
Time providers injected into repositories for timestamp stamping.
"""

from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock: the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def fixed_clock(moment: datetime) -> Clock:
    """Return a clock that always reports ``moment``."""
    return lambda: moment
