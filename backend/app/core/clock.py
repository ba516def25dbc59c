"""
Clock capability.

Run and position timestamps come from an injected clock so that tests can
pin "now" to a known instant.
"""

from datetime import datetime, timezone


class SystemClock:
    """Wall clock in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


system_clock = SystemClock()


def get_clock() -> SystemClock:
    """
    FastAPI dependency for the clock.

    Tests override this to supply a fixed clock.
    """
    return system_clock
