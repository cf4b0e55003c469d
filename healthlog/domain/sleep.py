"""
Sleep duration between two wall-clock readings.

Readings are "HH:MM" strings on a notional single day. When the end is not
after the start the interval is taken to cross midnight, so an end equal to
the start counts as a full 24 hours.
"""

from typing import NamedTuple

MINUTES_PER_DAY = 24 * 60


class SleepDuration(NamedTuple):
    hours: int
    minutes: int
    total_hours: float


def _minutes_since_midnight(clock: str) -> int:
    try:
        hours_text, minutes_text = clock.split(":")
        hours, minutes = int(hours_text), int(minutes_text)
    except ValueError as e:
        raise ValueError(f"Clock time must be HH:MM, got {clock!r}") from e

    if not (0 <= hours < 24 and 0 <= minutes < 60):
        raise ValueError(f"Clock time out of range: {clock!r}")
    return hours * 60 + minutes


def duration(start: str | None, end: str | None) -> SleepDuration | None:
    """Elapsed time from `start` to `end`, or None when either is missing."""
    if not start or not end:
        return None

    start_minutes = _minutes_since_midnight(start)
    end_minutes = _minutes_since_midnight(end)
    if end_minutes <= start_minutes:
        end_minutes += MINUTES_PER_DAY

    elapsed = end_minutes - start_minutes
    return SleepDuration(
        hours=elapsed // 60,
        minutes=elapsed % 60,
        total_hours=elapsed / 60,
    )
