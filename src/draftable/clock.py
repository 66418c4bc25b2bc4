"""Wall-clock source and timestamp normalization.

All publish timestamps are timezone-aware UTC datetimes. The clock used by
``now()`` can be swapped out, which is how tests pin or advance time.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import date, datetime, time, timedelta, timezone
from typing import Iterator, Optional, Protocol, Union

from .exceptions import TimestampParseError

TimestampInput = Union[datetime, date, str, None]


class Clock(Protocol):
    """Source of the current time."""

    def now(self) -> datetime:
        ...


class SystemClock:
    """UTC wall clock."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """Clock pinned to an instant until moved explicitly."""

    def __init__(self, at: TimestampInput = None):
        self._at = parse_timestamp(at) if at is not None else datetime.now(timezone.utc)

    def now(self) -> datetime:
        return self._at

    def set(self, at: TimestampInput) -> None:
        self._at = parse_timestamp(at)

    def advance(self, **kwargs) -> datetime:
        """Move the clock forward by ``timedelta(**kwargs)`` and return the new time."""
        self._at = self._at + timedelta(**kwargs)
        return self._at


_clock: Clock = SystemClock()


def get_clock() -> Clock:
    return _clock


def set_clock(clock: Clock) -> Clock:
    """Install ``clock`` process-wide and return the clock it replaced."""
    global _clock
    previous = _clock
    _clock = clock
    return previous


@contextmanager
def use_clock(clock: Clock) -> Iterator[Clock]:
    previous = set_clock(clock)
    try:
        yield clock
    finally:
        set_clock(previous)


def now() -> datetime:
    return to_utc(_clock.now())


def to_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime. Naive values are taken to be UTC."""
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: TimestampInput) -> Optional[datetime]:
    """
    Parse a timestamp into the canonical representation.

    Accepts datetimes, dates (midnight UTC), ISO-8601 strings (a trailing ``Z``
    is accepted) and None.

    Raises:
        TimestampParseError: If the value cannot be interpreted as a timestamp
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return to_utc(value)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as e:
            raise TimestampParseError(f"Invalid timestamp: {value!r}", value=value) from e
        return to_utc(parsed)
    raise TimestampParseError(
        f"Unsupported timestamp type: {type(value).__name__}", value=value
    )
