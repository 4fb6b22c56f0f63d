"""
salecountdown/time_source.py

Clock abstraction and instant normalization.

Provides:
- TimeSource protocol plus host-clock and manual implementations
- parse_instant() for turning catalog timestamps into epoch milliseconds

All instants are integer epoch milliseconds in UTC.
"""

import re
import time
from datetime import datetime, timezone
from typing import Protocol, Union

from .errors import InvalidInputError


Instant = int

InstantLike = Union[int, float, str, datetime]

# Bare epoch-millisecond strings, e.g. "1764619200000"
EPOCH_MS_PATTERN = re.compile(r"^-?\d+$")


class TimeSource(Protocol):
    """Supplies the current instant. Inject a fake in tests."""

    def now(self) -> Instant: ...


class SystemTimeSource:
    """Default time source backed by the host clock."""

    def now(self) -> Instant:
        return time.time_ns() // 1_000_000


class ManualTimeSource:
    """
    Controllable time source for deterministic tests.

    Usage:
        clock = ManualTimeSource(1_700_000_000_000)
        clock.advance(5000)
        clock.now()  # 1_700_000_005_000
    """

    def __init__(self, start_ms: Instant = 0):
        self._now = parse_instant(start_ms)

    def now(self) -> Instant:
        return self._now

    def set(self, instant: InstantLike) -> None:
        """Jump to an absolute instant (may move backwards)."""
        self._now = parse_instant(instant)

    def advance(self, ms: int) -> Instant:
        """Move the clock forward by ms and return the new instant."""
        self._now += int(ms)
        return self._now


def _datetime_to_ms(value: datetime) -> Instant:
    # Naive datetimes are treated as UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    delta = value - datetime(1970, 1, 1, tzinfo=timezone.utc)
    return (delta.days * 86_400 + delta.seconds) * 1000 + delta.microseconds // 1000


def parse_instant(value: InstantLike) -> Instant:
    """
    Normalize a timestamp into integer epoch milliseconds.

    Supported inputs:
    - int or float epoch milliseconds (floats are floored)
    - "1764619200000" (bare epoch milliseconds)
    - "2025-12-01T20:00:00Z", "2025-12-01T20:00:00+02:00" (ISO-8601)
    - "2025-12-01 20:00" or "2025-12-01" (treated as UTC)
    - "20251201T200000Z", "2025-12-01T20:00:00.5Z" (basic format, any
      fraction length; whatever datetime.fromisoformat() accepts)
    - datetime objects (naive ones are treated as UTC)

    Args:
        value: Timestamp as delivered by the catalog/promotion service.

    Returns:
        Epoch milliseconds (UTC).

    Raises:
        InvalidInputError: If the value cannot be interpreted as an instant.
    """
    if isinstance(value, bool):
        raise InvalidInputError(f"Boolean is not a timestamp: {value!r}")

    if isinstance(value, int):
        return value

    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            raise InvalidInputError(f"Timestamp must be finite: {value!r}")
        return int(value // 1)

    if isinstance(value, datetime):
        return _datetime_to_ms(value)

    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise InvalidInputError("Timestamp string is empty")

        if EPOCH_MS_PATTERN.match(text):
            return int(text)

        # fromisoformat() only accepts an uppercase UTC designator
        if text[-1] == "z":
            text = text[:-1] + "Z"

        try:
            parsed = datetime.fromisoformat(text)
        except ValueError as e:
            raise InvalidInputError(
                f"Couldn't parse timestamp '{value}'. "
                "Use epoch milliseconds or ISO-8601, e.g. '2025-12-01T20:00:00Z'"
            ) from e
        return _datetime_to_ms(parsed)

    raise InvalidInputError(
        f"Unsupported timestamp type: {type(value).__name__}"
    )
