"""
salecountdown/models.py

Data models for sale windows and countdown snapshots.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Mapping, Optional

from .errors import ConfigError, InvalidInputError
from .time_source import Instant, InstantLike, parse_instant


# Unit sizes in milliseconds
MS_PER_DAY = 86_400_000
MS_PER_HOUR = 3_600_000
MS_PER_MINUTE = 60_000
MS_PER_SECOND = 1_000

# Schedule keys accepted by SaleWindow.from_schedule(), in lookup order
START_KEYS = ("startDate", "start_time", "startTime")
END_KEYS = ("endDate", "end_time", "endTime")


class CountdownState(IntEnum):
    """Countdown phases, ordered by severity."""
    NOT_STARTED = 0
    RUNNING = 1
    URGENT = 2
    CRITICAL = 3
    EXPIRED = 4


@dataclass(frozen=True)
class SaleWindow:
    """
    A promotion's active period.

    Both ends accept anything parse_instant() does and are stored as
    epoch milliseconds.

    Attributes:
        end_time: When the sale ends (epoch ms).
        start_time: When the sale starts (epoch ms), if known.
    """
    end_time: Instant
    start_time: Optional[Instant] = None

    def __post_init__(self):
        # Frozen: normalize raw timestamps in place
        object.__setattr__(self, "end_time", parse_instant(self.end_time))
        if self.start_time is not None:
            object.__setattr__(self, "start_time", parse_instant(self.start_time))

        if self.start_time is not None and self.start_time >= self.end_time:
            raise ConfigError(
                f"Sale window start ({self.start_time}) must be before "
                f"end ({self.end_time})"
            )

    @classmethod
    def create(
        cls,
        end_time: InstantLike,
        start_time: Optional[InstantLike] = None
    ) -> "SaleWindow":
        """
        Build a window from raw timestamps (epoch ms, ISO strings, datetimes).

        Raises:
            InvalidInputError: If either timestamp is unparsable.
            ConfigError: If start_time is not before end_time.
        """
        return cls(end_time=end_time, start_time=start_time)

    @classmethod
    def from_schedule(cls, schedule: Mapping[str, Any]) -> "SaleWindow":
        """
        Build a window from a catalog schedule mapping.

        Accepts the catalog's ``startDate``/``endDate`` keys as well as
        ``start_time``/``end_time``.

        Raises:
            InvalidInputError: If the end is missing or a value is unparsable.
            ConfigError: If start is not before end.
        """
        end = next((schedule[k] for k in END_KEYS if schedule.get(k) is not None), None)
        if end is None:
            raise InvalidInputError("Schedule has no end date")
        start = next((schedule[k] for k in START_KEYS if schedule.get(k) is not None), None)
        return cls.create(end, start)

    @property
    def duration_ms(self) -> Optional[int]:
        """Total length of the window, or None without a start."""
        if self.start_time is None:
            return None
        return self.end_time - self.start_time


@dataclass(frozen=True)
class TimeRemaining:
    """
    Immutable countdown snapshot.

    For NOT_STARTED the fields count down to the start, otherwise to the
    end. Every field is 0 once EXPIRED.
    """
    days: int
    hours: int
    minutes: int
    seconds: int
    milliseconds: int
    total_ms: int
    state: CountdownState

    @classmethod
    def from_total(cls, total_ms: int, state: CountdownState) -> "TimeRemaining":
        """Decompose total_ms with integer floor division."""
        if state is CountdownState.EXPIRED:
            return cls(0, 0, 0, 0, 0, 0, state)
        days, rest = divmod(total_ms, MS_PER_DAY)
        hours, rest = divmod(rest, MS_PER_HOUR)
        minutes, rest = divmod(rest, MS_PER_MINUTE)
        seconds, milliseconds = divmod(rest, MS_PER_SECOND)
        return cls(days, hours, minutes, seconds, milliseconds, total_ms, state)

    @property
    def expired(self) -> bool:
        return self.state is CountdownState.EXPIRED

    @property
    def urgent(self) -> bool:
        """True for URGENT and CRITICAL."""
        return self.state in (CountdownState.URGENT, CountdownState.CRITICAL)

    @property
    def critical(self) -> bool:
        return self.state is CountdownState.CRITICAL

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert snapshot to a dictionary for JSON serialization.

        Returns:
            Dictionary suitable for server-rendered display.
        """
        return {
            "days": self.days,
            "hours": self.hours,
            "minutes": self.minutes,
            "seconds": self.seconds,
            "milliseconds": self.milliseconds,
            "total_ms": self.total_ms,
            "state": self.state.name.lower(),
        }
