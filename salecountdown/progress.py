"""
salecountdown/progress.py

Elapsed-fraction helper for sale progress bars.
"""

from .errors import ConfigError
from .models import SaleWindow
from .time_source import InstantLike, parse_instant


def percentage(window: SaleWindow, now: InstantLike) -> float:
    """
    Percentage of the sale window that has elapsed.

    Args:
        window: Sale window; must have a start time.
        now: Current instant; epoch ms, ISO string or datetime.

    Returns:
        0.0 at or before the start, 100.0 at or after the end, linear between.

    Raises:
        ConfigError: If the window has no start time.
        InvalidInputError: If now is not a valid instant.
    """
    if window.start_time is None:
        raise ConfigError("Progress is undefined for a sale window without a start time")

    now = parse_instant(now)

    if now <= window.start_time:
        return 0.0
    if now >= window.end_time:
        return 100.0

    elapsed = now - window.start_time
    return max(0.0, min(100.0, 100.0 * elapsed / window.duration_ms))
