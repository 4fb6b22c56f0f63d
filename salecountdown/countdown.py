"""
salecountdown/countdown.py

Countdown computation and display formatting.

Provides:
- compute_snapshot() turning a sale window and an instant into a TimeRemaining
- Human-readable formatting shared by every storefront countdown variant
"""

from typing import Any, Mapping, Optional, Union

from .models import CountdownState, SaleWindow, TimeRemaining
from .thresholds import ThresholdPolicy
from .time_source import InstantLike, parse_instant


ThresholdsLike = Union[ThresholdPolicy, Mapping[str, Any], None]

# Headline shown above a countdown, by state
STATUS_LABELS = {
    CountdownState.NOT_STARTED: "Starts In",
    CountdownState.RUNNING: "Sale Ends In",
    CountdownState.URGENT: "Hurry Up!",
    CountdownState.CRITICAL: "Sale Ending Soon!",
    CountdownState.EXPIRED: "Sale Ended",
}


def compute_snapshot(
    window: SaleWindow,
    now: InstantLike,
    thresholds: ThresholdsLike = None
) -> TimeRemaining:
    """
    Compute time remaining for a sale window at a given instant.

    Before the start the snapshot counts down to the start (NOT_STARTED).
    From the start until the end it counts down to the end and is
    classified by the threshold policy. At or after the end it is EXPIRED
    with every field zero.

    Args:
        window: The sale window.
        now: Current instant; epoch ms (floats are floored), ISO string or datetime.
        thresholds: ThresholdPolicy, a threshold mapping, or None for defaults.

    Returns:
        Immutable TimeRemaining snapshot.

    Raises:
        ConfigError: If thresholds are invalid.
        InvalidInputError: If now is not a valid instant.
    """
    now = parse_instant(now)
    policy = ThresholdPolicy.from_config(thresholds)

    if window.start_time is not None and now < window.start_time:
        return TimeRemaining.from_total(window.start_time - now, CountdownState.NOT_STARTED)

    if now >= window.end_time:
        return TimeRemaining.from_total(0, CountdownState.EXPIRED)

    remaining_ms = window.end_time - now
    return TimeRemaining.from_total(remaining_ms, policy.classify(remaining_ms))


def status_label(snapshot: TimeRemaining) -> str:
    """Headline for a countdown, e.g. "Hurry Up!"."""
    return STATUS_LABELS[snapshot.state]


def format_clock(snapshot: TimeRemaining, show_days: bool = True) -> str:
    """
    Format a snapshot as a zero-padded clock.

    Args:
        snapshot: Snapshot to format.
        show_days: If True, prefix "Nd " when days remain. If False, days
                   are folded into the hour count.

    Returns:
        String like "2d 04:05:06" or "52:05:06".
    """
    hours = snapshot.hours
    if not show_days:
        hours += snapshot.days * 24

    clock = f"{hours:02d}:{snapshot.minutes:02d}:{snapshot.seconds:02d}"
    if show_days and snapshot.days > 0:
        return f"{snapshot.days}d {clock}"
    return clock


def format_remaining(snapshot: TimeRemaining, short: bool = False) -> str:
    """
    Format a snapshot as a human-readable string.

    Args:
        snapshot: Snapshot to format.
        short: If True, use abbreviated format (e.g., "6d 4h 30m").

    Returns:
        Human-readable time string.
    """
    if snapshot.expired:
        return "now" if short else "sale ended"

    days, hours = snapshot.days, snapshot.hours
    minutes, seconds = snapshot.minutes, snapshot.seconds

    if short:
        parts = []
        if days > 0:
            parts.append(f"{days}d")
        if hours > 0:
            parts.append(f"{hours}h")
        if minutes > 0:
            parts.append(f"{minutes}m")
        if not parts:
            parts.append(f"{seconds}s")
        return " ".join(parts)

    parts = []
    if days > 0:
        parts.append(f"{days} day{'s' if days != 1 else ''}")
    if hours > 0:
        parts.append(f"{hours} hour{'s' if hours != 1 else ''}")
    if minutes > 0:
        parts.append(f"{minutes} minute{'s' if minutes != 1 else ''}")
    if not parts:
        if seconds > 0:
            parts.append(f"{seconds} second{'s' if seconds != 1 else ''}")
        else:
            parts.append("less than a second")
    return ", ".join(parts)


def badge_text(snapshot: TimeRemaining) -> str:
    """
    Compact text for a per-product countdown badge.

    Returns:
        "Expired", "3d left", "5h 12m" or "12m", prefixed with
        "Starts in " before the sale opens.
    """
    if snapshot.expired:
        return "Expired"

    total_hours = snapshot.days * 24 + snapshot.hours
    if total_hours > 24:
        text = f"{total_hours // 24}d left"
    elif total_hours > 0:
        text = f"{total_hours}h {snapshot.minutes}m"
    else:
        text = f"{snapshot.minutes}m"

    if snapshot.state is CountdownState.NOT_STARTED:
        return f"Starts in {text}"
    return text
