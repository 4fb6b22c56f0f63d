"""
tests/unit/test_countdown.py

Unit tests for compute_snapshot and display formatting.

Tests cover:
- State classification before, during and after the window
- Exact decomposition of remaining time
- Severity never regressing as time moves forward
- Formatting helpers used by the storefront variants
"""

import pytest

from salecountdown.countdown import (
    badge_text,
    compute_snapshot,
    format_clock,
    format_remaining,
    status_label,
)
from salecountdown.errors import ConfigError, InvalidInputError
from salecountdown.models import CountdownState, SaleWindow, TimeRemaining
from salecountdown.thresholds import ThresholdPolicy


NOW = 1_764_619_200_000


def recompose(snap: TimeRemaining) -> int:
    return (
        snap.days * 86_400_000 + snap.hours * 3_600_000
        + snap.minutes * 60_000 + snap.seconds * 1000 + snap.milliseconds
    )


# =============================================================================
# compute_snapshot Tests
# =============================================================================

class TestComputeSnapshot:
    """Tests for snapshot computation."""

    def test_ends_in_five_seconds_is_critical(self):
        """end = now + 5s with default thresholds is CRITICAL, 0d 0h 0m 5s 0ms."""
        snap = compute_snapshot(SaleWindow(end_time=NOW + 5000), NOW)

        assert snap.state is CountdownState.CRITICAL
        assert (snap.days, snap.hours, snap.minutes, snap.seconds, snap.milliseconds) == (0, 0, 0, 5, 0)
        assert snap.total_ms == 5000

    def test_not_started_counts_to_start(self):
        """start = now + 1s, end = now + 2s is NOT_STARTED with 1s to go."""
        window = SaleWindow(start_time=NOW + 1000, end_time=NOW + 2000)
        snap = compute_snapshot(window, NOW)

        assert snap.state is CountdownState.NOT_STARTED
        assert snap.total_ms == 1000
        assert (snap.days, snap.hours, snap.minutes, snap.seconds, snap.milliseconds) == (0, 0, 0, 1, 0)

    def test_not_started_ignores_thresholds(self):
        """A sale opening in 5 minutes is NOT_STARTED, not CRITICAL."""
        window = SaleWindow(start_time=NOW + 300_000, end_time=NOW + 400_000)
        assert compute_snapshot(window, NOW).state is CountdownState.NOT_STARTED

    def test_running_at_start_instant(self):
        """now == start counts down to the end."""
        window = SaleWindow(start_time=NOW, end_time=NOW + 2 * 86_400_000)
        snap = compute_snapshot(window, NOW)

        assert snap.state is CountdownState.RUNNING
        assert snap.days == 2
        assert snap.total_ms == 2 * 86_400_000

    def test_urgent(self):
        snap = compute_snapshot(SaleWindow(end_time=NOW + 30 * 60_000), NOW)
        assert snap.state is CountdownState.URGENT
        assert snap.minutes == 30

    @pytest.mark.parametrize("offset", [0, 1, 86_400_000])
    def test_expired_at_and_after_end(self, offset):
        """now >= end is EXPIRED with all fields zero."""
        window = SaleWindow(start_time=NOW - 10_000, end_time=NOW)
        snap = compute_snapshot(window, NOW + offset)

        assert snap == TimeRemaining(0, 0, 0, 0, 0, 0, CountdownState.EXPIRED)

    def test_custom_thresholds_mapping(self):
        """Thresholds can be passed as a mapping."""
        window = SaleWindow(end_time=NOW + 90_000)
        snap = compute_snapshot(window, NOW, {"urgent_ms": 120_000, "critical_ms": 60_000})
        assert snap.state is CountdownState.URGENT

    def test_custom_thresholds_policy(self):
        window = SaleWindow(end_time=NOW + 90_000)
        policy = ThresholdPolicy(urgent_ms=60_000, critical_ms=30_000)
        assert compute_snapshot(window, NOW, policy).state is CountdownState.RUNNING

    def test_invalid_thresholds_raise(self):
        with pytest.raises(ConfigError):
            compute_snapshot(SaleWindow(end_time=NOW + 1), NOW, {"urgent_ms": 1, "critical_ms": 2})

    def test_float_now_is_floored(self):
        """A float instant is floored so every field stays an integer."""
        window = SaleWindow(end_time=NOW + 123_456_789)
        snap = compute_snapshot(window, NOW + 0.1)

        assert snap == compute_snapshot(window, NOW)
        assert snap.total_ms == 123_456_789
        assert all(
            type(value) is int
            for value in (snap.days, snap.hours, snap.minutes, snap.seconds,
                          snap.milliseconds, snap.total_ms)
        )
        assert recompose(snap) == snap.total_ms

    def test_iso_now(self):
        snap = compute_snapshot(SaleWindow(end_time=NOW + 5000), "2025-12-01T20:00:00Z")
        assert snap.total_ms == 5000

    def test_unparsable_now_raises(self):
        with pytest.raises(InvalidInputError):
            compute_snapshot(SaleWindow(end_time=NOW + 5000), "soon")

    def test_decomposition_is_exact(self):
        """Decomposed fields always add back up to total_ms."""
        window = SaleWindow(start_time=NOW, end_time=NOW + 3 * 86_400_000 + 12_345_678)
        for now in range(NOW - 5_000_000, window.end_time, 7_654_321):
            snap = compute_snapshot(window, now)
            assert recompose(snap) == snap.total_ms

    def test_severity_never_regresses(self):
        """State is non-decreasing as now increases."""
        window = SaleWindow(start_time=NOW + 60_000, end_time=NOW + 2 * 3_600_000)
        previous = CountdownState.NOT_STARTED
        for now in range(NOW, window.end_time + 120_000, 17_000):
            state = compute_snapshot(window, now).state
            assert state >= previous
            previous = state
        assert previous is CountdownState.EXPIRED


# =============================================================================
# Formatting Tests
# =============================================================================

def snap_of(days=0, hours=0, minutes=0, seconds=0, state=CountdownState.RUNNING):
    total = days * 86_400_000 + hours * 3_600_000 + minutes * 60_000 + seconds * 1000
    return TimeRemaining.from_total(total, state)


EXPIRED = TimeRemaining.from_total(0, CountdownState.EXPIRED)


class TestFormatting:
    """Tests for display helpers."""

    def test_format_clock_padded(self):
        assert format_clock(snap_of(hours=1, minutes=2, seconds=3)) == "01:02:03"

    def test_format_clock_with_days(self):
        assert format_clock(snap_of(days=2, hours=4, minutes=5, seconds=6)) == "2d 04:05:06"

    def test_format_clock_folds_days(self):
        """show_days=False folds days into hours."""
        assert format_clock(snap_of(days=2, hours=4, minutes=5, seconds=6), show_days=False) == "52:05:06"

    def test_format_clock_expired(self):
        assert format_clock(EXPIRED) == "00:00:00"

    def test_format_remaining_short(self):
        assert format_remaining(snap_of(days=6, hours=4, minutes=30), short=True) == "6d 4h 30m"

    def test_format_remaining_short_seconds_only(self):
        assert format_remaining(snap_of(seconds=12), short=True) == "12s"

    def test_format_remaining_long(self):
        text = format_remaining(snap_of(days=1, hours=2, minutes=1))
        assert text == "1 day, 2 hours, 1 minute"

    def test_format_remaining_long_seconds(self):
        assert format_remaining(snap_of(seconds=1)) == "1 second"

    def test_format_remaining_sub_second(self):
        snap = TimeRemaining.from_total(500, CountdownState.CRITICAL)
        assert format_remaining(snap) == "less than a second"

    def test_format_remaining_expired(self):
        assert format_remaining(EXPIRED) == "sale ended"
        assert format_remaining(EXPIRED, short=True) == "now"

    @pytest.mark.parametrize("snap,expected", [
        (snap_of(days=3, hours=5), "3d left"),
        (snap_of(days=1, minutes=30), "24h 30m"),
        (snap_of(hours=5, minutes=12), "5h 12m"),
        (snap_of(minutes=12, seconds=40), "12m"),
        (EXPIRED, "Expired"),
    ])
    def test_badge_text(self, snap, expected):
        assert badge_text(snap) == expected

    def test_badge_text_not_started(self):
        snap = snap_of(hours=2, minutes=5, state=CountdownState.NOT_STARTED)
        assert badge_text(snap) == "Starts in 2h 5m"

    @pytest.mark.parametrize("state,label", [
        (CountdownState.NOT_STARTED, "Starts In"),
        (CountdownState.RUNNING, "Sale Ends In"),
        (CountdownState.URGENT, "Hurry Up!"),
        (CountdownState.CRITICAL, "Sale Ending Soon!"),
        (CountdownState.EXPIRED, "Sale Ended"),
    ])
    def test_status_label(self, state, label):
        assert status_label(snap_of(minutes=1, state=state)) == label
