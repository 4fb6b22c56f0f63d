"""
salecountdown

Sale countdown engine for the storefront.

Provides:
- Time-remaining snapshots with urgent/critical classification
- Sale progress percentage
- Live asyncio subscriptions with exactly-once edge callbacks
  (start, urgent, critical, expire)
- Display formatting shared by every countdown variant
"""

from .config import (
    CountdownSettings,
    configure_logger,
    load_settings,
    settings_from_dict,
    setup_logging,
)
from .countdown import (
    badge_text,
    compute_snapshot,
    format_clock,
    format_remaining,
    status_label,
)
from .dispatcher import CallbackDispatcher, CallbackKind
from .errors import ConfigError, CountdownError, InvalidInputError
from .models import CountdownState, SaleWindow, TimeRemaining
from .progress import percentage
from .scheduler import CountdownCallbacks, CountdownScheduler, Subscription, subscribe
from .thresholds import ThresholdPolicy
from .time_source import ManualTimeSource, SystemTimeSource, TimeSource, parse_instant

__all__ = [
    "CallbackDispatcher",
    "CallbackKind",
    "ConfigError",
    "CountdownCallbacks",
    "CountdownError",
    "CountdownScheduler",
    "CountdownSettings",
    "CountdownState",
    "InvalidInputError",
    "ManualTimeSource",
    "SaleWindow",
    "Subscription",
    "SystemTimeSource",
    "ThresholdPolicy",
    "TimeRemaining",
    "TimeSource",
    "badge_text",
    "compute_snapshot",
    "configure_logger",
    "format_clock",
    "format_remaining",
    "load_settings",
    "parse_instant",
    "percentage",
    "settings_from_dict",
    "setup_logging",
    "status_label",
    "subscribe",
]
