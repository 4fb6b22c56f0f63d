"""
salecountdown/errors.py

Countdown-specific exceptions.
"""


class CountdownError(Exception):
    """Base exception for countdown errors."""
    pass


class ConfigError(CountdownError):
    """Sale window, thresholds or scheduler settings are invalid.

    Raised synchronously where the bad value is supplied. Inside a running
    subscription it is fatal and stops further ticks.
    """
    pass


class InvalidInputError(CountdownError, ValueError):
    """A supplied timestamp could not be parsed into an instant."""
    pass
