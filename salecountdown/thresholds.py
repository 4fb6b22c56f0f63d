"""
salecountdown/thresholds.py

Urgent/critical boundary configuration.

ThresholdPolicy is the single place that decides whether a running sale
is RUNNING, URGENT or CRITICAL. Boundaries are strict: a sale with exactly
urgent_ms left is still RUNNING.
"""

from dataclasses import dataclass
from numbers import Real
from typing import Any, Mapping, Optional

from .errors import ConfigError
from .models import MS_PER_MINUTE, CountdownState


# Default boundaries
DEFAULT_URGENT_MS = 3_600_000   # 1 hour
DEFAULT_CRITICAL_MS = 600_000   # 10 minutes

# Config keys, snake_case and the catalog's camelCase
URGENT_KEYS = ("urgent_ms", "urgentMs")
CRITICAL_KEYS = ("critical_ms", "criticalMs")


def _validate_ms(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ConfigError(f"{name} must be a number of milliseconds, got {value!r}")
    if value != value:
        raise ConfigError(f"{name} must not be NaN")
    if value < 0:
        raise ConfigError(f"{name} must be >= 0, got {value}")


@dataclass(frozen=True)
class ThresholdPolicy:
    """
    Validated urgent/critical boundaries.

    Attributes:
        urgent_ms: Remaining time below which a sale is URGENT.
        critical_ms: Remaining time below which a sale is CRITICAL.
                     Must not exceed urgent_ms.

    Raises:
        ConfigError: On negative, non-numeric or inverted values.
    """
    urgent_ms: float = DEFAULT_URGENT_MS
    critical_ms: float = DEFAULT_CRITICAL_MS

    def __post_init__(self):
        _validate_ms("urgent_ms", self.urgent_ms)
        _validate_ms("critical_ms", self.critical_ms)
        if self.critical_ms > self.urgent_ms:
            raise ConfigError(
                f"critical_ms ({self.critical_ms}) must not exceed "
                f"urgent_ms ({self.urgent_ms})"
            )

    @classmethod
    def default(cls) -> "ThresholdPolicy":
        """Get the 1 hour / 10 minute policy."""
        return cls()

    @classmethod
    def from_config(cls, config: Optional[Mapping[str, Any]]) -> "ThresholdPolicy":
        """
        Build a policy from a mapping, filling omitted fields with defaults.

        Args:
            config: Mapping with optional urgent_ms/critical_ms keys
                    (urgentMs/criticalMs also accepted), or None.

        Raises:
            ConfigError: On unknown keys or invalid values.
        """
        if config is None:
            return cls.default()
        if isinstance(config, ThresholdPolicy):
            return config
        if not isinstance(config, Mapping):
            raise ConfigError(f"Threshold config must be a mapping, got {type(config).__name__}")

        unknown = set(config) - set(URGENT_KEYS) - set(CRITICAL_KEYS)
        if unknown:
            raise ConfigError(f"Unknown threshold keys: {sorted(unknown)}")

        urgent = next((config[k] for k in URGENT_KEYS if k in config), DEFAULT_URGENT_MS)
        critical = next((config[k] for k in CRITICAL_KEYS if k in config), DEFAULT_CRITICAL_MS)
        return cls(urgent_ms=urgent, critical_ms=critical)

    @classmethod
    def parse(cls, config_str: str) -> "ThresholdPolicy":
        """
        Parse from an "urgent,critical" string in minutes.

        Args:
            config_str: String like "60,10".

        Raises:
            ConfigError: If format is invalid.
        """
        if not config_str or not config_str.strip():
            raise ConfigError("Threshold config cannot be empty")

        parts = [p.strip() for p in config_str.split(",")]
        if len(parts) != 2:
            raise ConfigError("Invalid threshold format. Use: urgent,critical (e.g. 60,10)")

        try:
            urgent, critical = (int(p) for p in parts)
        except ValueError as e:
            raise ConfigError("Invalid threshold format. Use: urgent,critical (e.g. 60,10)") from e

        return cls(urgent_ms=urgent * MS_PER_MINUTE, critical_ms=critical * MS_PER_MINUTE)

    def to_string(self) -> str:
        """Serialize as "urgent,critical" minutes."""
        return f"{int(self.urgent_ms // MS_PER_MINUTE)},{int(self.critical_ms // MS_PER_MINUTE)}"

    def classify(self, remaining_ms: int) -> CountdownState:
        """
        Classify time left in a started, unexpired sale.

        Args:
            remaining_ms: Milliseconds until the end, > 0.

        Returns:
            RUNNING, URGENT or CRITICAL.
        """
        if remaining_ms < self.critical_ms:
            return CountdownState.CRITICAL
        if remaining_ms < self.urgent_ms:
            return CountdownState.URGENT
        return CountdownState.RUNNING
