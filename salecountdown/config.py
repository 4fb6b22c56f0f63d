"""
salecountdown/config.py

Settings file loading and logger setup.

Settings files are JSON, or YAML when the name ends in .yaml/.yml:

    thresholds:
      urgent_ms: 3600000
      critical_ms: 600000
    interval_ms: 1000
    log_level: INFO
    log_file: countdown.log
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml

from .errors import ConfigError
from .scheduler import DEFAULT_INTERVAL_MS, validate_interval
from .thresholds import ThresholdPolicy


DEFAULT_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

KNOWN_KEYS = {"thresholds", "interval_ms", "log_level", "log_file"}


@dataclass(frozen=True)
class CountdownSettings:
    """
    Scheduler defaults and logging options.

    Attributes:
        thresholds: Urgent/critical boundaries.
        interval_ms: Default re-evaluation period.
        log_level: Numeric logging level.
        log_file: Log file path, or None for stderr.
    """
    thresholds: ThresholdPolicy = field(default_factory=ThresholdPolicy)
    interval_ms: float = DEFAULT_INTERVAL_MS
    log_level: int = logging.INFO
    log_file: Optional[str] = None


def configure_logger(logger,
                     log_file=None,
                     log_format=None,
                     log_level=logging.INFO):
    """Configure a logger with a file or stream handler

    Args:
        logger: Logger instance or logger name string
        log_file: File path string or file-like object (None for stderr)
        log_format: Format string for log messages
        log_level: Logging level (e.g., logging.INFO, logging.DEBUG)

    Returns:
        Configured logger instance
    """
    if isinstance(log_file, str):
        handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
    else:
        handler = logging.StreamHandler(log_file)

    handler.setFormatter(logging.Formatter(log_format or DEFAULT_LOG_FORMAT))

    if isinstance(logger, str):
        logger = logging.getLogger(logger)

    logger.addHandler(handler)
    logger.setLevel(log_level)

    return logger


def _parse_level(value: Any) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        level = logging.getLevelName(value.strip().upper())
        if isinstance(level, int):
            return level
    raise ConfigError(f"Unknown log level: {value!r}")


def settings_from_dict(conf: Optional[Mapping[str, Any]]) -> CountdownSettings:
    """
    Build settings from an in-memory mapping.

    Raises:
        ConfigError: On unknown keys or invalid values.
    """
    if conf is None:
        return CountdownSettings()
    if not isinstance(conf, Mapping):
        raise ConfigError(f"Settings must be a mapping, got {type(conf).__name__}")

    unknown = set(conf) - KNOWN_KEYS
    if unknown:
        raise ConfigError(f"Unknown settings keys: {sorted(unknown)}")

    log_file = conf.get('log_file')
    if log_file is not None and not isinstance(log_file, str):
        raise ConfigError(f"log_file must be a path string, got {log_file!r}")

    return CountdownSettings(
        thresholds=ThresholdPolicy.from_config(conf.get('thresholds')),
        interval_ms=validate_interval(conf.get('interval_ms', DEFAULT_INTERVAL_MS)),
        log_level=_parse_level(conf.get('log_level', 'INFO')),
        log_file=log_file,
    )


def load_settings(path: Union[str, Path]) -> CountdownSettings:
    """Load settings from a JSON or YAML file

    Args:
        path: Settings file path; .yaml/.yml files are read as YAML

    Returns:
        Parsed CountdownSettings

    Raises:
        ConfigError: If the file is unreadable, malformed or holds bad values
    """
    path = Path(path)

    try:
        with open(path, 'r', encoding='utf-8') as fp:
            if path.suffix in ('.yaml', '.yml'):
                conf = yaml.safe_load(fp)
            else:
                conf = json.load(fp)
    except OSError as e:
        raise ConfigError(f"Cannot read settings file {path}: {e}") from e
    except (ValueError, yaml.YAMLError) as e:
        raise ConfigError(f"Malformed settings file {path}: {e}") from e

    return settings_from_dict(conf)


def setup_logging(settings: CountdownSettings, log_format=None):
    """Attach a handler to the package logger according to settings."""
    return configure_logger('salecountdown',
                            log_file=settings.log_file,
                            log_format=log_format,
                            log_level=settings.log_level)
