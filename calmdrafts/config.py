"""
Configuration file handling for CalmDrafts

The config is a JSON object:

    {
      "check_interval": "1h",
      "cleanup_age": "168h",
      "credentials_path": "credentials.json",
      "token_path": "token.json"
    }

Durations use Go-style strings ("1h30m", "45s", "500ms", plus "d" for days).
Bare integers are read as nanoseconds so files written by older releases keep
loading.
"""

import json
import logging
import re
from datetime import timedelta
from pathlib import Path
from typing import Union

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from calmdrafts.errors import ConfigError


logger = logging.getLogger(__name__)

DEFAULT_CHECK_INTERVAL = timedelta(hours=1)
DEFAULT_CLEANUP_AGE = timedelta(days=7)

_DURATION_PART = re.compile(r'(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h|d)')
_UNIT_SECONDS = {
    'ns': 1e-9,
    'us': 1e-6,
    'µs': 1e-6,
    'μs': 1e-6,
    'ms': 1e-3,
    's': 1,
    'm': 60,
    'h': 3600,
    'd': 86400,
}


def parse_duration(value: Union[str, int, float, timedelta]) -> timedelta:
    """Parse a duration string like '1h30m' into a timedelta"""
    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool):
        raise ValueError(f"invalid duration: {value!r}")
    if isinstance(value, (int, float)):
        try:
            return timedelta(microseconds=value / 1000)
        except OverflowError as error:
            raise ValueError(f"duration out of range: {value!r}") from error
    if not isinstance(value, str):
        raise ValueError(f"invalid duration: {value!r}")

    text = value.strip()
    sign = 1
    if text[:1] in ('+', '-'):
        sign = -1 if text[0] == '-' else 1
        text = text[1:]

    if text == '0':
        return timedelta(0)

    position = 0
    total_seconds = 0.0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            break
        total_seconds += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        position = match.end()

    if position == 0 or position != len(text):
        raise ValueError(f"invalid duration: {value!r}")

    try:
        return sign * timedelta(seconds=total_seconds)
    except OverflowError as error:
        raise ValueError(f"duration out of range: {value!r}") from error


def format_duration(value: timedelta) -> str:
    """Format a timedelta the way Go prints durations, e.g. '168h0m0s'"""
    micros = value // timedelta(microseconds=1)
    sign = '-' if micros < 0 else ''
    hours, rest = divmod(abs(micros), 3600 * 10**6)
    minutes, rest = divmod(rest, 60 * 10**6)
    whole, fraction = divmod(rest, 10**6)

    # Plain decimal so parse_duration can read it back
    seconds = f"{whole}.{fraction:06d}".rstrip('0') if fraction else str(whole)

    if hours:
        return f"{sign}{hours}h{minutes}m{seconds}s"
    if minutes:
        return f"{sign}{minutes}m{seconds}s"
    return f"{sign}{seconds}s"


class AppConfig(BaseModel):
    """Application configuration, immutable once loaded"""
    model_config = ConfigDict(frozen=True, extra='ignore')

    check_interval: timedelta = DEFAULT_CHECK_INTERVAL
    cleanup_age: timedelta = DEFAULT_CLEANUP_AGE
    credentials_path: str = 'credentials.json'
    token_path: str = 'token.json'

    @field_validator('check_interval', 'cleanup_age', mode='before')
    @classmethod
    def _parse_duration(cls, value):
        return parse_duration(value)

    @field_validator('check_interval', 'cleanup_age')
    @classmethod
    def _non_negative(cls, value: timedelta) -> timedelta:
        if value < timedelta(0):
            raise ValueError("duration must not be negative")
        return value


def load_config(path: Union[str, Path]) -> AppConfig:
    """Load configuration from a JSON file, falling back to defaults if it is missing"""
    config_path = Path(path)

    if not config_path.exists():
        logger.info(f"No config file at {config_path}, using defaults")
        return AppConfig()

    try:
        data = json.loads(config_path.read_text())
    except (OSError, json.JSONDecodeError) as error:
        raise ConfigError(f"Unable to read config {config_path}: {error}") from error

    if not isinstance(data, dict):
        raise ConfigError(f"Config {config_path} must contain a JSON object")

    try:
        config = AppConfig.model_validate(data)
    except ValidationError as error:
        raise ConfigError(f"Invalid config {config_path}: {error}") from error

    logger.debug(f"Loaded config from {config_path}: {config}")
    return config


def save_config(path: Union[str, Path], config: AppConfig) -> None:
    """Write configuration as indented JSON"""
    config_path = Path(path)
    data = {
        'check_interval': format_duration(config.check_interval),
        'cleanup_age': format_duration(config.cleanup_age),
        'credentials_path': config.credentials_path,
        'token_path': config.token_path,
    }

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(json.dumps(data, indent=2) + '\n')
    logger.info(f"Saved config to {config_path}")
