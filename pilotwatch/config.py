"""
Configuration management for PilotWatch.

Loads settings from environment variables with sensible defaults.
All configuration is centralized here to avoid magic strings scattered
throughout the codebase. The pipeline itself never reads the environment;
entry points build a config and hand the values down.
"""

import math
import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

from pilotwatch.errors import ConfigError

load_dotenv()


DEFAULT_STATUS_URL = 'https://status.vatsim.net/status.json'
DEFAULT_RATINGS_URL = 'https://api.vatsim.net/api/ratings/{cid}/rating_times'
DEFAULT_USER_AGENT = 'github.com/pilotwatch/pilotwatch'


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value.strip() == '':
        return default
    try:
        return float(value)
    except ValueError:
        raise ConfigError(f'{name} must be a number, got "{value}"') from None


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value.strip() == '':
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f'{name} must be an integer, got "{value}"') from None


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == '':
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass(frozen=True)
class VatsimConfig:
    """VATSIM API configuration."""
    status_url: str = field(
        default_factory=lambda: os.getenv('PILOTWATCH_STATUS_URL', DEFAULT_STATUS_URL))
    ratings_url: str = field(
        default_factory=lambda: os.getenv('PILOTWATCH_RATINGS_URL', DEFAULT_RATINGS_URL))
    # Fixed data endpoint; skips the status manifest when set
    data_url: Optional[str] = field(
        default_factory=lambda: os.getenv('PILOTWATCH_DATA_URL') or None)
    user_agent: str = field(
        default_factory=lambda: os.getenv('PILOTWATCH_USER_AGENT', DEFAULT_USER_AGENT))
    timeout_seconds: float = field(
        default_factory=lambda: _env_float('PILOTWATCH_TIMEOUT_SECONDS', 30.0))

    def __post_init__(self):
        if '{cid}' not in self.ratings_url:
            raise ConfigError('PILOTWATCH_RATINGS_URL must contain a {cid} placeholder')
        if not math.isfinite(self.timeout_seconds) or self.timeout_seconds <= 0:
            raise ConfigError('PILOTWATCH_TIMEOUT_SECONDS must be positive')


@dataclass(frozen=True)
class PipelineConfig:
    """Report pipeline settings."""
    max_distance: float = field(
        default_factory=lambda: _env_float('PILOTWATCH_MAX_DISTANCE', 30.0))
    # Pilots below this many hours are flagged in reports
    alert_hours: float = field(
        default_factory=lambda: _env_float('PILOTWATCH_ALERT_HOURS', 30.0))
    # 0 means one worker per cache miss
    max_workers: int = field(
        default_factory=lambda: _env_int('PILOTWATCH_MAX_WORKERS', 0))
    fail_fast: bool = field(
        default_factory=lambda: _env_bool('PILOTWATCH_FAIL_FAST', True))

    def __post_init__(self):
        if not math.isfinite(self.max_distance) or self.max_distance < 0:
            raise ConfigError('PILOTWATCH_MAX_DISTANCE must be a non-negative number')
        if not math.isfinite(self.alert_hours):
            raise ConfigError('PILOTWATCH_ALERT_HOURS must be a finite number')
        if self.max_workers < 0:
            raise ConfigError('PILOTWATCH_MAX_WORKERS must not be negative')


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration."""
    vatsim: VatsimConfig
    pipeline: PipelineConfig

    # Flask settings
    secret_key: str
    debug: bool
    port: int


def load_config() -> AppConfig:
    """Load and validate all configuration."""
    return AppConfig(
        vatsim=VatsimConfig(),
        pipeline=PipelineConfig(),
        secret_key=os.getenv('SECRET_KEY', 'dev-key-change-in-prod'),
        debug=_env_bool('PILOTWATCH_DEBUG', False),
        port=_env_int('PORT', 5000),
    )


# Singleton instance
config = load_config()
