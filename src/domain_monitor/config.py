"""
Configuration for the domain monitor.

Configuration is read once at process start from the environment (optionally
seeded from a .env file) into an explicit MonitorConfig that is passed to
every component.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional
from urllib.parse import urlparse

from dotenv import dotenv_values

from .enums import LogLevel
from .exceptions import ConfigurationError
from .scheduler import CronParseError, CronParser


IANA_BOOTSTRAP_URL = "https://data.iana.org/rdap/dns.json"
DEFAULT_SCHEDULE = "*/5 * * * *"
DEFAULT_MENTION = "@everyone"


@dataclass
class TimeoutConfig:
    """Per-request timeouts in seconds for the three outbound interactions."""

    registry_seconds: float = 15.0
    lookup_seconds: float = 10.0
    webhook_seconds: float = 30.0


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "info"
    output_format: str = "text"  # 'json', 'text', 'both'

    @property
    def log_level(self) -> LogLevel:
        return LogLevel(self.level)


@dataclass
class MonitorConfig:
    """Main configuration combining all sub-configurations."""

    domains: list[str] = field(default_factory=list)
    webhook_url: Optional[str] = None
    schedule: str = DEFAULT_SCHEDULE
    bootstrap_url: str = IANA_BOOTSTRAP_URL
    timeouts: TimeoutConfig = field(default_factory=TimeoutConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    share_registry: bool = False
    mention: str = DEFAULT_MENTION

    def warnings(self) -> list[str]:
        """Non-fatal configuration problems worth surfacing at startup."""
        problems = []
        if not self.domains:
            problems.append("No domains configured (set DOMAINS)")
        if not self.webhook_url:
            problems.append("No webhook configured (set DISCORD_WEBHOOK_URL); notifications will be dropped")
        return problems


def parse_domains(value: Optional[str]) -> list[str]:
    """
    Split a comma-separated domain list.

    Entries are trimmed, empty entries dropped and duplicates removed while
    keeping the first occurrence. Names are otherwise passed through as given.
    """
    if not value:
        return []
    seen, out = set(), []
    for part in value.split(","):
        name = part.strip()
        if name and name not in seen:
            out.append(name)
            seen.add(name)
    return out


def _float_env(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ConfigurationError(
            code="invalid_number",
            message=f"{name} must be a number, got {raw!r}",
            details={"variable": name, "value": raw},
        ) from e
    if value <= 0:
        raise ConfigurationError(
            code="invalid_timeout",
            message=f"{name} must be positive, got {value}",
            details={"variable": name, "value": raw},
        )
    return value


def _bool_env(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _validate_url(name: str, url: str) -> str:
    parsed = urlparse(url)
    if parsed.scheme.lower() not in ("http", "https") or not parsed.netloc:
        raise ConfigurationError(
            code="invalid_url",
            message=f"{name} must be an http(s) URL",
            details={"variable": name},
        )
    return url


def load_config(
    environ: Optional[Mapping[str, str]] = None,
    env_file: Optional[Path] = None,
) -> MonitorConfig:
    """
    Build a MonitorConfig from environment variables.

    Values from env_file (a .env file) are used only where the environment
    does not already define the variable.

    Args:
        environ: Environment mapping (defaults to os.environ)
        env_file: Optional path to a .env file

    Returns:
        The loaded MonitorConfig

    Raises:
        ConfigurationError: If a value is present but invalid
    """
    env: dict[str, str] = {}
    if env_file is not None:
        if not Path(env_file).is_file():
            raise ConfigurationError(
                code="env_file_missing",
                message=f"Environment file not found: {env_file}",
                details={"path": str(env_file)},
            )
        env.update({k: v for k, v in dotenv_values(env_file).items() if v is not None})
    env.update(os.environ if environ is None else environ)

    webhook_url = (env.get("DISCORD_WEBHOOK_URL") or env.get("WEBHOOK_URL") or "").strip() or None
    if webhook_url:
        _validate_url("DISCORD_WEBHOOK_URL", webhook_url)

    bootstrap_url = (env.get("RDAP_BOOTSTRAP_URL") or "").strip() or IANA_BOOTSTRAP_URL
    _validate_url("RDAP_BOOTSTRAP_URL", bootstrap_url)

    level = (env.get("LOG_LEVEL") or "info").strip().lower()
    if level not in [lvl.value for lvl in LogLevel]:
        raise ConfigurationError(
            code="invalid_log_level",
            message=f"LOG_LEVEL must be one of debug, info, warn, error; got {level!r}",
            details={"variable": "LOG_LEVEL", "value": level},
        )

    output_format = (env.get("LOG_FORMAT") or "text").strip().lower()
    if output_format not in ("json", "text", "both"):
        raise ConfigurationError(
            code="invalid_log_format",
            message=f"LOG_FORMAT must be json, text or both; got {output_format!r}",
            details={"variable": "LOG_FORMAT", "value": output_format},
        )

    schedule = (env.get("MONITOR_SCHEDULE") or "").strip() or DEFAULT_SCHEDULE
    try:
        CronParser().parse(schedule)
    except CronParseError as e:
        raise ConfigurationError(
            code="invalid_schedule",
            message=str(e),
            details={"variable": "MONITOR_SCHEDULE", "value": schedule},
        ) from e

    return MonitorConfig(
        domains=parse_domains(env.get("DOMAINS")),
        webhook_url=webhook_url,
        schedule=schedule,
        bootstrap_url=bootstrap_url,
        timeouts=TimeoutConfig(
            registry_seconds=_float_env(env, "REGISTRY_TIMEOUT", 15.0),
            lookup_seconds=_float_env(env, "LOOKUP_TIMEOUT", 10.0),
            webhook_seconds=_float_env(env, "WEBHOOK_TIMEOUT", 30.0),
        ),
        logging=LoggingConfig(level=level, output_format=output_format),
        share_registry=_bool_env(env, "SHARE_REGISTRY", False),
        mention=env.get("NOTIFY_MENTION", DEFAULT_MENTION).strip(),
    )
