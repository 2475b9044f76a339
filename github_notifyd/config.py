"""Configuration management."""

import logging
import os
import tempfile
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from .errors import ConfigError

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
USER_AGENT = "github-notifyd/1.0"
MIN_POLL_INTERVAL = 45
DEFAULT_REQUEST_TIMEOUT = 30


@dataclass
class GitHubConfig:
    """GitHub API configuration."""
    token: str
    api_url: str = DEFAULT_API_URL
    user_agent: str = USER_AGENT
    timeout: float = DEFAULT_REQUEST_TIMEOUT

    @property
    def notifications_url(self) -> str:
        return f"{self.api_url.rstrip('/')}/notifications"


@dataclass
class AvatarConfig:
    """User avatar configuration."""
    enabled: bool
    cache_dir: str


@dataclass
class PollerConfig:
    """Polling and presentation configuration."""
    interval_seconds: int = MIN_POLL_INTERVAL
    persistent: bool = False


@dataclass
class AppConfig:
    """Complete application configuration."""
    github: GitHubConfig
    avatars: AvatarConfig
    poller: PollerConfig


def clamp_interval(seconds: int) -> int:
    """Raise a polling interval below the minimum up to the minimum."""
    if seconds < MIN_POLL_INTERVAL:
        logger.warning(
            f"Polling interval {seconds}s is below the minimum; using {MIN_POLL_INTERVAL}s"
        )
        return MIN_POLL_INTERVAL
    return seconds


def clamp_timeout(seconds: int) -> int:
    """Keep a request timeout between 1 second and the 30 second ceiling."""
    if 0 < seconds <= DEFAULT_REQUEST_TIMEOUT:
        return seconds
    logger.warning(
        f"Request timeout {seconds}s is outside 1-{DEFAULT_REQUEST_TIMEOUT}s; using {DEFAULT_REQUEST_TIMEOUT}s"
    )
    return DEFAULT_REQUEST_TIMEOUT


def _parse_bool_env(key: str, default: bool) -> bool:
    """Parse a true/false flag from an environment variable."""
    value = os.getenv(key)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _parse_int_env(key: str, default: int) -> int:
    value = os.getenv(key)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got {value!r}")


def load_config(
    no_avatar: bool = False,
    persistent: bool = False,
    interval: Optional[int] = None,
) -> AppConfig:
    """
    Load configuration from environment variables.

    Command-line values take precedence: ``no_avatar`` and ``persistent``
    can only switch their feature on top of the environment, and
    ``interval`` replaces POLL_INTERVAL_SECONDS when given.

    Raises:
        ConfigError: If required configuration values are missing or invalid.
    """
    token = os.getenv("GITHUB_TOKEN", "").strip()
    if not token:
        raise ConfigError("Missing required environment variable: GITHUB_TOKEN")

    api_url = os.getenv("GITHUB_API_URL", DEFAULT_API_URL)
    timeout = clamp_timeout(_parse_int_env("REQUEST_TIMEOUT_SECONDS", DEFAULT_REQUEST_TIMEOUT))

    show_avatars = _parse_bool_env("SHOW_AVATARS", True) and not no_avatar
    cache_dir = os.getenv("AVATAR_CACHE_DIR") or tempfile.gettempdir()

    if interval is None:
        interval = _parse_int_env("POLL_INTERVAL_SECONDS", MIN_POLL_INTERVAL)
    persistent = persistent or _parse_bool_env("PERSISTENT_NOTIFICATIONS", False)

    return AppConfig(
        github=GitHubConfig(
            token=token,
            api_url=api_url,
            timeout=timeout,
        ),
        avatars=AvatarConfig(
            enabled=show_avatars,
            cache_dir=cache_dir,
        ),
        poller=PollerConfig(
            interval_seconds=clamp_interval(interval),
            persistent=persistent,
        ),
    )
