"""Environment-backed settings for the RSS feed reader."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping

logger = logging.getLogger(__name__)

ENV_REQUEST_TIMEOUT = "RSS_REQUEST_TIMEOUT"
ENV_POLL_INTERVAL = "RSS_POLL_INTERVAL"
ENV_MAX_WORKERS = "RSS_MAX_WORKERS"
ENV_USER_AGENT = "RSS_USER_AGENT"
ENV_LOG_LEVEL = "LOG_LEVEL"

DEFAULT_REQUEST_TIMEOUT = 30.0
DEFAULT_POLL_INTERVAL = 900  # 15 minutes
DEFAULT_MAX_WORKERS = 4
DEFAULT_USER_AGENT = "rssfeed-reader"
DEFAULT_LOG_LEVEL = "INFO"

MAX_WORKERS_LIMIT = 32


@dataclass(frozen=True)
class Settings:
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    poll_interval: int = DEFAULT_POLL_INTERVAL
    max_workers: int = DEFAULT_MAX_WORKERS
    user_agent: str = DEFAULT_USER_AGENT
    log_level: str = DEFAULT_LOG_LEVEL


def _clamp(value: int, minimum: int, maximum: int) -> int:
    return max(minimum, min(maximum, value))


def _read_number(env: Mapping[str, str], name: str, default, cast):
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = cast(raw.strip())
    except ValueError:
        logger.warning("Ignoring invalid %s=%r, using %s", name, raw, default)
        return default
    if value <= 0:
        logger.warning("Ignoring non-positive %s=%r, using %s", name, raw, default)
        return default
    return value


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from environment variables.

    Args:
        env: Mapping to read from. Defaults to ``os.environ``.
    """
    if env is None:
        env = os.environ

    max_workers = _read_number(env, ENV_MAX_WORKERS, DEFAULT_MAX_WORKERS, int)

    return Settings(
        request_timeout=_read_number(
            env, ENV_REQUEST_TIMEOUT, DEFAULT_REQUEST_TIMEOUT, float
        ),
        poll_interval=_read_number(env, ENV_POLL_INTERVAL, DEFAULT_POLL_INTERVAL, int),
        max_workers=_clamp(max_workers, 1, MAX_WORKERS_LIMIT),
        user_agent=env.get(ENV_USER_AGENT) or DEFAULT_USER_AGENT,
        log_level=(env.get(ENV_LOG_LEVEL) or DEFAULT_LOG_LEVEL).upper(),
    )
