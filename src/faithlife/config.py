"""Configuration management for FaithLife."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

logger = logging.getLogger(__name__)

FAITHLIFE_HOME = Path(os.environ.get("FAITHLIFE_HOME", Path.home() / "faithlife"))
CONFIG_FILE = FAITHLIFE_HOME / "config" / "faithlife.conf"
DATA_DIR = FAITHLIFE_HOME / "data"

DEFAULT_API_URL = "https://faithlife-server.onrender.com"


@dataclass
class Config:
    """FaithLife client configuration."""

    api_url: str = DEFAULT_API_URL
    timezone: str = "UTC"
    # Query cache: data younger than stale_time is served without a fetch
    stale_time: int = 300
    refetch_interval: int = 5
    events_per_page: int = 6
    sermons_per_page: int = 6
    visitor_file: str = ""

    @property
    def visitor_path(self) -> Path:
        if self.visitor_file:
            return Path(self.visitor_file).expanduser()
        return DATA_DIR / "visitor.json"


def _unquote(value: str) -> str:
    """Strip quotes, or an inline comment from an unquoted value."""
    for quote in ('"', "'"):
        if value.startswith(quote):
            end_quote = value.find(quote, 1)
            return value[1:end_quote] if end_quote != -1 else value[1:]
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def _positive_int(key: str, value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise ValueError(f"{key.upper()} must be a whole number, got {value!r}")
    if number < 1:
        raise ValueError(f"{key.upper()} must be positive, got {number}")
    return number


def _timezone(value: str) -> str:
    try:
        ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"TIMEZONE must be an IANA zone name, got {value!r}")
    return value


def load_config(path: Path | None = None) -> Config:
    """Load configuration from faithlife.conf, then apply env overrides."""
    config = Config()
    path = path or CONFIG_FILE

    if path.exists():
        for line in path.read_text().splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            if "=" not in line:
                continue

            key, _, value = line.partition("=")
            key = key.strip().lower()
            value = _unquote(value.strip())

            match key:
                case "api_url":
                    config.api_url = value.rstrip("/")
                case "timezone":
                    config.timezone = _timezone(value)
                case "stale_time":
                    config.stale_time = _positive_int(key, value)
                case "refetch_interval":
                    config.refetch_interval = _positive_int(key, value)
                case "events_per_page":
                    config.events_per_page = _positive_int(key, value)
                case "sermons_per_page":
                    config.sermons_per_page = _positive_int(key, value)
                case "visitor_file":
                    config.visitor_file = value
                case _:
                    logger.warning(f"Unknown config key: {key}")

    env_url = os.environ.get("FAITHLIFE_API_URL")
    if env_url:
        config.api_url = env_url.rstrip("/")

    return config
