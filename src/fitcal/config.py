"""Configuration management for fitcal."""

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, time
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .core.availability import OperatingWindow
from .core.models import ALLOWED_DURATIONS

logger = logging.getLogger(__name__)

FITCAL_HOME = Path(os.environ.get("FITCAL_HOME", Path.home() / "fitcal"))
CONFIG_FILE = FITCAL_HOME / "config" / "fitcal.conf"
DATA_DIR = FITCAL_HOME / "data"


@dataclass
class Config:
    """fitcal configuration."""

    data_dir: str = ""
    timezone: str = ""  # empty = system local zone
    # Operating window for slot enumeration and the closing boundary
    open_time: str = "10:00"
    close_time: str = "20:00"
    slot_minutes: int = 30
    durations: list[int] = field(default_factory=lambda: list(ALLOWED_DURATIONS))
    default_lead_minutes: int = 60
    # Ticking driver
    tick_seconds: int = 60
    reminder_tolerance_seconds: int = 60
    require_delivery_confirmation: bool = False
    # Telegram bot settings
    telegram_bot_token: str = ""
    telegram_allowed_users: list[int] = field(default_factory=list)
    telegram_send_timeout: int = 10

    @property
    def data_path(self) -> Path:
        if self.data_dir:
            return Path(self.data_dir).expanduser()
        return DATA_DIR


def local_now(config: Config) -> datetime:
    """Wall-clock time in the configured timezone, as a naive datetime.

    Session times are stored naive, in the trainer's local time.
    """
    if not config.timezone:
        return datetime.now()
    return datetime.now(ZoneInfo(config.timezone)).replace(tzinfo=None)


def parse_clock(value: str) -> time:
    """Parse "HH:MM" into a time."""
    hour, minute = map(int, value.split(":"))
    return time(hour, minute)


def operating_window(config: Config) -> OperatingWindow:
    """Build the booking window from config. Falls back to default hours if they are malformed."""
    durations = tuple(sorted(config.durations)) or ALLOWED_DURATIONS
    try:
        return OperatingWindow(
            open_time=parse_clock(config.open_time),
            close_time=parse_clock(config.close_time),
            slot_minutes=config.slot_minutes,
            durations=durations,
        )
    except ValueError as e:
        logger.warning(f"Invalid operating window ({e}), using defaults")
        return OperatingWindow(durations=durations)


def _parse_int(key: str, value: str, default: int) -> int:
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Invalid integer for {key.upper()}: {value!r}, using {default}")
        return default


def _parse_bool(value: str) -> bool:
    return value.lower() in ("1", "true", "yes", "on")


def load_config(path: Path | None = None) -> Config:
    """Load configuration from fitcal.conf file."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = value.strip()

        # Handle quoted values with inline comments: "value" # comment
        if value[:1] in ('"', "'"):
            quote = value[0]
            end_quote = value.find(quote, 1)
            value = value[1:end_quote] if end_quote != -1 else value[1:]
        elif "#" in value:
            # Unquoted: strip inline comments
            value = value.split("#")[0].strip()

        match key:
            case "data_dir":
                config.data_dir = value
            case "timezone":
                try:
                    if value:
                        ZoneInfo(value)
                    config.timezone = value
                except (ZoneInfoNotFoundError, ValueError):
                    logger.warning(f"Unknown TIMEZONE: {value!r}, using the system local zone")
            case "open_time":
                config.open_time = value
            case "close_time":
                config.close_time = value
            case "slot_minutes":
                config.slot_minutes = _parse_int(key, value, config.slot_minutes)
            case "durations":
                try:
                    config.durations = [int(d.strip()) for d in value.split(",") if d.strip()]
                except ValueError:
                    logger.warning(f"Invalid DURATIONS: {value!r}, using {config.durations}")
            case "default_lead_minutes":
                config.default_lead_minutes = _parse_int(key, value, config.default_lead_minutes)
            case "tick_seconds":
                config.tick_seconds = _parse_int(key, value, config.tick_seconds)
            case "reminder_tolerance_seconds":
                config.reminder_tolerance_seconds = _parse_int(key, value, config.reminder_tolerance_seconds)
            case "require_delivery_confirmation":
                config.require_delivery_confirmation = _parse_bool(value)
            case "telegram_bot_token":
                config.telegram_bot_token = value
            case "telegram_allowed_users":
                config.telegram_allowed_users = [int(u.strip()) for u in value.split(",") if u.strip()]
            case "telegram_send_timeout":
                config.telegram_send_timeout = _parse_int(key, value, config.telegram_send_timeout)
            case _:
                logger.debug(f"Ignoring unknown config key: {key}")

    return config
