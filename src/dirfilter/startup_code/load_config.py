from configparser import (
    ConfigParser,
    MissingSectionHeaderError,
    ParsingError,
)
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from dirfilter.file_functions.fs_mock import FS

DEFAULT_WATCH_POLL_INTERVAL_SECONDS = 0.5
DEFAULT_OBSERVER_JOIN_TIMEOUT_SECONDS = 5.0
MIN_WATCH_POLL_INTERVAL_SECONDS = 0.05


class ConfigError(Exception):
    """Raised when the configuration is invalid or missing."""

    pass


@dataclass(frozen=True)
class Config:
    """Holds the tool configuration. Every INI section and option is optional."""

    # From [Filter]
    default_extension_no_dot: Optional[str] = None

    # From [Logging]
    log_dir: Optional[Path] = None

    # From [Watch]
    watch_poll_interval_seconds: float = DEFAULT_WATCH_POLL_INTERVAL_SECONDS
    observer_join_timeout_seconds: float = DEFAULT_OBSERVER_JOIN_TIMEOUT_SECONDS

    def __post_init__(self):
        if (
            self.default_extension_no_dot is not None
            and "." in self.default_extension_no_dot
        ):
            raise ConfigError(
                "[Filter] extension_no_dot must not contain a dot "
                f"(got '{self.default_extension_no_dot}')"
            )
        if self.watch_poll_interval_seconds < MIN_WATCH_POLL_INTERVAL_SECONDS:
            raise ConfigError(
                f"[Watch] poll_interval_seconds must be >= {MIN_WATCH_POLL_INTERVAL_SECONDS}"
            )
        if self.observer_join_timeout_seconds < 0.0:
            raise ConfigError("[Watch] observer_join_timeout_seconds must be >= 0.0")


DEFAULT_CONFIG = Config()


def _get_float_option(
    cp: ConfigParser,
    section: str,
    option: str,
    default: float,
    min_value: Optional[float] = None,
) -> float:
    if not cp.has_option(section, option):
        return default
    raw_value = cp.get(section, option)
    try:
        value = float(raw_value)
    except ValueError:
        raise ConfigError(f"[{section}] '{option}' ('{raw_value}') must be a float")
    if min_value is not None and value < min_value:
        raise ConfigError(f"[{section}] '{option}' ({value}) must be >= {min_value}")
    return value


def _parse_filter_config(cp: ConfigParser) -> Optional[str]:
    # An empty value is meaningful: it selects entries without an extension.
    if not cp.has_option("Filter", "extension_no_dot"):
        return None
    return cp.get("Filter", "extension_no_dot").strip()


def _parse_logging_config(cp: ConfigParser, fs: FS) -> Optional[Path]:
    if not cp.has_option("Logging", "log_dir"):
        return None
    raw = cp.get("Logging", "log_dir").strip()
    if not raw:
        return None
    log_dir_expanded = Path(raw).expanduser()
    try:
        if fs.exists(log_dir_expanded) and not fs.is_dir(log_dir_expanded):
            raise ConfigError(
                f"[Logging] log_dir '{log_dir_expanded}' is not a directory."
            )
        return fs.resolve(log_dir_expanded, strict=False)
    except OSError as e:
        raise ConfigError(
            f"Error processing log_dir '{log_dir_expanded}': {e}"
        ) from e


def _parse_watch_config(cp: ConfigParser) -> tuple[float, float]:
    poll_interval = _get_float_option(
        cp,
        "Watch",
        "poll_interval_seconds",
        default=DEFAULT_WATCH_POLL_INTERVAL_SECONDS,
        min_value=MIN_WATCH_POLL_INTERVAL_SECONDS,
    )
    join_timeout = _get_float_option(
        cp,
        "Watch",
        "observer_join_timeout_seconds",
        default=DEFAULT_OBSERVER_JOIN_TIMEOUT_SECONDS,
        min_value=0.0,
    )
    return poll_interval, join_timeout


def load_config(path: Union[str, Path], fs: FS = FS()) -> Config:
    """Loads, parses, and validates configuration from an INI file."""
    config_path = Path(path)
    try:
        if not fs.is_file(config_path):
            if not fs.exists(config_path):
                raise ConfigError(f"Config file not found: {config_path}")
            else:
                raise ConfigError(f"Config path is not a file: {config_path}")
    except OSError as e:
        raise ConfigError(f"Error checking config path '{config_path}': {e}") from e

    cp = ConfigParser()
    try:
        with fs.open(str(config_path), "r", encoding="utf-8") as f:
            cp.read_file(f)
    except (OSError, UnicodeDecodeError, MissingSectionHeaderError, ParsingError) as e:
        raise ConfigError(
            f"[Config] error reading or parsing config file '{config_path}': {e}"
        ) from e

    try:
        extension = _parse_filter_config(cp)
        log_dir = _parse_logging_config(cp, fs)
        poll_interval, join_timeout = _parse_watch_config(cp)
    except ConfigError:
        raise
    except Exception as e:
        raise ConfigError(
            f"Error parsing configuration sections from '{config_path}': {e}"
        ) from e

    return Config(
        default_extension_no_dot=extension,
        log_dir=log_dir,
        watch_poll_interval_seconds=poll_interval,
        observer_join_timeout_seconds=join_timeout,
    )
