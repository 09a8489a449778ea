import copy
import datetime
import json
import logging
import logging.config
import sys
from pathlib import Path
from typing import Any, Optional, Union

# Attributes every LogRecord carries; anything else came in through `extra=`.
LOG_RECORD_BUILTIN_ATTRS = frozenset(
    {
        "args",
        "asctime",
        "created",
        "exc_info",
        "exc_text",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "msg",
        "name",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "thread",
        "threadName",
        "taskName",
    }
)

DEFAULT_LOG_FILENAME = "dirfilter.log.jsonl"
LOG_MAX_BYTES = 10 * 1024 * 1024
LOG_BACKUP_COUNT = 5


class LoggingConfigurationError(Exception):
    """Raised when logging cannot be configured."""

    pass


def _utc_iso_timestamp(record: logging.LogRecord) -> str:
    """ISO 8601 UTC timestamp with millisecond precision and a 'Z' suffix."""
    dt = datetime.datetime.fromtimestamp(record.created, tz=datetime.timezone.utc)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class JSONFormatter(logging.Formatter):
    """Formats each record as one JSON object per line."""

    DEFAULT_FMT_KEYS: dict[str, str] = {
        "timestamp": "asctime",
        "level": "levelname",
        "message": "message",
        "logger": "name",
        "module": "module",
        "function": "funcName",
        "line": "lineno",
    }

    def __init__(
        self, fmt_keys: Optional[dict[str, str]] = None, datefmt: Optional[str] = None
    ):
        super().__init__(datefmt=datefmt)
        self.fmt_keys: dict[str, str] = dict(
            fmt_keys if fmt_keys is not None else self.DEFAULT_FMT_KEYS
        )

    def _prepare_log_dict(self, record: logging.LogRecord) -> dict[str, Any]:
        data: dict[str, Any] = {}
        for output_key, attr_name in self.fmt_keys.items():
            if attr_name == "asctime":
                data[output_key] = _utc_iso_timestamp(record)
            elif attr_name == "message":
                data[output_key] = record.getMessage()
            elif hasattr(record, attr_name):
                data[output_key] = getattr(record, attr_name)

        if record.exc_info:
            data["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            data["stack_info"] = self.formatStack(record.stack_info)

        mapped_attrs = set(self.fmt_keys.values())
        for attr_name, attr_value in record.__dict__.items():
            if (
                attr_name not in LOG_RECORD_BUILTIN_ATTRS
                and attr_name not in mapped_attrs
                and attr_name not in data
            ):
                data[attr_name] = attr_value
        return data

    def format(self, record: logging.LogRecord) -> str:
        return json.dumps(self._prepare_log_dict(record), default=str)


FORMATTER_CLASS_PATH = f"{__name__}.JSONFormatter"

BASE_LOGGING_CONFIG: dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "dev_console": {
            "format": "%(asctime)s %(levelname)-8s [%(name)s:%(lineno)s] %(message)s",
            "datefmt": "%Y-%m-%dT%H:%M:%S",
        },
        "json_file": {
            "()": FORMATTER_CLASS_PATH,
            "fmt_keys": JSONFormatter.DEFAULT_FMT_KEYS,
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": "INFO",
            "formatter": "dev_console",
            "stream": "ext://sys.stderr",
        },
        "file_json": {
            "class": "logging.handlers.RotatingFileHandler",
            "level": "DEBUG",
            "formatter": "json_file",
            "filename": DEFAULT_LOG_FILENAME,
            "maxBytes": LOG_MAX_BYTES,
            "backupCount": LOG_BACKUP_COUNT,
            "encoding": "utf8",
        },
    },
    "loggers": {
        "watchdog": {"level": "INFO"},
    },
    "root": {
        "level": "DEBUG",
        "handlers": ["console", "file_json"],
    },
}


def _get_level_num(level_input: Union[int, str], param_name_for_error: str) -> int:
    if isinstance(level_input, int):
        return level_input
    if isinstance(level_input, str):
        numeric_level = logging.getLevelName(level_input.upper())
        if isinstance(numeric_level, int):
            return numeric_level
        try:
            return int(level_input)
        except ValueError:
            raise LoggingConfigurationError(
                f"Invalid level string for {param_name_for_error}: '{level_input}'"
            )
    raise TypeError(
        f"{param_name_for_error} must be an int or string, not {type(level_input)}"
    )


def setup_logging(
    *,
    log_file_dir: Optional[Path] = None,
    console_level: Optional[Union[int, str]] = None,
    file_level: Optional[Union[int, str]] = None,
) -> None:
    """
    Configures the root logger through dictConfig.

    Console output always goes to stderr (stdout carries results). The JSON
    file handler is only installed when `log_file_dir` is given.

    Raises:
        LoggingConfigurationError: If levels are invalid, the log directory
                                   cannot be created, or dictConfig fails.
    """
    cfg = copy.deepcopy(BASE_LOGGING_CONFIG)
    try:
        console_lvl = (
            _get_level_num(console_level, "console_level")
            if console_level is not None
            else logging.INFO
        )
        file_lvl = (
            _get_level_num(file_level, "file_level")
            if file_level is not None
            else logging.DEBUG
        )

        cfg["handlers"]["console"]["level"] = logging.getLevelName(console_lvl)
        if log_file_dir is None:
            del cfg["handlers"]["file_json"]
            cfg["root"]["handlers"] = ["console"]
            root_lvl = console_lvl
        else:
            log_path = (log_file_dir / DEFAULT_LOG_FILENAME).resolve()
            try:
                log_path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise LoggingConfigurationError(
                    f"Failed to create log directory {log_path.parent}: {e}"
                ) from e
            cfg["handlers"]["file_json"]["filename"] = str(log_path)
            cfg["handlers"]["file_json"]["level"] = logging.getLevelName(file_lvl)
            root_lvl = min(console_lvl, file_lvl)

        cfg["root"]["level"] = logging.getLevelName(root_lvl)
        logging.config.dictConfig(cfg)
    except LoggingConfigurationError:
        raise
    except (OSError, KeyError, ValueError, TypeError) as err:
        sys.stderr.write(f"CRITICAL: logging setup failed: {err}\n")
        raise LoggingConfigurationError(f"Failed to initialize logging: {err}") from err

    logging.getLogger(__name__).info(
        "Logging initialized: root=%s, console=%s, file_json=%s",
        logging.getLevelName(logging.getLogger().getEffectiveLevel()),
        cfg["handlers"]["console"]["level"],
        cfg["handlers"].get("file_json", {}).get("filename", "disabled"),
    )
