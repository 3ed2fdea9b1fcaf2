import datetime as _dt
import json
import logging as _logging
import os
import sys
from dataclasses import dataclass
from typing import Any, Dict, Optional

_NAMESPACE = "structmapper"

_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"

_LEVEL_COLORS = {
    _logging.DEBUG: "\033[36m",
    _logging.INFO: "\033[37m",
    _logging.WARNING: "\033[33m",
    _logging.ERROR: "\033[31m",
    _logging.CRITICAL: "\033[41m",
}
_RESET = "\033[0m"

# attributes every LogRecord has; anything else came in through `extra=`
_RECORD_ATTRS = frozenset(_logging.makeLogRecord({}).__dict__) | {"message", "asctime"}


@dataclass
class LoggingState:
    console_level: int
    log_dir: Optional[str] = None
    text_log_path: Optional[str] = None
    jsonl_log_path: Optional[str] = None


_state: Optional[LoggingState] = None


def _level(value, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, int):
        return value
    name = str(value).upper()
    if name.isdigit():
        return int(name)
    level = _logging.getLevelName(name)
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {value}")
    return level


class _ColorFormatter(_logging.Formatter):
    def __init__(self, use_color: bool) -> None:
        super().__init__(fmt=_FORMAT, datefmt=_DATEFMT)
        self.use_color = use_color

    def format(self, record: _logging.LogRecord) -> str:
        message = super().format(record)
        color = _LEVEL_COLORS.get(record.levelno) if self.use_color else None
        return f"{color}{message}{_RESET}" if color else message


class _BelowLevel(_logging.Filter):
    def __init__(self, level: int) -> None:
        super().__init__()
        self.level = level

    def filter(self, record: _logging.LogRecord) -> bool:
        return record.levelno < self.level


class _JsonLinesFormatter(_logging.Formatter):
    """One JSON object per record; `extra` fields such as `pair` are kept."""

    def format(self, record: _logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": self.formatTime(record, _DATEFMT),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "lineno": record.lineno,
        }
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        for key, value in record.__dict__.items():
            if key in _RECORD_ATTRS:
                continue
            try:
                json.dumps(value)
            except TypeError:
                value = repr(value)
            entry[key] = value
        return json.dumps(entry, ensure_ascii=False)


def _console_handler(stream, level: int, use_color: bool) -> _logging.Handler:
    handler = _logging.StreamHandler(stream=stream)
    handler.setLevel(level)
    handler.setFormatter(_ColorFormatter(use_color and stream.isatty()))
    return handler


def _file_handler(path: str, level: int, formatter: _logging.Formatter) -> _logging.Handler:
    handler = _logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def _log_dir(logging_cfg: Dict[str, Any], override: Optional[str]) -> Optional[str]:
    """File logging is off unless a directory is configured or passed."""
    log_dir = override or logging_cfg.get("dir")
    return os.path.abspath(log_dir) if log_dir else None


def get_logger(name: Optional[str] = None) -> _logging.Logger:
    if name is None:
        return _logging.getLogger(_NAMESPACE)
    if not name.startswith(_NAMESPACE):
        name = f"{_NAMESPACE}.{name}"
    return _logging.getLogger(name)


def configure_logging(
    config: Dict[str, Any],
    *,
    console_level_override: Optional[str] = None,
    log_dir_override: Optional[str] = None,
    disable_color: bool = False,
    enable_jsonl_override: Optional[bool] = None,
    force_reconfigure: bool = False,
) -> LoggingState:
    """Attach console handlers, and log files when a log directory is set.

    Records below ERROR go to stdout, the rest to stderr. Calling again is a
    no-op unless `force_reconfigure` is set.
    """
    global _state

    logging_cfg: Dict[str, Any] = (config or {}).get("logging", {})
    console_level = _level(console_level_override, _level(logging_cfg.get("console_level"), _logging.INFO))
    file_level = _level(logging_cfg.get("file_level"), _logging.DEBUG)
    use_color = logging_cfg.get("color", True) and not disable_color
    log_dir = _log_dir(logging_cfg, log_dir_override)

    logger = get_logger()
    if logger.handlers and not force_reconfigure:
        return _state  # type: ignore[return-value]

    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.setLevel(min(console_level, file_level) if log_dir else console_level)
    logger.propagate = False

    stdout_handler = _console_handler(sys.stdout, console_level, use_color)
    stdout_handler.addFilter(_BelowLevel(_logging.ERROR))
    logger.addHandler(stdout_handler)
    logger.addHandler(_console_handler(sys.stderr, max(console_level, _logging.ERROR), use_color))

    state = LoggingState(console_level=console_level, log_dir=log_dir)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        timestamp = _dt.datetime.now().strftime(logging_cfg.get("timestamp_format", "%Y%m%dT%H%M%S"))
        file_name = logging_cfg.get("filename_pattern", "structmapper-{timestamp}.log").format(timestamp=timestamp)
        state.text_log_path = os.path.join(log_dir, file_name)
        logger.addHandler(_file_handler(state.text_log_path, file_level, _logging.Formatter(_FORMAT, _DATEFMT)))

        jsonl = logging_cfg.get("jsonl", False) if enable_jsonl_override is None else enable_jsonl_override
        if jsonl:
            state.jsonl_log_path = os.path.join(log_dir, f"{os.path.splitext(file_name)[0]}.jsonl")
            logger.addHandler(_file_handler(state.jsonl_log_path, file_level, _JsonLinesFormatter()))

    _state = state
    return state


def is_configured() -> bool:
    return bool(get_logger().handlers)
