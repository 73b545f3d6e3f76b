"""Logging setup for barrelkeep.

Everything logs to stderr (stdout is reserved for the CLI's JSON output).
The level comes from ``LOG_LEVEL``. The daemon switches to one JSON object
per line via ``use_json_logging``.
"""
import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})


def _level_from_env() -> int:
    name = os.environ.get("LOG_LEVEL", "INFO").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


LOG_LEVEL = _level_from_env()
logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT, stream=sys.stderr)

# Attributes every LogRecord has; anything else arrived through ``extra=``.
_STANDARD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with ``extra=`` fields at the top level."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _STANDARD_ATTRS and not key.startswith("_")
        )
        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc, _ = record.exc_info
            payload["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc) if exc is not None else None,
                "traceback": self.formatException(record.exc_info),
            }
        return json.dumps(payload, default=str)


def get_logger(name: str, json_format: bool = False) -> logging.Logger:
    """Named logger at the configured level.

    With ``json_format`` the logger gets its own JSON stderr handler and stops
    propagating to the root handlers.
    """
    logger = logging.getLogger(name)
    logger.setLevel(LOG_LEVEL)
    if json_format and not any(isinstance(h.formatter, JSONFormatter) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)
        logger.propagate = False
    return logger


def use_json_logging() -> None:
    """Switch the root handlers to JSON output (daemon log files)."""
    for handler in logging.getLogger().handlers:
        handler.setFormatter(JSONFormatter())


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def safe_float(value: Any, default: float, logger: Optional[logging.Logger] = None, context: str = "") -> float:
    """``float(value)``, or ``default`` when blank or unparseable (logged if ``logger``)."""
    if _is_blank(value):
        return default
    try:
        return float(value)
    except (ValueError, TypeError):
        if logger:
            logger.warning("Invalid float for %s: %r, using %s", context, value, default)
        return default


def safe_bool(value: Any, default: bool, logger: Optional[logging.Logger] = None, context: str = "") -> bool:
    """Parse 1/0, true/false, yes/no, on/off; anything else gives ``default``."""
    if _is_blank(value):
        return default
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    if logger:
        logger.warning("Invalid boolean for %s: %r, using %s", context, value, default)
    return default
