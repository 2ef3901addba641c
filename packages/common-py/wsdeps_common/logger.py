"""
wsdeps Logging

Thin layer over stdlib logging so every package logs under the "wsdeps"
namespace with one shared configuration.

Usage:
    from wsdeps_common.logger import get_logger

    logger = get_logger(__name__)
    logger.debug("Grouped declarations", extra={"keys": 12})

Configuration is read from the environment unless passed explicitly:
    WSDEPS_LOG_LEVEL  - debug | info | warning | error (default: warning)
    WSDEPS_LOG_FORMAT - console | json (default: console)
"""

import json
import logging
import os
import sys
from typing import Optional

from .constants import LOG_LEVELS, Defaults, EnvVars

ROOT_LOGGER_NAME = "wsdeps"

# Attributes present on every LogRecord; anything else came in through extra=
_RESERVED_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "asctime",
}


class JsonFormatter(logging.Formatter):
    """Render each record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _namespaced(name: str) -> str:
    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return name
    # wsdeps_sdk.dependencies.analyzer -> wsdeps.sdk.dependencies.analyzer
    if name.startswith(ROOT_LOGGER_NAME + "_"):
        return ROOT_LOGGER_NAME + "." + name[len(ROOT_LOGGER_NAME) + 1 :]
    return f"{ROOT_LOGGER_NAME}.{name}"


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger under the wsdeps namespace.

    Args:
        name: Usually __name__ of the calling module

    Returns:
        Configured logging.Logger
    """
    return logging.getLogger(_namespaced(name))


def configure_logging(
    level: Optional[str] = None,
    json_format: Optional[bool] = None,
) -> logging.Logger:
    """
    Configure the wsdeps root logger.

    Safe to call more than once; the previous handler is replaced.

    Args:
        level: Log level name, defaults to WSDEPS_LOG_LEVEL or "warning"
        json_format: Emit JSON lines, defaults to WSDEPS_LOG_FORMAT == "json"

    Returns:
        The wsdeps root logger
    """
    level_name = (level or os.environ.get(EnvVars.LOG_LEVEL) or Defaults.LOG_LEVEL).lower()
    if level_name == "warn":
        level_name = "warning"
    if level_name not in LOG_LEVELS:
        level_name = Defaults.LOG_LEVEL

    if json_format is None:
        log_format = os.environ.get(EnvVars.LOG_FORMAT, Defaults.LOG_FORMAT).lower()
        json_format = log_format == "json"

    handler = logging.StreamHandler(sys.stderr)
    if json_format:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))

    root = logging.getLogger(ROOT_LOGGER_NAME)
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level_name.upper())
    root.propagate = False
    return root
