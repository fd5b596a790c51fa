from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any


SERVICE_NAME = "client"
LOGGER_NAME = "breachpath.client"

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def _render(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, ensure_ascii=True, default=str)


def format_log_line(level: str, event: str, **fields: Any) -> str:
    stamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")
    head = [stamp, f"service={SERVICE_NAME}", f"level={level.upper()}", f"event={event}"]
    return " | ".join(head + [f"{key}={_render(value)}" for key, value in fields.items()])


def configure_logging(level: str = "INFO") -> logging.Logger:
    """Attach the single-line stream handler once; later calls only adjust the level."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(_LEVELS.get(level.upper(), logging.INFO))
    if not getattr(logger, "_breachpath_configured", False):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.handlers.clear()
        logger.addHandler(handler)
        logger.propagate = False
        logger._breachpath_configured = True  # type: ignore[attr-defined]
    return logger


def get_logger() -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    if getattr(logger, "_breachpath_configured", False):
        return logger
    return configure_logging()


def log_event(logger: logging.Logger, level: str, event: str, **fields: Any) -> None:
    numeric = _LEVELS.get(level.upper(), logging.INFO)
    if logger.isEnabledFor(numeric):
        logger.log(numeric, format_log_line(level=level, event=event, **fields))
