"""Logging configuration for momentmorph command line tools."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

__all__ = ["JsonFormatter", "setup_logging"]

_ROOT_LOGGER_NAMES = ("momentmorph", "momentmorph_core")
_HANDLER_MARKER = "_momentmorph_handler"
_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Attributes present on every LogRecord; anything else arrived via ``extra``.
_RESERVED_ATTRIBUTES = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None)).keys()
) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """Render log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRIBUTES or key.startswith("_"):
                continue
            payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str, sort_keys=False)


def _resolve_level(raw: Any) -> int:
    if isinstance(raw, int):
        return raw
    name = str(raw or "info").strip().upper()
    level = logging.getLevelName(name)
    if isinstance(level, int):
        return level
    return logging.INFO


def _resolve_stream(output: Any) -> logging.Handler:
    target = str(output or "stderr").strip()
    lowered = target.lower()
    if lowered == "stdout":
        return logging.StreamHandler(sys.stdout)
    if lowered == "stderr":
        return logging.StreamHandler(sys.stderr)
    path = Path(target).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(path, encoding="utf-8")


def setup_logging(config: Mapping[str, Any] | None = None) -> logging.Handler:
    """Configure the package loggers from the ``logging`` table of ``config``.

    Recognised keys are ``level`` (name or number), ``output`` (``stdout``,
    ``stderr`` or a file path) and ``format`` (``json`` or ``text``).
    Handlers installed by a previous call are replaced, so the function is
    safe to call repeatedly.
    """

    logging_cfg: Mapping[str, Any] = {}
    if config:
        candidate = config.get("logging", {})
        if isinstance(candidate, Mapping):
            logging_cfg = candidate

    handler = _resolve_stream(logging_cfg.get("output", "stderr"))
    if str(logging_cfg.get("format", "json")).strip().lower() == "text":
        handler.setFormatter(logging.Formatter(_TEXT_FORMAT))
    else:
        handler.setFormatter(JsonFormatter())
    setattr(handler, _HANDLER_MARKER, True)

    level = _resolve_level(logging_cfg.get("level", "info"))
    for name in _ROOT_LOGGER_NAMES:
        logger = logging.getLogger(name)
        for existing in list(logger.handlers):
            if getattr(existing, _HANDLER_MARKER, False):
                logger.removeHandler(existing)
                existing.close()
        logger.addHandler(handler)
        logger.setLevel(level)
        logger.propagate = False
    return handler
