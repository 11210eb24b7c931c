"""GridBeat's tagged console logging.

Every engine record carries a subsystem tag (Session, Scheduler, Judge,
Harness, App) and optional key=value fields. Millisecond floats are
rounded to 0.1 ms and enum fields print their value, so judgement lines
read the same as the HUD.
"""
from __future__ import annotations

import enum
import logging
from typing import Any, Dict

LOGGER_NAME = "gridbeat"
DEFAULT_TAG = "Engine"

_logger = logging.getLogger(LOGGER_NAME)
if not _logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter(
        "%(asctime)s.%(msecs)03d [%(levelname)s][%(tag)s] %(message)s",
        datefmt="%H:%M:%S",
    )
    handler.setFormatter(formatter)
    _logger.addHandler(handler)
    _logger.setLevel(logging.INFO)


class _TagAdapter(logging.LoggerAdapter):
    def process(self, msg: Any, kwargs: Dict[str, Any]):
        tag = kwargs.pop("tag", DEFAULT_TAG) or DEFAULT_TAG
        kwargs.setdefault("extra", {})["tag"] = tag
        return msg, kwargs


_logger_adapter = _TagAdapter(_logger, {})


def _format_field(value: Any) -> str:
    if isinstance(value, enum.Enum):
        return str(value.value)
    if isinstance(value, float):
        return f"{value:.1f}"
    return str(value)


def format_fields(fields: Dict[str, Any]) -> str:
    """Render fields as ``key=value`` pairs, skipping None values."""
    return " ".join(f"{key}={_format_field(value)}" for key, value in fields.items() if value is not None)


def log_event(level: str, tag: str, message: str, **fields: Any) -> None:
    level_val = getattr(logging, level.upper(), logging.INFO)
    if not _logger.isEnabledFor(level_val):
        return
    extras = format_fields(fields)
    if extras:
        message = f"{message} | {extras}"
    _logger_adapter.log(level_val, message, tag=tag)


def set_log_level(level: str) -> None:
    """Set the engine log level (DEBUG/INFO/WARNING/ERROR)."""
    level_name = (level or "INFO").upper()
    _logger.setLevel(getattr(logging, level_name, logging.INFO))


def get_log_level() -> str:
    return logging.getLevelName(_logger.level)
