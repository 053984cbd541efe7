"""Root logging setup for opbridge apps, driven by environment variables."""

from __future__ import annotations

import logging
import os
from typing import Mapping, Optional

LEVEL_ENV = "OPBRIDGE_LOG_LEVEL"
DEBUG_ENV = "OPBRIDGE_DEBUG"

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_DATEFMT = "%H:%M:%S"
_TRUTHY = frozenset({"1", "true", "yes", "on"})
# python-multipart logs every parsed form part at DEBUG.
_NOISY_LOGGERS = ("multipart", "python_multipart")


def _coerce_level(value: object, fallback: int) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    text = str(value or "").strip().upper()
    if text.isdigit():
        return int(text)
    level = logging.getLevelName(text) if text else None
    return level if isinstance(level, int) else fallback


def _env_truthy(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in _TRUTHY


def _resolve_env_level(env: Optional[Mapping[str, str]] = None) -> Optional[int]:
    source = os.environ if env is None else env
    explicit = source.get(LEVEL_ENV)
    if explicit and explicit.strip():
        return _coerce_level(explicit, logging.INFO)
    if _env_truthy(source.get(DEBUG_ENV)):
        return logging.DEBUG
    return None


def configure_root(
    default_level: int | str = logging.INFO,
    env: Optional[Mapping[str, str]] = None,
) -> int:
    """
    Configure the root logger and return the effective level.

    ``OPBRIDGE_LOG_LEVEL`` (name or number) wins over ``OPBRIDGE_DEBUG``
    (truthy -> DEBUG), which wins over ``default_level``. Existing root
    handlers (uvicorn, pytest) are kept; only the level changes.
    """
    effective = _resolve_env_level(env)
    if effective is None:
        effective = _coerce_level(default_level, logging.INFO)

    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=effective, format=_FORMAT, datefmt=_DATEFMT)
    root.setLevel(effective)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(effective, logging.INFO))
    return effective


def level_name(level: int) -> str:
    return logging.getLevelName(level)


def env_requests_debug(env: Optional[Mapping[str, str]] = None) -> bool:
    """True when the environment forces DEBUG (or lower) logging."""
    level = _resolve_env_level(env)
    return level is not None and level <= logging.DEBUG
