"""Runtime settings for controllers, request parsing and responders.

Values come from keyword arguments or from ``OPBRIDGE_*`` environment
variables via :func:`config_from_env`. Invalid values fail fast with
``ValueError`` so a broken deployment does not start serving.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Mapping, Optional, Tuple

from .utils.logging import env_requests_debug

_REDIRECT_STATUSES = (301, 302, 303, 307, 308)


def _default_debug() -> bool:
    return env_requests_debug()


@dataclass(frozen=True)
class ControllerConfig:
    """Typed settings shared by the request builder, controller and responder."""

    html_formats: Tuple[str, ...] = ("html",)
    default_format: str = "html"
    redirect_status: int = 303
    debug: bool = field(default_factory=_default_debug)

    def __post_init__(self) -> None:
        formats = _coerce_formats(self.html_formats)
        if not formats:
            raise ValueError("html_formats must name at least one format")
        object.__setattr__(self, "html_formats", formats)

        default = str(self.default_format or "").strip().lower()
        if not default:
            raise ValueError("default_format must be a non-empty string")
        object.__setattr__(self, "default_format", default)

        status = _coerce_int("redirect_status", self.redirect_status)
        if status not in _REDIRECT_STATUSES:
            raise ValueError(f"redirect_status must be one of {_REDIRECT_STATUSES}, got {status}")
        object.__setattr__(self, "redirect_status", status)

    def is_html(self, fmt: Optional[str]) -> bool:
        return str(fmt or self.default_format).strip().lower() in self.html_formats

    def with_overrides(self, **changes: Any) -> "ControllerConfig":
        return replace(self, **changes)


def _coerce_formats(value: Any) -> Tuple[str, ...]:
    if isinstance(value, str):
        items: Iterable[Any] = value.split(",")
    else:
        items = value or ()
    seen = []
    for item in items:
        token = str(item or "").strip().lower().lstrip(".")
        if token and token not in seen:
            seen.append(token)
    return tuple(seen)


def _coerce_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    try:
        return int(str(value).strip())
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}") from exc


def config_from_env(env: Optional[Mapping[str, str]] = None) -> ControllerConfig:
    """
    Load controller settings from environment variables.

    Environment Variables:
        - OPBRIDGE_HTML_FORMATS: comma separated formats treated as HTML
        - OPBRIDGE_DEFAULT_FORMAT: format used when negotiation finds nothing
        - OPBRIDGE_REDIRECT_STATUS: status for successful HTML submissions

    Returns:
        ControllerConfig populated from the environment, defaults elsewhere.

    Raises:
        ValueError: If a variable is present but invalid.
    """
    source = os.environ if env is None else env
    kwargs: dict = {}

    html_formats = source.get("OPBRIDGE_HTML_FORMATS")
    if html_formats:
        kwargs["html_formats"] = html_formats

    default_format = source.get("OPBRIDGE_DEFAULT_FORMAT")
    if default_format:
        kwargs["default_format"] = default_format

    redirect_status = source.get("OPBRIDGE_REDIRECT_STATUS")
    if redirect_status:
        kwargs["redirect_status"] = redirect_status

    kwargs["debug"] = env_requests_debug(source)

    return ControllerConfig(**kwargs)


__all__ = ["ControllerConfig", "config_from_env"]
