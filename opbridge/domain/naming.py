from __future__ import annotations

"""Naming helpers shared by the controller (model keys) and responder (URLs)."""

import re
from typing import Any, List, Optional
from urllib.parse import quote

from .errors import ControllerConfigError
from .ports import Namespace

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")
_SANITIZE_PATTERN = re.compile(r"[^A-Za-z0-9_]+")


def underscore(name: str) -> str:
    """Return ``snake_case`` for a class-style name (``BlogPost`` -> ``blog_post``)."""

    cleaned = _SANITIZE_PATTERN.sub("_", (name or "").strip())
    cleaned = _CAMEL_BOUNDARY.sub("_", cleaned).lower()
    cleaned = re.sub(r"_+", "_", cleaned).strip("_")
    return cleaned


def _as_type(obj: Any) -> type:
    return obj if isinstance(obj, type) else type(obj)


def model_key_for(operation_type: Any) -> str:
    """Resolve the params key holding the model's attributes.

    ``model_key`` wins; otherwise the snake-cased ``model_class`` name.
    """

    explicit = getattr(operation_type, "model_key", None)
    if isinstance(explicit, str) and explicit.strip():
        return explicit.strip()
    model_class = getattr(operation_type, "model_class", None)
    if model_class is not None:
        key = underscore(_as_type(model_class).__name__)
        if key:
            return key
    name = getattr(_as_type(operation_type), "__name__", repr(operation_type))
    raise ControllerConfigError(f"{name} defines neither model_key nor model_class")


def collection_name(model: Any) -> str:
    """Plural path segment for a model (``__collection__`` or ``<snake>s``)."""

    explicit = getattr(model, "__collection__", None)
    if isinstance(explicit, str) and explicit.strip():
        return explicit.strip()
    return f"{underscore(_as_type(model).__name__)}s"


def namespace_parts(namespace: Namespace) -> List[str]:
    if namespace is None:
        return []
    if isinstance(namespace, str):
        raw = namespace.split("/")
    else:
        raw = [str(part) for part in namespace]
    return [part.strip() for part in raw if part and part.strip()]


def resource_path(model: Any, namespace: Namespace = None, *, key: Optional[Any] = None) -> str:
    """Build ``/<namespace...>/<collection>[/<id>]`` for a model instance."""

    ident = key if key is not None else getattr(model, "id", None)
    parts = namespace_parts(namespace) + [collection_name(model)]
    if ident is not None:
        parts.append(str(ident))
    return "/" + "/".join(quote(part, safe="") for part in parts)


def location_for(operation: Any, namespace: Namespace = None) -> str:
    """URL of the operation's resource: ``operation.location`` or derived from the model."""

    explicit = getattr(operation, "location", None)
    if isinstance(explicit, str) and explicit:
        return explicit
    return resource_path(getattr(operation, "model", None), namespace)


__all__ = [
    "collection_name",
    "location_for",
    "model_key_for",
    "namespace_parts",
    "resource_path",
    "underscore",
]
