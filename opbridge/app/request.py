"""Build :class:`RequestContext` objects from Starlette/FastAPI requests.

This is the framework's default body parser as far as controllers are
concerned: query string, form fields (``comment[body]`` nesting) and JSON
object bodies end up in one mutable ``params`` dict. The raw body is kept
alongside so ``respond`` can hand it to the operation untouched.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from starlette.requests import Request

from ..config import ControllerConfig
from ..domain.entities import RequestContext

_log = logging.getLogger(__name__)

_MEDIA_FORMATS: Dict[str, str] = {
    "text/html": "html",
    "application/xhtml+xml": "html",
    "application/json": "json",
    "text/json": "json",
    "application/xml": "xml",
    "text/xml": "xml",
    "text/plain": "text",
    "text/csv": "csv",
}

FORMAT_MEDIA_TYPES: Dict[str, str] = {
    "html": "text/html",
    "json": "application/json",
    "xml": "application/xml",
    "text": "text/plain",
    "csv": "text/csv",
}

_FORM_MEDIA_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")
_BODY_FORMATS = ("json", "xml")
_KEY_PATTERN = re.compile(r"^([^\[\]]+)((?:\[[^\[\]]*\])*)$")
_SEGMENT_PATTERN = re.compile(r"\[([^\[\]]*)\]")


def media_type_format(media_type: Optional[str]) -> Optional[str]:
    """Map ``application/json; charset=utf-8`` to ``json`` (None if unknown)."""
    base = (media_type or "").split(";", 1)[0].strip().lower()
    if not base:
        return None
    if base in _MEDIA_FORMATS:
        return _MEDIA_FORMATS[base]
    if base.endswith("+json"):
        return "json"
    if base.endswith("+xml"):
        return "xml"
    return None


def _accept_formats(accept: str) -> List[str]:
    ranked: List[Tuple[float, int, str]] = []
    for index, item in enumerate((accept or "").split(",")):
        media, _, rest = item.partition(";")
        quality = 1.0
        for param in rest.split(";"):
            name, _, value = param.partition("=")
            if name.strip().lower() == "q":
                try:
                    quality = float(value.strip())
                except ValueError:
                    quality = 0.0
        fmt = media_type_format(media)
        if fmt and quality > 0:
            ranked.append((-quality, index, fmt))
    return [fmt for _, _, fmt in sorted(ranked)]


def negotiate_format(
    *,
    query_format: Optional[str] = None,
    accept: str = "",
    content_type: str = "",
    default: str = "html",
) -> str:
    """Pick the response format for a request.

    Order: explicit ``format`` param, best ``Accept`` match (wildcards
    ignored), a JSON/XML request body, then ``default``.
    """
    explicit = (query_format or "").strip().lower().lstrip(".")
    if explicit:
        return explicit
    accepted = _accept_formats(accept)
    if accepted:
        return accepted[0]
    body_format = media_type_format(content_type)
    if body_format in _BODY_FORMATS:
        return body_format
    return default


def _split_key(key: str) -> List[str]:
    match = _KEY_PATTERN.match(key or "")
    if not match:
        return [key]
    head, rest = match.groups()
    return [head] + _SEGMENT_PATTERN.findall(rest)


def _has_path(node: Any, parts: List[str]) -> bool:
    if "" in parts:
        return False
    for part in parts:
        if not isinstance(node, dict) or part not in node:
            return False
        node = node[part]
    return True


def _assign(node: Dict[str, Any], parts: List[str], value: Any) -> None:
    head, rest = parts[0], parts[1:]
    if not rest:
        node[head] = value
        return
    if rest[0] == "":
        bucket = node.get(head)
        if not isinstance(bucket, list):
            bucket = node[head] = []
        tail = rest[1:]
        if not tail:
            bucket.append(value)
            return
        # tags[][name]: keep filling the last dict until one of its keys repeats
        last = bucket[-1] if bucket else None
        if not isinstance(last, dict) or _has_path(last, tail):
            last = {}
            bucket.append(last)
        _assign(last, tail, value)
        return
    child = node.get(head)
    if not isinstance(child, dict):
        child = node[head] = {}
    _assign(child, rest, value)


def nest_form_fields(items: Iterable[Tuple[str, Any]]) -> Dict[str, Any]:
    """Turn ``[("comment[body]", "x"), ("tags[]", "a")]`` into nested dicts/lists.

    ``items[][name]`` keys build a list of dicts, starting a new dict when
    the key is already present in the last one. Later scalar keys win over
    earlier ones, matching browser form semantics.
    """
    result: Dict[str, Any] = {}
    for key, value in items:
        _assign(result, _split_key(key), value)
    return result


def deep_merge(target: Dict[str, Any], incoming: Mapping[str, Any]) -> Dict[str, Any]:
    for key, value in incoming.items():
        current = target.get(key)
        if isinstance(current, dict) and isinstance(value, Mapping):
            deep_merge(current, value)
        else:
            target[key] = value
    return target


def config_for(request: Request) -> ControllerConfig:
    """Return the config stored on ``app.state.opbridge_config`` (or defaults)."""
    app = request.scope.get("app")
    state = getattr(app, "state", None)
    config = getattr(state, "opbridge_config", None)
    return config if isinstance(config, ControllerConfig) else ControllerConfig()


async def build_request_context(
    request: Request,
    config: Optional[ControllerConfig] = None,
) -> RequestContext:
    """Read the request once and return a controller-ready context."""
    cfg = config or config_for(request)
    raw = await request.body()
    body = raw.decode("utf-8", errors="replace")
    content_type = request.headers.get("content-type", "")
    media = content_type.split(";", 1)[0].strip().lower()

    params: Dict[str, Any] = nest_form_fields(request.query_params.multi_items())
    if media in _FORM_MEDIA_TYPES:
        form = await request.form()
        deep_merge(params, nest_form_fields(form.multi_items()))
    elif media_type_format(content_type) == "json" and body.strip():
        try:
            decoded = json.loads(body)
        except ValueError:
            _log.debug("Ignoring unparseable JSON body on %s %s", request.method, request.url.path)
            decoded = None
        if isinstance(decoded, dict):
            deep_merge(params, decoded)
    params.update(request.path_params)

    fmt = negotiate_format(
        query_format=request.query_params.get("format"),
        accept=request.headers.get("accept", ""),
        content_type=content_type,
        default=cfg.default_format,
    )
    return RequestContext(
        method=request.method,
        path=request.url.path,
        params=params,
        body=body,
        content_type=content_type,
        format=fmt,
        headers=dict(request.headers),
    )


async def request_context(request: Request) -> RequestContext:
    """FastAPI dependency: ``ctx: RequestContext = Depends(request_context)``."""
    return await build_request_context(request)


__all__ = [
    "FORMAT_MEDIA_TYPES",
    "build_request_context",
    "config_for",
    "deep_merge",
    "media_type_format",
    "negotiate_format",
    "nest_form_fields",
    "request_context",
]
