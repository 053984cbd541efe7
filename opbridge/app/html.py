"""Minimal HTML rendering for operations (default ``render_html`` of the responder).

Apps with real templates pass their own renderer to ``HttpResponder``; this
one prints errors plus either an edit form (when a contract is bound) or the
model's attributes.
"""

from __future__ import annotations

from dataclasses import asdict, is_dataclass
from html import escape
from typing import Any, Dict, List, Optional

from ..domain.entities import RequestContext
from ..domain.errors import ControllerConfigError
from ..domain.naming import location_for, underscore
from ..domain.ports import Namespace


def _model_attributes(model: Any) -> Dict[str, Any]:
    if model is None:
        return {}
    if is_dataclass(model) and not isinstance(model, type):
        return asdict(model)
    if hasattr(model, "model_dump"):
        return dict(model.model_dump())
    return {key: value for key, value in vars(model).items() if not key.startswith("_")}


def _param_key(operation: Any) -> str:
    key_name = getattr(type(operation), "model_key_name", None)
    if callable(key_name):
        try:
            return key_name()
        except ControllerConfigError:
            pass
    return underscore(type(getattr(operation, "model", None)).__name__) or "record"


def _errors_block(errors: Dict[str, List[str]]) -> str:
    if not errors:
        return ""
    items = "".join(
        f"<li>{escape(field)}: {escape(message)}</li>"
        for field, messages in errors.items()
        for message in messages
    )
    return f'<ul class="errors">{items}</ul>'


def _form_block(operation: Any, contract: Any, namespace: Namespace) -> str:
    key = _param_key(operation)
    action = location_for(operation, namespace)
    values = getattr(contract, "values", None) or {}
    rows = []
    for name, value in values.items():
        field_name = f"{key}[{name}]"
        shown = "" if value is None else str(value)
        rows.append(
            f'<label>{escape(name)} '
            f'<input name="{escape(field_name)}" value="{escape(shown)}"></label>'
        )
    inputs = "".join(rows)
    return (
        f'<form method="post" action="{escape(action)}">'
        f"{inputs}<button type=\"submit\">Save</button></form>"
    )


def _details_block(model: Any) -> str:
    rows = "".join(
        f"<dt>{escape(str(name))}</dt><dd>{escape('' if value is None else str(value))}</dd>"
        for name, value in _model_attributes(model).items()
    )
    return f"<dl>{rows}</dl>"


def render_operation_html(
    operation: Any,
    request: Optional[RequestContext] = None,
    namespace: Namespace = None,
) -> str:
    model = getattr(operation, "model", None)
    contract = getattr(operation, "contract", None)
    title = type(model).__name__ if model is not None else type(operation).__name__
    errors = dict(getattr(contract, "errors", None) or {})
    submitted = request is not None and not request.is_get
    show_form = contract is not None and (
        bool(errors) or bool(getattr(contract, "prepopulated", False)) or submitted
    )
    body = _form_block(operation, contract, namespace) if show_form else _details_block(model)
    return (
        "<!DOCTYPE html><html><head>"
        f"<title>{escape(title)}</title></head><body>"
        f"<h1>{escape(title)}</h1>{_errors_block(errors)}{body}"
        "</body></html>"
    )


__all__ = ["render_operation_html"]
