"""Content-negotiating responder turning operations into HTTP responses.

Behaviour follows the classic controller-responder rules:

HTML
    GET renders the page; a successful submission redirects to the
    resource; a failed one re-renders the form with status 422.
API formats (json, xml, ...)
    The operation must offer ``to_<format>()``, otherwise 406. GET returns
    the serialized operation, POST returns 201 with ``Location``, other
    verbs return 204. Failures return 422: ``{"errors": ...}`` for JSON,
    ``field: message`` lines as text/plain for any other format.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

from starlette.responses import (
    HTMLResponse,
    JSONResponse,
    PlainTextResponse,
    RedirectResponse,
    Response,
)

from ..config import ControllerConfig
from ..domain.entities import RequestContext
from ..domain.naming import location_for
from ..domain.ports import Namespace, OperationPort
from .html import render_operation_html
from .request import FORMAT_MEDIA_TYPES

HtmlRenderer = Callable[[Any, RequestContext, Namespace], str]


def operation_errors(operation: Any) -> Dict[str, List[str]]:
    errors = getattr(operation, "errors", None)
    if errors is None:
        errors = getattr(getattr(operation, "contract", None), "errors", None)
    return dict(errors or {})


class HttpResponder:
    """Default responder used by :class:`OperationController`."""

    def __init__(
        self,
        config: Optional[ControllerConfig] = None,
        *,
        render_html: Optional[HtmlRenderer] = None,
    ) -> None:
        self._log = logging.getLogger(__name__)
        self.config = config or ControllerConfig()
        self.render_html = render_html or render_operation_html

    def respond(
        self,
        operation: OperationPort,
        *,
        ok: bool,
        request: RequestContext,
        namespace: Namespace = None,
    ) -> Response:
        if self.config.is_html(request.format):
            response = self._respond_html(operation, ok, request, namespace)
        else:
            response = self._respond_api(operation, ok, request, namespace)
        self._log.debug(
            "%s %s as %s -> %s", request.method, request.path, request.format, response.status_code
        )
        return response

    def _respond_html(
        self, operation: Any, ok: bool, request: RequestContext, namespace: Namespace
    ) -> Response:
        if request.is_get:
            return HTMLResponse(self.render_html(operation, request, namespace))
        if ok:
            return RedirectResponse(
                location_for(operation, namespace), status_code=self.config.redirect_status
            )
        return HTMLResponse(self.render_html(operation, request, namespace), status_code=422)

    def _respond_api(
        self, operation: Any, ok: bool, request: RequestContext, namespace: Namespace
    ) -> Response:
        fmt = request.format
        serializer = getattr(operation, f"to_{fmt}", None)
        if not callable(serializer):
            return PlainTextResponse(f"Not Acceptable: {fmt}", status_code=406)

        media_type = FORMAT_MEDIA_TYPES.get(fmt, "application/octet-stream")
        if request.is_get:
            return Response(serializer(), media_type=media_type)
        if not ok:
            return self._errors_response(operation, fmt)
        if request.method == "POST":
            return Response(
                serializer(),
                status_code=201,
                media_type=media_type,
                headers={"Location": location_for(operation, namespace)},
            )
        return Response(status_code=204)

    def _errors_response(self, operation: Any, fmt: str) -> Response:
        errors = operation_errors(operation)
        if fmt == "json":
            return JSONResponse({"errors": errors}, status_code=422)
        lines = [f"{field}: {message}" for field, messages in errors.items() for message in messages]
        return PlainTextResponse("\n".join(lines), status_code=422)


__all__ = ["HttpResponder", "operation_errors"]
