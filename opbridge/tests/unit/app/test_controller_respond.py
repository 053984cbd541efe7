from __future__ import annotations

import types

import pytest
from starlette.responses import Response

from opbridge.app.controller import OperationController
from opbridge.config import ControllerConfig
from opbridge.domain.entities import RequestContext
from opbridge.domain.errors import ControllerConfigError


class _ResponderStub:
    def __init__(self):
        self.calls = []
        self.response = Response(status_code=299)
        self.controller = None

    def respond(self, operation, *, ok, request, namespace=None):
        bound = None
        if self.controller is not None:
            bound = (self.controller.operation, self.controller.model, self.controller.result)
        self.calls.append(
            {"operation": operation, "ok": ok, "request": request, "namespace": namespace, "bound": bound}
        )
        return self.response


class Thing:
    pass


class _OperationTypeStub:
    model_class = Thing

    def __init__(self, ok=True):
        self.ok = ok
        self.received = []
        self.instances = []

    def run(self, params):
        self.received.append(dict(params))
        op = types.SimpleNamespace(model=Thing(), contract=None, errors={})
        self.instances.append(op)
        return self.ok, op


def _context(fmt, **params):
    return RequestContext(
        method="POST",
        path="/things",
        params=dict(params),
        body='{"title": "raw"}',
        content_type="application/json",
        format=fmt,
    )


def test_respond_hands_instance_to_responder_once():
    responder = _ResponderStub()
    op_type = _OperationTypeStub()
    controller = OperationController(_context("html"), responder=responder)
    responder.controller = controller

    response = controller.respond(op_type)

    assert response is responder.response
    assert len(responder.calls) == 1
    call = responder.calls[0]
    assert call["operation"] is op_type.instances[0]
    assert call["ok"] is True
    assert call["request"] is controller.request
    assert call["namespace"] is None
    op = op_type.instances[0]
    assert call["bound"] == (op, op.model, controller.result)
    assert controller.result.operation is op


def test_respond_forwards_namespace_and_failure():
    responder = _ResponderStub()
    op_type = _OperationTypeStub(ok=False)
    controller = OperationController(_context("html"), responder=responder)

    controller.respond(op_type, namespace="admin")

    assert responder.calls[0]["namespace"] == "admin"
    assert responder.calls[0]["ok"] is False


def test_respond_runs_callback_before_responder():
    order = []

    class _OrderedResponder(_ResponderStub):
        def respond(self, operation, **kwargs):
            order.append("respond")
            return super().respond(operation, **kwargs)

    controller = OperationController(_context("html"), responder=_OrderedResponder())
    controller.respond(_OperationTypeStub(), lambda op: order.append("callback"))

    assert order == ["callback", "respond"]


def test_respond_non_html_replaces_model_key_with_raw_body():
    op_type = _OperationTypeStub()
    controller = OperationController(
        _context("json", thing={"title": "parsed"}, id="1"),
        responder=_ResponderStub(),
    )

    controller.respond(op_type)

    assert op_type.received == [{"thing": '{"title": "raw"}', "id": "1"}]


def test_respond_html_keeps_parsed_params():
    op_type = _OperationTypeStub()
    controller = OperationController(
        _context("html", thing={"title": "parsed"}),
        responder=_ResponderStub(),
    )

    controller.respond(op_type)

    assert op_type.received == [{"thing": {"title": "parsed"}}]


def test_respond_honours_configured_html_formats():
    op_type = _OperationTypeStub()
    config = ControllerConfig(html_formats=("html", "turbo"))
    controller = OperationController(
        _context("turbo", thing={"title": "parsed"}),
        responder=_ResponderStub(),
        config=config,
    )

    controller.respond(op_type)

    assert op_type.received == [{"thing": {"title": "parsed"}}]


def test_respond_prefers_explicit_model_key():
    class _Keyed(_OperationTypeStub):
        model_key = "payload"

    op_type = _Keyed()
    controller = OperationController(_context("json"), responder=_ResponderStub())

    controller.respond(op_type)

    assert op_type.received == [{"payload": '{"title": "raw"}'}]


def test_respond_without_model_key_is_config_error():
    class _Anonymous:
        def run(self, params):
            raise AssertionError("must not be called")

    controller = OperationController(_context("json"), responder=_ResponderStub())

    with pytest.raises(ControllerConfigError):
        controller.respond(_Anonymous())


def test_operation_errors_propagate_unchanged():
    class _Boom(_OperationTypeStub):
        def run(self, params):
            raise RuntimeError("boom")

    responder = _ResponderStub()
    controller = OperationController(_context("html"), responder=responder)

    with pytest.raises(RuntimeError, match="boom"):
        controller.respond(_Boom())
    assert responder.calls == []
