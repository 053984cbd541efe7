from __future__ import annotations

import types

import pytest
from starlette.responses import Response

from opbridge.app.controller import OperationController
from opbridge.domain.entities import RequestContext


class _Recorder:
    """Operation type stub recording what each entry point received."""

    model_key = "thing"

    def __init__(self):
        self.received = []

    def _instance(self):
        contract = types.SimpleNamespace(errors={}, prepopulate=lambda: None)
        return types.SimpleNamespace(model=None, contract=contract)

    def run(self, params):
        self.received.append(("run", dict(params)))
        return True, self._instance()

    def present(self, params):
        self.received.append(("present", dict(params)))
        return self._instance()


class _NullResponder:
    def respond(self, operation, **kwargs):
        return Response(status_code=204)


class _MutatingController(OperationController):
    def process_params(self, params):
        params.pop("utf8", None)
        params["tenant"] = "acme"
        return None


class _ReplacingController(OperationController):
    def process_params(self, params):
        return {"replaced": True, **{k: v for k, v in params.items() if k != "utf8"}}


def _invoke(controller, verb, op_type):
    method = getattr(controller, verb)
    method(op_type)


@pytest.mark.parametrize("verb", ["run", "present", "form", "respond"])
def test_in_place_override_reaches_operation(verb):
    op_type = _Recorder()
    controller = _MutatingController(
        RequestContext(method="POST", params={"utf8": "✓", "id": "4"}),
        responder=_NullResponder(),
    )

    _invoke(controller, verb, op_type)

    assert op_type.received[0][1] == {"id": "4", "tenant": "acme"}


@pytest.mark.parametrize("verb", ["run", "present", "form", "respond"])
def test_replacement_override_reaches_operation(verb):
    op_type = _Recorder()
    controller = _ReplacingController(
        RequestContext(method="POST", params={"utf8": "✓", "id": "4"}),
        responder=_NullResponder(),
    )

    _invoke(controller, verb, op_type)

    assert op_type.received[0][1] == {"replaced": True, "id": "4"}
    assert controller.params == {"replaced": True, "id": "4"}


def test_default_hook_is_identity():
    params = {"id": "4"}
    controller = OperationController(RequestContext(params=params))
    assert controller.process_params(params) is params


def test_override_sees_raw_body_for_api_requests():
    seen = []

    class _Spy(OperationController):
        def process_params(self, params):
            seen.append(dict(params))
            return params

    controller = _Spy(
        RequestContext(method="POST", params={"thing": {"a": 1}}, body="{}", format="json"),
        responder=_NullResponder(),
    )
    controller.respond(_Recorder())

    assert seen == [{"thing": "{}"}]
