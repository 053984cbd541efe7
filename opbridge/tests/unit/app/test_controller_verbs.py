from __future__ import annotations

import logging
import types

import pytest

from opbridge.app.controller import OperationController
from opbridge.app.policies import no_contract_errors
from opbridge.config import ControllerConfig
from opbridge.domain.entities import OperationResult, RequestContext
from opbridge.domain.errors import ControllerConfigError


class _ContractStub:
    def __init__(self, errors=None):
        self.errors = dict(errors or {})
        self.prepopulate_calls = 0
        self.on_prepopulate = None
        self.seen_at_prepopulate = []

    def prepopulate(self):
        self.prepopulate_calls += 1
        if self.on_prepopulate is not None:
            self.seen_at_prepopulate.append(self.on_prepopulate())
        return self


class _OperationStub:
    def __init__(self, params, contract=None):
        self.params = params
        self.model = types.SimpleNamespace(id=7, title="hello")
        self.contract = contract if contract is not None else _ContractStub()


class _OperationTypeStub:
    """Records entry point calls; ``ok`` controls the run result."""

    model_key = "thing"

    def __init__(self, ok=True, contract=None):
        self.ok = ok
        self.contract = contract
        self.run_calls = []
        self.present_calls = []
        self.instances = []

    def run(self, params):
        self.run_calls.append(dict(params))
        op = _OperationStub(params, self.contract)
        self.instances.append(op)
        return self.ok, op

    def present(self, params):
        self.present_calls.append(dict(params))
        op = _OperationStub(params, self.contract)
        self.instances.append(op)
        return op


def _controller(**params):
    return OperationController(RequestContext(method="POST", params=dict(params)))


@pytest.mark.parametrize("ok", [True, False])
def test_run_binds_fields_regardless_of_success(ok):
    op_type = _OperationTypeStub(ok=ok)
    controller = _controller(id="7")

    result = controller.run(op_type)

    op = op_type.instances[0]
    assert isinstance(result, OperationResult)
    assert result.ok is ok
    assert controller.operation is op
    assert controller.model is op.model
    assert controller.contract is op.contract
    assert controller.result is result
    assert (result.operation, result.model, result.contract) == (op, op.model, op.contract)


def test_run_callback_fires_once_on_success():
    op_type = _OperationTypeStub(ok=True)
    controller = _controller()
    seen = []

    def on_success(operation):
        # fields are already bound when the callback runs
        seen.append((operation, controller.operation, controller.model))

    controller.run(op_type, on_success)

    op = op_type.instances[0]
    assert seen == [(op, op, op.model)]


def test_run_callback_skipped_on_failure():
    op_type = _OperationTypeStub(ok=False)
    calls = []

    result = _controller().run(op_type, calls.append)

    assert calls == []
    assert result.ok is False


def test_run_passes_params_to_operation():
    op_type = _OperationTypeStub()
    _controller(thing={"title": "x"}, id="3").run(op_type)
    assert op_type.run_calls == [{"thing": {"title": "x"}, "id": "3"}]


def test_present_uses_light_entry_point_only():
    op_type = _OperationTypeStub()
    controller = _controller(id="7")

    result = controller.present(op_type)

    assert op_type.run_calls == []
    assert op_type.present_calls == [{"id": "7"}]
    assert result.ok is None
    assert controller.operation is op_type.instances[0]
    assert controller.model.title == "hello"


def test_form_prepopulates_bound_contract_once():
    contract = _ContractStub()
    op_type = _OperationTypeStub(contract=contract)
    controller = _controller()
    contract.on_prepopulate = lambda: (controller.operation, controller.model, controller.contract)

    result = controller.form(op_type)

    op = op_type.instances[0]
    assert contract.seen_at_prepopulate == [(op, op.model, contract)]
    assert op_type.run_calls == []
    assert len(op_type.present_calls) == 1
    assert contract.prepopulate_calls == 1
    assert controller.contract is contract
    assert result.contract is contract


def test_form_without_contract_is_config_error():
    class _NoContract:
        model = None
        contract = None

    class _Type:
        @staticmethod
        def present(params):
            return _NoContract()

    with pytest.raises(ControllerConfigError):
        _controller().form(_Type)


def test_success_policy_is_pluggable():
    op_type = _OperationTypeStub(ok=True, contract=_ContractStub(errors={"title": ["blank"]}))
    controller = OperationController(RequestContext(method="POST"), success_policy=no_contract_errors)
    calls = []

    result = controller.run(op_type, calls.append)

    assert result.ok is False
    assert calls == []


def test_each_verb_rebinds_fields():
    op_type = _OperationTypeStub()
    controller = _controller()

    controller.present(op_type)
    first = controller.operation
    controller.run(op_type)

    assert controller.operation is not first
    assert controller.operation is op_type.instances[-1]


@pytest.mark.parametrize("debug", [True, False])
def test_debug_config_logs_normalized_params(caplog, debug):
    caplog.set_level(logging.DEBUG, logger="opbridge.app.controller")
    controller = OperationController(
        RequestContext(method="POST", path="/things", params={"id": "7"}),
        config=ControllerConfig(debug=debug),
    )

    controller.run(_OperationTypeStub())

    assert ("params for POST /things: {'id': '7'}" in caplog.text) is debug
