"""Operation base class: one business transaction per instance.

Three class-level entry points mirror what controllers need:

* ``run(params)``     -> ``(valid, operation)``, never raises on invalid input
* ``present(params)`` -> operation after setup only (model + contract)
* ``call(params)``    -> operation, raises :class:`InvalidOperation` when invalid
"""
from __future__ import annotations

import logging
from typing import Any, Callable, ClassVar, Mapping, Optional, Tuple, Type

from pydantic import BaseModel

from ..domain.errors import InvalidOperation, OperationError
from ..domain.naming import model_key_for
from ..domain.ports import ErrorMap, Params
from .contract import Contract
from .representer import parse_json, render_json


class Operation:
    """Base class for operations; subclasses override the hooks below.

    Hooks:
        model_for(params): find or build the model (default ``model_class()``).
        contract_for(model): build the contract (default ``contract_class(model)``).
        process(params): the actual work, usually ``self.validate(...)``.
    """

    model_class: ClassVar[Optional[type]] = None
    contract_class: ClassVar[Optional[Type[Contract]]] = None
    representer_class: ClassVar[Optional[Type[BaseModel]]] = None
    model_key: ClassVar[Optional[str]] = None

    def __init__(self) -> None:
        self._log = logging.getLogger(__name__)
        self.params: Params = {}
        self.model: Any = None
        self.contract: Optional[Contract] = None
        self.valid = True

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------
    @classmethod
    def run(cls, params: Params) -> Tuple[bool, "Operation"]:
        operation = cls()
        valid = operation._run(params)
        return valid, operation

    @classmethod
    def present(cls, params: Params) -> "Operation":
        operation = cls()
        operation._setup(params)
        return operation

    @classmethod
    def call(cls, params: Params) -> "Operation":
        valid, operation = cls.run(params)
        if not valid:
            raise InvalidOperation(operation, operation.errors)
        return operation

    @classmethod
    def model_key_name(cls) -> str:
        return model_key_for(cls)

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------
    def model_for(self, params: Params) -> Any:
        return self.model_class() if self.model_class is not None else None

    def contract_for(self, model: Any) -> Optional[Contract]:
        return self.contract_class(model) if self.contract_class is not None else None

    def process(self, params: Params) -> None:
        pass

    # ------------------------------------------------------------------
    def validate(self, data: Any, on_success: Optional[Callable[[Contract], Any]] = None) -> bool:
        """Validate ``data`` with the contract; call ``on_success`` when valid.

        ``data`` may be a raw JSON body (``str``/``bytes``); it is decoded
        through ``representer_class`` first. Undecodable bodies count as
        invalid input, not as errors.
        """
        if self.contract is None:
            raise OperationError("NO_CONTRACT", f"{type(self).__name__} has no contract to validate with")

        if isinstance(data, (str, bytes)):
            try:
                data = parse_json(data, self.representer_class)
            except ValueError as exc:
                self._log.debug("Rejected %s body: %s", type(self).__name__, exc)
                self.contract.errors = {"base": [f"unreadable payload: {_first_line(exc)}"]}
                self.valid = False
                return False

        ok = self.contract.validate(data)
        if not ok:
            self.valid = False
            return False
        if on_success is not None:
            on_success(self.contract)
        return True

    @property
    def errors(self) -> ErrorMap:
        return dict(self.contract.errors) if self.contract is not None else {}

    def to_json(self) -> str:
        return render_json(self.model, self.representer_class)

    # ------------------------------------------------------------------
    def _setup(self, params: Optional[Params]) -> None:
        self.params = params if params is not None else {}
        self.model = self.model_for(self.params)
        self.contract = self.contract_for(self.model)

    def _run(self, params: Optional[Params]) -> bool:
        self._setup(params)
        self.valid = True
        self.process(self.params)
        return self.valid


def _first_line(exc: Exception) -> str:
    text = str(exc).strip()
    return text.splitlines()[0] if text else type(exc).__name__


def nested(params: Mapping[str, Any], key: str) -> Any:
    """Return ``params[key]`` or an empty mapping when absent."""
    value = params.get(key) if params is not None else None
    return {} if value is None else value


__all__ = ["Operation", "nested"]
