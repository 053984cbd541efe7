"""Controller verbs wiring HTTP actions to operations.

Subclass :class:`OperationController` per resource, override
``process_params`` when the incoming params need cleaning, and call one verb
per action:

``run``      invoke the operation, bind fields, callback on success
``present``  setup-only (lookup/build), e.g. for a show page
``form``     ``present`` plus ``contract.prepopulate()``, for new/edit pages
``respond``  ``run`` plus content negotiation through the responder

Every verb binds ``operation``, ``model`` and ``contract`` on the controller
together, right after the operation returns, and also returns them as an
:class:`OperationResult`.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from starlette.requests import Request
from starlette.responses import Response

from ..config import ControllerConfig
from ..domain.entities import OperationResult, RequestContext, params_snapshot
from ..domain.errors import ControllerConfigError
from ..domain.naming import model_key_for
from ..domain.ports import (
    ContractPort,
    Namespace,
    OperationPort,
    OperationTypePort,
    Params,
    ResponderPort,
    SuccessPolicy,
)
from .policies import returned_flag
from .request import build_request_context, config_for
from .responder import HttpResponder

SuccessCallback = Callable[[OperationPort], Any]


class OperationController:
    """Per-request controller exposing the four operation verbs.

    Call chain:
        A FastAPI route receives a ``RequestContext`` (see
        :meth:`provider`), builds the controller and calls one verb. The
        verb delegates to the operation type's class-level entry points
        and, for ``respond``, to the injected responder.
    """

    def __init__(
        self,
        request: RequestContext,
        *,
        responder: Optional[ResponderPort] = None,
        success_policy: Optional[SuccessPolicy] = None,
        config: Optional[ControllerConfig] = None,
    ) -> None:
        """Initialize controller collaborators.

        Args:
            request: Parsed request; its ``params`` are normalized in place.
            responder: Builds responses for ``respond``; defaults to
                :class:`HttpResponder` sharing this controller's config.
            success_policy: ``(ok, operation) -> bool``; defaults to trusting
                the flag returned by ``run``.
            config: Format and redirect settings.
        """
        self._log = logging.getLogger(__name__)
        self.request = request
        self.config = config or ControllerConfig()
        self.responder: ResponderPort = responder if responder is not None else HttpResponder(self.config)
        self.success_policy: SuccessPolicy = success_policy or returned_flag
        self.operation: Optional[OperationPort] = None
        self.model: Any = None
        self.contract: Optional[ContractPort] = None
        self.result: Optional[OperationResult] = None

    @classmethod
    def provider(cls, **options: Any) -> Callable[[Request], Any]:
        """Return a FastAPI dependency building this controller per request.

        Example:
            ``controller: CommentsController = Depends(CommentsController.provider())``
        """

        config: Optional[ControllerConfig] = options.pop("config", None)

        async def _dependency(request: Request) -> "OperationController":
            cfg = config or config_for(request)
            context = await build_request_context(request, cfg)
            return cls(context, config=cfg, **options)

        return _dependency

    @property
    def params(self) -> Params:
        return self.request.params

    def is_html(self) -> bool:
        return self.config.is_html(self.request.format)

    # ------------------------------------------------------------------
    # Override point
    # ------------------------------------------------------------------
    def process_params(self, params: Params) -> Optional[Params]:
        """Normalize params before any verb dispatches. Identity by default.

        Overrides may mutate ``params`` in place (returning ``None``) or
        return a replacement mapping.
        """
        return params

    # ------------------------------------------------------------------
    # Verbs
    # ------------------------------------------------------------------
    def run(
        self,
        operation_type: OperationTypePort,
        on_success: Optional[SuccessCallback] = None,
    ) -> OperationResult:
        params = self._normalized_params()
        ok, operation = operation_type.run(params)
        result = self._bind(operation, ok=bool(self.success_policy(ok, operation)))
        self._log.debug("run %s -> ok=%s", _type_name(operation_type), result.ok)
        if result.ok and on_success is not None:
            on_success(operation)
        return result

    def present(self, operation_type: OperationTypePort) -> OperationResult:
        params = self._normalized_params()
        operation = operation_type.present(params)
        self._log.debug("present %s", _type_name(operation_type))
        return self._bind(operation)

    def form(self, operation_type: OperationTypePort) -> OperationResult:
        result = self.present(operation_type)
        if result.contract is None:
            raise ControllerConfigError(f"{_type_name(operation_type)} has no contract to prepopulate")
        result.contract.prepopulate()
        return result

    def respond(
        self,
        operation_type: OperationTypePort,
        on_success: Optional[SuccessCallback] = None,
        *,
        namespace: Namespace = None,
    ) -> Response:
        """Run the operation and let the responder build the response.

        Non-HTML requests get ``params[model_key]`` replaced by the raw body
        so the operation deserializes it itself.
        """
        if not self.is_html():
            key = model_key_for(operation_type)
            self.request.params[key] = self.request.body
            self._log.debug("respond %s: raw %s body under %r", _type_name(operation_type), self.request.format, key)
        result = self.run(operation_type, on_success)
        return self.responder.respond(
            result.operation,
            ok=bool(result.ok),
            request=self.request,
            namespace=namespace,
        )

    # ------------------------------------------------------------------
    def _normalized_params(self) -> Params:
        params = self.request.params
        normalized = self.process_params(params)
        if normalized is None:
            normalized = params
        self.request.params = normalized
        if self.config.debug:
            self._log.debug(
                "params for %s %s: %r", self.request.method, self.request.path, params_snapshot(normalized)
            )
        return normalized

    def _bind(self, operation: OperationPort, ok: Optional[bool] = None) -> OperationResult:
        result = OperationResult.bind(operation, ok=ok)
        self.operation = result.operation
        self.model = result.model
        self.contract = result.contract
        self.result = result
        return result


def _type_name(operation_type: Any) -> str:
    return getattr(operation_type, "__name__", type(operation_type).__name__)


__all__ = ["OperationController", "SuccessCallback"]
