"""Glue between FastAPI route handlers and operation objects.

Typical use::

    class CommentsController(OperationController):
        def process_params(self, params):
            params.pop("utf8", None)
            return params

    @app.post("/comments")
    def create(controller: CommentsController = Depends(CommentsController.provider())):
        return controller.respond(CreateComment)
"""
from .app.controller import OperationController
from .app.policies import no_contract_errors, returned_flag
from .app.request import build_request_context, request_context
from .app.responder import HttpResponder
from .config import ControllerConfig, config_from_env
from .domain import (
    ControllerConfigError,
    InvalidOperation,
    OperationError,
    OperationResult,
    RecordNotFound,
    RequestContext,
)
from .operations import Contract, Operation

__version__ = "0.1.0"

__all__ = [
    "Contract",
    "ControllerConfig",
    "ControllerConfigError",
    "HttpResponder",
    "InvalidOperation",
    "Operation",
    "OperationController",
    "OperationError",
    "OperationResult",
    "RecordNotFound",
    "RequestContext",
    "build_request_context",
    "config_from_env",
    "no_contract_errors",
    "request_context",
    "returned_flag",
]
