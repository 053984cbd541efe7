"""Map operation errors to HTTP responses at the REST boundary."""

from __future__ import annotations

from typing import Tuple

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from opbridge import ControllerConfigError, InvalidOperation, OperationError, RecordNotFound

_STATUS_BY_CODE = {
    "NOT_FOUND": 404,
    "INVALID_OPERATION": 422,
    "CONTROLLER_CONFIG": 500,
}


def map_operation_error(exc: OperationError) -> Tuple[int, dict]:
    """Return ``(status, payload)`` for an operation error.

    Unknown codes map to 400 so user-presentable errors never surface as 500.
    """
    status = _STATUS_BY_CODE.get(exc.code, 400)
    payload: dict = {"code": exc.code, "detail": exc.message}
    if isinstance(exc, InvalidOperation):
        payload["errors"] = exc.errors
    elif isinstance(exc, RecordNotFound):
        payload["model"] = exc.model_name
    elif isinstance(exc, ControllerConfigError):
        payload["detail"] = "Server misconfiguration."
    return status, payload


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(OperationError)
    async def _operation_error(request: Request, exc: OperationError) -> JSONResponse:
        status, payload = map_operation_error(exc)
        return JSONResponse(payload, status_code=status)


__all__ = ["install_error_handlers", "map_operation_error"]
