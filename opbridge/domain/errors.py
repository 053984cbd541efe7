"""Domain-level error types shared by operations, controllers and the app.

The controller layer never raises these on an ordinary invalid submission;
failure there is a boolean. They cover misconfiguration and the explicit
``Operation.call`` entry point that treats invalid input as exceptional.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional


class OperationError(Exception):
    """Base class for operation level errors (user-presentable)."""

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message


class InvalidOperation(OperationError):
    """Raised by ``Operation.call`` when the contract rejects the input."""

    def __init__(self, operation: Any, errors: Optional[Dict[str, List[str]]] = None):
        self.operation = operation
        self.errors: Dict[str, List[str]] = dict(errors or {})
        fields = ", ".join(sorted(self.errors)) or "input"
        super().__init__("INVALID_OPERATION", f"{type(operation).__name__} rejected {fields}")


class RecordNotFound(OperationError):
    """Model lookup failed during operation setup."""

    def __init__(self, model_name: str, key: Any):
        super().__init__("NOT_FOUND", f"{model_name} {key!r} not found")
        self.model_name = model_name
        self.key = key


class ControllerConfigError(OperationError):
    """Controller wiring is incomplete (missing model key, responder, ...)."""

    def __init__(self, message: str):
        super().__init__("CONTROLLER_CONFIG", message)


__all__ = [
    "ControllerConfigError",
    "InvalidOperation",
    "OperationError",
    "RecordNotFound",
]
