from __future__ import annotations

"""Value objects passed between the request layer, controllers and responders."""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

from .ports import ContractPort, OperationPort, Params


@dataclass(frozen=True)
class OperationResult:
    """Fields bound by a controller verb, returned explicitly to the caller."""

    operation: OperationPort
    """The operation instance produced by ``run`` or ``present``."""

    model: Any
    """Domain object exposed by the operation for rendering."""

    contract: Optional[ContractPort]
    """Form/contract owned by the operation, if any."""

    ok: Optional[bool] = None
    """Success flag after the policy was applied; ``None`` for ``present``/``form``."""

    @classmethod
    def bind(cls, operation: OperationPort, ok: Optional[bool] = None) -> "OperationResult":
        return cls(
            operation=operation,
            model=getattr(operation, "model", None),
            contract=getattr(operation, "contract", None),
            ok=ok,
        )


@dataclass
class RequestContext:
    """Per-request view of the incoming HTTP request.

    ``params`` is deliberately mutable: the normalization hook and the
    ``respond`` body rewrite both work on it in place.
    """

    method: str = "GET"
    path: str = "/"
    params: Params = field(default_factory=dict)
    body: str = ""
    content_type: str = ""
    format: str = "html"
    headers: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.method = (self.method or "GET").upper()
        self.format = (self.format or "html").lower()

    @property
    def is_get(self) -> bool:
        return self.method in ("GET", "HEAD")


def params_snapshot(params: Mapping[str, Any]) -> Dict[str, Any]:
    """Shallow copy for logging/debugging without leaking the live mapping."""
    return {str(key): value for key, value in params.items()}


__all__ = ["OperationResult", "RequestContext", "params_snapshot"]
