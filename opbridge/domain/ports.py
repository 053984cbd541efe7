from __future__ import annotations
from typing import (
    Any,
    Callable,
    Dict,
    List,
    MutableMapping,
    Optional,
    Protocol,
    Sequence,
    Tuple,
    Union,
    TYPE_CHECKING,
)

if TYPE_CHECKING:  # pragma: no cover
    from starlette.responses import Response

    from .entities import RequestContext

Params = MutableMapping[str, Any]
Namespace = Union[str, Sequence[str], None]
ErrorMap = Dict[str, List[str]]


# ---- Ports (capabilities the controller relies on) ----
class ContractPort(Protocol):
    """Validation/coercion object owned by an operation."""

    errors: ErrorMap

    def prepopulate(self) -> Any: ...


class OperationPort(Protocol):
    """One business transaction after setup (and possibly processing)."""

    model: Any
    contract: Optional[ContractPort]


class OperationTypePort(Protocol):
    """Class-level entry points used by the controller verbs.

    ``model_key`` / ``model_class`` are optional; ``respond`` needs one of
    them to know where the raw request body goes.
    """

    def run(self, params: Params) -> Tuple[bool, OperationPort]: ...  # full invocation
    def present(self, params: Params) -> OperationPort: ...  # setup only


class ResponderPort(Protocol):
    """Turns an operation into an HTTP response via content negotiation."""

    def respond(
        self,
        operation: OperationPort,
        *,
        ok: bool,
        request: "RequestContext",
        namespace: Namespace = None,
    ) -> "Response": ...


SuccessPolicy = Callable[[bool, OperationPort], bool]
