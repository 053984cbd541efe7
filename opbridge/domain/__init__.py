"""Domain package exports for value objects, ports and errors."""

from .entities import OperationResult, RequestContext, params_snapshot
from .errors import ControllerConfigError, InvalidOperation, OperationError, RecordNotFound
from .naming import (
    collection_name,
    location_for,
    model_key_for,
    namespace_parts,
    resource_path,
    underscore,
)
from .ports import (
    ContractPort,
    ErrorMap,
    Namespace,
    OperationPort,
    OperationTypePort,
    Params,
    ResponderPort,
    SuccessPolicy,
)

__all__ = [
    "ContractPort",
    "ControllerConfigError",
    "ErrorMap",
    "InvalidOperation",
    "Namespace",
    "OperationError",
    "OperationPort",
    "OperationResult",
    "OperationTypePort",
    "Params",
    "RecordNotFound",
    "RequestContext",
    "ResponderPort",
    "SuccessPolicy",
    "collection_name",
    "location_for",
    "model_key_for",
    "namespace_parts",
    "params_snapshot",
    "resource_path",
    "underscore",
]
