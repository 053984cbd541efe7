"""Success policies deciding whether an operation counts as successful.

Controllers take one of these (or any ``(ok, operation) -> bool`` callable)
so the valid/invalid rule stays with the operation library in use.
"""
from __future__ import annotations

from ..domain.ports import OperationPort


def returned_flag(ok: bool, operation: OperationPort) -> bool:
    """Trust the flag returned by ``OperationType.run``."""
    return bool(ok)


def no_contract_errors(ok: bool, operation: OperationPort) -> bool:
    """Require the flag and an error-free contract."""
    if not ok:
        return False
    contract = getattr(operation, "contract", None)
    return not getattr(contract, "errors", None)


__all__ = ["no_contract_errors", "returned_flag"]
