"""Operation layer: business transactions, their contracts and representers.

Controllers only rely on the class-level ``run``/``present`` entry points and
the ``model``/``contract`` attributes, so any object honouring those ports
works; these base classes are the batteries-included implementation.
"""
from .contract import Contract, errors_from_validation
from .operation import Operation, nested
from .representer import parse_json, render_json

__all__ = [
    "Contract",
    "Operation",
    "errors_from_validation",
    "nested",
    "parse_json",
    "render_json",
]
