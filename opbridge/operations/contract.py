"""Form/contract objects backed by pydantic schemas.

A contract sits between raw input and a model: it reads the model's current
values, merges validated input over them and only writes back on ``sync``.
"""

from __future__ import annotations

from typing import Any, Callable, ClassVar, Dict, List, Mapping, Optional, Tuple, Type

from pydantic import BaseModel, ValidationError

from ..domain.ports import ErrorMap


def errors_from_validation(exc: ValidationError) -> ErrorMap:
    """Flatten pydantic errors into ``{field: [messages]}``."""
    errors: ErrorMap = {}
    for item in exc.errors():
        loc = ".".join(str(part) for part in item.get("loc", ())) or "base"
        errors.setdefault(loc, []).append(str(item.get("msg", "invalid")))
    return errors


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


class Contract:
    """Validation/coercion object for one model.

    Subclasses set ``schema`` (a pydantic model listing the editable fields)
    and optionally ``prepopulators``, callables filling blank fields before a
    form is rendered.
    """

    schema: ClassVar[Optional[Type[BaseModel]]] = None
    prepopulators: ClassVar[Mapping[str, Callable[["Contract"], Any]]] = {}

    def __init__(self, model: Any) -> None:
        if self.schema is None:
            raise TypeError(f"{type(self).__name__} must define a pydantic schema")
        self.model = model
        self.errors: ErrorMap = {}
        self.values: Dict[str, Any] = {name: getattr(model, name, None) for name in self.fields()}
        self.prepopulated = False

    @classmethod
    def fields(cls) -> Tuple[str, ...]:
        return tuple(cls.schema.model_fields) if cls.schema is not None else ()

    def __getitem__(self, name: str) -> Any:
        return self.values[name]

    def prepopulate(self) -> "Contract":
        """Fill blank fields from ``prepopulators`` ahead of form rendering."""
        for name, fill in self.prepopulators.items():
            if name in self.values and _is_blank(self.values[name]):
                self.values[name] = fill(self)
        self.prepopulated = True
        return self

    def validate(self, data: Any) -> bool:
        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            self.errors = {"base": [f"expected an object, got {type(data).__name__}"]}
            return False

        incoming = {key: value for key, value in data.items() if key in self.values}
        candidate = {**self.values, **incoming}
        payload = {key: value for key, value in candidate.items() if value is not None}
        try:
            validated = self.schema.model_validate(payload)
        except ValidationError as exc:
            self.values = candidate
            self.errors = errors_from_validation(exc)
            return False

        self.values = validated.model_dump()
        self.errors = {}
        return True

    def sync(self) -> Any:
        """Write current values onto the model and return it."""
        for name, value in self.values.items():
            setattr(self.model, name, value)
        return self.model

    def error_messages(self) -> List[str]:
        return [f"{field} {message}" for field, messages in self.errors.items() for message in messages]


__all__ = ["Contract", "errors_from_validation"]
