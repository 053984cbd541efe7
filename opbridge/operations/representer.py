"""JSON (de)serialization for operation models via pydantic representers."""

from __future__ import annotations

import json
from dataclasses import asdict, is_dataclass
from typing import Any, Dict, Optional, Type, Union

from pydantic import BaseModel


def parse_json(raw: Union[str, bytes], representer: Optional[Type[BaseModel]] = None) -> Dict[str, Any]:
    """Decode a raw request body into a plain attribute mapping.

    Raises:
        ValueError: Body is not valid JSON, not an object, or violates the
            representer (``pydantic.ValidationError`` is a ``ValueError``).
    """
    if representer is not None:
        return representer.model_validate_json(raw).model_dump(exclude_unset=True)
    data = json.loads(raw)
    if not isinstance(data, dict):
        raise ValueError(f"expected a JSON object, got {type(data).__name__}")
    return data


def render_json(model: Any, representer: Optional[Type[BaseModel]] = None) -> str:
    """Serialize a model instance through its representer."""
    if representer is not None:
        return representer.model_validate(model, from_attributes=True).model_dump_json()
    if isinstance(model, BaseModel):
        return model.model_dump_json()
    if is_dataclass(model) and not isinstance(model, type):
        return json.dumps(asdict(model), default=str)
    return json.dumps(model if isinstance(model, (dict, list)) else vars(model), default=str)


__all__ = ["parse_json", "render_json"]
