"""Comment concept: model, in-memory store, contract and operations.

The store is process-local and guarded by a lock like the other registries
of the REST service; ``COMMENTS.clear()`` resets it between tests.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from opbridge import Contract, Operation, RecordNotFound
from opbridge.domain.ports import Params
from opbridge.operations import nested


# ---------- Model ----------
@dataclass
class Comment:
    id: Optional[int] = None
    body: Optional[str] = None
    author: Optional[str] = None
    weight: int = 0


class CommentStore:
    """Thread-safe id -> Comment registry."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._rows: Dict[int, Comment] = {}
        self._next_id = 1

    def save(self, comment: Comment) -> Comment:
        with self._lock:
            if comment.id is None:
                comment.id = self._next_id
                self._next_id += 1
            self._rows[comment.id] = replace(comment)
        return comment

    def find(self, comment_id: Any) -> Comment:
        key = _coerce_id(comment_id)
        with self._lock:
            row = self._rows.get(key) if key is not None else None
            if row is None:
                raise RecordNotFound("Comment", comment_id)
            return replace(row)

    def all(self) -> List[Comment]:
        with self._lock:
            return [replace(self._rows[k]) for k in sorted(self._rows)]

    def clear(self) -> None:
        with self._lock:
            self._rows.clear()
            self._next_id = 1


def _coerce_id(value: Any) -> Optional[int]:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


COMMENTS = CommentStore()


# ---------- Contract / representer ----------
class CommentSchema(BaseModel):
    body: str = Field(..., min_length=1, max_length=500)
    author: str = Field("", max_length=80)
    weight: int = Field(0, ge=0, le=10)


class CommentRepresenter(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: Optional[int] = None
    body: Optional[str] = None
    author: Optional[str] = None
    weight: Optional[int] = None


class CommentContract(Contract):
    schema = CommentSchema
    prepopulators = {"author": lambda contract: "anonymous"}


# ---------- Operations ----------
class CreateComment(Operation):
    model_class = Comment
    contract_class = CommentContract
    representer_class = CommentRepresenter

    def process(self, params: Params) -> None:
        self.validate(nested(params, "comment"), on_success=self._persist)

    def _persist(self, contract: Contract) -> None:
        self.model = COMMENTS.save(contract.sync())


class UpdateComment(CreateComment):
    def model_for(self, params: Params) -> Comment:
        return COMMENTS.find(params.get("id"))


class ShowComment(Operation):
    model_class = Comment
    representer_class = CommentRepresenter

    def model_for(self, params: Params) -> Comment:
        return COMMENTS.find(params.get("id"))


__all__ = [
    "COMMENTS",
    "Comment",
    "CommentContract",
    "CommentRepresenter",
    "CommentSchema",
    "CommentStore",
    "CreateComment",
    "ShowComment",
    "UpdateComment",
]
