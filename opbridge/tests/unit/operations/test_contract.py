from __future__ import annotations

import types

import pytest
from pydantic import BaseModel, Field

from opbridge.operations import Contract


class NoteSchema(BaseModel):
    text: str = Field(..., min_length=2)
    author: str = ""


class NoteContract(Contract):
    schema = NoteSchema
    prepopulators = {"author": lambda contract: "guest"}


def _note(**attrs):
    base = {"text": None, "author": None}
    base.update(attrs)
    return types.SimpleNamespace(**base)


def test_reads_values_from_model():
    contract = NoteContract(_note(text="hello", author="ann"))
    assert contract.values == {"text": "hello", "author": "ann"}
    assert contract["text"] == "hello"
    assert NoteContract.fields() == ("text", "author")


def test_prepopulate_fills_only_blank_fields():
    filled = NoteContract(_note(author="  ")).prepopulate()
    kept = NoteContract(_note(author="ann")).prepopulate()
    assert filled.values["author"] == "guest"
    assert kept.values["author"] == "ann"
    assert filled.prepopulated is True


def test_validate_merges_and_does_not_touch_model_until_sync():
    model = _note(text="old", author="ann")
    contract = NoteContract(model)

    assert contract.validate({"text": "new text", "ignored": 1}) is True
    assert model.text == "old"
    assert contract.values == {"text": "new text", "author": "ann"}

    assert contract.sync() is model
    assert model.text == "new text"


def test_validate_records_field_errors():
    contract = NoteContract(_note())
    assert contract.validate({"text": "x"}) is False
    assert list(contract.errors) == ["text"]
    assert contract.values["text"] == "x"
    assert contract.error_messages()[0].startswith("text ")


def test_validate_rejects_non_mapping():
    contract = NoteContract(_note())
    assert contract.validate(["text"]) is False
    assert contract.errors == {"base": ["expected an object, got list"]}


def test_successful_validate_clears_previous_errors():
    contract = NoteContract(_note())
    contract.validate({})
    assert contract.errors
    assert contract.validate({"text": "fine"}) is True
    assert contract.errors == {}


def test_contract_requires_schema():
    class _Bare(Contract):
        pass

    with pytest.raises(TypeError):
        _Bare(_note())
