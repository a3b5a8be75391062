"""Tests for PairElement, PairStore and the pydantic models."""

import pytest
from pydantic import ValidationError
from macroeval.lib.exceptions import MacroConfigError, MacroError
from macroeval.models.dataModel import (
    EvaluationContext,
    EvaluationResult,
    PairElement,
    PairStore,
    StoreDocument,
)


def test_pair_element_value_is_mutable():
    element = PairElement("Fork Count", "{%Philosopher Count%}")
    element.value = "5"
    assert element.value == "5"
    assert element.identifier == "Fork Count"
    assert element.key == "FORK COUNT"


def test_pair_element_pair_conversion():
    element = PairElement.from_pair(("A", "1"))
    assert element.to_pair() == ("A", "1")
    assert element == PairElement("A", "1")
    assert element != PairElement("a", "1")
    assert hash(element) == hash(PairElement("A", "1"))


def test_empty_pair_element_refuses_changes():
    assert PairElement.EMPTY.identifier is None
    assert PairElement.EMPTY.value is None
    with pytest.raises(MacroError):
        PairElement.EMPTY.value = "x"


def test_pair_element_repr():
    assert repr(PairElement("A", None)) == "PairElement('A', None)"
    assert str(PairElement("A", "1")) == "(A, 1)"


def test_pair_store_is_case_insensitive():
    store = PairStore({"Philosopher Count": "5"})
    assert store["philosopher count"] == "5"
    assert "PHILOSOPHER COUNT" in store
    store["PHILOSOPHER count"] = "7"
    assert store["Philosopher Count"] == "7"
    assert list(store) == ["Philosopher Count"]
    assert len(store) == 1


def test_pair_store_delete_and_missing():
    store = PairStore({"A": "1", "B": None})
    del store["a"]
    assert list(store) == ["B"]
    assert store["b"] is None
    with pytest.raises(KeyError):
        store["A"]


def test_pair_store_rejects_case_duplicates():
    with pytest.raises(MacroConfigError) as exc_info:
        PairStore({"fork": "1", "FORK": "2"})
    assert exc_info.value.identifier == "FORK"


def test_pair_store_element_keeps_casing():
    store = PairStore({"Fork Count": "5"})
    assert store.element("FORK COUNT") == PairElement("Fork Count", "5")


def test_evaluation_context_defaults():
    ctx = EvaluationContext(PairElement("A", "1"))
    assert ctx.handled is False
    assert ctx.pass_count == 0


def test_evaluation_result_model():
    result = EvaluationResult(text="3")
    assert result.success
    assert result.error is None


def test_store_document_parses_json():
    document = StoreDocument.model_validate_json('{"values": {"A": "1", "B": null}}')
    assert document.values == {"A": "1", "B": None}
    with pytest.raises(ValidationError):
        StoreDocument.model_validate_json('{"values": {"A": 1.5}}')
