"""Tests for specmodel.parser.resolver."""

from __future__ import annotations

import pytest

from specmodel.exceptions import ConversionError
from specmodel.parser.resolver import deref, is_ref, is_schema_ref, ref_name, resolve_pointer

DOC = {
    "components": {
        "schemas": {"Pet": {"type": "object"}, "a/b": {"type": "string"}},
        "parameters": {
            "Limit": {"name": "limit", "in": "query", "schema": {"type": "integer"}},
            "Alias": {"$ref": "#/components/parameters/Limit"},
            "LoopA": {"$ref": "#/components/parameters/LoopB"},
            "LoopB": {"$ref": "#/components/parameters/LoopA"},
        },
        "examples": {"list": [{"x": 1}, {"x": 2}]},
    }
}


class TestRefName:
    def test_last_segment(self) -> None:
        assert ref_name("#/components/schemas/Pet") == "Pet"

    def test_unescapes(self) -> None:
        assert ref_name("#/components/schemas/a~1b") == "a/b"

    def test_tilde_escape(self) -> None:
        assert ref_name("#/components/schemas/x~0y") == "x~y"


class TestIsRef:
    def test_reference_object(self) -> None:
        assert is_ref({"$ref": "#/x"})

    def test_plain_schema(self) -> None:
        assert not is_ref({"type": "string"})
        assert not is_ref("#/x")

    def test_schema_ref(self) -> None:
        assert is_schema_ref("#/components/schemas/Pet")
        assert not is_schema_ref("#/components/parameters/Limit")
        assert not is_schema_ref("#/components/schemas/Pet/properties/id")


class TestResolvePointer:
    """Test JSON pointer navigation."""

    def test_resolves_component(self) -> None:
        assert resolve_pointer("#/components/schemas/Pet", DOC) == {"type": "object"}

    def test_resolves_escaped_segment(self) -> None:
        assert resolve_pointer("#/components/schemas/a~1b", DOC) == {"type": "string"}

    def test_resolves_array_index(self) -> None:
        assert resolve_pointer("#/components/examples/list/1", DOC) == {"x": 2}

    def test_missing_key_raises(self) -> None:
        with pytest.raises(ConversionError, match="key 'Nope' not found"):
            resolve_pointer("#/components/schemas/Nope", DOC)

    def test_bad_index_raises(self) -> None:
        with pytest.raises(ConversionError, match="invalid array index"):
            resolve_pointer("#/components/examples/list/7", DOC)

    def test_external_ref_raises(self) -> None:
        with pytest.raises(ConversionError, match="External"):
            resolve_pointer("other.yaml#/Pet", DOC)


class TestDeref:
    """Test following $ref chains."""

    def test_non_ref_passes_through(self) -> None:
        value = {"name": "x"}
        assert deref(value, DOC) is value

    def test_follows_chain(self) -> None:
        result = deref({"$ref": "#/components/parameters/Alias"}, DOC)
        assert result["name"] == "limit"

    def test_loop_raises(self) -> None:
        with pytest.raises(ConversionError, match="Circular"):
            deref({"$ref": "#/components/parameters/LoopA"}, DOC)
