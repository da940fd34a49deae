"""Tests for specmodel.serialize."""

from __future__ import annotations

import json
from typing import Any

from specmodel.builder.graph import EnumValue, Field, Handler, Module, Type
from specmodel.builder.pipeline import build_modules
from specmodel.models import PrimitiveKind, TypeKind
from specmodel.serialize import (
    dumps,
    field_to_dict,
    handler_to_dict,
    module_to_dict,
    modules_to_dict,
    type_ref,
    type_to_dict,
)


class TestTypeRef:
    def test_named_is_reference(self) -> None:
        ty = Type(kind=TypeKind.OBJECT, name="Pet", is_named=True)
        assert type_ref(ty) == {"ref": "Pet"}

    def test_anonymous_is_inlined(self) -> None:
        ty = Type(kind=TypeKind.ARRAY, element_type=Type(kind=TypeKind.PRIMITIVE, primitive_kind=PrimitiveKind.INT))
        assert type_ref(ty) == {
            "kind": "array",
            "element": {"kind": "primitive", "primitive": "int"},
        }

    def test_none(self) -> None:
        assert type_ref(None) is None


class TestTypeToDict:
    def test_enum(self) -> None:
        ty = Type(
            kind=TypeKind.PRIMITIVE,
            name="Status",
            is_named=True,
            module="pets",
            description="Sale status",
            primitive_kind=PrimitiveKind.STRING,
            enum_values=[EnumValue("available", "Available")],
        )
        assert type_to_dict(ty) == {
            "name": "Status",
            "module": "pets",
            "description": "Sale status",
            "kind": "primitive",
            "primitive": "string",
            "enum": [{"value": "available", "name": "Available"}],
        }

    def test_map(self) -> None:
        value = Type(kind=TypeKind.OBJECT, name="V", is_named=True)
        ty = Type(kind=TypeKind.MAP, name="Lookup", is_named=True, value_type=value)
        assert type_to_dict(ty)["value"] == {"ref": "V"}


class TestFieldToDict:
    def test_default_only_when_set(self) -> None:
        prim = Type(kind=TypeKind.PRIMITIVE, primitive_kind=PrimitiveKind.STRING)
        assert "default" not in field_to_dict(Field(name="a", type=prim))
        assert field_to_dict(Field(name="a", type=prim, default="x"))["default"] == "x"


class TestHandlerToDict:
    def test_inferred_facts(self, petstore_raw: dict[str, Any]) -> None:
        modules = build_modules(petstore_raw)
        data = handler_to_dict(modules["pets"].get_handler("ListPets"))
        assert data["method"] == "GET"
        assert data["content_type"] == "structured"
        assert [p["name"] for p in data["query_params"]] == ["page_num", "page_size"]
        assert data["actual_response_body"] == {"ref": "PetPage"}
        assert data["page_info"] == {
            "item_type": {"ref": "Pet"},
            "page_index": "page_num",
            "page_size": "page_size",
        }
        assert data["status_only"] is False

    def test_status_only(self, petstore_raw: dict[str, Any]) -> None:
        modules = build_modules(petstore_raw)
        data = handler_to_dict(modules["pets"].get_handler("CreatePet"))
        assert data["status_only"] is True
        assert data["page_info"] is None
        assert data["request_body"] == {"ref": "NewPet"}

    def test_bare_handler(self) -> None:
        data = handler_to_dict(Handler(name="Ping", path="/ping", method="GET"))
        assert data["request_body"] is None
        assert data["response_body"] is None
        assert data["actual_response_body"] is None
        assert data["status_only"] is False


class TestModulesToDict:
    def test_module_layout(self) -> None:
        module = Module(name="m")
        assert module_to_dict(module) == {"name": "m", "types": [], "handlers": []}

    def test_accepts_mapping_or_iterable(self, petstore_raw: dict[str, Any]) -> None:
        modules = build_modules(petstore_raw)
        from_dict = modules_to_dict(modules)
        from_list = modules_to_dict(list(modules.values()))
        assert from_dict == from_list
        assert [m["name"] for m in from_dict["modules"]] == ["default", "files", "pets"]

    def test_dumps_is_valid_json(self, petstore_raw: dict[str, Any]) -> None:
        text = dumps(modules_to_dict(build_modules(petstore_raw)))
        assert text.endswith("\n")
        assert json.loads(text)["modules"][2]["types"][0]["name"] == "Category"
