"""Tests for specmodel.builder.registry."""

from __future__ import annotations

import pytest

from specmodel.builder.graph import Type
from specmodel.builder.registry import TypeRegistry
from specmodel.exceptions import ConfigurationError
from specmodel.models import TypeKind


def _obj(name: str) -> Type:
    return Type(kind=TypeKind.OBJECT, name=name)


@pytest.fixture
def registry() -> TypeRegistry:
    reg = TypeRegistry()
    for name in ("A", "B", "C"):
        reg.register(_obj(name))
    return reg


class TestRegister:
    def test_marks_named(self) -> None:
        reg = TypeRegistry()
        ty = reg.register(_obj("Pet"))
        assert ty.is_named
        assert "Pet" in reg
        assert reg.get("Pet") is ty

    def test_same_object_twice_is_noop(self) -> None:
        reg = TypeRegistry()
        ty = _obj("Pet")
        reg.register(ty)
        reg.register(ty)
        assert len(reg) == 1

    def test_duplicate_name_raises(self) -> None:
        reg = TypeRegistry()
        reg.register(_obj("Pet"))
        with pytest.raises(ConfigurationError, match="already registered"):
            reg.register(_obj("Pet"))

    def test_empty_name_raises(self) -> None:
        with pytest.raises(ConfigurationError, match="without a name"):
            TypeRegistry().register(Type(kind=TypeKind.OBJECT))

    def test_iteration_is_registration_order(self, registry: TypeRegistry) -> None:
        assert [ty.name for ty in registry] == ["A", "B", "C"]
        assert registry.names() == ["A", "B", "C"]


class TestLookup:
    def test_find_missing_is_none(self, registry: TypeRegistry) -> None:
        assert registry.find("Z") is None

    def test_get_missing_raises(self, registry: TypeRegistry) -> None:
        with pytest.raises(ConfigurationError, match="Type 'Z' not found"):
            registry.get("Z")


class TestRenameAll:
    """Batch renames are validated before anything changes."""

    def test_renames_keep_order(self, registry: TypeRegistry) -> None:
        b = registry.get("B")
        registry.rename_all({"B": "Bee"})
        assert registry.names() == ["A", "Bee", "C"]
        assert registry.get("Bee") is b
        assert b.name == "Bee"
        assert "B" not in registry

    def test_collision_with_existing_changes_nothing(self, registry: TypeRegistry) -> None:
        with pytest.raises(ConfigurationError, match="'C': type already exists"):
            registry.rename_all({"A": "Alpha", "B": "C"})
        assert registry.names() == ["A", "B", "C"]
        assert registry.get("A").name == "A"

    def test_duplicate_destination_raises(self, registry: TypeRegistry) -> None:
        with pytest.raises(ConfigurationError, match="more than one rename"):
            registry.rename_all({"A": "X", "B": "X"})
        assert registry.names() == ["A", "B", "C"]

    def test_unknown_source_raises(self, registry: TypeRegistry) -> None:
        with pytest.raises(ConfigurationError, match="'Z': type not found"):
            registry.rename_all({"A": "Alpha", "Z": "Zed"})
        assert registry.get("A").name == "A"

    def test_empty_batch_is_noop(self, registry: TypeRegistry) -> None:
        registry.rename_all({})
        assert registry.names() == ["A", "B", "C"]
