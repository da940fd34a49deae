"""Classify raw schema nodes into the type taxonomy.

Maps an OpenAPI schema's declared ``type`` (and ``format``) to a
:class:`~specmodel.models.TypeKind` and, for primitives, a
:class:`~specmodel.models.PrimitiveKind`.

**Classification rules**, in order of precedence:

1. ``additionalProperties`` given as a schema makes a **map**, whatever the
   declared type. ``additionalProperties: true`` does not.
2. ``type: array`` makes an **array**.
3. ``type: object`` makes an **object**, and so does an untyped node that
   declares ``properties``.
4. Everything else is a **primitive**: ``integer`` -> ``int``, ``number`` ->
   ``float``, ``string`` -> ``string`` (``binary`` when ``format: binary``),
   ``boolean`` -> ``bool``, anything else -> ``unknown``.

OpenAPI 3.1 type arrays (``["string", "null"]``) use their first non-null
entry.
"""

from __future__ import annotations

from typing import Any, Optional

from specmodel.models import PrimitiveKind, TypeKind

_PRIMITIVE_MAP: dict[str, PrimitiveKind] = {
    "integer": PrimitiveKind.INT,
    "number": PrimitiveKind.FLOAT,
    "string": PrimitiveKind.STRING,
    "boolean": PrimitiveKind.BOOL,
}

_FORMAT_OVERRIDES: dict[tuple[str, str], PrimitiveKind] = {
    ("string", "binary"): PrimitiveKind.BINARY,
}


def declared_type(schema: dict[str, Any]) -> Optional[str]:
    """Return the declared ``type`` of *schema*, or ``None`` when absent.

    Handles OpenAPI 3.1 type arrays by returning the first non-null entry.
    """
    type_value = schema.get("type")
    if isinstance(type_value, list):
        non_null = [t for t in type_value if t != "null"]
        return str(non_null[0]) if non_null else None
    if type_value is None:
        return None
    return str(type_value)


def is_map_schema(schema: dict[str, Any]) -> bool:
    """Return ``True`` when *schema* declares a typed ``additionalProperties``."""
    return isinstance(schema.get("additionalProperties"), dict)


def classify_kind(schema: dict[str, Any]) -> TypeKind:
    """Return the :class:`~specmodel.models.TypeKind` of a raw schema node.

    Example::

        >>> classify_kind({"type": "object", "additionalProperties": {"type": "integer"}})
        <TypeKind.MAP: 'map'>
        >>> classify_kind({"properties": {"id": {"type": "string"}}})
        <TypeKind.OBJECT: 'object'>
    """
    if is_map_schema(schema):
        return TypeKind.MAP

    type_name = declared_type(schema)
    if type_name == "array":
        return TypeKind.ARRAY
    if type_name == "object":
        return TypeKind.OBJECT
    if type_name is None and isinstance(schema.get("properties"), dict):
        return TypeKind.OBJECT
    return TypeKind.PRIMITIVE


def classify_primitive(type_name: Optional[str], schema_format: Optional[str] = None) -> PrimitiveKind:
    """Map an OpenAPI primitive ``type`` and ``format`` to a :class:`~specmodel.models.PrimitiveKind`.

    Example::

        >>> classify_primitive("string", "binary")
        <PrimitiveKind.BINARY: 'binary'>
        >>> classify_primitive("integer", "int64")
        <PrimitiveKind.INT: 'int'>
        >>> classify_primitive(None)
        <PrimitiveKind.UNKNOWN: 'unknown'>
    """
    if type_name is None:
        return PrimitiveKind.UNKNOWN
    if schema_format:
        override = _FORMAT_OVERRIDES.get((type_name, schema_format))
        if override is not None:
            return override
    return _PRIMITIVE_MAP.get(type_name, PrimitiveKind.UNKNOWN)
