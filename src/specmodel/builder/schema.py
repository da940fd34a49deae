"""Convert raw OpenAPI schema nodes into :class:`~specmodel.builder.graph.Type` nodes.

:class:`SchemaConverter` walks schema dicts recursively and produces the type
graph. Named component schemas become registered, shared types; inline
schemas become anonymous types owned by their parent.

Identity rules:

* A ``$ref`` to ``#/components/schemas/<Name>`` always yields the one type
  registered under ``<Name>``. If that component has not been converted yet
  it is converted on the spot.
* A named type is registered *before* its fields are converted, so a schema
  that refers to itself (directly or through other components) resolves to
  the object under construction instead of recursing forever. Such cycles
  are rejected later, when modules are sorted.

Side-channel extensions read from schemas (names are configurable through
:class:`~specmodel.models.BuildConfig`):

* ``x-order`` -- property names in the order fields should be emitted.
  Properties missing from the list are omitted.
* ``x-enum-names`` -- display names for ``enum`` literals, zipped by
  position; ignored when its length differs from the literal count.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from specmodel.builder.classifier import classify_kind, classify_primitive, declared_type
from specmodel.builder.graph import EnumValue, Field, Type
from specmodel.builder.registry import TypeRegistry
from specmodel.exceptions import ConversionError
from specmodel.models import BuildConfig, TypeKind
from specmodel.parser.resolver import is_schema_ref, ref_name, resolve_pointer

logger = logging.getLogger(__name__)


def schema_description(schema: Any) -> str:
    """Return the human-readable label of a schema: its title, else its description."""
    if not isinstance(schema, dict):
        return ""
    return schema.get("title") or schema.get("description") or ""


class SchemaConverter:
    """Build :class:`~specmodel.builder.graph.Type` nodes for one document.

    Args:
        document: The raw OpenAPI document (``$ref`` pointers intact).
        registry: Registry receiving every named type.
        config: Build configuration (extension names).
    """

    def __init__(
        self,
        document: dict[str, Any],
        registry: TypeRegistry,
        config: Optional[BuildConfig] = None,
    ) -> None:
        self._document = document
        self._registry = registry
        self._config = config or BuildConfig()

    @property
    def component_schemas(self) -> dict[str, Any]:
        """The ``components/schemas`` mapping of the document (possibly empty)."""
        components = self._document.get("components") or {}
        return components.get("schemas") or {}

    def convert_components(self) -> None:
        """Convert every component schema, in document order."""
        for name in self.component_schemas:
            if name not in self._registry:
                self.convert_named(name)

    def convert_named(self, name: str) -> Type:
        """Return the named type for component *name*, converting it on first use.

        Raises:
            ConversionError: If the component is missing, ``null``, or cannot
                be converted.
        """
        existing = self._registry.find(name)
        if existing is not None:
            return existing

        schemas = self.component_schemas
        if name not in schemas:
            raise ConversionError(f"Schema '{name}' not found in components")
        schema = schemas[name]
        if schema is None:
            raise ConversionError(f"Schema '{name}' is null")

        try:
            return self.convert(schema, name=name, is_named=True)
        except ConversionError as exc:
            raise ConversionError(f"Failed to convert schema '{name}': {exc}") from exc

    def convert(self, schema: Any, name: str = "", is_named: bool = False) -> Type:
        """Convert one schema node.

        Args:
            schema: The raw schema dict, possibly a Reference Object.
            name: Name to register the type under when *is_named* is set.
            is_named: Whether the result is a registered, shareable type.

        Raises:
            ConversionError: If the schema is ``null``, not an object, or a
                reference cannot be resolved.
        """
        if schema is None:
            raise ConversionError(f"Schema for '{name or '<anonymous>'}' is null")
        if not isinstance(schema, dict):
            raise ConversionError(
                f"Schema for '{name or '<anonymous>'}' must be an object "
                f"(got {type(schema).__name__})"
            )

        if "$ref" in schema:
            ref = schema["$ref"]
            if is_schema_ref(ref):
                return self.convert_named(ref_name(ref))
            return self.convert(resolve_pointer(ref, self._document), name, is_named)

        all_of = schema.get("allOf")
        if isinstance(all_of, list) and len(all_of) == 1 and not schema.get("properties"):
            member = all_of[0]
            if is_named and isinstance(member, dict) and "$ref" not in member:
                labels = {k: schema[k] for k in ("title", "description") if schema.get(k)}
                return self.convert({**member, **labels}, name, is_named)
            return self.convert(member)

        ty = Type(kind=classify_kind(schema), description=schema_description(schema))
        if is_named:
            ty.name = name
            self._registry.register(ty)

        if ty.kind == TypeKind.MAP:
            ty.value_type = self._convert_child(schema["additionalProperties"], "map value")
        elif ty.kind == TypeKind.ARRAY:
            if schema.get("items") is not None:
                ty.element_type = self._convert_child(schema["items"], "array element")
        elif ty.kind == TypeKind.OBJECT:
            ty.fields = self._convert_fields(schema)
        else:
            ty.primitive_kind = classify_primitive(declared_type(schema), schema.get("format"))
            ty.enum_values = self._convert_enum(schema, name)

        if not is_named:
            ty.description = ""
        return ty

    def _convert_child(self, schema: Any, role: str) -> Type:
        try:
            return self.convert(schema)
        except ConversionError as exc:
            raise ConversionError(f"Failed to convert {role} type: {exc}") from exc

    def _convert_fields(self, schema: dict[str, Any]) -> list[Field]:
        """Convert ``properties`` to fields, honouring the field-order extension."""
        properties = schema.get("properties") or {}
        required = set(schema.get("required") or [])

        order = schema.get(self._config.field_order_extension)
        if order is not None:
            names = [str(n) for n in order if n in properties]
        else:
            names = list(properties)

        fields: list[Field] = []
        for prop_name in names:
            prop = properties[prop_name]
            try:
                field_type = self.convert(prop)
            except ConversionError as exc:
                raise ConversionError(f"Failed to convert field '{prop_name}': {exc}") from exc
            fields.append(
                Field(
                    name=prop_name,
                    type=field_type,
                    description=self._property_description(prop),
                    required=prop_name in required,
                )
            )
        return fields

    def _property_description(self, prop: dict[str, Any]) -> str:
        """Describe a property; a bare ``$ref`` borrows the referenced schema's label."""
        own = schema_description(prop)
        if own or "$ref" not in prop:
            return own
        return schema_description(resolve_pointer(prop["$ref"], self._document))

    def _convert_enum(self, schema: dict[str, Any], name: str) -> list[EnumValue]:
        literals = schema.get("enum")
        if not literals:
            return []

        values = [EnumValue(value=literal) for literal in literals]
        names = schema.get(self._config.enum_names_extension)
        if isinstance(names, list):
            if len(names) == len(values):
                for value, display in zip(values, names):
                    value.name = str(display)
            else:
                logger.warning(
                    "Ignoring %s on '%s': %d names for %d values",
                    self._config.enum_names_extension,
                    name or "<anonymous>",
                    len(names),
                    len(values),
                )
        return values
