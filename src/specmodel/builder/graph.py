"""Nodes of the type graph: :class:`Type`, :class:`Field`, :class:`Handler`, :class:`Module`.

These are plain dataclasses declared with ``eq=False`` so that equality and
hashing are by identity. The builder relies on that: two fields that refer
to the same named component hold the *same* :class:`Type` object, and sets
and graphs of types are keyed on that identity rather than on structure.

Ownership follows the shape of the graph. A named type is owned by the
:class:`~specmodel.builder.registry.TypeRegistry`; every other reference to
it (fields, array elements, map values, handlers, modules) is shared. An
anonymous type is referenced from exactly one parent.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator, Optional

from specmodel.models import ContentType, PrimitiveKind, TypeKind


@dataclass(eq=False)
class EnumValue:
    """One enum literal, with its display name when the document supplies one."""

    value: Any
    name: str = ""


@dataclass(eq=False)
class Field:
    """A property of an object type, or a parameter of a handler.

    Attributes:
        name: Wire name, exactly as it appears in the document.
        type: The field's type; shared when named, owned when anonymous.
        description: Title or description of the property schema.
        required: Whether the field must be present.
        default: Literal default set by a rule, or ``None``.
    """

    name: str
    type: Type
    description: str = ""
    required: bool = False
    default: Any = None


@dataclass(eq=False, repr=False)
class Type:
    """A node in the type graph.

    Only the attributes that belong to ``kind`` are populated:
    ``primitive_kind`` and ``enum_values`` for primitives, ``fields`` for
    objects, ``element_type`` for arrays and ``value_type`` for maps.
    """

    kind: TypeKind
    name: str = ""
    description: str = ""
    primitive_kind: Optional[PrimitiveKind] = None
    enum_values: list[EnumValue] = field(default_factory=list)
    fields: list[Field] = field(default_factory=list)
    element_type: Optional[Type] = None
    value_type: Optional[Type] = None
    is_named: bool = False
    module: Optional[str] = None

    def get_field(self, name: str) -> Optional[Field]:
        """Return the field called *name*, or ``None``."""
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def dependencies(self, walk_map_values: bool = True) -> Iterator[Type]:
        """Yield the types this type refers to directly, in declaration order.

        Object fields and array elements are always followed. Map value types
        are followed only when *walk_map_values* is set.
        """
        if self.kind == TypeKind.OBJECT:
            for f in self.fields:
                yield f.type
        elif self.kind == TypeKind.ARRAY:
            if self.element_type is not None:
                yield self.element_type
        elif self.kind == TypeKind.MAP:
            if walk_map_values and self.value_type is not None:
                yield self.value_type

    @property
    def display_name(self) -> str:
        """Name for messages: the type name, or ``<anonymous kind>``."""
        if self.name:
            return self.name
        return f"<anonymous {self.kind.value}>"

    def __repr__(self) -> str:
        named = "named" if self.is_named else "anonymous"
        return f"Type({self.display_name!r}, kind={self.kind.value}, {named})"


@dataclass(eq=False)
class Handler:
    """One API operation (a path + method pair).

    ``response_body`` is the *declared* response shape; use
    :func:`~specmodel.builder.inference.actual_response_body` for the payload
    inside a ``data`` envelope.
    """

    name: str
    path: str
    method: str
    description: str = ""
    content_type: ContentType = ContentType.STRUCTURED
    path_params: list[Field] = field(default_factory=list)
    query_params: list[Field] = field(default_factory=list)
    header_params: list[Field] = field(default_factory=list)
    request_body: Optional[Type] = None
    response_body: Optional[Type] = None

    def parameters(self) -> Iterator[Field]:
        """Yield every parameter: path, then query, then header."""
        yield from self.path_params
        yield from self.query_params
        yield from self.header_params


@dataclass(eq=False)
class Module:
    """A named group of handlers and the named types they use.

    ``types`` is populated by
    :func:`~specmodel.builder.modules.assign_and_sort` with every named type
    the module's handlers reach, in emission order. :meth:`owned_types`
    narrows that to the types assigned to this module.
    """

    name: str
    handlers: list[Handler] = field(default_factory=list)
    types: list[Type] = field(default_factory=list)

    def get_handler(self, name: str) -> Optional[Handler]:
        """Return the handler called *name*, or ``None``."""
        for handler in self.handlers:
            if handler.name == name:
                return handler
        return None

    def owned_types(self) -> list[Type]:
        """Return the types in :attr:`types` whose ``module`` is this module."""
        return [ty for ty in self.types if ty.module == self.name]


@dataclass(eq=False)
class PageInfo:
    """Pagination facts inferred for a list handler.

    Attributes:
        item_type: Element type of the first array field in the payload.
        page_index_name: Query parameter carrying the page index.
        page_size_name: Query parameter carrying the page size.
    """

    item_type: Optional[Type]
    page_index_name: str
    page_size_name: str
