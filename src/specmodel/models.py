"""Canonical enumerations and Pydantic configuration models for specmodel.

The models fall into two groups:

**Vocabulary enums** -- shared by the parser, the type graph and the
serializer: :class:`HTTPMethod`, :class:`ParameterLocation`,
:class:`TypeKind`, :class:`PrimitiveKind`, :class:`ContentType` and
:class:`FieldRequirement`.

**Build configuration** -- :class:`FieldModification` and
:class:`BuildConfig`, the single structured value a caller hands to
:class:`~specmodel.builder.pipeline.ModelBuilder`. It is usually loaded from
a YAML or JSON rules file by :func:`~specmodel.config.load_build_config`;
unknown keys are rejected so that typos in a rules file surface immediately.

The type graph itself (``Type``, ``Field``, ``Handler``, ``Module``) lives in
:mod:`specmodel.builder.graph` because its nodes compare by identity, which
Pydantic models do not.
"""

from __future__ import annotations

import enum
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_PAGE_INDEX_CANDIDATES: tuple[str, ...] = ("page_index", "page_num")
"""Query parameter names tried, in order, for the page index of a listing."""

DEFAULT_PAGE_SIZE_CANDIDATES: tuple[str, ...] = ("page_size", "page_num")
"""Query parameter names tried, in order, for the page size of a listing."""


# --- Vocabulary ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised by OpenAPI 3.x path-item objects.

    Values are upper-case because :attr:`~specmodel.builder.graph.Handler.method`
    stores the wire form.
    """

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"
    TRACE = "TRACE"


class ParameterLocation(str, enum.Enum):
    """Locations where an API parameter can appear, per OpenAPI ``in`` field."""

    QUERY = "query"
    HEADER = "header"
    PATH = "path"
    COOKIE = "cookie"


class TypeKind(str, enum.Enum):
    """Shape of a :class:`~specmodel.builder.graph.Type` node."""

    PRIMITIVE = "primitive"
    OBJECT = "object"
    ARRAY = "array"
    MAP = "map"


class PrimitiveKind(str, enum.Enum):
    """Primitive taxonomy used for ``primitive`` kind types."""

    INT = "int"
    FLOAT = "float"
    STRING = "string"
    BOOL = "bool"
    BINARY = "binary"
    UNKNOWN = "unknown"


class ContentType(str, enum.Enum):
    """How a handler transmits its request body."""

    STRUCTURED = "structured"
    FILE_UPLOAD = "file-upload"


class FieldRequirement(str, enum.Enum):
    """Requirement override applied to a field by the rule engine."""

    UNCHANGED = "unchanged"
    REQUIRED = "required"
    OPTIONAL = "optional"


# --- Build configuration ---


class FieldModification(BaseModel):
    """Override for one field of one named object type.

    Example (YAML)::

        change_fields:
          File:
            id:
              requirement: required
            purpose:
              default: "assistants"
    """

    model_config = ConfigDict(extra="forbid")

    requirement: FieldRequirement = Field(
        default=FieldRequirement.UNCHANGED,
        description="Force the field required or optional",
    )
    default: Any = Field(
        default=None, description="Literal default to set; None leaves it untouched"
    )


class BuildConfig(BaseModel):
    """Every rule and knob consumed by the model builder.

    Rules are applied in the fixed order documented in
    :mod:`specmodel.builder.rules`; module assignment happens afterwards and
    therefore sees renamed types and handlers.

    ``unnamed_response_namer`` is the only field that cannot come from a
    rules file. When it is not set but ``unnamed_response_suffix`` is, the
    builder names every anonymous response without a ``data`` envelope
    ``<handler name><suffix>``.

    Example::

        BuildConfig(
            rename_types={"SpacePublishedBotsInfo": "_PrivateListBotsData"},
            handler_ordering={"files": ["UploadFileOpen", "RetrieveFileOpen"]},
            unnamed_response_suffix="Resp",
        )
    """

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    type_module_map: dict[str, str] = Field(
        default_factory=dict, description="Named type -> module it belongs to"
    )
    handler_module_map: dict[str, str] = Field(
        default_factory=dict,
        description="operationId -> module, overriding the operation's tags",
    )
    unnamed_response_namer: Optional[Callable[[Any], Optional[str]]] = Field(
        default=None,
        exclude=True,
        description="Called with each handler whose response type is anonymous; "
        "returns the name to promote it under, or None to leave it anonymous",
    )
    unnamed_response_suffix: Optional[str] = Field(
        default=None,
        description="Suffix for the built-in namer used when no callback is set",
    )
    change_response_types: dict[str, str] = Field(
        default_factory=dict, description="Handler name -> named response type"
    )
    rename_types: dict[str, str] = Field(
        default_factory=dict, description="Old type name -> new type name"
    )
    rename_handlers: dict[str, str] = Field(
        default_factory=dict, description="Old handler name -> new handler name"
    )
    change_fields: dict[str, dict[str, FieldModification]] = Field(
        default_factory=dict, description="Type name -> field name -> modification"
    )
    handler_ordering: dict[str, list[str]] = Field(
        default_factory=dict, description="Module name -> handler names in order"
    )
    page_index_candidates: list[str] = Field(
        default_factory=lambda: list(DEFAULT_PAGE_INDEX_CANDIDATES)
    )
    page_size_candidates: list[str] = Field(
        default_factory=lambda: list(DEFAULT_PAGE_SIZE_CANDIDATES)
    )
    success_status: str = Field(
        default="200", description="Response status whose body becomes the response type"
    )
    field_order_extension: str = Field(
        default="x-order", description="Schema extension listing property order"
    )
    enum_names_extension: str = Field(
        default="x-enum-names", description="Schema extension naming enum literals"
    )
    walk_map_values: bool = Field(
        default=True,
        description="Follow map value types during module assignment and sorting",
    )
