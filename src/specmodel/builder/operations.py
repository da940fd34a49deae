"""Convert OpenAPI operations into :class:`~specmodel.builder.graph.Handler` records.

:class:`OperationConverter` walks the ``paths`` object in document order and,
for every recognised HTTP method, produces a handler whose parameter, request
and response types come from a shared
:class:`~specmodel.builder.schema.SchemaConverter`.

Conversion rules:

* Path-level parameters are merged with operation-level parameters; the
  operation wins when both declare the same ``name`` and ``in``. Parameter
  objects may be ``$ref`` pointers into ``components/parameters``.
* Parameters are split into path, query and header lists. Cookie parameters
  and unknown locations are dropped.
* The first request-body media type carrying a schema decides the content
  encoding: ``multipart/form-data`` is a file upload, ``application/json``
  (and ``+json`` variants) is structured. Anything else is rejected with
  :class:`~specmodel.exceptions.UnsupportedContentTypeError`.
* The response type is taken from the response under the configured success
  status (``"200"`` by default); the first media type carrying a schema wins.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Iterator, Optional

from specmodel.builder.graph import Field, Handler, Type
from specmodel.builder.schema import SchemaConverter
from specmodel.exceptions import ConversionError, UnsupportedContentTypeError
from specmodel.models import BuildConfig, ContentType, HTTPMethod, ParameterLocation
from specmodel.parser.resolver import deref

logger = logging.getLogger(__name__)

_HTTP_METHODS = frozenset(m.value.lower() for m in HTTPMethod)

_NON_IDENT_RE = re.compile(r"[^A-Za-z0-9]+")

DEFAULT_MODULE = "default"
"""Module for operations that declare no tags."""


def classify_media_type(media_type: str) -> ContentType:
    """Map a request media type to a :class:`~specmodel.models.ContentType`.

    Raises:
        UnsupportedContentTypeError: For anything but JSON or multipart form data.

    Example::

        >>> classify_media_type("application/json; charset=utf-8")
        <ContentType.STRUCTURED: 'structured'>
        >>> classify_media_type("multipart/form-data")
        <ContentType.FILE_UPLOAD: 'file-upload'>
    """
    base = media_type.split(";", 1)[0].strip().lower()
    if base == "multipart/form-data":
        return ContentType.FILE_UPLOAD
    if base == "application/json" or (base.startswith("application/") and base.endswith("+json")):
        return ContentType.STRUCTURED
    raise UnsupportedContentTypeError(f"Unsupported request content type '{media_type}'")


def fallback_handler_name(method: str, path: str) -> str:
    """Derive a handler name for an operation without ``operationId``.

    Example::

        >>> fallback_handler_name("GET", "/pets/{petId}")
        'get_pets_petId'
    """
    slug = _NON_IDENT_RE.sub("_", path).strip("_")
    return f"{method.lower()}_{slug}" if slug else method.lower()


def _first_schema(content: Any) -> Optional[tuple[str, Any]]:
    """Return ``(media_type, schema)`` for the first media type that has a schema."""
    if not isinstance(content, dict):
        return None
    for media_type, media in content.items():
        if isinstance(media, dict) and media.get("schema") is not None:
            return media_type, media["schema"]
    return None


class OperationConverter:
    """Build :class:`~specmodel.builder.graph.Handler` records for one document.

    Args:
        document: The raw OpenAPI document.
        schemas: Converter used for every parameter, request and response schema.
        config: Build configuration (success status, module overrides).
    """

    def __init__(
        self,
        document: dict[str, Any],
        schemas: SchemaConverter,
        config: Optional[BuildConfig] = None,
    ) -> None:
        self._document = document
        self._schemas = schemas
        self._config = config or BuildConfig()

    def iter_operations(self) -> Iterator[tuple[str, str, dict[str, Any], list[Any]]]:
        """Yield ``(path, METHOD, operation, path_level_parameters)`` in document order."""
        paths = self._document.get("paths") or {}
        for path, path_item in paths.items():
            if not isinstance(path_item, dict):
                continue
            path_item = deref(path_item, self._document)
            path_params = path_item.get("parameters") or []
            for key, operation in path_item.items():
                if key not in _HTTP_METHODS or not isinstance(operation, dict):
                    continue
                yield path, key.upper(), operation, path_params

    def module_name(self, operation: dict[str, Any]) -> str:
        """Return the module an operation belongs to.

        An explicit ``handler_module_map`` entry for the operationId wins;
        otherwise the tags are joined with ``.``; untagged operations go to
        :data:`DEFAULT_MODULE`.
        """
        operation_id = operation.get("operationId")
        if operation_id and operation_id in self._config.handler_module_map:
            return self._config.handler_module_map[operation_id]
        tags = operation.get("tags") or []
        if tags:
            return ".".join(str(tag) for tag in tags)
        return DEFAULT_MODULE

    def convert(
        self,
        path: str,
        method: str,
        operation: dict[str, Any],
        path_parameters: Optional[list[Any]] = None,
    ) -> Handler:
        """Convert one operation into a :class:`~specmodel.builder.graph.Handler`.

        Raises:
            ConversionError: If a parameter, request or response schema cannot
                be converted, or the request uses an unsupported media type.
        """
        method = method.upper()
        name = operation.get("operationId") or fallback_handler_name(method, path)
        handler = Handler(
            name=name,
            path=path,
            method=method,
            description=operation.get("description") or operation.get("summary") or "",
        )

        try:
            self._convert_parameters(handler, path_parameters or [], operation.get("parameters") or [])
            self._convert_request_body(handler, operation.get("requestBody"))
            handler.response_body = self._convert_response(operation.get("responses") or {})
        except ConversionError as exc:
            raise type(exc)(
                f"Failed to convert operation '{name}' ({method} {path}): {exc}"
            ) from exc
        return handler

    def _merge_parameters(self, path_params: list[Any], op_params: list[Any]) -> list[dict[str, Any]]:
        """Merge path-level and operation-level parameters (operation wins)."""
        resolved_op = [deref(p, self._document) for p in op_params]
        overridden = {(p.get("name", ""), p.get("in", "")) for p in resolved_op}

        merged: list[dict[str, Any]] = []
        for raw in path_params:
            param = deref(raw, self._document)
            if (param.get("name", ""), param.get("in", "")) not in overridden:
                merged.append(param)
        merged.extend(resolved_op)
        return merged

    def _convert_parameters(self, handler: Handler, path_params: list[Any], op_params: list[Any]) -> None:
        targets = {
            ParameterLocation.PATH: handler.path_params,
            ParameterLocation.QUERY: handler.query_params,
            ParameterLocation.HEADER: handler.header_params,
        }

        for param in self._merge_parameters(path_params, op_params):
            param_name = param.get("name", "")
            try:
                location = ParameterLocation(param.get("in", ""))
            except ValueError:
                location = None
            if location not in targets:
                logger.warning(
                    "Dropping parameter '%s' of %s: unsupported location '%s'",
                    param_name,
                    handler.name,
                    param.get("in"),
                )
                continue

            if param.get("schema") is None:
                raise ConversionError(f"Parameter '{param_name}' has no schema")
            try:
                param_type = self._schemas.convert(param["schema"])
            except ConversionError as exc:
                raise ConversionError(f"Failed to convert parameter '{param_name}': {exc}") from exc

            required = bool(param.get("required", False))
            if location == ParameterLocation.PATH:
                required = True

            targets[location].append(
                Field(
                    name=param_name,
                    type=param_type,
                    description=param.get("description") or "",
                    required=required,
                )
            )

    def _convert_request_body(self, handler: Handler, body: Any) -> None:
        if body is None:
            return
        body = deref(body, self._document)
        found = _first_schema(body.get("content"))
        if found is None:
            return

        media_type, schema = found
        handler.content_type = classify_media_type(media_type)
        try:
            handler.request_body = self._schemas.convert(schema)
        except ConversionError as exc:
            raise ConversionError(f"Failed to convert request body schema: {exc}") from exc

    def _convert_response(self, responses: dict[Any, Any]) -> Optional[Type]:
        status = self._config.success_status
        response = next(
            (value for key, value in responses.items() if str(key) == status), None
        )
        if response is None:
            return None

        response = deref(response, self._document)
        found = _first_schema(response.get("content"))
        if found is None:
            return None
        try:
            return self._schemas.convert(found[1])
        except ConversionError as exc:
            raise ConversionError(f"Failed to convert response schema: {exc}") from exc
