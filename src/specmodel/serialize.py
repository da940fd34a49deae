"""JSON-ready views of the built model, the hand-off format for renderers.

Named types are written out once, in a module's ``types`` list, and referred
to everywhere else as ``{"ref": "<Name>"}``. Anonymous types are inlined at
the point of use. Handlers additionally carry the inferred facts a renderer
needs: the unwrapped response payload, pagination details and whether the
response is status-only.

The output depends only on the model, never on dict or set iteration over
unordered data, so the same document and configuration always serialize to
the same bytes.

Example::

    from specmodel.serialize import dumps, modules_to_dict

    text = dumps(modules_to_dict(modules))
"""

from __future__ import annotations

import json
from typing import Any, Iterable, Optional

from specmodel.builder.graph import Field, Handler, Module, Type
from specmodel.builder.inference import actual_response_body, get_page_info, is_status_only
from specmodel.models import BuildConfig, TypeKind


def type_ref(ty: Optional[Type]) -> Optional[dict[str, Any]]:
    """Return a reference to a named type, or the inline form of an anonymous one."""
    if ty is None:
        return None
    if ty.is_named:
        return {"ref": ty.name}
    return _type_body(ty)


def _type_body(ty: Type) -> dict[str, Any]:
    data: dict[str, Any] = {"kind": ty.kind.value}
    if ty.kind == TypeKind.PRIMITIVE:
        data["primitive"] = ty.primitive_kind.value if ty.primitive_kind else None
        if ty.enum_values:
            data["enum"] = [{"value": v.value, "name": v.name} for v in ty.enum_values]
    elif ty.kind == TypeKind.OBJECT:
        data["fields"] = [field_to_dict(f) for f in ty.fields]
    elif ty.kind == TypeKind.ARRAY:
        data["element"] = type_ref(ty.element_type)
    elif ty.kind == TypeKind.MAP:
        data["value"] = type_ref(ty.value_type)
    return data


def type_to_dict(ty: Type) -> dict[str, Any]:
    """Return the full definition of a named type."""
    data: dict[str, Any] = {
        "name": ty.name,
        "module": ty.module,
        "description": ty.description,
    }
    data.update(_type_body(ty))
    return data


def field_to_dict(f: Field) -> dict[str, Any]:
    data: dict[str, Any] = {
        "name": f.name,
        "type": type_ref(f.type),
        "description": f.description,
        "required": f.required,
    }
    if f.default is not None:
        data["default"] = f.default
    return data


def handler_to_dict(handler: Handler, config: Optional[BuildConfig] = None) -> dict[str, Any]:
    """Return a handler with its parameters, bodies and inferred facts."""
    config = config or BuildConfig()
    page = get_page_info(handler, config.page_index_candidates, config.page_size_candidates)
    actual = actual_response_body(handler)
    return {
        "name": handler.name,
        "method": handler.method,
        "path": handler.path,
        "description": handler.description,
        "content_type": handler.content_type.value,
        "path_params": [field_to_dict(p) for p in handler.path_params],
        "query_params": [field_to_dict(p) for p in handler.query_params],
        "header_params": [field_to_dict(p) for p in handler.header_params],
        "request_body": type_ref(handler.request_body),
        "response_body": type_ref(handler.response_body),
        "actual_response_body": type_ref(actual),
        "status_only": is_status_only(actual),
        "page_info": (
            {
                "item_type": type_ref(page.item_type),
                "page_index": page.page_index_name,
                "page_size": page.page_size_name,
            }
            if page is not None
            else None
        ),
    }


def module_to_dict(module: Module, config: Optional[BuildConfig] = None) -> dict[str, Any]:
    """Return a module: its types in emission order, then its handlers."""
    return {
        "name": module.name,
        "types": [type_to_dict(ty) for ty in module.types],
        "handlers": [handler_to_dict(h, config) for h in module.handlers],
    }


def modules_to_dict(modules: Iterable[Module] | dict[str, Module], config: Optional[BuildConfig] = None) -> dict[str, Any]:
    """Return every module, in the order given (ascending name for builder output)."""
    if isinstance(modules, dict):
        modules = modules.values()
    return {"modules": [module_to_dict(m, config) for m in modules]}


def dumps(data: Any) -> str:
    """Serialize *data* as indented JSON with a trailing newline."""
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"
