"""Type graph construction: schemas, operations, rules and module assignment."""

from specmodel.builder.graph import EnumValue, Field, Handler, Module, PageInfo, Type
from specmodel.builder.inference import (
    actual_response_body,
    envelope_payload,
    get_page_info,
    is_status_only,
)
from specmodel.builder.pipeline import ModelBuilder, build_modules
from specmodel.builder.registry import TypeRegistry

__all__ = [
    "EnumValue",
    "Field",
    "Handler",
    "Module",
    "ModelBuilder",
    "PageInfo",
    "Type",
    "TypeRegistry",
    "actual_response_body",
    "build_modules",
    "envelope_payload",
    "get_page_info",
    "is_status_only",
]
