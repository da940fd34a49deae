"""OpenAPI document access -- load documents and resolve ``$ref`` pointers.

Typical usage::

    from specmodel.parser import load_document

    raw = load_document("openapi.yaml")

Sub-modules:

* :mod:`~specmodel.parser.loader` -- I/O layer (URL, file, stdin) plus format
  detection and OpenAPI version validation.
* :mod:`~specmodel.parser.resolver` -- JSON-pointer resolution that keeps
  references intact so the builder can share named types.
"""

from specmodel.parser.loader import load_document, load_spec, validate_openapi_version
from specmodel.parser.resolver import deref, ref_name, resolve_pointer

__all__ = [
    "load_document",
    "load_spec",
    "validate_openapi_version",
    "deref",
    "ref_name",
    "resolve_pointer",
]
