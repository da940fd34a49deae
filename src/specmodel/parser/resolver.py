"""Resolve ``$ref`` JSON Reference pointers without inlining them.

The type graph needs to know *which* component a reference names, so that
every reference to ``#/components/schemas/Pet`` maps to the same
:class:`~specmodel.builder.graph.Type`. Unlike a full inliner, this module
therefore leaves the document untouched and offers three small operations:

* :func:`ref_name` -- the component name a pointer ends in.
* :func:`resolve_pointer` -- navigate a ``#/...`` pointer to its target.
* :func:`deref` -- follow a chain of ``$ref`` objects (used for parameters,
  request bodies and responses, which carry no identity of their own).

Only **internal** references (``#/...``) are supported. RFC 6901 escaping
(``~0`` for ``~``, ``~1`` for ``/``) is honoured.
"""

from __future__ import annotations

from typing import Any

from specmodel.exceptions import ConversionError

_SCHEMA_PREFIX = "#/components/schemas/"


def is_ref(obj: Any) -> bool:
    """Return ``True`` when *obj* is a Reference Object (a dict with ``$ref``)."""
    return isinstance(obj, dict) and "$ref" in obj


def _unescape(segment: str) -> str:
    return segment.replace("~1", "/").replace("~0", "~")


def ref_name(ref: str) -> str:
    """Return the last segment of a pointer, unescaped.

    Example::

        >>> ref_name("#/components/schemas/Pet")
        'Pet'
    """
    return _unescape(ref.rsplit("/", 1)[-1])


def is_schema_ref(ref: str) -> bool:
    """Return ``True`` when *ref* points directly at a named component schema."""
    return ref.startswith(_SCHEMA_PREFIX) and "/" not in ref[len(_SCHEMA_PREFIX):]


def resolve_pointer(ref: str, root: dict[str, Any]) -> Any:
    """Return the value a ``#/...`` pointer designates inside *root*.

    Args:
        ref: The ``$ref`` string (e.g., ``"#/components/parameters/PageSize"``).
        root: The whole OpenAPI document.

    Raises:
        ConversionError: If the reference is external, or any segment of the
            pointer does not exist in the document.
    """
    if not ref.startswith("#/"):
        raise ConversionError(
            f"External $ref not supported: {ref}. "
            "Only internal references (#/...) are handled."
        )

    current: Any = root
    for raw_segment in ref[2:].split("/"):
        segment = _unescape(raw_segment)
        if isinstance(current, dict):
            if segment not in current:
                raise ConversionError(
                    f"Cannot resolve $ref '{ref}': key '{segment}' not found"
                )
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError) as exc:
                raise ConversionError(
                    f"Cannot resolve $ref '{ref}': invalid array index '{segment}'"
                ) from exc
        else:
            raise ConversionError(
                f"Cannot resolve $ref '{ref}': "
                f"cannot navigate into {type(current).__name__}"
            )
    return current


def deref(obj: Any, root: dict[str, Any]) -> Any:
    """Follow ``$ref`` objects starting at *obj* until a concrete value is reached.

    Raises:
        ConversionError: If a pointer cannot be resolved or the chain loops.
    """
    seen: set[str] = set()
    while is_ref(obj):
        ref = obj["$ref"]
        if ref in seen:
            raise ConversionError(f"Circular $ref chain at '{ref}'")
        seen.add(ref)
        obj = resolve_pointer(ref, root)
    return obj
