"""Derive higher-level facts from the shape of built handlers and types.

Every function here is pure and recomputes its answer on each call; nothing
is cached on the graph, so the answers always reflect the graph after the
rule engine has run.

* :func:`envelope_payload` / :func:`actual_response_body` -- unwrap the
  conventional ``{"code": ..., "msg": ..., "data": <payload>}`` envelope.
* :func:`get_page_info` -- recognise paginated list endpoints.
* :func:`is_status_only` -- recognise responses that carry nothing but
  bookkeeping fields.
"""

from __future__ import annotations

from typing import Optional, Sequence

from specmodel.builder.graph import Handler, PageInfo, Type
from specmodel.models import (
    DEFAULT_PAGE_INDEX_CANDIDATES,
    DEFAULT_PAGE_SIZE_CANDIDATES,
    HTTPMethod,
    TypeKind,
)

ENVELOPE_FIELD = "data"
"""Response field that wraps the real payload."""

STATUS_FIELDS = frozenset({"code", "msg", "detail", "logid"})
"""Bookkeeping fields that do not count as payload."""


def envelope_payload(handler: Handler) -> Optional[Type]:
    """Return the type of the response's ``data`` field, or ``None`` if there is none."""
    body = handler.response_body
    if body is None or body.kind != TypeKind.OBJECT:
        return None
    data = body.get_field(ENVELOPE_FIELD)
    return data.type if data is not None else None


def actual_response_body(handler: Handler) -> Optional[Type]:
    """Return the payload a caller actually receives.

    That is the ``data`` field's type when the declared response is an
    envelope, and the declared response itself otherwise.

    Example::

        # response {"code": int, "msg": str, "data": Foo} -> Foo
        # response {"id": str}                            -> the response itself
    """
    payload = envelope_payload(handler)
    if payload is not None:
        return payload
    return handler.response_body


def _pick(names: set[str], candidates: Sequence[str], exclude: str = "") -> str:
    for candidate in candidates:
        if candidate in names and candidate != exclude:
            return candidate
    return ""


def get_page_info(
    handler: Handler,
    page_index_candidates: Optional[Sequence[str]] = None,
    page_size_candidates: Optional[Sequence[str]] = None,
) -> Optional[PageInfo]:
    """Return pagination details for *handler*, or ``None`` if it is not a paged list.

    A handler is paginated when all of the following hold:

    1. its method is ``GET``;
    2. its query parameters include a page-index candidate and, separately,
       a page-size candidate other than the chosen index name;
    3. its actual (unwrapped) response is an object with an array field.
       The first array field, in field order, supplies the item type.

    Empty or missing candidate lists fall back to
    :data:`~specmodel.models.DEFAULT_PAGE_INDEX_CANDIDATES` and
    :data:`~specmodel.models.DEFAULT_PAGE_SIZE_CANDIDATES`.
    """
    index_candidates = page_index_candidates or DEFAULT_PAGE_INDEX_CANDIDATES
    size_candidates = page_size_candidates or DEFAULT_PAGE_SIZE_CANDIDATES

    if handler.method.upper() != HTTPMethod.GET.value:
        return None

    names = {param.name for param in handler.query_params}
    page_index = _pick(names, index_candidates)
    page_size = _pick(names, size_candidates, exclude=page_index)
    if not page_index or not page_size:
        return None

    body = actual_response_body(handler)
    if body is None or body.kind != TypeKind.OBJECT:
        return None

    for f in body.fields:
        if f.type.kind == TypeKind.ARRAY:
            return PageInfo(
                item_type=f.type.element_type,
                page_index_name=page_index,
                page_size_name=page_size,
            )
    return None


def is_status_only(ty: Optional[Type]) -> bool:
    """Return ``True`` if *ty* is an object made only of :data:`STATUS_FIELDS`.

    An object without fields does not qualify.
    """
    if ty is None or ty.kind != TypeKind.OBJECT or not ty.fields:
        return False
    return all(f.name in STATUS_FIELDS for f in ty.fields)
