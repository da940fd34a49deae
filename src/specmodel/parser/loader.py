"""Load OpenAPI documents from a URL, local file, or stdin.

This module is the only place that performs I/O before a build. It reads a
raw document, decodes it as JSON or YAML, and checks that it declares a
supported OpenAPI version (3.0.x or 3.1.x). The resulting dict is handed
unchanged to :class:`~specmodel.builder.pipeline.ModelBuilder`; ``$ref``
pointers are *not* inlined here because the builder needs them to recognise
shared component types.

Public functions:

* :func:`load_spec` -- read and decode a document from any supported source.
* :func:`validate_openapi_version` -- return the ``openapi`` version string,
  rejecting Swagger 2.x and other unsupported versions.
* :func:`load_document` -- both of the above in one call.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml

from specmodel.exceptions import SpecParseError


def load_document(source: str) -> dict[str, Any]:
    """Load *source* and verify its OpenAPI version.

    Returns:
        The decoded document.

    Raises:
        SpecParseError: If loading, decoding or version validation fails.
    """
    document = load_spec(source)
    validate_openapi_version(document)
    return document


def load_spec(source: str) -> dict[str, Any]:
    """Load an OpenAPI document from a URL, a file path, or stdin (``-``).

    The format is detected from the file extension or the response
    ``Content-Type`` when possible, and from the content otherwise.

    Raises:
        SpecParseError: If the source cannot be read or decoded.
    """
    if source == "-":
        content, hint = _read_stdin()
    elif source.startswith(("http://", "https://")):
        content, hint = _read_url(source)
    else:
        content, hint = _read_file(source)
    return _parse_content(content, hint=hint)


def _read_stdin() -> tuple[str, str]:
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise SpecParseError(f"Failed to read from stdin: {exc}") from exc
    if not content.strip():
        raise SpecParseError("No input received from stdin")
    return content, ""


def _read_url(url: str) -> tuple[str, str]:
    """Fetch *url*, returning its body and a format hint from ``Content-Type``."""
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(
            f"HTTP {exc.response.status_code} fetching spec from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecParseError(f"Failed to fetch spec from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    if "json" in content_type:
        return response.text, "json"
    if "yaml" in content_type or "yml" in content_type:
        return response.text, "yaml"
    return response.text, ""


def _read_file(path: str) -> tuple[str, str]:
    """Read a local file, returning its text and a format hint from the suffix."""
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecParseError(f"Spec file not found: {path}")
    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecParseError(f"Failed to read spec file {path}: {exc}") from exc
    if not content.strip():
        raise SpecParseError(f"Spec file is empty: {path}")

    suffix = file_path.suffix.lower()
    if suffix == ".json":
        return content, "json"
    if suffix in (".yaml", ".yml"):
        return content, "yaml"
    return content, ""


def _parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Decode *content* as JSON or YAML into a dict.

    JSON is tried first unless the hint says YAML, because every JSON
    document is also YAML but the JSON decoder gives better errors.

    Raises:
        SpecParseError: If neither decoder succeeds or the top level is not
            a mapping.
    """
    errors: list[str] = []

    if hint != "yaml":
        try:
            return _expect_mapping(json.loads(content))
        except json.JSONDecodeError as exc:
            if hint == "json":
                raise SpecParseError(f"Invalid JSON: {exc}") from exc
            errors.append(f"JSON error: {exc}")

    try:
        return _expect_mapping(yaml.safe_load(content))
    except yaml.YAMLError as exc:
        errors.append(f"YAML error: {exc}")

    raise SpecParseError(
        "Failed to parse spec as JSON or YAML" + "".join(f"\n  {e}" for e in errors)
    )


def _expect_mapping(result: Any) -> dict[str, Any]:
    if not isinstance(result, dict):
        got = type(result).__name__ if result is not None else "empty document"
        raise SpecParseError(f"Spec must be a JSON/YAML object (got {got})")
    return result


def validate_openapi_version(spec: dict[str, Any]) -> str:
    """Validate and return the OpenAPI version string.

    Supports OpenAPI 3.x. Swagger 2.x documents and documents without an
    ``openapi`` field are rejected.

    Raises:
        SpecParseError: If the version is missing or unsupported.
    """
    if "swagger" in spec:
        raise SpecParseError(
            f"Swagger {spec['swagger']} is not supported. "
            "Only OpenAPI 3.0.x and 3.1.x are supported. "
            "Consider converting with https://converter.swagger.io"
        )

    openapi_version = spec.get("openapi")
    if openapi_version is None:
        raise SpecParseError(
            "Missing 'openapi' field. Is this an OpenAPI 3.x document?"
        )

    version_str = str(openapi_version)
    if version_str.startswith("3."):
        return version_str

    raise SpecParseError(
        f"Unsupported OpenAPI version: {version_str}. "
        "Only OpenAPI 3.0.x and 3.1.x are supported."
    )
