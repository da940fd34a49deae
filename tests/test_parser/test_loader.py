"""Tests for specmodel.parser.loader."""

from __future__ import annotations

import io
import json
import textwrap
from pathlib import Path
from unittest.mock import patch

import httpx
import pytest

from specmodel.exceptions import SpecParseError
from specmodel.parser.loader import (
    _parse_content,
    _read_file,
    load_document,
    load_spec,
    validate_openapi_version,
)

FIXTURES_DIR = Path(__file__).parent.parent / "fixtures"


# ---------------------------------------------------------------------------
# load_spec dispatch
# ---------------------------------------------------------------------------


class TestLoadSpec:
    """Test load_spec routes each source to the right reader."""

    def test_loads_from_file_yaml(self) -> None:
        result = load_spec(str(FIXTURES_DIR / "petstore.yaml"))
        assert result["openapi"] == "3.0.3"
        assert result["info"]["title"] == "Pet Store"

    def test_loads_from_file_json(self) -> None:
        result = load_spec(str(FIXTURES_DIR / "cyclic.json"))
        assert result["openapi"] == "3.1.0"

    def test_loads_from_stdin(self) -> None:
        spec_json = json.dumps({"openapi": "3.0.3", "info": {"title": "stdin test", "version": "1.0"}})
        with patch("specmodel.parser.loader.sys") as mock_sys:
            mock_sys.stdin = io.StringIO(spec_json)
            result = load_spec("-")
        assert result["info"]["title"] == "stdin test"

    def test_empty_stdin_raises(self) -> None:
        with patch("specmodel.parser.loader.sys") as mock_sys:
            mock_sys.stdin = io.StringIO("   ")
            with pytest.raises(SpecParseError, match="No input"):
                load_spec("-")

    def test_loads_from_url(self) -> None:
        spec = {"openapi": "3.0.3", "info": {"title": "URL test", "version": "1.0"}}
        mock_response = httpx.Response(
            status_code=200,
            json=spec,
            request=httpx.Request("GET", "https://example.com/spec.json"),
        )
        with patch("specmodel.parser.loader.httpx.get", return_value=mock_response):
            result = load_spec("https://example.com/spec.json")
        assert result["info"]["title"] == "URL test"

    def test_url_http_error_raises(self) -> None:
        mock_response = httpx.Response(
            status_code=404,
            request=httpx.Request("GET", "https://example.com/missing.json"),
        )
        with patch("specmodel.parser.loader.httpx.get", return_value=mock_response):
            with pytest.raises(SpecParseError, match="HTTP 404"):
                load_spec("https://example.com/missing.json")

    def test_url_connection_error_raises(self) -> None:
        with patch(
            "specmodel.parser.loader.httpx.get",
            side_effect=httpx.ConnectError("refused"),
        ):
            with pytest.raises(SpecParseError, match="Failed to fetch"):
                load_spec("https://example.com/spec.json")


# ---------------------------------------------------------------------------
# _read_file
# ---------------------------------------------------------------------------


class TestReadFile:
    """Test reading local files and their format hints."""

    def test_json_suffix_hint(self) -> None:
        _, hint = _read_file(str(FIXTURES_DIR / "cyclic.json"))
        assert hint == "json"

    def test_yml_suffix_hint(self, tmp_path: Path) -> None:
        path = tmp_path / "spec.yml"
        path.write_text("openapi: '3.1.0'\n", encoding="utf-8")
        _, hint = _read_file(str(path))
        assert hint == "yaml"

    def test_file_not_found_raises(self) -> None:
        with pytest.raises(SpecParseError, match="not found"):
            _read_file("/nonexistent/path/to/spec.json")

    def test_empty_file_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("\n", encoding="utf-8")
        with pytest.raises(SpecParseError, match="empty"):
            _read_file(str(path))


# ---------------------------------------------------------------------------
# _parse_content
# ---------------------------------------------------------------------------


class TestParseContent:
    """Test JSON/YAML decoding."""

    def test_json_without_hint(self) -> None:
        assert _parse_content('{"openapi": "3.0.0"}') == {"openapi": "3.0.0"}

    def test_yaml_without_hint(self) -> None:
        content = textwrap.dedent("""\
            openapi: "3.0.0"
            paths: {}
        """)
        assert _parse_content(content) == {"openapi": "3.0.0", "paths": {}}

    def test_invalid_json_with_json_hint_raises(self) -> None:
        with pytest.raises(SpecParseError, match="Invalid JSON"):
            _parse_content("openapi: 3.0.0", hint="json")

    def test_non_mapping_raises(self) -> None:
        with pytest.raises(SpecParseError, match="must be a JSON/YAML object"):
            _parse_content("[1, 2, 3]")

    def test_garbage_raises(self) -> None:
        with pytest.raises(SpecParseError, match="Failed to parse"):
            _parse_content("key: [unclosed")


# ---------------------------------------------------------------------------
# validate_openapi_version / load_document
# ---------------------------------------------------------------------------


class TestValidateOpenAPIVersion:
    """Test version acceptance and rejection."""

    @pytest.mark.parametrize("version", ["3.0.0", "3.0.3", "3.1.0"])
    def test_accepts_3x(self, version: str) -> None:
        assert validate_openapi_version({"openapi": version}) == version

    def test_rejects_swagger(self) -> None:
        with pytest.raises(SpecParseError, match="Swagger 2.0 is not supported"):
            validate_openapi_version({"swagger": "2.0"})

    def test_rejects_missing_version(self) -> None:
        with pytest.raises(SpecParseError, match="Missing 'openapi'"):
            validate_openapi_version({"info": {}})

    def test_rejects_future_version(self) -> None:
        with pytest.raises(SpecParseError, match="Unsupported OpenAPI version: 4.0.0"):
            validate_openapi_version({"openapi": "4.0.0"})

    def test_load_document_validates(self, tmp_path: Path) -> None:
        path = tmp_path / "swagger.json"
        path.write_text(json.dumps({"swagger": "2.0"}), encoding="utf-8")
        with pytest.raises(SpecParseError, match="Swagger"):
            load_document(str(path))
