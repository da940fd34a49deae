"""Build-configuration files, precedence resolution, and atomic output writes.

This module handles everything specmodel reads from or writes to disk
besides the OpenAPI document itself:

* **Rules files** -- a YAML or JSON mapping deserialised into a
  :class:`~specmodel.models.BuildConfig`. See :func:`load_build_config`.
* **Precedence resolution** -- :func:`resolve_config_path` picks the rules
  file from the CLI flag, the ``SPECMODEL_CONFIG`` environment variable, or
  a project-local ``specmodel.yaml`` / ``specmodel.yml`` / ``specmodel.json``.
* **Module files** -- :func:`write_module_files` writes one JSON document per
  module.

All file writes use an atomic temp-file-then-rename strategy
(:func:`_atomic_write`) so a failed run never leaves a half-written file.
"""

from __future__ import annotations

import json
import os
import re
import tempfile
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from specmodel.builder.graph import Module
from specmodel.exceptions import ConfigurationError
from specmodel.models import BuildConfig
from specmodel.serialize import dumps, module_to_dict

CONFIG_ENV_VAR = "SPECMODEL_CONFIG"
_PROJECT_CONFIG_FILENAMES = ("specmodel.yaml", "specmodel.yml", "specmodel.json")

_UNSAFE_FILENAME_RE = re.compile(r"[^A-Za-z0-9._-]+")


# --- Atomic file writes ---


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is removed.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise


# --- Rules files ---


def _parse_config_text(text: str, path: Path) -> Any:
    if path.suffix.lower() == ".json":
        return json.loads(text)
    return yaml.safe_load(text)


def load_build_config(path: str | Path) -> BuildConfig:
    """Load and validate a rules file.

    Files ending in ``.json`` are parsed as JSON; anything else as YAML
    (which also accepts JSON). An empty file yields the default
    configuration.

    Raises:
        ConfigurationError: If the file is missing, unparsable, not a
            mapping, or fails validation (unknown keys included).

    Example::

        config = load_build_config("specmodel.yaml")
        config.rename_types  # {"Old": "New"}
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigurationError(f"Config file not found: {path}")
    try:
        data = _parse_config_text(path.read_text(encoding="utf-8"), path)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Invalid config file {path}: {exc}") from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Config file {path} must contain a mapping, got {type(data).__name__}"
        )
    try:
        return BuildConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid config file {path}: {exc}") from exc


# --- Precedence resolution ---


def resolve_config_path(cli_path: Optional[str] = None) -> Optional[Path]:
    """Return the rules file to use, or ``None`` for the defaults.

    Precedence (high to low):
        1. ``cli_path`` (the ``--config`` flag)
        2. ``SPECMODEL_CONFIG`` environment variable
        3. ``./specmodel.yaml``, ``./specmodel.yml``, ``./specmodel.json``
        4. None
    """
    if cli_path:
        return Path(cli_path)
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path)
    for filename in _PROJECT_CONFIG_FILENAMES:
        candidate = Path.cwd() / filename
        if candidate.is_file():
            return candidate
    return None


def resolve_config(cli_path: Optional[str] = None) -> BuildConfig:
    """Load the rules file chosen by :func:`resolve_config_path`, or the defaults."""
    path = resolve_config_path(cli_path)
    if path is None:
        return BuildConfig()
    return load_build_config(path)


# --- Module files ---


def module_filename(name: str) -> str:
    """Return the JSON file name for module *name*.

    Example::

        >>> module_filename("chat.message")
        'chat.message.json'
    """
    safe = _UNSAFE_FILENAME_RE.sub("_", name).strip("._") or "module"
    return f"{safe}.json"


def write_module_files(
    modules: dict[str, Module],
    output_dir: str | Path,
    config: Optional[BuildConfig] = None,
) -> list[Path]:
    """Write one JSON file per module into *output_dir* and return the paths.

    Raises:
        ConfigurationError: If two module names map to the same file name.
    """
    output_dir = Path(output_dir)
    targets: dict[str, Module] = {}
    for module in modules.values():
        filename = module_filename(module.name)
        if filename in targets:
            raise ConfigurationError(
                f"Modules '{targets[filename].name}' and '{module.name}' "
                f"would both be written to {filename}"
            )
        targets[filename] = module

    written: list[Path] = []
    for filename, module in targets.items():
        path = output_dir / filename
        _atomic_write(path, dumps(module_to_dict(module, config)))
        written.append(path)
    return written
