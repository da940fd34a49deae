"""Typer application and CLI entry point for specmodel.

Two commands sit on top of :class:`~specmodel.builder.pipeline.ModelBuilder`:

* ``specmodel build SPEC`` -- build the model and print it as JSON, or write
  one JSON file per module with ``--output-dir``.
* ``specmodel inspect SPEC`` -- print a table of every module's types and
  handlers (``--json`` prints the rows as a JSON array).

Both accept ``--config`` (a YAML or JSON rules file, see
:func:`~specmodel.config.resolve_config_path` for the lookup order) and a
repeatable ``--module`` filter.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. :class:`~specmodel.exceptions.SpecmodelError` instances
end the process with the error's ``exit_code``.
"""

from __future__ import annotations

import logging
import signal
import sys
from pathlib import Path
from typing import Any, Optional

import typer

from specmodel import __version__
from specmodel.builder.graph import Module
from specmodel.exceptions import InvalidUsageError, SpecmodelError
from specmodel.exit_codes import EXIT_GENERIC_FAILURE
from specmodel.models import BuildConfig
from specmodel.output import debug, error, get_output, info, print_data, print_json, success, warning

app = typer.Typer(
    name="specmodel",
    help="Build a normalized, dependency-ordered type model from OpenAPI 3.x documents.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"specmodel {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
) -> None:
    """Root callback executed before every command.

    Installs the global :class:`~specmodel.output.OutputManager` configured
    from the CLI flags.
    """
    from specmodel.output import OutputManager, set_output

    set_output(OutputManager(no_color=no_color, quiet=quiet, verbose=verbose))


# ------------------------------------------------------------------ #
# Shared helpers
# ------------------------------------------------------------------ #


def _fail(exc: SpecmodelError) -> typer.Exit:
    error(str(exc))
    return typer.Exit(code=exc.exit_code)


def _build(spec: str, config_path: Optional[str]) -> tuple[dict[str, Module], BuildConfig]:
    """Load the rules file and the document, then build every module."""
    from specmodel.builder.pipeline import ModelBuilder
    from specmodel.config import load_build_config, resolve_config_path
    from specmodel.parser import load_document

    path = resolve_config_path(config_path)
    if path is not None:
        debug(f"Using config file {path}")
        config = load_build_config(path)
    else:
        config = BuildConfig()

    debug(f"Loading document from {spec}")
    document = load_document(spec)
    modules = ModelBuilder(config).build(document)
    debug(f"Built {len(modules)} module(s)")
    return modules, config


def _select(modules: dict[str, Module], names: Optional[list[str]]) -> dict[str, Module]:
    """Keep only the modules listed in *names* (all modules when empty)."""
    if not names:
        return modules
    unknown = [name for name in names if name not in modules]
    if unknown:
        available = ", ".join(modules) or "none"
        raise InvalidUsageError(
            f"Unknown module(s): {', '.join(unknown)} (available: {available})"
        )
    return {name: module for name, module in modules.items() if name in names}


_SPEC_ARGUMENT = typer.Argument(..., help="OpenAPI document: file path, URL, or '-' for stdin.")
_CONFIG_OPTION = typer.Option(None, "--config", "-c", help="Rules file (YAML or JSON).")
_MODULE_OPTION = typer.Option(None, "--module", "-m", help="Only this module (repeatable).")


# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #


@app.command("build")
def build_command(
    spec: str = _SPEC_ARGUMENT,
    config: Optional[str] = _CONFIG_OPTION,
    module: Optional[list[str]] = _MODULE_OPTION,
    output_dir: Optional[Path] = typer.Option(
        None, "--output-dir", "-o", help="Write one <module>.json file per module here."
    ),
    json_output: bool = typer.Option(
        False, "--json", help="Print raw JSON even when stdout is a terminal."
    ),
) -> None:
    """Build the type model and emit it as JSON.

    Example::

        specmodel build openapi.yaml --config specmodel.yaml
        specmodel build openapi.yaml -m chat -o build/
    """
    from specmodel.config import write_module_files
    from specmodel.serialize import dumps, modules_to_dict

    try:
        modules, build_config = _build(spec, config)
        selected = _select(modules, module)
        if output_dir is not None:
            if json_output:
                warning("--json has no effect with --output-dir")
            paths = write_module_files(selected, output_dir, build_config)
            success(f"Wrote {len(paths)} module file(s) to {output_dir}")
            return
    except SpecmodelError as exc:
        raise _fail(exc) from None

    data = modules_to_dict(selected, build_config)
    if json_output:
        print_data(dumps(data).rstrip("\n"))
    else:
        print_json(data)


@app.command("inspect")
def inspect_command(
    spec: str = _SPEC_ARGUMENT,
    config: Optional[str] = _CONFIG_OPTION,
    module: Optional[list[str]] = _MODULE_OPTION,
    json_output: bool = typer.Option(
        False, "--json", help="Print the rows as a JSON array of objects."
    ),
) -> None:
    """Show the modules of the built model with their types and handlers.

    Example::

        specmodel inspect openapi.yaml
        specmodel inspect openapi.yaml --json
    """
    from specmodel.builder.inference import get_page_info
    from specmodel.output import OutputFormat, OutputManager

    try:
        modules, build_config = _build(spec, config)
        selected = _select(modules, module)
    except SpecmodelError as exc:
        raise _fail(exc) from None

    if not selected and not json_output:
        info("No operations found in this document.")
        return

    headers = ["Module", "Entry", "Name", "Details"]
    rows: list[list[str]] = []
    for mod in selected.values():
        for ty in mod.types:
            owner = "" if ty.module == mod.name else f" (from {ty.module})"
            rows.append([mod.name, "type", ty.name, f"{ty.kind.value}{owner}"])
        for handler in mod.handlers:
            details = f"{handler.method} {handler.path}"
            page = get_page_info(
                handler,
                build_config.page_index_candidates,
                build_config.page_size_candidates,
            )
            if page is not None:
                details += " [paged]"
            rows.append([mod.name, "handler", handler.name, details])

    output = OutputManager(format=OutputFormat.JSON) if json_output else get_output()
    output.print_table(headers, rows, title=f"Modules ({len(selected)})")


# ------------------------------------------------------------------ #
# Entry point
# ------------------------------------------------------------------ #


def _configure_logging(verbose: bool) -> None:
    """Route library log records to stderr; debug records only with --verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """CLI entry point invoked by the ``specmodel`` console script.

    :class:`~specmodel.exceptions.SpecmodelError` instances that escape a
    command cause a clean exit with the error's ``exit_code``; anything else
    exits with :data:`~specmodel.exit_codes.EXIT_GENERIC_FAILURE`.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    # Logging is set up before Typer parses the flags.
    _configure_logging("--verbose" in sys.argv or "-v" in sys.argv)
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except SpecmodelError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception as exc:
        error(f"Unexpected error: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)
