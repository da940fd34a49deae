"""Terminal output for the specmodel CLI.

Built models and inspection tables go to **stdout** so they can be piped
into a renderer or saved with a shell redirect. Everything else (progress,
warnings, errors, ``--verbose`` debug lines) goes to **stderr**.

When stdout is a terminal the model JSON is syntax-highlighted and tables
are drawn with Rich; otherwise the output is plain JSON and tab-separated
rows. Colour is switched off by ``--no-color``, ``NO_COLOR`` or
``TERM=dumb``.

The CLI installs one :class:`OutputManager` per invocation with
:func:`set_output`; library code never prints.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table


class OutputFormat(str, Enum):
    """How stdout data is rendered. ``AUTO`` picks ``RICH`` or ``PLAIN``."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


# level -> (plain prefix, rich template, shown when quiet)
_DIAGNOSTICS: dict[str, tuple[str, str, bool]] = {
    "info": ("", "{}", False),
    "success": ("", "[green]{}[/green]", False),
    "warning": ("Warning: ", "[yellow]Warning:[/yellow] {}", True),
    "error": ("Error: ", "[bold red]Error:[/bold red] {}", True),
    "debug": ("[debug] ", "[dim]\\[debug] {}[/dim]", True),
}


class OutputManager:
    """Render model data to stdout and diagnostics to stderr.

    Args:
        format: Rendering for stdout data; ``AUTO`` is resolved from the
            terminal and colour settings.
        no_color: Disable colour and Rich markup.
        quiet: Drop info and success messages.
        verbose: Show debug messages.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        if format == OutputFormat.AUTO:
            rich_ok = _is_tty() and not self._no_color
            format = OutputFormat.RICH if rich_ok else OutputFormat.PLAIN
        self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(self._format == OutputFormat.RICH),
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    # --- stdout ---

    def print_json(self, data: Any) -> None:
        """Print *data* as indented JSON, highlighted in Rich mode."""
        text = json.dumps(data, indent=2, ensure_ascii=False)
        if self._format == OutputFormat.RICH:
            self._stdout.print(Syntax(text, "json", theme="monokai", word_wrap=True))
        else:
            self.print_data(text)

    def print_data(self, text: str) -> None:
        """Print *text* to stdout unchanged."""
        print(text, file=sys.stdout, flush=True)

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Print rows under *headers*.

        JSON mode prints a list of header-keyed objects, plain mode one
        tab-separated line per row (header first), Rich mode a table.
        """
        if self._format == OutputFormat.JSON:
            self.print_data(
                json.dumps([dict(zip(headers, row)) for row in rows], indent=2, ensure_ascii=False)
            )
            return
        if self._format == OutputFormat.PLAIN:
            for line in [headers, *rows]:
                self.print_data("\t".join(line))
            return

        table = Table(title=title, header_style="bold cyan")
        for header in headers:
            table.add_column(header)
        for row in rows:
            table.add_row(*(escape(cell) for cell in row))
        self._stdout.print(table)

    # --- stderr ---

    def _diagnose(self, level: str, message: str) -> None:
        plain_prefix, rich_template, shown_when_quiet = _DIAGNOSTICS[level]
        if level == "debug" and not self._verbose:
            return
        if self._quiet and not shown_when_quiet:
            return
        if self._no_color:
            print(f"{plain_prefix}{message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(rich_template.format(escape(message)))

    def info(self, message: str) -> None:
        self._diagnose("info", message)

    def success(self, message: str) -> None:
        self._diagnose("success", message)

    def warning(self, message: str) -> None:
        """Warnings are shown even with ``--quiet``."""
        self._diagnose("warning", message)

    def error(self, message: str) -> None:
        """Errors are always shown."""
        self._diagnose("error", message)

    def debug(self, message: str) -> None:
        """Shown only with ``--verbose``."""
        self._diagnose("debug", message)


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """``NO_COLOR`` (any value) or ``TERM=dumb`` turn colour off."""
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


# --- Global instance ---

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed :class:`OutputManager`, creating a default one if needed."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager (used between tests)."""
    global _output
    _output = None


def print_json(data: Any) -> None:
    get_output().print_json(data)


def print_data(text: str) -> None:
    get_output().print_data(text)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    get_output().debug(message)
