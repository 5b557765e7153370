"""Terminal output for the ``specgraph`` command, split between stdout and stderr.

* **stdout** -- data only: model tables and JSON dumps, safe to pipe.
* **stderr** -- diagnostics: status, warnings, errors, debug lines.
* **TTY detection** -- Rich tables on an interactive terminal, tab-separated
  text when piped.
* **Colour control** -- ``NO_COLOR``, ``TERM=dumb`` and ``--no-color`` all
  disable colour.

:class:`OutputManager` holds the preferences and the two Rich consoles.  The
CLI installs one with :func:`set_output`; the module-level helpers
(:func:`info`, :func:`error`, ...) delegate to it.  The parser itself never
prints: library code logs through :mod:`logging`, and ``--verbose`` routes
those records to :attr:`OutputManager.stderr` via
:class:`rich.logging.RichHandler`.
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
from rich.text import Text


class OutputFormat(str, Enum):
    """Supported output formats.

    ``AUTO`` becomes ``RICH`` on an interactive, coloured TTY and ``PLAIN``
    otherwise.
    """

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Format-aware writer for data (stdout) and diagnostics (stderr).

    Args:
        format: Desired output format.
        no_color: Disable colour and Rich markup.
        quiet: Suppress informational messages.
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
            self._format = OutputFormat.RICH if rich_ok else OutputFormat.PLAIN
        else:
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

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    @property
    def stderr(self) -> Console:
        """The diagnostics console, for log handlers."""
        return self._stderr

    # ------------------------------------------------------------------ #
    # Data output (stdout)
    # ------------------------------------------------------------------ #

    def print_data(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    def format_document(self, data: Any) -> None:
        """Print a JSON-compatible value: raw JSON, ``key<TAB>value`` lines, or highlighted JSON."""
        if self._format == OutputFormat.PLAIN and isinstance(data, dict):
            for key, value in data.items():
                self.print_data(f"{key}\t{value}")
            return

        text = json.dumps(data, indent=2, ensure_ascii=False, default=str)
        if self._format == OutputFormat.RICH:
            self._stdout.print(Syntax(text, "json", theme="monokai", word_wrap=True))
        else:
            self.print_data(text)

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Print rows as a Rich table, a JSON array of objects, or TSV.

        Args:
            headers: Column header strings.
            rows: Row cells, one list per row.
            title: Table title (Rich mode only).
        """
        if self._format == OutputFormat.JSON:
            records = [dict(zip(headers, row)) for row in rows]
            self.print_data(json.dumps(records, indent=2, ensure_ascii=False))
        elif self._format == OutputFormat.PLAIN:
            for line in [headers, *rows]:
                self.print_data("\t".join(line))
        else:
            table = Table(title=title, show_header=True, header_style="bold cyan")
            for header in headers:
                table.add_column(header)
            for row in rows:
                table.add_row(*(Text(cell) for cell in row))
            self._stdout.print(table)

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def _diagnostic(self, message: str, prefix: str = "", markup: str = "") -> None:
        if self._no_color or not markup:
            print(f"{prefix}{message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(
                markup.format(prefix=escape(prefix), message=escape(message))
            )

    def info(self, message: str) -> None:
        """Informational message; suppressed by ``--quiet``."""
        if not self._quiet:
            self._diagnostic(message)

    def success(self, message: str) -> None:
        """Green status message; suppressed by ``--quiet``."""
        if not self._quiet:
            self._diagnostic(message, markup="[green]{message}[/green]")

    def warning(self, message: str) -> None:
        """Warning; shown even with ``--quiet``."""
        self._diagnostic(
            message, prefix="Warning: ", markup="[yellow]{prefix}[/yellow]{message}"
        )

    def error(self, message: str) -> None:
        """Error; never suppressed."""
        self._diagnostic(
            message, prefix="Error: ", markup="[bold red]{prefix}[/bold red]{message}"
        )

    def debug(self, message: str) -> None:
        """Debug line; only with ``--verbose``."""
        if self._verbose:
            self._diagnostic(message, prefix="[debug] ", markup="[dim]{prefix}{message}[/dim]")


# ------------------------------------------------------------------ #
# Module-level helpers
# ------------------------------------------------------------------ #


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set (any value) or ``TERM=dumb``."""
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the global :class:`OutputManager`, creating a default one lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Drop the global manager; used between tests."""
    global _output
    _output = None


def format_document(data: Any) -> None:
    get_output().format_document(data)


def print_table(
    headers: list[str],
    rows: list[list[str]],
    title: Optional[str] = None,
) -> None:
    get_output().print_table(headers, rows, title)


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
