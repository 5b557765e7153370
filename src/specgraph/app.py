"""Typer application and CLI entry point for specgraph.

The CLI is a thin adapter around :mod:`specgraph.parser`: it loads a document,
runs the schema driver and prints the resulting model cache.

* ``specgraph schemas SOURCE`` -- list declared schemas and their pointers.
* ``specgraph models SOURCE`` -- resolve every declared schema and print the
  model cache (a table, or a JSON dump with ``--json``).

:func:`main` is the console-script entry point.  A
:class:`~specgraph.exceptions.SpecgraphError` is printed and turned into its
exit code; anything else leaves a crash log in the data directory.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from specgraph import __version__
from specgraph.exit_codes import EXIT_GENERIC_FAILURE

app = typer.Typer(
    name="specgraph",
    help="Resolve OpenAPI 3.x schemas into a graph of generatable models.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"specgraph {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log every model resolution to stderr."
    ),
    schemas_base: Optional[str] = typer.Option(
        None,
        "--schemas-base",
        help="Pointer to the schema map to walk (default: #/components/schemas).",
    ),
) -> None:
    """Resolve configuration and install the global output manager.

    Args:
        ctx: Typer invocation context; the resolved config is stored in
            ``ctx.obj["config"]``.
        version: Print the version string and exit.
        json_output: Force JSON output.
        plain_output: Force plain-text output.
        no_color: Disable colour and Rich markup.
        quiet: Suppress informational messages.
        verbose: Enable debug output and library logging.
        schemas_base: Override the configured schema root pointer.
    """
    from specgraph.config import resolve_config
    from specgraph.output import OutputFormat, OutputManager, set_output

    if json_output and plain_output:
        from specgraph.exceptions import InvalidUsageError

        raise InvalidUsageError("--json and --plain cannot be used together")

    cli_format = None
    if json_output:
        cli_format = OutputFormat.JSON.value
    elif plain_output:
        cli_format = OutputFormat.PLAIN.value

    config = resolve_config(cli_schemas_base=schemas_base, cli_format=cli_format)

    try:
        fmt = OutputFormat(config.output.format)
    except ValueError:
        from specgraph.exceptions import ConfigError

        raise ConfigError(f"Unknown output format: {config.output.format}") from None

    output = OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose)
    set_output(output)
    if output.is_verbose:
        _enable_logging(output)

    ctx.ensure_object(dict)
    ctx.obj["config"] = config


def _enable_logging(output: Any) -> None:
    from rich.logging import RichHandler

    logger = logging.getLogger("specgraph")
    logger.setLevel(logging.DEBUG)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(RichHandler(console=output.stderr, show_path=False))


def _load(source: str) -> dict[str, Any]:
    from specgraph.output import debug
    from specgraph.parser import check_openapi_version, load_document

    document = load_document(source)
    version = check_openapi_version(document)
    debug(f"Loaded OpenAPI {version} document from {source}")
    return document


@app.command("schemas")
def schemas_command(
    ctx: typer.Context,
    source: str = typer.Argument(..., help="Document path, http(s) URL, or '-' for stdin."),
) -> None:
    """List the schemas a document declares, with the pointer of each."""
    from specgraph.output import info, print_table
    from specgraph.parser import ParserState, create_pointer

    config = ctx.obj["config"]
    state = ParserState(_load(source), config.parser)
    names = list(state.declared_schemas())
    if not names:
        info("No schemas declared in this document.")
        return

    rows = [[name, create_pointer(config.parser.schemas_base, name)] for name in names]
    print_table(["Schema", "Pointer"], rows, title=f"Schemas ({len(rows)})")


@app.command("models")
def models_command(
    ctx: typer.Context,
    source: str = typer.Argument(..., help="Document path, http(s) URL, or '-' for stdin."),
) -> None:
    """Resolve every declared schema and print the model cache."""
    from specgraph.output import (
        OutputFormat,
        format_document,
        get_output,
        info,
        print_table,
        success,
    )
    from specgraph.parser import parse_document

    config = ctx.obj["config"]
    state = parse_document(_load(source), config.parser)
    models = state.models

    if get_output().format == OutputFormat.JSON:
        format_document(models.to_dict())
        return

    if len(models) == 0:
        info("No schemas declared in this document.")
        return

    rows = [
        [
            entry.pointer,
            entry.name,
            entry.type.kind,
            "yes" if entry.pointer in models.recursive else "",
            entry.type.describe(),
        ]
        for entry in models.models()
    ]
    print_table(["Pointer", "Name", "Kind", "Recursive", "Type"], rows, title="Models")
    success(f"Resolved {len(rows)} models.")


def _setup_signal_handlers() -> None:
    """Exit with 130 on Ctrl-C."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log() -> str:
    """Write the current traceback under ``<data_dir>/logs`` and return the path."""
    from specgraph.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_path = logs_dir / f"crash-{datetime.now().strftime('%Y%m%d-%H%M%S')}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``specgraph`` console script.

    Raises:
        SystemExit: Always (from Typer, or with the error's exit code).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from specgraph.exceptions import SpecgraphError
        from specgraph.output import error

        if isinstance(exc, SpecgraphError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log()
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
