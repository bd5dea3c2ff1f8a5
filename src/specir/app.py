"""Command-line front end: ``specir resolve``, ``specir inspect``, ``specir config``.

The root callback turns the global flags into the process-wide
:class:`~specir.output.OutputManager` and, with ``--verbose``, attaches a
Rich handler to the ``specir`` logger so that resolver debug records show up
on stderr.

:func:`main` is the console script. A :class:`~specir.exceptions.SpecirError`
that escapes a command exits with that error's code. Anything else is a bug:
its traceback goes to a crash log under the data directory and the process
exits with :data:`~specir.exit_codes.EXIT_GENERIC_FAILURE`.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from specir import __version__
from specir.commands.config import config_app
from specir.commands.inspect import inspect_app
from specir.commands.resolve import resolve_command
from specir.exceptions import SpecirError
from specir.exit_codes import EXIT_GENERIC_FAILURE
from specir.output import OutputFormat, OutputManager, error, set_output


app = typer.Typer(
    name="specir",
    help="Resolve Swagger 2 / OpenAPI 3 documents into a code-generation IR.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("resolve")(resolve_command)
app.add_typer(inspect_app, name="inspect", help="Summarise a document's IR.")
app.add_typer(config_app, name="config", help="Configuration management.")

_EXIT_INTERRUPTED = 130


def _print_version(value: bool) -> None:
    if value:
        typer.echo(f"specir {__version__}")
        raise typer.Exit()


def _requested_format(json_output: bool, plain_output: bool) -> OutputFormat:
    if json_output:
        return OutputFormat.JSON
    if plain_output:
        return OutputFormat.PLAIN
    return OutputFormat.AUTO


def _enable_debug_logging() -> None:
    """Show the resolver's debug records (dialect, skipped codes, renames) on stderr."""
    logger = logging.getLogger("specir")
    if not any(isinstance(handler, RichHandler) for handler in logger.handlers):
        logger.addHandler(RichHandler(console=Console(stderr=True), show_path=False))
    logger.setLevel(logging.DEBUG)


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", callback=_print_version, is_eager=True, help="Show version and exit."
    ),
    json_output: bool = typer.Option(False, "--json", help="Print results as JSON."),
    plain_output: bool = typer.Option(False, "--plain", help="Print results as plain text."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable colour."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print results and errors."),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log resolver decisions to stderr."
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Do not ask for confirmation."),
    output_file: Optional[str] = typer.Option(
        None, "-o", "--output", help="Write the result to this file as JSON."
    ),
) -> None:
    set_output(
        OutputManager(
            format=_requested_format(json_output, plain_output),
            no_color=no_color,
            quiet=quiet,
            verbose=verbose,
            output_file=output_file,
        )
    )
    if verbose:
        _enable_debug_logging()

    ctx.ensure_object(dict)
    ctx.obj.update(force=force, verbose=verbose)


def _write_crash_log(exc: BaseException) -> str:
    from specir.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_path = logs_dir / f"crash-{datetime.now():%Y%m%d-%H%M%S}.log"
    log_path.write_text("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))
    return str(log_path)


def _interrupted(*_: object) -> None:
    sys.stderr.write("\nCancelled.\n")
    sys.exit(_EXIT_INTERRUPTED)


def main() -> None:
    """Run the CLI and translate uncaught errors into exit codes."""
    signal.signal(signal.SIGINT, _interrupted)
    try:
        app()
    except KeyboardInterrupt:
        _interrupted()
    except SpecirError as exc:
        error(str(exc))
        sys.exit(exc.exit_code)
    except Exception as exc:
        error(f"Unexpected error. Debug log: {_write_crash_log(exc)}")
        sys.exit(EXIT_GENERIC_FAILURE)
