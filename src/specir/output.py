"""Where resolved documents, summary tables and diagnostics are written.

A specir command produces one of two results:

* a **document** -- the resolved :class:`~specir.models.Client`, an
  ``inspect info`` summary or the configuration -- emitted with
  :func:`emit`;
* a **summary table** -- the ``inspect models`` / ``inspect services``
  listings -- emitted with :func:`emit_rows`.

Results go to stdout, or to the ``--output`` file as JSON. Everything else
is a diagnostic and goes to stderr, so ``specir resolve api.yaml | jq``
always reads clean JSON.

Without ``--json`` or ``--plain`` an interactive terminal gets Rich rendering
and a pipe gets plain text. ``NO_COLOR``, ``TERM=dumb`` and ``--no-color``
switch colour off.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence, Union

from pydantic import BaseModel
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

Document = Union[BaseModel, Mapping[str, Any], Sequence[Any]]


class OutputFormat(str, Enum):
    """``AUTO`` becomes ``RICH`` on a colour terminal and ``PLAIN`` elsewhere."""

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


def to_jsonable(document: Document) -> Any:
    """IR nodes serialise under their camelCase wire names; plain data as is."""
    if isinstance(document, BaseModel):
        return document.model_dump(mode="json", by_alias=True, exclude_none=True)
    return document


def _plain_lines(data: Any) -> list[str]:
    """One ``key<TAB>value`` line per top-level entry, nested values as JSON."""
    if isinstance(data, Mapping):
        return [
            f"{key}\t{json.dumps(value) if isinstance(value, (dict, list)) else value}"
            for key, value in data.items()
        ]
    if isinstance(data, list):
        return [json.dumps(item) if isinstance(item, (dict, list)) else str(item) for item in data]
    return [str(data)]


class OutputManager:
    """Routes command results to stdout (or a file) and diagnostics to stderr.

    Args:
        format: Requested format; ``AUTO`` is resolved against the terminal.
        no_color: Disable colour and markup.
        quiet: Hide ``info`` and ``success`` notices.
        verbose: Show ``debug`` notices.
        output_file: Write results to this path as JSON instead of stdout.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
        output_file: Optional[str] = None,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose
        self._output_file = Path(output_file) if output_file else None

        if format == OutputFormat.AUTO:
            format = OutputFormat.RICH if _is_tty() and not self._no_color else OutputFormat.PLAIN
        self._format = format

        self._console = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(format == OutputFormat.RICH),
        )
        self._diagnostics = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    # -- results -----------------------------------------------------------

    def emit(self, document: Document) -> None:
        """Write a document: indented JSON, ``key<TAB>value`` lines, or Rich JSON."""
        data = to_jsonable(document)
        if self._output_file is not None or self._format == OutputFormat.JSON:
            self._write(json.dumps(data, indent=2, ensure_ascii=False))
        elif self._format == OutputFormat.PLAIN:
            self._write("\n".join(_plain_lines(data)))
        else:
            rendered = json.dumps(data, indent=2, ensure_ascii=False)
            self._console.print(Syntax(rendered, "json", theme="monokai", word_wrap=True))

    def emit_rows(
        self,
        columns: Sequence[str],
        rows: Sequence[Sequence[str]],
        title: Optional[str] = None,
    ) -> None:
        """Write a summary table.

        JSON output is a list of objects keyed by column, plain output is one
        tab-separated line per row under a header line, and Rich output is a
        titled table.
        """
        if self._output_file is not None or self._format == OutputFormat.JSON:
            self.emit([dict(zip(columns, row)) for row in rows])
        elif self._format == OutputFormat.PLAIN:
            self._write("\n".join("\t".join(line) for line in [columns, *rows]))
        else:
            table = Table(title=title, header_style="bold cyan")
            for column in columns:
                table.add_column(column)
            for row in rows:
                table.add_row(*row)
            self._console.print(table)

    def _write(self, text: str) -> None:
        if self._output_file is None:
            print(text, file=sys.stdout, flush=True)
            return
        self._output_file.parent.mkdir(parents=True, exist_ok=True)
        self._output_file.write_text(text + "\n", encoding="utf-8")

    # -- diagnostics -------------------------------------------------------

    def info(self, message: str) -> None:
        if not self._quiet:
            self._notify(message, escape(message))

    def success(self, message: str) -> None:
        if not self._quiet:
            self._notify(message, f"[green]{escape(message)}[/green]")

    def error(self, message: str) -> None:
        """Errors are shown even with ``--quiet``."""
        self._notify(f"Error: {message}", f"[bold red]Error:[/bold red] {escape(message)}")

    def debug(self, message: str) -> None:
        if self._verbose:
            self._notify(f"[debug] {message}", f"[dim]\\[debug] {escape(message)}[/dim]")

    def _notify(self, plain: str, markup: str) -> None:
        if self._no_color:
            print(plain, file=sys.stderr, flush=True)
        else:
            self._diagnostics.print(markup)


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set (any value) or ``TERM=dumb``."""
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


# -- process-wide instance, installed by the root callback -----------------

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    global _output
    _output = None


def emit(document: Document) -> None:
    get_output().emit(document)


def emit_rows(
    columns: Sequence[str],
    rows: Sequence[Sequence[str]],
    title: Optional[str] = None,
) -> None:
    get_output().emit_rows(columns, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def error(message: str) -> None:
    get_output().error(message)


def debug(message: str) -> None:
    get_output().debug(message)
