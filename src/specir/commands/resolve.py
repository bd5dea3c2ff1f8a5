"""Resolve command -- print the full IR of a document.

``specir resolve SOURCE`` loads a Swagger 2 / OpenAPI 3 document, resolves it
with :func:`~specir.parser.extractor.extract_client` and writes the
:class:`~specir.models.Client` to stdout as camelCase JSON, which is the
contract consumed by renderers.
"""

from __future__ import annotations

from typing import Optional

import typer

from specir.exceptions import SpecirError
from specir.models import Client
from specir.output import debug, emit, error


def load_client(
    source: str,
    default_tag: Optional[str] = None,
    excluded_parameters: Optional[list[str]] = None,
) -> Client:
    """Load *source* and resolve it with the effective configuration.

    Raises:
        typer.Exit: With the error's exit code when the config, the document
            or the resolution fails.
    """
    from specir.config import resolve_config
    from specir.parser import extract_client, load_spec

    try:
        config = resolve_config(
            cli_default_tag=default_tag,
            cli_excluded_parameters=excluded_parameters,
        )
        document = load_spec(source)
        debug(f"Loaded document from {source}")
        client = extract_client(document, config.resolver)
    except SpecirError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    debug(f"Resolved {len(client.models)} models and {len(client.services)} services")
    return client


def resolve_command(
    source: str = typer.Argument(help="Document path, http(s) URL, or '-' for stdin."),
    default_tag: Optional[str] = typer.Option(
        None, "--default-tag", help="Service name for operations without tags."
    ),
    exclude_param: Optional[list[str]] = typer.Option(
        None,
        "--exclude-param",
        help="Parameter wire name to drop from every operation (repeatable).",
    ),
) -> None:
    """Resolve a document and print its intermediate representation.

    Example::

        specir resolve petstore.yaml --json
        specir resolve https://petstore.swagger.io/v2/swagger.json -o ir.json
        cat api.json | specir resolve - --exclude-param X-Trace-Id
    """
    client = load_client(source, default_tag, exclude_param)
    emit(client)
