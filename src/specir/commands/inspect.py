"""Inspect commands -- summarise the IR of a document.

Provides the ``specir inspect`` sub-command group with read-only views of a
resolved document: general info, the definition models and the services with
their operations. Every sub-command takes the document source as its
argument and honours the resolver configuration.
"""

from __future__ import annotations

import typer

from specir.commands.resolve import load_client
from specir.output import emit, emit_rows, info


inspect_app = typer.Typer(no_args_is_help=True)

_SOURCE_HELP = "Document path, http(s) URL, or '-' for stdin."


@inspect_app.command("info")
def inspect_info(
    source: str = typer.Argument(help=_SOURCE_HELP),
) -> None:
    """Show the version, server and size of a document's IR.

    Example::

        specir inspect info petstore.yaml
    """
    client = load_client(source)
    emit(
        {
            "version": client.version,
            "server": client.server or "-",
            "models": len(client.models),
            "services": len(client.services),
            "operations": sum(len(s.operations) for s in client.services),
        }
    )


@inspect_app.command("models")
def inspect_models(
    source: str = typer.Argument(help=_SOURCE_HELP),
) -> None:
    """List the definition models with their export kind and type.

    Example::

        specir inspect models petstore.yaml --plain
    """
    client = load_client(source)
    if not client.models:
        info("No models defined in this document.")
        return

    rows: list[list[str]] = []
    for model in client.models:
        names = [prop.name for prop in model.properties]
        props = ", ".join(names[:5])
        if len(names) > 5:
            props += "..."
        rows.append([model.name, model.export.value, model.type, props])

    emit_rows(
        ["Model", "Export", "Type", "Properties"], rows, title=f"Models ({len(rows)})"
    )


@inspect_app.command("services")
def inspect_services(
    source: str = typer.Argument(help=_SOURCE_HELP),
) -> None:
    """List every operation grouped by service.

    Example::

        specir inspect services petstore.yaml
    """
    client = load_client(source)
    if not client.services:
        info("No operations defined in this document.")
        return

    rows: list[list[str]] = []
    for service in client.services:
        for operation in service.operations:
            rows.append(
                [
                    service.name,
                    operation.name,
                    operation.method,
                    operation.path,
                    ", ".join(result.type for result in operation.results),
                ]
            )

    emit_rows(
        ["Service", "Operation", "Method", "Path", "Returns"],
        rows,
        title=f"Operations ({len(rows)})",
    )
