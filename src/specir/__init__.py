"""specir -- Resolve Swagger 2 / OpenAPI 3 documents into a code-generation IR.

This package turns an API description document into a language-neutral
Intermediate Representation (:class:`~specir.models.Client`): definition
models, and services grouping the operations with their parameters, results
and errors. A renderer (outside this package) turns the IR into source code.

Typical usage::

    from specir.parser import load_spec, extract_client

    client = extract_client(load_spec("petstore.yaml"))

or from the shell::

    specir resolve petstore.yaml --json

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models for configuration and the IR.
    parser: Document loading and resolution into the IR.
    config: XDG-aware configuration and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
