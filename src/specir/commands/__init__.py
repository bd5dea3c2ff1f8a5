"""Built-in CLI sub-commands for specir.

This package groups the Typer sub-command modules that form the CLI's
command tree:

* :mod:`~specir.commands.resolve` -- resolve a document and print its IR.
* :mod:`~specir.commands.inspect` -- summarise models and services.
* :mod:`~specir.commands.config` -- view and modify global settings.

Multi-command groups (``inspect``, ``config``) export a
:class:`typer.Typer` sub-application; single commands (``resolve``) export a
plain function registered directly on the root app.
"""
