"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~specir.exceptions.SpecirError` subclass.
External tooling (CI scripts, code generators wrapping ``specir``) can
inspect the exit code to determine the failure class without parsing stderr.

Example::

    $ specir resolve broken.yaml
    $ echo $?
    8   # EXIT_UNRESOLVABLE_REFERENCE -- a $ref points nowhere
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_SPEC_PARSE_ERROR = 7
"""The API description document could not be loaded or parsed."""

EXIT_UNRESOLVABLE_REFERENCE = 8
"""A ``$ref`` pointer could not be resolved against the document."""

EXIT_UNSUPPORTED_DIALECT = 9
"""The ``swagger``/``openapi`` version marker is missing or unsupported."""
