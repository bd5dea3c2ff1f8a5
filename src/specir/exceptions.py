"""Exception hierarchy for specir.

All exceptions inherit from :class:`SpecirError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`specir.exit_codes`.
The top-level error handler in :func:`specir.app.main` catches
``SpecirError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Library callers of :func:`specir.parser.extract_client` see the same
exceptions: resolution is all-or-nothing, so any of them means no IR was
produced.

Subclass hierarchy::

    SpecirError (exit 1)
    +-- InvalidUsageError              (exit 2)
    +-- ConfigError                    (exit 1)
    +-- SpecParseError                 (exit 7)
        +-- UnresolvableReferenceError (exit 8)
        +-- UnsupportedDialectError    (exit 9)
"""

from __future__ import annotations

from typing import Any

from specir.exit_codes import (
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_SPEC_PARSE_ERROR,
    EXIT_UNRESOLVABLE_REFERENCE,
    EXIT_UNSUPPORTED_DIALECT,
)


class SpecirError(Exception):
    """Base exception for all specir errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`specir.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(SpecirError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class ConfigError(SpecirError):
    """Raised for configuration problems (invalid JSON, failed validation, unknown keys)."""

    exit_code = EXIT_GENERIC_FAILURE


class SpecParseError(SpecirError):
    """Raised when the API description document cannot be loaded or parsed."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class UnresolvableReferenceError(SpecParseError):
    """Raised when a ``$ref`` pointer does not resolve against the document.

    Fatal: the whole resolution pass is aborted because a partially
    resolved IR is not safe to render.

    Args:
        ref: The original, undecoded reference string.
        detail: Optional explanation appended to the message.
    """

    exit_code = EXIT_UNRESOLVABLE_REFERENCE

    def __init__(self, ref: str, detail: str | None = None):
        message = f'Could not find reference: "{ref}"'
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
        self.ref = ref


class UnsupportedDialectError(SpecParseError):
    """Raised when the ``swagger``/``openapi`` marker is missing or unsupported.

    Args:
        marker: The raw marker value found in the document (may be ``None``
            or a non-string).
    """

    exit_code = EXIT_UNSUPPORTED_DIALECT

    def __init__(self, marker: Any):
        if marker is None:
            message = (
                "Missing 'swagger' or 'openapi' version marker. "
                "Is this an OpenAPI 2 or 3 document?"
            )
        elif not isinstance(marker, str):
            message = (
                f"Version marker must be a string, got {type(marker).__name__} "
                f"({marker!r}). Quote the version in the document."
            )
        else:
            message = (
                f'Unsupported OpenAPI version: "{marker}". '
                "Only Swagger 2.x and OpenAPI 3.x documents are supported."
            )
        super().__init__(message)
        self.marker = marker
