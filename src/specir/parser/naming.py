"""Identifier sanitisation and case conversion for IR names.

Document names (tags, operation ids, parameter names, property names,
enumeration values) are free text. Renderers need code-safe identifiers, so
every name that ends up in the IR goes through one of the helpers here:

* :func:`escape_name` -- property names; quoted when not a bare identifier.
* :func:`service_name` -- tags, upper camel case (``pet-store`` -> ``PetStore``).
* :func:`operation_name` -- operation ids, lower camel case.
* :func:`parameter_name` -- parameter names, lower camel case with reserved
  words suffixed by ``_``.
* :func:`enum_member_name` -- enumeration member names, upper snake case.
* :func:`sanitize_type_name` / :func:`strip_namespace` -- type tokens.

All helpers are pure and never raise.
"""

from __future__ import annotations

import keyword
import re
from typing import Iterable

# Reserved in the languages IR consumers commonly target.
RESERVED_WORDS = frozenset(keyword.kwlist) | frozenset(
    {
        "arguments", "break", "case", "catch", "class", "const", "continue",
        "debugger", "default", "delete", "do", "else", "enum", "eval",
        "export", "extends", "false", "finally", "for", "function", "if",
        "implements", "import", "in", "instanceof", "interface", "let", "new",
        "null", "package", "private", "protected", "public", "return",
        "static", "super", "switch", "this", "throw", "true", "try", "typeof",
        "var", "void", "while", "with", "yield",
    }
)

_BARE_IDENTIFIER_RE = re.compile(r"[a-zA-Z_$][\w$]+", re.ASCII)
_WORD_RE = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|[0-9]+")
_LEADING_NON_LETTERS_RE = re.compile(r"^[^a-zA-Z]+")
_DISALLOWED_RE = re.compile(r"[^\w\-]+", re.ASCII)
_ARRAY_SUFFIX_RE = re.compile(r"\[\]$")


def camel_case(value: str, pascal: bool = False) -> str:
    """Join the words of *value* in camel case.

    Words are split at separators (anything that is not an ASCII letter or
    digit) and at case boundaries, so ``"get_pet-byID"`` becomes
    ``"getPetById"``.

    Args:
        value: Free-text input.
        pascal: Capitalise the first word as well (``"GetPetById"``).

    Returns:
        The camel-cased string, or ``""`` when *value* holds no words.
    """
    words = _WORD_RE.findall(value)
    if not words:
        return ""
    head, *tail = words
    first = head.capitalize() if pascal else head.lower()
    return first + "".join(word.capitalize() for word in tail)


def _clean(value: str) -> str:
    """Strip leading non-letters and replace disallowed characters with ``-``."""
    value = _LEADING_NON_LETTERS_RE.sub("", value)
    return _DISALLOWED_RE.sub("-", value).strip()


def escape_reserved(value: str) -> str:
    """Suffix *value* with ``_`` when it is a reserved word."""
    return f"{value}_" if value in RESERVED_WORDS else value


def escape_name(value: str) -> str:
    """Quote a property name that is not a valid bare identifier.

    Example::

        >>> escape_name("petId")
        'petId'
        >>> escape_name("x-rate-limit")
        "'x-rate-limit'"
    """
    if _BARE_IDENTIFIER_RE.fullmatch(value):
        return value
    return f"'{value}'"


def service_name(tag: str) -> str:
    """Derive a service name from an operation tag (upper camel case)."""
    return camel_case(_clean(tag), pascal=True)


def operation_name(operation_id: str | None, method: str) -> str:
    """Derive an operation name from its ``operationId``, else its HTTP method."""
    return camel_case(_clean(operation_id or method))


def parameter_name(value: str) -> str:
    """Derive a code-safe parameter name from its wire name.

    Example::

        >>> parameter_name("X-Request-ID")
        'xRequestId'
        >>> parameter_name("default")
        'default_'
        >>> parameter_name("ids[]")
        'idsArray'
    """
    value = _ARRAY_SUFFIX_RE.sub("-array", value)
    return escape_reserved(camel_case(_clean(value)))


def enum_member_name(value: str) -> str:
    """Derive an upper snake case enumeration member name from a value."""
    name = re.sub(r"\W+", "_", value, flags=re.ASCII)
    name = re.sub(r"^(\d+)", r"_\1", name)
    name = re.sub(r"([a-z])([A-Z]+)", r"\1_\2", name)
    return name.upper()


def sanitize_type_name(value: str) -> str:
    """Normalise a type token into an identifier (``Foo.Bar`` -> ``Foo_Bar``)."""
    value = re.sub(r"^[^a-zA-Z_$]+", "", value)
    return re.sub(r"[^\w$]+", "_", value, flags=re.ASCII)


def strip_namespace(value: str, prefixes: Iterable[str]) -> str:
    """Remove known reference prefixes (``#/definitions/`` ...) from *value*."""
    value = value.strip()
    for prefix in prefixes:
        if value.startswith(prefix):
            value = value[len(prefix):]
    return value
