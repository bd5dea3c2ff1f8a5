"""Parse raw type tokens into canonical :class:`~specir.models.TypeDescriptor` values.

A type token is whatever a document uses to name a type: a primitive name
(``integer``), a list of primitive names (``["string", "null"]``), a
reference (``#/definitions/Pet``) or a legacy generic expression
(``array[Pet]``, ``Page[Item]``). :func:`get_type` turns any of them into
``{type, base, template, imports, is_nullable}``.

The parser is pure and total: unparseable input degenerates to ``any``.
"""

from __future__ import annotations

import re
from typing import Optional, Union
from urllib.parse import unquote

from specir.models import TypeDescriptor
from specir.parser.dialect import V3, Dialect
from specir.parser.naming import sanitize_type_name, strip_namespace

_GENERIC_RE = re.compile(r"(.*?)\[(.*)\]$")

ANY = "any"
ANY_ARRAY = "any[]"
BINARY = "binary"


def get_mapped_type(
    value: str, format: Optional[str] = None, dialect: Dialect = V3
) -> Optional[str]:
    """Map a primitive name to its canonical type, or ``None`` if not primitive.

    A ``binary`` format always wins over the declared name.
    """
    if format == "binary":
        return BINARY
    return dialect.primitive_types.get(value)


def get_type(
    value: Union[str, list[str], None] = ANY,
    format: Optional[str] = None,
    dialect: Dialect = V3,
) -> TypeDescriptor:
    """Parse a raw type token.

    Args:
        value: A primitive name, a list of primitive names, a reference or a
            generic expression. ``None`` means ``any``.
        format: Optional ``format`` hint from the schema.
        dialect: Supplies the primitive table and namespace prefixes.

    Returns:
        A new :class:`~specir.models.TypeDescriptor`.

    Example::

        >>> get_type("array[Link[Model]]").type
        'Link<Model>[]'
        >>> get_type("#/components/schemas/Pet").imports
        ['Pet']
    """
    result = TypeDescriptor()
    if value is None:
        value = ANY

    if isinstance(value, list):
        members = [
            get_mapped_type(str(item), format, dialect)
            for item in value
            if item != "null"
        ]
        joined = " | ".join(member for member in members if member)
        result.type = joined or ANY
        result.base = joined or ANY
        result.is_nullable = "null" in value
        return result

    if not isinstance(value, str):
        return result

    mapped = get_mapped_type(value, format, dialect)
    if mapped:
        result.type = mapped
        result.base = mapped
        return result

    cleaned = unquote(strip_namespace(value, dialect.namespace_prefixes))

    match = _GENERIC_RE.match(cleaned)
    if match:
        outer_raw, inner_raw = match.group(1), match.group(2)
        outer = get_type(outer_raw, dialect=dialect)
        inner = get_type(inner_raw, dialect=dialect)

        if outer.type == ANY_ARRAY:
            result.type = f"{inner.type}[]"
            result.base = inner.type
            outer.imports = []
        elif inner_raw.strip():
            result.type = f"{outer.type}<{inner.type}>"
            result.base = outer.type
            result.template = inner.type
        else:
            result.type = outer.type
            result.base = outer.type
            result.template = outer.type

        result.add_imports(outer.imports)
        result.add_imports(inner.imports)
        return result

    name = sanitize_type_name(cleaned)
    if name:
        result.type = name
        result.base = name
        result.add_imports([name])
    return result
