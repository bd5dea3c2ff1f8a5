"""Build :class:`~specir.models.Enumerator` lists from schema nodes.

Three sources are supported:

* :func:`get_enum` -- the JSON Schema ``enum`` keyword;
* :func:`extend_enum` -- vendor extensions ``x-enum-varnames`` and
  ``x-enum-descriptions`` that name/describe the members positionally;
* :func:`get_enum_from_description` -- the legacy encoding where an integer
  schema's description reads ``Active=1,Inactive=2``.

Every list returned here has unique member names.
"""

from __future__ import annotations

import json
import re
from typing import Any, Iterable, Mapping, Optional, TypeVar

from specir.models import Enumerator
from specir.parser.naming import enum_member_name

_DESCRIPTION_ENUM_START_RE = re.compile(r"^(\w+=[0-9]+)")
_DESCRIPTION_ENUM_PAIR_RE = re.compile(r"(\w+=[0-9]+,?)")

_Named = TypeVar("_Named")


def is_defined(value: Any) -> bool:
    """Return ``True`` unless *value* is ``None`` or an empty string."""
    return value is not None and value != ""


def render_number(value: int | float) -> str:
    """Render a number the way it appears in the document (``1.0`` -> ``1``)."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _distinct(values: Iterable[Any]) -> list[Any]:
    # Enum values may be unhashable (objects, arrays), so compare pairwise.
    result: list[Any] = []
    for value in values:
        if not any(
            type(seen) is type(value) and seen == value for seen in result
        ):
            result.append(value)
    return result


def dedupe_by_name(items: Iterable[_Named]) -> list[_Named]:
    """Drop items whose ``name`` was already seen; the first occurrence wins."""
    seen: set[str] = set()
    result: list[_Named] = []
    for item in items:
        name = getattr(item, "name")
        if name not in seen:
            seen.add(name)
            result.append(item)
    return result


def get_enum(values: Any) -> list[Enumerator]:
    """Build enumerators from a raw ``enum`` value list.

    Values are de-duplicated and ``None``/empty strings dropped. Numbers
    become ``'_<n>'`` members with a bare numeric value; everything else is
    rendered as a quoted string literal.

    Example::

        >>> [e.name for e in get_enum([1, 2, 2, 3])]
        ["'_1'", "'_2'", "'_3'"]
        >>> get_enum(["available"])[0].value
        "'available'"
    """
    if not isinstance(values, list):
        return []

    enumerators: list[Enumerator] = []
    for value in _distinct(values):
        if not is_defined(value):
            continue
        if _is_number(value):
            rendered = render_number(value)
            enumerators.append(
                Enumerator(name=f"'_{rendered}'", value=rendered, type="number")
            )
            continue
        if isinstance(value, bool):
            text = "true" if value else "false"
        elif isinstance(value, str):
            text = value
        else:
            text = json.dumps(value, sort_keys=True)
        escaped = text.replace("'", "\\'")
        enumerators.append(
            Enumerator(name=enum_member_name(text), value=f"'{escaped}'", type="string")
        )
    return dedupe_by_name(enumerators)


def _string_list(value: Any) -> Optional[list[str]]:
    if not isinstance(value, list):
        return None
    return [item for item in value if isinstance(item, str)]


def extend_enum(enumerators: list[Enumerator], schema: Mapping[str, Any]) -> list[Enumerator]:
    """Apply ``x-enum-varnames`` / ``x-enum-descriptions`` by position.

    Missing or empty entries keep the generated name/description.
    """
    names = _string_list(schema.get("x-enum-varnames"))
    descriptions = _string_list(schema.get("x-enum-descriptions"))

    extended = []
    for index, enumerator in enumerate(enumerators):
        name = names[index] if names and index < len(names) else None
        description = (
            descriptions[index] if descriptions and index < len(descriptions) else None
        )
        extended.append(
            enumerator.model_copy(
                update={
                    "name": name or enumerator.name,
                    "description": description or enumerator.description,
                }
            )
        )
    return dedupe_by_name(extended)


def get_enum_from_description(description: Any) -> list[Enumerator]:
    """Parse the legacy ``Name=Number,Name=Number`` description encoding.

    Returns an empty list when the description does not start with a
    ``Name=Number`` pair. Duplicate names are dropped.
    """
    if not isinstance(description, str) or not _DESCRIPTION_ENUM_START_RE.match(description):
        return []

    enumerators: list[Enumerator] = []
    for pair in _DESCRIPTION_ENUM_PAIR_RE.findall(description):
        name, _, number = pair.partition("=")
        digits = re.sub(r"[^0-9]", "", number)
        if name and digits:
            enumerators.append(
                Enumerator(
                    name=enum_member_name(name),
                    value=str(int(digits)),
                    type="number",
                )
            )
    return dedupe_by_name(enumerators)
