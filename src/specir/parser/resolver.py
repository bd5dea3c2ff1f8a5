"""Resolve ``$ref`` JSON Reference pointers against a loaded document.

OpenAPI documents commonly use ``$ref`` pointers (e.g.,
``{"$ref": "#/components/schemas/Pet"}``) to avoid repetition. Unlike a
deep-inlining pass, the resolver here looks references up on demand: the
model builder keeps ``$ref`` schemas as ``reference`` leaves (which is what
breaks recursive schemas at the IR boundary) and only dereferences parameters,
request bodies, responses and composed members when it needs their content.

Only **internal** references (those starting with ``#/``) are supported.
Anything that does not resolve raises
:class:`~specir.exceptions.UnresolvableReferenceError`.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping
from urllib.parse import unquote

from specir.exceptions import UnresolvableReferenceError

logger = logging.getLogger(__name__)


def decode_segment(segment: str) -> str:
    """Decode one JSON Pointer segment (RFC 6901 escapes, then URI escapes)."""
    return unquote(segment.replace("~1", "/").replace("~0", "~"))


def resolve_ref(ref: str, document: Mapping[str, Any]) -> Any:
    """Resolve a single ``$ref`` string against the root document.

    Parses JSON Pointer references like ``#/components/schemas/Pet`` and
    navigates the document to locate the referenced value. Mappings are
    walked by key and sequences by integer index.

    Args:
        ref: The ``$ref`` string (e.g., ``"#/definitions/Pet"``).
        document: The root document to resolve against.

    Returns:
        The value found at the referenced path.

    Raises:
        UnresolvableReferenceError: If the reference is external (does not
            start with ``#/``), or if any segment in the pointer path does
            not exist in the document.
    """
    if not isinstance(ref, str) or not ref.startswith("#/"):
        raise UnresolvableReferenceError(
            str(ref), "only internal references (#/...) are supported"
        )

    current: Any = document
    for raw_segment in ref[2:].split("/"):
        if not raw_segment:
            continue
        segment = decode_segment(raw_segment)

        if isinstance(current, Mapping):
            if segment not in current:
                raise UnresolvableReferenceError(
                    ref, f"key '{segment}' not found at path"
                )
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError) as exc:
                raise UnresolvableReferenceError(
                    ref, f"invalid array index '{segment}'"
                ) from exc
        else:
            raise UnresolvableReferenceError(
                ref, f"cannot navigate into {type(current).__name__}"
            )

    return current


class ReferenceResolver:
    """Memoising reference resolver bound to one document.

    One instance is created per :func:`~specir.parser.extractor.extract_client`
    call. Memoisation has no behavioural effect; the document is never
    mutated.

    Args:
        document: The root document tree.
    """

    def __init__(self, document: Mapping[str, Any]) -> None:
        self.document = document
        self._cache: dict[str, Any] = {}

    def resolve(self, ref: str) -> Any:
        """Return the node *ref* points at.

        Raises:
            UnresolvableReferenceError: See :func:`resolve_ref`.
        """
        if not isinstance(ref, str):
            return resolve_ref(ref, self.document)
        if ref not in self._cache:
            self._cache[ref] = resolve_ref(ref, self.document)
            logger.debug("Resolved %s", ref)
        return self._cache[ref]

    def deref(self, node: Any) -> Any:
        """Return the target of *node* if it is a ``$ref`` object, else *node*."""
        if isinstance(node, Mapping) and "$ref" in node:
            return self.resolve(node["$ref"])
        return node
