"""Document dialects: Swagger 2 (``v2``) and OpenAPI 3 (``v3``).

Both dialects go through the same resolver code. Everything that differs
between them -- reference namespaces, where schema definitions live, which
parameter locations exist, how request bodies are modelled and how the server
URL is assembled -- is captured in one frozen :class:`Dialect` descriptor.

:func:`detect_dialect` picks the descriptor from the document's version
marker before any resolution begins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from specir.exceptions import UnsupportedDialectError
from specir.models import ParameterLocation

logger = logging.getLogger(__name__)


_PRIMITIVE_TYPES: dict[str, str] = {
    "file": "binary",
    "any": "any",
    "object": "any",
    "array": "any[]",
    "boolean": "boolean",
    "byte": "number",
    "int": "number",
    "integer": "number",
    "float": "number",
    "double": "number",
    "short": "number",
    "long": "number",
    "number": "number",
    "char": "string",
    "date": "string",
    "date-time": "string",
    "password": "string",
    "string": "string",
    "void": "void",
    "null": "null",
}


@dataclass(frozen=True)
class Dialect:
    """Describes one document dialect.

    Attributes:
        name: ``"v2"`` or ``"v3"``.
        namespace_prefixes: Reference prefixes stripped from type tokens
            (``#/definitions/`` ...).
        schemas_pointer: Key path from the root to the schema definitions map.
        parameter_locations: Values of ``in`` accepted on parameters.
        body_model: ``"parameter"`` when bodies are ``in: body`` parameters,
            ``"requestBody"`` when operations carry a ``requestBody`` object.
        primitive_types: Primitive-name lookup used by the type parser.
    """

    name: str
    namespace_prefixes: tuple[str, ...]
    schemas_pointer: tuple[str, ...]
    parameter_locations: frozenset[str]
    body_model: str
    primitive_types: Mapping[str, str] = field(default_factory=lambda: dict(_PRIMITIVE_TYPES))

    def schemas(self, document: Mapping[str, Any]) -> Mapping[str, Any]:
        """Return the schema definitions map of *document* (empty if absent)."""
        node: Any = document
        for key in self.schemas_pointer:
            if not isinstance(node, Mapping):
                return {}
            node = node.get(key)
        return node if isinstance(node, Mapping) else {}

    def server(self, document: Mapping[str, Any]) -> str:
        """Return the base server URL declared by *document*, without a trailing slash."""
        if self.name == "v2":
            schemes = document.get("schemes") or []
            scheme = schemes[0] if schemes else "http"
            host = document.get("host")
            base_path = document.get("basePath") or ""
            url = f"{scheme}://{host}{base_path}" if host else base_path
        else:
            servers = document.get("servers") or []
            server = servers[0] if servers else {}
            url = server.get("url") or ""
            for variable, spec in (server.get("variables") or {}).items():
                default = spec.get("default", "") if isinstance(spec, Mapping) else ""
                url = url.replace(f"{{{variable}}}", str(default))
        return url.rstrip("/")


V2 = Dialect(
    name="v2",
    namespace_prefixes=(
        "#/definitions/",
        "#/parameters/",
        "#/responses/",
        "#/securityDefinitions/",
    ),
    schemas_pointer=("definitions",),
    parameter_locations=frozenset(
        {
            ParameterLocation.PATH.value,
            ParameterLocation.QUERY.value,
            ParameterLocation.HEADER.value,
            ParameterLocation.FORM_DATA.value,
            ParameterLocation.BODY.value,
        }
    ),
    body_model="parameter",
)

V3 = Dialect(
    name="v3",
    namespace_prefixes=(
        "#/components/schemas/",
        "#/components/responses/",
        "#/components/parameters/",
        "#/components/examples/",
        "#/components/requestBodies/",
        "#/components/headers/",
        "#/components/securitySchemes/",
        "#/components/links/",
        "#/components/callbacks/",
    ),
    schemas_pointer=("components", "schemas"),
    parameter_locations=frozenset(
        {
            ParameterLocation.PATH.value,
            ParameterLocation.QUERY.value,
            ParameterLocation.HEADER.value,
            ParameterLocation.COOKIE.value,
            ParameterLocation.FORM_DATA.value,
        }
    ),
    body_model="requestBody",
)


def detect_dialect(document: Mapping[str, Any]) -> Dialect:
    """Select the dialect from the document's version marker.

    The ``swagger`` field is consulted first, then ``openapi``. The marker
    must be a string whose leading numeral is ``2`` or ``3``.

    Args:
        document: The loaded document tree.

    Returns:
        :data:`V2` or :data:`V3`.

    Raises:
        UnsupportedDialectError: If the marker is missing, not a string, or
            names any other major version.
    """
    marker = document.get("swagger", document.get("openapi"))
    if not isinstance(marker, str):
        raise UnsupportedDialectError(marker)

    major = marker.strip().split(".", 1)[0]
    if major == "2":
        dialect = V2
    elif major == "3":
        dialect = V3
    else:
        raise UnsupportedDialectError(marker)

    logger.debug("Detected dialect %s from marker %r", dialect.name, marker)
    return dialect
