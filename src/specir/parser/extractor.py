"""Resolve a loaded Swagger 2 / OpenAPI 3 document into a :class:`~specir.models.Client`.

The single public entry point is :func:`extract_client`. One call is one
resolution pass: it detects the dialect, builds every schema definition into
a Model, builds and groups every operation into services, and finally
post-processes the whole tree (imports, enum de-duplication, operation name
collisions, ordering).

Errors are fatal. An unsupported version marker or a ``$ref`` that points
nowhere aborts the pass and no partial Client is returned.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Mapping, Optional

from specir.models import Client, Model, ResolverConfig
from specir.parser.dialect import V3, detect_dialect
from specir.parser.model_builder import ModelBuilder
from specir.parser.naming import escape_reserved
from specir.parser.operations import OperationBuilder
from specir.parser.resolver import ReferenceResolver
from specir.parser.services import collect_services, post_process_client

logger = logging.getLogger(__name__)


def extract_client(
    document: Mapping[str, Any], config: Optional[ResolverConfig] = None
) -> Client:
    """Resolve *document* into the IR.

    Args:
        document: The raw document as returned by
            :func:`~specir.parser.loader.load_spec`. It is never mutated.
        config: Resolver options; defaults to :class:`~specir.models.ResolverConfig`.

    Returns:
        The post-processed :class:`~specir.models.Client`.

    Raises:
        UnsupportedDialectError: If the ``swagger``/``openapi`` marker is
            missing or names an unsupported major version.
        UnresolvableReferenceError: If any ``$ref`` cannot be resolved.

    Example::

        document = load_spec("petstore.yaml")
        client = extract_client(document)
        for service in client.services:
            print(service.name, [op.name for op in service.operations])
    """
    config = config or ResolverConfig()
    dialect = detect_dialect(document)
    builder = ModelBuilder(document, dialect, ReferenceResolver(document))

    models = collect_models(builder)
    registry = collect_services(document, OperationBuilder(builder, config))
    logger.debug("Resolved %d models and %d services", len(models), len(registry))

    client = Client(
        version=get_version(document),
        server=dialect.server(document),
        models=models,
        services=registry.services(),
    )
    return post_process_client(client)


def get_version(document: Mapping[str, Any]) -> str:
    """Return ``info.version`` without a leading ``v``/``V``."""
    info = document.get("info")
    version = info.get("version") if isinstance(info, Mapping) else None
    if version is None:
        return "0.0.0"
    return re.sub(r"^[vV]", "", str(version))


def collect_models(builder: ModelBuilder) -> list[Model]:
    """Build one definition Model per schema definition, in declaration order.

    OpenAPI 3 documents also contribute every ``components.parameters``
    entry that carries a ``schema``; the parameter's description and
    deprecation flag are applied to the Model.
    """
    document = builder.document
    models: list[Model] = []

    for name, schema in builder.dialect.schemas(document).items():
        models.append(builder.build(schema, _definition_name(builder, name), is_definition=True))

    if builder.dialect is V3:
        components = document.get("components")
        parameters = components.get("parameters") if isinstance(components, Mapping) else None
        if isinstance(parameters, Mapping):
            for name, parameter in parameters.items():
                if not isinstance(parameter, Mapping) or not isinstance(
                    parameter.get("schema"), Mapping
                ):
                    continue
                model = builder.build(
                    parameter["schema"], _definition_name(builder, name), is_definition=True
                )
                description = parameter.get("description")
                model.description = description if isinstance(description, str) and description else None
                model.deprecated = parameter.get("deprecated") is True
                models.append(model)

    return models


def _definition_name(builder: ModelBuilder, name: Any) -> str:
    return escape_reserved(builder.get_type(str(name)).base)
