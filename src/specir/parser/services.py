"""Group operations into services and post-process the finished IR.

:class:`ServiceRegistry` is the per-run accumulator of services keyed by name;
:func:`collect_services` fills one by walking ``paths`` in document order.

The ``post_process_*`` functions run once over a complete
:class:`~specir.models.Client`. They never mutate their input; each returns
new nodes built with ``model_copy``.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional, TypeVar

from specir.models import Client, HTTPMethod, Model, Operation, ResolverConfig, Service
from specir.parser.enums import dedupe_by_name
from specir.parser.operations import OperationBuilder

logger = logging.getLogger(__name__)

_M = TypeVar("_M", bound=Model)


class ServiceRegistry:
    """Services in first-seen order, keyed by service name."""

    def __init__(self) -> None:
        self._services: dict[str, Service] = {}

    def add(self, operation: Operation) -> Service:
        """File *operation* under its service, creating the service if needed."""
        service = self._services.get(operation.service)
        if service is None:
            service = Service(name=operation.service)
            self._services[operation.service] = service
        service.operations.append(operation)
        service.imports.extend(operation.imports)
        return service

    def services(self) -> list[Service]:
        return list(self._services.values())

    def __len__(self) -> int:
        return len(self._services)

    def __contains__(self, name: object) -> bool:
        return name in self._services


def _operation_tags(node: Mapping[str, Any], default_tag: str) -> list[str]:
    tags = node.get("tags")
    if not isinstance(tags, list):
        return [default_tag]
    unique = list(dict.fromkeys(tag for tag in tags if isinstance(tag, str) and tag))
    return unique or [default_tag]


def collect_services(
    document: Mapping[str, Any],
    operations: OperationBuilder,
    registry: Optional[ServiceRegistry] = None,
) -> ServiceRegistry:
    """Build every operation of *document* and group it by tag.

    An operation with several tags is built once per tag; an operation
    without tags goes to the configured default tag.

    Args:
        document: The loaded document tree.
        operations: Builder for the individual operations.
        registry: Accumulator to fill; a new one is created if omitted.

    Returns:
        The filled registry.
    """
    registry = registry if registry is not None else ServiceRegistry()
    paths = document.get("paths")
    if not isinstance(paths, Mapping):
        return registry

    config: ResolverConfig = operations.config
    for path, path_item in paths.items():
        if not isinstance(path_item, Mapping):
            continue
        path_parameters = path_item.get("parameters")
        if not isinstance(path_parameters, list):
            path_parameters = []

        for method in HTTPMethod:
            node = path_item.get(method.value)
            if not isinstance(node, Mapping):
                continue
            for tag in _operation_tags(node, config.default_tag):
                operation = operations.build_operation(
                    str(path), method.value, tag, node, path_parameters
                )
                registry.add(operation)
                logger.debug(
                    "Added %s %s as %s.%s",
                    operation.method,
                    operation.path,
                    operation.service,
                    operation.name,
                )
    return registry


# ---------------------------------------------------------------------------
# Post-processing
# ---------------------------------------------------------------------------


def sort_imports(imports: Iterable[str], exclude: Optional[str] = None) -> list[str]:
    """De-duplicate and sort case-insensitively, dropping *exclude*."""
    unique = [name for name in dict.fromkeys(imports) if name != exclude]
    return sorted(unique, key=str.lower)


def post_process_model(model: _M) -> _M:
    """Return a copy of *model* (and its subtree) with clean imports and enums."""
    return model.model_copy(
        update={
            "imports": sort_imports(model.imports, model.name),
            "enum": dedupe_by_name(model.enum),
            "enums": [post_process_model(nested) for nested in dedupe_by_name(model.enums)],
            "properties": [post_process_model(prop) for prop in model.properties],
            "link": post_process_model(model.link) if model.link is not None else None,
        }
    )


def post_process_operations(operations: list[Operation]) -> list[Operation]:
    """Post-process a service's operations and suffix repeated names.

    The second occurrence of a name gets ``1``, the third ``2``, and so on.
    """
    seen: dict[str, int] = {}
    processed: list[Operation] = []
    for operation in operations:
        index = seen.get(operation.name, 0)
        seen[operation.name] = index + 1
        name = f"{operation.name}{index}" if index else operation.name
        if index:
            logger.debug(
                "Renamed repeated operation %s.%s to %s", operation.service, operation.name, name
            )

        parameters = [post_process_model(p) for p in operation.parameters]
        results = [post_process_model(r) for r in operation.results]
        imports = [*operation.imports]
        for model in (*parameters, *results):
            imports.extend(model.imports)

        processed.append(
            operation.model_copy(
                update={
                    "name": name,
                    "imports": sort_imports(imports),
                    "parameters": parameters,
                    "parameters_path": [post_process_model(p) for p in operation.parameters_path],
                    "parameters_query": [post_process_model(p) for p in operation.parameters_query],
                    "parameters_form": [post_process_model(p) for p in operation.parameters_form],
                    "parameters_header": [
                        post_process_model(p) for p in operation.parameters_header
                    ],
                    "parameters_cookie": [
                        post_process_model(p) for p in operation.parameters_cookie
                    ],
                    "parameters_body": (
                        post_process_model(operation.parameters_body)
                        if operation.parameters_body is not None
                        else None
                    ),
                    "results": results,
                }
            )
        )
    return processed


def post_process_service(service: Service) -> Service:
    operations = post_process_operations(service.operations)
    imports = [*service.imports]
    for operation in operations:
        imports.extend(operation.imports)
    return service.model_copy(update={"operations": operations, "imports": sort_imports(imports)})


def post_process_client(client: Client) -> Client:
    """Return the final Client: clean models and services, sorted by name."""
    models = [post_process_model(model) for model in client.models]
    services = [post_process_service(service) for service in client.services]
    return client.model_copy(
        update={
            "models": sorted(models, key=lambda m: m.name.lower()),
            "services": sorted(services, key=lambda s: s.name.lower()),
        }
    )
