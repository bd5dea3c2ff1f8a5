"""Build IR operations: parameters, request bodies, responses, results and errors.

:class:`OperationBuilder` turns one path-item method entry into an
:class:`~specir.models.Operation`. Schemas met along the way (parameter
schemas, request bodies, response bodies) are handed to the shared
:class:`~specir.parser.model_builder.ModelBuilder`, so parameters and
responses are Models with a location attached.

Path-level parameters are prepended to the operation's own parameters by
plain concatenation. When both levels declare the same parameter, both are
kept and a warning is logged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from specir.models import (
    Model,
    ModelExport,
    Operation,
    OperationError,
    OperationParameter,
    OperationResponse,
    ParameterLocation,
    ResolverConfig,
    ResponseLocation,
)
from specir.parser.dialect import Dialect
from specir.parser.model_builder import ModelBuilder
from specir.parser.naming import operation_name, parameter_name, service_name
from specir.parser.resolver import ReferenceResolver

logger = logging.getLogger(__name__)

# Supplied by client configuration, never by the caller.
ALWAYS_EXCLUDED_PARAMETERS = frozenset({"api-version"})

FORM_MEDIA_TYPES = frozenset({"application/x-www-form-urlencoded", "multipart/form-data"})

# Keywords of a Swagger 2 parameter object that are not part of its inline schema.
_PARAMETER_KEYWORDS = frozenset(
    {
        "name",
        "in",
        "required",
        "description",
        "deprecated",
        "allowEmptyValue",
        "collectionFormat",
        "schema",
        "content",
        "style",
        "explode",
        "example",
        "examples",
    }
)

_RESPONSE_PREFIXES = ("#/responses/", "#/components/responses/")


@dataclass
class ParameterGroups:
    """Parameters of one operation, as a flat list and per location."""

    parameters: list[OperationParameter] = field(default_factory=list)
    path: list[OperationParameter] = field(default_factory=list)
    query: list[OperationParameter] = field(default_factory=list)
    form: list[OperationParameter] = field(default_factory=list)
    header: list[OperationParameter] = field(default_factory=list)
    cookie: list[OperationParameter] = field(default_factory=list)
    body: Optional[OperationParameter] = None
    imports: list[str] = field(default_factory=list)

    def add(self, parameter: OperationParameter) -> None:
        self.parameters.append(parameter)
        self.imports.extend(parameter.imports)
        location = parameter.in_
        if location == ParameterLocation.PATH:
            self.path.append(parameter)
        elif location == ParameterLocation.QUERY:
            self.query.append(parameter)
        elif location == ParameterLocation.FORM_DATA:
            self.form.append(parameter)
        elif location == ParameterLocation.HEADER:
            self.header.append(parameter)
        elif location == ParameterLocation.COOKIE:
            self.cookie.append(parameter)
        elif location == ParameterLocation.BODY:
            self.body = parameter


def media_base_type(media_type: str) -> str:
    """Drop media type parameters: ``application/json; charset=utf-8`` -> ``application/json``."""
    return media_type.split(";", 1)[0].strip().lower()


def response_code(key: Any) -> Optional[int]:
    """Map a responses-map key to a status code.

    ``default`` counts as 200; keys that are not purely numeric are skipped
    (``None``).
    """
    if isinstance(key, bool):
        return None
    if isinstance(key, int):
        return key
    text = str(key).strip()
    if text == "default":
        return 200
    if text.isdigit():
        return int(text)
    return None


def _text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _are_equal(a: Model, b: Model) -> bool:
    equal = a.type == b.type and a.base == b.base and a.template == b.template
    if equal and a.link is not None and b.link is not None:
        return _are_equal(a.link, b.link)
    return equal


def get_results(responses: list[OperationResponse]) -> list[OperationResponse]:
    """Select the success results of an operation.

    Codes in ``[200, 300)`` except 204 qualify; structurally equal results
    are kept once. Without any qualifying response a single ``void`` result
    at code 200 is returned.
    """
    candidates = [r for r in responses if 200 <= r.code < 300 and r.code != 204]
    if not candidates:
        return [
            OperationResponse(
                code=200,
                in_=ResponseLocation.RESPONSE,
                export=ModelExport.GENERIC,
                type="void",
                base="void",
            )
        ]

    results: list[OperationResponse] = []
    for candidate in candidates:
        if not any(_are_equal(candidate, seen) for seen in results):
            results.append(candidate)
    return results


def get_errors(responses: list[OperationResponse]) -> list[OperationError]:
    """Responses with code >= 300 that carry a description."""
    return [
        OperationError(code=r.code, description=r.description)
        for r in responses
        if r.code >= 300 and r.description
    ]


def get_response_header(results: list[OperationResponse]) -> Optional[str]:
    """Name of the first header-located result, if any."""
    for result in results:
        if result.in_ == ResponseLocation.HEADER:
            return result.name
    return None


def sort_by_required(parameters: list[OperationParameter]) -> list[OperationParameter]:
    """Required parameters without a default first; order otherwise kept."""
    return sorted(
        parameters,
        key=lambda p: 0 if p.is_required and p.default is None else 1,
    )


class OperationBuilder:
    """Build :class:`~specir.models.Operation` nodes for one document.

    Args:
        builder: The document's model builder (shares its resolver).
        config: Resolver options (excluded parameters, media type priority).
    """

    def __init__(self, builder: ModelBuilder, config: Optional[ResolverConfig] = None) -> None:
        self.builder = builder
        self.config = config or ResolverConfig()
        self.excluded = ALWAYS_EXCLUDED_PARAMETERS | frozenset(self.config.excluded_parameters)

    @property
    def dialect(self) -> Dialect:
        return self.builder.dialect

    @property
    def resolver(self) -> ReferenceResolver:
        return self.builder.resolver

    # -- parameters --------------------------------------------------------

    def build_parameter(self, node: Any) -> Optional[OperationParameter]:
        """Build one parameter, or ``None`` for an unknown location."""
        node = self.resolver.deref(node)
        if not isinstance(node, Mapping):
            return None

        location = node.get("in")
        if location not in self.dialect.parameter_locations:
            logger.debug("Skipping parameter %r in unknown location %r", node.get("name"), location)
            return None

        prop = str(node.get("name") or "")
        model = self.builder.build(self._parameter_schema(node, location))
        return OperationParameter(
            **{
                **dict(model),
                "name": parameter_name(prop),
                "prop": prop,
                "in_": ParameterLocation(location),
                "description": _text(node.get("description")),
                "deprecated": node.get("deprecated") is True,
                "is_required": location == ParameterLocation.PATH.value
                or node.get("required") is True,
                "is_nullable": model.is_nullable or node.get("x-nullable") is True,
            }
        )

    def _parameter_schema(self, node: Mapping[str, Any], location: str) -> Mapping[str, Any]:
        schema = node.get("schema")
        if isinstance(schema, Mapping):
            return schema
        if self.dialect.body_model == "parameter" and location != ParameterLocation.BODY.value:
            # Swagger 2 describes non-body parameters with inline type keywords.
            return {key: value for key, value in node.items() if key not in _PARAMETER_KEYWORDS}
        _, content_schema = self.select_content(node.get("content"))
        return content_schema or {}

    def build_parameters(self, nodes: Any) -> ParameterGroups:
        """Build and group a parameter list, dropping excluded wire names."""
        groups = ParameterGroups()
        if not isinstance(nodes, list):
            return groups
        for node in nodes:
            parameter = self.build_parameter(node)
            if parameter is None:
                continue
            if parameter.prop in self.excluded:
                logger.debug("Excluding parameter %r", parameter.prop)
                continue
            groups.add(parameter)
        return groups

    # -- request bodies ----------------------------------------------------

    def select_content(self, content: Any) -> tuple[Optional[str], Optional[Mapping[str, Any]]]:
        """Pick ``(media_type, schema)`` from a content map.

        Media types from ``media_type_priority`` win in priority order; else
        the first media type that carries a schema. ``(None, None)`` when no
        media type has a schema.
        """
        if not isinstance(content, Mapping):
            return None, None

        with_schema = [
            (str(media_type), media["schema"])
            for media_type, media in content.items()
            if isinstance(media, Mapping) and isinstance(media.get("schema"), Mapping)
        ]
        for preferred in self.config.media_type_priority:
            for media_type, schema in with_schema:
                if media_base_type(media_type) == preferred:
                    return media_type, schema
        if with_schema:
            return with_schema[0]
        return None, None

    def build_request_body(self, node: Any) -> Optional[OperationParameter]:
        """Build the body parameter of an OpenAPI 3 ``requestBody``."""
        node = self.resolver.deref(node)
        if not isinstance(node, Mapping):
            return None

        media_type, schema = self.select_content(node.get("content"))
        model = self.builder.build(schema) if schema is not None else Model()
        is_form = media_type is not None and media_base_type(media_type) in FORM_MEDIA_TYPES
        name = "formData" if is_form else "requestBody"
        return OperationParameter(
            **{
                **dict(model),
                "name": name,
                "prop": name,
                "in_": ParameterLocation.FORM_DATA if is_form else ParameterLocation.BODY,
                "media_type": media_type,
                "description": _text(node.get("description")),
                "is_required": node.get("required") is True,
                "is_nullable": model.is_nullable or node.get("nullable") is True,
            }
        )

    # -- responses ---------------------------------------------------------

    def build_responses(self, node: Any) -> list[OperationResponse]:
        """Build every response with a usable status code, ordered by code."""
        if not isinstance(node, Mapping):
            return []
        responses: list[OperationResponse] = []
        for key, response in node.items():
            code = response_code(key)
            if code is None:
                logger.debug("Skipping response with non-numeric code %r", key)
                continue
            responses.append(self.build_response(response, code))
        return sorted(responses, key=lambda r: r.code)

    def build_response(self, node: Any, code: int) -> OperationResponse:
        node = self.resolver.deref(node)
        if not isinstance(node, Mapping):
            node = {}
        description = _text(node.get("description"))

        if self.dialect.body_model == "requestBody":
            _, schema = self.select_content(node.get("content"))
        else:
            schema = node.get("schema") if isinstance(node.get("schema"), Mapping) else None

        if schema is not None:
            ref = schema.get("$ref")
            if isinstance(ref, str) and ref.startswith(_RESPONSE_PREFIXES):
                schema = self.resolver.resolve(ref)
            model = self.builder.build(schema)
            return OperationResponse(
                **{
                    **dict(model),
                    "name": "",
                    "code": code,
                    "description": description,
                    "in_": ResponseLocation.RESPONSE,
                }
            )

        # Only plain string header values can be unwrapped.
        headers = node.get("headers")
        if isinstance(headers, Mapping) and headers:
            return OperationResponse(
                name=str(next(iter(headers))),
                code=code,
                description=description,
                in_=ResponseLocation.HEADER,
                type="string",
                base="string",
            )

        return OperationResponse(code=code, description=description)

    # -- operations --------------------------------------------------------

    @staticmethod
    def _warn_duplicates(method: str, path: str, parameters: list[OperationParameter]) -> None:
        seen: set[tuple[str, str]] = set()
        for parameter in parameters:
            key = (parameter.prop, parameter.in_.value)
            if key in seen:
                logger.warning(
                    "%s %s declares %s parameter %r more than once; keeping both",
                    method.upper(),
                    path,
                    key[1],
                    key[0],
                )
            seen.add(key)

    def build_operation(
        self,
        path: str,
        method: str,
        tag: str,
        node: Mapping[str, Any],
        path_parameters: Optional[list[Any]] = None,
    ) -> Operation:
        """Build the Operation for *method* on *path*, filed under *tag*.

        Args:
            path: The path template (``/pets/{petId}``).
            method: Lower-case HTTP method.
            tag: The tag the operation is grouped under.
            node: The operation object.
            path_parameters: Parameters declared on the path item.

        Returns:
            A new Operation; ``parameters`` is sorted required-first.
        """
        operation_id = node.get("operationId")
        if not isinstance(operation_id, str):
            operation_id = None

        nodes = list(path_parameters or [])
        if isinstance(node.get("parameters"), list):
            nodes.extend(node["parameters"])
        groups = self.build_parameters(nodes)
        self._warn_duplicates(method, path, groups.parameters)

        if self.dialect.body_model == "requestBody" and "requestBody" in node:
            body = self.build_request_body(node["requestBody"])
            if body is not None:
                groups.parameters.append(body)
                groups.imports.extend(body.imports)
                groups.body = body

        responses = self.build_responses(node.get("responses"))
        results = get_results(responses)

        imports = list(groups.imports)
        for result in results:
            imports.extend(result.imports)

        return Operation(
            service=service_name(tag) or service_name(self.config.default_tag),
            name=operation_name(operation_id, method) or operation_name(None, method),
            summary=_text(node.get("summary")),
            description=_text(node.get("description")),
            deprecated=node.get("deprecated") is True,
            method=method.upper(),
            path=path,
            parameters=sort_by_required(groups.parameters),
            parameters_path=groups.path,
            parameters_query=groups.query,
            parameters_form=groups.form,
            parameters_header=groups.header,
            parameters_cookie=groups.cookie,
            parameters_body=groups.body,
            imports=imports,
            errors=get_errors(responses),
            results=results,
            response_header=get_response_header(results),
        )
