"""Canonical Pydantic models shared across all specir modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into two groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`ResolverConfig`, :class:`OutputConfig` and :class:`GlobalConfig`.

**Intermediate Representation (IR) models** -- produced by the resolver and
consumed by an external renderer:
    :class:`TypeDescriptor`, :class:`ModelExport`, :class:`Enumerator`,
    :class:`Model`, :class:`OperationParameter`, :class:`OperationResponse`,
    :class:`OperationError`, :class:`Operation`, :class:`Service` and
    :class:`Client`.

IR models use snake_case attribute names and serialise with camelCase
aliases, so ``client.model_dump(mode="json", by_alias=True)`` yields the
renderer contract (``isRequired``, ``parametersPath``, ``in`` ...).
"""

from __future__ import annotations

import enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# --- Config ---


DEFAULT_MEDIA_TYPE_PRIORITY = [
    "application/json",
    "application/x-www-form-urlencoded",
    "multipart/form-data",
    "text/plain",
    "application/json-patch+json",
]


class ResolverConfig(BaseModel):
    """Options that tune how a document is resolved into the IR.

    The ``api-version`` parameter is always excluded from generated
    parameter lists; ``excluded_parameters`` adds further wire names to
    that list.
    """

    default_tag: str = Field(
        default="Default", description="Service name for operations without tags"
    )
    excluded_parameters: list[str] = Field(
        default_factory=list,
        description="Additional parameter wire names to drop from operations",
    )
    media_type_priority: list[str] = Field(
        default_factory=lambda: list(DEFAULT_MEDIA_TYPE_PRIORITY),
        description="Preferred request/response media types, highest first",
    )


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/specir/config.json``.

    Loaded and saved by :func:`~specir.config.load_global_config` and
    :func:`~specir.config.save_global_config`. Fields here have the
    lowest precedence and can be overridden by project config, environment
    variables, or CLI flags. See :func:`~specir.config.resolve_config`
    for the full precedence chain.
    """

    output: OutputConfig = Field(default_factory=OutputConfig)
    resolver: ResolverConfig = Field(default_factory=ResolverConfig)


# --- IR ---


class _IRModel(BaseModel):
    """Base for IR nodes: camelCase aliases, construction by field name."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised on path-item objects, in resolution order."""

    GET = "get"
    PUT = "put"
    POST = "post"
    DELETE = "delete"
    OPTIONS = "options"
    HEAD = "head"
    PATCH = "patch"
    TRACE = "trace"


class ParameterLocation(str, enum.Enum):
    """Locations where an operation parameter can appear (the ``in`` field).

    ``FORM_DATA`` and ``BODY`` are Swagger 2 locations; OpenAPI 3 request
    bodies are mapped onto them as well.
    """

    PATH = "path"
    QUERY = "query"
    HEADER = "header"
    COOKIE = "cookie"
    FORM_DATA = "formData"
    BODY = "body"


class ResponseLocation(str, enum.Enum):
    """Where a response's effective value comes from."""

    RESPONSE = "response"
    HEADER = "header"


class ModelExport(str, enum.Enum):
    """Closed tag telling a renderer how to emit a :class:`Model`."""

    RECORD = "record"
    REFERENCE = "reference"
    ENUMERATION = "enumeration"
    ARRAY = "array"
    DICTIONARY = "dictionary"
    ONE_OF = "one-of"
    ANY_OF = "any-of"
    ALL_OF = "all-of"
    GENERIC = "generic"


class TypeDescriptor(_IRModel):
    """Result of parsing a raw type token.

    ``type`` is the full rendered type expression, ``base`` its head symbol
    and ``template`` the generic argument, if any. ``imports`` behaves as an
    ordered set: use :meth:`add_imports` rather than appending directly.
    """

    type: str = "any"
    base: str = "any"
    template: Optional[str] = None
    imports: list[str] = Field(default_factory=list)
    is_nullable: bool = False

    def add_imports(self, names: list[str]) -> None:
        for name in names:
            if name not in self.imports:
                self.imports.append(name)


class Enumerator(_IRModel):
    """One member of an enumeration Model."""

    name: str
    value: str
    type: str = "string"
    description: Optional[str] = None


class Model(_IRModel):
    """A resolved schema, property, parameter or response body.

    ``export`` determines which of the remaining fields are meaningful:
    ``link`` for arrays and dictionaries, ``enum`` for enumerations,
    ``properties`` for records and compositions.
    """

    name: str = ""
    export: ModelExport = ModelExport.GENERIC
    type: str = "any"
    base: str = "any"
    template: Optional[str] = None
    link: Optional[Model] = None
    description: Optional[str] = None
    deprecated: bool = False
    is_definition: bool = False
    is_read_only: bool = False
    is_required: bool = False
    is_nullable: bool = False
    format: Optional[str] = None
    maximum: Optional[int | float] = None
    exclusive_maximum: Optional[bool | int | float] = None
    minimum: Optional[int | float] = None
    exclusive_minimum: Optional[bool | int | float] = None
    multiple_of: Optional[int | float] = None
    max_length: Optional[int] = None
    min_length: Optional[int] = None
    pattern: Optional[str] = None
    max_items: Optional[int] = None
    min_items: Optional[int] = None
    unique_items: Optional[bool] = None
    max_properties: Optional[int] = None
    min_properties: Optional[int] = None
    default: Optional[str] = Field(
        default=None, description="Pre-rendered literal of the schema default"
    )
    enum: list[Enumerator] = Field(default_factory=list)
    enums: list[Model] = Field(default_factory=list)
    properties: list[Model] = Field(default_factory=list)
    imports: list[str] = Field(default_factory=list)


class OperationParameter(Model):
    """A Model that is passed to an operation (path, query, body ...)."""

    in_: ParameterLocation = Field(alias="in")
    prop: str = Field(description="Original wire name of the parameter")
    media_type: Optional[str] = None


class OperationResponse(Model):
    """A Model returned by an operation for one status code."""

    in_: ResponseLocation = Field(default=ResponseLocation.RESPONSE, alias="in")
    code: int


class OperationError(_IRModel):
    """A non-success status code that carries a description."""

    code: int
    description: str


class Operation(_IRModel):
    """A single resolved API operation (one path + HTTP method + service)."""

    service: str
    name: str
    summary: Optional[str] = None
    description: Optional[str] = None
    deprecated: bool = False
    method: str
    path: str
    parameters: list[OperationParameter] = Field(default_factory=list)
    parameters_path: list[OperationParameter] = Field(default_factory=list)
    parameters_query: list[OperationParameter] = Field(default_factory=list)
    parameters_form: list[OperationParameter] = Field(default_factory=list)
    parameters_header: list[OperationParameter] = Field(default_factory=list)
    parameters_cookie: list[OperationParameter] = Field(default_factory=list)
    parameters_body: Optional[OperationParameter] = None
    imports: list[str] = Field(default_factory=list)
    errors: list[OperationError] = Field(default_factory=list)
    results: list[OperationResponse] = Field(default_factory=list)
    response_header: Optional[str] = None


class Service(_IRModel):
    """Operations grouped under one tag."""

    name: str
    operations: list[Operation] = Field(default_factory=list)
    imports: list[str] = Field(default_factory=list)


class Client(_IRModel):
    """Complete IR of one API description document.

    Produced by :func:`~specir.parser.extractor.extract_client` and handed
    to an external renderer.
    """

    version: str
    server: str
    models: list[Model] = Field(default_factory=list)
    services: list[Service] = Field(default_factory=list)
