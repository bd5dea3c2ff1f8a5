"""Turn schema nodes into IR :class:`~specir.models.Model` trees.

:class:`ModelBuilder` is a small recursive visitor with one entry point,
:meth:`ModelBuilder.build`. A schema is matched against an ordered rule table
(:attr:`ModelBuilder.RULES`); the first rule that recognises the schema's
shape produces the Model::

    reference > enumeration > description_enumeration > array > dictionary
              > composition > record > generic > (fallback: generic ``any``)

The order is a precedence: an ``enum`` on an ``array`` schema yields an
enumeration, ``oneOf`` next to ``type: object`` yields a composition, and so
on.

Compositions (``oneOf``/``anyOf``/``allOf``) are resolved by the same visitor:
each member becomes a child Model under ``properties`` and the owning schema's
``required`` names and inline ``properties`` are folded into one synthetic
``properties`` record appended last.

``$ref`` schemas are never followed while building: they become
``reference`` leaves naming their target, which is what keeps recursive
schemas finite. References are still resolved once so that dangling pointers
fail fast.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Mapping, Optional

from specir.models import Model, ModelExport, TypeDescriptor
from specir.parser.dialect import Dialect
from specir.parser.enums import (
    extend_enum,
    get_enum,
    get_enum_from_description,
    render_number,
)
from specir.parser.naming import escape_name, strip_namespace
from specir.parser.resolver import ReferenceResolver
from specir.parser.types import get_type

logger = logging.getLogger(__name__)

_NUMBER = (int, float)

# (Model field, schema keyword, accepted Python types)
_CONSTRAINTS: tuple[tuple[str, str, tuple[type, ...]], ...] = (
    ("format", "format", (str,)),
    ("maximum", "maximum", _NUMBER),
    ("exclusive_maximum", "exclusiveMaximum", (bool,) + _NUMBER),
    ("minimum", "minimum", _NUMBER),
    ("exclusive_minimum", "exclusiveMinimum", (bool,) + _NUMBER),
    ("multiple_of", "multipleOf", _NUMBER),
    ("max_length", "maxLength", (int,)),
    ("min_length", "minLength", (int,)),
    ("max_items", "maxItems", (int,)),
    ("min_items", "minItems", (int,)),
    ("unique_items", "uniqueItems", (bool,)),
    ("max_properties", "maxProperties", (int,)),
    ("min_properties", "minProperties", (int,)),
)

_COMPOSITIONS = (
    ("oneOf", ModelExport.ONE_OF),
    ("anyOf", ModelExport.ANY_OF),
    ("allOf", ModelExport.ALL_OF),
)


# ---------------------------------------------------------------------------
# Schema helpers
# ---------------------------------------------------------------------------


def _type_is(schema: Mapping[str, Any], name: str) -> bool:
    """Check the declared ``type`` (a string or a JSON Schema type list)."""
    declared = schema.get("type")
    if isinstance(declared, list):
        return name in declared
    return declared == name


def _is_nullable(schema: Mapping[str, Any]) -> bool:
    declared = schema.get("type")
    return (
        schema.get("nullable") is True
        or schema.get("x-nullable") is True
        or (isinstance(declared, list) and "null" in declared)
    )


def _constraint(value: Any, kinds: tuple[type, ...]) -> Any:
    if isinstance(value, bool) and bool not in kinds:
        return None
    return value if isinstance(value, kinds) else None


def get_pattern(pattern: Any) -> Optional[str]:
    """Escape backslashes so the pattern survives inside a string literal."""
    if not isinstance(pattern, str):
        return None
    return pattern.replace("\\", "\\\\")


def get_model_default(schema: Mapping[str, Any], model: Optional[Model] = None) -> Optional[str]:
    """Render the schema's ``default`` as a literal string.

    The literal follows the kind of the default value itself, whatever
    ``type`` the schema declares. An integer default on an enumeration
    selects the enumerator at that position. Values that cannot be
    serialised are dropped (``None``) rather than raising.

    Args:
        schema: The schema node carrying ``default``.
        model: The Model built from *schema*, used for enumeration lookups.

    Returns:
        The rendered literal, or ``None`` when there is no usable default.
    """
    if "default" not in schema:
        return None
    default = schema["default"]
    if default is None:
        return "null"
    if isinstance(default, bool):
        return json.dumps(default)
    if isinstance(default, _NUMBER):
        if (
            model is not None
            and model.export == ModelExport.ENUMERATION
            and isinstance(default, int)
            and 0 <= default < len(model.enum)
        ):
            return model.enum[default].value
        return render_number(default)
    if isinstance(default, str):
        return f"'{default}'"
    if isinstance(default, (dict, list)):
        try:
            return json.dumps(default, indent=4)
        except (TypeError, ValueError):
            return None
    return None


def _is_empty(model: Model) -> bool:
    """An untyped record/generic without properties or enums contributes nothing."""
    return (
        model.type == "any"
        and model.export in (ModelExport.RECORD, ModelExport.GENERIC)
        and not model.properties
        and not model.enums
    )


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------


class ModelBuilder:
    """Recursive schema-to-Model visitor for one document.

    Args:
        document: The loaded document tree.
        dialect: The document's :class:`~specir.parser.dialect.Dialect`.
        resolver: Shared reference resolver; a new one is created if omitted.
    """

    RULES: tuple[str, ...] = (
        "reference",
        "enumeration",
        "description_enumeration",
        "array",
        "dictionary",
        "composition",
        "record",
        "generic",
    )

    def __init__(
        self,
        document: Mapping[str, Any],
        dialect: Dialect,
        resolver: Optional[ReferenceResolver] = None,
    ) -> None:
        self.document = document
        self.dialect = dialect
        self.resolver = resolver or ReferenceResolver(document)
        self._rules: list[Callable[[Mapping[str, Any], dict[str, Any]], Optional[Model]]] = [
            getattr(self, f"_build_{rule}") for rule in self.RULES
        ]
        self._discriminators: dict[str, Optional[Mapping[str, Any]]] = {}
        self._promoting: list[str] = []

    # -- entry point -------------------------------------------------------

    def build(self, schema: Any, name: str = "", is_definition: bool = False) -> Model:
        """Build the Model for *schema*.

        Args:
            schema: A schema node. Non-mapping values are treated as ``{}``.
            name: Model name; definitions pass their (sanitised) key.
            is_definition: Whether *schema* is a top-level definition.

        Returns:
            A new Model. Raises only for unresolvable ``$ref`` pointers.
        """
        if not isinstance(schema, Mapping):
            schema = {}
        fields = self._base_fields(schema, name, is_definition)
        for rule in self._rules:
            model = rule(schema, fields)
            if model is not None:
                return model
        return Model(**fields, export=ModelExport.GENERIC)

    def get_type(self, value: Any, format: Optional[str] = None) -> TypeDescriptor:
        """Parse a type token with this builder's dialect."""
        return get_type(value, format, self.dialect)

    def strip_namespace(self, ref: str) -> str:
        return strip_namespace(ref, self.dialect.namespace_prefixes)

    # -- rules ---------------------------------------------------------------

    def _build_reference(self, schema: Mapping[str, Any], fields: dict[str, Any]) -> Optional[Model]:
        if "$ref" not in schema:
            return None
        ref = schema["$ref"]
        self.resolver.resolve(ref)
        descriptor = self.get_type(ref)
        model = Model(
            **{
                **fields,
                "export": ModelExport.REFERENCE,
                "type": descriptor.type,
                "base": descriptor.base,
                "template": descriptor.template,
                "imports": list(descriptor.imports),
                "is_nullable": fields["is_nullable"] or descriptor.is_nullable,
            }
        )
        model.default = get_model_default(schema, model)
        return model

    def _build_enumeration(self, schema: Mapping[str, Any], fields: dict[str, Any]) -> Optional[Model]:
        if "enum" not in schema or schema.get("type") == "boolean":
            return None
        enumerators = extend_enum(get_enum(schema["enum"]), schema)
        if not enumerators:
            return None
        model = Model(
            **fields,
            export=ModelExport.ENUMERATION,
            type="string",
            base="string",
            enum=enumerators,
        )
        model.default = get_model_default(schema, model)
        return model

    def _build_description_enumeration(
        self, schema: Mapping[str, Any], fields: dict[str, Any]
    ) -> Optional[Model]:
        if schema.get("type") not in ("int", "integer"):
            return None
        enumerators = get_enum_from_description(schema.get("description"))
        if not enumerators:
            return None
        model = Model(
            **fields,
            export=ModelExport.ENUMERATION,
            type="number",
            base="number",
            enum=enumerators,
        )
        model.default = get_model_default(schema, model)
        return model

    def _build_array(self, schema: Mapping[str, Any], fields: dict[str, Any]) -> Optional[Model]:
        items = schema.get("items")
        if not _type_is(schema, "array") or not isinstance(items, Mapping):
            return None
        model = Model(**fields, export=ModelExport.ARRAY, **self._element(items))
        model.default = get_model_default(schema, model)
        return model

    def _build_dictionary(self, schema: Mapping[str, Any], fields: dict[str, Any]) -> Optional[Model]:
        if not _type_is(schema, "object"):
            return None
        additional = schema.get("additionalProperties")
        if additional is True and not schema.get("properties"):
            additional = {}
        if not isinstance(additional, Mapping):
            return None
        model = Model(**fields, export=ModelExport.DICTIONARY, **self._element(additional))
        model.default = get_model_default(schema, model)
        return model

    def _build_composition(self, schema: Mapping[str, Any], fields: dict[str, Any]) -> Optional[Model]:
        for keyword, export in _COMPOSITIONS:
            members = schema.get(keyword)
            if isinstance(members, list) and members:
                return self._compose(schema, members, export, fields)
        return None

    def _build_record(self, schema: Mapping[str, Any], fields: dict[str, Any]) -> Optional[Model]:
        untyped_with_properties = "type" not in schema and isinstance(
            schema.get("properties"), Mapping
        )
        if not (_type_is(schema, "object") or untyped_with_properties):
            return None
        properties = self._properties(schema, fields["name"])
        imports: list[str] = []
        enums: list[Model] = []
        for prop in properties:
            self._collect(prop, imports, enums)
        model = Model(
            **fields,
            export=ModelExport.RECORD,
            properties=properties,
            imports=imports,
            enums=enums,
        )
        model.default = get_model_default(schema, model)
        return model

    def _build_generic(self, schema: Mapping[str, Any], fields: dict[str, Any]) -> Optional[Model]:
        if "type" not in schema:
            return None
        descriptor = self.get_type(schema["type"], schema.get("format"))
        model = Model(
            **{
                **fields,
                "export": ModelExport.GENERIC,
                "type": descriptor.type,
                "base": descriptor.base,
                "template": descriptor.template,
                "imports": list(descriptor.imports),
                "is_nullable": fields["is_nullable"] or descriptor.is_nullable,
            }
        )
        model.default = get_model_default(schema, model)
        return model

    # -- composition -------------------------------------------------------

    def _compose(
        self,
        schema: Mapping[str, Any],
        members: list[Any],
        export: ModelExport,
        fields: dict[str, Any],
    ) -> Model:
        children: list[Model] = []
        imports: list[str] = []
        enums: list[Model] = []

        for member in members:
            child = self.build(member)
            if _is_empty(child):
                continue
            imports.extend(child.imports)
            enums.extend(child.enums)
            children.append(child)

        properties: list[Model] = []
        required = schema.get("required")
        if isinstance(required, list) and required:
            for prop in self._promote_required(required, members):
                self._collect(prop, imports, enums)
                properties.append(prop)

        for prop in self._properties(schema, fields["name"]):
            self._collect(prop, imports, enums)
            properties.append(prop)

        if properties:
            children.append(
                Model(name="properties", export=ModelExport.RECORD, properties=properties)
            )

        return Model(
            **fields,
            export=export,
            properties=children,
            imports=imports,
            enums=enums,
        )

    def _promote_required(self, required: list[Any], members: list[Any]) -> list[Model]:
        """Mark copies of the members' properties named in *required* as required.

        Members are dereferenced so that ``$ref`` members contribute the
        properties of their target. For each required name the first
        not-yet-required property with that name wins.
        """
        candidates: list[Model] = []
        for member in members:
            ref = member.get("$ref") if isinstance(member, Mapping) else None
            if isinstance(ref, str) and ref in self._promoting:
                continue
            target = self.resolver.deref(member)
            if not isinstance(target, Mapping):
                continue
            if isinstance(ref, str):
                self._promoting.append(ref)
            try:
                candidates.extend(self.build(target).properties)
            finally:
                if isinstance(ref, str):
                    self._promoting.pop()

        promoted: list[Model] = []
        for required_name in required:
            if not isinstance(required_name, str):
                continue
            name = escape_name(required_name)
            match = next(
                (prop for prop in candidates if prop.name == name and not prop.is_required),
                None,
            )
            if match is not None:
                promoted.append(match.model_copy(update={"is_required": True}))
        return promoted

    # -- properties --------------------------------------------------------

    def _properties(self, schema: Mapping[str, Any], parent_name: str) -> list[Model]:
        """Resolve the ``properties`` of a record (or composition) in declaration order."""
        declared = schema.get("properties")
        if not isinstance(declared, Mapping):
            return []
        required = schema.get("required")
        if not isinstance(required, list):
            required = []
        discriminator = self._find_discriminator(parent_name) if parent_name else None

        properties: list[Model] = []
        for prop_name, prop_schema in declared.items():
            prop_name = str(prop_name)
            if not isinstance(prop_schema, Mapping):
                prop_schema = {}
            is_required = prop_name in required
            if discriminator is not None and discriminator.get("propertyName") == prop_name:
                fields = self._base_fields(prop_schema, escape_name(prop_name), False)
                value = self._discriminator_value(discriminator, parent_name)
                properties.append(
                    Model(
                        **{
                            **fields,
                            "export": ModelExport.REFERENCE,
                            "type": "string",
                            "base": f"'{value}'",
                            "is_required": is_required,
                        }
                    )
                )
                continue
            child = self.build(prop_schema)
            properties.append(
                child.model_copy(
                    update={"name": escape_name(prop_name), "is_required": is_required}
                )
            )
        return properties

    def _find_discriminator(self, parent_name: str) -> Optional[Mapping[str, Any]]:
        """Find the discriminator of a ``oneOf`` definition that lists *parent_name*."""
        if parent_name not in self._discriminators:
            found: Optional[Mapping[str, Any]] = None
            for definition in self.dialect.schemas(self.document).values():
                if not isinstance(definition, Mapping):
                    continue
                discriminator = definition.get("discriminator")
                one_of = definition.get("oneOf")
                if not isinstance(discriminator, Mapping) or not isinstance(one_of, list):
                    continue
                if any(
                    isinstance(member, Mapping)
                    and isinstance(member.get("$ref"), str)
                    and self.strip_namespace(member["$ref"]) == parent_name
                    for member in one_of
                ):
                    found = discriminator
                    break
            self._discriminators[parent_name] = found
        return self._discriminators[parent_name]

    def _discriminator_value(self, discriminator: Mapping[str, Any], parent_name: str) -> str:
        mapping = discriminator.get("mapping")
        if isinstance(mapping, Mapping):
            # Inverted lookup: the last key mapping onto this schema wins.
            matches = [
                str(key)
                for key, target in mapping.items()
                if isinstance(target, str) and self.strip_namespace(target) == parent_name
            ]
            if matches:
                return matches[-1]
        return parent_name

    # -- helpers -----------------------------------------------------------

    def _element(self, node: Mapping[str, Any]) -> dict[str, Any]:
        """Type fields (and owned ``link``) of an array item or dictionary value."""
        if "$ref" in node:
            self.resolver.resolve(node["$ref"])
            descriptor = self.get_type(node["$ref"])
            return {
                "type": descriptor.type,
                "base": descriptor.base,
                "template": descriptor.template,
                "imports": list(descriptor.imports),
            }
        child = self.build(node)
        return {
            "type": child.type,
            "base": child.base,
            "template": child.template,
            "link": child,
            "imports": list(child.imports),
        }

    @staticmethod
    def _collect(prop: Model, imports: list[str], enums: list[Model]) -> None:
        """Lift a property's imports and nested enumerations into its owner."""
        imports.extend(prop.imports)
        enums.extend(nested.model_copy(deep=True) for nested in prop.enums)
        if prop.export == ModelExport.ENUMERATION:
            enums.append(prop.model_copy(deep=True))

    @staticmethod
    def _base_fields(schema: Mapping[str, Any], name: str, is_definition: bool) -> dict[str, Any]:
        description = schema.get("description")
        fields: dict[str, Any] = {
            "name": name,
            "description": description if isinstance(description, str) and description else None,
            "deprecated": schema.get("deprecated") is True,
            "is_definition": is_definition,
            "is_read_only": schema.get("readOnly") is True,
            "is_nullable": _is_nullable(schema),
            "pattern": get_pattern(schema.get("pattern")),
        }
        for field_name, keyword, kinds in _CONSTRAINTS:
            fields[field_name] = _constraint(schema.get(keyword), kinds)
        return fields
