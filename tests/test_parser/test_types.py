"""Tests for specir.parser.types."""

from __future__ import annotations

from specir.parser.dialect import V2, V3
from specir.parser.types import get_mapped_type, get_type


class TestGetMappedType:
    def test_primitive(self) -> None:
        assert get_mapped_type("integer") == "number"

    def test_binary_format_wins(self) -> None:
        assert get_mapped_type("string", "binary") == "binary"

    def test_unknown_is_none(self) -> None:
        assert get_mapped_type("Pet") is None


class TestGetTypePrimitives:
    """Primitive names and type lists."""

    def test_integer_maps_to_number(self) -> None:
        result = get_type("integer")
        assert (result.type, result.base, result.imports) == ("number", "number", [])

    def test_file_maps_to_binary(self) -> None:
        assert get_type("file", dialect=V2).type == "binary"

    def test_array_maps_to_any_array(self) -> None:
        assert get_type("array").type == "any[]"

    def test_none_is_any(self) -> None:
        assert get_type(None).type == "any"

    def test_non_string_is_any(self) -> None:
        assert get_type(42).type == "any"  # type: ignore[arg-type]

    def test_type_list_with_null_is_nullable(self) -> None:
        result = get_type(["string", "null"])
        assert result.type == "string"
        assert result.is_nullable is True

    def test_type_list_union(self) -> None:
        assert get_type(["string", "integer"]).type == "string | number"

    def test_type_list_of_null_only(self) -> None:
        result = get_type(["null"])
        assert result.type == "any"
        assert result.is_nullable is True


class TestGetTypeReferences:
    """Reference strings and plain type names."""

    def test_v2_definition_reference(self) -> None:
        result = get_type("#/definitions/Pet", dialect=V2)
        assert result.type == "Pet"
        assert result.base == "Pet"
        assert result.imports == ["Pet"]

    def test_v3_schema_reference(self) -> None:
        assert get_type("#/components/schemas/Pet", dialect=V3).imports == ["Pet"]

    def test_illegal_characters_replaced(self) -> None:
        assert get_type("#/definitions/Foo.Bar", dialect=V2).type == "Foo_Bar"

    def test_uri_encoded_name(self) -> None:
        assert get_type("#/definitions/Pet%20Food", dialect=V2).type == "Pet_Food"

    def test_leading_digits_stripped(self) -> None:
        assert get_type("1Pet").type == "Pet"


class TestGetTypeGenerics:
    """Legacy bracket expressions."""

    def test_array_of_reference(self) -> None:
        result = get_type("array[Pet]")
        assert result.type == "Pet[]"
        assert result.base == "Pet"
        assert result.imports == ["Pet"]

    def test_nested_generic(self) -> None:
        result = get_type("array[Link[Model]]")
        assert result.type == "Link<Model>[]"
        assert result.base == "Link<Model>"
        assert result.imports == ["Link", "Model"]

    def test_generic_with_template(self) -> None:
        result = get_type("Page[Item]")
        assert result.type == "Page<Item>"
        assert result.base == "Page"
        assert result.template == "Item"
        assert result.imports == ["Page", "Item"]

    def test_empty_brackets(self) -> None:
        result = get_type("Page[]")
        assert result.type == "Page"
        assert result.base == "Page"
        assert result.template == "Page"

    def test_array_of_primitive_has_no_imports(self) -> None:
        result = get_type("array[integer]")
        assert result.type == "number[]"
        assert result.imports == []

    def test_reference_to_generic_definition(self) -> None:
        result = get_type("#/definitions/Page[Item]", dialect=V2)
        assert result.type == "Page<Item>"
