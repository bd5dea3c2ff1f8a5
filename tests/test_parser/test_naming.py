"""Tests for specir.parser.naming."""

from __future__ import annotations

import pytest

from specir.parser.naming import (
    camel_case,
    enum_member_name,
    escape_name,
    escape_reserved,
    operation_name,
    parameter_name,
    sanitize_type_name,
    service_name,
    strip_namespace,
)


class TestCamelCase:
    def test_separators_and_case_boundaries(self) -> None:
        assert camel_case("get_pet-byID") == "getPetById"

    def test_pascal(self) -> None:
        assert camel_case("pet store", pascal=True) == "PetStore"

    def test_empty(self) -> None:
        assert camel_case("--") == ""


class TestEscapeName:
    @pytest.mark.parametrize("name", ["petId", "_private", "$ref2", "a1"])
    def test_identifiers_kept(self, name: str) -> None:
        assert escape_name(name) == name

    @pytest.mark.parametrize("name", ["x-rate-limit", "a", "1st", "with space"])
    def test_other_names_quoted(self, name: str) -> None:
        assert escape_name(name) == f"'{name}'"


class TestServiceName:
    def test_dashes(self) -> None:
        assert service_name("pet-store") == "PetStore"

    def test_leading_digits_dropped(self) -> None:
        assert service_name("123 pets") == "Pets"

    def test_lower_case_tag(self) -> None:
        assert service_name("pets") == "Pets"


class TestOperationName:
    def test_from_operation_id(self) -> None:
        assert operation_name("upload-photo", "put") == "uploadPhoto"

    def test_falls_back_to_method(self) -> None:
        assert operation_name(None, "get") == "get"

    def test_keeps_inner_camel_case(self) -> None:
        assert operation_name("getPetById", "get") == "getPetById"


class TestParameterName:
    def test_header_name(self) -> None:
        assert parameter_name("X-Request-ID") == "xRequestId"

    def test_snake_case(self) -> None:
        assert parameter_name("api_key") == "apiKey"

    def test_reserved_word_suffixed(self) -> None:
        assert parameter_name("default") == "default_"

    def test_leading_digits_stripped(self) -> None:
        assert parameter_name("1st-item") == "stItem"

    def test_array_suffix_kept_distinct(self) -> None:
        assert parameter_name("ids[]") == "idsArray"
        assert parameter_name("ids") == "ids"


class TestEnumMemberName:
    def test_plain(self) -> None:
        assert enum_member_name("available") == "AVAILABLE"

    def test_separators(self) -> None:
        assert enum_member_name("in-progress") == "IN_PROGRESS"

    def test_leading_digit(self) -> None:
        assert enum_member_name("1abc") == "_1ABC"

    def test_camel_case_split(self) -> None:
        assert enum_member_name("camelCase") == "CAMEL_CASE"


class TestTypeNames:
    def test_sanitize(self) -> None:
        assert sanitize_type_name("Foo.Bar") == "Foo_Bar"

    def test_escape_reserved(self) -> None:
        assert escape_reserved("class") == "class_"
        assert escape_reserved("Pet") == "Pet"

    def test_strip_namespace(self) -> None:
        prefixes = ("#/definitions/", "#/parameters/")
        assert strip_namespace("#/definitions/Pet", prefixes) == "Pet"
        assert strip_namespace("Pet", prefixes) == "Pet"
