"""Tests for specir.parser.enums."""

from __future__ import annotations

from specir.models import Enumerator
from specir.parser.enums import (
    dedupe_by_name,
    extend_enum,
    get_enum,
    get_enum_from_description,
    render_number,
)


class TestGetEnum:
    """Enumerators from the ``enum`` keyword."""

    def test_numeric_values_deduplicated(self) -> None:
        result = get_enum([1, 2, 2, 3])
        assert [(e.name, e.value) for e in result] == [
            ("'_1'", "1"),
            ("'_2'", "2"),
            ("'_3'", "3"),
        ]
        assert all(e.type == "number" for e in result)

    def test_string_values_quoted(self) -> None:
        result = get_enum(["available", "sold"])
        assert [(e.name, e.value, e.type) for e in result] == [
            ("AVAILABLE", "'available'", "string"),
            ("SOLD", "'sold'", "string"),
        ]

    def test_quote_in_value_escaped(self) -> None:
        (member,) = get_enum(["it's"])
        assert member.value == "'it\\'s'"
        assert member.name == "IT_S"

    def test_undefined_values_dropped(self) -> None:
        assert [e.value for e in get_enum([None, "", "a"])] == ["'a'"]

    def test_boolean_value(self) -> None:
        (member,) = get_enum([True])
        assert member.name == "TRUE"
        assert member.value == "'true'"

    def test_float_value(self) -> None:
        (member,) = get_enum([1.5])
        assert member.name == "'_1.5'"

    def test_names_unique_after_sanitising(self) -> None:
        result = get_enum(["a-b", "a_b", "a b"])
        names = [e.name for e in result]
        assert len(names) == len(set(names)) == 1

    def test_one_and_true_both_kept(self) -> None:
        assert len(get_enum([1, True])) == 2

    def test_not_a_list(self) -> None:
        assert get_enum("available") == []


class TestExtendEnum:
    def test_varnames_and_descriptions(self) -> None:
        schema = {
            "x-enum-varnames": ["Low", "High"],
            "x-enum-descriptions": ["Low priority"],
        }
        result = extend_enum(get_enum([1, 2]), schema)
        assert [e.name for e in result] == ["Low", "High"]
        assert [e.description for e in result] == ["Low priority", None]
        assert [e.value for e in result] == ["1", "2"]

    def test_without_extensions(self) -> None:
        enumerators = get_enum(["a"])
        assert extend_enum(enumerators, {}) == enumerators


class TestGetEnumFromDescription:
    def test_pairs(self) -> None:
        result = get_enum_from_description("Active=1,Inactive=2")
        assert [(e.name, e.value, e.type) for e in result] == [
            ("ACTIVE", "1", "number"),
            ("INACTIVE", "2", "number"),
        ]

    def test_duplicate_names_dropped(self) -> None:
        result = get_enum_from_description("A=1,A=2,B=3")
        assert [(e.name, e.value) for e in result] == [("A", "1"), ("B", "3")]

    def test_plain_description_ignored(self) -> None:
        assert get_enum_from_description("The number of legs") == []

    def test_none(self) -> None:
        assert get_enum_from_description(None) == []


class TestHelpers:
    def test_render_number(self) -> None:
        assert render_number(1.0) == "1"
        assert render_number(2.5) == "2.5"
        assert render_number(7) == "7"

    def test_dedupe_by_name_first_wins(self) -> None:
        items = [
            Enumerator(name="A", value="1"),
            Enumerator(name="A", value="2"),
            Enumerator(name="B", value="3"),
        ]
        assert [e.value for e in dedupe_by_name(items)] == ["1", "3"]
