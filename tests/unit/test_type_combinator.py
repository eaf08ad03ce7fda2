"""
Tests for the host type algebra (union, intersection, removal).
"""

import pytest
from tests.test_utils import parse_type
from assertnarrow.shared.type_combinator import TypeCombinator, is_subclass, members
from assertnarrow.shared.types import (
    ArrayType, ConstantStringType, ObjectType, TrinaryLogic,
    BOOL, FALSE, INT, MIXED, NEVER, NON_EMPTY_STRING, NULL, STRING, TRUE, EMPTY_ARRAY,
)


class TestUnion:

    def test_flattening_and_order(self):
        left = TypeCombinator.union(STRING, TypeCombinator.union(INT, NULL))
        right = TypeCombinator.union(NULL, STRING, INT)
        assert left == right
        assert str(left) == "int|string|null"

    def test_null_is_rendered_last(self):
        assert str(TypeCombinator.union(NULL, STRING)) == "string|null"
        assert str(TypeCombinator.union(NULL, TypeCombinator.array(INT, STRING, is_list=True))) == "list<string>|null"
        assert str(TypeCombinator.array(INT, TypeCombinator.union(NULL, NON_EMPTY_STRING), is_list=True)) == (
            "list<non-empty-string|null>")

    def test_subsumption(self):
        assert TypeCombinator.union(STRING, ConstantStringType("a")) == STRING
        assert TypeCombinator.union(TRUE, FALSE) == BOOL
        assert TypeCombinator.union(INT, MIXED) == MIXED
        assert TypeCombinator.union() == NEVER
        assert TypeCombinator.union(NEVER, INT) == INT

    def test_members(self):
        assert members(NEVER) == []
        assert set(members(parse_type("int|string"))) == {INT, STRING}


class TestIntersect:

    @pytest.mark.parametrize("left, right, expected", [
        ("string|int", "string", "string"),
        ("mixed", "int|null", "int|null"),
        ("int", "int<1, max>", "int<1, max>"),
        ("int<0, 10>", "int<5, max>", "int<5, 10>"),
        ("int<0, 3>", "int<4, max>", "never"),
        ("string|null", "'a'", "'a'"),
        ("array<int, string|null>", "array<mixed, string>", "array<int, string>"),
        ("array<string, int>", "list<int>", "array{}"),
        ("array{a: int, b?: string}", "array<string, int>", "array{a: int}"),
        ("iterable<int, string>", "array<mixed, mixed>", "array<int, string>"),
        ("object", "iterable", "Traversable"),
        ("ArrayIterator", "iterable", "ArrayIterator"),
        ("Foo", "Bar", "Bar&Foo"),
        ("string|int|null", "callable", "callable"),
        ("class-string", "'Foo'", "'Foo'"),
    ])
    def test_intersect(self, left, right, expected):
        assert TypeCombinator.intersect(parse_type(left), parse_type(right)) == parse_type(expected)

    def test_list_shaped_constant_array_is_a_list(self):
        result = TypeCombinator.intersect(parse_type("array{0: int, 1: int}"), parse_type("list<int>"))
        assert result == parse_type("array{0: int, 1: int}")


class TestRemove:

    @pytest.mark.parametrize("from_type, removed, expected", [
        ("string|int|null", "null", "string|int"),
        ("bool", "false", "true"),
        ("string", "''", "non-empty-string"),
        ("int<0, max>", "0", "int<1, max>"),
        ("int<min, 5>", "5", "int<min, 4>"),
        ("Foo|Bar", "Foo", "Bar"),
        ("ArrayIterator|null", "Traversable", "null"),
        ("mixed", "null", "mixed"),
        ("int", "string", "int"),
        ("string|int", "string|int", "never"),
    ])
    def test_remove(self, from_type, removed, expected):
        assert TypeCombinator.remove(parse_type(from_type), parse_type(removed)) == parse_type(expected)

    def test_remove_null(self):
        assert TypeCombinator.remove_null(parse_type("string|null")) == STRING
        assert TypeCombinator.contains_null(parse_type("string|null"))
        assert not TypeCombinator.contains_null(STRING)


class TestConstruction:

    def test_integer_range_collapses(self):
        assert TypeCombinator.integer_range(None, None) == INT
        assert str(TypeCombinator.integer_range(2, 2)) == "2"
        assert TypeCombinator.integer_range(3, 1) == NEVER

    def test_constant_array_with_impossible_values(self):
        assert TypeCombinator.constant_array([(ConstantStringType("a"), NEVER, False)]) == NEVER
        assert TypeCombinator.constant_array([(ConstantStringType("a"), NEVER, True)]) == EMPTY_ARRAY

    def test_array_with_impossible_items(self):
        assert TypeCombinator.array(INT, NEVER) == EMPTY_ARRAY
        assert TypeCombinator.array(INT, NEVER, is_non_empty=True) == NEVER
        assert TypeCombinator.array(STRING, INT, is_list=True) == ArrayType(INT, INT, is_list=True)


class TestRelations:

    def test_is_super_type_of(self):
        assert TypeCombinator.is_super_type_of(STRING, NON_EMPTY_STRING) is TrinaryLogic.YES
        assert TypeCombinator.is_super_type_of(NON_EMPTY_STRING, STRING) is TrinaryLogic.MAYBE
        assert TypeCombinator.is_super_type_of(INT, STRING) is TrinaryLogic.NO

    def test_known_class_hierarchy(self):
        assert is_subclass("ArrayIterator", "Traversable")
        assert is_subclass("arrayobject", "Countable")
        assert is_subclass("Foo", "foo")
        assert not is_subclass("Foo", "Traversable")

    def test_object_names_compare_case_insensitively(self):
        assert ObjectType("Foo") == ObjectType("foo")
        assert hash(ObjectType("Foo")) == hash(ObjectType("\\foo"))

    def test_iterable_projections(self):
        shape = parse_type("array{a: int, b: string}")
        assert TypeCombinator.iterable_key_type(shape) == parse_type("'a'|'b'")
        assert TypeCombinator.iterable_value_type(shape) == parse_type("int|string")
        assert TypeCombinator.iterable_value_type(parse_type("list<Foo>|iterable<int, Bar>")) == parse_type("Foo|Bar")
