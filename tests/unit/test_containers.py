"""
Tests for per-element narrowing of containers (arrays and iterables).
"""

import pytest
from tests.test_utils import parse_type, scope_with, var
from assertnarrow.narrowing.containers import ContainerNarrowingAdapter
from assertnarrow.narrowing.interfaces import ContainerShape, ShapeEntry, ShapeKind
from assertnarrow.shared.types import INT, NULL, STRING


@pytest.fixture
def adapter(algebra, type_specifier):
    return ContainerNarrowingAdapter(algebra, type_specifier)


class TestContainerShape:

    def test_map_values_keeps_keys_and_flags(self):
        shape = ContainerShape.homogeneous(INT, NULL, is_list=True, is_non_empty=True)
        mapped = shape.map_values(lambda _: STRING)
        assert mapped.kind is ShapeKind.HOMOGENEOUS
        assert mapped.entries == (ShapeEntry(INT, STRING),)
        assert mapped.is_list and mapped.is_non_empty and mapped.is_array

    def test_constant_shape_keeps_optional_keys(self):
        shape = ContainerShape.constant((ShapeEntry(INT, NULL, optional=True),))
        assert shape.map_values(lambda _: STRING).entries == (ShapeEntry(INT, STRING, optional=True),)


class TestContainerNarrowing:

    @pytest.mark.parametrize("declared, expected", [
        ("iterable<int, string|null>", "iterable<int, string>"),
        ("array{0: string|null, 1: int}", "array{0: string, 1: int}"),
        ("array{id: int|null, name?: string|null}", "array{id: int, name?: string}"),
        ("array<string, int|null>", "array<string, int>"),
        ("non-empty-list<string|null>", "non-empty-list<string>"),
        ("array{0: int|null}|list<string|null>", "array{0: int}|list<string>"),
        ("list<string|null>|null", "list<string>"),
    ])
    def test_remove_null_from_elements(self, adapter, algebra, declared, expected):
        scope = scope_with(a=declared)
        specified = adapter.narrow(scope, var("a"), algebra.remove_null)
        assert specified.get_sure_type(var("a")) == parse_type(expected)
        assert not specified.sure_not_types

    def test_only_the_container_is_refined(self, adapter, algebra):
        scope = scope_with(a="array{0: string|null, 1: int}")
        specified = adapter.narrow(scope, var("a"), algebra.remove_null)
        assert list(specified.sure_types) == ["$a"]

    def test_constant_transform(self, adapter):
        scope = scope_with(a="array<int, mixed>")
        specified = adapter.narrow(scope, var("a"), lambda _: STRING)
        assert specified.get_sure_type(var("a")) == parse_type("array<int, string>")

    @pytest.mark.parametrize("declared", ["int", "string|null", "never"])
    def test_non_containers_are_not_narrowed(self, adapter, algebra, declared):
        specified = adapter.narrow(scope_with(a=declared), var("a"), algebra.remove_null)
        assert specified.is_empty()

    def test_already_satisfied_transform_is_a_fixed_point(self, adapter, algebra):
        scope = scope_with(a="iterable<int, string>")
        specified = adapter.narrow(scope, var("a"), algebra.remove_null)
        assert specified.get_sure_type(var("a")) == parse_type("iterable<int, string>")

    def test_element_becoming_impossible_collapses_constant_array(self, adapter, algebra):
        scope = scope_with(a="array{0: null, 1: int}")
        specified = adapter.narrow(scope, var("a"), algebra.remove_null)
        assert specified.get_sure_type(var("a")) == parse_type("never")
