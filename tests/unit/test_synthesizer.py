"""
Tests for the expression synthesizer.
"""

import pytest
from tests.test_utils import scope_with, var
from assertnarrow.narrowing.names import AssertionCall
from assertnarrow.narrowing.synthesizer import synthesize
from assertnarrow.shared.errors import ShouldNotHappenError
from assertnarrow.shared.nodes import Arg, BooleanOr, ClassConstFetch, LNumber, Name


def call(raw_name, *exprs):
    return AssertionCall(raw_name, [Arg(expr) for expr in exprs])


class TestSynthesize:

    def test_plain_predicate(self, algebra):
        expr = synthesize(call("string", var("a")), scope_with(), algebra)
        assert str(expr) == "is_string($a)"

    def test_null_tolerant_adds_null_alternative(self, algebra):
        expr = synthesize(call("nullOrString", var("a")), scope_with(), algebra)
        assert isinstance(expr, BooleanOr)
        assert str(expr) == "(is_string($a) || ($a === null))"

    def test_null_tolerant_wraps_compound_conditions(self, algebra):
        expr = synthesize(call("nullOrPositiveInteger", var("a")), scope_with(), algebra)
        assert str(expr) == "((is_int($a) && ($a > 0)) || ($a === null))"

    def test_per_element_call_is_stated_about_the_container(self, algebra):
        expr = synthesize(call("allInteger", var("items")), scope_with(), algebra)
        assert str(expr) == "is_int($items)"

    def test_extra_arguments_are_not_passed_to_the_builder(self, algebra):
        # Assertion messages are a trailing argument
        expr = synthesize(call("minCount", var("a"), LNumber(1), var("message")), scope_with(), algebra)
        assert str(expr) == "(count($a) >= 1)"

    def test_inert_builder_yields_none(self, algebra):
        scope = scope_with(class_name="string")
        assert synthesize(call("isInstanceOf", var("a"), var("class_name")), scope, algebra) is None
        assert synthesize(call("nullOrIsInstanceOf", var("a"), var("class_name")), scope, algebra) is None

    def test_inert_result_is_stable(self, algebra):
        scope = scope_with(class_name="string")
        results = [synthesize(call("isInstanceOf", var("a"), var("class_name")), scope, algebra) for _ in range(3)]
        assert results == [None, None, None]

    def test_literal_class(self, algebra):
        expr = synthesize(call("nullOrIsInstanceOf", var("a"), ClassConstFetch(Name("Foo"))), scope_with(), algebra)
        assert str(expr) == "($a instanceof Foo || ($a === null))"

    def test_unknown_assertion_is_an_internal_error(self, algebra):
        with pytest.raises(ShouldNotHappenError):
            synthesize(call("uuid", var("a")), scope_with(), algebra)
