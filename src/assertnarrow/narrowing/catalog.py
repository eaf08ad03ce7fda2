"""
Predicate Catalog

PHPStan Pattern: AssertTypeSpecifyingExtension expression resolvers
Reference: DESIGN.md (narrowing core)

Every canonical assertion name maps to a template: how many arguments the
assertion needs and how to rewrite it as the boolean condition that holds
once the assertion returned. The host type specifier derives the narrowed
types from that condition.

The table is built once, eagerly, when this module is imported, and is
exposed read-only. Builders receive exactly ``arity`` arguments.
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Mapping, Optional, Sequence

from ..shared.nodes import (
    Arg, Expr, Name, FuncCall, Instanceof, BooleanNot, BooleanAnd, BooleanOr,
    Identical, NotIdentical, Greater, GreaterOrEqual, SmallerOrEqual,
    LNumber, String_, const_fetch, func_call,
)
from .interfaces import ScopeLike, TypeAlgebra

logger = logging.getLogger("assertnarrow.narrowing.catalog")


@dataclass(frozen=True)
class Argument:
    """A call-site argument; its type is looked up on demand."""
    arg: Arg
    scope: ScopeLike
    algebra: TypeAlgebra

    @property
    def value(self) -> Expr:
        return self.arg.value

    def get_type(self):
        return self.scope.get_type(self.arg.value)

    def literal_string(self) -> Optional[str]:
        """The argument's value when its type is a single constant string."""
        return self.algebra.constant_string_value(self.get_type())


Builder = Callable[[Sequence[Argument]], Optional[Expr]]


@dataclass(frozen=True)
class PredicateTemplate:
    name: str
    arity: int
    build: Builder


# ============================================================================
# Builders
# ============================================================================

def _is(function: str, value: Argument) -> FuncCall:
    return FuncCall(Name(function), (value.arg,))


def _count(array: Argument) -> FuncCall:
    return FuncCall(Name("count"), (array.arg,))


def _strlen(value: Argument) -> FuncCall:
    return FuncCall(Name("strlen"), (value.arg,))


def _instance_of(expr: Argument, class_argument: Argument) -> Optional[Expr]:
    class_name = class_argument.literal_string()
    if class_name is None:
        logger.debug(f"Class argument {class_argument.value} is not a literal; no narrowing")
        return None
    return Instanceof(expr.value, Name(class_name))


def _is_or_instance_of(function: str, class_name: str) -> Builder:
    def build(args: Sequence[Argument]) -> Expr:
        (expr,) = args
        return BooleanOr(_is(function, expr), Instanceof(expr.value, Name(class_name)))
    return build


def _type_check(function: str) -> Builder:
    def build(args: Sequence[Argument]) -> Expr:
        (value,) = args
        return _is(function, value)
    return build


def _identical_to(constant: str, negated: bool = False) -> Builder:
    def build(args: Sequence[Argument]) -> Expr:
        (expr,) = args
        node = NotIdentical if negated else Identical
        return node(expr.value, const_fetch(constant))
    return build


def _build_positive_integer(args):
    (value,) = args
    return BooleanAnd(_is("is_int", value), Greater(value.value, LNumber(0)))


def _build_natural(args):
    (value,) = args
    return BooleanAnd(_is("is_int", value), GreaterOrEqual(value.value, LNumber(0)))


def _build_string_not_empty(args):
    (value,) = args
    return BooleanAnd(_is("is_string", value), NotIdentical(value.value, String_("")))


def _build_is_list(args):
    (expr,) = args
    return BooleanAnd(
        _is("is_array", expr),
        Identical(expr.value, func_call("array_values", expr.arg)),
    )


def _build_is_instance_of(args):
    expr, class_argument = args
    return _instance_of(expr, class_argument)


def _build_not_instance_of(args):
    expr, class_argument = args
    condition = _instance_of(expr, class_argument)
    if condition is None:
        return None
    return BooleanNot(condition)


def _build_key_exists(args):
    array, key = args
    return FuncCall(Name("array_key_exists"), (key.arg, array.arg))


def _build_key_not_exists(args):
    return BooleanNot(_build_key_exists(args))


def _build_valid_array_key(args):
    (value,) = args
    return BooleanOr(_is("is_int", value), _is("is_string", value))


def _build_same(args):
    left, right = args
    return Identical(left.value, right.value)


def _build_not_same(args):
    left, right = args
    return NotIdentical(left.value, right.value)


def _build_subclass_of(args):
    expr, class_argument = args
    if class_argument.literal_string() is None:
        return None
    return FuncCall(Name("is_subclass_of"), (Arg(expr.value), class_argument.arg))


def _literal_class_check(function: str) -> Builder:
    def build(args: Sequence[Argument]) -> Optional[Expr]:
        (class_argument,) = args
        if class_argument.literal_string() is None:
            return None
        return _is(function, class_argument)
    return build


def _build_count(args):
    array, number = args
    return Identical(_count(array), number.value)


def _build_min_count(args):
    array, low = args
    return GreaterOrEqual(_count(array), low.value)


def _build_max_count(args):
    array, high = args
    return SmallerOrEqual(_count(array), high.value)


def _build_count_between(args):
    array, low, high = args
    return BooleanAnd(
        GreaterOrEqual(_count(array), low.value),
        SmallerOrEqual(_count(array), high.value),
    )


def _build_length(args):
    value, length = args
    return BooleanAnd(_is("is_string", value), Identical(_strlen(value), length.value))


def _build_min_length(args):
    value, low = args
    return BooleanAnd(_is("is_string", value), GreaterOrEqual(_strlen(value), low.value))


def _build_max_length(args):
    value, high = args
    return BooleanAnd(_is("is_string", value), SmallerOrEqual(_strlen(value), high.value))


def _build_length_between(args):
    value, low, high = args
    return BooleanAnd(
        _is("is_string", value),
        BooleanAnd(
            GreaterOrEqual(_strlen(value), low.value),
            SmallerOrEqual(_strlen(value), high.value),
        ),
    )


def _build_in_array(args):
    needle, haystack = args
    return FuncCall(Name("in_array"), (needle.arg, haystack.arg, Arg(const_fetch("true"))))


def _member_exists(function: str) -> Builder:
    def build(args: Sequence[Argument]) -> Expr:
        subject, member = args
        return FuncCall(Name(function), (subject.arg, member.arg))
    return build


_TEMPLATES = (
    PredicateTemplate("integer", 1, _type_check("is_int")),
    PredicateTemplate("positiveInteger", 1, _build_positive_integer),
    PredicateTemplate("string", 1, _type_check("is_string")),
    PredicateTemplate("stringNotEmpty", 1, _build_string_not_empty),
    PredicateTemplate("float", 1, _type_check("is_float")),
    PredicateTemplate("integerish", 1, _type_check("is_numeric")),
    PredicateTemplate("numeric", 1, _type_check("is_numeric")),
    PredicateTemplate("natural", 1, _build_natural),
    PredicateTemplate("boolean", 1, _type_check("is_bool")),
    PredicateTemplate("scalar", 1, _type_check("is_scalar")),
    PredicateTemplate("object", 1, _type_check("is_object")),
    PredicateTemplate("resource", 1, _type_check("is_resource")),
    PredicateTemplate("isCallable", 1, _type_check("is_callable")),
    PredicateTemplate("isArray", 1, _type_check("is_array")),
    PredicateTemplate("isIterable", 1, _is_or_instance_of("is_array", "Traversable")),
    PredicateTemplate("isList", 1, _build_is_list),
    PredicateTemplate("isCountable", 1, _is_or_instance_of("is_array", "Countable")),
    PredicateTemplate("isInstanceOf", 2, _build_is_instance_of),
    PredicateTemplate("notInstanceOf", 2, _build_not_instance_of),
    PredicateTemplate("implementsInterface", 2, _build_is_instance_of),
    PredicateTemplate("keyExists", 2, _build_key_exists),
    PredicateTemplate("keyNotExists", 2, _build_key_not_exists),
    PredicateTemplate("validArrayKey", 1, _build_valid_array_key),
    PredicateTemplate("true", 1, _identical_to("true")),
    PredicateTemplate("false", 1, _identical_to("false")),
    PredicateTemplate("null", 1, _identical_to("null")),
    PredicateTemplate("notFalse", 1, _identical_to("false", negated=True)),
    PredicateTemplate("notNull", 1, _identical_to("null", negated=True)),
    PredicateTemplate("same", 2, _build_same),
    PredicateTemplate("notSame", 2, _build_not_same),
    PredicateTemplate("subclassOf", 2, _build_subclass_of),
    PredicateTemplate("classExists", 1, _literal_class_check("class_exists")),
    PredicateTemplate("interfaceExists", 1, _literal_class_check("interface_exists")),
    PredicateTemplate("count", 2, _build_count),
    PredicateTemplate("minCount", 2, _build_min_count),
    PredicateTemplate("maxCount", 2, _build_max_count),
    PredicateTemplate("countBetween", 3, _build_count_between),
    PredicateTemplate("length", 2, _build_length),
    PredicateTemplate("minLength", 2, _build_min_length),
    PredicateTemplate("maxLength", 2, _build_max_length),
    PredicateTemplate("lengthBetween", 3, _build_length_between),
    PredicateTemplate("inArray", 2, _build_in_array),
    PredicateTemplate("oneOf", 2, _build_in_array),
    PredicateTemplate("methodExists", 2, _member_exists("method_exists")),
    PredicateTemplate("propertyExists", 2, _member_exists("property_exists")),
    PredicateTemplate("isArrayAccessible", 1, _is_or_instance_of("is_array", "ArrayAccess")),
)


def _build_catalog() -> Mapping[str, PredicateTemplate]:
    table = {}
    for template in _TEMPLATES:
        if template.name in table:
            raise ValueError(f"Duplicate assertion predicate: {template.name}")
        table[template.name] = template
    return MappingProxyType(table)


CATALOG: Mapping[str, PredicateTemplate] = _build_catalog()


def get_template(canonical_name: str) -> Optional[PredicateTemplate]:
    return CATALOG.get(canonical_name)
