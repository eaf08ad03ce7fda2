"""
Type Specifier

PHPStan Pattern: PHPStan\\Analyser\\TypeSpecifier
Reference: DESIGN.md (host analyser)

Turns a boolean condition into the types its operands must have on the
branch where the condition takes a given truth value. Supports the
vocabulary assertion expressions are built from: type-check functions,
``instanceof``, strict comparisons, integer comparisons (including the
``count()``/``strlen()`` size of a container or string), key and membership
checks, class/method/property existence checks and boolean connectives.
Static calls are handed to the registered type-specifying extensions.
"""

import logging
from typing import Callable, Dict, Optional, Tuple

from ..shared.nodes import (
    Expr, FuncCall, StaticCall, Instanceof, BooleanNot, BooleanAnd, BooleanOr,
    Identical, NotIdentical, Greater, GreaterOrEqual, Smaller, SmallerOrEqual,
    String_, LNumber, ConstFetch, ClassConstFetch, Array_,
)
from ..shared.types import (
    Type, MixedType, StringType, NonEmptyStringType, ConstantStringType,
    ClassStringType, IntegerType, IntegerRangeType, ConstantIntegerType,
    ArrayType, ConstantArrayType, ObjectType,
    MIXED, NEVER, INT, FLOAT, STRING, BOOL, OBJECT, RESOURCE, CALLABLE,
    NON_EMPTY_STRING, EMPTY_ARRAY,
)
from ..shared.type_combinator import TypeCombinator, members
from .extensions import TypeSpecifierAwareExtension
from .reflection import ExtensionRegistry
from .scope import Scope
from .specified_types import SpecifiedTypes, TypeSpecifierContext

logger = logging.getLogger("assertnarrow.analyser.type_specifier")

# name -> (type on the truthy branch, type removed on the falsey branch)
# A falsey type of None means the check cannot be negated precisely.
_TYPE_CHECK_FUNCTIONS: Dict[str, Tuple[Type, Optional[Type]]] = {
    "is_int": (INT, INT),
    "is_string": (STRING, STRING),
    "is_float": (FLOAT, FLOAT),
    "is_bool": (BOOL, BOOL),
    "is_numeric": (TypeCombinator.union(INT, FLOAT, STRING), TypeCombinator.union(INT, FLOAT)),
    "is_scalar": (TypeCombinator.union(INT, FLOAT, STRING, BOOL), TypeCombinator.union(INT, FLOAT, STRING, BOOL)),
    "is_object": (OBJECT, OBJECT),
    "is_resource": (RESOURCE, RESOURCE),
    "is_callable": (CALLABLE, None),
    "is_array": (ArrayType(MIXED, MIXED), ArrayType(MIXED, MIXED)),
}

_LITERAL_NODES = (String_, LNumber, ConstFetch, ClassConstFetch, Array_)

# Members count() and strlen() measure
_ARRAY_TYPES = (ArrayType, ConstantArrayType)
_STRING_TYPES = (StringType, NonEmptyStringType, ConstantStringType, ClassStringType)

# Swapping the operands of a comparison
_MIRRORED = {
    Greater: Smaller,
    GreaterOrEqual: SmallerOrEqual,
    Smaller: Greater,
    SmallerOrEqual: GreaterOrEqual,
}

# Negating a comparison
_NEGATED = {
    Greater: SmallerOrEqual,
    GreaterOrEqual: Smaller,
    Smaller: GreaterOrEqual,
    SmallerOrEqual: Greater,
}

Bounds = Tuple[Optional[int], Optional[int]]


class TypeSpecifier:
    """Condition-to-type refinement (PHPStan naming: TypeSpecifier)."""

    def __init__(self, registry: ExtensionRegistry):
        self.registry = registry
        for extension in registry.all_extensions():
            if isinstance(extension, TypeSpecifierAwareExtension):
                extension.set_type_specifier(self)

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def specify_types_in_condition(self, scope: Scope, expr: Expr,
                                   context: TypeSpecifierContext) -> SpecifiedTypes:
        if isinstance(expr, StaticCall):
            return self._specify_static_call(scope, expr, context)
        if context.null():
            return SpecifiedTypes()

        if isinstance(expr, BooleanNot):
            return self.specify_types_in_condition(scope, expr.expr, context.negate())
        if isinstance(expr, BooleanAnd):
            return self._specify_boolean_and(scope, expr, context)
        if isinstance(expr, BooleanOr):
            return self._specify_boolean_or(scope, expr, context)
        if isinstance(expr, Instanceof):
            return self.create(expr.expr, ObjectType(str(expr.class_name)), context)
        if isinstance(expr, NotIdentical):
            return self.specify_types_in_condition(scope, Identical(expr.left, expr.right), context.negate())
        if isinstance(expr, Identical):
            return self._specify_identical(scope, expr, context)
        if isinstance(expr, tuple(_NEGATED)):
            return self._specify_comparison(scope, expr, context)
        if isinstance(expr, FuncCall):
            return self._specify_function_call(scope, expr, context)

        logger.debug(f"No type specification for {expr}")
        return SpecifiedTypes()

    def create(self, expr: Expr, type_: Type, context: TypeSpecifierContext) -> SpecifiedTypes:
        """Record ``expr`` as having (truthy/null) or lacking (falsey) ``type_``."""
        entry = {expr.key(): (expr, type_)}
        if context.falsey():
            return SpecifiedTypes({}, entry)
        return SpecifiedTypes(entry, {})

    # ------------------------------------------------------------------
    # Static calls
    # ------------------------------------------------------------------

    def _specify_static_call(self, scope: Scope, expr: StaticCall,
                             context: TypeSpecifierContext) -> SpecifiedTypes:
        method = self.registry.reflect(expr)
        result = SpecifiedTypes()
        for extension in self.registry.extensions_for(method.declaring_class):
            if not extension.is_static_method_supported(method, expr, context):
                logger.debug(f"{extension.__class__.__name__} does not support {method}")
                continue
            result = result.union_with(extension.specify_types(method, expr, scope, context))
        return result

    # ------------------------------------------------------------------
    # Boolean connectives
    # ------------------------------------------------------------------

    def _specify_boolean_and(self, scope: Scope, expr: BooleanAnd,
                             context: TypeSpecifierContext) -> SpecifiedTypes:
        left = self.specify_types_in_condition(scope, expr.left, context)
        # The right operand only runs when the left one held.
        right_scope = self._filter_by_truthy_value(scope, expr.left)
        right = self.specify_types_in_condition(right_scope, expr.right, context)
        if context.truthy():
            return left.union_with(right)
        return left.intersect_with(right)

    def _specify_boolean_or(self, scope: Scope, expr: BooleanOr,
                            context: TypeSpecifierContext) -> SpecifiedTypes:
        left = self.specify_types_in_condition(scope, expr.left, context)
        # The right operand only runs when the left one failed.
        right_scope = self._filter_by_falsey_value(scope, expr.left)
        right = self.specify_types_in_condition(right_scope, expr.right, context)
        if context.truthy():
            return left.intersect_with(right)
        return left.union_with(right)

    def _filter_by_truthy_value(self, scope: Scope, expr: Expr) -> Scope:
        return scope.filter_by_specified_types(
            self.specify_types_in_condition(scope, expr, TypeSpecifierContext.create_truthy()))

    def _filter_by_falsey_value(self, scope: Scope, expr: Expr) -> Scope:
        return scope.filter_by_specified_types(
            self.specify_types_in_condition(scope, expr, TypeSpecifierContext.create_falsey()))

    # ------------------------------------------------------------------
    # Strict comparison
    # ------------------------------------------------------------------

    def _specify_identical(self, scope: Scope, expr: Identical,
                           context: TypeSpecifierContext) -> SpecifiedTypes:
        left_type = scope.get_type(expr.left)
        right_type = scope.get_type(expr.right)

        for size_call, bound_type in ((expr.left, right_type), (expr.right, left_type)):
            if _is_size_call(size_call) and isinstance(bound_type, ConstantIntegerType):
                if context.truthy():
                    return self._specify_size(scope, size_call, (bound_type.value, bound_type.value))
                if bound_type.value == 0:
                    return self._specify_size(scope, size_call, (1, None))
                return SpecifiedTypes()

        if TypeCombinator.constant_scalar(right_type) and not isinstance(expr.left, _LITERAL_NODES):
            return self._specify_constant(scope, expr.left, right_type, context)
        if TypeCombinator.constant_scalar(left_type) and not isinstance(expr.right, _LITERAL_NODES):
            return self._specify_constant(scope, expr.right, left_type, context)

        if not context.truthy():
            return SpecifiedTypes()
        result = SpecifiedTypes()
        if not isinstance(expr.left, _LITERAL_NODES):
            result = result.union_with(self.create(expr.left, right_type, context))
        if not isinstance(expr.right, _LITERAL_NODES):
            result = result.union_with(self.create(expr.right, left_type, context))
        return result

    def _specify_constant(self, scope: Scope, expr: Expr, constant: Type,
                          context: TypeSpecifierContext) -> SpecifiedTypes:
        """``expr === constant``; ``expr !== ''`` refines to ``non-empty-string`` rather than removing."""
        if context.falsey() and constant == ConstantStringType(""):
            others = [member for member in members(scope.get_type(expr)) if not isinstance(member, _STRING_TYPES)]
            return self.create(expr, TypeCombinator.union(NON_EMPTY_STRING, *others),
                               TypeSpecifierContext.create_truthy())
        return self.create(expr, constant, context)

    # ------------------------------------------------------------------
    # Integer comparison
    # ------------------------------------------------------------------

    def _specify_comparison(self, scope: Scope, expr: Expr,
                            context: TypeSpecifierContext) -> SpecifiedTypes:
        operator = type(expr)
        if context.falsey():
            operator = _NEGATED[operator]

        subject, bound_expr = expr.left, expr.right
        bound_type = scope.get_type(bound_expr)
        if not isinstance(bound_type, ConstantIntegerType):
            subject, bound_expr = expr.right, expr.left
            bound_type = scope.get_type(bound_expr)
            operator = _MIRRORED[operator]
            if not isinstance(bound_type, ConstantIntegerType):
                return SpecifiedTypes()

        bounds = _comparison_bounds(operator, bound_type.value)
        if _is_size_call(subject):
            return self._specify_size(scope, subject, bounds)

        # Integer members give way to the range; anything else passes through.
        others = [member for member in members(scope.get_type(subject)) if not _is_integer(member)]
        narrowed = TypeCombinator.union(TypeCombinator.integer_range(*bounds), *others)
        return self.create(subject, narrowed, TypeSpecifierContext.create_truthy())

    def _specify_size(self, scope: Scope, size_call: FuncCall, bounds: Bounds) -> SpecifiedTypes:
        if not size_call.args:
            return SpecifiedTypes()
        target = size_call.args[0].value
        if size_call.name.lower() == "count":
            narrow_member, domain, sized_kinds = _with_count, ArrayType(MIXED, MIXED), _ARRAY_TYPES
        else:
            narrow_member, domain, sized_kinds = _with_length, STRING, _STRING_TYPES

        current = members(scope.get_type(target))
        sized = [member for member in current if isinstance(member, sized_kinds)]
        others = [member for member in current if not isinstance(member, sized_kinds)]
        # With no sized member left the bound alone decides.
        narrowed = TypeCombinator.union(
            *(narrow_member(member, bounds) for member in (sized or [domain])), *others)
        return self.create(target, narrowed, TypeSpecifierContext.create_truthy())

    # ------------------------------------------------------------------
    # Function calls
    # ------------------------------------------------------------------

    def _specify_function_call(self, scope: Scope, expr: FuncCall,
                               context: TypeSpecifierContext) -> SpecifiedTypes:
        name = expr.name.lower()
        args = [arg.value for arg in expr.args]
        if not args:
            return SpecifiedTypes()

        if name in _TYPE_CHECK_FUNCTIONS:
            truthy_type, falsey_type = _TYPE_CHECK_FUNCTIONS[name]
            if context.truthy():
                return self.create(args[0], truthy_type, context)
            if falsey_type is None:
                return SpecifiedTypes()
            return self.create(args[0], falsey_type, context)

        handler = self._FUNCTION_HANDLERS.get(name)
        if handler is None:
            logger.debug(f"No type specification for function {expr.name}")
            return SpecifiedTypes()
        return handler(self, scope, args, context)

    def _specify_array_key_exists(self, scope: Scope, args, context) -> SpecifiedTypes:
        if len(args) < 2:
            return SpecifiedTypes()
        key_type = scope.get_type(args[0])
        array = args[1]
        present = context.truthy()
        if not isinstance(key_type, (ConstantIntegerType, ConstantStringType)):
            if not present:
                return SpecifiedTypes()
            narrowed = TypeCombinator.map_members(scope.get_type(array), lambda m: _with_count(m, (1, None)))
        else:
            narrowed = TypeCombinator.map_members(
                scope.get_type(array), lambda m: _with_key(m, key_type, present))
        return self.create(array, narrowed, TypeSpecifierContext.create_truthy())

    def _specify_in_array(self, scope: Scope, args, context) -> SpecifiedTypes:
        if not context.truthy() or len(args) < 3:
            return SpecifiedTypes()
        strict = args[2]
        if not (isinstance(strict, ConstFetch) and strict.name.lower() == "true"):
            return SpecifiedTypes()
        needle, haystack = args[0], args[1]
        haystack_type = scope.get_type(haystack)
        value_type = TypeCombinator.iterable_value_type(haystack_type)
        result = SpecifiedTypes()
        if not isinstance(value_type, MixedType):
            result = self.create(needle, value_type, context)
        return result.union_with(self.create(
            haystack,
            TypeCombinator.map_members(haystack_type, lambda m: _with_count(m, (1, None))),
            context,
        ))

    def _specify_is_subclass_of(self, scope: Scope, args, context) -> SpecifiedTypes:
        if not context.truthy() or len(args) < 2:
            return SpecifiedTypes()
        class_type = scope.get_type(args[1])
        if isinstance(class_type, ConstantStringType):
            type_ = TypeCombinator.union(ObjectType(class_type.value), ClassStringType(class_type.value))
        else:
            type_ = TypeCombinator.union(OBJECT, ClassStringType())
        return self.create(args[0], type_, context)

    def _specify_class_exists(self, scope: Scope, args, context) -> SpecifiedTypes:
        if not context.truthy():
            return SpecifiedTypes()
        return self.create(args[0], ClassStringType(), context)

    def _specify_member_exists(self, scope: Scope, args, context) -> SpecifiedTypes:
        if not context.truthy():
            return SpecifiedTypes()
        return self.create(args[0], TypeCombinator.union(OBJECT, ClassStringType()), context)

    _FUNCTION_HANDLERS: Dict[str, Callable] = {
        "array_key_exists": _specify_array_key_exists,
        "in_array": _specify_in_array,
        "is_subclass_of": _specify_is_subclass_of,
        "class_exists": _specify_class_exists,
        "interface_exists": _specify_class_exists,
        "method_exists": _specify_member_exists,
        "property_exists": _specify_member_exists,
    }


# ======================================================================
# Helpers
# ======================================================================

def _is_size_call(expr: Expr) -> bool:
    return isinstance(expr, FuncCall) and expr.name.lower() in ("count", "strlen") and bool(expr.args)


def _is_integer(member: Type) -> bool:
    return isinstance(member, (IntegerType, IntegerRangeType, ConstantIntegerType))


def _comparison_bounds(operator, value: int) -> Bounds:
    if operator is Greater:
        return value + 1, None
    if operator is GreaterOrEqual:
        return value, None
    if operator is Smaller:
        return None, value - 1
    return None, value


def _within(size: int, bounds: Bounds) -> bool:
    low, high = bounds
    return (low is None or size >= low) and (high is None or size <= high)


def _with_count(member: Type, bounds: Bounds) -> Type:
    """Narrow one member to containers whose element count lies within ``bounds``."""
    low, high = bounds
    if low is not None and high is not None and low > high:
        return NEVER
    if isinstance(member, ConstantArrayType):
        total = len(member.key_types)
        required = member.required_count()
        if high is not None and required > high:
            return NEVER
        if low is not None and total < low:
            return NEVER
        return member
    if isinstance(member, ArrayType):
        if high is not None and high <= 0:
            return EMPTY_ARRAY
        if low is not None and low >= 1:
            return TypeCombinator.array(member.key_type, member.item_type, member.is_list, True)
        return member
    return member


def _with_length(member: Type, bounds: Bounds) -> Type:
    """Narrow one member to strings whose length lies within ``bounds``."""
    low, high = bounds
    if low is not None and high is not None and low > high:
        return NEVER
    if isinstance(member, ConstantStringType):
        return member if _within(len(member.value), bounds) else NEVER
    if isinstance(member, (NonEmptyStringType, ClassStringType)):
        return NEVER if high is not None and high <= 0 else member
    if isinstance(member, StringType):
        if high is not None and high <= 0:
            return ConstantStringType("")
        if low is not None and low >= 1:
            return NON_EMPTY_STRING
        return member
    return member


def _with_key(member: Type, key: Type, present: bool) -> Type:
    """Narrow one member by whether ``key`` exists in it."""
    if isinstance(member, ConstantArrayType):
        index = member.find_key(key)
        if index is None:
            return NEVER if present else member
        if present:
            optional = tuple(False if i == index else flag for i, flag in enumerate(member.optional_keys))
            return ConstantArrayType(member.key_types, member.value_types, optional)
        if not member.optional_keys[index]:
            return NEVER
        return TypeCombinator.constant_array(
            entry for i, entry in enumerate(member.entries()) if i != index)
    if isinstance(member, ArrayType) and present:
        if TypeCombinator.is_super_type_of(member.key_type, key).no():
            return NEVER
        return TypeCombinator.array(member.key_type, member.item_type, member.is_list, True)
    return member

