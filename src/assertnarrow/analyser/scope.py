"""
Scope

PHPStan Pattern: PHPStan\\Analyser\\MutatingScope
Reference: DESIGN.md (host analyser)

Immutable map from expression keys to their current types. Narrowing
produces a new scope; the old one is never touched.
"""

import logging
from typing import Dict, Optional, Tuple

from ..shared.nodes import (
    Expr, Variable, String_, LNumber, ConstFetch, ClassConstFetch, Array_,
    FuncCall, Instanceof, BooleanNot, BinaryOp,
)
from ..shared.types import (
    Type, NeverType, ArrayType, ConstantArrayType, ConstantIntegerType, ConstantStringType,
    MIXED, NULL, TRUE, FALSE, BOOL, INT,
)
from ..shared.type_combinator import TypeCombinator, members
from .specified_types import SpecifiedTypes

logger = logging.getLogger("assertnarrow.analyser.scope")

_BOOLEAN_FUNCTIONS = frozenset({
    "is_int", "is_string", "is_float", "is_bool", "is_numeric", "is_scalar",
    "is_object", "is_resource", "is_callable", "is_array", "array_key_exists",
    "in_array", "is_subclass_of", "class_exists", "interface_exists",
    "method_exists", "property_exists",
})

_CONSTANTS = {
    "null": NULL,
    "true": TRUE,
    "false": FALSE,
}


class Scope:
    """Types of expressions at one program point."""

    def __init__(self, types: Optional[Dict[str, Tuple[Expr, Type]]] = None):
        self._types: Dict[str, Tuple[Expr, Type]] = dict(types or {})

    def get_type(self, expr: Expr) -> Type:
        entry = self._types.get(expr.key())
        if entry is not None:
            return entry[1]
        return self._resolve_type(expr)

    def has_expression_type(self, expr: Expr) -> bool:
        return expr.key() in self._types

    def assign(self, expr: Expr, type_: Type) -> 'Scope':
        types = dict(self._types)
        types[expr.key()] = (expr, type_)
        return Scope(types)

    def filter_by_specified_types(self, specified: SpecifiedTypes) -> 'Scope':
        """Intersect with every sure type, then remove every sure-not type."""
        scope = self
        for expr, sure_type in specified.sure_types.values():
            narrowed = TypeCombinator.intersect(scope.get_type(expr), sure_type)
            logger.debug(f"{expr}: {scope.get_type(expr)} -> {narrowed}")
            scope = scope.assign(expr, narrowed)
        for expr, sure_not_type in specified.sure_not_types.values():
            narrowed = TypeCombinator.remove(scope.get_type(expr), sure_not_type)
            logger.debug(f"{expr}: {scope.get_type(expr)} -> {narrowed} (removed {sure_not_type})")
            scope = scope.assign(expr, narrowed)
        return scope

    def variables(self) -> Dict[str, Type]:
        return {
            key: type_ for key, (expr, type_) in self._types.items()
            if isinstance(expr, Variable)
        }

    # ------------------------------------------------------------------
    # Expression typing
    # ------------------------------------------------------------------

    def _resolve_type(self, expr: Expr) -> Type:
        if isinstance(expr, String_):
            return ConstantStringType(expr.value)
        if isinstance(expr, LNumber):
            return ConstantIntegerType(expr.value)
        if isinstance(expr, ConstFetch):
            return _CONSTANTS.get(expr.name.lower(), MIXED)
        if isinstance(expr, ClassConstFetch) and expr.constant.lower() == "class":
            return ConstantStringType(str(expr.class_name).lstrip("\\"))
        if isinstance(expr, Array_):
            return self._array_literal_type(expr)
        if isinstance(expr, FuncCall):
            return self._function_call_type(expr)
        if isinstance(expr, (Instanceof, BooleanNot, BinaryOp)):
            return BOOL
        # Undeclared variables, static calls and unknown constants.
        return MIXED

    def _array_literal_type(self, expr: Array_) -> Type:
        entries = []
        next_index = 0
        for item in expr.items:
            if item.key is None:
                key: Type = ConstantIntegerType(next_index)
            else:
                key = self.get_type(item.key)
                if not isinstance(key, (ConstantIntegerType, ConstantStringType)):
                    # Non-literal key: fall back to a general array.
                    return TypeCombinator.array(
                        TypeCombinator.union(*(self._literal_key_type(i) for i in expr.items)),
                        TypeCombinator.union(*(self.get_type(i.value) for i in expr.items)),
                        is_non_empty=True,
                    )
            if isinstance(key, ConstantIntegerType) and key.value >= next_index:
                next_index = key.value + 1
            entries = [entry for entry in entries if entry[0] != key]
            entries.append((key, self.get_type(item.value), False))
        return TypeCombinator.constant_array(entries)

    def _literal_key_type(self, item) -> Type:
        if item.key is None:
            return INT
        return self.get_type(item.key)

    def _function_call_type(self, expr: FuncCall) -> Type:
        name = expr.name.lower()
        if name in _BOOLEAN_FUNCTIONS:
            return BOOL
        if name in ("count", "strlen"):
            return TypeCombinator.integer_range(0, None)
        if name == "array_values" and expr.args:
            return self._array_values_type(self.get_type(expr.args[0].value))
        return MIXED

    def _array_values_type(self, type_: Type) -> Type:
        results = []
        for member in members(type_):
            if isinstance(member, ConstantArrayType):
                if any(member.optional_keys):
                    results.append(TypeCombinator.array(
                        INT, TypeCombinator.union(*member.value_types),
                        is_list=True, is_non_empty=member.required_count() > 0,
                    ))
                    continue
                results.append(TypeCombinator.constant_array(
                    (ConstantIntegerType(index), value, False)
                    for index, value in enumerate(member.value_types)
                ))
            elif isinstance(member, ArrayType):
                results.append(TypeCombinator.array(INT, member.item_type, is_list=True,
                                                    is_non_empty=member.is_non_empty))
            elif not isinstance(member, NeverType):
                # array_values() only accepts arrays; whatever else flows in
                # can only produce some list.
                results.append(TypeCombinator.array(INT, MIXED, is_list=True))
        return TypeCombinator.union(*results)
