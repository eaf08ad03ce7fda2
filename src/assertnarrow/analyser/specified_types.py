"""
Specified Types

PHPStan Pattern: PHPStan\\Analyser\\SpecifiedTypes, TypeSpecifierContext
Reference: DESIGN.md (host analyser)

A refinement result: "sure" types an expression definitely has and
"sure-not" types it definitely lacks, on the branch described by the
context the refinement was computed for. Both maps are keyed by the printed
expression and keep the expression alongside the type.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple

from ..shared.nodes import Expr
from ..shared.types import Type
from ..shared.type_combinator import TypeCombinator

SpecifiedEntry = Tuple[Expr, Type]


class TypeSpecifierContext(Enum):
    """Which outcome of a condition is being described."""
    TRUTHY = "truthy"
    FALSEY = "falsey"
    NULL = "null"  # statement position: the value is not used as a condition

    @staticmethod
    def create_truthy() -> 'TypeSpecifierContext':
        return TypeSpecifierContext.TRUTHY

    @staticmethod
    def create_falsey() -> 'TypeSpecifierContext':
        return TypeSpecifierContext.FALSEY

    @staticmethod
    def create_null() -> 'TypeSpecifierContext':
        return TypeSpecifierContext.NULL

    def truthy(self) -> bool:
        return self is TypeSpecifierContext.TRUTHY

    def falsey(self) -> bool:
        return self is TypeSpecifierContext.FALSEY

    def null(self) -> bool:
        return self is TypeSpecifierContext.NULL

    def negate(self) -> 'TypeSpecifierContext':
        if self is TypeSpecifierContext.TRUTHY:
            return TypeSpecifierContext.FALSEY
        if self is TypeSpecifierContext.FALSEY:
            return TypeSpecifierContext.TRUTHY
        return self


@dataclass(frozen=True)
class SpecifiedTypes:
    sure_types: Dict[str, SpecifiedEntry] = field(default_factory=dict)
    sure_not_types: Dict[str, SpecifiedEntry] = field(default_factory=dict)

    def is_empty(self) -> bool:
        return not self.sure_types and not self.sure_not_types

    def get_sure_type(self, expr: Expr) -> Optional[Type]:
        entry = self.sure_types.get(expr.key())
        return entry[1] if entry else None

    def get_sure_not_type(self, expr: Expr) -> Optional[Type]:
        entry = self.sure_not_types.get(expr.key())
        return entry[1] if entry else None

    def union_with(self, other: 'SpecifiedTypes') -> 'SpecifiedTypes':
        """
        Both refinements hold (conjunction).

        Sure types of a shared expression are intersected, sure-not types
        are unioned.
        """
        return SpecifiedTypes(
            _merge_all(self.sure_types, other.sure_types, TypeCombinator.intersect),
            _merge_all(self.sure_not_types, other.sure_not_types, TypeCombinator.union),
        )

    def intersect_with(self, other: 'SpecifiedTypes') -> 'SpecifiedTypes':
        """
        At least one refinement holds (disjunction).

        Only expressions refined on both sides survive: sure types are
        unioned, sure-not types intersected.
        """
        return SpecifiedTypes(
            _merge_common(self.sure_types, other.sure_types, TypeCombinator.union),
            _merge_common(self.sure_not_types, other.sure_not_types, TypeCombinator.intersect),
        )

    def describe(self) -> str:
        sure = ", ".join(f"{key}: {type_}" for key, (_, type_) in self.sure_types.items())
        sure_not = ", ".join(f"{key}: {type_}" for key, (_, type_) in self.sure_not_types.items())
        return f"sure {{{sure}}} sure-not {{{sure_not}}}"


def _merge_all(left: Dict[str, SpecifiedEntry], right: Dict[str, SpecifiedEntry], combine) -> Dict[str, SpecifiedEntry]:
    merged = dict(left)
    for key, (expr, type_) in right.items():
        if key in merged:
            merged[key] = (merged[key][0], combine(merged[key][1], type_))
        else:
            merged[key] = (expr, type_)
    return merged


def _merge_common(left: Dict[str, SpecifiedEntry], right: Dict[str, SpecifiedEntry], combine) -> Dict[str, SpecifiedEntry]:
    return {
        key: (expr, combine(type_, right[key][1]))
        for key, (expr, type_) in left.items()
        if key in right
    }
