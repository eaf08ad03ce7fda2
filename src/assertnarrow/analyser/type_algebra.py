"""
Host Type Algebra

PHPStan Pattern: PHPStan\\Type\\TypeCombinator, PHPStan\\Type\\TypeUtils
Reference: DESIGN.md (core / host boundary)

Implements ``narrowing.interfaces.TypeAlgebra`` on top of the shared type
terms. Container decomposition lives here so that the narrowing core never
inspects concrete type classes.
"""

from typing import Optional, Tuple

from ..narrowing.interfaces import ContainerShape, ShapeEntry, ShapeKind
from ..shared.types import (
    Type, NeverType, ArrayType, ConstantArrayType, ConstantStringType, IterableType, ObjectType,
    MIXED,
)
from ..shared.type_combinator import TypeCombinator, members

MIXED_ITERABLE = IterableType(MIXED, MIXED)


class HostTypeAlgebra:
    """TypeCombinator seen through the narrowing core's capability interface."""

    def union(self, *types: Type) -> Type:
        return TypeCombinator.union(*types)

    def intersect(self, *types: Type) -> Type:
        return TypeCombinator.intersect(*types)

    def remove(self, from_type: Type, type_to_remove: Type) -> Type:
        return TypeCombinator.remove(from_type, type_to_remove)

    def remove_null(self, type_: Type) -> Type:
        return TypeCombinator.remove_null(type_)

    def object_type(self, class_name: str) -> Type:
        return ObjectType(class_name)

    def constant_string_value(self, type_: Type) -> Optional[str]:
        if isinstance(type_, ConstantStringType):
            return type_.value
        return None

    def mixed_iterable(self) -> Type:
        return MIXED_ITERABLE

    def array_shapes(self, type_: Type) -> Tuple[ContainerShape, ...]:
        parts = members(type_)
        if not parts or not all(isinstance(part, (ArrayType, ConstantArrayType)) for part in parts):
            return ()
        shapes = []
        for part in parts:
            if isinstance(part, ConstantArrayType):
                shapes.append(ContainerShape.constant(tuple(
                    ShapeEntry(key, value, optional) for key, value, optional in part.entries()
                )))
            else:
                shapes.append(ContainerShape.homogeneous(
                    part.key_type, part.item_type,
                    is_list=part.is_list, is_non_empty=part.is_non_empty,
                ))
        return tuple(shapes)

    def iterable_shape(self, type_: Type) -> Optional[ContainerShape]:
        if isinstance(type_, NeverType):
            return None
        if not TypeCombinator.is_super_type_of(MIXED_ITERABLE, type_).yes():
            return None
        return ContainerShape.homogeneous(
            TypeCombinator.iterable_key_type(type_),
            TypeCombinator.iterable_value_type(type_),
            is_array=False,
        )

    def from_shape(self, shape: ContainerShape) -> Type:
        if shape.kind is ShapeKind.CONSTANT:
            return TypeCombinator.constant_array(
                (entry.key, entry.value, entry.optional) for entry in shape.entries
            )
        entry = shape.entries[0]
        if shape.is_array:
            return TypeCombinator.array(entry.key, entry.value, shape.is_list, shape.is_non_empty)
        return IterableType(entry.key, entry.value)
