"""
Host Capability Interfaces

PHPStan Pattern: PHPStan\\Type\\TypeCombinator, PHPStan\\Analyser\\Scope
Reference: DESIGN.md (core / host boundary)

The narrowing core performs no type algebra of its own. Everything it needs
from the host (union, intersection, removal, container decomposition, the
current type of an expression, condition-to-type refinement) is reached
through the protocols below. ``assertnarrow.analyser`` supplies the
implementations.

Container shapes are the one data type the core owns: a container is either
*constant-shaped* (known keys, one value type per key) or *homogeneous* (one
key type and one value type for every element). Narrowing a shape maps its
value types and leaves everything else untouched.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Optional, Protocol, Tuple

from ..shared.nodes import Expr
from ..shared.types import Type

ElementTransform = Callable[[Type], Type]


class ShapeKind(Enum):
    CONSTANT = "constant"
    HOMOGENEOUS = "homogeneous"


@dataclass(frozen=True)
class ShapeEntry:
    key: Type
    value: Type
    optional: bool = False


@dataclass(frozen=True)
class ContainerShape:
    """
    One container member of a (possibly union) type.

    ``is_array`` distinguishes arrays from generic iterables; ``is_list`` and
    ``is_non_empty`` are carried through for homogeneous arrays so that a
    rebuilt ``non-empty-list<T>`` keeps both flags.
    """
    kind: ShapeKind
    entries: Tuple[ShapeEntry, ...]
    is_array: bool = True
    is_list: bool = False
    is_non_empty: bool = False

    def map_values(self, transform: ElementTransform) -> 'ContainerShape':
        """Apply ``transform`` to every value type; keys and flags are kept."""
        return replace(
            self,
            entries=tuple(
                ShapeEntry(entry.key, transform(entry.value), entry.optional)
                for entry in self.entries
            ),
        )

    @staticmethod
    def constant(entries: Tuple[ShapeEntry, ...]) -> 'ContainerShape':
        return ContainerShape(ShapeKind.CONSTANT, tuple(entries))

    @staticmethod
    def homogeneous(key: Type, value: Type, is_array: bool = True,
                    is_list: bool = False, is_non_empty: bool = False) -> 'ContainerShape':
        return ContainerShape(
            ShapeKind.HOMOGENEOUS,
            (ShapeEntry(key, value),),
            is_array=is_array,
            is_list=is_list,
            is_non_empty=is_non_empty,
        )


class TypeAlgebra(Protocol):
    """Type operations the core borrows from the host type system."""

    def union(self, *types: Type) -> Type: ...

    def intersect(self, *types: Type) -> Type: ...

    def remove(self, from_type: Type, type_to_remove: Type) -> Type: ...

    def remove_null(self, type_: Type) -> Type: ...

    def object_type(self, class_name: str) -> Type: ...

    def constant_string_value(self, type_: Type) -> Optional[str]:
        """The literal when ``type_`` is exactly one constant string, else ``None``."""
        ...

    def mixed_iterable(self) -> Type:
        """``iterable<mixed, mixed>``"""
        ...

    def array_shapes(self, type_: Type) -> Tuple[ContainerShape, ...]:
        """Array members of ``type_`` as shapes; empty unless every member is an array."""
        ...

    def iterable_shape(self, type_: Type) -> Optional[ContainerShape]:
        """
        ``type_`` seen as one homogeneous iterable, or ``None`` when it is not
        definitely iterable (including ``never``).
        """
        ...

    def from_shape(self, shape: ContainerShape) -> Type: ...


class ScopeLike(Protocol):
    def get_type(self, expr: Expr) -> Type: ...


class TypeSpecifierLike(Protocol):
    """Host condition-to-type refinement engine."""

    def specify_types_in_condition(self, scope: Any, expr: Expr, context: Any) -> Any: ...

    def create(self, expr: Expr, type_: Type, context: Any) -> Any: ...
