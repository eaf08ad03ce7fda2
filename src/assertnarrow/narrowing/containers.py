"""
Container Narrowing Adapter

PHPStan Pattern: AssertTypeSpecifyingExtension::arrayOrIterable
Reference: DESIGN.md (narrowing core)

Narrows a container by transforming the type of its elements. The
container is first cut down to its iterable part; then either every array
shape has its values mapped (constant shapes key by key, homogeneous arrays
through their item type) or, when the container is some other iterable, a
single ``iterable<K, transform(V)>`` is rebuilt. Keys and shape flags never
change. Anything that is not a container yields no narrowing.

Only the container expression itself is refined; element expressions are
never given entries of their own.
"""

import logging

from ..analyser.specified_types import SpecifiedTypes, TypeSpecifierContext
from ..shared.nodes import Expr
from .interfaces import ElementTransform, ScopeLike, TypeAlgebra, TypeSpecifierLike

logger = logging.getLogger("assertnarrow.narrowing.containers")


class ContainerNarrowingAdapter:

    def __init__(self, algebra: TypeAlgebra, type_specifier: TypeSpecifierLike):
        self.algebra = algebra
        self.type_specifier = type_specifier

    def narrow(self, scope: ScopeLike, expr: Expr, transform: ElementTransform) -> SpecifiedTypes:
        current = self.algebra.intersect(scope.get_type(expr), self.algebra.mixed_iterable())

        shapes = self.algebra.array_shapes(current)
        if shapes:
            narrowed = self.algebra.union(*(
                self.algebra.from_shape(shape.map_values(transform)) for shape in shapes
            ))
        else:
            shape = self.algebra.iterable_shape(current)
            if shape is None:
                logger.debug(f"{expr} ({scope.get_type(expr)}) is not a container; no narrowing")
                return SpecifiedTypes()
            narrowed = self.algebra.from_shape(shape.map_values(transform))

        return self.type_specifier.create(expr, narrowed, TypeSpecifierContext.create_truthy())
