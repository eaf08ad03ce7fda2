"""
Assert Type-Specifying Extension

PHPStan Pattern: PHPStan\\Type\\WebMozartAssert\\AssertTypeSpecifyingExtension
Reference: DESIGN.md (narrowing core)

Entry point the host calls for every static call on the assertion class.

Flow for a supported call:

1. ``allNotNull``/``allNotInstanceOf``/``allNotSame`` go straight to the
   per-element negation handler.
2. Everything else is rewritten into a condition (``synthesize``) and handed
   to the host type specifier as a truthy condition.
3. For per-element (``all*``) calls the condition was stated about the whole
   container; the sure type it gives the container expression is re-applied
   to every element instead. No such entry means no narrowing.

Only the branch where the assertion returned is narrowed: a falsey context
gets an empty result.
"""

import logging
from typing import Optional

from ..analyser.extensions import StaticMethodTypeSpecifyingExtension, TypeSpecifierAwareExtension
from ..analyser.reflection import MethodReflection
from ..analyser.specified_types import SpecifiedTypes, TypeSpecifierContext
from ..shared.errors import ShouldNotHappenError
from ..shared.nodes import StaticCall
from ..utils.config import ASSERT_CLASS
from .all_not import AllNotHandler
from .containers import ContainerNarrowingAdapter
from .interfaces import ScopeLike, TypeAlgebra, TypeSpecifierLike
from .names import AssertionCall
from .support import is_supported
from .synthesizer import synthesize

logger = logging.getLogger("assertnarrow.narrowing.extension")


class AssertTypeSpecifyingExtension(StaticMethodTypeSpecifyingExtension, TypeSpecifierAwareExtension):

    def __init__(self, algebra: TypeAlgebra):
        self.algebra = algebra
        self.type_specifier: Optional[TypeSpecifierLike] = None
        self.containers: Optional[ContainerNarrowingAdapter] = None
        self.all_not: Optional[AllNotHandler] = None

    def set_type_specifier(self, type_specifier: TypeSpecifierLike) -> None:
        self.type_specifier = type_specifier
        self.containers = ContainerNarrowingAdapter(self.algebra, type_specifier)
        self.all_not = AllNotHandler(self.algebra, self.containers)

    def get_class(self) -> str:
        return ASSERT_CLASS

    def is_static_method_supported(self, method: MethodReflection, node: StaticCall,
                                   context: TypeSpecifierContext) -> bool:
        return is_supported(method.get_name(), len(node.args))

    def specify_types(self, method: MethodReflection, node: StaticCall, scope: ScopeLike,
                      context: TypeSpecifierContext) -> SpecifiedTypes:
        if self.type_specifier is None:
            raise ShouldNotHappenError("Type specifier was never injected into the assertion extension")
        if context.falsey():
            return SpecifiedTypes()

        call = AssertionCall(method.get_name(), node.args)
        if call.is_per_element_negated:
            return self.all_not.handle(call, scope)

        expression = synthesize(call, scope, self.algebra)
        if expression is None:
            return SpecifiedTypes()
        logger.debug(f"{method}: {expression}")

        specified = self.type_specifier.specify_types_in_condition(
            scope, expression, TypeSpecifierContext.create_truthy())
        if not call.is_per_element:
            return specified

        container = call.args[0].value
        sure_type = specified.get_sure_type(container)
        if sure_type is not None:
            return self.containers.narrow(scope, container, lambda _: sure_type)
        if specified.get_sure_not_type(container) is not None:
            raise ShouldNotHappenError(
                f"{method}: per-element assertion produced only negative refinements ({specified.describe()})")
        logger.debug(f"{method}: condition does not refine {container}; no narrowing")
        return SpecifiedTypes()
