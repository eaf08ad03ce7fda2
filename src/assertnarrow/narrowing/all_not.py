"""
Per-Element Negations

``allNotNull``, ``allNotInstanceOf`` and ``allNotSame`` cannot be phrased as
one reusable condition over an unknown element; each is a type subtraction
applied to every element through the container adapter.
"""

import logging

from ..analyser.specified_types import SpecifiedTypes
from ..shared.errors import ShouldNotHappenError
from .catalog import Argument
from .containers import ContainerNarrowingAdapter
from .interfaces import ScopeLike, TypeAlgebra
from .names import AssertionCall

logger = logging.getLogger("assertnarrow.narrowing.all_not")


class AllNotHandler:

    def __init__(self, algebra: TypeAlgebra, containers: ContainerNarrowingAdapter):
        self.algebra = algebra
        self.containers = containers

    def handle(self, call: AssertionCall, scope: ScopeLike) -> SpecifiedTypes:
        container = call.args[0].value
        algebra = self.algebra

        if call.raw_name == "allNotNull":
            return self.containers.narrow(scope, container, algebra.remove_null)

        if call.raw_name == "allNotInstanceOf":
            class_name = Argument(call.args[1], scope, algebra).literal_string()
            if class_name is None:
                logger.debug(f"allNotInstanceOf: class argument {call.args[1]} is not a literal")
                return SpecifiedTypes()
            object_type = algebra.object_type(class_name)
            return self.containers.narrow(scope, container, lambda type_: algebra.remove(type_, object_type))

        if call.raw_name == "allNotSame":
            value_type = scope.get_type(call.args[1].value)
            return self.containers.narrow(scope, container, lambda type_: algebra.remove(type_, value_type))

        raise ShouldNotHappenError(f"Unknown per-element negation: {call.raw_name}")
