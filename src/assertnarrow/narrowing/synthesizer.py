"""
Expression Synthesizer

Rewrites a supported assertion call as the condition that holds after it
returned. The null-tolerant variant accepts ``null`` as well:
``built || $value === null``.
"""

import logging
from typing import Optional

from ..shared.errors import ShouldNotHappenError
from ..shared.nodes import BooleanOr, Expr, Identical, const_fetch
from .catalog import Argument, get_template
from .interfaces import ScopeLike, TypeAlgebra
from .names import AssertionCall

logger = logging.getLogger("assertnarrow.narrowing.synthesizer")


def synthesize(call: AssertionCall, scope: ScopeLike, algebra: TypeAlgebra) -> Optional[Expr]:
    name = call.name
    template = get_template(name.canonical)
    if template is None:
        raise ShouldNotHappenError(f"No predicate template for supported assertion {call.raw_name}")

    arguments = [Argument(arg, scope, algebra) for arg in call.args[:template.arity]]
    expression = template.build(arguments)
    if expression is None:
        logger.debug(f"{call.raw_name}: predicate produced no condition")
        return None

    if call.is_null_tolerant:
        expression = BooleanOr(expression, Identical(call.args[0].value, const_fetch("null")))
    return expression
