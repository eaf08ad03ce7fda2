"""
Support Checker

Decides whether an assertion call is one the narrowing engine understands.
"""

import logging

from ..utils.config import ALL_NOT_ARITIES, ALL_NOT_PREFIX
from .catalog import get_template
from .names import normalize

logger = logging.getLogger("assertnarrow.narrowing.support")


def is_supported(raw_name: str, arg_count: int) -> bool:
    if raw_name.startswith(ALL_NOT_PREFIX):
        minimum = ALL_NOT_ARITIES.get(raw_name)
        if minimum is None:
            logger.debug(f"Unsupported per-element negation: {raw_name}")
            return False
        return arg_count >= minimum

    canonical = normalize(raw_name).canonical
    template = get_template(canonical)
    if template is None:
        logger.debug(f"Unknown assertion: {raw_name} ({canonical})")
        return False
    if arg_count < template.arity:
        logger.debug(f"{raw_name} needs {template.arity} argument(s), got {arg_count}")
        return False
    return True
