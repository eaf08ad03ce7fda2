"""
Assertion Name Normalizer

Splits an assertion method name into the canonical predicate name and the
structural variant flags: ``nullOrString`` -> (``string``, null-tolerant),
``allIsInstanceOf`` -> (``isInstanceOf``, per-element),
``allNullOrInteger`` -> (``integer``, null-tolerant + per-element).
"""

from dataclasses import dataclass
from typing import Sequence, Tuple

from ..shared.nodes import Arg
from ..utils.config import ALL_NOT_ARITIES, ALL_PREFIX, NULL_OR_PREFIX

# Spelling of the null-tolerant marker when it follows the per-element one
_INNER_NULL_OR_PREFIX = NULL_OR_PREFIX[0].upper() + NULL_OR_PREFIX[1:]


@dataclass(frozen=True)
class CallName:
    canonical: str
    null_tolerant: bool = False
    per_element: bool = False


def lcfirst(name: str) -> str:
    return name[:1].lower() + name[1:]


def normalize(raw_name: str) -> CallName:
    name = raw_name
    null_tolerant = False
    per_element = False
    if name.startswith(NULL_OR_PREFIX):
        name = name[len(NULL_OR_PREFIX):]
        null_tolerant = True
    if name.startswith(ALL_PREFIX):
        name = name[len(ALL_PREFIX):]
        per_element = True
        if name.startswith(_INNER_NULL_OR_PREFIX):
            name = name[len(_INNER_NULL_OR_PREFIX):]
            null_tolerant = True
    return CallName(lcfirst(name), null_tolerant, per_element)


def is_per_element_negated(raw_name: str) -> bool:
    """True for the fixed per-element negations (``allNotNull`` and friends)."""
    return raw_name in ALL_NOT_ARITIES


@dataclass(frozen=True)
class AssertionCall:
    """A call site: the method name as written plus its arguments."""
    raw_name: str
    args: Tuple[Arg, ...]

    def __init__(self, raw_name: str, args: Sequence[Arg]):
        object.__setattr__(self, 'raw_name', raw_name)
        object.__setattr__(self, 'args', tuple(args))

    @property
    def name(self) -> CallName:
        return normalize(self.raw_name)

    @property
    def is_null_tolerant(self) -> bool:
        return not self.is_per_element_negated and self.name.null_tolerant

    @property
    def is_per_element(self) -> bool:
        return self.name.per_element

    @property
    def is_per_element_negated(self) -> bool:
        return is_per_element_negated(self.raw_name)
