"""
Assertion narrowing core.

PHPStan Pattern: phpstan-webmozart-assert
"""

from .names import AssertionCall, CallName, normalize
from .support import is_supported
from .catalog import CATALOG, Argument, PredicateTemplate
from .synthesizer import synthesize
from .interfaces import ContainerShape, ShapeEntry, ShapeKind, TypeAlgebra
from .containers import ContainerNarrowingAdapter
from .all_not import AllNotHandler
from .extension import AssertTypeSpecifyingExtension
