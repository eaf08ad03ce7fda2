"""
Shared components: type terms, expression nodes, locations and errors.

PHPStan Pattern: PHPStan\\Type, PhpParser\\Node
"""

from .source_location import SourceLocation
from .errors import (
    Error, ErrorCode, ErrorReporter,
    AssertNarrowError, AssertNarrowSourceError, ShouldNotHappenError,
)
from .types import Type, TypeKind, TrinaryLogic
from .type_combinator import TypeCombinator
from .nodes import Expr, Arg, Name, Statement, Program, StatementVisitor
