"""
Expression and Statement Nodes

PHPStan Pattern: PhpParser\\Node\\Expr
Reference: DESIGN.md (host AST)

Expressions are immutable (frozen) dataclasses. Their printed form
(``str(expr)``) is the identity key used by scopes and specified types, so
two structurally equal expressions refer to the same program value.

Statements belong to analysis snippets only; they carry a source location
and support visitor dispatch through ``accept()``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Generic, Optional, Tuple, TypeVar

from .source_location import SourceLocation
from .types import Type

T = TypeVar('T')


# ============================================================================
# Expressions
# ============================================================================

@dataclass(frozen=True)
class Name:
    """Function, constant or class name as written (``is_int``, ``Foo\\Bar``)."""
    value: str

    def __str__(self) -> str:
        return self.value

    def lower(self) -> str:
        return self.value.lstrip("\\").lower()


class Expr:
    """Base class for expressions."""

    def key(self) -> str:
        """Identity key (printed form)."""
        return str(self)


@dataclass(frozen=True)
class Arg:
    """Call argument wrapper (keeps the call-site shape of ``f($a, $b)``)."""
    value: Expr

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Variable(Expr):
    name: str

    def __str__(self) -> str:
        return f"${self.name}"


@dataclass(frozen=True)
class String_(Expr):
    value: str

    def __str__(self) -> str:
        return "'" + self.value.replace("'", "\\'") + "'"


@dataclass(frozen=True)
class LNumber(Expr):
    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class ConstFetch(Expr):
    """``null``, ``true``, ``false`` or another global constant."""
    name: Name

    def __str__(self) -> str:
        return str(self.name)


@dataclass(frozen=True)
class ClassConstFetch(Expr):
    """``Foo::class``"""
    class_name: Name
    constant: str = "class"

    def __str__(self) -> str:
        return f"{self.class_name}::{self.constant}"


@dataclass(frozen=True)
class ArrayItem:
    value: Expr
    key: Optional[Expr] = None

    def __str__(self) -> str:
        if self.key is None:
            return str(self.value)
        return f"{self.key} => {self.value}"


@dataclass(frozen=True)
class Array_(Expr):
    items: Tuple[ArrayItem, ...] = ()

    def __str__(self) -> str:
        return "[" + ", ".join(str(item) for item in self.items) + "]"


@dataclass(frozen=True)
class FuncCall(Expr):
    name: Name
    args: Tuple[Arg, ...] = ()

    def __str__(self) -> str:
        return f"{self.name}(" + ", ".join(str(arg) for arg in self.args) + ")"


@dataclass(frozen=True)
class StaticCall(Expr):
    class_name: Name
    method: str
    args: Tuple[Arg, ...] = ()

    def __str__(self) -> str:
        return f"{self.class_name}::{self.method}(" + ", ".join(str(arg) for arg in self.args) + ")"


@dataclass(frozen=True)
class Instanceof(Expr):
    expr: Expr
    class_name: Name

    def __str__(self) -> str:
        return f"{self.expr} instanceof {self.class_name}"


@dataclass(frozen=True)
class BooleanNot(Expr):
    expr: Expr

    def __str__(self) -> str:
        return f"!({self.expr})"


@dataclass(frozen=True)
class BinaryOp(Expr):
    """Base class for binary operators; subclasses set ``operator``."""
    left: Expr
    right: Expr

    operator = "?"

    def __str__(self) -> str:
        return f"({self.left} {self.operator} {self.right})"


@dataclass(frozen=True)
class BooleanAnd(BinaryOp):
    operator = "&&"


@dataclass(frozen=True)
class BooleanOr(BinaryOp):
    operator = "||"


@dataclass(frozen=True)
class Identical(BinaryOp):
    operator = "==="


@dataclass(frozen=True)
class NotIdentical(BinaryOp):
    operator = "!=="


@dataclass(frozen=True)
class Greater(BinaryOp):
    operator = ">"


@dataclass(frozen=True)
class GreaterOrEqual(BinaryOp):
    operator = ">="


@dataclass(frozen=True)
class Smaller(BinaryOp):
    operator = "<"


@dataclass(frozen=True)
class SmallerOrEqual(BinaryOp):
    operator = "<="


def const_fetch(name: str) -> ConstFetch:
    return ConstFetch(Name(name))


def func_call(name: str, *args: Expr) -> FuncCall:
    return FuncCall(Name(name), tuple(arg if isinstance(arg, Arg) else Arg(arg) for arg in args))


# ============================================================================
# Statements (analysis snippets)
# ============================================================================

@dataclass(frozen=True)
class Statement:
    location: Optional[SourceLocation] = field(default=None, compare=False, kw_only=True)

    def accept(self, visitor: 'StatementVisitor[T]') -> T:
        raise NotImplementedError(f"accept() not implemented for {self.__class__.__name__}")


@dataclass(frozen=True)
class Declaration(Statement):
    """``$a: string|null;``: the variable starts with the declared type."""
    variable: Variable
    declared_type: Type

    def accept(self, visitor: 'StatementVisitor[T]') -> T:
        return visitor.visit_declaration(self)


@dataclass(frozen=True)
class ExpressionStatement(Statement):
    expr: Expr

    def accept(self, visitor: 'StatementVisitor[T]') -> T:
        return visitor.visit_expression_statement(self)


@dataclass(frozen=True)
class AssertType(Statement):
    """``assertType('string', $a);``"""
    expected: str
    expr: Expr

    def accept(self, visitor: 'StatementVisitor[T]') -> T:
        return visitor.visit_assert_type(self)


@dataclass(frozen=True)
class DumpType(Statement):
    """``dumpType($a);``"""
    expr: Expr

    def accept(self, visitor: 'StatementVisitor[T]') -> T:
        return visitor.visit_dump_type(self)


@dataclass(frozen=True)
class Program:
    statements: Tuple[Statement, ...]
    source_file: str = "<snippet>"


class StatementVisitor(ABC, Generic[T]):
    """Visitor over snippet statements."""

    @abstractmethod
    def visit_declaration(self, node: Declaration) -> T:
        raise NotImplementedError

    @abstractmethod
    def visit_expression_statement(self, node: ExpressionStatement) -> T:
        raise NotImplementedError

    @abstractmethod
    def visit_assert_type(self, node: AssertType) -> T:
        raise NotImplementedError

    @abstractmethod
    def visit_dump_type(self, node: DumpType) -> T:
        raise NotImplementedError
