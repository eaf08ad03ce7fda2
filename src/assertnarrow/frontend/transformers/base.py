"""
Snippet Transformer
Converts the Lark parse tree of an analysis snippet into statement and
expression nodes. Type notation is handled by the inherited
``TypeNotationTransformer`` rules.
"""

import logging
from typing import List, Optional

from lark import v_args
from lark.lexer import Token

from ...shared.nodes import (
    Arg, Array_, ArrayItem, AssertType, ClassConstFetch, ConstFetch, Declaration, DumpType,
    Expr, ExpressionStatement, FuncCall, LNumber, Name, Program, Statement, StaticCall, String_,
    Variable,
)
from ...shared.types import Type
from .types import LarkMeta, TypeNotationTransformer, unquote

logger: logging.Logger = logging.getLogger("assertnarrow.frontend.transformers.base")


@v_args(inline=True, meta=True)
class SnippetTransformer(TypeNotationTransformer):
    """Snippet AST transformer."""

    # =========================================================================
    # PROGRAM STRUCTURE
    # =========================================================================

    def program(self, meta: LarkMeta, *statements: Statement) -> Program:
        logger.debug(f"{self.current_file}: {len(statements)} statement(s)")
        return Program(statements=tuple(statements), source_file=self.current_file)

    def declaration(self, meta: LarkMeta, variable: Token, declared_type: Type) -> Declaration:
        return Declaration(
            variable=Variable(str(variable)[1:]),
            declared_type=declared_type,
            location=self._location(meta),
        )

    def assert_type(self, meta: LarkMeta, keyword: Token, expected: Token, expr: Expr) -> AssertType:
        return AssertType(expected=unquote(str(expected)), expr=expr, location=self._location(meta))

    def dump_type(self, meta: LarkMeta, keyword: Token, expr: Expr) -> DumpType:
        return DumpType(expr=expr, location=self._location(meta))

    def expression_statement(self, meta: LarkMeta, expr: Expr) -> ExpressionStatement:
        return ExpressionStatement(expr=expr, location=self._location(meta))

    # =========================================================================
    # EXPRESSIONS
    # =========================================================================

    def variable(self, meta: LarkMeta, token: Token) -> Variable:
        return Variable(str(token)[1:])

    def string(self, meta: LarkMeta, token: Token) -> String_:
        return String_(unquote(str(token)))

    def integer(self, meta: LarkMeta, token: Token) -> LNumber:
        return LNumber(int(token))

    def null(self, meta: LarkMeta, token: Token) -> ConstFetch:
        return ConstFetch(Name("null"))

    def true(self, meta: LarkMeta, token: Token) -> ConstFetch:
        return ConstFetch(Name("true"))

    def false(self, meta: LarkMeta, token: Token) -> ConstFetch:
        return ConstFetch(Name("false"))

    def class_constant(self, meta: LarkMeta, class_name: Token, keyword: Token) -> ClassConstFetch:
        return ClassConstFetch(Name(str(class_name)))

    def static_call(self, meta: LarkMeta, class_name: Token, method: str,
                    args: Optional[List[Arg]] = None) -> StaticCall:
        return StaticCall(Name(str(class_name)), method, tuple(args or ()))

    def func_call(self, meta: LarkMeta, name: Token, args: Optional[List[Arg]] = None) -> FuncCall:
        return FuncCall(Name(str(name)), tuple(args or ()))

    def method_name(self, meta: LarkMeta, token: Token) -> str:
        return str(token)

    def args(self, meta: LarkMeta, *exprs: Expr) -> List[Arg]:
        return [Arg(expr) for expr in exprs]

    def array(self, meta: LarkMeta, items: Optional[List[ArrayItem]] = None) -> Array_:
        return Array_(tuple(items or ()))

    def array_items(self, meta: LarkMeta, *items: ArrayItem) -> List[ArrayItem]:
        return list(items)

    def array_item(self, meta: LarkMeta, *parts: Expr) -> ArrayItem:
        if len(parts) == 2:
            key, value = parts
            return ArrayItem(value=value, key=key)
        return ArrayItem(value=parts[0])
