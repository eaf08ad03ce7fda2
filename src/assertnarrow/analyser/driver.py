"""
Analyser Driver

PHPStan Pattern: PHPStan\\Analyser\\NodeScopeResolver
Reference: DESIGN.md (host analyser)

Parses a snippet, walks its statements in order and threads a scope through
them. Static assertion calls narrow the scope through the registered
type-specifying extensions; ``assertType`` compares the current type of an
expression with the expected notation, ``dumpType`` records it.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Mapping, Optional, Union

from ..frontend.parser import Parser, ParseError
from ..narrowing.extension import AssertTypeSpecifyingExtension
from ..shared.errors import ErrorCode, ErrorReporter
from ..shared.nodes import (
    AssertType, Declaration, DumpType, Expr, ExpressionStatement, Program, StatementVisitor,
)
from ..shared.source_location import SourceLocation
from ..shared.types import Type
from ..utils.config import DEFAULT_SOURCE_FILE
from ..utils.io_utils import read_source_file
from .reflection import ExtensionRegistry
from .scope import Scope
from .specified_types import TypeSpecifierContext
from .type_algebra import HostTypeAlgebra
from .type_specifier import TypeSpecifier

logger = logging.getLogger("assertnarrow.analyser.driver")


@dataclass(frozen=True)
class DumpedType:
    location: Optional[SourceLocation]
    expr: Expr
    type: Type

    def __str__(self) -> str:
        where = f"{self.location}: " if self.location else ""
        return f"{where}dumpType({self.expr}): {self.type}"


class AnalysisResult:
    """Analysis result"""
    def __init__(
        self,
        program: Optional[Program] = None,
        scope: Optional[Scope] = None,
        reporter: Optional[ErrorReporter] = None,
        dumped_types: Optional[List[DumpedType]] = None,
        success: bool = False
    ):
        self.program = program
        self.scope = scope
        self.reporter = reporter
        self.dumped_types = dumped_types or []
        self.success = success

    def has_errors(self) -> bool:
        if self.reporter:
            return self.reporter.has_errors()
        return not self.success

    def get_errors(self) -> list:
        if self.reporter and self.reporter.has_errors():
            return list(self.reporter.errors)
        return []

    def type_of(self, variable: str) -> Type:
        """Final type of ``$variable`` (name given with or without ``$``)."""
        from ..shared.nodes import Variable
        return self.scope.get_type(Variable(variable.lstrip("$")))


class StatementAnalyser(StatementVisitor[None]):
    """Walks the statements of one snippet, threading the scope."""

    def __init__(self, parser: Parser, type_specifier: TypeSpecifier,
                 reporter: ErrorReporter, source_file: str):
        self.parser = parser
        self.type_specifier = type_specifier
        self.reporter = reporter
        self.source_file = source_file
        self.scope = Scope()
        self.dumped_types: List[DumpedType] = []

    def visit_declaration(self, node: Declaration) -> None:
        self.scope = self.scope.assign(node.variable, node.declared_type)

    def visit_expression_statement(self, node: ExpressionStatement) -> None:
        specified = self.type_specifier.specify_types_in_condition(
            self.scope, node.expr, TypeSpecifierContext.create_null())
        if specified.is_empty():
            logger.debug(f"{node.location}: {node.expr} narrows nothing")
            return
        self.scope = self.scope.filter_by_specified_types(specified)

    def visit_assert_type(self, node: AssertType) -> None:
        try:
            expected = self.parser.parse_type(node.expected, self.source_file, node.location)
        except ParseError as e:
            self.reporter.report_error(e.message, e.location, code=e.error_code)
            return
        actual = self.scope.get_type(node.expr)
        if actual != expected:
            self.reporter.report_error(
                "type assertion failed",
                node.location,
                code=ErrorCode.TYPE_MISMATCH.value,
                label=f"expected `{expected}`, actual `{actual}`",
            )

    def visit_dump_type(self, node: DumpType) -> None:
        dumped = DumpedType(node.location, node.expr, self.scope.get_type(node.expr))
        logger.info(str(dumped))
        self.dumped_types.append(dumped)


class AnalyserDriver:
    """
    Analyser driver.

    Owns the parser, the extension registry (with the assertion extension
    registered) and the type specifier; every ``analyse`` call starts from an
    empty scope.
    """

    def __init__(self, class_aliases: Optional[Mapping[str, str]] = None):
        self.parser = Parser()
        self.registry = ExtensionRegistry(class_aliases)
        self.registry.register(AssertTypeSpecifyingExtension(HostTypeAlgebra()))
        self.type_specifier = TypeSpecifier(self.registry)

    def analyse(self, source: str, source_file: str = DEFAULT_SOURCE_FILE) -> AnalysisResult:
        reporter = ErrorReporter({source_file: source})
        try:
            program = self.parser.parse(source, source_file)
        except ParseError as e:
            reporter.report_error(e.message, e.location, code=e.error_code)
            return AnalysisResult(reporter=reporter, success=False)

        analyser = StatementAnalyser(self.parser, self.type_specifier, reporter, source_file)
        for statement in program.statements:
            statement.accept(analyser)

        return AnalysisResult(
            program=program,
            scope=analyser.scope,
            reporter=reporter,
            dumped_types=analyser.dumped_types,
            success=not reporter.has_errors(),
        )

    def analyse_file(self, path: Union[Path, str]) -> AnalysisResult:
        return self.analyse(read_source_file(path), str(path))
