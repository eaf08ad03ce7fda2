"""
Test utilities for the assertnarrow test suite.

Helpers for building scopes from type notation and for the
analyse-then-inspect pattern used by the narrowing tests.
"""

import sys
from typing import Dict, List, Optional
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
from assertnarrow.analyser.driver import AnalyserDriver, AnalysisResult
from assertnarrow.analyser.scope import Scope
from assertnarrow.analyser.specified_types import SpecifiedTypes
from assertnarrow.frontend.parser import Parser
from assertnarrow.narrowing.catalog import Argument
from assertnarrow.shared.nodes import Arg, Expr, StaticCall, Name, Variable
from assertnarrow.shared.types import Type

_PARSER: Optional[Parser] = None


def parse_type(notation: str) -> Type:
    """Parse type notation with a lazily created module-wide parser."""
    global _PARSER
    if _PARSER is None:
        _PARSER = Parser()
    return _PARSER.parse_type(notation)


def var(name: str) -> Variable:
    return Variable(name.lstrip("$"))


def scope_with(**declarations: str) -> Scope:
    """``scope_with(a="string|null")`` -> scope where ``$a`` is ``string|null``."""
    scope = Scope()
    for name, notation in declarations.items():
        scope = scope.assign(var(name), parse_type(notation))
    return scope


def static_call(method: str, *args: Expr, class_name: str = "Assert") -> StaticCall:
    return StaticCall(Name(class_name), method, tuple(Arg(arg) for arg in args))


def arguments(scope: Scope, algebra, *exprs: Expr) -> List[Argument]:
    return [Argument(Arg(expr), scope, algebra) for expr in exprs]


def sure_type(specified: SpecifiedTypes, expr: Expr) -> Optional[Type]:
    return specified.get_sure_type(expr)


def analyse(source: str, driver: AnalyserDriver) -> AnalysisResult:
    """Analyse a snippet and fail with the rendered diagnostics if it has errors."""
    result = driver.analyse(source)
    assert result.success, result.reporter.format_all_errors(color=False)
    return result


def narrowed_types(source: str, driver: AnalyserDriver) -> Dict[str, str]:
    """Final type of every variable in a snippet, as notation."""
    result = driver.analyse(source)
    return {name: str(type_) for name, type_ in result.scope.variables().items()}
