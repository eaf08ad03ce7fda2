"""
Pytest configuration and shared fixtures for all assertnarrow tests.

The parser and the analyser driver are stateless between runs (every
``analyse`` call starts from an empty scope), so one instance is shared by
the whole session.
"""

import sys
import pytest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))
from assertnarrow.analyser.driver import AnalyserDriver
from assertnarrow.analyser.reflection import ExtensionRegistry
from assertnarrow.analyser.scope import Scope
from assertnarrow.analyser.type_algebra import HostTypeAlgebra
from assertnarrow.analyser.type_specifier import TypeSpecifier
from assertnarrow.frontend.parser import Parser
from assertnarrow.narrowing.extension import AssertTypeSpecifyingExtension


# =============================================================================
# Session-scoped fixtures (shared across all tests)
# =============================================================================

@pytest.fixture(scope="session")
def session_driver():
    """
    Session-scoped analyser driver shared across ALL tests.

    - Parser is created once with Lark native caching
    - Safe to share: each analysis starts from a fresh scope
    """
    return AnalyserDriver()


@pytest.fixture(scope="session")
def session_parser(session_driver):
    """The driver's parser, for tests that only parse."""
    return session_driver.parser


# =============================================================================
# Class-scoped fixtures (shared within a test class)
# =============================================================================

@pytest.fixture(scope="class")
def driver(session_driver):
    """Class-scoped driver - returns session driver (stateless, safe to share)."""
    return session_driver


@pytest.fixture(scope="class")
def parser(session_parser) -> Parser:
    return session_parser


# =============================================================================
# Function-scoped fixtures (default - one per test)
# =============================================================================

@pytest.fixture
def algebra():
    return HostTypeAlgebra()


@pytest.fixture
def extension(algebra):
    """Assertion extension wired to a fresh type specifier."""
    registry = ExtensionRegistry()
    ext = AssertTypeSpecifyingExtension(algebra)
    registry.register(ext)
    TypeSpecifier(registry)
    return ext


@pytest.fixture
def type_specifier(extension):
    return extension.type_specifier


@pytest.fixture
def scope():
    return Scope()
