"""
Parser

PHPStan Pattern: PhpParser\\Parser, PHPStan\\PhpDoc\\TypeStringResolver
Reference: DESIGN.md (frontend)
"""

import logging
from pathlib import Path
from typing import Optional

from lark import Lark
from lark.exceptions import UnexpectedInput, VisitError

from ..shared.errors import AssertNarrowSourceError, ErrorCode
from ..shared.nodes import Program
from ..shared.source_location import SourceLocation
from ..shared.types import Type
from ..utils.config import DEFAULT_PARSER_CACHE_FILE, DEFAULT_SOURCE_FILE, GRAMMAR_FILE_NAME
from .transformers.base import SnippetTransformer

logger = logging.getLogger("assertnarrow.frontend.parser")


class ParseError(AssertNarrowSourceError):
    """Parse error with source location"""
    def __init__(self, message: str, source_file: str, location: Optional[SourceLocation] = None,
                 error_code: str = ErrorCode.SYNTAX_ERROR.value):
        super().__init__(message, location, error_code)
        self.source_file = source_file


class Parser:
    """
    Parses analysis snippets and type notation.

    One LALR parser serves both start symbols; the parser tables are cached
    on disk by Lark.
    """

    def __init__(self, cache_file: str = DEFAULT_PARSER_CACHE_FILE):
        grammar_path = Path(__file__).parent / GRAMMAR_FILE_NAME
        self.parser = Lark.open(
            str(grammar_path),
            start=['program', 'type'],
            parser='lalr',              # Required for caching
            cache=cache_file,
            propagate_positions=True,   # Statement locations for diagnostics
            maybe_placeholders=False,
        )
        self.transformer = SnippetTransformer()

    def parse(self, source: str, source_file: str = DEFAULT_SOURCE_FILE) -> Program:
        """Parse a snippet into a ``Program``."""
        return self._parse(source, 'program', source_file)

    def parse_type(self, notation: str, source_file: str = DEFAULT_SOURCE_FILE,
                   location: Optional[SourceLocation] = None) -> Type:
        """
        Parse PHPDoc-style type notation (``array<int, string|null>``).

        ``location`` is where the notation appears in a snippet; it replaces
        the notation-relative position in error reports.
        """
        try:
            return self._parse(notation, 'type', source_file)
        except ParseError as e:
            raise ParseError(
                f"Invalid type notation '{notation}': {e.message}",
                source_file,
                location or e.location,
                ErrorCode.INVALID_TYPE.value,
            ) from e

    def _parse(self, text: str, start: str, source_file: str):
        self.transformer.current_file = source_file
        try:
            tree = self.parser.parse(text, start=start)
        except UnexpectedInput as e:
            location = None
            if getattr(e, 'line', -1) > 0:
                location = SourceLocation(file=source_file, line=e.line, column=e.column)
            logger.debug(f"Parse error in {source_file}: {e}")
            raise ParseError(f"Parse error: {_first_line(e)}", source_file, location) from e

        try:
            return self.transformer.transform(tree)
        except VisitError as e:
            if isinstance(e.orig_exc, AssertNarrowSourceError):
                raise ParseError(e.orig_exc.message, source_file, e.orig_exc.location,
                                 e.orig_exc.error_code) from e.orig_exc
            raise


def _first_line(error: Exception) -> str:
    text = str(error).strip()
    return text.splitlines()[0] if text else error.__class__.__name__
