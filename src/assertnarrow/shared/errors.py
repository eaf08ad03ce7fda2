"""
Error Reporting

Diagnostics for analysed snippets, rendered rustc-style, plus the exception
hierarchy. Two failure classes exist:

- problems in the analysed source (syntax, failed ``assertType``) are
  collected as ``Error`` diagnostics or raised as ``AssertNarrowSourceError``;
- internal invariant violations raise ``ShouldNotHappenError`` and are never
  swallowed.
"""

import os
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from .source_location import SourceLocation
from ..utils.config import COLOR_ENV_VAR


class ErrorCode(Enum):
    SYNTAX_ERROR = "E0001"
    INVALID_TYPE = "E0002"
    TYPE_MISMATCH = "E0308"
    INTERNAL = "E9999"


# ---------------------------------------------------------------------------
# ANSI color helpers (disabled when NO_COLOR is set or explicitly turned off)
# ---------------------------------------------------------------------------

def _use_color() -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    explicit = os.environ.get(COLOR_ENV_VAR, "").lower()
    if explicit in ("0", "false", "no", "never"):
        return False
    return sys.stderr.isatty()

_BOLD   = "\033[1m"
_RED    = "\033[31m"
_BLUE   = "\033[34m"
_CYAN   = "\033[36m"
_RESET  = "\033[0m"

def _style(text: str, *codes: str, color: bool = True) -> str:
    if not color or not codes:
        return text
    return "".join(codes) + text + _RESET


# ---------------------------------------------------------------------------
# Error dataclass
# ---------------------------------------------------------------------------

@dataclass
class Error:
    """One diagnostic about an analysed snippet."""
    message: str
    location: Optional[SourceLocation]
    code: Optional[str] = None
    help: Optional[str] = None
    note: Optional[str] = None
    label: Optional[str] = None


def _format_diagnostic(error: Error, source_files: Dict[str, str], color: bool = False) -> str:
    """
    Render a single diagnostic.

    Example output (plain, no color)::

        error[E0308]: type assertion failed
         --> narrow.nrw:3:1
          |
        3 | assertType('string', $a);
          | ^^^^^^^^^^ expected `string`, actual `int|string`
    """
    out: List[str] = []
    code_str = f"[{error.code}]" if error.code else ""
    out.append(
        _style(f"error{code_str}", _BOLD, _RED, color=color)
        + _style(f": {error.message}", _BOLD, color=color)
    )

    loc = error.location
    if loc is None:
        out.append(_style(" --> ", _BOLD, _BLUE, color=color) + "<unknown location>")
        _append_annotations(out, error, 1, color)
        return "\n".join(out)

    source = source_files.get(loc.file)
    lines = source.split("\n") if source is not None else []
    gutter_width = max(len(str(loc.line)), 1)
    pad = " " * (gutter_width + 1)

    out.append(_style(" " * gutter_width + "--> ", _BOLD, _BLUE, color=color) + str(loc))
    if 0 < loc.line <= len(lines):
        code_line = lines[loc.line - 1]
        out.append(_style(pad + "|", _BOLD, _BLUE, color=color))
        out.append(_style(str(loc.line).rjust(gutter_width) + " | ", _BOLD, _BLUE, color=color) + code_line)
        start = max(loc.column, 1) - 1
        if loc.end_line == loc.line and loc.end_column > loc.column:
            span = loc.end_column - loc.column
        else:
            span = max(len(code_line.rstrip()) - start, 1)
        carets = " " * start + "^" * span
        if error.label:
            carets += f" {error.label}"
        out.append(_style(pad + "| ", _BOLD, _BLUE, color=color) + _style(carets, _BOLD, _RED, color=color))

    _append_annotations(out, error, gutter_width, color)
    return "\n".join(out)


def _append_annotations(out: List[str], error: Error, gutter_width: int, color: bool) -> None:
    if not (error.help or error.note):
        return
    pad = " " * (gutter_width + 1)
    out.append(_style(pad + "|", _BOLD, _BLUE, color=color))
    for title, text in (("help", error.help), ("note", error.note)):
        if text:
            out.append(
                _style(f"{pad}= ", _BOLD, _CYAN, color=color)
                + _style(f"{title}: ", _BOLD, color=color)
                + text
            )


# ---------------------------------------------------------------------------
# ErrorReporter
# ---------------------------------------------------------------------------

class ErrorReporter:
    """Collects diagnostics for one analysis run and formats them."""

    def __init__(self, source_files: Optional[Dict[str, str]] = None):
        self.source_files: Dict[str, str] = dict(source_files or {})
        self.errors: List[Error] = []

    def report_error(
        self,
        message: str,
        location: Optional[SourceLocation],
        code: Optional[str] = None,
        help: Optional[str] = None,
        note: Optional[str] = None,
        label: Optional[str] = None,
    ) -> None:
        self.errors.append(Error(
            message=message,
            location=location,
            code=code,
            help=help,
            note=note,
            label=label,
        ))

    def format_error(self, error: Error, color: Optional[bool] = None) -> str:
        use_color = color if color is not None else _use_color()
        return _format_diagnostic(error, self.source_files, color=use_color)

    def format_all_errors(self, color: Optional[bool] = None) -> str:
        use_color = color if color is not None else _use_color()
        parts = [self.format_error(e, color=use_color) for e in self.errors]
        count = len(self.errors)
        summary = f"aborting due to {count} previous error{'s' if count != 1 else ''}"
        parts.append(
            _style("error", _BOLD, _RED, color=use_color)
            + _style(f": {summary}", _BOLD, color=use_color)
        )
        return "\n\n".join(parts)

    def has_errors(self) -> bool:
        return len(self.errors) > 0


# ============================================================================
# Exception Classes
# ============================================================================

class AssertNarrowError(Exception):
    """Base exception for all assertnarrow errors"""
    def __init__(self, message: str, location: Optional[SourceLocation] = None):
        super().__init__(message)
        self.message = message
        self.location = location

    def __str__(self):
        if self.location:
            return f"{self.message} ({self.location})"
        return self.message


class AssertNarrowSourceError(AssertNarrowError):
    """
    Error in the analysed snippet (not in assertnarrow itself).

    Use this for syntax errors and invalid type notation.
    """
    def __init__(self,
                 message: str,
                 location: Optional[SourceLocation] = None,
                 error_code: str = ErrorCode.SYNTAX_ERROR.value):
        super().__init__(message, location)
        self.error_code = error_code

    def to_error(self) -> Error:
        return Error(message=self.message, location=self.location, code=self.error_code)


class ShouldNotHappenError(AssertNarrowError):
    """
    Internal invariant violation.

    Raised when dispatch reaches a state the catalog rules out, e.g. an
    unknown per-element negated assertion or negative refinements on the
    generic per-element path. Indicates a defect, never a user mistake.
    """
    def __init__(self, message: str = "Internal error: this should not happen"):
        super().__init__(message)
        self.error_code = ErrorCode.INTERNAL.value

    def __str__(self):
        return f"[{self.error_code}] {self.message}"
