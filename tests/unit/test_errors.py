"""
Tests for diagnostics: the error reporter formatter and the exception classes.
"""

import re
import pytest
from assertnarrow.shared.errors import (
    AssertNarrowError,
    AssertNarrowSourceError,
    Error,
    ErrorCode,
    ErrorReporter,
    ShouldNotHappenError,
)
from assertnarrow.shared.source_location import SourceLocation

_ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;]*m")


def _strip_ansi(text: str) -> str:
    return _ANSI_ESCAPE.sub("", text)


class TestErrorReporterFormatting:
    """Edge cases for the error reporter formatter."""

    def test_location_none(self):
        err = Error(message="something failed", location=None, code="E0001")
        out = ErrorReporter({}).format_error(err, color=False)
        assert "error[E0001]: something failed" in out
        assert "unknown location" in out

    def test_file_not_in_source_files(self):
        loc = SourceLocation(file="missing.nrw", line=1, column=1)
        err = Error(message="oops", location=loc, code="E0308")
        out = ErrorReporter({}).format_error(err, color=False)
        assert " --> missing.nrw:1:1" in out
        assert "^" not in out

    def test_line_beyond_source(self):
        loc = SourceLocation(file="x.nrw", line=10, column=1)
        err = Error(message="bad", location=loc)
        out = ErrorReporter({"x.nrw": "$a: int;\n"}).format_error(err, color=False)
        assert " --> x.nrw:10:1" in out
        assert out.startswith("error: bad")

    def test_caret_span_and_label(self):
        source = "$a: int|string;\nassertType('string', $a);\n"
        loc = SourceLocation(file="n.nrw", line=2, column=1, end_line=2, end_column=11)
        err = Error(message="type assertion failed", location=loc, code="E0308",
                    label="expected `string`, actual `int|string`")
        out = ErrorReporter({"n.nrw": source}).format_error(err, color=False)
        assert "2 | assertType('string', $a);" in out
        assert "  | ^^^^^^^^^^ expected `string`, actual `int|string`" in out

    def test_caret_without_end_covers_the_line(self):
        loc = SourceLocation(file="n.nrw", line=1, column=1)
        err = Error(message="m", location=loc)
        out = ErrorReporter({"n.nrw": "dumpType($a);"}).format_error(err, color=False)
        assert "^" * len("dumpType($a);") in out

    def test_help_and_note(self):
        err = Error(message="m", location=None, help="check the notation", note="see docs")
        out = ErrorReporter().format_error(err, color=False)
        assert "= help: check the notation" in out
        assert "= note: see docs" in out

    def test_color_output(self):
        err = Error(message="m", location=None, code="E0001")
        colored = ErrorReporter().format_error(err, color=True)
        assert "\x1b[" in colored
        assert _strip_ansi(colored) == ErrorReporter().format_error(err, color=False)

    def test_no_color_env(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "1")
        err = Error(message="m", location=None)
        assert "\x1b[" not in ErrorReporter().format_error(err)


class TestErrorReporterCollection:

    def test_report_and_summary(self):
        reporter = ErrorReporter()
        assert not reporter.has_errors()
        reporter.report_error("first", None, code=ErrorCode.SYNTAX_ERROR.value)
        reporter.report_error("second", None)
        assert reporter.has_errors()
        out = reporter.format_all_errors(color=False)
        assert "error[E0001]: first" in out
        assert "error: second" in out
        assert out.endswith("error: aborting due to 2 previous errors")

    def test_single_error_summary(self):
        reporter = ErrorReporter()
        reporter.report_error("only", None)
        assert reporter.format_all_errors(color=False).endswith("aborting due to 1 previous error")


class TestExceptions:

    def test_source_error(self):
        loc = SourceLocation(file="a.nrw", line=2, column=3)
        err = AssertNarrowSourceError("Invalid type notation", loc, ErrorCode.INVALID_TYPE.value)
        assert isinstance(err, AssertNarrowError)
        assert str(err) == "Invalid type notation (a.nrw:2:3)"
        diagnostic = err.to_error()
        assert diagnostic.code == "E0002"
        assert diagnostic.location == loc

    def test_source_error_defaults_to_syntax_error(self):
        assert AssertNarrowSourceError("bad").error_code == ErrorCode.SYNTAX_ERROR.value

    def test_should_not_happen(self):
        err = ShouldNotHappenError("unknown negated assertion allNotEmpty")
        assert str(err) == "[E9999] unknown negated assertion allNotEmpty"
        assert err.location is None
        with pytest.raises(AssertNarrowError):
            raise err

    def test_should_not_happen_default_message(self):
        assert "should not happen" in str(ShouldNotHappenError())
