"""
Source Location (Span)

Line/column span of a snippet statement, used by diagnostics.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class SourceLocation:
    """
    Source location of a statement in an analysis snippet.

    Lines and columns are 1-based; ``end_line``/``end_column`` are 0 when the
    span end is unknown.
    """
    file: str
    line: int
    column: int
    end_line: int = 0
    end_column: int = 0

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"
