"""Parser exceptions.

These never leave `parse_schema`; the pipeline converts them into a
`ParseFailure` (or into a fallback attempt).
"""

from typing import Optional


class SchemaParseError(Exception):
    """Base class for parser tier failures."""

    def __init__(self, message: str, line: Optional[int] = None, source_line: Optional[str] = None):
        self.message = message
        self.line = line
        self.source_line = source_line
        super().__init__(self.format_message())

    def format_message(self) -> str:
        parts = [self.message]
        if self.line is not None:
            parts.append(f"(line {self.line})")
        if self.source_line:
            parts.append(f": {self.source_line.strip()[:80]}")
        return " ".join(parts)


class UnsupportedSyntaxError(SchemaParseError):
    """The line-oriented tier met a statement it cannot follow."""


class InterpreterError(SchemaParseError):
    """The fallback interpreter could not make progress."""
