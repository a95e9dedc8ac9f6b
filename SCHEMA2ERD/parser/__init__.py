"""Schema text to ERD graph parsing."""

from .pipeline import parse_schema
from .accumulator import SchemaAccumulator
from .errors import SchemaParseError, UnsupportedSyntaxError, InterpreterError
from .line_parser import parse_lines
from .interpreter import interpret_schema, sanitize_schema_text
from .postprocess import build_graph, infer_foreign_keys, dedupe_edges
from .naming import pluralize

__all__ = [
    "parse_schema",
    "SchemaAccumulator",
    "SchemaParseError",
    "UnsupportedSyntaxError",
    "InterpreterError",
    "parse_lines",
    "interpret_schema",
    "sanitize_schema_text",
    "build_graph",
    "infer_foreign_keys",
    "dedupe_edges",
    "pluralize",
]
