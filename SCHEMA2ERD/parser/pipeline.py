"""`parse_schema`: schema text in, `Graph` or `ParseFailure` out.

The line-oriented tier runs first. If it gives up, the interpreter tier runs
on a fresh accumulator. If that fails too, the failure is logged and
returned as a `ParseFailure`; nothing is raised to the caller.
"""

from __future__ import annotations

from typing import Optional

from SCHEMA2ERD.config import ParserOptions, get_parser_options
from SCHEMA2ERD.ir.models import Graph, ParseFailure, ParseResult
from SCHEMA2ERD.utils.error_handling import ErrorContext, ErrorKind, log_error_with_context
from SCHEMA2ERD.utils.logging import get_logger
from .accumulator import SchemaAccumulator
from .errors import SchemaParseError, UnsupportedSyntaxError
from .interpreter import interpret_schema
from .line_parser import parse_lines
from .postprocess import build_graph

logger = get_logger(__name__)


def _run_tiers(text: str) -> SchemaAccumulator:
    try:
        return parse_lines(text, SchemaAccumulator())
    except UnsupportedSyntaxError as e:
        logger.debug(f"Line parser gave up ({e}); falling back to interpreter")
    return interpret_schema(text, SchemaAccumulator())


def parse_schema(text: Optional[str], options: Optional[ParserOptions] = None) -> ParseResult:
    """Parse schema.rb text.

    Returns:
        `Graph` (empty for blank input) or `ParseFailure` when neither tier
        could read the text.
    """
    if text is None or not text.strip():
        return Graph()

    options = options or get_parser_options()
    try:
        acc = _run_tiers(text)
        graph = build_graph(acc, options)
    except SchemaParseError as e:
        context = ErrorContext(stage="parser", operation="parse_schema", line_number=e.line)
        log_error_with_context(e, context, level="warning")
        return ParseFailure(message=str(e))
    except Exception as e:
        context = ErrorContext(
            stage="parser",
            operation="parse_schema",
            additional_context={"kind": ErrorKind.PARSE_ERROR, "length": len(text)},
        )
        log_error_with_context(e, context)
        return ParseFailure(message=f"Could not parse schema: {e}")

    logger.info(f"Parsed schema: {len(graph.nodes)} tables, {len(graph.links)} relationships")
    return graph
