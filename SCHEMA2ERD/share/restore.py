"""Restoring a diagram from a share link."""

from __future__ import annotations

import json
from typing import Any, Dict, Optional, Union
from urllib.parse import parse_qs

from pydantic import ValidationError

from SCHEMA2ERD.ir.models import Graph
from SCHEMA2ERD.utils.error_handling import ErrorContext, ErrorKind, log_error_with_context
from .codec import ShareDecodeError, decode_payload

SHARE_QUERY_PARAM = "s"


def _graph_from(data: Any) -> Graph:
    """Accept a bare graph or a `{graph, schema}` snapshot."""
    if isinstance(data, Graph):
        return data
    if isinstance(data, dict) and "graph" in data:
        data = data["graph"]
    if not isinstance(data, dict):
        raise ShareDecodeError("restored payload is not a graph object")
    return Graph.model_validate(data)


def restore_graph(
    inline_graph: Union[Graph, Dict[str, Any], str, None] = None,
    query_string: Optional[str] = None,
) -> Optional[Dict[str, Any]]:
    """Graph to show on page load, or None.

    An inline graph (embedded by the server for a short link, either parsed
    or as a JSON string) wins; otherwise the `s=` query parameter is
    decoded. Any failure yields None so the page falls back to its normal
    empty state.
    """
    context = ErrorContext(
        stage="share",
        operation="restore_graph",
        additional_context={"kind": ErrorKind.DECODE_ERROR},
    )
    if inline_graph is not None and inline_graph != "":
        try:
            data = json.loads(inline_graph) if isinstance(inline_graph, str) else inline_graph
            return _graph_from(data).to_dict()
        except ValueError as e:
            # JSONDecodeError, ValidationError and ShareDecodeError
            log_error_with_context(e, context, level="debug")

    if not query_string:
        return None
    token = parse_qs(query_string.lstrip("?")).get(SHARE_QUERY_PARAM, [None])[0]
    if not token:
        return None
    try:
        return _graph_from(decode_payload(token)).to_dict()
    except (ShareDecodeError, ValidationError) as e:
        log_error_with_context(e, context, level="debug")
        return None
