"""IR (Intermediate Representation) models."""

from .graph import (
    Cardinality,
    Column,
    Table,
    ForeignKeyEdge,
    GraphNode,
    GraphLink,
    Graph,
    ParseFailure,
    ParseResult,
)

__all__ = [
    "Cardinality",
    "Column",
    "Table",
    "ForeignKeyEdge",
    "GraphNode",
    "GraphLink",
    "Graph",
    "ParseFailure",
    "ParseResult",
]
