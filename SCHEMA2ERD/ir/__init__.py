"""Intermediate Representation (IR) models."""

from .models import (
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
    "Column",
    "Table",
    "ForeignKeyEdge",
    "GraphNode",
    "GraphLink",
    "Graph",
    "ParseFailure",
    "ParseResult",
]
