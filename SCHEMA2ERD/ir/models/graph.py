"""Pydantic models for parsed schemas and the graph wire format.

`Table`/`Column`/`ForeignKeyEdge` are what the parser accumulates.
`Graph` (nodes + links) is the shape exchanged with the parse endpoint,
embedded in share links and consumed by the render session.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, Field


Cardinality = Literal["1", "many"]


class Column(BaseModel):
    name: str
    type: str

    def as_field(self) -> List[str]:
        return [self.name, self.type]


class Table(BaseModel):
    name: str
    columns: List[Column] = Field(default_factory=list)

    def add_column(self, name: str, type_: str) -> None:
        self.columns.append(Column(name=name, type=type_))

    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]


class ForeignKeyEdge(BaseModel):
    from_table: str
    to_table: str
    column: Optional[str] = None
    unique: Optional[bool] = None

    def key(self) -> tuple:
        return (self.from_table, self.to_table)


class GraphNode(BaseModel):
    id: str
    fields: List[List[str]] = Field(default_factory=list)
    x: Optional[float] = None
    y: Optional[float] = None

    def has_position(self) -> bool:
        return self.x is not None and self.y is not None


class GraphLink(BaseModel):
    from_: str = Field(alias="from")
    to: str
    fromCard: Cardinality = "many"
    toCard: Cardinality = "1"

    model_config = {"populate_by_name": True}


class Graph(BaseModel):
    nodes: List[GraphNode] = Field(default_factory=list)
    links: List[GraphLink] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.nodes

    def node_ids(self) -> List[str]:
        return [n.id for n in self.nodes]

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation (`from`, `fromCard`, ...; unset positions omitted)."""
        return self.model_dump(by_alias=True, exclude_none=True)


class ParseFailure(BaseModel):
    """Structured failure returned when neither parser tier produced a graph."""
    error: Literal["parse_error"] = "parse_error"
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()


ParseResult = Union[Graph, ParseFailure]
