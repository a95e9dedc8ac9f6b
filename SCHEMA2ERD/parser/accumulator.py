"""Collections both parser tiers write into.

One accumulator is created per parse attempt and handed to the tier that
runs; nothing is stored globally.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Set, Tuple

from SCHEMA2ERD.ir.models import ForeignKeyEdge, Table
from .column_types import REFERENCE_ID_TYPE, POLYMORPHIC_TYPE_COLUMN_TYPE, TIMESTAMP_COLUMNS
from .naming import pluralize


class SchemaAccumulator:
    """Tables, raw foreign-key declarations and unique-index facts."""

    def __init__(self) -> None:
        self.tables: Dict[str, Table] = {}
        self.edges: List[ForeignKeyEdge] = []
        self.unique_columns: Set[Tuple[str, str]] = set()

    def open_table(self, name: str, replace: bool = False) -> Table:
        if replace or name not in self.tables:
            self.tables[name] = Table(name=name)
        return self.tables[name]

    def add_column(self, table: str, name: str, type_: str) -> None:
        self.open_table(table).add_column(name, type_)

    def add_timestamps(self, table: str) -> None:
        for name, type_ in TIMESTAMP_COLUMNS:
            self.add_column(table, name, type_)

    def add_reference(
        self,
        table: str,
        name: str,
        foreign_key: bool = False,
        to_table: Optional[str] = None,
        polymorphic: bool = False,
        unique: Optional[bool] = None,
    ) -> None:
        """`t.references :name` / `t.belongs_to :name`."""
        column = f"{name}_id"
        self.add_column(table, column, REFERENCE_ID_TYPE)
        if polymorphic:
            self.add_column(table, f"{name}_type", POLYMORPHIC_TYPE_COLUMN_TYPE)
            return
        if foreign_key or to_table:
            self.add_edge(table, to_table or pluralize(name), column=column, unique=unique)

    def add_edge(
        self,
        from_table: str,
        to_table: str,
        column: Optional[str] = None,
        unique: Optional[bool] = None,
    ) -> None:
        self.edges.append(
            ForeignKeyEdge(from_table=from_table, to_table=to_table, column=column, unique=unique)
        )

    def add_unique_index(self, table: str, column: str) -> None:
        self.unique_columns.add((table, column))
