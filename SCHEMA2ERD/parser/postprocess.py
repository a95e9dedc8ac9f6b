"""Post-processing shared by both parser tiers.

Order matters: inference, exclusion filtering, deduplication, cardinality.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Set, Tuple

from SCHEMA2ERD.config import ParserOptions
from SCHEMA2ERD.ir.models import ForeignKeyEdge, Graph, GraphLink, GraphNode, Table
from SCHEMA2ERD.utils.logging import get_logger
from .accumulator import SchemaAccumulator
from .naming import referenced_table_for

logger = get_logger(__name__)


def infer_foreign_keys(tables: Dict[str, Table], edges: List[ForeignKeyEdge]) -> List[ForeignKeyEdge]:
    """Add an edge T -> pluralize(prefix) for every `<prefix>_id` column of T.

    Only targets that are known tables are used, and a (T, U) pair that
    already has an edge is left alone, so running this twice adds nothing
    the second time.
    """
    result = list(edges)
    existing: Set[Tuple[str, str]] = {e.key() for e in result}

    for table in tables.values():
        for column in table.columns:
            target = referenced_table_for(column.name)
            if target is None or target not in tables:
                continue
            key = (table.name, target)
            if key in existing:
                continue
            existing.add(key)
            result.append(ForeignKeyEdge(from_table=table.name, to_table=target, column=column.name))
    return result


def is_excluded(name: str, options: ParserOptions) -> bool:
    if name in options.excluded_tables:
        return True
    return any(name.startswith(prefix) for prefix in options.excluded_table_prefixes)


def filter_excluded(
    tables: Dict[str, Table], edges: Iterable[ForeignKeyEdge], options: ParserOptions
) -> Tuple[Dict[str, Table], List[ForeignKeyEdge]]:
    """Drop bookkeeping tables, then any edge whose endpoints are not both kept."""
    kept = {name: t for name, t in tables.items() if not is_excluded(name, options)}
    kept_edges = [e for e in edges if e.from_table in kept and e.to_table in kept]
    dropped = len(tables) - len(kept)
    if dropped:
        logger.debug(f"Excluded {dropped} internal table(s)")
    return kept, kept_edges


def dedupe_edges(edges: Iterable[ForeignKeyEdge]) -> List[ForeignKeyEdge]:
    """Collapse edges by (from, to). The first declaration wins; later ones
    only fill in a missing column or uniqueness flag."""
    by_key: Dict[Tuple[str, str], ForeignKeyEdge] = {}
    for edge in edges:
        seen = by_key.get(edge.key())
        if seen is None:
            by_key[edge.key()] = edge.model_copy()
            continue
        if seen.column is None and edge.column is not None:
            seen.column = edge.column
        if seen.unique is None and edge.unique is not None:
            seen.unique = edge.unique
    return list(by_key.values())


def from_cardinality(edge: ForeignKeyEdge, unique_columns: Set[Tuple[str, str]]) -> str:
    if edge.unique:
        return "1"
    if edge.column is not None and (edge.from_table, edge.column) in unique_columns:
        return "1"
    return "many"


def build_graph(acc: SchemaAccumulator, options: Optional[ParserOptions] = None) -> Graph:
    """Turn accumulated tables and raw edges into the final `Graph`."""
    options = options or ParserOptions()

    edges = acc.edges
    if options.infer_foreign_keys:
        edges = infer_foreign_keys(acc.tables, edges)
    tables, edges = filter_excluded(acc.tables, edges, options)
    edges = dedupe_edges(edges)

    nodes = [
        GraphNode(id=t.name, fields=[c.as_field() for c in t.columns])
        for t in tables.values()
    ]
    links = [
        GraphLink(
            from_=e.from_table,
            to=e.to_table,
            fromCard=from_cardinality(e, acc.unique_columns),
            toCard="1",
        )
        for e in edges
    ]
    return Graph(nodes=nodes, links=links)
