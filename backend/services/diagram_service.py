"""Diagram service - server-side SVG and Graphviz output for a graph."""

from typing import Optional
import html

import graphviz
from fastapi.concurrency import run_in_threadpool

from SCHEMA2ERD.config import InteractionConfig
from SCHEMA2ERD.interaction import RenderSession
from SCHEMA2ERD.ir.models import Graph


class DiagramService:
    """Renders graphs without a browser."""

    def __init__(self, width: int = 1600, height: int = 1000, config: Optional[InteractionConfig] = None):
        self.width = width
        self.height = height
        self.config = config

    async def render_svg(self, graph: Graph, compact: bool = False) -> str:
        """Lay out, route and draw `graph` into a standalone SVG document.

        Layout is CPU-bound, so it runs in the threadpool.
        """
        return await run_in_threadpool(self.build_svg, graph, compact)

    def build_svg(self, graph: Graph, compact: bool = False) -> str:
        session = RenderSession(self.width, self.height, config=self.config)
        session.compact = compact
        session.render(graph)
        return session.to_svg()

    def build_dot(self, graph: Graph) -> graphviz.Digraph:
        """Graphviz digraph with one HTML-table node per table and one edge per link."""
        dot = graphviz.Digraph(comment="ER Diagram")
        dot.attr(rankdir="LR")
        dot.attr("node", shape="plaintext", fontname="Helvetica")
        dot.attr("edge", arrowhead="none", fontname="Helvetica", fontsize="10")

        for node in graph.nodes:
            rows = "".join(
                f'<TR><TD ALIGN="LEFT">{html.escape(str(f[0]) if f else "")}</TD>'
                f'<TD ALIGN="RIGHT"><FONT COLOR="#6b7280">{html.escape(str(f[1]) if len(f) > 1 else "")}</FONT></TD></TR>'
                for f in node.fields
            )
            label = (
                '<<TABLE BORDER="1" CELLBORDER="0" CELLSPACING="0" CELLPADDING="4">'
                f'<TR><TD COLSPAN="2" BGCOLOR="#ef4444"><FONT COLOR="white"><B>{html.escape(node.id)}</B></FONT></TD></TR>'
                f"{rows}</TABLE>>"
            )
            dot.node(node.id, label=label)

        for link in graph.links:
            dot.edge(
                link.from_,
                link.to,
                taillabel="1" if link.fromCard == "1" else "*",
                headlabel="1" if link.toCard == "1" else "*",
            )
        return dot

    async def export_dot(self, graph: Graph) -> str:
        """DOT source for `graph`; no Graphviz binary is needed to produce it."""
        dot = await run_in_threadpool(self.build_dot, graph)
        return dot.source
