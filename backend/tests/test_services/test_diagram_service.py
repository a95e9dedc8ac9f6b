"""Tests for DiagramService."""

import threading

import pytest

from SCHEMA2ERD.ir.models import Graph

GRAPH = Graph.model_validate({
    "nodes": [
        {"id": "users", "fields": [["email", "varchar"], ["name", "<html>"]]},
        {"id": "posts", "fields": [["user_id", "int"]]},
    ],
    "links": [{"from": "posts", "to": "users", "fromCard": "many", "toCard": "1"}],
})


def test_build_dot_nodes_and_edges(diagram_service):
    """One node per table, one edge per link with cardinality labels."""
    dot = diagram_service.build_dot(GRAPH)
    source = dot.source
    assert "rankdir=LR" in source
    assert "<B>users</B>" in source
    assert "&lt;html&gt;" in source
    assert "posts -> users" in source
    assert 'taillabel="*"' in source
    assert "headlabel=1" in source


@pytest.mark.asyncio
async def test_export_dot_returns_source(diagram_service):
    """export_dot is the DOT text of build_dot."""
    source = await diagram_service.export_dot(GRAPH)
    assert source == diagram_service.build_dot(GRAPH).source


@pytest.mark.asyncio
async def test_render_svg(diagram_service):
    """The SVG holds every table and link, sized to the service canvas."""
    svg = await diagram_service.render_svg(GRAPH)
    assert svg.startswith("<svg")
    assert 'width="800"' in svg
    assert 'data-id="users"' in svg
    assert 'data-id="posts"' in svg
    assert svg.count('class="link"') == 1


@pytest.mark.asyncio
async def test_render_svg_compact(diagram_service):
    """Compact rendering does not change which tables are drawn."""
    graph = Graph.model_validate({
        "nodes": [{"id": "wide", "fields": [[f"c{i}", "int"] for i in range(6)]}],
        "links": [],
    })
    full = await diagram_service.render_svg(graph)
    compact = await diagram_service.render_svg(graph, compact=True)
    assert "display:none" not in full
    assert "display:none" in compact
    assert 'data-id="wide"' in compact


@pytest.mark.asyncio
async def test_render_runs_off_the_event_loop_thread(diagram_service, monkeypatch):
    """SVG layout runs in the threadpool."""
    threads = []
    real_build = diagram_service.build_svg

    def recording_build(graph, compact=False):
        threads.append(threading.get_ident())
        return real_build(graph, compact)

    monkeypatch.setattr(diagram_service, "build_svg", recording_build)
    svg = await diagram_service.render_svg(GRAPH)
    assert svg.startswith("<svg")
    assert threads and threads[0] != threading.get_ident()
