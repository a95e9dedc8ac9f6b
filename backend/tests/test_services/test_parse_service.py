"""Tests for ParseService."""

import threading

import pytest

from backend.services import parse_service as parse_service_module
from SCHEMA2ERD.ir.models import Graph, ParseFailure


@pytest.mark.asyncio
async def test_parse_returns_graph(parse_service):
    """Valid schema text gives a Graph."""
    result = await parse_service.parse('create_table "users" do |t|\n  t.string "email"\nend\n')
    assert isinstance(result, Graph)
    assert [n.id for n in result.nodes] == ["users"]


@pytest.mark.asyncio
async def test_parse_blank_is_empty_graph(parse_service):
    """Blank input is not an error."""
    result = await parse_service.parse("  ")
    assert isinstance(result, Graph)
    assert result.nodes == [] and result.links == []


@pytest.mark.asyncio
async def test_parse_failure(parse_service):
    """Unreadable text gives a ParseFailure."""
    result = await parse_service.parse('create_table :users do |t|\n  t.string "name\nend\n')
    assert isinstance(result, ParseFailure)
    assert result.to_dict()["error"] == "parse_error"


@pytest.mark.asyncio
async def test_parse_runs_off_the_event_loop_thread(parse_service, monkeypatch):
    """Parsing does not block the event loop."""
    threads = []
    real_parse = parse_service_module.parse_schema

    def recording_parse(schema, options=None):
        threads.append(threading.get_ident())
        return real_parse(schema, options)

    monkeypatch.setattr(parse_service_module, "parse_schema", recording_parse)
    result = await parse_service.parse('create_table "users" do |t|\nend\n')
    assert isinstance(result, Graph)
    assert threads and threads[0] != threading.get_ident()
