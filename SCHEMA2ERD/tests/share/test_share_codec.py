"""Tests for share-link encoding and restore."""

import base64
import json
import re
import zlib

import pytest

from SCHEMA2ERD.ir.models import Graph, GraphLink, GraphNode
from SCHEMA2ERD.share import (
    ShareDecodeError,
    decode_payload,
    decode_snapshot,
    encode_payload,
    encode_snapshot,
    restore_graph,
)

TOKEN_RE = re.compile(r"^[A-Za-z0-9_-]+$")


def sample_graph():
    return Graph(
        nodes=[
            GraphNode(id="users", fields=[["email", "varchar"]], x=200, y=200),
            GraphNode(id="posts", fields=[["user_id", "int"]], x=560.5, y=200),
        ],
        links=[GraphLink(from_="posts", to="users", fromCard="many", toCard="1")],
    )


def test_snapshot_round_trip():
    graph = sample_graph()
    token = encode_snapshot(graph, 'create_table "users"')
    assert decode_snapshot(token) == {"graph": graph.to_dict(), "schema": 'create_table "users"'}


def test_tokens_are_unpadded_base64url():
    for obj in ({"a": 1}, {"ab": 12}, {"abc": 123}, sample_graph().to_dict(), "ünïcode ✓"):
        token = encode_payload(obj)
        assert TOKEN_RE.match(token)
        assert decode_payload(token) == obj


def test_payload_is_raw_deflate_of_compact_json():
    token = encode_payload({"a": [1, 2]})
    raw = base64.urlsafe_b64decode(token + "=" * (-len(token) % 4))
    assert zlib.decompress(raw, -15) == b'{"a":[1,2]}'
    with pytest.raises(zlib.error):
        zlib.decompress(raw)


def test_missing_schema_becomes_empty_string():
    token = encode_snapshot(sample_graph().to_dict(), None)
    assert decode_snapshot(token)["schema"] == ""


@pytest.mark.parametrize("token", ["", "   ", "!!!", "AAAA"])
def test_malformed_tokens_raise(token):
    with pytest.raises(ShareDecodeError):
        decode_payload(token)


def test_valid_deflate_of_non_json_raises():
    c = zlib.compressobj(9, zlib.DEFLATED, -15)
    raw = c.compress(b"not json") + c.flush()
    token = base64.urlsafe_b64encode(raw).decode().rstrip("=")
    with pytest.raises(ShareDecodeError):
        decode_payload(token)


def test_snapshot_without_graph_object_raises():
    with pytest.raises(ShareDecodeError):
        decode_snapshot(encode_payload([1, 2, 3]))
    with pytest.raises(ShareDecodeError):
        decode_snapshot(encode_payload({"schema": "x"}))


def test_restore_prefers_inline_graph():
    inline = sample_graph().to_dict()
    other = Graph(nodes=[GraphNode(id="other")])
    query = "s=" + encode_snapshot(other)
    assert restore_graph(inline, query) == inline
    assert restore_graph(json.dumps(inline), query) == inline


def test_restore_falls_back_to_query_parameter():
    graph = sample_graph()
    query = "?tab=1&s=" + encode_snapshot(graph, "schema text")
    assert restore_graph(None, query) == graph.to_dict()
    # a broken inline graph does not stop the query parameter from being used
    assert restore_graph("{not json", query) == graph.to_dict()


def test_restore_accepts_bare_graph_payload():
    graph = sample_graph()
    assert restore_graph(None, "s=" + encode_payload(graph.to_dict())) == graph.to_dict()


@pytest.mark.parametrize("query", [None, "", "x=1", "s=", "s=%%%", "s=AAAA"])
def test_restore_failures_yield_none(query):
    assert restore_graph(None, query) is None


def test_restore_rejects_wrong_shape():
    bad = encode_payload({"graph": {"nodes": [{"fields": []}]}})
    assert restore_graph(None, "s=" + bad) is None
    assert restore_graph(None, "s=" + encode_payload("just text")) is None
