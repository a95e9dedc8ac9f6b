"""Tests for the render session: drawing, drag, compaction and failure handling."""

import json
import xml.etree.ElementTree as ET

import pytest

from SCHEMA2ERD.config import InteractionConfig
from SCHEMA2ERD.interaction import RenderSession
from SCHEMA2ERD.layout import rectangles_overlap
from SCHEMA2ERD.parser import parse_schema
from SCHEMA2ERD.render.svg import SVG_NS

NS = {"svg": SVG_NS}

SCHEMA = """
ActiveRecord::Schema.define(version: 2024_01_01_000000) do
  create_table "users", force: :cascade do |t|
    t.string "email"
    t.string "name"
    t.timestamps
  end

  create_table "posts", force: :cascade do |t|
    t.references "user", foreign_key: true
    t.string "title"
  end

  create_table "comments", force: :cascade do |t|
    t.bigint "post_id"
    t.bigint "user_id"
    t.text "body"
  end
end
"""


def new_session(**kwargs):
    return RenderSession(1200, 800, config=InteractionConfig(), **kwargs)


def stacked_graph():
    """users above posts, so the posts -> users link enters users from below."""
    return {
        "nodes": [
            {"id": "users", "fields": [[f"c{i}", "string"] for i in range(5)], "x": 0, "y": 0},
            {"id": "posts", "fields": [["user_id", "integer"]], "x": 0, "y": 400},
        ],
        "links": [{"from": "posts", "to": "users", "fromCard": "many", "toCard": "1"}],
    }


def table_groups(session):
    root = ET.fromstring(session.to_svg())
    return root.findall(".//svg:g[@class='table']", NS)


def test_new_session_shows_empty_state():
    session = new_session()
    assert session.empty_state_visible
    assert table_groups(session) == []


def test_render_parsed_schema_lays_out_without_overlaps():
    session = new_session()
    graph = parse_schema(SCHEMA)
    assert session.render(graph)

    assert not session.empty_state_visible
    assert session.auto_layout
    assert [g.get("data-id") for g in table_groups(session)] == ["users", "posts", "comments"]
    boxes = session.boxes
    for i in range(len(boxes)):
        for j in range(i + 1, len(boxes)):
            assert not rectangles_overlap(boxes[i], boxes[j])

    assert len(session.links) == 3
    assert all(rl.route is not None and rl.element.path.get("d") for rl in session.links)
    assert [rl.color for rl in session.links] == ["#ef4444", "#3b82f6", "#10b981"]
    assert session.canvas.viewport.get("transform").startswith("translate(")


def test_stored_positions_skip_layout():
    session = new_session()
    session.render(stacked_graph())
    assert not session.auto_layout
    assert (session.tables["posts"].box.x, session.tables["posts"].box.y) == (0, 400)


def test_empty_graph_shows_empty_state():
    session = new_session()
    session.render(stacked_graph())
    assert session.render({"nodes": [], "links": []}) is False
    assert session.empty_state_visible
    assert table_groups(session) == []


def test_links_to_unknown_tables_are_not_drawn():
    graph = stacked_graph()
    graph["links"].append({"from": "posts", "to": "ghosts"})
    session = new_session()
    session.render(graph)
    assert [(rl.from_id, rl.to_id) for rl in session.links] == [("posts", "users")]


def test_render_replaces_previous_graph():
    session = new_session()
    session.render(parse_schema(SCHEMA))
    session.render(stacked_graph())
    assert sorted(session.tables) == ["posts", "users"]
    assert len(table_groups(session)) == 2
    assert session.highlight.selected_id is None


def test_drag_moves_table_and_relinks_once_per_frame():
    session = new_session()
    session.render(stacked_graph())
    k = session.zoom.transform.k
    posts = session.tables["posts"]
    runs = session.relink.runs

    session.pointer_down((100, 100), table_id="posts")
    for step in range(1, 6):
        session.pointer_move((100 + 10 * step, 100))
    assert posts.box.x == pytest.approx(50 / k)
    assert posts.group.get("transform").startswith("translate(")
    session.tick(16)
    assert session.relink.runs == runs + 1

    session.pointer_up((100 + 80, 100))
    assert posts.box.x == pytest.approx(80 / k)
    assert posts.box.y == pytest.approx(400)
    assert session.links[0].route.points[0][0] == pytest.approx(posts.box.cx)
    assert not session.auto_layout


def test_drag_raises_table_to_top():
    session = new_session()
    session.render(stacked_graph())
    session.pointer_down((0, 0), table_id="users")
    assert list(session.canvas.table_layer)[-1] is session.tables["users"].group
    session.pointer_up()


def test_background_drag_pans_the_viewport():
    session = new_session()
    session.render(stacked_graph())
    before = session.zoom.transform
    session.pointer_down((10, 10))
    session.pointer_move((40, 30))
    session.pointer_up((40, 30))
    after = session.zoom.transform
    assert (after.x - before.x, after.y - before.y) == pytest.approx((30, 20))


def test_compaction_animates_heights_and_relinks():
    session = new_session()
    session.render(stacked_graph())
    users = session.tables["users"]
    assert users.box.h == 174
    assert session.links[0].route.points[-1][1] == pytest.approx(174)

    assert session.toggle_compact() is True
    session.tick(1000)
    session.tick(1130)
    assert 118 < users.box.h < 174
    extra = users.extra_rows()[0].rect
    assert 0 < float(extra.get("opacity")) < 1

    session.tick(1260)
    assert users.box.h == 118
    assert users.outline.get("height") == "118"
    assert "display:none" in extra.get("style")
    assert session.links[0].route.points[-1][1] == pytest.approx(118)

    assert session.toggle_compact() is False
    assert "style" not in extra.attrib
    session.tick(2000)
    session.tick(2260)
    assert users.box.h == 174
    assert extra.get("opacity") == "1"


def test_compact_mode_survives_rerender():
    session = new_session()
    session.render(stacked_graph())
    session.toggle_compact()
    session.tick(0)
    session.tick(300)
    session.render(stacked_graph())
    assert session.tables["users"].box.h == 118


def test_render_response_error_status_clears():
    session = new_session()
    session.render(stacked_graph())
    body = json.dumps({"error": "parse_error", "message": "boom"})
    assert session.render_response(422, body) is False
    assert session.empty_state_visible
    assert table_groups(session) == []


def test_render_response_bad_json_clears():
    session = new_session()
    session.render(stacked_graph())
    assert session.render_response(200, "<html>oops</html>") is False
    assert session.empty_state_visible
    assert session.tables == {}


def test_render_response_malformed_graph_clears():
    session = new_session()
    assert session.render_response(200, json.dumps({"nodes": [{"fields": []}]})) is False
    assert session.empty_state_visible


def test_render_response_success():
    session = new_session()
    assert session.render_response(200, json.dumps(stacked_graph()).encode()) is True
    assert not session.empty_state_visible


def test_snapshot_round_trip_keeps_positions():
    first = new_session()
    first.render(parse_schema(SCHEMA))
    snap = first.snapshot()
    assert all("x" in n and "y" in n for n in snap["nodes"])
    assert snap["links"][0]["from"] == "posts"

    second = new_session()
    second.render(snap)
    assert not second.auto_layout
    assert [(b.x, b.y) for b in second.boxes] == [(b.x, b.y) for b in first.boxes]


def test_snapshot_of_empty_session_is_none():
    assert new_session().snapshot() is None
