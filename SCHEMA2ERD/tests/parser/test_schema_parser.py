"""Tests for parse_schema (both tiers plus post-processing)."""

import pytest

from SCHEMA2ERD.config import ParserOptions
from SCHEMA2ERD.ir.models import Graph, ParseFailure
from SCHEMA2ERD.parser import parse_schema


def _links(graph):
    return [link.model_dump(by_alias=True) for link in graph.links]


def _node(graph, name):
    return next(n for n in graph.nodes if n.id == name)


def test_users_posts_scenario():
    """References with foreign_key: true produce the column and the edge."""
    text = '''
create_table "users" do |t|
  t.string "email"
end
create_table "posts" do |t|
  t.references :user, foreign_key: true
end
'''
    graph = parse_schema(text)

    assert isinstance(graph, Graph)
    assert graph.to_dict() == {
        "nodes": [
            {"id": "users", "fields": [["email", "varchar"]]},
            {"id": "posts", "fields": [["user_id", "int"]]},
        ],
        "links": [{"from": "posts", "to": "users", "fromCard": "many", "toCard": "1"}],
    }


@pytest.mark.parametrize("text", ["", "   ", "\n\t\n"])
def test_blank_input_is_empty_graph(text):
    graph = parse_schema(text)
    assert isinstance(graph, Graph)
    assert graph.is_empty()
    assert graph.to_dict() == {"nodes": [], "links": []}


def test_none_input_is_empty_graph():
    assert parse_schema(None).to_dict() == {"nodes": [], "links": []}


def test_column_order_preserved():
    text = '''
ActiveRecord::Schema[7.1].define(version: 2024_05_01_000000) do
  create_table "accounts", force: :cascade do |t|
    t.string "name", null: false
    t.decimal "balance", precision: 10, scale: 2
    t.boolean "active", default: true
    t.jsonb "settings"
    t.uuid "token"
    t.timestamps
  end
end
'''
    graph = parse_schema(text)
    assert _node(graph, "accounts").fields == [
        ["name", "varchar"],
        ["balance", "decimal"],
        ["active", "boolean"],
        ["settings", "jsonb"],
        ["token", "uuid"],
        ["created_at", "datetime"],
        ["updated_at", "datetime"],
    ]


def test_timestamps_appends_two_datetime_columns():
    graph = parse_schema('create_table "events" do |t|\n  t.timestamps null: false\nend\n')
    assert _node(graph, "events").fields == [["created_at", "datetime"], ["updated_at", "datetime"]]


def test_unmapped_method_passes_through_as_type():
    graph = parse_schema('create_table "spots" do |t|\n  t.st_point "location"\nend\n')
    assert _node(graph, "spots").fields == [["location", "st_point"]]


def test_single_quoted_table_and_symbol_columns():
    text = "create_table 'tags' do |t|\n  t.string :label\n  t.integer :weight\nend\n"
    graph = parse_schema(text)
    assert _node(graph, "tags").fields == [["label", "varchar"], ["weight", "int"]]


def test_each_create_table_yields_one_table():
    text = '''
create_table "a" do |t|
  t.string "x"
end
create_table "b" do |t|
end
create_table "c" do |t|
  t.text "y"
end
'''
    graph = parse_schema(text)
    assert graph.node_ids() == ["a", "b", "c"]


def test_missing_end_keeps_partial_results():
    graph = parse_schema('create_table "users" do |t|\n  t.string "email"\n  t.string "name"\n')
    assert isinstance(graph, Graph)
    assert _node(graph, "users").fields == [["email", "varchar"], ["name", "varchar"]]


def test_unrecognized_lines_are_skipped():
    text = '''
# This file is auto-generated
enable_extension "plpgsql"
create_table "users" do |t|
  t.string "email"
  t.check_constraint "char_length(email) > 3"
  something_weird!!
end
'''
    graph = parse_schema(text)
    assert _node(graph, "users").fields == [["email", "varchar"]]


def test_unique_index_in_table_makes_from_side_one():
    text = '''
create_table "users" do |t|
  t.string "email"
end
create_table "profiles" do |t|
  t.references :user, foreign_key: true
  t.index ["user_id"], name: "index_profiles_on_user_id", unique: true
end
'''
    graph = parse_schema(text)
    assert _links(graph) == [{"from": "profiles", "to": "users", "fromCard": "1", "toCard": "1"}]


def test_add_index_unique_outside_table():
    text = '''
create_table "users" do |t|
end
create_table "accounts" do |t|
  t.bigint "owner_id"
end
add_index "accounts", "owner_id", unique: true
add_foreign_key "accounts", "users", column: "owner_id"
'''
    graph = parse_schema(text)
    assert _links(graph) == [{"from": "accounts", "to": "users", "fromCard": "1", "toCard": "1"}]


def test_foreign_key_without_column_uses_singular_table_id():
    """`add_foreign_key "profiles", "users"` targets `user_id`, so its unique index applies."""
    text = '''
create_table "users" do |t|
end
create_table "profiles" do |t|
  t.bigint "user_id"
  t.index ["user_id"], unique: true
end
add_foreign_key "profiles", "users"
'''
    graph = parse_schema(text)
    assert _links(graph) == [{"from": "profiles", "to": "users", "fromCard": "1", "toCard": "1"}]


def test_composite_unique_index_is_many():
    text = '''
create_table "users" do |t|
end
create_table "posts" do |t|
end
create_table "likes" do |t|
  t.references :user, foreign_key: true
  t.references :post, foreign_key: true
  t.index ["user_id", "post_id"], unique: true
end
'''
    graph = parse_schema(text)
    assert {link["fromCard"] for link in _links(graph)} == {"many"}
    assert len(graph.links) == 2


def test_reference_with_unique_index_option():
    text = '''
create_table "users" do |t|
end
create_table "avatars" do |t|
  t.references :user, foreign_key: true, index: { unique: true }
end
'''
    graph = parse_schema(text)
    assert _links(graph)[0]["fromCard"] == "1"


def test_duplicate_declarations_collapse_to_one_edge():
    text = '''
create_table "users" do |t|
end
create_table "posts" do |t|
  t.references :user, foreign_key: true
end
add_foreign_key "posts", "users"
add_foreign_key "posts", "users", column: "user_id"
'''
    graph = parse_schema(text)
    assert _links(graph) == [{"from": "posts", "to": "users", "fromCard": "many", "toCard": "1"}]


def test_foreign_key_to_table_option():
    text = '''
create_table "users" do |t|
end
create_table "articles" do |t|
  t.references :author, foreign_key: { to_table: :users }
end
'''
    graph = parse_schema(text)
    assert _node(graph, "articles").fields == [["author_id", "int"]]
    assert _links(graph) == [{"from": "articles", "to": "users", "fromCard": "many", "toCard": "1"}]


def test_polymorphic_reference_adds_type_column_without_edge():
    text = '''
create_table "comments" do |t|
  t.references :commentable, polymorphic: true
end
'''
    graph = parse_schema(text)
    assert _node(graph, "comments").fields == [["commentable_id", "int"], ["commentable_type", "varchar"]]
    assert graph.links == []


def test_inference_from_id_columns():
    text = '''
create_table "authors" do |t|
end
create_table "categories" do |t|
end
create_table "books" do |t|
  t.integer "author_id"
  t.bigint "category_id"
  t.integer "external_id"
end
'''
    graph = parse_schema(text)
    assert _links(graph) == [
        {"from": "books", "to": "authors", "fromCard": "many", "toCard": "1"},
        {"from": "books", "to": "categories", "fromCard": "many", "toCard": "1"},
    ]


def test_inference_can_be_disabled():
    text = '''
create_table "authors" do |t|
end
create_table "books" do |t|
  t.integer "author_id"
end
'''
    graph = parse_schema(text, options=ParserOptions(infer_foreign_keys=False))
    assert graph.links == []


def test_self_reference_parent_id_without_parents_table():
    """parent_id pluralises to `parents`; with no such table nothing is inferred."""
    text = '''
create_table "comments" do |t|
  t.integer "parent_id"
end
'''
    graph = parse_schema(text)
    assert graph.links == []


def test_explicit_self_reference():
    text = '''
create_table "comments" do |t|
  t.references :parent, foreign_key: { to_table: :comments }
end
'''
    graph = parse_schema(text)
    assert _links(graph) == [{"from": "comments", "to": "comments", "fromCard": "many", "toCard": "1"}]


def test_excluded_tables_and_their_edges_are_dropped():
    text = '''
create_table "active_storage_blobs" do |t|
  t.string "key"
end
create_table "active_storage_attachments" do |t|
  t.references :blob, foreign_key: { to_table: :active_storage_blobs }
end
create_table "ar_internal_metadata" do |t|
  t.string "key"
end
create_table "users" do |t|
end
add_foreign_key "users", "active_storage_blobs"
add_foreign_key "users", "missing_table"
'''
    graph = parse_schema(text)
    assert graph.node_ids() == ["users"]
    assert graph.links == []


def test_fallback_tier_handles_symbol_table_names():
    text = '''
ActiveRecord::Schema[7.1].define(version: 2024_01_01) do
  create_table :users, force: :cascade do |t|
    t.string :email, null: false
    t.timestamps
    t.index ["email"], name: "index_users_on_email", unique: true
  end

  create_table :posts do |t|
    t.references :user, foreign_key: true
    t.frobnicate :sparkle
    t.text :body
  end

  add_foreign_key :posts, :users
end
'''
    graph = parse_schema(text)
    assert isinstance(graph, Graph)
    assert graph.to_dict() == {
        "nodes": [
            {
                "id": "users",
                "fields": [["email", "varchar"], ["created_at", "datetime"], ["updated_at", "datetime"]],
            },
            {"id": "posts", "fields": [["user_id", "int"], ["body", "text"]]},
        ],
        "links": [{"from": "posts", "to": "users", "fromCard": "many", "toCard": "1"}],
    }


def test_fallback_tier_parenthesised_calls_and_hash_rockets():
    text = '''
create_table("teams") do |t|
  t.column("name", :string)
end
create_table("members") do |t|
  t.belongs_to(:team, :foreign_key => true)
  execute <<~SQL
    end
  SQL
end
'''
    graph = parse_schema(text)
    assert _node(graph, "teams").fields == [["name", "varchar"]]
    assert _node(graph, "members").fields == [["team_id", "int"]]
    assert _links(graph) == [{"from": "members", "to": "teams", "fromCard": "many", "toCard": "1"}]


def test_both_tiers_failing_returns_parse_failure():
    text = 'create_table :users do |t|\n  t.string "name\nend\n'
    result = parse_schema(text)
    assert isinstance(result, ParseFailure)
    assert result.error == "parse_error"
    assert "unterminated" in result.message


def test_unbalanced_brackets_return_parse_failure():
    result = parse_schema("create_table(:users do |t|\n  t.string :name\nend\n")
    assert isinstance(result, ParseFailure)
    assert result.to_dict()["error"] == "parse_error"
