"""Unit tests for the fallback tier: tokenizer, sanitizer, interpreter."""

import pytest

from SCHEMA2ERD.parser import (
    InterpreterError,
    SchemaAccumulator,
    UnsupportedSyntaxError,
    infer_foreign_keys,
    interpret_schema,
    parse_lines,
    sanitize_schema_text,
)
from SCHEMA2ERD.parser.interpreter import parse_call, split_statements
from SCHEMA2ERD.parser.lexer import tokenize_schema


def test_tokenize_table_header():
    tokens = tokenize_schema("create_table :users, force: :cascade do |t|")
    assert [t.type for t in tokens] == [
        "IDENT", "SYMBOL", "COMMA", "KEY", "SYMBOL", "IDENT", "PIPE", "IDENT", "PIPE",
    ]
    assert tokens[0].line == 1


def test_tokenize_never_fails_on_odd_characters():
    tokens = tokenize_schema('t.string "a" ~ @ $ %')
    assert [t.type for t in tokens][-4:] == ["OTHER", "OTHER", "OTHER", "OTHER"]


def test_tokenize_drops_comments():
    tokens = tokenize_schema('t.string "a" # trailing "comment"\n')
    assert [t.type for t in tokens] == ["IDENT", "DOT", "IDENT", "STRING", "NEWLINE"]


def test_sanitize_normalises_versioned_wrapper_and_strips_indexes():
    text = (
        "ActiveRecord::Schema[7.0].define(version: 1) do\n"
        '  t.index ["a"], unique: true\n'
        '  add_index "x", "y"\n'
        '  check_constraint "a > 1"\n'
        "end"
    )
    lines = sanitize_schema_text(text).split("\n")
    assert lines[0] == "ActiveRecord::Schema.define(version: 1) do"
    assert lines[1:4] == ["", "", ""]
    assert lines[4] == "end"


def test_split_statements_joins_continuations():
    tokens = tokenize_schema('t.string "a",\n  null: false\nt.text "b"\nt.json("c",\n "d")\n')
    statements = split_statements(tokens)
    assert len(statements) == 3


def test_split_statements_rejects_stray_closer():
    with pytest.raises(InterpreterError):
        split_statements(tokenize_schema("t.string )\n"))


def test_parse_call_arguments():
    tokens = tokenize_schema('t.references :owner, foreign_key: { to_table: :users }, index: { unique: true }')
    call = parse_call(tokens)
    assert call.receiver == ["t"]
    assert call.method == "references"
    assert call.args == ["owner"]
    assert call.kwargs == {"foreign_key": {"to_table": "users"}, "index": {"unique": True}}
    assert call.opens_block is False


def test_parse_call_values_and_lambdas():
    tokens = tokenize_schema('t.datetime "at", default: -> { "now()" }, precision: 6, limit: -1, tags: [:a, "b", nil]')
    call = parse_call(tokens)
    assert call.args == ["at"]
    assert call.kwargs["default"] is None
    assert call.kwargs["precision"] == 6
    assert call.kwargs["limit"] == -1
    assert call.kwargs["tags"] == ["a", "b", None]


def test_interpreter_ignores_unknown_calls():
    acc = interpret_schema(
        "create_table :widgets do |t|\n"
        "  t.string :name\n"
        "  t.virtual :total, type: :integer, as: \"a + b\"\n"
        "  t.totally_unknown\n"
        "end\n"
        "create_enum :mood, [\"happy\", \"sad\"]\n"
        "frobnicate_everything!\n"
    )
    assert list(acc.tables) == ["widgets"]
    assert acc.tables["widgets"].column_names() == ["name"]


def test_interpreter_nested_generic_blocks():
    acc = interpret_schema(
        "ActiveRecord::Schema.define do\n"
        "  create_table :a do |t|\n"
        "    t.integer :n\n"
        "  end\n"
        "  create_table :b do |x|\n"
        "    x.string :s\n"
        "    t.string :not_b\n"
        "  end\n"
        "end\n"
    )
    assert acc.tables["a"].column_names() == ["n"]
    assert acc.tables["b"].column_names() == ["s"]


def test_interpreter_create_table_without_name_fails():
    with pytest.raises(InterpreterError):
        interpret_schema("create_table do |t|\nend\n")


def test_line_parser_rejects_symbol_table_name():
    with pytest.raises(UnsupportedSyntaxError) as exc:
        parse_lines('\ncreate_table :users do |t|\nend\n')
    assert exc.value.line == 2


def test_line_parser_collects_unique_facts():
    acc = parse_lines(
        'create_table "users" do |t|\n'
        '  t.string "email"\n'
        '  t.index "email", unique: true\n'
        "end\n"
        'add_index "users", ["email"], unique: true\n'
        'add_index "users", ["a", "b"], unique: true\n'
    )
    assert acc.unique_columns == {("users", "email")}


def test_inference_is_idempotent():
    acc = parse_lines(
        'create_table "users" do |t|\nend\n'
        'create_table "groups" do |t|\nend\n'
        'create_table "memberships" do |t|\n'
        '  t.integer "user_id"\n'
        '  t.integer "group_id"\n'
        "end\n"
    )
    once = infer_foreign_keys(acc.tables, acc.edges)
    twice = infer_foreign_keys(acc.tables, once)
    assert [e.key() for e in once] == [("memberships", "users"), ("memberships", "groups")]
    assert [e.key() for e in twice] == [e.key() for e in once]


def test_accumulators_are_independent():
    first = SchemaAccumulator()
    parse_lines('create_table "a" do |t|\nend\n', first)
    second = interpret_schema("create_table :b do |t|\nend\n")
    assert list(first.tables) == ["a"]
    assert list(second.tables) == ["b"]


def test_add_foreign_key_defaults_column_in_both_tiers():
    lines = parse_lines('add_foreign_key "profiles", "users"\nadd_foreign_key "posts", "users", column: "author_id"\n')
    interpreted = interpret_schema("add_foreign_key :profiles, :users\nadd_foreign_key :posts, :users, column: :author_id\n")
    for acc in (lines, interpreted):
        assert [(e.from_table, e.to_table, e.column) for e in acc.edges] == [
            ("profiles", "users", "user_id"),
            ("posts", "users", "author_id"),
        ]
