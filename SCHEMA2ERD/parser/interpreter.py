"""Fallback parser tier: a small interpreter over tokenized schema text.

The interpreter understands just enough of the schema DSL to find table
blocks, builder calls on the block parameter, and `add_foreign_key`
statements. Everything else is a call it has no handler for, and those are
ignored. Results are written into the `SchemaAccumulator` passed in.

Pipeline:
    sanitize_schema_text -> tokenize_schema -> split_statements -> SchemaInterpreter
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from SCHEMA2ERD.utils.logging import get_logger
from .accumulator import SchemaAccumulator
from .column_types import METHOD_TYPES, NON_COLUMN_METHODS, REFERENCE_METHODS, column_type_for
from .errors import InterpreterError
from .lexer import SchemaToken, tokenize_schema
from .naming import foreign_key_column

logger = get_logger(__name__)

_SCHEMA_BRACKET_RE = re.compile(r"ActiveRecord::Schema\[[^\]]*\]")
_STRIPPED_LINE_RE = re.compile(r"^\s*(?:t\.index|add_index|t\.check_constraint|check_constraint)\b")
_HEREDOC_RE = re.compile(r"<<[~-]?(['\"]?)([A-Z_][A-Z0-9_]*)\1")

_OPENERS = {"LPAR": "RPAR", "LSQB": "RSQB", "LBRACE": "RBRACE"}
_CLOSERS = {v: k for k, v in _OPENERS.items()}

# Top-level calls that are part of the schema scaffolding and never affect the graph
SCAFFOLDING_CALLS = frozenset({
    "enable_extension",
    "disable_extension",
    "create_join_table",
    "execute",
    "create_enum",
    "add_index",
    "add_check_constraint",
    "create_schema",
})


def sanitize_schema_text(text: str) -> str:
    """Normalise the versioned wrapper and drop statements the interpreter skips.

    `ActiveRecord::Schema[7.1].define` becomes `ActiveRecord::Schema.define`;
    whole-line index and check-constraint statements and heredoc bodies are
    removed.
    """
    text = _SCHEMA_BRACKET_RE.sub("ActiveRecord::Schema", text)
    kept: List[str] = []
    heredoc_end: Optional[str] = None
    for line in text.splitlines():
        if heredoc_end is not None:
            if line.strip() == heredoc_end:
                heredoc_end = None
            kept.append("")
            continue
        if _STRIPPED_LINE_RE.match(line):
            kept.append("")
            continue
        m = _HEREDOC_RE.search(line)
        if m:
            heredoc_end = m.group(2)
        kept.append(line)
    # Blank lines keep token line numbers aligned with the input
    return "\n".join(kept)


def split_statements(tokens: List[SchemaToken]) -> List[List[SchemaToken]]:
    """Group tokens into statements.

    A newline or `;` ends a statement unless a bracket is still open or the
    previous token was a comma (multi-line argument lists).
    """
    statements: List[List[SchemaToken]] = []
    current: List[SchemaToken] = []
    stack: List[str] = []

    for tok in tokens:
        if tok.type in ("NEWLINE", "SEMI"):
            if stack or (current and current[-1].type in ("COMMA", "HASHROCKET", "DOT")):
                continue
            if current:
                statements.append(current)
                current = []
            continue
        if tok.type == "OTHER" and tok.value in ("\"", "'"):
            raise InterpreterError("unterminated string literal", line=tok.line)
        if tok.type in _OPENERS:
            stack.append(tok.type)
        elif tok.type in _CLOSERS:
            if stack and stack[-1] == _CLOSERS[tok.type]:
                stack.pop()
            else:
                raise InterpreterError(f"unexpected '{tok.value}'", line=tok.line)
        current.append(tok)

    if stack:
        raise InterpreterError("unbalanced brackets at end of input", line=current[-1].line if current else None)
    if current:
        statements.append(current)
    return statements


@dataclass
class Call:
    """One parsed method call: `receiver.method(args, kwargs) do |param|`."""
    receiver: List[str]
    method: str
    args: List[Any] = field(default_factory=list)
    kwargs: Dict[str, Any] = field(default_factory=dict)
    opens_block: bool = False
    block_param: Optional[str] = None
    line: Optional[int] = None


class _TokenCursor:
    def __init__(self, tokens: List[SchemaToken]):
        self.tokens = tokens
        self.pos = 0

    def peek(self, offset: int = 0) -> Optional[SchemaToken]:
        i = self.pos + offset
        return self.tokens[i] if i < len(self.tokens) else None

    def next(self) -> Optional[SchemaToken]:
        tok = self.peek()
        if tok is not None:
            self.pos += 1
        return tok

    def at(self, type_: str, value: Optional[str] = None) -> bool:
        tok = self.peek()
        return tok is not None and tok.type == type_ and (value is None or tok.value == value)

    def done(self) -> bool:
        return self.pos >= len(self.tokens)


def _is_do(tok: Optional[SchemaToken]) -> bool:
    return tok is not None and tok.type == "IDENT" and tok.value == "do"


def _string_value(raw: str) -> str:
    body = raw[1:-1]
    if raw.startswith("\""):
        body = body.replace("\\\"", "\"").replace("\\\\", "\\")
    else:
        body = body.replace("\\'", "'").replace("\\\\", "\\")
    return body


def _number_value(raw: str) -> Any:
    cleaned = raw.replace("_", "")
    return float(cleaned) if "." in cleaned else int(cleaned)


class ValueReader:
    """Reads literal values (strings, symbols, numbers, arrays, hashes).

    Unrecognised tokens are skipped so the reader always makes progress.
    """

    _STOP = ("COMMA", "RPAR", "RSQB", "RBRACE")

    def __init__(self, cursor: _TokenCursor):
        self.cur = cursor

    def read(self) -> Any:
        tok = self.cur.peek()
        if tok is None:
            return None
        if tok.type == "STRING":
            self.cur.next()
            return _string_value(tok.value)
        if tok.type == "SYMBOL":
            self.cur.next()
            value = tok.value[1:]
            return value[1:-1] if value.startswith("\"") else value
        if tok.type == "NUMBER":
            self.cur.next()
            return _number_value(tok.value)
        if tok.type == "OTHER" and tok.value == "-" and self.cur.peek(1) is not None and self.cur.peek(1).type == "NUMBER":
            self.cur.next()
            return -_number_value(self.cur.next().value)
        if tok.type == "IDENT" and tok.value in ("true", "false", "nil"):
            self.cur.next()
            return {"true": True, "false": False, "nil": None}[tok.value]
        if tok.type == "LSQB":
            return self._read_array()
        if tok.type == "LBRACE":
            return self._read_hash()
        return self._skip_expression()

    def _skip_expression(self) -> None:
        """Skip an expression we do not model (lambdas, constants, method chains)."""
        depth = 0
        start = self.cur.pos
        while not self.cur.done():
            tok = self.cur.peek()
            if depth == 0 and (tok.type in self._STOP or _is_do(tok)):
                break
            if tok.type in _OPENERS:
                depth += 1
            elif tok.type in _CLOSERS:
                depth -= 1
            self.cur.next()
        if self.cur.pos == start:
            self.cur.next()
        return None

    def _read_array(self) -> List[Any]:
        self.cur.next()
        items: List[Any] = []
        while not self.cur.done() and not self.cur.at("RSQB"):
            if self.cur.at("COMMA"):
                self.cur.next()
                continue
            items.append(self.read())
        self.cur.next()
        return items

    def _read_hash(self) -> Dict[str, Any]:
        self.cur.next()
        result: Dict[str, Any] = {}
        while not self.cur.done() and not self.cur.at("RBRACE"):
            if self.cur.at("COMMA"):
                self.cur.next()
                continue
            key, value, ok = self.read_pair()
            if ok:
                result[str(key)] = value
        self.cur.next()
        return result

    def read_pair(self) -> Tuple[Any, Any, bool]:
        """Read `key: value` or `key => value`; ok is False for a bare value."""
        tok = self.cur.peek()
        if tok is not None and tok.type == "KEY":
            self.cur.next()
            return tok.value[:-1], self.read(), True
        key = self.read()
        if self.cur.at("HASHROCKET"):
            self.cur.next()
            return key, self.read(), True
        return key, None, False


def parse_call(tokens: List[SchemaToken]) -> Optional[Call]:
    """Parse one statement into a `Call`, or None when it is not a call."""
    cur = _TokenCursor(tokens)
    line = tokens[0].line if tokens else None

    if cur.at("SCOPE"):
        cur.next()
    if not cur.at("IDENT") or _is_do(cur.peek()):
        return None
    receiver = [cur.next().value]
    while (cur.at("DOT") or cur.at("SCOPE")) and cur.peek(1) is not None and cur.peek(1).type == "IDENT":
        cur.next()
        receiver.append(cur.next().value)

    call = Call(receiver=receiver[:-1], method=receiver[-1], line=line)
    reader = ValueReader(cur)

    parenthesised = cur.at("LPAR")
    if parenthesised:
        cur.next()

    while not cur.done():
        tok = cur.peek()
        if parenthesised and tok.type == "RPAR":
            cur.next()
            parenthesised = False
            continue
        if _is_do(tok) or (tok.type == "LBRACE" and cur.peek(1) is not None and cur.peek(1).type == "PIPE"):
            _read_block_opener(cur, call)
            break
        if tok.type == "COMMA":
            cur.next()
            continue
        key, value, is_pair = reader.read_pair()
        if is_pair:
            call.kwargs[str(key)] = value
        elif key is not None:
            call.args.append(key)
    return call


def _read_block_opener(cur: _TokenCursor, call: Call) -> None:
    opener = cur.next()
    # Brace blocks close on the same statement, so only `do` opens a context
    call.opens_block = _is_do(opener)
    if cur.at("PIPE"):
        cur.next()
        if cur.at("IDENT"):
            call.block_param = cur.next().value
    while not cur.done():
        cur.next()


class TableBuilder:
    """Receives `t.<method>` calls for one table.

    Dispatch goes through a lookup table; methods without a handler are
    ignored.
    """

    def __init__(self, table: str, accumulator: SchemaAccumulator):
        self.table = table
        self.acc = accumulator
        self._handlers: Dict[str, Callable[[Call], None]] = {
            "column": self._column,
            "timestamps": self._timestamps,
        }
        for method in METHOD_TYPES:
            self._handlers[method] = self._typed_column
        for method in REFERENCE_METHODS:
            self._handlers[method] = self._reference
        for method in NON_COLUMN_METHODS:
            self._handlers[method] = self._ignore

    def call(self, call: Call) -> None:
        handler = self._handlers.get(call.method)
        if handler is None:
            logger.debug(f"Ignoring unknown builder call t.{call.method} in table '{self.table}'")
            return
        handler(call)

    def _names(self, call: Call) -> List[str]:
        return [str(a) for a in call.args if isinstance(a, str)]

    def _typed_column(self, call: Call) -> None:
        for name in self._names(call):
            self.acc.add_column(self.table, name, METHOD_TYPES[call.method])

    def _column(self, call: Call) -> None:
        names = self._names(call)
        if len(names) >= 2:
            self.acc.add_column(self.table, names[0], column_type_for(names[1]))

    def _timestamps(self, call: Call) -> None:
        self.acc.add_timestamps(self.table)

    def _reference(self, call: Call) -> None:
        foreign_key = call.kwargs.get("foreign_key")
        to_table = foreign_key.get("to_table") if isinstance(foreign_key, dict) else None
        index = call.kwargs.get("index")
        unique = True if isinstance(index, dict) and index.get("unique") is True else None
        for name in self._names(call):
            self.acc.add_reference(
                self.table,
                name,
                foreign_key=bool(foreign_key),
                to_table=str(to_table) if to_table else None,
                polymorphic=call.kwargs.get("polymorphic") is True,
                unique=unique,
            )

    def _ignore(self, call: Call) -> None:
        return None


@dataclass
class _Block:
    param: Optional[str] = None
    builder: Optional[TableBuilder] = None


class SchemaInterpreter:
    """Executes statements against the accumulator.

    Tables, edges and unique facts live on the accumulator handed to the
    constructor; the interpreter only keeps its block stack.
    """

    def __init__(self, accumulator: SchemaAccumulator):
        self.acc = accumulator
        self.blocks: List[_Block] = []

    def run(self, text: str) -> SchemaAccumulator:
        tokens = tokenize_schema(sanitize_schema_text(text))
        for statement in split_statements(tokens):
            self.execute(statement)
        if self.blocks:
            logger.debug(f"{len(self.blocks)} block(s) left open at end of input")
        return self.acc

    def execute(self, statement: List[SchemaToken]) -> None:
        first = statement[0]
        if first.type == "IDENT" and first.value == "end":
            if self.blocks:
                self.blocks.pop()
            return

        call = parse_call(statement)
        if call is None:
            return

        builder = self._builder_for(call.receiver)
        if builder is not None:
            builder.call(call)
        elif call.receiver == [] and call.method == "create_table":
            self._create_table(call)
            return
        elif call.receiver == [] and call.method == "add_foreign_key":
            self._add_foreign_key(call)
        elif call.receiver == [] and call.method in SCAFFOLDING_CALLS:
            pass
        elif not call.opens_block:
            logger.debug(f"Ignoring unknown call '{'.'.join(call.receiver + [call.method])}' (line {call.line})")

        if call.opens_block:
            self.blocks.append(_Block(param=call.block_param))

    def _builder_for(self, receiver: List[str]) -> Optional[TableBuilder]:
        if len(receiver) != 1:
            return None
        for block in reversed(self.blocks):
            if block.builder is not None and block.param == receiver[0]:
                return block.builder
        return None

    def _create_table(self, call: Call) -> None:
        names = [a for a in call.args if isinstance(a, str)]
        if not names:
            raise InterpreterError("create_table without a table name", line=call.line)
        table = names[0]
        self.acc.open_table(table, replace=True)
        if call.opens_block:
            self.blocks.append(_Block(param=call.block_param, builder=TableBuilder(table, self.acc)))

    def _add_foreign_key(self, call: Call) -> None:
        names = [a for a in call.args if isinstance(a, str)]
        if len(names) < 2:
            logger.debug(f"add_foreign_key with fewer than two tables (line {call.line})")
            return
        column = call.kwargs.get("column")
        self.acc.add_edge(names[0], names[1], column=str(column) if column else foreign_key_column(names[1]))


def interpret_schema(text: str, accumulator: Optional[SchemaAccumulator] = None) -> SchemaAccumulator:
    """Run the fallback tier over `text`."""
    return SchemaInterpreter(accumulator or SchemaAccumulator()).run(text)
