"""Primary parser tier: a line-oriented scanner for schema.rb text.

Each line is matched on its own, so outer block punctuation (the
`ActiveRecord::Schema.define` wrapper, trailing `do |t|`, options hashes)
does not matter. Lines the scanner does not recognise are skipped.

The one thing it refuses to guess at is a `create_table` statement whose
table name is not a quoted string; that raises `UnsupportedSyntaxError` so
the pipeline can hand the text to the interpreter tier.
"""

from __future__ import annotations

import re
from typing import Optional

from SCHEMA2ERD.utils.logging import get_logger
from .accumulator import SchemaAccumulator
from .column_types import NON_COLUMN_METHODS, REFERENCE_METHODS, column_type_for
from .errors import UnsupportedSyntaxError
from .naming import foreign_key_column

logger = get_logger(__name__)

_NAME = r"""("[^"]+"|'[^']+'|:\w+)"""

CREATE_TABLE_RE = re.compile(r"""^create_table\s+("[^"]+"|'[^']+')""")
CREATE_TABLE_ANY_RE = re.compile(r"^create_table\b")
END_RE = re.compile(r"^end\s*(?:#.*)?$")
TIMESTAMPS_RE = re.compile(r"^t\.timestamps\b")
T_INDEX_RE = re.compile(rf"^t\.index\s*\(?\s*(?:\[\s*{_NAME}\s*\]|{_NAME})")
COLUMN_RE = re.compile(rf"^t\.(\w+)\s*\(?\s*{_NAME}")
DECLARED_TYPE_RE = re.compile(rf"^t\.column\s*\(?\s*{_NAME}\s*,\s*{_NAME}")
ADD_FOREIGN_KEY_RE = re.compile(rf"^add_foreign_key\s*\(?\s*{_NAME}\s*,\s*{_NAME}")
ADD_INDEX_RE = re.compile(rf"^add_index\s*\(?\s*{_NAME}\s*,\s*(?:\[\s*{_NAME}\s*\]|{_NAME})")
FK_COLUMN_RE = re.compile(rf"\bcolumn:\s*{_NAME}")
UNIQUE_RE = re.compile(r"(?:\bunique:\s*true\b|:unique\s*=>\s*true\b)")
FOREIGN_KEY_MARKER_RE = re.compile(r"(?:\bforeign_key:\s*(?:true\b|\{)|:foreign_key\s*=>\s*(?:true\b|\{))")
TO_TABLE_RE = re.compile(rf"\bto_table:\s*{_NAME}")
POLYMORPHIC_RE = re.compile(r"\bpolymorphic:\s*true\b")
REFERENCE_UNIQUE_RE = re.compile(r"\bindex:\s*\{[^}]*\bunique:\s*true\b")


def _unquote(token: str) -> str:
    if token.startswith(":"):
        return token[1:]
    return token[1:-1]


def _first(*tokens: Optional[str]) -> Optional[str]:
    for token in tokens:
        if token:
            return _unquote(token)
    return None


class LineParser:
    """Scans schema text line by line into a `SchemaAccumulator`."""

    def __init__(self, accumulator: SchemaAccumulator):
        self.acc = accumulator
        self.current_table: Optional[str] = None

    def parse(self, text: str) -> SchemaAccumulator:
        for line_number, raw in enumerate(text.splitlines(), start=1):
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            self._parse_line(line, line_number)

        if self.current_table is not None:
            # Missing `end`: keep whatever was collected
            logger.debug(f"Table '{self.current_table}' was never closed; keeping partial columns")
        return self.acc

    def _parse_line(self, line: str, line_number: int) -> None:
        if CREATE_TABLE_ANY_RE.match(line):
            m = CREATE_TABLE_RE.match(line)
            if not m:
                raise UnsupportedSyntaxError(
                    "create_table without a quoted table name", line=line_number, source_line=line
                )
            self.current_table = _unquote(m.group(1))
            self.acc.open_table(self.current_table)
            return

        if self.current_table is not None:
            if END_RE.match(line):
                self.current_table = None
                return
            if self._parse_table_line(line):
                return

        self._parse_statement(line)

    def _parse_table_line(self, line: str) -> bool:
        table = self.current_table
        assert table is not None

        if TIMESTAMPS_RE.match(line):
            self.acc.add_timestamps(table)
            return True

        m = T_INDEX_RE.match(line)
        if m:
            column = _first(m.group(1), m.group(2))
            if column and UNIQUE_RE.search(line):
                self.acc.add_unique_index(table, column)
            return True

        m = DECLARED_TYPE_RE.match(line)
        if m:
            self.acc.add_column(table, _unquote(m.group(1)), column_type_for(_unquote(m.group(2))))
            return True

        m = COLUMN_RE.match(line)
        if not m:
            return False

        method, name = m.group(1), _unquote(m.group(2))
        if method in NON_COLUMN_METHODS:
            return True
        if method in REFERENCE_METHODS:
            to_table = TO_TABLE_RE.search(line)
            self.acc.add_reference(
                table,
                name,
                foreign_key=bool(FOREIGN_KEY_MARKER_RE.search(line)),
                to_table=_unquote(to_table.group(1)) if to_table else None,
                polymorphic=bool(POLYMORPHIC_RE.search(line)),
                unique=True if REFERENCE_UNIQUE_RE.search(line) else None,
            )
            return True

        self.acc.add_column(table, name, column_type_for(method))
        return True

    def _parse_statement(self, line: str) -> None:
        m = ADD_FOREIGN_KEY_RE.match(line)
        if m:
            to_table = _unquote(m.group(2))
            column = FK_COLUMN_RE.search(line)
            self.acc.add_edge(
                _unquote(m.group(1)),
                to_table,
                column=_unquote(column.group(1)) if column else foreign_key_column(to_table),
            )
            return

        m = ADD_INDEX_RE.match(line)
        if m and UNIQUE_RE.search(line):
            column = _first(m.group(2), m.group(3))
            if column:
                self.acc.add_unique_index(_unquote(m.group(1)), column)


def parse_lines(text: str, accumulator: Optional[SchemaAccumulator] = None) -> SchemaAccumulator:
    """Run the line-oriented tier over `text`."""
    return LineParser(accumulator or SchemaAccumulator()).parse(text)
