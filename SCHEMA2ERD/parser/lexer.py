"""Tokenizer for the fallback parser tier.

The grammar below is only used for lexing. Every character of the input
maps to some terminal (`OTHER` is a one-character catch-all), so tokenizing
never fails; deciding what the tokens mean is the interpreter's job.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from lark import Lark, Token


SCHEMA_GRAMMAR = r"""
start: _token*

_token: KEY | SYMBOL | SCOPE | HASHROCKET | STRING | NUMBER | IDENT
      | LPAR | RPAR | LSQB | RSQB | LBRACE | RBRACE
      | COMMA | DOT | PIPE | SEMI | NEWLINE | OTHER

KEY.3: /[A-Za-z_]\w*[?!]?:(?!:)/
SYMBOL.3: /:[A-Za-z_]\w*[?!]?/ | /:"[^"\n]*"/
SCOPE.3: "::"
HASHROCKET.3: "=>"
STRING.2: /"(?:[^"\\]|\\.)*"/s | /'(?:[^'\\]|\\.)*'/s
NUMBER.2: /\d[\d_]*(\.\d[\d_]*)?/
IDENT.1: /[A-Za-z_]\w*[?!]?/

LPAR.2: "("
RPAR.2: ")"
LSQB.2: "["
RSQB.2: "]"
LBRACE.2: "{"
RBRACE.2: "}"
COMMA.2: ","
DOT.2: "."
PIPE.2: "|"
SEMI.2: ";"
NEWLINE.2: /\r?\n/

COMMENT.2: /#[^\n]*/
WS_INLINE.2: /[ \t\f\r]+/
OTHER: /./

%ignore COMMENT
%ignore WS_INLINE
"""


@dataclass(frozen=True)
class SchemaToken:
    type: str
    value: str
    line: Optional[int] = None
    column: Optional[int] = None


_LEXER: Optional[Lark] = None


def _get_lexer() -> Lark:
    global _LEXER
    if _LEXER is None:
        _LEXER = Lark(
            SCHEMA_GRAMMAR,
            parser="lalr",
            lexer="basic",
            start="start",
            propagate_positions=True,
        )
    return _LEXER


def tokenize_schema(text: str) -> List[SchemaToken]:
    """Split schema text into `SchemaToken`s (comments and inline whitespace dropped)."""
    if not text:
        return []
    toks: List[Token] = list(_get_lexer().lex(text))
    return [SchemaToken(type=t.type, value=str(t), line=t.line, column=t.column) for t in toks]
