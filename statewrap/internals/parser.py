"""Lark parser setup and AST construction."""
from __future__ import annotations

import re
import sys
from pathlib import Path
from typing import List, Optional

from lark import Lark, Token, Tree, UnexpectedInput
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedToken

GRAMMAR_PATH = Path(__file__).parent.parent / "grammar.lark"

START_SYMBOLS = ["item", "directive_args", "type_expr"]

_NOT_NEWLINE = re.compile(r"[^\n]")

# Terminal names lark derives for anonymous punctuation, mapped back to text.
_PUNCT_NAMES = {
    "LPAR": "(", "RPAR": ")", "LSQB": "[", "RSQB": "]", "LBRACE": "{", "RBRACE": "}",
    "LESSTHAN": "<", "MORETHAN": ">", "COMMA": ",", "COLON": ":", "SEMICOLON": ";",
    "EQUAL": "=", "BANG": "!", "QMARK": "?", "PLUS": "+", "MINUS": "-", "STAR": "*",
    "AMPERSAND": "&", "HASH": "#",
}


def improve_parse_error(e: UnexpectedInput) -> str:
    """Turn a lark exception into a one-line description."""
    if isinstance(e, UnexpectedCharacters):
        return f"unexpected character {e.char!r}"
    if isinstance(e, UnexpectedEOF):
        return "unexpected end of input"
    if isinstance(e, UnexpectedToken):
        tok = e.token
        if tok.type == "$END":
            return "unexpected end of input"
        expected = sorted(_PUNCT_NAMES.get(name, name.lower()) for name in (e.expected or ()))
        if expected and len(expected) <= 6:
            return f"unexpected '{tok}', expected one of: {', '.join(expected)}"
        return f"unexpected '{tok}'"
    return str(e).splitlines()[0]


def blank_prefix(src: str, start: int, end: Optional[int] = None) -> str:
    """Return src[start:end] preceded by whitespace of the same shape as src[:start].

    Parsing the result yields tree positions (offsets, lines, columns) that are
    valid in the whole of `src`.
    """
    return _NOT_NEWLINE.sub(" ", src[:start]) + src[start:end]


class StateWrapParser:
    """Earley parser over the item-level Rust subset.

    One instance is built per expansion run and reused for every annotated item.
    """

    def __init__(self, dump_parse: bool = False):
        self.dump_parse = dump_parse
        self._lark = Lark.open(
            str(GRAMMAR_PATH),
            parser="earley",
            lexer="basic",
            start=START_SYMBOLS,
            propagate_positions=True,
            maybe_placeholders=False,
        )

    def lex(self, src: str) -> List[Token]:
        """Tokenize a whole file. Comments and whitespace are dropped."""
        return list(self._lark.lex(src))

    def parse(self, src: str, start: str, begin: int = 0, end: Optional[int] = None) -> Tree:
        """Parse src[begin:end] from the given start symbol with absolute positions."""
        text = blank_prefix(src, begin, end) if begin else src[:end]
        tree = self._lark.parse(text, start=start)
        if self.dump_parse:
            print(tree.pretty(), file=sys.stderr)
        return tree

    def parse_item(self, src: str, begin: int, end: int):
        from statewrap.syntax.ast_builder import ASTBuilder
        tree = self.parse(src, "item", begin, end)
        return ASTBuilder(src).build_item(tree)

    def parse_directive_args(self, src: str, begin: int, end: int):
        from statewrap.syntax.ast_builder import ASTBuilder
        tree = self.parse(src, "directive_args", begin, end)
        return ASTBuilder(src).build_directive_args(tree)

    def parse_type(self, text: str):
        from statewrap.syntax.ast_builder import ASTBuilder
        tree = self.parse(text, "type_expr")
        return ASTBuilder(text).build_type_expr(tree)


_default_parser: Optional[StateWrapParser] = None


def default_parser() -> StateWrapParser:
    """Shared parser instance for callers that only need to read types."""
    global _default_parser
    if _default_parser is None:
        _default_parser = StateWrapParser()
    return _default_parser


def parse_type(text: str):
    """Parse a standalone Rust type, e.g. "Box<T>"."""
    return default_parser().parse_type(text)
