"""Locates directive attributes and the items they annotate in a Rust file.

Only the token stream is needed here: attributes are found by shape
(`#` `[` path [`(` ... `)`] `]`) and an item's extent by bracket matching.
Everything inside an annotated item is skipped, so a directive can only
apply to the outermost item it is written on.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from lark import Token

from statewrap.internals.report import Span

_OPEN = {"LPAR": "RPAR", "LSQB": "RSQB", "LBRACE": "RBRACE"}
_CLOSE = {v: k for k, v in _OPEN.items()}

# Qualifiers that may sit between visibility and the item keyword.
_QUALIFIERS = ("ASYNC", "UNSAFE")
_KEYWORD_KINDS = {"STRUCT": "struct", "ENUM": "enum", "FN": "fn", "IMPL": "impl",
                  "TYPE": "type", "CONST": "const"}
# Item kinds whose extent is always terminated by `;`.
_SEMICOLON_KINDS = ("const", "static", "type", "use")


class ScanError(Exception):
    """Raised when an attribute or annotated item is not closed before end of file."""
    def __init__(self, what: str, span: Optional[Span] = None):
        super().__init__(f"unterminated {what}")
        self.what = what
        self.span = span


@dataclass(frozen=True)
class DirectiveAttr:
    attr_start: int          # offset of `#`
    attr_end: int            # offset just past `]`
    args_start: int          # argument text, between the parentheses
    args_end: int
    span: Span


@dataclass(frozen=True)
class AnnotatedItem:
    directives: Tuple[DirectiveAttr, ...]
    item_start: int          # first token after the first directive attribute
    item_end: int            # offset just past the item's last token
    kind: str                # "struct", "impl", "trait", "macro invocation", ...
    span: Span
    kind_span: Optional[Span] = field(default=None, compare=False)


def _tok_span(first: Token, last: Token) -> Span:
    return Span(first.line, first.column, last.end_line, last.end_column)


def _matching(tokens: Sequence[Token], i: int) -> int:
    """Index of the token closing the bracket opened at tokens[i], or -1."""
    depth = 0
    for j in range(i, len(tokens)):
        t = tokens[j].type
        if t in _OPEN:
            depth += 1
        elif t in _CLOSE:
            depth -= 1
            if depth == 0:
                return j
    return -1


def _read_attr(tokens: Sequence[Token], i: int) -> Optional[Tuple[int, List[str], Optional[int]]]:
    """If tokens[i] starts an outer attribute, return (index of `]`, path
    segments, index of `(` or None when the attribute is not path(...) shaped)."""
    if tokens[i].type != "HASH" or i + 1 >= len(tokens) or tokens[i + 1].type != "LSQB":
        return None
    close = _matching(tokens, i + 1)
    if close < 0:
        raise ScanError("attribute", _tok_span(tokens[i], tokens[i + 1]))

    path: List[str] = []
    j = i + 2
    if j < close and tokens[j].type == "PATH_SEP":
        j += 1
    while j < close and tokens[j].type == "IDENT":
        path.append(str(tokens[j]))
        j += 1
        if j < close and tokens[j].type == "PATH_SEP":
            j += 1
            continue
        break
    if j == close:
        return close, path, None
    if tokens[j].type == "LPAR" and _matching(tokens, j) == close - 1:
        return close, path, j
    return close, [], None


def _directive_at(tokens: Sequence[Token], i: int, directive: str) -> Optional[Tuple[int, DirectiveAttr]]:
    attr = _read_attr(tokens, i)
    if attr is None:
        return None
    close, path, lpar = attr
    if not path or path[-1] != directive:
        return None
    if lpar is None:
        # `#[directive]`: no arguments at all
        args_start = args_end = tokens[close].start_pos
    else:
        args_start = tokens[lpar].end_pos
        args_end = tokens[close - 1].start_pos
    return close, DirectiveAttr(
        attr_start=tokens[i].start_pos,
        attr_end=tokens[close].end_pos,
        args_start=args_start,
        args_end=args_end,
        span=_tok_span(tokens[i], tokens[close]),
    )


def _item_kind(tokens: Sequence[Token], i: int) -> Tuple[str, int]:
    """Kind of the item starting at tokens[i] (after its attributes), and the
    index of the token that names the kind."""
    n = len(tokens)
    if i < n and tokens[i].type == "PUB":
        i += 1
        if i < n and tokens[i].type == "LPAR":
            i = _matching(tokens, i) + 1 if _matching(tokens, i) > 0 else n
    while i < n:
        t = tokens[i]
        if t.type == "CONST" and i + 1 < n and tokens[i + 1].type in ("FN", "ASYNC", "UNSAFE", "EXTERN"):
            i += 1
            continue
        if t.type in _QUALIFIERS:
            if t.type == "UNSAFE" and i + 1 < n and tokens[i + 1].type == "IMPL":
                return "impl", i + 1
            i += 1
            continue
        if t.type == "EXTERN":
            j = i + 1
            if j < n and tokens[j].type == "STRING":
                j += 1
            if j < n and tokens[j].type == "FN":
                return "fn", j
            if j < n and tokens[j].type in ("UNSAFE", "CONST", "ASYNC"):
                i = j
                continue
            if j < n and tokens[j].type == "CRATE":
                return "extern crate", i
            return "extern block", i
        if t.type in _KEYWORD_KINDS:
            return _KEYWORD_KINDS[t.type], i
        if t.type == "IDENT":
            if i + 1 < n and tokens[i + 1].type == "BANG" and str(t) != "macro_rules":
                return "macro invocation", i
            return str(t), i
        return str(t), i
    return "end of file", n - 1


def _item_end(tokens: Sequence[Token], i: int, kind: str) -> int:
    """Index of the last token of the item starting at tokens[i]."""
    depth = 0
    angle = 0
    semicolon_only = kind in _SEMICOLON_KINDS
    for j in range(i, len(tokens)):
        t = tokens[j].type
        if t == "SEMICOLON" and depth == 0 and angle == 0:
            return j
        if t == "LBRACE" and depth == 0 and angle == 0 and not semicolon_only:
            close = _matching(tokens, j)
            return close
        if t in _OPEN:
            depth += 1
        elif t in _CLOSE:
            depth -= 1
            if depth < 0:
                return -1
        elif depth == 0 and t == "LESSTHAN":
            angle += 1
        elif depth == 0 and t == "MORETHAN" and angle > 0:
            angle -= 1
    return -1


def find_annotated_items(tokens: Sequence[Token], directive: str) -> List[AnnotatedItem]:
    """All items carrying the directive attribute, in source order.

    Stacked directive attributes on one item are collected together;
    the item is expanded once per attribute.
    """
    out: List[AnnotatedItem] = []
    n = len(tokens)
    i = 0
    while i < n:
        found = _directive_at(tokens, i, directive)
        if found is None:
            i += 1
            continue

        close, first = found
        directives = [first]
        item_start_idx = close + 1
        # Further outer attributes (and doc comments) belong to the same item.
        j = item_start_idx
        while j < n:
            if tokens[j].type == "DOC_COMMENT":
                j += 1
                continue
            again = _directive_at(tokens, j, directive)
            if again is not None:
                directives.append(again[1])
                j = again[0] + 1
                continue
            other = _read_attr(tokens, j)
            if other is None:
                break
            j = other[0] + 1

        if item_start_idx >= n or j >= n:
            raise ScanError("annotated item", first.span)
        kind, kind_idx = _item_kind(tokens, j)
        end_idx = _item_end(tokens, j, kind)
        if end_idx < 0:
            raise ScanError(f"{kind} item", _tok_span(tokens[j], tokens[j]))

        out.append(AnnotatedItem(
            directives=tuple(directives),
            item_start=tokens[item_start_idx].start_pos,
            item_end=tokens[end_idx].end_pos,
            kind=kind,
            span=_tok_span(tokens[j], tokens[end_idx]),
            kind_span=_tok_span(tokens[kind_idx], tokens[kind_idx]),
        ))
        i = end_idx + 1
    return out
