"""AST to Rust source text.

Rendering is canonical rather than source-preserving: one space after commas,
`&'a mut T` spacing, no space before generic argument lists.
"""
from __future__ import annotations
from contextlib import contextmanager
from typing import Iterable, Iterator, List, Sequence

from statewrap.syntax.ast import (
    TypeExpr, PathType, PathSegment, AngleArgs, ParenArgs, ReferenceType, TupleType,
    ArrayType, OpaqueType, GenericArg, LifetimeArg, ConstArg, BindingArg, ConstraintArg,
    GenericParam, LifetimeParam, TypeParam, ConstParam, WherePredicate, Attribute,
)


def render_type(t: TypeExpr) -> str:
    if isinstance(t, PathType):
        head = "::" if t.leading_colon else ""
        return head + "::".join(render_segment(s) for s in t.segments)
    if isinstance(t, ReferenceType):
        lifetime = f"{t.lifetime} " if t.lifetime else ""
        mut = "mut " if t.mutable else ""
        return f"&{lifetime}{mut}{render_type(t.elem)}"
    if isinstance(t, TupleType):
        if len(t.elems) == 1:
            return f"({render_type(t.elems[0])},)"
        return "(" + ", ".join(render_type(e) for e in t.elems) + ")"
    if isinstance(t, ArrayType):
        return f"[{render_type(t.elem)}; {t.length}]"
    if isinstance(t, OpaqueType):
        return t.text
    raise TypeError(f"cannot render type node {t!r}")


def render_segment(s: PathSegment) -> str:
    if isinstance(s.args, AngleArgs):
        return s.ident + "<" + ", ".join(render_generic_arg(a) for a in s.args.args) + ">"
    if isinstance(s.args, ParenArgs):
        out = s.ident + "(" + ", ".join(render_type(t) for t in s.args.inputs) + ")"
        if s.args.output is not None:
            out += f" -> {render_type(s.args.output)}"
        return out
    return s.ident


def render_generic_arg(a: GenericArg) -> str:
    if isinstance(a, LifetimeArg):
        return a.name
    if isinstance(a, (ConstArg, ConstraintArg)):
        return a.text
    if isinstance(a, BindingArg):
        return f"{a.name} = {render_type(a.ty)}"
    return render_type(a)


def render_generic_args(args: Sequence[GenericArg]) -> str:
    """`<A, B>`, or nothing at all for an empty list."""
    if not args:
        return ""
    return "<" + ", ".join(render_generic_arg(a) for a in args) + ">"


def render_bounds(bounds: Iterable[TypeExpr]) -> str:
    return " + ".join(render_type(b) for b in bounds)


def render_generic_param(p: GenericParam) -> str:
    if isinstance(p, LifetimeParam):
        return str(p)
    if isinstance(p, TypeParam):
        out = p.name
        if p.bounds:
            out += f": {render_bounds(p.bounds)}"
        if p.default is not None:
            out += f" = {render_type(p.default)}"
        return out
    if isinstance(p, ConstParam):
        out = f"const {p.name}: {render_type(p.ty)}"
        if p.default is not None:
            out += f" = {p.default}"
        return out
    raise TypeError(f"cannot render generic parameter {p!r}")


def render_generic_params(params: Sequence[GenericParam]) -> str:
    if not params:
        return ""
    return "<" + ", ".join(render_generic_param(p) for p in params) + ">"


def render_where(preds: Sequence[WherePredicate]) -> str:
    """` where A: B, C: D`, with its leading space, or nothing."""
    if not preds:
        return ""
    parts: List[str] = []
    for p in preds:
        head = f"{p.for_lifetimes} " if p.for_lifetimes else ""
        parts.append(f"{head}{render_type(p.bounded)}: {render_bounds(p.bounds)}".rstrip())
    return " where " + ", ".join(parts)


def render_attrs(attrs: Iterable[Attribute]) -> List[str]:
    return [a.text for a in attrs]


def join_words(*words: str) -> str:
    """Space-join the non-empty words, e.g. qualifiers in front of `fn`."""
    return " ".join(w for w in words if w)


class RustWriter:
    """Line-oriented writer with brace blocks and four-space indentation."""

    INDENT = "    "

    def __init__(self) -> None:
        self.lines: List[str] = []
        self._depth = 0

    def line(self, text: str = "") -> None:
        if not text:
            self.lines.append("")
            return
        for part in text.splitlines():
            self.lines.append(f"{self.INDENT * self._depth}{part}" if part.strip() else "")

    def lines_of(self, texts: Iterable[str]) -> None:
        for t in texts:
            self.line(t)

    @contextmanager
    def block(self, header: str, close: str = "}") -> Iterator["RustWriter"]:
        self.line(f"{header} {{")
        self._depth += 1
        try:
            yield self
        finally:
            self._depth -= 1
            self.line(close)

    def getvalue(self) -> str:
        return "\n".join(self.lines)
