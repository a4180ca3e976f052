"""Main ASTBuilder orchestrator.

Turns lark parse trees of the item grammar into the dataclasses of
statewrap.syntax.ast. The builder delegates to per-area modules:

- Type parsing: statewrap.syntax.ast_builder.types
- Generic parameters and where clauses: statewrap.syntax.ast_builder.generics
- Items (struct, enum, fn, impl): statewrap.syntax.ast_builder.items
- Directive arguments: statewrap.syntax.ast_builder.directive

Trees are parsed from source with a blank prefix, so every node's
meta.start_pos / meta.end_pos index straight into the full source text
held by the builder.
"""
from __future__ import annotations
import re
from typing import List, Optional, Union

from lark import Tree, Token

from statewrap.syntax.ast import DirectiveArg, Item, TypeExpr

_CHAR_LITERAL = re.compile(r"'(?:[^\W\d]\w*)'|'\\|'\W")


class ASTBuilder:
    def __init__(self, source: str):
        self.source = source

    # --- source text helpers ---

    def text(self, node: Union[Tree, Token]) -> str:
        """Exact source text covered by a tree or token."""
        if isinstance(node, Token):
            return str(node)
        meta = node.meta
        if getattr(meta, "empty", True):
            return ""
        return self.source[meta.start_pos:meta.end_pos]

    def squashed(self, node: Union[Tree, Token]) -> str:
        """Source text with runs of whitespace folded to one space.

        Text holding comments or literals is only stripped, since folding a
        newline would change its meaning.
        """
        raw = self.text(node)
        if "//" in raw or "/*" in raw or '"' in raw or ("'" in raw and not _lifetimes_only(raw)):
            return raw.strip()
        return " ".join(raw.split())

    # --- entry points ---

    def build_item(self, tree: Tree) -> Item:
        from statewrap.syntax.ast_builder import items
        assert isinstance(tree, Tree) and tree.data == "item"
        return items.parse_item(tree, self)

    def build_directive_args(self, tree: Tree) -> List[DirectiveArg]:
        from statewrap.syntax.ast_builder import directive
        assert isinstance(tree, Tree) and tree.data == "directive_args"
        return directive.parse_directive_args(tree, self)

    def build_type_expr(self, tree: Tree) -> TypeExpr:
        assert isinstance(tree, Tree) and tree.data == "type_expr"
        return self.parse_type(tree.children[0])

    # --- shared delegations ---

    def parse_type(self, t: Tree) -> TypeExpr:
        from statewrap.syntax.ast_builder.types import parse_type
        return parse_type(t, self)

    def parse_optional_type(self, t: Optional[Tree]) -> Optional[TypeExpr]:
        return self.parse_type(t) if t is not None else None


def _lifetimes_only(raw: str) -> bool:
    """True when every quote in `raw` starts a lifetime like 'a (no char literals)."""
    return _CHAR_LITERAL.search(raw) is None
