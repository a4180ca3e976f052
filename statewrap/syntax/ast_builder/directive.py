"""Directive argument list parsing (the text between the attribute's parentheses)."""
from __future__ import annotations
from typing import TYPE_CHECKING, List

from lark import Tree

from statewrap.syntax.ast import DirectiveArg
from statewrap.syntax.ast_builder.items import parse_visibility
from statewrap.syntax.ast_builder.tree_navigation import first_token, first_tree, first_type_node
from statewrap.internals.report import span_of

if TYPE_CHECKING:
    from statewrap.syntax.ast_builder.builder import ASTBuilder


def parse_directive_args(t: Tree, b: 'ASTBuilder') -> List[DirectiveArg]:
    """directive_args: [directive_arg ("," directive_arg)* [","]]

    Values are left unvalidated; statewrap.expand.directive decides what is legal.
    """
    out: List[DirectiveArg] = []
    for arg in t.children:
        if not isinstance(arg, Tree):
            continue
        key = str(first_token(arg.children, "IDENT"))
        loc = span_of(arg)
        text = b.squashed(arg)
        if arg.data == "bare_arg":
            out.append(DirectiveArg(loc=loc, kind="bare", key=key, text=text))
        elif arg.data == "type_value_arg":
            out.append(DirectiveArg(loc=loc, kind="type", key=key,
                                    value=b.parse_type(first_type_node(arg.children)), text=text))
        elif arg.data == "literal_value_arg":
            lit = first_tree(arg.children, "literal")
            out.append(DirectiveArg(loc=loc, kind="literal", key=key, value=b.text(lit), text=text))
        elif arg.data == "keyword_value_arg":
            vis = parse_visibility(first_tree(arg.children, "visibility"), b)
            out.append(DirectiveArg(loc=loc, kind="keyword", key=key, value=vis, text=text))
        else:
            raise NotImplementedError(f"directive_args: unexpected node {arg.data!r}")
    return out
