"""Type expression parsing."""
from __future__ import annotations
from typing import TYPE_CHECKING, Optional, Tuple

from lark import Tree, Token

from statewrap.syntax.ast import (
    TypeExpr, PathType, PathSegment, AngleArgs, ParenArgs, ReferenceType, TupleType,
    ArrayType, OpaqueType, GenericArg, LifetimeArg, ConstArg, BindingArg, ConstraintArg,
)
from statewrap.syntax.ast_builder.tree_navigation import (
    TYPE_NODE_NAMES, first_token, first_tree, first_type_node, has_token, type_nodes, trees,
)

if TYPE_CHECKING:
    from statewrap.syntax.ast_builder.builder import ASTBuilder


def parse_type(t: Tree, b: 'ASTBuilder') -> TypeExpr:
    """Parse any node produced by the `?type` rule."""
    if not isinstance(t, Tree) or t.data not in TYPE_NODE_NAMES:
        raise NotImplementedError(f"type: unexpected node {getattr(t, 'data', t)!r}")

    if t.data == "path_type":
        return parse_path_type(t, b)

    if t.data == "ref_type":
        lifetime = first_token(t.children, "LIFETIME")
        return ReferenceType(
            elem=parse_type(first_type_node(t.children), b),
            lifetime=str(lifetime) if lifetime is not None else None,
            mutable=has_token(t.children, "MUT"),
        )

    if t.data == "tuple_type":
        return TupleType(tuple(parse_type(c, b) for c in type_nodes(t.children)))

    if t.data == "array_type":
        return ArrayType(
            elem=parse_type(first_type_node(t.children), b),
            length=b.squashed(first_tree(t.children, "const_expr")),
        )

    return OpaqueType(b.squashed(t), t.data)


def parse_path_type(t: Tree, b: 'ASTBuilder') -> PathType:
    """path_type: PATH_SEP? path_segment ("::" path_segment)*"""
    assert t.data == "path_type"
    leading = bool(t.children) and isinstance(t.children[0], Token) and t.children[0].type == "PATH_SEP"
    segments = tuple(parse_path_segment(s, b) for s in trees(t.children, "path_segment"))
    return PathType(segments, leading_colon=leading)


def parse_path_segment(t: Tree, b: 'ASTBuilder') -> PathSegment:
    ident = next(c for c in t.children if isinstance(c, Token))
    angle = first_tree(t.children, "angle_args")
    if angle is not None:
        return PathSegment(str(ident), AngleArgs(parse_angle_args(angle, b)))
    paren = first_tree(t.children, "paren_args")
    if paren is not None:
        output = first_tree(paren.children, "paren_output")
        return PathSegment(str(ident), ParenArgs(
            inputs=tuple(parse_type(c, b) for c in type_nodes(paren.children)),
            output=parse_type(first_type_node(output.children), b) if output is not None else None,
        ))
    return PathSegment(str(ident))


def parse_angle_args(t: Tree, b: 'ASTBuilder') -> Tuple[GenericArg, ...]:
    return tuple(parse_generic_arg(a, b) for a in t.children if isinstance(a, Tree))


def parse_generic_arg(t: Tree, b: 'ASTBuilder') -> GenericArg:
    if t.data == "type_arg":
        return parse_type(t.children[0], b)
    if t.data == "lifetime_arg":
        return LifetimeArg(str(t.children[0]))
    if t.data == "const_arg":
        return ConstArg(b.squashed(t))
    if t.data == "binding_arg":
        name_tok = first_token(t.children, "IDENT")
        gat_args = _binding_args(t.children)
        name = str(name_tok) + (b.squashed(gat_args) if gat_args is not None else "")
        return BindingArg(name, parse_type(first_type_node(t.children), b))
    if t.data == "constraint_arg":
        return ConstraintArg(b.squashed(t))
    raise NotImplementedError(f"generic_arg: unexpected node {t.data!r}")


def _binding_args(children) -> Optional[Tree]:
    """Generic argument list attached to the name of a binding (`Item<'a> = T`)."""
    for c in children:
        if isinstance(c, Tree) and c.data in ("angle_args", "paren_args"):
            return c
    return None
