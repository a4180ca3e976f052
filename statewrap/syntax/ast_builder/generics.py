"""Generic parameter lists, bounds and where clauses."""
from __future__ import annotations
from typing import TYPE_CHECKING, List, Optional, Tuple

from lark import Tree, Token

from statewrap.syntax.ast import (
    Generics, GenericParam, LifetimeParam, TypeParam, ConstParam, WherePredicate,
    TypeExpr, OpaqueType,
)
from statewrap.syntax.ast_builder.tree_navigation import (
    first_token, first_tree, first_type_node, trees,
)
from statewrap.internals.report import span_of

if TYPE_CHECKING:
    from statewrap.syntax.ast_builder.builder import ASTBuilder


def parse_generics(children: List[object], b: 'ASTBuilder') -> Generics:
    """Collect the generic_params and where_clause children of an item node.

    An item may carry two where clauses (`type X<T> where T: A = U where U: B;`);
    their predicates are concatenated.
    """
    params_node = first_tree(children, "generic_params")
    params = parse_generic_params(params_node, b) if params_node is not None else ()
    where: List[WherePredicate] = []
    for w in trees(children, "where_clause"):
        where.extend(parse_where_clause(w, b))
    return Generics(params, tuple(where))


def parse_generic_params(t: Tree, b: 'ASTBuilder') -> Tuple[GenericParam, ...]:
    """generic_params: "<" [_generic_param ("," _generic_param)* [","]] ">" """
    assert t.data == "generic_params"
    out: List[GenericParam] = []
    for p in t.children:
        if not isinstance(p, Tree):
            continue
        if p.data == "lifetime_param":
            names = [str(tok) for tok in p.children if isinstance(tok, Token)]
            out.append(LifetimeParam(names[0], tuple(names[1:]), loc=span_of(p)))
        elif p.data == "type_param":
            name_tok = first_token(p.children, "IDENT")
            bounds_node = first_tree(p.children, "bounds")
            out.append(TypeParam(
                name=str(name_tok),
                bounds=parse_bounds(bounds_node, b) if bounds_node is not None else (),
                default=b.parse_optional_type(first_type_node(p.children)),
                loc=span_of(p),
            ))
        elif p.data == "const_param":
            name_tok = first_token(p.children, "IDENT")
            default = first_tree(p.children, "const_default")
            out.append(ConstParam(
                name=str(name_tok),
                ty=b.parse_type(first_type_node(p.children)),
                default=b.squashed(default) if default is not None else None,
                loc=span_of(p),
            ))
        else:
            raise NotImplementedError(f"generic_params: unexpected node {p.data!r}")
    return tuple(out)


def parse_bounds(t: Tree, b: 'ASTBuilder') -> Tuple[TypeExpr, ...]:
    """Trait bounds become path types so mapped parameters inside them can be
    substituted; every other bound form is kept as text."""
    assert t.data == "bounds"
    out: List[TypeExpr] = []
    for bound in t.children:
        if not isinstance(bound, Tree):
            continue
        if bound.data == "trait_bound":
            out.append(b.parse_type(first_tree(bound.children, "path_type")))
        else:
            out.append(OpaqueType(b.squashed(bound), bound.data))
    return tuple(out)


def parse_where_clause(t: Tree, b: 'ASTBuilder') -> List[WherePredicate]:
    assert t.data == "where_clause"
    preds: List[WherePredicate] = []
    for pred in trees(t.children, "type_pred", "lifetime_pred"):
        if pred.data == "type_pred":
            hrtb: Optional[Tree] = first_tree(pred.children, "for_lifetimes")
            bounds_node = first_tree(pred.children, "bounds")
            preds.append(WherePredicate(
                bounded=b.parse_type(first_type_node(pred.children)),
                bounds=parse_bounds(bounds_node, b) if bounds_node is not None else (),
                for_lifetimes=b.squashed(hrtb) if hrtb is not None else "",
            ))
        else:
            lts = [str(tok) for tok in pred.children if isinstance(tok, Token)]
            preds.append(WherePredicate(
                bounded=OpaqueType(lts[0], "lifetime"),
                bounds=tuple(OpaqueType(lt, "lifetime_bound") for lt in lts[1:]),
            ))
    return preds
