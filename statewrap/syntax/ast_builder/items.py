"""Item parsing: struct, enum, fn and impl blocks."""
from __future__ import annotations
from typing import TYPE_CHECKING, List, Optional

from lark import Tree, Token

from statewrap.syntax.ast import (
    Attribute, StructItem, EnumItem, FnItem, FnSignature, FnParam, Receiver,
    ImplBlock, ImplMember, ImplConst, ImplType, ImplFn, ImplMacro, ImplVerbatim, Item,
    PathType,
)
from statewrap.syntax.ast_builder.generics import parse_generics
from statewrap.syntax.ast_builder.tree_navigation import (
    first_token, first_tree, first_type_node, has_token, trees,
)
from statewrap.internals.report import span_of

if TYPE_CHECKING:
    from statewrap.syntax.ast_builder.builder import ASTBuilder

_ITEM_KINDS = ("struct_item", "enum_item", "impl_item", "fn_item")
_MEMBER_KINDS = ("impl_const", "impl_type", "impl_fn", "impl_fn_decl")


def parse_item(t: Tree, b: 'ASTBuilder') -> Item:
    """item: outer_attr* visibility? (struct_item | enum_item | impl_item | fn_item)"""
    attrs = parse_attrs(t.children, b)
    vis = parse_visibility(first_tree(t.children, "visibility"), b)
    kind = next(trees(t.children, *_ITEM_KINDS), None)
    if kind is None:
        raise NotImplementedError("item: missing item body")

    if kind.data == "struct_item":
        name_tok = first_token(kind.children, "IDENT")
        return StructItem(
            loc=span_of(t),
            name=str(name_tok),
            generics=parse_generics(kind.children, b),
            attrs=attrs,
            visibility=vis,
            name_span=span_of(name_tok),
        )

    if kind.data == "enum_item":
        name_tok = first_token(kind.children, "IDENT")
        return EnumItem(
            loc=span_of(t),
            name=str(name_tok),
            generics=parse_generics(kind.children, b),
            attrs=attrs,
            visibility=vis,
            name_span=span_of(name_tok),
        )

    if kind.data == "fn_item":
        return FnItem(
            loc=span_of(t),
            sig=parse_fn_sig(first_tree(kind.children, "fn_sig"), b),
            body=b.text(first_tree(kind.children, "fn_body")),
            attrs=attrs,
            visibility=vis,
        )

    impl = parse_impl(kind, b)
    impl.attrs = attrs
    impl.loc = span_of(t)
    return impl


def parse_attrs(children: List[object], b: 'ASTBuilder') -> List[Attribute]:
    return [Attribute(loc=span_of(a), text=b.text(a).strip()) for a in trees(children, "outer_attr")]


def parse_visibility(t: Optional[Tree], b: 'ASTBuilder') -> str:
    """Normalized visibility text: "", "pub", "pub(crate)", "pub(in a::b)"..."""
    if t is None:
        return ""
    path = first_tree(t.children, "path_type")
    if path is not None:
        return f"pub(in {b.squashed(path)})"
    scope = first_token(t.children, "CRATE", "SUPER", "SELF")
    if scope is not None:
        return f"pub({scope})"
    return "pub"


# --- functions ---

def parse_fn_sig(t: Tree, b: 'ASTBuilder') -> FnSignature:
    """fn_sig: fn_qualifiers FN IDENT generic_params? "(" [fn_params] ")" return_type? where_clause?"""
    assert t.data == "fn_sig"
    quals = first_tree(t.children, "fn_qualifiers")
    qual_children = quals.children if quals is not None else []
    abi = first_tree(qual_children, "abi")

    name_tok = first_token(t.children, "IDENT")
    receiver: Optional[Receiver] = None
    params: List[FnParam] = []
    params_node = first_tree(t.children, "fn_params")
    if params_node is not None:
        for p in params_node.children:
            if not isinstance(p, Tree):
                continue
            if p.data in ("ref_self_param", "value_self_param"):
                receiver = parse_receiver(p, b)
            else:
                params.append(parse_typed_param(p, b))

    ret = first_tree(t.children, "return_type")
    return FnSignature(
        loc=span_of(t),
        name=str(name_tok),
        generics=parse_generics(t.children, b),
        receiver=receiver,
        params=params,
        ret=b.parse_type(first_type_node(ret.children)) if ret is not None else None,
        constness=has_token(qual_children, "CONST"),
        asyncness=has_token(qual_children, "ASYNC"),
        unsafety=has_token(qual_children, "UNSAFE"),
        abi=b.squashed(abi) if abi is not None else None,
        name_span=span_of(name_tok),
    )


def parse_receiver(t: Tree, b: 'ASTBuilder') -> Receiver:
    lifetime = first_token(t.children, "LIFETIME")
    mutable = has_token(t.children, "MUT")
    if t.data == "ref_self_param":
        parts = ["&"]
        if lifetime is not None:
            parts.append(f"{lifetime} ")
        if mutable:
            parts.append("mut ")
        return Receiver(
            loc=span_of(t), reference=True, mutable=mutable,
            lifetime=str(lifetime) if lifetime is not None else None,
            text="".join(parts) + "self",
        )
    ty_node = first_type_node(t.children)
    text = "mut self" if mutable else "self"
    if ty_node is not None:
        text += f": {b.squashed(ty_node)}"
    return Receiver(
        loc=span_of(t), reference=False, mutable=mutable,
        ty=b.parse_optional_type(ty_node), text=text,
    )


def parse_typed_param(t: Tree, b: 'ASTBuilder') -> FnParam:
    """typed_param: outer_attr* pattern ":" type"""
    pat = next(trees(t.children, "ident_pat", "wild_pat", "group_pat"))
    binding: Optional[str] = None
    if pat.data == "ident_pat":
        binding = str(first_token(pat.children, "IDENT"))
    return FnParam(
        loc=span_of(t),
        pattern=b.squashed(pat),
        ty=b.parse_type(first_type_node(t.children)),
        binding=binding,
        is_wildcard=pat.data == "wild_pat",
        attrs=parse_attrs(t.children, b),
    )


# --- impl blocks ---

def parse_impl(t: Tree, b: 'ASTBuilder') -> ImplBlock:
    """impl_item: UNSAFE? IMPL generic_params? impl_trait? type where_clause? "{" inner_attr* _impl_entry* "}" """
    assert t.data == "impl_item"
    trait_node = first_tree(t.children, "impl_trait")
    trait_path: Optional[PathType] = None
    if trait_node is not None:
        trait_path = b.parse_type(first_tree(trait_node.children, "path_type"))  # type: ignore[assignment]

    self_node = first_type_node(t.children)
    items: List[ImplMember] = []
    for entry in trees(t.children, "impl_member", "impl_macro"):
        if entry.data == "impl_macro":
            path = "::".join(str(tok) for tok in entry.children if isinstance(tok, Token) and tok.type == "IDENT")
            items.append(ImplMacro(loc=span_of(entry), path=path, text=b.text(entry).strip()))
        else:
            items.append(parse_impl_member(entry, b))

    return ImplBlock(
        loc=span_of(t),
        self_ty=b.parse_type(self_node),
        generics=parse_generics(t.children, b),
        trait_path=trait_path,
        unsafety=has_token(t.children, "UNSAFE"),
        items=items,
        self_ty_span=span_of(self_node),
    )


def parse_impl_member(t: Tree, b: 'ASTBuilder') -> ImplMember:
    """impl_member: outer_attr* visibility? (impl_const | impl_type | impl_fn | impl_fn_decl)"""
    attrs = parse_attrs(t.children, b)
    vis = parse_visibility(first_tree(t.children, "visibility"), b)
    kind = next(trees(t.children, *_MEMBER_KINDS))
    loc = span_of(t)

    if kind.data == "impl_const":
        name_tok = first_token(kind.children, "IDENT", "UNDERSCORE")
        return ImplConst(
            loc=loc, name=str(name_tok),
            ty=b.parse_type(first_type_node(kind.children)),
            expr=b.text(first_tree(kind.children, "const_expr")).strip(),
            attrs=attrs, visibility=vis,
        )

    if kind.data == "impl_type":
        name_tok = first_token(kind.children, "IDENT")
        return ImplType(
            loc=loc, name=str(name_tok),
            ty=b.parse_type(first_type_node(kind.children)),
            generics=parse_generics(kind.children, b),
            attrs=attrs, visibility=vis,
        )

    if kind.data == "impl_fn":
        return ImplFn(
            loc=loc,
            sig=parse_fn_sig(first_tree(kind.children, "fn_sig"), b),
            body=b.text(first_tree(kind.children, "fn_body")),
            attrs=attrs, visibility=vis,
        )

    return ImplVerbatim(loc=loc, text=b.text(t).strip(), what="associated functions without a body")
