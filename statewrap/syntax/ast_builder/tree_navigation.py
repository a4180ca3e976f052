"""Tree navigation utilities for traversing Lark parse trees."""
from __future__ import annotations
from typing import Callable, Iterator, List, Optional
from lark import Tree, Token

# Tree tags produced by the `?type` rule of the grammar.
TYPE_NODE_NAMES = frozenset({
    "path_type", "ref_type", "tuple_type", "paren_type", "array_type", "slice_type",
    "ptr_type", "never_type", "infer_type", "fn_ptr_type", "qpath_type", "macro_type",
    "impl_trait_type", "dyn_trait_type",
})


def first(children: List[object], pred: Callable) -> Optional[object]:
    """Find first child matching predicate."""
    for ch in children:
        if pred(ch):
            return ch
    return None


def first_token(children: List[object], *types: str) -> Optional[Token]:
    """Get first token whose type is one of `types`."""
    return first(children, lambda c: isinstance(c, Token) and c.type in types)  # type: ignore[return-value]


def has_token(children: List[object], type_: str) -> bool:
    return first_token(children, type_) is not None


def first_tree(children: List[object], data: str) -> Optional[Tree]:
    """Get first Tree child with specific data tag."""
    return first(children, lambda c: isinstance(c, Tree) and c.data == data)  # type: ignore[return-value]


def trees(children: List[object], *data: str) -> Iterator[Tree]:
    """Iterate Tree children whose data tag is one of `data`."""
    for ch in children:
        if isinstance(ch, Tree) and ch.data in data:
            yield ch


def type_nodes(children: List[object]) -> List[Tree]:
    """All children that are type expressions, in order."""
    return [c for c in children if isinstance(c, Tree) and c.data in TYPE_NODE_NAMES]


def first_type_node(children: List[object]) -> Optional[Tree]:
    nodes = type_nodes(children)
    return nodes[0] if nodes else None
