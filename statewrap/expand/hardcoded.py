"""Resolution of a declared generic parameter list into concrete arguments.

`struct Foo<A, B, const N: usize>` with {A → u8} resolves to
`<u8, __StateWrapUnresolvedGeneric, N>`.
"""
from __future__ import annotations
from typing import List, Optional, Sequence, Tuple

from statewrap.expand.exceptions import UnsupportedParameterError
from statewrap.expand.substitute import SENTINEL, SubstitutionMapping
from statewrap.syntax.ast import (
    GenericArg, GenericParam, LifetimeParam, TypeParam, ConstParam, PathType,
)
from statewrap.syntax.printer import render_generic_args


def resolve_generics(mapping: SubstitutionMapping, params: Sequence[GenericParam],
                     unresolved: Optional[List[str]] = None) -> Tuple[GenericArg, ...]:
    """One argument per declared parameter, in declared order.

    Type parameters take their mapped type, or SENTINEL when unmapped (the name
    is appended to `unresolved` when a list is given). Const parameters pass
    their own name through. Lifetime parameters raise UnsupportedParameterError.
    """
    out: List[GenericArg] = []
    for p in params:
        if isinstance(p, LifetimeParam):
            raise UnsupportedParameterError(p.loc, name=p.name)
        if isinstance(p, TypeParam):
            if p.name in mapping:
                out.append(mapping[p.name])
            else:
                if unresolved is not None and p.name not in unresolved:
                    unresolved.append(p.name)
                out.append(SENTINEL)
        elif isinstance(p, ConstParam):
            out.append(PathType.simple(p.name))
        else:
            raise TypeError(f"unhandled generic parameter {type(p).__name__}")
    return tuple(out)


def resolve_generics_text(mapping: SubstitutionMapping, params: Sequence[GenericParam],
                          unresolved: Optional[List[str]] = None) -> str:
    """Rendered form of resolve_generics: "<u8, N>", or "" for an empty list."""
    return render_generic_args(resolve_generics(mapping, params, unresolved))
