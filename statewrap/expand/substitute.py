# expand/substitute.py
"""
Generic substitution for wrapper signatures.

Rewrites a type expression taken from the original declaration into the type
the wrapper exposes:
- `Self` becomes the wrapper name
- a mapped generic parameter becomes its concrete type (T → String)
- an unmapped generic parameter of the declaration becomes the sentinel
- everything else is kept, with generic arguments rewritten recursively

Alongside the rewritten type the substitutor reports whether a returned value
must be converted into the wrapper. That is only the case when the outermost
form of the return type is `Self` itself: `Option<Self>`, `&Self` and
`(Self, u8)` are renamed but returned as computed.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Collection, FrozenSet, List, Mapping, Optional, Tuple

from statewrap.syntax.ast import (
    TypeExpr, PathType, PathSegment, AngleArgs, ParenArgs, ReferenceType, TupleType, ArrayType,
    OpaqueType, GenericArg, BindingArg, Generics, GenericParam, TypeParam, ConstParam,
    WherePredicate,
)

SELF_ALIAS = "Self"

# Names no type; any signature still referring to an unmapped parameter
# fails in the host compiler.
SENTINEL_NAME = "__StateWrapUnresolvedGeneric"
SENTINEL = PathType.simple(SENTINEL_NAME)

SubstitutionMapping = Mapping[str, TypeExpr]


@dataclass(frozen=True)
class SubstitutionResult:
    ty: TypeExpr
    needs_wrap: bool = False


class TypeSubstitutor:
    """Substitutes generic parameters in the types of one declaration.

    Args:
        mapping: generic parameter name to concrete type
        wrapper_name: identifier that replaces `Self`
        declared: type parameter names declared by the annotated item; unmapped
                  ones are replaced with SENTINEL and recorded in `unresolved`
    """

    def __init__(self, mapping: SubstitutionMapping, wrapper_name: str,
                 declared: Collection[str] = (), unresolved: Optional[List[str]] = None):
        self.mapping = mapping
        self.wrapper_name = wrapper_name
        self.declared: FrozenSet[str] = frozenset(declared)
        self.unresolved: List[str] = unresolved if unresolved is not None else []

    def shadowing(self, names: Collection[str]) -> "TypeSubstitutor":
        """Substitutor for a scope that declares its own generic `names`
        (a method's generic list); those names are left untouched."""
        if not names:
            return self
        hidden = set(names)
        mapping = {k: v for k, v in self.mapping.items() if k not in hidden}
        return TypeSubstitutor(mapping, self.wrapper_name, self.declared - hidden, self.unresolved)

    def _note_unresolved(self, name: str) -> None:
        if name not in self.unresolved:
            self.unresolved.append(name)

    # --- types ---

    def substitute_type(self, ty: TypeExpr, is_return_context: bool = False) -> SubstitutionResult:
        if isinstance(ty, PathType):
            return self._substitute_path(ty, is_return_context)

        # Qualifiers are kept; whatever the element computed, the outer form never wraps.
        if isinstance(ty, ReferenceType):
            elem = self.substitute_type(ty.elem, is_return_context).ty
            return SubstitutionResult(ReferenceType(elem, ty.lifetime, ty.mutable))

        if isinstance(ty, TupleType):
            elems = tuple(self.substitute_type(e, is_return_context).ty for e in ty.elems)
            return SubstitutionResult(TupleType(elems))

        if isinstance(ty, ArrayType):
            elem = self.substitute_type(ty.elem, is_return_context).ty
            return SubstitutionResult(ArrayType(elem, ty.length))

        if isinstance(ty, OpaqueType):
            return SubstitutionResult(ty)

        raise TypeError(f"unhandled type expression {type(ty).__name__}")

    def _substitute_path(self, ty: PathType, is_return_context: bool) -> SubstitutionResult:
        terminal = ty.terminal
        needs_wrap = False

        if terminal.ident == SELF_ALIAS:
            needs_wrap = is_return_context
            ty = PathType(ty.segments[:-1] + (PathSegment(self.wrapper_name, terminal.args),),
                          ty.leading_colon)
        elif terminal.ident in self.mapping:
            return SubstitutionResult(self.mapping[terminal.ident])
        elif ty.is_simple_name and terminal.ident in self.declared:
            self._note_unresolved(terminal.ident)
            return SubstitutionResult(SENTINEL)

        # Nested results never change this frame's needs_wrap.
        segments = tuple(self._substitute_segment(s, is_return_context) for s in ty.segments)
        return SubstitutionResult(PathType(segments, ty.leading_colon), needs_wrap)

    def _substitute_segment(self, seg: PathSegment, is_return_context: bool) -> PathSegment:
        if isinstance(seg.args, AngleArgs):
            args = tuple(self._substitute_arg(a, is_return_context) for a in seg.args.args)
            return PathSegment(seg.ident, AngleArgs(args))
        if isinstance(seg.args, ParenArgs):
            inputs = tuple(self.substitute_type(t, is_return_context).ty for t in seg.args.inputs)
            output = seg.args.output
            if output is not None:
                output = self.substitute_type(output, is_return_context).ty
            return PathSegment(seg.ident, ParenArgs(inputs, output))
        return seg

    def _substitute_arg(self, arg: GenericArg, is_return_context: bool) -> GenericArg:
        if isinstance(arg, TypeExpr):
            return self.substitute_type(arg, is_return_context).ty
        if isinstance(arg, BindingArg):
            return BindingArg(arg.name, self.substitute_type(arg.ty, is_return_context).ty)
        return arg

    # --- generic lists ---

    def substitute_generics(self, generics: Generics) -> Generics:
        """Substitute inside bounds, defaults and where predicates of a generic list.

        Parameter names stay as declared.
        """
        params: List[GenericParam] = []
        for p in generics.params:
            if isinstance(p, TypeParam):
                default = self.substitute_type(p.default).ty if p.default is not None else None
                params.append(TypeParam(p.name, self._substitute_bounds(p.bounds), default, p.loc))
            elif isinstance(p, ConstParam):
                params.append(ConstParam(p.name, self.substitute_type(p.ty).ty, p.default, p.loc))
            else:
                params.append(p)
        where = tuple(
            WherePredicate(self.substitute_type(w.bounded).ty, self._substitute_bounds(w.bounds),
                           w.for_lifetimes)
            for w in generics.where_clause
        )
        return Generics(tuple(params), where)

    def _substitute_bounds(self, bounds: Tuple[TypeExpr, ...]) -> Tuple[TypeExpr, ...]:
        return tuple(self.substitute_type(b).ty for b in bounds)


def substitute(mapping: SubstitutionMapping, ty: TypeExpr, wrapper_name: str,
               is_return_context: bool = False) -> SubstitutionResult:
    """Substitute with no knowledge of the declaration's parameter list."""
    return TypeSubstitutor(mapping, wrapper_name).substitute_type(ty, is_return_context)
