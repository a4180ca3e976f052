# syntax/ast.py
"""AST for the Rust subset consumed by the wrapper generator.

Type expressions are a closed family of frozen dataclasses so that the
substitution engine can dispatch on them exhaustively:

- PathType:      `Foo`, `std::vec::Vec<T>`, `Self`
- ReferenceType: `&'a mut T`
- TupleType:     `()`, `(T,)`, `(A, B)`
- ArrayType:     `[T; N]`
- OpaqueType:    every other form (slices, pointers, fn pointers, impl/dyn
                 traits, never, infer, parenthesised, qualified paths, macros),
                 kept as normalized source text

Items keep the source text of everything the generator re-emits verbatim
(attributes, patterns, bodies, initializers).
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from statewrap.internals.report import Span

# === Type expressions ===

@dataclass(frozen=True)
class TypeExpr:
    pass

@dataclass(frozen=True)
class LifetimeArg:
    name: str                     # "'a"

@dataclass(frozen=True)
class ConstArg:
    text: str                     # "3", "{ N + 1 }"

@dataclass(frozen=True)
class BindingArg:
    """Associated type binding inside angle brackets, e.g. `Item = T`."""
    name: str
    ty: TypeExpr

@dataclass(frozen=True)
class ConstraintArg:
    """Associated type constraint, e.g. `Item: Clone`. Kept as text."""
    text: str

GenericArg = Union[TypeExpr, LifetimeArg, ConstArg, BindingArg, ConstraintArg]

@dataclass(frozen=True)
class AngleArgs:
    args: Tuple[GenericArg, ...] = ()

@dataclass(frozen=True)
class ParenArgs:
    """Fn-sugar arguments, e.g. `(u8, u16) -> bool` in `Fn(u8, u16) -> bool`."""
    inputs: Tuple[TypeExpr, ...] = ()
    output: Optional[TypeExpr] = None

@dataclass(frozen=True)
class PathSegment:
    ident: str
    args: Optional[Union[AngleArgs, ParenArgs]] = None

@dataclass(frozen=True)
class PathType(TypeExpr):
    segments: Tuple[PathSegment, ...]
    leading_colon: bool = False

    @classmethod
    def simple(cls, name: str, args: Tuple[GenericArg, ...] = ()) -> "PathType":
        """Single-segment path, with angle-bracketed args when given."""
        return cls((PathSegment(name, AngleArgs(tuple(args)) if args else None),))

    @property
    def terminal(self) -> PathSegment:
        return self.segments[-1]

    @property
    def is_simple_name(self) -> bool:
        """True for a bare single-segment path without generic arguments."""
        return len(self.segments) == 1 and self.segments[0].args is None and not self.leading_colon

@dataclass(frozen=True)
class ReferenceType(TypeExpr):
    elem: TypeExpr
    lifetime: Optional[str] = None
    mutable: bool = False

@dataclass(frozen=True)
class TupleType(TypeExpr):
    elems: Tuple[TypeExpr, ...] = ()

@dataclass(frozen=True)
class ArrayType(TypeExpr):
    elem: TypeExpr
    length: str                   # length expression, verbatim

@dataclass(frozen=True)
class OpaqueType(TypeExpr):
    text: str
    kind: str = "other"           # grammar node name, e.g. "slice_type"

# === Generics ===

@dataclass(frozen=True)
class LifetimeParam:
    name: str
    bounds: Tuple[str, ...] = ()
    loc: Optional[Span] = field(default=None, compare=False)

    def __str__(self) -> str:
        if self.bounds:
            return f"{self.name}: {' + '.join(self.bounds)}"
        return self.name

@dataclass(frozen=True)
class TypeParam:
    name: str
    bounds: Tuple[TypeExpr, ...] = ()           # PathType for trait bounds, OpaqueType otherwise
    default: Optional[TypeExpr] = None
    loc: Optional[Span] = field(default=None, compare=False)

@dataclass(frozen=True)
class ConstParam:
    name: str
    ty: TypeExpr
    default: Optional[str] = None
    loc: Optional[Span] = field(default=None, compare=False)

GenericParam = Union[LifetimeParam, TypeParam, ConstParam]

@dataclass(frozen=True)
class WherePredicate:
    """`for<'a> T: Bound + 'a` or `'a: 'b`; lifetimes are OpaqueType."""
    bounded: TypeExpr
    bounds: Tuple[TypeExpr, ...] = ()
    for_lifetimes: str = ""

@dataclass(frozen=True)
class Generics:
    params: Tuple[GenericParam, ...] = ()
    where_clause: Tuple[WherePredicate, ...] = ()

    @property
    def type_param_names(self) -> Tuple[str, ...]:
        return tuple(p.name for p in self.params if isinstance(p, TypeParam))

# === Items ===

@dataclass
class Node:
    loc: Optional[Span]

@dataclass
class Attribute(Node):
    text: str                        # "#[inline]" or "/// docs"

@dataclass
class StructItem(Node):
    name: str
    generics: Generics
    attrs: List[Attribute] = field(default_factory=list)
    visibility: str = ""
    name_span: Optional[Span] = None

@dataclass
class EnumItem(Node):
    name: str
    generics: Generics
    attrs: List[Attribute] = field(default_factory=list)
    visibility: str = ""
    name_span: Optional[Span] = None

@dataclass
class Receiver(Node):
    """The `self` parameter of a method, as written."""
    reference: bool = False
    mutable: bool = False
    lifetime: Optional[str] = None
    ty: Optional[TypeExpr] = None    # explicit `self: Box<Self>`
    text: str = "self"

@dataclass
class FnParam(Node):
    pattern: str                     # pattern source, e.g. "mut count" or "(a, b)"
    ty: TypeExpr
    binding: Optional[str] = None    # bound identifier for `x`, `mut x`, `ref x`
    is_wildcard: bool = False        # `_`
    attrs: List[Attribute] = field(default_factory=list)

@dataclass
class FnSignature(Node):
    name: str
    generics: Generics = field(default_factory=Generics)
    receiver: Optional[Receiver] = None
    params: List[FnParam] = field(default_factory=list)
    ret: Optional[TypeExpr] = None
    constness: bool = False
    asyncness: bool = False
    unsafety: bool = False
    abi: Optional[str] = None        # "extern" or 'extern "C"'
    name_span: Optional[Span] = None

@dataclass
class FnItem(Node):
    sig: FnSignature
    body: str
    attrs: List[Attribute] = field(default_factory=list)
    visibility: str = ""

@dataclass
class ImplConst(Node):
    name: str
    ty: TypeExpr
    expr: str
    attrs: List[Attribute] = field(default_factory=list)
    visibility: str = ""

@dataclass
class ImplType(Node):
    name: str
    ty: TypeExpr
    generics: Generics = field(default_factory=Generics)
    attrs: List[Attribute] = field(default_factory=list)
    visibility: str = ""

@dataclass
class ImplFn(Node):
    sig: FnSignature
    body: str
    attrs: List[Attribute] = field(default_factory=list)
    visibility: str = ""

@dataclass
class ImplMacro(Node):
    path: str                        # "my_macro" or "crate::m"
    text: str

@dataclass
class ImplVerbatim(Node):
    """An impl item the grammar accepts but that has no Rust meaning to forward,
    such as a signature without a body."""
    text: str
    what: str

ImplMember = Union[ImplConst, ImplType, ImplFn, ImplMacro, ImplVerbatim]

@dataclass
class ImplBlock(Node):
    self_ty: TypeExpr
    generics: Generics = field(default_factory=Generics)
    trait_path: Optional[PathType] = None
    unsafety: bool = False
    items: List[ImplMember] = field(default_factory=list)
    attrs: List[Attribute] = field(default_factory=list)
    self_ty_span: Optional[Span] = None

Item = Union[StructItem, EnumItem, ImplBlock, FnItem]

# === Directive arguments ===

@dataclass
class DirectiveArg(Node):
    """One comma-separated argument of the directive, before validation.

    kind is one of "bare" (`Wrapper`), "type" (`T = String`),
    "literal" (`visibility = "pub"`) or "keyword" (`visibility = pub`).
    """
    kind: str
    key: str
    value: Optional[Union[TypeExpr, str]] = None
    text: str = ""
