# expand/macro_impl.py
"""
Impl transform: forwards every item of an implementation block to the wrapper.

    impl<A, B> PasswordManager<A, B> {
        pub fn authenticate(self) -> Self { ... }
    }

with `PasswordManagerAuthPending, A = AuthPending, B = Authenticated` adds

    #[pyo3::pymethods]
    impl PasswordManagerAuthPending {
        pub fn authenticate(self) -> PasswordManagerAuthPending {
            let res = self.inner.authenticate();
            res.into()
        }
    }
"""
from __future__ import annotations
from enum import Enum
from typing import List, Optional

from statewrap.expand.context import ExpansionContext, compile_error
from statewrap.expand.exceptions import (
    InternalInconsistencyError, UnsupportedConstructError,
)
from statewrap.expand.substitute import SELF_ALIAS, TypeSubstitutor
from statewrap.syntax.ast import (
    ImplBlock, ImplMember, ImplConst, ImplType, ImplFn, ImplMacro, ImplVerbatim,
    FnSignature, FnParam, Receiver, PathType, ReferenceType, TypeParam, ConstParam,
)
from statewrap.syntax.printer import (
    RustWriter, join_words, render_attrs, render_generic_params, render_type, render_where,
)


class SelfKind(Enum):
    """How a method receives its instance."""
    NONE = "none"
    CONSUME = "self"
    IMMUTABLE_REFERENCE = "&self"
    MUTABLE_REFERENCE = "&mut self"
    MUTABLE = "mut self"

    @classmethod
    def of(cls, receiver: Optional[Receiver], directive: str = "py_state_machine") -> "SelfKind":
        """Classify a receiver. Typed receivers are accepted when the type is
        `Self`, `&Self` or `&mut Self`; `self: Box<Self>` and the like raise
        UnsupportedConstructError."""
        if receiver is None:
            return cls.NONE
        if receiver.ty is not None:
            ty = receiver.ty
            if _is_self(ty):
                return cls.MUTABLE if receiver.mutable else cls.CONSUME
            if isinstance(ty, ReferenceType) and _is_self(ty.elem):
                return cls.MUTABLE_REFERENCE if ty.mutable else cls.IMMUTABLE_REFERENCE
            raise UnsupportedConstructError(receiver.loc, construct=f"methods taking '{receiver.text}'",
                                            directive=directive)
        if receiver.reference:
            return cls.MUTABLE_REFERENCE if receiver.mutable else cls.IMMUTABLE_REFERENCE
        return cls.MUTABLE if receiver.mutable else cls.CONSUME

    def render(self, lifetime: Optional[str] = None) -> str:
        """Receiver text for the delegation, keeping an explicit lifetime."""
        if lifetime and self in (SelfKind.IMMUTABLE_REFERENCE, SelfKind.MUTABLE_REFERENCE):
            return self.value.replace("&", f"&{lifetime} ", 1)
        return "" if self is SelfKind.NONE else self.value


def _is_self(ty) -> bool:
    return isinstance(ty, PathType) and ty.is_simple_name and ty.terminal.ident == SELF_ALIAS


def receiver_lifetime(receiver: Optional[Receiver]) -> Optional[str]:
    """Lifetime of `&'a self`, or of the reference in `self: &'a Self`."""
    if receiver is None:
        return None
    if isinstance(receiver.ty, ReferenceType):
        return receiver.ty.lifetime
    return receiver.lifetime


def macro_impl(ctx: ExpansionContext, item: ImplBlock) -> str:
    """Generate the wrapper's implementation block."""
    if not isinstance(item.self_ty, PathType):
        raise InternalInconsistencyError(item.self_ty_span, ty=render_type(item.self_ty))
    original = item.self_ty.terminal.ident
    sub = ctx.substitutor(item.generics.type_param_names)

    w = RustWriter()
    trait = ""
    if item.trait_path is not None:
        trait = render_type(sub.substitute_type(item.trait_path).ty) + " for "
    elif ctx.options.methods_attribute:
        w.line(ctx.options.attribute(ctx.options.methods_attribute))

    header = join_words("unsafe" if item.unsafety else "", f"impl {trait}{ctx.wrapper_name}")
    with w.block(header):
        for i, member in enumerate(item.items):
            if i:
                w.line()
            try:
                w.line(generate_impl_item(ctx, sub, member, original, item))
            except UnsupportedConstructError as e:
                ctx.errors.append(e)
                w.line(compile_error(e))
    return w.getvalue()


def generate_impl_item(ctx: ExpansionContext, sub: TypeSubstitutor, member: ImplMember,
                       original: str, impl: ImplBlock) -> str:
    if isinstance(member, ImplConst):
        # Re-emitted as written, including its declared type.
        lines = render_attrs(member.attrs)
        vis = f"{member.visibility} " if member.visibility else ""
        lines.append(f"{vis}const {member.name}: {render_type(member.ty)} = {member.expr};")
        return "\n".join(lines)

    if isinstance(member, ImplType):
        lines = render_attrs(member.attrs)
        vis = f"{member.visibility} " if member.visibility else ""
        generics = ctx.resolve(member.generics.params)
        lines.append(f"{vis}type {member.name} = {render_type(member.ty)}{generics};")
        return "\n".join(lines)

    if isinstance(member, ImplFn):
        return generate_method(ctx, sub, member, original, impl)

    if isinstance(member, ImplMacro):
        raise UnsupportedConstructError(member.loc, construct="macro invocations",
                                        directive=ctx.options.directive)

    if isinstance(member, ImplVerbatim):
        raise UnsupportedConstructError(member.loc, construct=member.what,
                                        directive=ctx.options.directive)

    raise TypeError(f"unhandled impl item {type(member).__name__}")


def forwarded_params(params: List[FnParam]) -> List[tuple[str, str]]:
    """(pattern, argument) pairs for a parameter list.

    `mut x` forwards `x`; `_` is renamed to `__argN` on both sides; any other
    pattern forwards its own text.
    """
    out = []
    for i, p in enumerate(params):
        if p.is_wildcard:
            name = f"__arg{i}"
            out.append((name, name))
        elif p.binding is not None:
            out.append((p.pattern, p.binding))
        else:
            out.append((p.pattern, p.pattern))
    return out


def render_signature(sig: FnSignature, sub: TypeSubstitutor, receiver: str, name: str,
                     visibility: str, own_generics: bool = True) -> tuple[str, bool, List[str]]:
    """Delegation signature line (without the opening brace).

    Returns the line, whether the return value needs converting into the
    wrapper, and the forwarded argument list.
    Method generics (`own_generics`) are carried over and shadow the
    mapping; a free function's generics are what is being specialized, so
    they are neither.
    """
    scope = sub
    if own_generics:
        scope = sub.shadowing([p.name for p in sig.generics.params if isinstance(p, (TypeParam, ConstParam))])

    inputs = [receiver] if receiver else []
    args: List[str] = []
    for p, (pattern, arg) in zip(sig.params, forwarded_params(sig.params)):
        ty = scope.substitute_type(p.ty, is_return_context=False).ty
        attrs = "".join(f"{a.text} " for a in p.attrs)
        inputs.append(f"{attrs}{pattern}: {render_type(ty)}")
        args.append(arg)

    ret = ""
    needs_wrap = False
    if sig.ret is not None:
        result = scope.substitute_type(sig.ret, is_return_context=True)
        ret = f" -> {render_type(result.ty)}"
        needs_wrap = result.needs_wrap

    generics = where = ""
    if own_generics:
        carried = scope.substitute_generics(sig.generics)
        generics = render_generic_params(carried.params)
        where = render_where(carried.where_clause)

    head = join_words(
        visibility,
        "const" if sig.constness else "",
        "async" if sig.asyncness else "",
        "unsafe" if sig.unsafety else "",
        sig.abi or "",
        f"fn {name}{generics}({', '.join(inputs)}){ret}{where}",
    )
    return head, needs_wrap, args


def generate_method(ctx: ExpansionContext, sub: TypeSubstitutor, f: ImplFn,
                    original: str, impl: ImplBlock) -> str:
    sig = f.sig
    kind = SelfKind.of(sig.receiver, ctx.options.directive)
    head, needs_wrap, args = render_signature(sig, sub, kind.render(receiver_lifetime(sig.receiver)),
                                              sig.name, f.visibility)

    if kind is SelfKind.NONE:
        target = f"{original}::{ctx.resolve(impl.generics.params)}::" if impl.generics.params else f"{original}::"
    else:
        target = "self.inner."
    call = f"{target}{sig.name}({', '.join(args)})"
    if sig.asyncness:
        call += ".await"

    w = RustWriter()
    w.lines_of(render_attrs(f.attrs))
    with w.block(head):
        w.line(f"let res = {call};")
        w.line("res.into()" if needs_wrap else "res")
    return w.getvalue()
