"""Struct transform: the wrapper type and its conversion constructor."""
from __future__ import annotations
from typing import Sequence

from statewrap.expand.context import ExpansionContext
from statewrap.syntax.ast import GenericParam, StructItem
from statewrap.syntax.printer import RustWriter


def generate_wrapper_type(ctx: ExpansionContext, original: str, params: Sequence[GenericParam]) -> str:
    """Wrapper struct holding `original` instantiated with the resolved
    parameters, plus `From` and (unless disabled) `Deref`/`DerefMut`."""
    inner = f"{original}{ctx.resolve(params)}"
    name = ctx.wrapper_name
    opts = ctx.options

    w = RustWriter()
    if opts.class_attribute:
        w.line(opts.attribute(opts.class_attribute))
    with w.block(f"{ctx.args.visibility.prefix}struct {name}"):
        w.line(f"inner: {inner},")
    w.line()
    with w.block(f"impl From<{inner}> for {name}"):
        with w.block(f"fn from(inner: {inner}) -> Self"):
            w.line("Self { inner }")

    if opts.deref:
        w.line()
        with w.block(f"impl core::ops::Deref for {name}"):
            w.line(f"type Target = {inner};")
            with w.block("fn deref(&self) -> &Self::Target"):
                w.line("&self.inner")
        w.line()
        with w.block(f"impl core::ops::DerefMut for {name}"):
            with w.block("fn deref_mut(&mut self) -> &mut Self::Target"):
                w.line("&mut self.inner")
    return w.getvalue()


def macro_struct(ctx: ExpansionContext, item: StructItem) -> str:
    return generate_wrapper_type(ctx, item.name, item.generics.params)
