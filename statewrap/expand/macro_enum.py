"""Enum transform. An enum is wrapped exactly like a struct."""
from __future__ import annotations

from statewrap.expand.context import ExpansionContext
from statewrap.expand.macro_struct import generate_wrapper_type
from statewrap.syntax.ast import EnumItem


def macro_enum(ctx: ExpansionContext, item: EnumItem) -> str:
    return generate_wrapper_type(ctx, item.name, item.generics.params)
