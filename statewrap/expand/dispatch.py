"""Routes an annotated item to its transform and reports what went wrong.

This is the declaration boundary: every ExpansionError raised while
expanding one item ends here as a diagnostic, and the caller moves on to
the next annotated item.
"""
from __future__ import annotations
import sys
from typing import Optional

from statewrap.expand.context import ExpansionContext, compile_error
from statewrap.expand.directive import DirectiveArgs
from statewrap.expand.exceptions import ExpansionError, UnresolvedParameterError, UnsupportedItemError
from statewrap.expand.macro_enum import macro_enum
from statewrap.expand.macro_fn import macro_fn
from statewrap.expand.macro_impl import macro_impl
from statewrap.expand.macro_struct import macro_struct
from statewrap.expand.options import ExpandOptions
from statewrap.internals import errors as er
from statewrap.internals.report import Reporter, Span
from statewrap.syntax.ast import EnumItem, FnItem, ImplBlock, Item, StructItem
from statewrap.syntax.printer import render_type

SUPPORTED_KINDS = ("struct", "enum", "fn", "impl")


def report_expansion_error(reporter: Reporter, exc: ExpansionError) -> str:
    """Emit `exc` as a diagnostic and return the `compile_error!` that stands in for the output."""
    er.emit(reporter, er.ERR[exc.code], exc.span, **exc.params)
    return compile_error(exc)


def check_item_kind(kind: str, span: Optional[Span], directive: str) -> None:
    if kind not in SUPPORTED_KINDS:
        raise UnsupportedItemError(span, directive=directive, kind=kind)


def item_name(item: Item) -> str:
    if isinstance(item, ImplBlock):
        return render_type(item.self_ty)
    if isinstance(item, FnItem):
        return item.sig.name
    return item.name


def item_generics(item: Item):
    if isinstance(item, FnItem):
        return item.sig.generics
    return item.generics


def warn_unmatched_mapping(reporter: Reporter, item: Item, args: DirectiveArgs) -> None:
    """CW0002 for every mapped name that the item does not declare."""
    declared = {p.name for p in item_generics(item).params}
    for name in args.mapping:
        if name not in declared:
            er.emit(reporter, er.ERR.CW0002, args.mapping_spans.get(name), name=name, item=item_name(item))


def expand_item(item: Item, args: DirectiveArgs, reporter: Reporter,
                options: Optional[ExpandOptions] = None) -> str:
    """Generated declarations for one annotated item.

    Returns the text to insert after the original item. When the
    declaration cannot be expanded the text is a single `compile_error!`.
    """
    options = options or ExpandOptions()
    ctx = ExpansionContext(args, options)
    if options.verbose:
        kind = type(item).__name__.replace("Item", "").replace("Block", "").lower()
        print(f"  expanding {kind} {item_name(item)} -> {args.wrapper_name}", file=sys.stderr)

    warn_unmatched_mapping(reporter, item, args)
    try:
        if isinstance(item, StructItem):
            generated = macro_struct(ctx, item)
        elif isinstance(item, EnumItem):
            generated = macro_enum(ctx, item)
        elif isinstance(item, ImplBlock):
            generated = macro_impl(ctx, item)
        elif isinstance(item, FnItem):
            generated = macro_fn(ctx, item)
        else:
            raise TypeError(f"unhandled item {type(item).__name__}")
    except ExpansionError as e:
        for err in ctx.errors:
            report_expansion_error(reporter, err)
        return report_expansion_error(reporter, e)

    for err in ctx.errors:
        report_expansion_error(reporter, err)

    if ctx.unresolved and not options.allow_unresolved:
        names = ", ".join(ctx.unresolved)
        span = item.self_ty_span if isinstance(item, ImplBlock) else (
            item.sig.name_span if isinstance(item, FnItem) else item.name_span)
        report_expansion_error(reporter, UnresolvedParameterError(span, names=names, item=item_name(item)))
    return generated
