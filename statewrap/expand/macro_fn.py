"""Fn transform: a specialized, non-generic copy of a free function.

    fn transition<S: State>(m: Machine<S>) -> Report<S> { ... }

with `#[py_state_machine(transition_idle, S = Idle)]` adds

    fn transition_idle(m: Machine<Idle>) -> Report<Idle> {
        let res = transition::<Idle>(m);
        res
    }
"""
from __future__ import annotations

from statewrap.expand.context import ExpansionContext
from statewrap.expand.exceptions import ReceiverOnFreeFunctionError
from statewrap.expand.macro_impl import render_signature
from statewrap.syntax.ast import FnItem
from statewrap.syntax.printer import RustWriter, render_attrs


def macro_fn(ctx: ExpansionContext, item: FnItem) -> str:
    sig = item.sig
    if sig.receiver is not None:
        raise ReceiverOnFreeFunctionError(sig.receiver.loc, receiver=sig.receiver.text)

    resolved = ctx.resolve(sig.generics.params)
    sub = ctx.substitutor(sig.generics.type_param_names)
    head, _, args = render_signature(sig, sub, "", ctx.wrapper_name,
                                     ctx.args.visibility.value, own_generics=False)
    call = f"{sig.name}{'::' + resolved if resolved else ''}({', '.join(args)})"
    if sig.asyncness:
        call += ".await"

    w = RustWriter()
    w.lines_of(render_attrs(item.attrs))
    with w.block(head):
        w.line(f"let res = {call};")
        w.line("res")
    return w.getvalue()
