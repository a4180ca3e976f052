from textwrap import dedent

import pytest

from statewrap.expand.context import ExpansionContext
from statewrap.expand.dispatch import expand_item
from statewrap.expand.exceptions import ReceiverOnFreeFunctionError, UnsupportedParameterError
from statewrap.expand.macro_fn import macro_fn


def test_free_function_is_specialized(item, directive) -> None:
    ctx = ExpansionContext(directive('visibility = "pub", transition_idle, S = Idle'))

    out = macro_fn(ctx, item("fn transition<S: State>(m: Machine<S>) -> Report<S> { Report::new(m) }"))

    assert out == dedent("""\
        pub fn transition_idle(m: Machine<Idle>) -> Report<Idle> {
            let res = transition::<Idle>(m);
            res
        }""")


def test_non_generic_function_is_called_without_turbofish(item, directive) -> None:
    ctx = ExpansionContext(directive("py_version"))

    out = macro_fn(ctx, item("pub fn version() -> &'static str { \"1.0\" }"))

    assert out.splitlines()[0] == "fn py_version() -> &'static str {"
    assert "let res = version();" in out


def test_self_return_is_not_converted(item, directive) -> None:
    ctx = ExpansionContext(directive("make_u8, T = u8"))

    out = macro_fn(ctx, item("fn make<T>(value: T) -> Option<T> { Some(value) }"))

    assert "fn make_u8(value: u8) -> Option<u8> {" in out
    assert "res.into()" not in out


def test_async_function_awaits_the_original(item, directive) -> None:
    ctx = ExpansionContext(directive("fetch_text, T = String"))

    out = macro_fn(ctx, item("pub async fn fetch<T: Parse>(url: &str) -> T { todo!() }"))

    assert "async fn fetch_text(url: &str) -> String {" in out
    assert "let res = fetch::<String>(url).await;" in out


def test_attributes_are_copied(item, directive) -> None:
    ctx = ExpansionContext(directive("run_u8, T = u8"))

    out = macro_fn(ctx, item("#[inline]\nfn run<T>(_: T, n: usize) {}"))

    assert out.splitlines()[:2] == ["#[inline]", "fn run_u8(__arg0: u8, n: usize) {"]
    assert "let res = run::<u8>(__arg0, n);" in out


def test_const_parameters_pass_through(item, directive) -> None:
    ctx = ExpansionContext(directive("fill_u8, T = u8"))

    out = macro_fn(ctx, item("fn fill<T: Copy, const N: usize>(value: T) -> [T; N] { [value; N] }"))

    assert "fn fill_u8(value: u8) -> [u8; N] {" in out
    assert "let res = fill::<u8, N>(value);" in out


def test_receiver_is_rejected(item, directive) -> None:
    ctx = ExpansionContext(directive("step_idle, S = Idle"))

    with pytest.raises(ReceiverOnFreeFunctionError) as exc_info:
        macro_fn(ctx, item("fn step<S>(&mut self, s: S) -> S { s }"))

    assert exc_info.value.message == "a free function cannot take '&mut self'"


def test_lifetime_parameters_are_rejected(item, directive) -> None:
    ctx = ExpansionContext(directive("first_u8, T = u8"))

    with pytest.raises(UnsupportedParameterError):
        macro_fn(ctx, item("fn first<'a, T>(items: &'a [T]) -> &'a T { &items[0] }"))


def test_unmapped_parameters_are_reported(item, directive, reporter) -> None:
    out = expand_item(item("fn zip<A, B>(a: A, b: B) -> (A, B) { (a, b) }"), directive("zip_u8, A = u8"), reporter)

    assert "fn zip_u8(a: u8, b: __StateWrapUnresolvedGeneric) -> (u8, __StateWrapUnresolvedGeneric) {" in out
    assert reporter.codes == ["CE3004"]
    assert reporter.items[0].message == "no mapping for generic parameter(s) B of 'zip'"
