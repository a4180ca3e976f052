from textwrap import dedent

import pytest

from statewrap.expand.dispatch import expand_item
from statewrap.expand.exceptions import UnsupportedConstructError
from statewrap.expand.macro_impl import SelfKind, forwarded_params
from statewrap.expand.options import ExpandOptions
from statewrap.syntax.ast import Receiver


@pytest.fixture
def expand(item, directive, reporter):
    def _expand(source: str, args: str, options: ExpandOptions = None) -> str:
        return expand_item(item(dedent(source).strip()), directive(args), reporter, options)

    return _expand


def test_container_getter_is_forwarded_unconverted(expand, reporter) -> None:
    out = expand(
        """
        impl<T: Clone> Box<T> {
            fn get(&self) -> T {
                self.value.clone()
            }
        }
        """,
        "StringBox, T = String",
    )

    assert out == dedent("""\
        #[pyo3::pymethods]
        impl StringBox {
            fn get(&self) -> String {
                let res = self.inner.get();
                res
            }
        }""")
    assert reporter.items == []


def test_state_transition_is_converted_into_the_wrapper(expand, reporter) -> None:
    out = expand(
        """
        impl<A, B> PasswordManager<A, B> {
            pub fn authenticate(self) -> Self {
                PasswordManager { password: self.password, state: PhantomData }
            }
        }
        """,
        "PasswordManagerAuthPending, A = AuthPending, B = Authenticated",
    )

    assert out == dedent("""\
        #[pyo3::pymethods]
        impl PasswordManagerAuthPending {
            pub fn authenticate(self) -> PasswordManagerAuthPending {
                let res = self.inner.authenticate();
                res.into()
            }
        }""")
    assert reporter.items == []


def test_macro_item_fails_alone(expand, reporter) -> None:
    out = expand(
        """
        impl<S> Counter<S> {
            pub fn before(&self) -> u8 { 1 }
            accessors!(count);
            pub fn after(&mut self) -> u8 { 2 }
        }
        """,
        "CounterIdle, S = Idle",
    )

    assert reporter.codes == ["CE3001"]
    assert 'compile_error!("[CE3001] macro invocations are currently unsupported by py_state_machine");' in out
    assert "let res = self.inner.before();" in out
    assert "let res = self.inner.after();" in out


def test_bodyless_signature_is_reported(expand, reporter) -> None:
    out = expand(
        """
        impl<S> Counter<S> {
            fn declared(&self) -> u8;
            fn defined(&self) -> u8 { 0 }
        }
        """,
        "CounterIdle, S = Idle",
    )

    assert reporter.codes == ["CE3001"]
    assert "associated functions without a body are currently unsupported" in out
    assert "fn defined(&self) -> u8 {" in out


def test_static_method_calls_the_specialized_original(expand) -> None:
    out = expand(
        """
        impl<A, B> PasswordManager<A, B> {
            pub fn new(password: String) -> Self {
                PasswordManager { password, state: PhantomData }
            }
        }
        """,
        "PasswordManagerAuthPending, A = AuthPending, B = Authenticated",
    )

    assert "pub fn new(password: String) -> PasswordManagerAuthPending {" in out
    assert "let res = PasswordManager::<AuthPending, Authenticated>::new(password);" in out
    assert "res.into()" in out


def test_static_method_of_non_generic_type(expand) -> None:
    out = expand("impl Config { fn load() -> Self { Config } }", "PyConfig")

    assert "let res = Config::load();" in out


def test_trait_impl_has_no_methods_attribute(expand) -> None:
    out = expand(
        """
        impl<T: Clone> Clone for Cell<T> {
            fn clone(&self) -> Self { Cell { value: self.value.clone() } }
        }
        """,
        "CellU8, T = u8",
    )

    assert out.splitlines()[0] == "impl Clone for CellU8 {"
    assert "fn clone(&self) -> CellU8 {" in out
    assert "res.into()" in out


def test_trait_path_is_substituted(expand) -> None:
    out = expand(
        "impl<T> From<T> for Cell<T> { fn from(value: T) -> Self { Cell { value } } }",
        "CellU8, T = u8",
    )

    assert out.splitlines()[0] == "impl From<u8> for CellU8 {"
    assert "fn from(value: u8) -> CellU8 {" in out
    assert "let res = Cell::<u8>::from(value);" in out


def test_unsafe_impl_keeps_its_qualifier(expand) -> None:
    out = expand("unsafe impl<T> Send for Cell<T> {}", "CellU8, T = u8")

    assert out == "unsafe impl Send for CellU8 {\n}"


def test_methods_attribute_can_be_changed_or_dropped(expand) -> None:
    src = "impl<T> Cell<T> { fn get(&self) -> T { self.value } }"

    assert expand(src, "CellU8, T = u8", ExpandOptions(methods_attribute="pymethods")).startswith("#[pymethods]\n")
    assert expand(src, "CellU8, T = u8", ExpandOptions(methods_attribute="")).startswith("impl CellU8 {")


def test_method_generics_are_kept_and_shadow_the_mapping(expand) -> None:
    out = expand(
        """
        impl<T> Cell<T> {
            pub fn map<T, F: Fn(T) -> T>(self, value: T, f: F) -> T where F: Send { f(value) }
        }
        """,
        "CellU8, T = u8",
    )

    assert "pub fn map<T, F: Fn(T) -> T>(self, value: T, f: F) -> T where F: Send {" in out
    assert "let res = self.inner.map(value, f);" in out


def test_method_generics_see_the_outer_mapping(expand) -> None:
    out = expand(
        "impl<T> Cell<T> { fn with<F: FnOnce(&T) -> R, R>(&self, f: F) -> R { f(&self.value) } }",
        "CellU8, T = u8",
    )

    assert "fn with<F: FnOnce(&u8) -> R, R>(&self, f: F) -> R {" in out


def test_receiver_lifetimes_and_method_lifetimes_are_kept(expand, reporter) -> None:
    out = expand(
        "impl<T> Cell<T> { fn name<'a>(&'a self) -> &'a str { &self.name } }",
        "CellU8, T = u8",
    )

    assert "fn name<'a>(&'a self) -> &'a str {" in out
    assert reporter.items == []


def test_parameter_patterns(expand) -> None:
    out = expand(
        """
        impl<T> Cell<T> {
            fn set(&mut self, _: T, mut count: u32, (a, b): (T, T)) {}
        }
        """,
        "CellU8, T = u8",
    )

    assert "fn set(&mut self, __arg0: u8, mut count: u32, (a, b): (u8, u8)) {" in out
    assert "let res = self.inner.set(__arg0, count, (a, b));" in out


def test_qualifiers_and_async_delegation(expand) -> None:
    out = expand(
        """
        impl<T> Cell<T> {
            pub async fn fetch(&self) -> T { self.value }
            pub unsafe extern "C" fn raw(&self) -> u8 { 0 }
            pub const fn size(&self) -> usize { 1 }
        }
        """,
        "CellU8, T = u8",
    )

    assert "pub async fn fetch(&self) -> u8 {" in out
    assert "let res = self.inner.fetch().await;" in out
    assert 'pub unsafe extern "C" fn raw(&self) -> u8 {' in out
    assert "pub const fn size(&self) -> usize {" in out


def test_method_attributes_are_copied(expand) -> None:
    out = expand(
        """
        impl<T> Cell<T> {
            /// Current value.
            #[inline]
            pub fn get(&self) -> T { self.value }
        }
        """,
        "CellU8, T = u8",
    )

    assert "    /// Current value.\n    #[inline]\n    pub fn get(&self) -> u8 {" in out


def test_associated_consts_keep_their_declared_type(expand) -> None:
    out = expand(
        "impl<T> Cell<T> { pub const EMPTY: Option<T> = None; }",
        "CellU8, T = u8",
    )

    assert "pub const EMPTY: Option<T> = None;" in out


def test_associated_types_resolve_their_own_generics(expand) -> None:
    out = expand(
        "impl<T> Cell<T> { type Alias = Vec<u8>; }",
        "CellU8, T = u8",
    )

    assert "type Alias = Vec<u8>;" in out


def test_typed_receivers(expand, reporter) -> None:
    out = expand(
        """
        impl<T> Cell<T> {
            fn by_ref(self: &Self) -> u8 { 0 }
            fn by_mut(self: &mut Self) -> u8 { 0 }
            fn boxed(self: Box<Self>) -> u8 { 0 }
        }
        """,
        "CellU8, T = u8",
    )

    assert "fn by_ref(&self) -> u8 {" in out
    assert "fn by_mut(&mut self) -> u8 {" in out
    assert reporter.codes == ["CE3001"]
    assert "methods taking 'self: Box<Self>' are currently unsupported" in reporter.items[0].message


def test_typed_reference_receivers_keep_their_lifetime(expand, reporter) -> None:
    out = expand(
        """
        impl<T> Foo<T> {
            fn peek<'a>(self: &'a Self) -> &'a T { &self.t }
            fn poke<'a>(self: &'a mut Self) -> &'a mut T { &mut self.t }
        }
        """,
        "W, T = u8",
    )

    assert "fn peek<'a>(&'a self) -> &'a u8 {" in out
    assert "fn poke<'a>(&'a mut self) -> &'a mut u8 {" in out
    assert reporter.items == []


def test_unmapped_parameters_are_reported(expand, reporter) -> None:
    out = expand(
        "impl<A, B> Pair<A, B> { fn right(&self) -> &B { &self.right } }",
        "PairU8, A = u8",
    )

    assert "fn right(&self) -> &__StateWrapUnresolvedGeneric {" in out
    assert reporter.codes == ["CE3004"]
    assert reporter.items[0].message == "no mapping for generic parameter(s) B of 'Pair<A, B>'"


def test_unmapped_parameters_can_be_allowed(expand, reporter) -> None:
    expand(
        "impl<A, B> Pair<A, B> { fn right(&self) -> &B { &self.right } }",
        "PairU8, A = u8",
        ExpandOptions(allow_unresolved=True),
    )

    assert reporter.items == []


def test_non_path_self_type_is_an_internal_error(expand, reporter) -> None:
    out = expand("impl<T> [T] { fn len(&self) -> usize { 0 } }", "Slice, T = u8")

    assert reporter.codes == ["CE0001"]
    assert out.startswith('compile_error!("[CE0001] implementation target')


@pytest.mark.parametrize(
    ("receiver", "kind", "rendered"),
    [
        (None, SelfKind.NONE, ""),
        (Receiver(None), SelfKind.CONSUME, "self"),
        (Receiver(None, mutable=True), SelfKind.MUTABLE, "mut self"),
        (Receiver(None, reference=True), SelfKind.IMMUTABLE_REFERENCE, "&self"),
        (Receiver(None, reference=True, mutable=True), SelfKind.MUTABLE_REFERENCE, "&mut self"),
    ],
)
def test_self_kind_classification(receiver, kind: SelfKind, rendered: str) -> None:
    assert SelfKind.of(receiver) is kind
    assert kind.render() == rendered


def test_self_kind_renders_lifetimes_on_references_only() -> None:
    assert SelfKind.MUTABLE_REFERENCE.render("'a") == "&'a mut self"
    assert SelfKind.IMMUTABLE_REFERENCE.render("'a") == "&'a self"
    assert SelfKind.CONSUME.render("'a") == "self"


def test_self_kind_rejects_other_typed_receivers(ty) -> None:
    receiver = Receiver(None, ty=ty("Rc<Self>"), text="self: Rc<Self>")

    with pytest.raises(UnsupportedConstructError):
        SelfKind.of(receiver)


def test_forwarded_params_names_wildcards_by_position(item) -> None:
    fn = item("fn f(a: u8, _: u8, ref b: u8, _: u8) {}")

    assert forwarded_params(fn.sig.params) == [
        ("a", "a"), ("__arg1", "__arg1"), ("ref b", "b"), ("__arg3", "__arg3"),
    ]
