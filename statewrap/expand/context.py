"""State carried through the expansion of one annotated declaration."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Collection, List

from statewrap.expand.directive import DirectiveArgs
from statewrap.expand.exceptions import ExpansionError
from statewrap.expand.hardcoded import resolve_generics_text
from statewrap.expand.options import ExpandOptions
from statewrap.expand.substitute import TypeSubstitutor
from statewrap.syntax.ast import GenericParam


@dataclass
class ExpansionContext:
    args: DirectiveArgs
    options: ExpandOptions = field(default_factory=ExpandOptions)
    errors: List[ExpansionError] = field(default_factory=list)  # per-item, non-fatal
    unresolved: List[str] = field(default_factory=list)         # unmapped parameter names

    @property
    def wrapper_name(self) -> str:
        return self.args.wrapper_name

    def substitutor(self, declared: Collection[str]) -> TypeSubstitutor:
        return TypeSubstitutor(self.args.mapping, self.wrapper_name, declared, self.unresolved)

    def resolve(self, params: Collection[GenericParam]) -> str:
        return resolve_generics_text(self.args.mapping, list(params), self.unresolved)


def compile_error_text(code: str, message: str) -> str:
    """A `compile_error!` invocation carrying a diagnostic, as an item."""
    msg = f"[{code}] {message}".replace("\\", "\\\\").replace('"', '\\"')
    return f'compile_error!("{msg}");'


def compile_error(exc: ExpansionError) -> str:
    return compile_error_text(exc.code, exc.message)
