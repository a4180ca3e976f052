"""Validation of the directive's arguments.

    #[py_state_machine(visibility = "pub", PasswordManagerAuthPending, A = AuthPending, B = Authenticated)]

The optional `visibility` comes first, then the wrapper name, then one
`Param = Type` pair per mapped generic parameter.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

from statewrap.expand.exceptions import DirectiveSyntaxError
from statewrap.expand.substitute import SubstitutionMapping
from statewrap.internals.report import Span
from statewrap.syntax.ast import DirectiveArg, TypeExpr

VISIBILITY_KEY = "visibility"


class Visibility(Enum):
    PRIVATE = ""
    PUBLIC = "pub"
    CRATE = "pub(crate)"
    SUPER = "pub(super)"

    @classmethod
    def from_literal(cls, literal: str, span: Optional[Span] = None) -> "Visibility":
        """Accepts exactly "pub", "pub(crate)" and "pub(super)"."""
        for v in (cls.PUBLIC, cls.CRATE, cls.SUPER):
            if v.value == literal:
                return v
        raise DirectiveSyntaxError(span, code="CE2004", literal=literal)

    @property
    def prefix(self) -> str:
        """Text in front of `struct`/`fn`, with its trailing space."""
        return f"{self.value} " if self.value else ""


@dataclass(frozen=True)
class DirectiveArgs:
    wrapper_name: str
    visibility: Visibility = Visibility.PRIVATE
    mapping: SubstitutionMapping = field(default_factory=lambda: MappingProxyType({}))
    mapping_spans: Mapping[str, Optional[Span]] = field(default_factory=lambda: MappingProxyType({}))
    span: Optional[Span] = None


def _string_literal(arg: DirectiveArg) -> str:
    """Contents of a plain "..." literal; anything else is not a visibility."""
    text = arg.value if isinstance(arg.value, str) else ""
    if arg.kind != "literal" or len(text) < 2 or not (text.startswith('"') and text.endswith('"')):
        raise DirectiveSyntaxError(arg.loc, code="CE2003")
    return text[1:-1]


def parse_directive(args: List[DirectiveArg], span: Optional[Span] = None) -> DirectiveArgs:
    """Validate parsed arguments into DirectiveArgs.

    Raises DirectiveSyntaxError anchored at the offending argument, or at
    `span` (the whole attribute) when the wrapper name is missing.
    """
    rest = list(args)
    visibility = Visibility.PRIVATE

    if rest and rest[0].key == VISIBILITY_KEY and rest[0].kind != "bare":
        first = rest.pop(0)
        visibility = Visibility.from_literal(_string_literal(first), first.loc)

    if not rest:
        raise DirectiveSyntaxError(span, code="CE2001")
    name_arg = rest.pop(0)
    if name_arg.kind != "bare":
        raise DirectiveSyntaxError(name_arg.loc, code="CE2001")

    mapping: Dict[str, TypeExpr] = {}
    spans: Dict[str, Optional[Span]] = {}
    for arg in rest:
        if arg.key == VISIBILITY_KEY:
            raise DirectiveSyntaxError(arg.loc, code="CE2006")
        if arg.kind == "literal":
            raise DirectiveSyntaxError(arg.loc, code="CE2007", name=arg.key)
        if arg.kind != "type":
            raise DirectiveSyntaxError(arg.loc, code="CE2002", text=arg.text)
        if arg.key in mapping:
            raise DirectiveSyntaxError(arg.loc, code="CE2005", name=arg.key)
        assert isinstance(arg.value, TypeExpr)
        mapping[arg.key] = arg.value
        spans[arg.key] = arg.loc

    return DirectiveArgs(
        wrapper_name=name_arg.key,
        visibility=visibility,
        mapping=MappingProxyType(mapping),
        mapping_spans=MappingProxyType(spans),
        span=span,
    )
