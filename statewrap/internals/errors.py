# internals/errors.py
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from statewrap.internals.report import Span, Reporter


class Severity(str, Enum):
    ERROR = "error"
    WARNING = "warning"


class Category(str, Enum):
    GENERAL   = "general"
    PARSE     = "parse"
    DIRECTIVE = "directive"
    EXPAND    = "expand"
    INTERNAL  = "internal"


@dataclass(frozen=True)
class ErrorMessage:
    code: str
    severity: Severity
    text: str
    category: Category = Category.GENERAL
    doc: str = ""


REGISTRY: Dict[str, ErrorMessage] = {}

class _ErrorCatalog:
    def __init__(self, backing: Dict[str, ErrorMessage]) -> None:
        self._registry = backing

    def __getattr__(self, name: str) -> ErrorMessage:
        try:
            return self._registry[name]
        except KeyError as e:
            raise AttributeError(name) from e

    def __getitem__(self, code: str) -> ErrorMessage:
        return self._registry[code]


ERR = _ErrorCatalog(REGISTRY)

def emit(r: Reporter, em: ErrorMessage, span: Optional[Span], **kwargs) -> None:
    text = format_message(em.code, **kwargs)
    if em.severity == Severity.ERROR:
        r.error(em.code, text, span)
    else:
        r.warn(em.code, text, span)

def format_message(code: str, **kwargs) -> str:
    msg = _get(code)
    try:
        return msg.text.format(**kwargs)
    except KeyError as key_error:
        missing = key_error.args[0]
        raise KeyError(f"missing text key '{missing}' for {code} "
                       f"(needed by: {msg.text!r})") from None


#
# --- Helpers
#

def _add(msg: ErrorMessage) -> None:
    if msg.code in REGISTRY:
        raise ValueError(f"duplicate error code {REGISTRY[msg.code]} in {msg}")
    REGISTRY[msg.code] = msg

def _get(code: str) -> ErrorMessage:
    try:
        return REGISTRY[code]
    except KeyError:
        raise KeyError(f"unknown error code: {code}")

#
# --- Registry population
#

# Internal errors (tool defects) - CE0xxx range
_add(ErrorMessage("CE0001", Severity.ERROR,
    "implementation target '{ty}' is not a simple path type; please report this as a bug",
    Category.INTERNAL, "The impl block's self type could not be reduced to a named type."))

# Parse errors - CE1xxx range
_add(ErrorMessage("CE1001", Severity.ERROR,
    "cannot parse {what}: {detail}",
    Category.PARSE, "The annotated item or its directive arguments are outside the supported Rust subset."))

_add(ErrorMessage("CE1002", Severity.ERROR,
    "unterminated {what}",
    Category.PARSE, "A bracket or attribute opened before the annotated item was never closed."))

# Directive argument errors - CE2xxx range
_add(ErrorMessage("CE2001", Severity.ERROR,
    "missing wrapper type name",
    Category.DIRECTIVE, "The first argument (after an optional visibility) must name the wrapper type."))

_add(ErrorMessage("CE2002", Severity.ERROR,
    "expected `name = Type`, found '{text}'",
    Category.DIRECTIVE, "Every argument after the wrapper name maps a generic parameter to a type."))

_add(ErrorMessage("CE2003", Severity.ERROR,
    "visibility must be a string literal, e.g. visibility = \"pub\"",
    Category.DIRECTIVE, "Visibility is given as a quoted literal."))

_add(ErrorMessage("CE2004", Severity.ERROR,
    "unsupported visibility \"{literal}\"; expected one of \"pub\", \"pub(crate)\", \"pub(super)\"",
    Category.DIRECTIVE, "Only the three listed visibility literals are accepted."))

_add(ErrorMessage("CE2005", Severity.ERROR,
    "generic parameter '{name}' is mapped more than once",
    Category.DIRECTIVE, "Each generic parameter may appear once in the mapping."))

_add(ErrorMessage("CE2006", Severity.ERROR,
    "visibility must come before the wrapper name",
    Category.DIRECTIVE, "Write visibility = \"...\" as the first argument."))

_add(ErrorMessage("CE2007", Severity.ERROR,
    "expected a type for generic parameter '{name}', found a literal",
    Category.DIRECTIVE, "Mapped values are type expressions, not literals."))

# Expansion errors - CE3xxx range
_add(ErrorMessage("CE3001", Severity.ERROR,
    "{construct} are currently unsupported by {directive}",
    Category.EXPAND, "This impl item cannot be forwarded; the other items are still generated."))

_add(ErrorMessage("CE3002", Severity.ERROR,
    "lifetime parameter '{name}' cannot be specialized into a wrapper type",
    Category.EXPAND, "Wrappers cannot expose borrowed, lifetime-bound state."))

_add(ErrorMessage("CE3003", Severity.ERROR,
    "only struct, enum, fn, impl are supported; {directive} cannot be applied to '{kind}'",
    Category.EXPAND, "The directive was placed on an item kind it does not transform."))

_add(ErrorMessage("CE3004", Severity.ERROR,
    "no mapping for generic parameter(s) {names} of '{item}'",
    Category.EXPAND, "Unmapped parameters are emitted as an invalid placeholder type."))

_add(ErrorMessage("CE3005", Severity.ERROR,
    "a free function cannot take '{receiver}'",
    Category.EXPAND, "Only methods inside impl blocks have receivers."))

# Warnings
_add(ErrorMessage("CW0001", Severity.WARNING,
    "no items annotated with #[{directive}(...)]",
    Category.GENERAL, "The input was copied through unchanged."))

_add(ErrorMessage("CW0002", Severity.WARNING,
    "mapping for '{name}' does not match any generic parameter of '{item}'",
    Category.DIRECTIVE, "The mapped parameter is ignored."))
