"""Exceptions raised while expanding an annotated declaration.

Each exception carries the catalog code and message arguments of the
diagnostic it turns into, plus the span it is anchored at. They are caught
at the declaration boundary (statewrap.expand.dispatch) and reported
through statewrap.internals.errors.
"""
from __future__ import annotations
from typing import Any, Dict, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from statewrap.internals.report import Span


class ExpansionError(Exception):
    """Base class. Subclasses fix `code`; `params` fill the catalog message."""
    code = "CE0001"

    def __init__(self, span: Optional['Span'] = None, code: Optional[str] = None, **params: Any):
        if code is not None:
            self.code = code
        self.span = span
        self.params: Dict[str, Any] = params
        super().__init__(self.message)

    @property
    def message(self) -> str:
        from statewrap.internals.errors import format_message
        return format_message(self.code, **self.params)


class DirectiveSyntaxError(ExpansionError):
    """Exception raised when the directive's argument list is malformed (CE2001-CE2007)."""
    code = "CE2001"


class UnsupportedConstructError(ExpansionError):
    """Exception raised for an impl item that cannot be forwarded, such as a macro invocation."""
    code = "CE3001"


class UnsupportedParameterError(ExpansionError):
    """Exception raised when a lifetime parameter has to be specialized."""
    code = "CE3002"


class UnsupportedItemError(ExpansionError):
    """Exception raised when the directive annotates something other than struct, enum, fn or impl."""
    code = "CE3003"


class UnresolvedParameterError(ExpansionError):
    """Exception raised when generic parameters of a declaration have no mapping."""
    code = "CE3004"


class ReceiverOnFreeFunctionError(ExpansionError):
    """Exception raised when a free function declares a `self` parameter."""
    code = "CE3005"


class InternalInconsistencyError(ExpansionError):
    """Exception raised when an impl block targets something other than a simple path type."""
    code = "CE0001"
