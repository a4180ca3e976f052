"""Shared parse exception handling for the pipeline and CLI."""
from __future__ import annotations

from typing import Optional

from lark import UnexpectedInput

from statewrap.internals.report import Reporter, Span


def handle_parse_exception(exc: Exception, reporter: Reporter, what: str,
                           fallback: Optional[Span] = None) -> bool:
    """Handle a parse exception by emitting diagnostics through the reporter.

    Args:
        exc: The exception to handle.
        reporter: Reporter for error/warning collection.
        what: What was being parsed, e.g. "annotated item".
        fallback: Span used when lark cannot place the error (end of input).

    Returns:
        True if the exception was handled, False otherwise.
    """
    from statewrap.internals import errors as er
    from statewrap.internals.parser import improve_parse_error

    if isinstance(exc, UnexpectedInput):
        line = getattr(exc, "line", -1)
        col = getattr(exc, "column", -1)
        span = Span(line, col, line, col + 1) if line and line > 0 else fallback
        er.emit(reporter, er.ERR.CE1001, span, what=what, detail=improve_parse_error(exc))
        return True

    return False
