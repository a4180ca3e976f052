"""Single-file expansion orchestration."""
from __future__ import annotations

import re
import sys
from typing import List, Optional

from lark import UnexpectedInput

from statewrap.compiler.scanner import AnnotatedItem, DirectiveAttr, ScanError, find_annotated_items
from statewrap.expand.context import compile_error_text
from statewrap.expand.directive import parse_directive
from statewrap.expand.dispatch import check_item_kind, expand_item, report_expansion_error
from statewrap.expand.exceptions import ExpansionError
from statewrap.expand.options import ExpandOptions
from statewrap.internals import errors as er
from statewrap.internals.parse_errors import handle_parse_exception
from statewrap.internals.parser import StateWrapParser, blank_prefix, improve_parse_error
from statewrap.internals.report import Reporter

_NOT_NEWLINE = re.compile(r"[^\n]")


def _mask(src: str, attrs: List[DirectiveAttr]) -> str:
    """Blank out directive attributes, keeping every offset and line number."""
    for a in attrs:
        src = src[:a.attr_start] + _NOT_NEWLINE.sub(" ", src[a.attr_start:a.attr_end]) + src[a.attr_end:]
    return src


def _removal_range(src: str, a: DirectiveAttr) -> tuple[int, int]:
    """Text range to drop for a directive attribute: its whole line when the
    line holds nothing else, otherwise the attribute and the blanks after it."""
    line_start = src.rfind("\n", 0, a.attr_start) + 1
    line_end = src.find("\n", a.attr_end)
    if line_end < 0:
        line_end = len(src)
    if not src[line_start:a.attr_start].strip() and not src[a.attr_end:line_end].strip():
        return line_start, min(line_end + 1, len(src))
    end = a.attr_end
    while end < len(src) and src[end] in " \t":
        end += 1
    return a.attr_start, end


def _indentation(src: str, offset: int) -> str:
    line_start = src.rfind("\n", 0, offset) + 1
    prefix = src[line_start:offset]
    return prefix if not prefix.strip() else prefix[:len(prefix) - len(prefix.lstrip())]


def _indent(text: str, indent: str) -> str:
    return "\n".join(f"{indent}{line}" if line else line for line in text.splitlines())


def expand_annotated(parser: StateWrapParser, src: str, item: AnnotatedItem,
                     reporter: Reporter, options: ExpandOptions, dump_ast: bool = False) -> List[str]:
    """Generated text for every directive on one annotated item."""
    masked = _mask(src, list(item.directives))
    out: List[str] = []
    parsed = None
    for d in item.directives:
        stage = "directive arguments"
        try:
            args = parse_directive(parser.parse_directive_args(src, d.args_start, d.args_end), d.span)
            check_item_kind(item.kind, item.kind_span, options.directive)
            if parsed is None:
                stage = f"annotated {item.kind}"
                parsed = parser.parse_item(masked, item.item_start, item.item_end)
                if dump_ast:
                    print(parsed, file=sys.stderr)
            out.append(expand_item(parsed, args, reporter, options))
        except ExpansionError as e:
            out.append(report_expansion_error(reporter, e))
        except UnexpectedInput as e:
            handle_parse_exception(e, reporter, stage, fallback=d.span)
            out.append(compile_error_text("CE1001", er.format_message(
                "CE1001", what=stage, detail=improve_parse_error(e))))
    return out


def expand_source(src: str, reporter: Reporter, options: Optional[ExpandOptions] = None,
                  dump_parse: bool = False, dump_ast: bool = False) -> str:
    """Expand every annotated item of a Rust source file.

    Each original item is kept (minus its directive attributes) and followed
    by the generated declarations, indented like the item. Diagnostics go to
    `reporter`; the returned text is always complete.
    """
    options = options or ExpandOptions()
    parser = StateWrapParser(dump_parse=dump_parse)

    # A shebang line is not Rust tokens.
    lex_src = src
    if src.startswith("#!") and not src.startswith("#!["):
        first_nl = src.find("\n")
        lex_src = blank_prefix(src, first_nl if first_nl >= 0 else len(src))

    try:
        items = find_annotated_items(parser.lex(lex_src), options.directive)
    except UnexpectedInput as e:
        handle_parse_exception(e, reporter, "source file")
        return src
    except ScanError as e:
        er.emit(reporter, er.ERR.CE1002, e.span, what=e.what)
        return src

    if not items:
        er.emit(reporter, er.ERR.CW0001, None, directive=options.directive)
        return src

    pieces: List[str] = []
    pos = 0
    for item in items:
        generated = expand_annotated(parser, src, item, reporter, options, dump_ast)
        for d in item.directives:
            start, end = _removal_range(src, d)
            pieces.append(src[pos:start])
            pos = end
        pieces.append(src[pos:item.item_end])
        pos = item.item_end
        indent = _indentation(src, item.directives[0].attr_start)
        for text in generated:
            pieces.append("\n\n" + _indent(text, indent))
    pieces.append(src[pos:])
    return "".join(pieces)
