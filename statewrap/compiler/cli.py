"""CLI entry point and argument parsing."""
from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from statewrap.internals.version import print_banner


def get_effective_cwd() -> Path:
    """Directory that relative source and output paths resolve from.

    The STATEWRAP_CWD environment variable overrides os.getcwd(), for wrapper
    scripts (build.rs helpers, editor integrations) that run from elsewhere.
    """
    statewrap_cwd = os.environ.get('STATEWRAP_CWD')
    if statewrap_cwd:
        return Path(statewrap_cwd)
    return Path.cwd()


def _resolve(path: str) -> Path:
    p = Path(path)
    if not p.is_absolute():
        p = get_effective_cwd() / p
    return p.resolve()


def build_arg_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="statewrap",
        description="Generate concrete pyo3 wrappers for typestate Rust types",
    )
    ap.add_argument("source", nargs='?', help="Path to the Rust source file (.rs)")
    ap.add_argument("--version", action="store_true", help="Show version and exit")
    ap.add_argument("-o", "--out", metavar="OUT",
                    help="Write the expanded source here (default: stdout)")
    ap.add_argument("--directive", metavar="NAME", default="py_state_machine",
                    help="Attribute name that marks items to expand (default: %(default)s)")
    ap.add_argument("--class-attr", metavar="ATTR", default="pyo3::pyclass",
                    help="Attribute put on wrapper structs; empty to omit (default: %(default)s)")
    ap.add_argument("--methods-attr", metavar="ATTR", default="pyo3::pymethods",
                    help="Attribute put on inherent wrapper impls; empty to omit (default: %(default)s)")
    ap.add_argument("--no-deref", action="store_true",
                    help="Do not generate Deref/DerefMut from the wrapper to its inner value")
    ap.add_argument("--allow-unresolved", action="store_true",
                    help="Do not report unmapped generic parameters (the placeholder type is still emitted)")
    ap.add_argument("--check", action="store_true",
                    help="Only report diagnostics; do not write the expanded source")
    ap.add_argument("--dump-parse", action="store_true", help="Print raw Lark trees")
    ap.add_argument("--dump-ast", action="store_true", help="Print parsed items")
    ap.add_argument("-v", "--verbose", action="store_true",
                    help="Print the banner and trace each expanded declaration")
    return ap


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        0 when clean, 1 with warnings only, 2 with errors.
    """
    args = build_arg_parser().parse_args(argv)

    if args.version or args.verbose:
        print_banner()
    if args.version:
        return 0

    if not args.source:
        print("error: source file required", file=sys.stderr)
        return 2

    from statewrap.compiler.pipeline import expand_source
    from statewrap.expand.options import ExpandOptions
    from statewrap.internals.report import Reporter

    src_path = _resolve(args.source)
    try:
        src = src_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        print(f"error: cannot read {src_path}: {e}", file=sys.stderr)
        return 2

    options = ExpandOptions(
        directive=args.directive,
        class_attribute=args.class_attr,
        methods_attribute=args.methods_attr,
        deref=not args.no_deref,
        allow_unresolved=args.allow_unresolved,
        verbose=args.verbose,
    )
    reporter = Reporter(source=src, filename=str(src_path))
    if args.verbose:
        print(f"Expanding {src_path.name}", file=sys.stderr)

    expanded = expand_source(src, reporter, options, dump_parse=args.dump_parse, dump_ast=args.dump_ast)
    reporter.print()

    if not args.check:
        if args.out:
            out_path = _resolve(args.out)
            try:
                out_path.write_text(expanded, encoding="utf-8")
            except OSError as e:
                print(f"error: cannot write {out_path}: {e}", file=sys.stderr)
                return 2
        else:
            sys.stdout.write(expanded)

    return reporter.exit_code()


if __name__ == "__main__":
    raise SystemExit(main())
