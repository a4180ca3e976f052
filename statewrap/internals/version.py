from __future__ import annotations
import sys, platform, datetime
from importlib.metadata import version as _pkg_version, PackageNotFoundError

def _get_versions() -> dict[str, str]:
    # Project version comes from the package (installed metadata or pyproject.toml)
    from statewrap import __version__ as app_ver

    # lark (best-effort; don't crash if missing)
    try:
        lark_ver = _pkg_version("lark")
    except PackageNotFoundError:
        lark_ver = "unknown"

    return {
        "app": app_ver,
        "python": platform.python_version(),
        "lark": lark_ver,
    }

def print_banner(stream=None) -> None:
    stream = stream or sys.stderr
    v = _get_versions()
    today = datetime.date.today().isoformat()

    # Only use ANSI styling on an interactive terminal
    use_ansi = getattr(stream, "isatty", lambda: False)()

    if use_ansi:
        BOLD, DIM, RESET = "\x1b[1m", "\x1b[2m", "\x1b[0m"
    else:
        BOLD, DIM, RESET = "", "", ""

    print(
        f"{BOLD}statewrap typestate wrapper generator{RESET} • {v['app']}\n"
        f"{DIM}Python {v['python']} • lark {v['lark']} • {today}{RESET}",
        file=stream,
    )
