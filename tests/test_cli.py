from pathlib import Path

import pytest

from statewrap.compiler import cli

SOURCE = """\
#[py_state_machine(StringBox, T = String)]
pub struct Box<T> {
    value: T,
}
"""


@pytest.fixture
def source_file(tmp_path: Path) -> Path:
    path = tmp_path / "lib.rs"
    path.write_text(SOURCE, encoding="utf-8")
    return path


def test_build_arg_parser_defaults() -> None:
    args = cli.build_arg_parser().parse_args(["lib.rs"])

    assert args.source == "lib.rs"
    assert args.directive == "py_state_machine"
    assert args.class_attr == "pyo3::pyclass"
    assert args.methods_attr == "pyo3::pymethods"
    assert args.no_deref is False
    assert args.allow_unresolved is False
    assert args.check is False
    assert args.out is None


def test_expands_to_stdout(source_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main([str(source_file)]) == 0

    captured = capsys.readouterr()
    assert "inner: Box<String>," in captured.out
    assert "py_state_machine" not in captured.out
    assert captured.err == ""


def test_writes_output_file(source_file: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    out = tmp_path / "expanded.rs"

    assert cli.main([str(source_file), "-o", str(out), "--no-deref"]) == 0

    text = out.read_text(encoding="utf-8")
    assert "struct StringBox {" in text
    assert "Deref" not in text
    assert capsys.readouterr().out == ""


def test_check_only_reports(source_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main([str(source_file), "--check"]) == 0

    assert capsys.readouterr().out == ""


def test_warning_exit_code(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "plain.rs"
    path.write_text("struct Plain;\n", encoding="utf-8")

    assert cli.main([str(path)]) == 1

    captured = capsys.readouterr()
    assert captured.out == "struct Plain;\n"
    assert "warning [CW0001]" in captured.err


def test_error_exit_code(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "pair.rs"
    path.write_text("#[py_state_machine(PairU8, A = u8)]\nstruct Pair<A, B>(A, B);\n", encoding="utf-8")

    assert cli.main([str(path)]) == 2
    assert "error [CE3004]" in capsys.readouterr().err

    assert cli.main([str(path), "--allow-unresolved"]) == 0


def test_directive_and_attribute_options(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "lib.rs"
    path.write_text("#[typestate(W, T = u8)]\nstruct S<T>(T);\n", encoding="utf-8")

    assert cli.main([str(path), "--directive", "typestate", "--class-attr", "", "--no-deref"]) == 0

    out = capsys.readouterr().out
    assert "\n\nstruct W {" in out
    assert "pyclass" not in out


def test_missing_source_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main([str(tmp_path / "missing.rs")]) == 2
    assert "cannot read" in capsys.readouterr().err


def test_source_is_required(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main([]) == 2
    assert "source file required" in capsys.readouterr().err


def test_version_banner(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main(["--version"]) == 0
    assert "statewrap" in capsys.readouterr().err


def test_relative_paths_resolve_from_statewrap_cwd(
    source_file: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch,
    capsys: pytest.CaptureFixture[str],
) -> None:
    monkeypatch.setenv("STATEWRAP_CWD", str(tmp_path))

    assert cli.get_effective_cwd() == tmp_path
    assert cli.main(["lib.rs", "-o", "out.rs"]) == 0
    assert (tmp_path / "out.rs").exists()


def test_verbose_traces_each_item(source_file: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert cli.main([str(source_file), "--verbose", "--check"]) == 0

    err = capsys.readouterr().err
    assert "Expanding lib.rs" in err
    assert "expanding struct Box -> StringBox" in err
