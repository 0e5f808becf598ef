import io
from pathlib import Path

import pytest

from lox.cli import EXIT_DATA_ERROR, EXIT_NO_INPUT, main


#writes a script into the temp dir and returns its path as a string
def write_script(tmp_path: Path, text: str) -> str:
    script = tmp_path / "script.lox"
    script.write_text(text)
    return str(script)


def test_runs_script(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = write_script(tmp_path, 'var greeting = "hi";\nprint greeting + "!";\n')
    assert main([path]) == 0
    assert capsys.readouterr().out == 'Message: [print] "hi!"\n'


#runtime errors are printed with their location and give a data-error status
def test_script_with_runtime_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = write_script(tmp_path, 'print "a" + 1;\nprint "still runs";\n')
    assert main([path]) == EXIT_DATA_ERROR
    out = capsys.readouterr().out.splitlines()
    assert out == [
        "Diagnostic: [0:6 0:13] Operands must be two numbers or two strings",
        "Message: Operands must be two numbers or two strings",
        'Message: [print] "still runs"',
    ]


def test_script_with_parse_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = write_script(tmp_path, "print 1\n")
    assert main([path]) == EXIT_DATA_ERROR
    out = capsys.readouterr().out
    assert "Expect ';' after value" in out
    assert "Message: [interpreter] not interpreting due to parsing errors" in out


def test_missing_script(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main([str(tmp_path / "nope.lox")]) == EXIT_NO_INPUT
    assert "cannot read" in capsys.readouterr().err


#more than one script is a usage error
def test_too_many_arguments(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as info:
        main(["one.lox", "two.lox"])
    assert info.value.code == 2
    assert "usage: lox" in capsys.readouterr().err


def test_token_and_ast_dumps(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = write_script(tmp_path, "print 1 + 2;")
    assert main(["--tokens", "--ast", path]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out == [
        "Message: [token]: PRINT print",
        "Message: [token]: NUMBER 1",
        "Message: [token]: PLUS +",
        "Message: [token]: NUMBER 2",
        "Message: [token]: SEMICOLON ;",
        "Message: [token]: EOF ",
        "Message: [ast] (print (+ 1 2))",
        "Message: [print] 3",
    ]


def test_trace_flag(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = write_script(tmp_path, "var a = 1;")
    assert main(["--trace", path]) == 0
    assert "[trace] (var a = 1)" in capsys.readouterr().out


#the prompt keeps globals between lines and stops at a blank line
def test_repl_session(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    lines = "fun add(a, b) { return a + b; }\nvar x = add(1, 2);\nprint x;\n\nprint 99;\n"
    monkeypatch.setattr("sys.stdin", io.StringIO(lines))
    assert main([]) == 0
    out = capsys.readouterr().out
    assert "Message: [print] 3" in out
    assert "99" not in out
    assert out.rstrip().endswith("done")


#an error on one line does not poison the next
def test_repl_recovers_after_error(monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO("print missing;\nvar ok = 1;\nprint ok;\n"))
    assert main([]) == 0
    out = capsys.readouterr().out
    assert "Undefined variable 'missing'" in out
    assert "Message: [print] 1" in out
