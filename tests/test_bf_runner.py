import io
import logging

import pytest

import bf_runner
from bf_runner import HELLO_WORLD, run, main
from stepper import Stepper, MissingOpeningBracket


def test_run_collects_output():
    sink = io.BytesIO()
    steps = run(Stepper(HELLO_WORLD), sink)
    assert sink.getvalue() == b"Hello World!\n"
    assert steps > len(HELLO_WORLD)


def test_run_counts_steps():
    assert run(Stepper("+[-]"), io.BytesIO()) == 4


def test_run_propagates_errors():
    with pytest.raises(MissingOpeningBracket):
        run(Stepper("+]"), io.BytesIO())


def test_main_default_program(capsys):
    assert main([]) == 0
    assert capsys.readouterr().out == "Hello World!\n"


def test_main_runs_file(tmp_path, capsys):
    path = tmp_path / "a.bf"
    path.write_text("++++++++[>++++++++<-]>+. print A", encoding="utf-8")
    assert main([str(path)]) == 0
    assert capsys.readouterr().out == "A"


def test_main_reads_stdin(tmp_path, monkeypatch, capsys):
    path = tmp_path / "echo.bf"
    path.write_text(",.,.", encoding="utf-8")
    monkeypatch.setattr("sys.stdin", io.TextIOWrapper(io.BytesIO(b"ok")))
    assert main([str(path)]) == 0
    assert capsys.readouterr().out == "ok"


def test_main_input_exhausted(tmp_path, monkeypatch, capsys):
    path = tmp_path / "read.bf"
    path.write_text(",", encoding="utf-8")
    monkeypatch.setattr("sys.stdin", io.TextIOWrapper(io.BytesIO(b"")))
    assert main([str(path)]) == 1
    assert "input failed at 0" in capsys.readouterr().err


def test_main_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "nope.bf")]) == 1
    assert "cannot read" in capsys.readouterr().err


def test_main_reports_bracket_error(tmp_path, capsys):
    path = tmp_path / "bad.bf"
    path.write_text("[", encoding="utf-8")
    assert main([str(path)]) == 1
    assert "missing closing bracket for '[' at 0" in capsys.readouterr().err


def test_main_tape_size(tmp_path, capsys):
    path = tmp_path / "wrap.bf"
    # with two cells, '>>' returns to cell 0
    path.write_text("+>>+" + "+" * 63 + ".", encoding="utf-8")
    assert main(["--tape-size", "2", str(path)]) == 0
    assert capsys.readouterr().out == "A"


def test_main_rejects_bad_tape_size(capsys):
    with pytest.raises(SystemExit):
        main(["--tape-size", "0"])
    assert "must be positive" in capsys.readouterr().err


def test_main_interactive(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.TextIOWrapper(io.BytesIO(b"run\nexit\n")))
    assert main(["-i"]) == 0
    assert "Hello World!" in capsys.readouterr().out


def test_load_program(tmp_path):
    path = tmp_path / "p.bf"
    path.write_text("+-é", encoding="utf-8")
    assert bf_runner.load_program(str(path)) == "+-é"


def test_main_interactive_shares_stdin(tmp_path, monkeypatch, capsys):
    path = tmp_path / "echo.bf"
    path.write_text(",.", encoding="utf-8")
    monkeypatch.setattr("sys.stdin", io.TextIOWrapper(io.BytesIO(b"run\nX")))
    assert main(["-i", str(path)]) == 0
    out = capsys.readouterr().out
    assert "X" in out
    assert "input failed" not in out
    assert "not recognised" not in out


@pytest.fixture
def restore_log_level():
    root = logging.getLogger()
    level = root.level
    yield
    root.setLevel(level)


def test_main_verbose_logs_debug(tmp_path, caplog, restore_log_level):
    path = tmp_path / "skip.bf"
    path.write_text("[]", encoding="utf-8")
    assert main(["-v", str(path)]) == 0
    assert any(r.levelno == logging.DEBUG and r.name == "stepper"
               and "skipping loop 0..1" in r.getMessage() for r in caplog.records)


def test_main_quiet_by_default(tmp_path, caplog, restore_log_level):
    path = tmp_path / "skip.bf"
    path.write_text("[]", encoding="utf-8")
    assert main([str(path)]) == 0
    assert not [r for r in caplog.records if r.levelno == logging.DEBUG]
