"""Command-line front end tests."""

from pathlib import Path

import pytest

import run

PROGRAM = Path(__file__).resolve().parents[1] / "programs" / "fib.uca"


def test_run_fib_with_dump(capsys) -> None:
    assert run.main([str(PROGRAM), "--cycles", "400", "--dump"]) == 0

    out = capsys.readouterr().out
    assert out.startswith("cycles=400 ")
    assert "IX=0D" in out
    assert "  [0C] = 90" in out


def test_run_writes_listing_and_hex(tmp_path, capsys) -> None:
    listing = tmp_path / "fib.lst"
    hex_out = tmp_path / "fib.hex"

    assert run.main([str(PROGRAM), "--cycles", "0", "--listing", str(listing), "--hex-out", str(hex_out)]) == 0

    assert "Second pass assembler listing" in listing.read_text(encoding="utf-8")
    assert hex_out.read_text(encoding="ascii").startswith(" D00 EF8 E10")
    assert capsys.readouterr().out.startswith("cycles=0 PC=00")


def test_run_hex_image_with_trace(tmp_path, capsys) -> None:
    image = tmp_path / "prog.hex"
    image.write_text(" D05 E10 B02" + " 000" * 253 + "\n", encoding="ascii")

    assert run.main([str(image), "--cycles", "5", "--trace", "3"]) == 0

    lines = capsys.readouterr().out.splitlines()
    assert lines[0].startswith("cycles=5 ")
    assert len(lines) == 4
    assert lines[1].startswith("cyc=00002 ")


def test_run_reports_syntax_errors(tmp_path, capsys) -> None:
    source = tmp_path / "bad.uca"
    source.write_text("LDA 10\n", encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        run.main([str(source)])

    assert excinfo.value.code == 1
    err = capsys.readouterr().err
    assert "reg operand required" in err
    assert "1 syntax error(s)" in err


def test_run_rejects_missing_source(tmp_path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        run.main([str(tmp_path / "missing.uca")])

    assert excinfo.value.code == 2


def test_run_writes_first_pass_listing_on_syntax_error(tmp_path, capsys) -> None:
    source = tmp_path / "bad.uca"
    source.write_text("LDI 05\nLDA 10\n", encoding="utf-8")
    listing = tmp_path / "bad.lst"

    with pytest.raises(SystemExit) as excinfo:
        run.main([str(source), "--listing", str(listing)])

    assert excinfo.value.code == 1
    lines = listing.read_text(encoding="utf-8").splitlines()
    assert lines[0] == " ---- Source file: bad.uca. First pass assembler listing. ----"
    assert lines[2].startswith("   1:   00  D05")
    assert "The source line is ignored." in lines[3]
    assert lines[4] == "   2:\t\t\tLDA 10"
    capsys.readouterr()
