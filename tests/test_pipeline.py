import io
from pathlib import Path

import pytest

from qdefmake.errors import ManifestOpenError, SourceOpenError
from qdefmake.pipeline import run
from qdefmake.utils.config import RunConfig

FOO_BLOCK = b"/*QUAKED monster_foo (1 0 0) (-16 -16 -24) (16 16 40) AMBUSH\nA foo.\n*/\n"


def _write_mod(root: Path) -> None:
    (root / "progs.src").write_text("progs.dat\nfoo.qc\nbar.qc // comment\n", encoding="utf-8")
    (root / "foo.qc").write_bytes(b"void() foo_think;\n" + FOO_BLOCK + b"void() monster_foo = {};\n")
    (root / "bar.qc").write_bytes(b"/* not an entity */\nvoid() bar = {};\n")


def test_scenario_one_block(tmp_path: Path):
    _write_mod(tmp_path)
    output = tmp_path / "out.def"
    out = io.StringIO()
    report = run(RunConfig(source_dir=str(tmp_path), output_name=str(output)), out=out)
    assert output.read_bytes() == FOO_BLOCK
    assert report.definitions == 1
    assert report.files == [f"{tmp_path}/foo.qc", f"{tmp_path}/bar.qc"]
    assert "1 QUAKED definitions found" in out.getvalue()


def test_backslash_source_dir_is_normalized(tmp_path: Path):
    _write_mod(tmp_path)
    output = tmp_path / "out.def"
    source_dir = str(tmp_path).replace("/", "\\")
    report = run(RunConfig(source_dir=source_dir, output_name=str(output)), out=io.StringIO())
    assert all("\\" not in path for path in report.files)
    assert report.files[0] == f"{tmp_path}/foo.qc"


def test_blocks_concatenated_in_manifest_order(tmp_path: Path):
    (tmp_path / "progs.src").write_text("../progs.dat\nb.qc\na.qc\n", encoding="utf-8")
    (tmp_path / "a.qc").write_bytes(b"/*QUAKED a */\n")
    (tmp_path / "b.qc").write_bytes(b"/*QUAKED b1 */\nx\n/*QUAKED b2\n*/\n")
    output = tmp_path / "out.def"
    report = run(RunConfig(source_dir=str(tmp_path), output_name=str(output)), out=io.StringIO())
    assert output.read_bytes() == b"/*QUAKED b1 */\n/*QUAKED b2\n*/\n/*QUAKED a */\n"
    assert report.definitions == 3


def test_block_state_resets_per_file(tmp_path: Path):
    (tmp_path / "progs.src").write_text("progs.dat\nopen.qc\nnext.qc\n", encoding="utf-8")
    (tmp_path / "open.qc").write_bytes(b"/*QUAKED open\nno end\n")
    (tmp_path / "next.qc").write_bytes(b"outside\n*/\n")
    output = tmp_path / "out.def"
    report = run(RunConfig(source_dir=str(tmp_path), output_name=str(output)), out=io.StringIO())
    assert output.read_bytes() == b"/*QUAKED open\nno end\n"
    assert report.unterminated == [f"{tmp_path}/open.qc"]


def test_runs_are_idempotent(tmp_path: Path):
    _write_mod(tmp_path)
    output = tmp_path / "out.def"
    cfg = RunConfig(source_dir=str(tmp_path), output_name=str(output))
    run(cfg, out=io.StringIO())
    first = output.read_bytes()
    run(cfg, out=io.StringIO())
    assert output.read_bytes() == first


def test_verbose_echoes_entries_and_lines(tmp_path: Path):
    _write_mod(tmp_path)
    out = io.StringIO()
    run(RunConfig(source_dir=str(tmp_path), output_name=str(tmp_path / "out.def"), verbose=True), out=out)
    text = out.getvalue()
    assert "foo.qc\n" in text
    assert FOO_BLOCK.decode() in text


def test_missing_manifest_writes_nothing(tmp_path: Path):
    output = tmp_path / "out.def"
    with pytest.raises(ManifestOpenError):
        run(RunConfig(source_dir=str(tmp_path), output_name=str(output)), out=io.StringIO())
    assert not output.exists()


def test_missing_source_is_fatal(tmp_path: Path):
    (tmp_path / "progs.src").write_text("progs.dat\nfoo.qc\nghost.qc\nlater.qc\n", encoding="utf-8")
    (tmp_path / "foo.qc").write_bytes(b"/*QUAKED foo */\n")
    (tmp_path / "later.qc").write_bytes(b"/*QUAKED later */\n")
    output = tmp_path / "out.def"
    with pytest.raises(SourceOpenError) as info:
        run(RunConfig(source_dir=str(tmp_path), output_name=str(output)), out=io.StringIO())
    assert info.value.path == f"{tmp_path}/ghost.qc"
    assert b"later" not in output.read_bytes()
